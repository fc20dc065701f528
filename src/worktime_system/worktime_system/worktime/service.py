from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import ADMIN_OWNER, DEFAULT_DAY_START_HOUR, HOUR_MINUTES
from ..core.enums import OperationKind, Role, TimeOffCode
from ..core.exceptions import ValidationError
from ..logging_config import get_logger
from ..status.engine import require_status
from ..status.model import EntryStatus
from ..users.model import Employee
from .calculator.base import WorktimeCalculator
from .model import WorkEntry, entry_sort_key
from .repository import EntryRepository
from .time_off import is_short_day_code, is_special_day_code, normalize_code

logger = get_logger("worktime.service")

_REMOVE_VALUES = frozenset({"", "BLANK", "REMOVE"})
_HOURS_RE = re.compile(r"^\d{1,2}$")
_CODE_HOURS_RE = re.compile(r"^([A-Z]+):(\d{1,2})$")

MAX_DAY_HOURS = 24


def _parse_hours(raw: str) -> int:
    hours = int(raw)
    if not 1 <= hours <= MAX_DAY_HOURS:
        raise ValidationError(f"Hours must be between 1 and {MAX_DAY_HOURS}: {raw}")
    return hours


class WorktimeEditService:
    """Single-entry edits for employees and the administrator.

    Every edit recalculates derived fields and goes through the status
    lifecycle; finalized entries raise FinalizedRecordError.
    """

    def __init__(self, repository: EntryRepository, calculator: WorktimeCalculator):
        self._repo = repository
        self._calculator = calculator

    # ----- reads -----

    def list_entries(self, year: int, month: int, *, owner: str = ADMIN_OWNER) -> list[WorkEntry]:
        return sorted(self._repo.load_entries(owner, year, month), key=entry_sort_key)

    # ----- employee day flow -----

    def start_day(self, user_id: int, at: datetime | None = None, *, role: Role = Role.USER) -> WorkEntry:
        at = at or now_local()
        employee = self._employee(user_id)

        def mutate(entry: WorkEntry) -> WorkEntry:
            if entry.start_time is not None and entry.end_time is None:
                raise ValidationError("Work day already started")
            return entry.with_changes(start_time=at, end_time=None)

        return self._edit(employee, at.date(), role, OperationKind.START_DAY, mutate, now=at)

    def update_start_time(
        self, user_id: int, work_date: date, start: datetime, *, role: Role = Role.USER, now: datetime | None = None
    ) -> WorkEntry:
        self._check_same_day(work_date, start)
        employee = self._employee(user_id)
        return self._edit(
            employee, work_date, role, OperationKind.EDIT, lambda e: e.with_changes(start_time=start), now=now
        )

    def update_end_time(
        self, user_id: int, work_date: date, end: datetime, *, role: Role = Role.USER, now: datetime | None = None
    ) -> WorkEntry:
        employee = self._employee(user_id)

        def mutate(entry: WorkEntry) -> WorkEntry:
            if entry.start_time is not None and end <= entry.start_time:
                raise ValidationError("End time must be after start time")
            return entry.with_changes(end_time=end)

        return self._edit(employee, work_date, role, OperationKind.EDIT, mutate, now=now, close_day=True)

    def update_temporary_stop(
        self,
        user_id: int,
        work_date: date,
        minutes: int,
        *,
        count: Optional[int] = None,
        role: Role = Role.USER,
        now: datetime | None = None,
    ) -> WorkEntry:
        if int(minutes) < 0:
            raise ValidationError("Temporary stop minutes must not be negative")
        employee = self._employee(user_id)

        def mutate(entry: WorkEntry) -> WorkEntry:
            stops = count if count is not None else (max(entry.temp_stop_count, 1) if minutes else 0)
            return entry.with_changes(temp_stop_minutes=int(minutes), temp_stop_count=int(stops))

        return self._edit(employee, work_date, role, OperationKind.EDIT, mutate, now=now)

    # ----- admin operations -----

    def admin_update(self, user_id: int, work_date: date, value: str, *, now: datetime | None = None) -> WorkEntry:
        """Apply an admin cell value.

        Accepted values: ``""``/``BLANK``/``REMOVE`` (tombstone), ``H`` work
        hours from 08:00, a plain time-off code, or ``CODE:H`` for codes that
        accept work hours (``SN:5``).
        """

        raw = (value or "").strip().upper()
        if raw in _REMOVE_VALUES:
            return self.reset_entry(user_id, work_date, now=now)

        employee = self._employee(user_id)
        day_start = datetime.combine(work_date, time(hour=DEFAULT_DAY_START_HOUR))

        if _HOURS_RE.match(raw):
            hours = _parse_hours(raw)
            worked = hours * HOUR_MINUTES
            policy = getattr(self._calculator, "policy", None)
            if policy is not None and worked > policy.lunch_threshold_minutes:
                worked += policy.lunch_break_minutes
            end = day_start + timedelta(minutes=worked)
            return self._edit(
                employee,
                work_date,
                Role.ADMIN,
                OperationKind.EDIT,
                lambda e: e.reset_work_fields().with_changes(start_time=day_start, end_time=end, time_off_type=None),
                now=now,
            )

        m = _CODE_HOURS_RE.match(raw)
        if m:
            code, hours_raw = m.groups()
            if not is_special_day_code(code):
                raise ValidationError(f"{code} does not accept work hours")
            end = day_start + timedelta(hours=_parse_hours(hours_raw))
            return self._edit(
                employee,
                work_date,
                Role.ADMIN,
                self._code_operation(code),
                lambda e: e.reset_work_fields().with_changes(start_time=day_start, end_time=end, time_off_type=code),
                now=now,
            )

        if is_short_day_code(raw):
            raise ValidationError("Short day codes are computed and cannot be set directly")

        code = normalize_code(raw)
        return self._edit(
            employee,
            work_date,
            Role.ADMIN,
            self._code_operation(code),
            lambda e: e.reset_work_fields().with_changes(start_time=None, end_time=None, time_off_type=code),
            now=now,
        )

    def reset_entry(
        self, user_id: int, work_date: date, *, role: Role = Role.ADMIN, now: datetime | None = None
    ) -> WorkEntry:
        employee = self._employee(user_id)
        moment = now or now_local()
        owner = self._owner(employee, role)
        entries = list(self._repo.load_entries(owner, work_date.year, work_date.month))
        current = self._find(entries, employee.user_id, work_date)

        stamped = require_status(current, role, OperationKind.DELETE, now=moment)
        tombstone = stamped.to_tombstone(stamped.status)
        self._store(owner, entries, tombstone, role)
        logger.info(
            "entry_reset",
            extra={"owner": owner, "user_id": employee.user_id, "work_date": work_date.isoformat()},
        )
        return tombstone

    def finalize_entry(
        self, user_id: int, work_date: date, *, role: Role = Role.ADMIN, now: datetime | None = None
    ) -> WorkEntry:
        employee = self._employee(user_id)
        if role == Role.USER:
            raise ValidationError("Only admin or team lead can finalize entries")
        return self._edit(employee, work_date, role, OperationKind.FINALIZE, lambda e: e, now=now)

    # ----- internals -----

    @staticmethod
    def _code_operation(code: str) -> OperationKind:
        if code == TimeOffCode.NATIONAL_HOLIDAY.value:
            return OperationKind.ADD_NATIONAL_HOLIDAY
        return OperationKind.EDIT

    @staticmethod
    def _check_same_day(work_date: date, moment: datetime) -> None:
        if moment.date() != work_date:
            raise ValidationError("Time must fall on the entry's date")

    @staticmethod
    def _owner(employee: Employee, role: Role) -> str:
        return ADMIN_OWNER if role != Role.USER else employee.username

    @staticmethod
    def _find(entries: Sequence[WorkEntry], user_id: int, work_date: date) -> WorkEntry:
        for entry in entries:
            if entry.user_id == user_id and entry.work_date == work_date:
                return entry
        return WorkEntry(user_id=user_id, work_date=work_date)

    def _employee(self, user_id: int) -> Employee:
        for employee in self._repo.load_roster():
            if employee.user_id == int(user_id):
                return employee
        raise ValidationError(f"Unknown employee: {user_id}")

    def _store(self, owner: str, entries: list[WorkEntry], updated: WorkEntry, role: Role) -> None:
        kept = [e for e in entries if e.key != updated.key]
        kept.append(updated)
        kept.sort(key=entry_sort_key)
        self._repo.save_entries(owner, kept, updated.work_date.year, updated.work_date.month, role)

    def _edit(
        self,
        employee: Employee,
        work_date: date,
        role: Role,
        operation: OperationKind,
        mutate: Callable[[WorkEntry], WorkEntry],
        *,
        now: datetime | None = None,
        close_day: bool = False,
    ) -> WorkEntry:
        owner = self._owner(employee, role)
        entries = list(self._repo.load_entries(owner, work_date.year, work_date.month))
        current = self._find(entries, employee.user_id, work_date)

        if current.status is None and operation == OperationKind.EDIT:
            operation = OperationKind.CREATE
        stamped = require_status(current, role, operation, now=now)

        # Setting the end time closes a day the same role opened.
        if close_day and current.status is not None and current.status.is_in_process:
            stamped = stamped.with_changes(status=EntryStatus.input(role))

        updated = self._calculator.refresh(mutate(stamped), employee.schedule_hours)
        self._store(owner, entries, updated, role)

        logger.info(
            "entry_updated",
            extra={
                "owner": owner,
                "user_id": employee.user_id,
                "work_date": work_date.isoformat(),
                "operation": operation.value,
                "status": str(updated.status),
                "time_off_type": updated.time_off_type,
            },
        )
        return updated
