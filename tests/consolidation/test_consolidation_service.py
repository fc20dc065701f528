from __future__ import annotations

import threading
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from src.worktime_system.worktime_system.consolidation.service import ConsolidationService
from src.worktime_system.worktime_system.core.enums import Role
from src.worktime_system.worktime_system.core.exceptions import StoreUnavailableError, ValidationError
from src.worktime_system.worktime_system.status.model import (
    ADMIN_FINAL,
    ADMIN_INPUT,
    USER_IN_PROCESS,
    USER_INPUT,
    EntryStatus,
)
from src.worktime_system.worktime_system.users.model import Employee
from src.worktime_system.worktime_system.worktime.calculator.standard_calculator import StandardWorktimeCalculator
from src.worktime_system.worktime_system.worktime.model import WorkEntry
from src.worktime_system.worktime_system.worktime.readonly_repository import ReadOnlyEntryRepository


class InMemoryEntryRepository:
    def __init__(self, roster, stores=None, *, failing=(), unavailable=False):
        self.roster = list(roster)
        self.stores: dict[str, list[WorkEntry]] = {k: list(v) for k, v in (stores or {}).items()}
        self.failing = set(failing)
        self.unavailable = unavailable
        self.loads: list[str] = []
        self.saves: list[tuple[str, list[WorkEntry], Role]] = []
        self._lock = threading.Lock()

    def load_entries(self, owner: str, year: int, month: int):
        with self._lock:
            self.loads.append(owner)
        if owner in self.failing:
            raise IOError(f"cannot read {owner}")
        if self.unavailable and owner == "admin":
            raise StoreUnavailableError("database is down")
        return [e for e in self.stores.get(owner, []) if (e.work_date.year, e.work_date.month) == (year, month)]

    def save_entries(self, owner: str, entries, year: int, month: int, acting_role: Role) -> None:
        self.saves.append((owner, list(entries), acting_role))
        others = [e for e in self.stores.get(owner, []) if (e.work_date.year, e.work_date.month) != (year, month)]
        self.stores[owner] = others + list(entries)

    def load_roster(self):
        return list(self.roster)


class BlockingEntryRepository(InMemoryEntryRepository):
    def __init__(self, *args, blocked: str, **kwargs):
        super().__init__(*args, **kwargs)
        self.blocked = blocked
        self.release = threading.Event()

    def load_entries(self, owner: str, year: int, month: int):
        if owner == self.blocked:
            self.release.wait(5)
        return super().load_entries(owner, year, month)


ROSTER = [
    Employee(user_id=1, username="alice", full_name="Alice"),
    Employee(user_id=2, username="bob", full_name="Bob"),
    Employee(user_id=99, username="admin", full_name="Admin", role=Role.ADMIN),
]


def _e(
    user_id: int,
    day: int,
    status,
    *,
    start: Optional[int] = 8,
    minutes: int = 510,
    worked: int = 480,
    code=None,
) -> WorkEntry:
    start_time = datetime(2024, 3, day, start) if start is not None else None
    end_time = start_time + timedelta(minutes=minutes) if start_time else None
    return WorkEntry(
        user_id=user_id,
        work_date=date(2024, 3, day),
        start_time=start_time,
        end_time=end_time,
        worked_minutes=worked,
        lunch_deducted=worked > 360,
        time_off_type=code,
        status=status,
    )


def _stores():
    return {
        "alice": [
            _e(1, 4, USER_INPUT),
            _e(1, 5, USER_INPUT, minutes=420, worked=390),
            WorkEntry(user_id=1, work_date=date(2024, 3, 6), start_time=datetime(2024, 3, 6, 8), status=USER_IN_PROCESS),
        ],
        "bob": [_e(2, 4, USER_INPUT, start=9, worked=450)],
        "admin": [
            _e(1, 7, ADMIN_INPUT, start=None, worked=0, code="CO"),
            _e(2, 4, ADMIN_FINAL, worked=420, minutes=450),
        ],
    }


def _service(repo, **kwargs) -> ConsolidationService:
    return ConsolidationService(repo, StandardWorktimeCalculator(), **kwargs)


def test_consolidation_merges_sorts_and_writes(today):
    repo = InMemoryEntryRepository(ROSTER, _stores())
    result = _service(repo).consolidate(2024, 3, today=today)

    assert result.success is True
    assert result.written is True
    assert result.error_count == 0
    assert result.employees_processed == 2
    assert result.total_entries == 4
    assert result.total_merge_operations == 4

    owner, saved, role = repo.saves[0]
    assert (owner, role) == ("admin", Role.ADMIN)
    assert [(e.work_date.day, e.user_id) for e in saved] == [(4, 1), (4, 2), (5, 1), (7, 1)]
    assert len({e.key for e in saved}) == len(saved)

    by_key = {(e.user_id, e.work_date.day): e for e in saved}
    assert by_key[(2, 4)].status == ADMIN_FINAL
    assert by_key[(2, 4)].worked_minutes == 420
    assert by_key[(1, 5)].time_off_type == "ZS-2"
    assert by_key[(1, 7)].time_off_type == "CO"
    assert (1, 6) not in by_key


def test_second_run_does_not_write(today):
    repo = InMemoryEntryRepository(ROSTER, _stores())
    service = _service(repo)

    first = service.consolidate(2024, 3, today=today)
    second = service.consolidate(2024, 3, today=today)

    assert first.written is True
    assert second.success is True
    assert second.written is False
    assert len(repo.saves) == 1


def test_missing_statuses_are_normalized_once(today):
    stores = {"alice": [_e(1, 4, None)], "admin": []}
    repo = InMemoryEntryRepository(ROSTER[:1], stores)
    service = _service(repo)

    service.consolidate(2024, 3, today=today)
    again = service.consolidate(2024, 3, today=today)

    assert repo.saves[0][1][0].status == USER_INPUT
    assert again.written is False


def test_short_day_uses_roster_schedule(today):
    roster = [Employee(user_id=3, username="carol", full_name="Carol", schedule_hours=6)]
    repo = InMemoryEntryRepository(roster, {"carol": [_e(3, 4, USER_INPUT, minutes=360, worked=360)]})

    _service(repo).consolidate(2024, 3, today=today)

    assert repo.saves[0][1][0].time_off_type is None


def test_failing_employee_is_skipped_and_base_kept(today):
    repo = InMemoryEntryRepository(ROSTER, _stores(), failing={"bob"})
    result = _service(repo).consolidate(2024, 3, today=today)

    assert result.success is True
    assert result.has_warnings is True
    assert result.error_count == 1
    assert result.employees_processed == 1
    assert "bob" in result.warnings[0]

    outcomes = {o.username: o for o in result.per_employee}
    assert outcomes["bob"].entries_processed == 0
    assert outcomes["bob"].failed
    assert outcomes["alice"].entries_processed == 3

    saved = repo.saves[0][1]
    assert {(e.user_id, e.work_date.day) for e in saved} == {(1, 4), (1, 5), (1, 7), (2, 4)}
    assert result.to_dict()["has_warnings"] is True


def test_slow_employee_times_out(today):
    repo = BlockingEntryRepository(ROSTER, _stores(), blocked="bob")
    try:
        result = _service(repo, max_workers=2, employee_timeout=0.1).consolidate(2024, 3, today=today)
    finally:
        repo.release.set()

    assert result.success is True
    assert result.error_count == 1
    assert "timed out" in result.warnings[0]


def test_future_month_is_rejected_before_io(today):
    repo = InMemoryEntryRepository(ROSTER, _stores())

    with pytest.raises(ValidationError):
        _service(repo).consolidate(2024, 5, today=today)
    assert repo.loads == []


@pytest.mark.parametrize("year, month", [(1999, 1), (2101, 1), (2024, 0), (2024, 13), ("x", 3)])
def test_invalid_period_is_rejected(year, month, today):
    with pytest.raises(ValidationError):
        _service(InMemoryEntryRepository(ROSTER)).consolidate(year, month, today=today)


def test_unavailable_admin_store_fails_without_write(today):
    repo = InMemoryEntryRepository(ROSTER, _stores(), unavailable=True)
    result = _service(repo).consolidate(2024, 3, today=today)

    assert result.success is False
    assert result.written is False
    assert repo.saves == []
    assert "unavailable" in result.message


def test_empty_roster_does_not_wipe_admin_set(today):
    repo = InMemoryEntryRepository([ROSTER[2]], _stores())
    result = _service(repo).consolidate(2024, 3, today=today)

    assert result.success is False
    assert repo.saves == []


def test_read_only_store_reports_failed_write(today):
    inner = InMemoryEntryRepository(ROSTER, _stores())
    result = _service(ReadOnlyEntryRepository(inner)).consolidate(2024, 3, today=today)

    assert result.success is False
    assert result.written is False
    assert inner.saves == []


def test_read_only_store_is_fine_when_up_to_date(today):
    inner = InMemoryEntryRepository(ROSTER, _stores())
    _service(inner).consolidate(2024, 3, today=today)

    result = _service(ReadOnlyEntryRepository(inner)).consolidate(2024, 3, today=today)

    assert result.success is True
    assert result.written is False


def test_admin_edit_survives_consolidation(today):
    stores = _stores()
    admin_edit = _e(1, 4, EntryStatus.edited(Role.ADMIN, 100), worked=300, minutes=300)
    stores["admin"].append(admin_edit)
    repo = InMemoryEntryRepository(ROSTER, stores)

    _service(repo).consolidate(2024, 3, today=today)

    saved = {(e.user_id, e.work_date.day): e for e in repo.saves[0][1]}
    assert saved[(1, 4)].status == admin_edit.status
    assert saved[(1, 4)].worked_minutes == 300
    assert saved[(1, 4)].time_off_type == "ZS-3"


def test_hung_employee_does_not_block_the_queue(today):
    repo = BlockingEntryRepository(ROSTER, _stores(), blocked="alice")
    try:
        result = _service(repo, max_workers=1, employee_timeout=0.2).consolidate(2024, 3, today=today)
    finally:
        repo.release.set()

    assert result.success is True
    assert result.error_count == 1
    assert result.warnings == ["alice: timed out after 0.2s"]

    outcomes = {o.username: o for o in result.per_employee}
    assert outcomes["bob"].failed is False
    assert outcomes["bob"].entries_processed == 1
    assert "bob" in repo.loads


def test_skipped_employee_is_reported_even_without_changes(today):
    repo = BlockingEntryRepository(ROSTER, _stores(), blocked="alice")
    try:
        result = _service(repo, max_workers=1, employee_timeout=0.2).consolidate(2024, 3, today=today)
    finally:
        repo.release.set()

    assert result.written is False
    assert "up to date" not in result.message
    assert "1 employees skipped" in result.message
