"""Month consolidation: merge every employee's self-reported worktime into
the administrator's consolidated set.

Run outline: snapshot the admin base once, merge each roster member's month
against their base entries (worker pool, per-employee isolation), sort,
re-derive short-day codes, stamp statuses, and write only when the result
differs from what is stored.
"""
from __future__ import annotations

import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import date
from typing import Iterable, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_not_future_month, require_valid_period
from ..core.constants import ADMIN_OWNER, DEFAULT_CONSOLIDATION_MAX_WORKERS, DEFAULT_EMPLOYEE_TIMEOUT_SECONDS
from ..core.enums import OperationKind, Role
from ..core.exceptions import PerEmployeeProcessingError, StoreUnavailableError, UnsupportedOperationError
from ..logging_config import get_logger
from ..merge.service import MergeOutcome, WorktimeMergeService
from ..status.cleanup import cleanup_statuses
from ..status.engine import assign_statuses
from ..users.model import Employee
from ..worktime.calculator.base import WorktimeCalculator
from ..worktime.model import WorkEntry, entry_sort_key
from ..worktime.repository import EntryRepository
from .model import ConsolidationResult, EmployeeOutcome

logger = get_logger("consolidation.service")

# Upper bound on one wait between deadline checks.
_POLL_SECONDS = 0.05


def _diff_key(entry: WorkEntry) -> tuple:
    return (
        entry.user_id,
        entry.work_date,
        entry.time_off_type,
        entry.worked_minutes,
        str(entry.status) if entry.status else None,
    )


def is_up_to_date(stored: Iterable[WorkEntry], consolidated: Sequence[WorkEntry]) -> bool:
    """Compare on user, date, time-off type, worked minutes and status."""
    stored_keys = [_diff_key(e) for e in sorted(stored, key=entry_sort_key)]
    return stored_keys == [_diff_key(e) for e in consolidated]


class ConsolidationService:
    def __init__(
        self,
        repository: EntryRepository,
        calculator: WorktimeCalculator,
        merge_service: WorktimeMergeService | None = None,
        *,
        max_workers: int = DEFAULT_CONSOLIDATION_MAX_WORKERS,
        employee_timeout: float = DEFAULT_EMPLOYEE_TIMEOUT_SECONDS,
    ):
        self._repo = repository
        self._calculator = calculator
        self._merge = merge_service or WorktimeMergeService()
        self._max_workers = max(1, int(max_workers))
        self._employee_timeout = float(employee_timeout)
        self._lock = threading.Lock()

    def consolidate(self, year: int, month: int, *, today: date | None = None) -> ConsolidationResult:
        year, month = require_valid_period(year, month)
        require_not_future_month(year, month, today=today or now_local().date())

        # One run at a time per process.
        with self._lock:
            logger.info("consolidation_started", extra={"year": year, "month": month})
            result = self._run(year, month)
            logger.info(
                "consolidation_finished",
                extra={
                    "year": year,
                    "month": month,
                    "success": result.success,
                    "written": result.written,
                    "error_count": result.error_count,
                    "total_entries": result.total_entries,
                },
            )
            return result

    def _run(self, year: int, month: int) -> ConsolidationResult:
        try:
            base = list(self._repo.load_entries(ADMIN_OWNER, year, month))
            roster = [e for e in self._repo.load_roster() if e.is_consolidated]
        except StoreUnavailableError as exc:
            logger.error("admin_base_unavailable", extra={"year": year, "month": month, "error": str(exc)})
            return ConsolidationResult.failure(year, month, f"Admin worktime is unavailable: {exc}")

        if not roster:
            return ConsolidationResult.failure(year, month, "No active employees to consolidate")

        base_by_user: dict[int, list[WorkEntry]] = {}
        for entry in base:
            base_by_user.setdefault(entry.user_id, []).append(entry)

        rostered = {e.user_id for e in roster}
        dropped = sum(len(v) for uid, v in base_by_user.items() if uid not in rostered)
        if dropped:
            logger.warning("unrostered_entries_dropped", extra={"year": year, "month": month, "count": dropped})

        merged, outcomes = self._merge_all(roster, base_by_user, year, month)
        consolidated = self._finalize(merged, roster)

        errors = [o for o in outcomes if o.failed]
        warnings = [f"{o.username}: {o.error}" for o in errors]
        processed = len(outcomes) - len(errors)
        merge_ops = sum(o.merge_operations for o in outcomes)

        if is_up_to_date(base, consolidated):
            message = f"Worktime for {year}-{month:02d} is already up to date"
            if errors:
                message = f"No changes written for {year}-{month:02d}; {len(errors)} employees skipped"
            return ConsolidationResult(
                success=True,
                message=message,
                year=year,
                month=month,
                employees_processed=processed,
                total_entries=len(consolidated),
                total_merge_operations=merge_ops,
                error_count=len(errors),
                written=False,
                warnings=warnings,
                per_employee=outcomes,
            )

        try:
            self._repo.save_entries(ADMIN_OWNER, consolidated, year, month, Role.ADMIN)
        except (StoreUnavailableError, UnsupportedOperationError) as exc:
            logger.error("consolidated_write_failed", extra={"year": year, "month": month, "error": str(exc)})
            return ConsolidationResult(
                success=False,
                message=f"Could not write consolidated worktime: {exc}",
                year=year,
                month=month,
                employees_processed=processed,
                total_entries=len(consolidated),
                total_merge_operations=merge_ops,
                error_count=len(errors) + 1,
                written=False,
                warnings=warnings,
                per_employee=outcomes,
            )

        message = f"Consolidated {len(consolidated)} entries for {processed} employees"
        if errors:
            message += f" with {len(errors)} warnings"
        return ConsolidationResult(
            success=True,
            message=message,
            year=year,
            month=month,
            employees_processed=processed,
            total_entries=len(consolidated),
            total_merge_operations=merge_ops,
            error_count=len(errors),
            written=True,
            warnings=warnings,
            per_employee=outcomes,
        )

    def _merge_employee(
        self,
        employee: Employee,
        base: list[WorkEntry],
        year: int,
        month: int,
        started: dict[int, float],
    ) -> MergeOutcome:
        started[employee.user_id] = time.monotonic()
        try:
            user_entries = self._repo.load_entries(employee.username, year, month)
            return self._merge.merge_with_stats(user_entries, base, employee.user_id)
        except Exception as exc:
            raise PerEmployeeProcessingError(employee.username, str(exc) or type(exc).__name__) from exc

    def _next_wait(self, pending: dict[Future, Employee], started: dict[int, float]) -> float:
        now = time.monotonic()
        remaining = [
            started[emp.user_id] + self._employee_timeout - now for emp in pending.values() if emp.user_id in started
        ]
        return max(0.0, min(remaining + [_POLL_SECONDS]))

    def _merge_all(
        self,
        roster: list[Employee],
        base_by_user: dict[int, list[WorkEntry]],
        year: int,
        month: int,
    ) -> tuple[list[WorkEntry], list[EmployeeOutcome]]:
        started: dict[int, float] = {}
        results: dict[int, MergeOutcome] = {}
        errors: dict[int, str] = {}

        def new_executor() -> ThreadPoolExecutor:
            pool = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="consolidate")
            executors.append(pool)
            return pool

        def submit(pool: ThreadPoolExecutor, emp: Employee) -> Future:
            return pool.submit(self._merge_employee, emp, base_by_user.get(emp.user_id, []), year, month, started)

        executors: list[ThreadPoolExecutor] = []
        try:
            executor = new_executor()
            pending: dict[Future, Employee] = {submit(executor, emp): emp for emp in roster}

            while pending:
                done, _ = wait(pending, timeout=self._next_wait(pending, started), return_when=FIRST_COMPLETED)
                for future in done:
                    emp = pending.pop(future)
                    try:
                        results[emp.user_id] = future.result()
                    except PerEmployeeProcessingError as exc:
                        errors[emp.user_id] = str(exc)

                # Each deadline runs from the start of that employee's own load.
                now = time.monotonic()
                timed_out = [
                    f
                    for f, emp in pending.items()
                    if emp.user_id in started and now - started[emp.user_id] >= self._employee_timeout
                ]
                for future in timed_out:
                    emp = pending.pop(future)
                    errors[emp.user_id] = f"timed out after {self._employee_timeout:g}s"

                # A hung load keeps its worker; queued employees move to a fresh pool.
                if timed_out:
                    queued = [f for f in pending if f.cancel()]
                    if queued:
                        executor = new_executor()
                        for future in queued:
                            emp = pending.pop(future)
                            pending[submit(executor, emp)] = emp
        finally:
            for pool in executors:
                pool.shutdown(wait=False, cancel_futures=True)

        merged: list[WorkEntry] = []
        outcomes: list[EmployeeOutcome] = []
        for emp in roster:
            error = errors.get(emp.user_id)
            if error is not None:
                logger.warning(
                    "employee_skipped",
                    extra={"user_id": emp.user_id, "username": emp.username, "error": error},
                )
                # Admin-authored entries for a skipped employee are kept as stored.
                carried, _ = cleanup_statuses(base_by_user.get(emp.user_id, []), source="admin")
                merged.extend(carried)
                outcomes.append(EmployeeOutcome(user_id=emp.user_id, username=emp.username, error=error))
                continue

            outcome = results[emp.user_id]
            merged.extend(outcome.entries)
            outcomes.append(
                EmployeeOutcome(
                    user_id=emp.user_id,
                    username=emp.username,
                    entries_processed=outcome.stats.user_entries,
                    merge_operations=outcome.stats.merge_operations,
                    skipped_in_process=outcome.stats.skipped_in_process,
                )
            )

        return merged, outcomes

    def _finalize(self, merged: list[WorkEntry], roster: list[Employee]) -> list[WorkEntry]:
        schedules = {e.user_id: e.schedule_hours for e in roster}
        ordered = sorted(merged, key=entry_sort_key)

        refreshed = [
            e if e.status is not None and e.status.is_final
            else self._calculator.apply_short_day_rule(e, schedules.get(e.user_id))
            for e in ordered
        ]

        stamped = assign_statuses(refreshed, Role.ADMIN, OperationKind.CONSOLIDATE)
        return [a.entry for a in stamped]
