"""Status lifecycle: decide the audit status of an entry after an operation.

Protection rules (checked first):
- FINAL entries reject every transition.
- IN_PROCESS entries only accept transitions from the role that opened them.

Assignment rules:
- CONSOLIDATE keeps the status the merge decided.
- START_DAY opens the day as ``{role}_IN_PROCESS``.
- DELETE tombstones carry ``{role}_DELETED_<ts>``.
- FINALIZE locks the entry as ``{role}_FINAL`` (admin/team only).
- Creation yields ``{role}_INPUT`` (national holidays are always ADMIN_INPUT).
- Everything else yields ``{role}_EDITED_<ts>``.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import epoch_minutes, now_local
from ..core.enums import OperationKind, Role
from ..core.exceptions import FinalizedRecordError
from ..logging_config import get_logger
from ..worktime.model import WorkEntry
from .model import ADMIN_INPUT, EntryStatus

logger = get_logger("status.engine")


@dataclass(frozen=True)
class StatusAssignment:
    """Outcome of a status transition attempt."""

    success: bool
    original_status: Optional[EntryStatus]
    new_status: Optional[EntryStatus]
    message: str
    entry: WorkEntry


def _protection_reason(current: Optional[EntryStatus], role: Role) -> Optional[str]:
    if current is None:
        return None
    if current.is_final:
        return f"Entry is {current} - finalized entries cannot be changed"
    if current.is_in_process and current.role != role:
        return f"Entry is {current} - the day is still open for {current.role.value}"
    return None


def determine_new_status(
    current: Optional[EntryStatus],
    role: Role,
    operation: OperationKind,
    *,
    now: datetime,
) -> EntryStatus:
    if operation == OperationKind.CONSOLIDATE and current is not None:
        return current
    if operation == OperationKind.START_DAY:
        return EntryStatus.in_process(role)
    if operation == OperationKind.DELETE:
        return EntryStatus.deleted(role, epoch_minutes(now))
    if operation == OperationKind.FINALIZE:
        return EntryStatus.final(role)
    if current is None:
        if operation == OperationKind.ADD_NATIONAL_HOLIDAY:
            return ADMIN_INPUT
        return EntryStatus.input(role)
    return EntryStatus.edited(role, epoch_minutes(now))


def assign_status(
    entry: WorkEntry,
    acting_role: Role,
    operation: OperationKind,
    *,
    now: datetime | None = None,
) -> StatusAssignment:
    current = entry.status
    reason = _protection_reason(current, acting_role)
    if reason:
        logger.info(
            "status_protected",
            extra={"user_id": entry.user_id, "work_date": entry.work_date.isoformat(), "status": str(current)},
        )
        return StatusAssignment(False, current, current, reason, entry)

    if operation == OperationKind.FINALIZE and acting_role == Role.USER:
        return StatusAssignment(False, current, current, "Only admin or team lead can finalize entries", entry)

    new_status = determine_new_status(current, acting_role, operation, now=now or now_local())
    updated = entry if new_status == current else entry.with_changes(status=new_status)

    logger.debug(
        "status_assigned",
        extra={
            "user_id": entry.user_id,
            "work_date": entry.work_date.isoformat(),
            "from_status": str(current) if current else None,
            "to_status": str(new_status),
            "operation": operation.value,
        },
    )
    return StatusAssignment(
        True,
        current,
        new_status,
        f"Status updated for {operation.value} by {acting_role.value}",
        updated,
    )


def require_status(
    entry: WorkEntry,
    acting_role: Role,
    operation: OperationKind,
    *,
    now: datetime | None = None,
) -> WorkEntry:
    """Single-entry variant: raise instead of returning a failed assignment."""

    result = assign_status(entry, acting_role, operation, now=now)
    if not result.success:
        raise FinalizedRecordError(result.message)
    return result.entry


def assign_statuses(
    entries: Iterable[WorkEntry],
    acting_role: Role,
    operation: OperationKind,
    *,
    now: datetime | None = None,
) -> list[StatusAssignment]:
    """Batch variant: failures are reported per entry, never raised."""

    moment = now or now_local()
    return [assign_status(e, acting_role, operation, now=moment) for e in entries]
