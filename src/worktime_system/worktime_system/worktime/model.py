from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

from ..status.model import EntryStatus
from .time_off import is_plain_code, is_short_day_code


@dataclass(frozen=True)
class WorkEntry:
    """Domain entity: one employee's attendance record for one calendar date.

    Immutable: every transform returns a new value via ``with_changes``.
    ``status`` is only ``None`` on raw records loaded with an unknown tag,
    until the status cleanup pass normalizes them.
    """

    user_id: int
    work_date: date
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    worked_minutes: int = 0
    overtime_minutes: int = 0
    temp_stop_minutes: int = 0
    temp_stop_count: int = 0
    lunch_deducted: bool = False
    time_off_type: Optional[str] = None
    status: Optional[EntryStatus] = None

    @property
    def key(self) -> tuple[int, date]:
        return self.user_id, self.work_date

    @property
    def has_times(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def is_special_day(self) -> bool:
        return is_plain_code(self.time_off_type) and self.has_times

    @property
    def has_short_day(self) -> bool:
        return is_short_day_code(self.time_off_type)

    @property
    def is_tombstone(self) -> bool:
        return (
            self.start_time is None
            and self.end_time is None
            and self.time_off_type is None
            and self.worked_minutes == 0
            and self.overtime_minutes == 0
            and self.temp_stop_minutes == 0
            and self.temp_stop_count == 0
        )

    def with_changes(self, **changes) -> "WorkEntry":
        return replace(self, **changes)

    def reset_work_fields(self) -> "WorkEntry":
        return replace(
            self,
            worked_minutes=0,
            overtime_minutes=0,
            temp_stop_minutes=0,
            temp_stop_count=0,
            lunch_deducted=False,
        )

    def to_tombstone(self, status: EntryStatus) -> "WorkEntry":
        return replace(
            self.reset_work_fields(),
            start_time=None,
            end_time=None,
            time_off_type=None,
            status=status,
        )


def entry_sort_key(entry: WorkEntry) -> tuple[date, int]:
    """Canonical ordering of a consolidated set: date, then user."""
    return entry.work_date, entry.user_id
