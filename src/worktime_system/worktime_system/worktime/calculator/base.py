from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.constants import (
    DEFAULT_LUNCH_BREAK_MINUTES,
    DEFAULT_LUNCH_THRESHOLD_MINUTES,
    DEFAULT_SCHEDULE_HOURS,
)
from ..model import WorkEntry


@dataclass(frozen=True)
class WorkPolicy:
    """Policy constants used by derived-field calculations."""

    lunch_threshold_minutes: int = DEFAULT_LUNCH_THRESHOLD_MINUTES
    lunch_break_minutes: int = DEFAULT_LUNCH_BREAK_MINUTES
    default_schedule_hours: int = DEFAULT_SCHEDULE_HOURS

    @classmethod
    def from_settings(cls, settings) -> "WorkPolicy":
        return cls(
            lunch_threshold_minutes=int(getattr(settings, "LUNCH_THRESHOLD_MINUTES", DEFAULT_LUNCH_THRESHOLD_MINUTES)),
            lunch_break_minutes=int(getattr(settings, "LUNCH_BREAK_MINUTES", DEFAULT_LUNCH_BREAK_MINUTES)),
            default_schedule_hours=int(getattr(settings, "DEFAULT_SCHEDULE_HOURS", DEFAULT_SCHEDULE_HOURS)),
        )


class WorktimeCalculator(ABC):
    """Calculator interface for derived worktime fields (Strategy Pattern).

    Every mutation path, single-entry edits and bulk consolidation alike,
    goes through ``recalculate`` and ``apply_short_day_rule``.
    """

    @abstractmethod
    def recalc_regular_day(self, entry: WorkEntry, schedule_hours: Optional[int]) -> WorkEntry:
        raise NotImplementedError

    @abstractmethod
    def recalc_special_day(self, entry: WorkEntry) -> WorkEntry:
        raise NotImplementedError

    @abstractmethod
    def apply_short_day_rule(self, entry: WorkEntry, schedule_hours: Optional[int]) -> WorkEntry:
        raise NotImplementedError

    def recalculate(self, entry: WorkEntry, schedule_hours: Optional[int]) -> WorkEntry:
        if entry.is_special_day:
            return self.recalc_special_day(entry)
        return self.recalc_regular_day(entry, schedule_hours)

    def refresh(self, entry: WorkEntry, schedule_hours: Optional[int]) -> WorkEntry:
        """Recalculate worked fields, then re-derive the short-day marker."""
        return self.apply_short_day_rule(self.recalculate(entry, schedule_hours), schedule_hours)
