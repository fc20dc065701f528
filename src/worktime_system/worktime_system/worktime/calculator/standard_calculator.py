from __future__ import annotations

import math
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.constants import HOUR_MINUTES
from ...logging_config import get_logger
from ..model import WorkEntry
from ..time_off import short_day_code
from .base import WorkPolicy, WorktimeCalculator

logger = get_logger("worktime.calculator")


def adjusted_minutes(entry: WorkEntry) -> int:
    """Minutes compared against the schedule for short-day detection.

    Lunch is already deducted by the recalculation, so this is simply the
    regular plus overtime minutes.
    """
    return int(entry.worked_minutes) + int(entry.overtime_minutes)


class StandardWorktimeCalculator(WorktimeCalculator):
    """Standard rule: (end - start) - temporary stops - lunch, split at the schedule."""

    def __init__(self, policy: WorkPolicy | None = None):
        self._policy = policy or WorkPolicy()

    @property
    def policy(self) -> WorkPolicy:
        return self._policy

    def schedule_minutes(self, schedule_hours: Optional[int]) -> int:
        hours = int(schedule_hours or 0)
        if hours <= 0:
            hours = self._policy.default_schedule_hours
        return hours * HOUR_MINUTES

    def _net_minutes(self, entry: WorkEntry) -> int:
        elapsed = minutes_between(entry.start_time, entry.end_time)
        return max(0, elapsed - int(entry.temp_stop_minutes or 0))

    def recalc_regular_day(self, entry: WorkEntry, schedule_hours: Optional[int]) -> WorkEntry:
        if not entry.has_times:
            return entry.with_changes(worked_minutes=0, overtime_minutes=0, lunch_deducted=False)

        net = self._net_minutes(entry)
        lunch_deducted = net > self._policy.lunch_threshold_minutes
        if lunch_deducted:
            net -= self._policy.lunch_break_minutes

        scheduled = self.schedule_minutes(schedule_hours)
        regular = min(net, scheduled)
        overtime = max(0, net - scheduled)

        logger.debug(
            "regular_day_recalculated",
            extra={
                "user_id": entry.user_id,
                "work_date": entry.work_date.isoformat(),
                "regular": regular,
                "overtime": overtime,
                "lunch": lunch_deducted,
            },
        )
        return entry.with_changes(worked_minutes=regular, overtime_minutes=overtime, lunch_deducted=lunch_deducted)

    def recalc_special_day(self, entry: WorkEntry) -> WorkEntry:
        # Holiday/leave work is paid as overtime, full hours only.
        full_hours = self._net_minutes(entry) // HOUR_MINUTES
        return entry.with_changes(
            worked_minutes=0,
            overtime_minutes=full_hours * HOUR_MINUTES,
            lunch_deducted=False,
        )

    def apply_short_day_rule(self, entry: WorkEntry, schedule_hours: Optional[int]) -> WorkEntry:
        if not entry.has_times:
            return entry

        scheduled = self.schedule_minutes(schedule_hours)
        adjusted = adjusted_minutes(entry)
        current = entry.time_off_type

        if adjusted >= scheduled:
            if entry.has_short_day:
                logger.info(
                    "short_day_cleared",
                    extra={"user_id": entry.user_id, "work_date": entry.work_date.isoformat(), "code": current},
                )
                return entry.with_changes(time_off_type=None)
            return entry

        if current is not None and not entry.has_short_day:
            return entry

        missing_hours = math.ceil((scheduled - adjusted) / HOUR_MINUTES)
        code = short_day_code(missing_hours)
        if code == current:
            return entry

        logger.info(
            "short_day_marked",
            extra={
                "user_id": entry.user_id,
                "work_date": entry.work_date.isoformat(),
                "previous": current,
                "code": code,
            },
        )
        return entry.with_changes(time_off_type=code)
