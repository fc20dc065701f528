from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..logging_config import get_logger
from ..status.cleanup import cleanup_statuses
from ..worktime.model import WorkEntry
from .factory import MergeRuleFactory

logger = get_logger("merge.service")


@dataclass(frozen=True)
class MergeStats:
    user_entries: int = 0
    admin_entries: int = 0
    skipped_in_process: int = 0
    merge_operations: int = 0
    statuses_converted: int = 0


@dataclass(frozen=True)
class MergeOutcome:
    entries: list[WorkEntry]
    stats: MergeStats


def _index_for_user(entries: Iterable[WorkEntry], user_id: int) -> dict[date, WorkEntry]:
    # Later duplicates of a date replace earlier ones.
    indexed: dict[date, WorkEntry] = {}
    for entry in entries:
        if entry.user_id == user_id:
            indexed[entry.work_date] = entry
    return indexed


class WorktimeMergeService:
    """Reconcile one employee's self-reported month with the admin base."""

    def __init__(self, *, rule_factory: MergeRuleFactory | None = None):
        self._factory = rule_factory or MergeRuleFactory()

    def merge(
        self,
        user_entries: Iterable[WorkEntry],
        admin_entries: Iterable[WorkEntry],
        user_id: int,
    ) -> list[WorkEntry]:
        return self.merge_with_stats(user_entries, admin_entries, user_id).entries

    def merge_with_stats(
        self,
        user_entries: Iterable[WorkEntry],
        admin_entries: Iterable[WorkEntry],
        user_id: int,
    ) -> MergeOutcome:
        user_clean, user_converted = cleanup_statuses(user_entries, source="user")
        admin_clean, admin_converted = cleanup_statuses(admin_entries, source="admin")

        user_by_date = _index_for_user(user_clean, user_id)
        admin_by_date = _index_for_user(admin_clean, user_id)

        skipped = 0
        for work_date in list(user_by_date):
            if user_by_date[work_date].status.is_in_process:
                del user_by_date[work_date]
                skipped += 1

        merged: list[WorkEntry] = []
        for work_date in sorted(set(user_by_date) | set(admin_by_date)):
            user = user_by_date.get(work_date)
            admin = admin_by_date.get(work_date)
            rule = self._factory.for_pair(user=user, admin=admin)
            merged.append(rule.resolve(user=user, admin=admin))

        stats = MergeStats(
            user_entries=len(user_by_date) + skipped,
            admin_entries=len(admin_by_date),
            skipped_in_process=skipped,
            merge_operations=len(merged),
            statuses_converted=user_converted + admin_converted,
        )
        logger.debug(
            "entries_merged",
            extra={
                "user_id": user_id,
                "user_entries": stats.user_entries,
                "admin_entries": stats.admin_entries,
                "skipped_in_process": skipped,
                "merged": len(merged),
            },
        )
        return MergeOutcome(entries=merged, stats=stats)
