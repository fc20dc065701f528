from __future__ import annotations

from typing import Optional

from ...worktime.model import WorkEntry
from .base import MergeRule


def _is_final(entry: Optional[WorkEntry]) -> bool:
    return entry is not None and entry.status is not None and entry.status.is_final


class FinalEntryRule(MergeRule):
    """A finalized record is never replaced; the admin's copy wins a tie."""

    name = "final"

    def applies(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> bool:
        return _is_final(admin) or _is_final(user)

    def resolve(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> WorkEntry:
        return admin if _is_final(admin) else user
