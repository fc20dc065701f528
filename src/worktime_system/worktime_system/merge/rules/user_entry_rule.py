from __future__ import annotations

from typing import Optional

from ...worktime.model import WorkEntry
from .base import MergeRule


class UserEntryRule(MergeRule):
    """Without an admin edit, the employee's own record is taken as-is."""

    name = "user_entry"

    def applies(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> bool:
        return user is not None

    def resolve(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> WorkEntry:
        return user
