from __future__ import annotations

from typing import Optional

from ...worktime.model import WorkEntry
from .base import MergeRule


class AdminOnlyRule(MergeRule):
    """Key known only to the admin base: pass through unchanged."""

    name = "admin_only"

    def applies(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> bool:
        return user is None and admin is not None

    def resolve(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> WorkEntry:
        return admin
