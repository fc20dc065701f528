from __future__ import annotations

from typing import Optional

from ...worktime.model import WorkEntry
from .base import MergeRule


class AdminAuthoredRule(MergeRule):
    """Explicit admin input/edit/deletion overrides the employee's record."""

    name = "admin_authored"

    def applies(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> bool:
        return admin is not None and admin.status is not None and admin.status.is_admin_authored

    def resolve(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> WorkEntry:
        return admin
