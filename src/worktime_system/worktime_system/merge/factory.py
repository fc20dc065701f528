from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.exceptions import ValidationError
from ..worktime.model import WorkEntry
from .rules.admin_authored_rule import AdminAuthoredRule
from .rules.admin_only_rule import AdminOnlyRule
from .rules.base import MergeRule
from .rules.final_rule import FinalEntryRule
from .rules.user_entry_rule import UserEntryRule


def _default_rules() -> tuple[MergeRule, ...]:
    return (FinalEntryRule(), AdminAuthoredRule(), UserEntryRule(), AdminOnlyRule())


@dataclass
class MergeRuleFactory:
    """Factory Pattern: choose the first merge rule matching a record pair."""

    rules: tuple[MergeRule, ...] = field(default_factory=_default_rules)

    def for_pair(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> MergeRule:
        if user is None and admin is None:
            raise ValidationError("Nothing to merge: both records are missing")
        for rule in self.rules:
            if rule.applies(user=user, admin=admin):
                return rule
        raise ValidationError("No merge rule matched")
