from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...worktime.model import WorkEntry


class MergeRule(ABC):
    """Strategy Pattern: decide which record wins for one (user, date) key."""

    name: str = "base"

    @abstractmethod
    def applies(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> bool:
        raise NotImplementedError

    @abstractmethod
    def resolve(self, *, user: Optional[WorkEntry], admin: Optional[WorkEntry]) -> WorkEntry:
        raise NotImplementedError
