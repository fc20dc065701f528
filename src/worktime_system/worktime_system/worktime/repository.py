from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import Role
from ..users.model import Employee
from .model import WorkEntry


class EntryRepository(Protocol):
    """Month-scoped worktime store.

    ``owner`` is ``"admin"`` for the consolidated set, otherwise an
    employee's username.
    """

    def load_entries(self, owner: str, year: int, month: int) -> Sequence[WorkEntry]:
        raise NotImplementedError

    def save_entries(
        self,
        owner: str,
        entries: Sequence[WorkEntry],
        year: int,
        month: int,
        acting_role: Role,
    ) -> None:
        """Replace the owner's month with ``entries``."""

        raise NotImplementedError

    def load_roster(self) -> Sequence[Employee]:
        raise NotImplementedError
