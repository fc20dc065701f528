from __future__ import annotations

from typing import Sequence

from ..core.enums import Role
from ..core.exceptions import UnsupportedOperationError
from ..users.model import Employee
from .model import WorkEntry
from .repository import EntryRepository


class ReadOnlyEntryRepository(EntryRepository):
    """Wraps a store for read-only origins: reads delegate, writes are refused."""

    def __init__(self, inner: EntryRepository):
        self._inner = inner

    def load_entries(self, owner: str, year: int, month: int) -> Sequence[WorkEntry]:
        return self._inner.load_entries(owner, year, month)

    def load_roster(self) -> Sequence[Employee]:
        return self._inner.load_roster()

    def save_entries(
        self,
        owner: str,
        entries: Sequence[WorkEntry],
        year: int,
        month: int,
        acting_role: Role,
    ) -> None:
        raise UnsupportedOperationError(f"Store is read-only: cannot write {owner} {year}-{month:02d}")
