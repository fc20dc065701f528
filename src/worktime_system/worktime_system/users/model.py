from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_SCHEDULE_HOURS
from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Roster member. ``username`` is the owner key of the employee's store."""

    user_id: int
    username: str
    full_name: str
    role: Role = Role.USER
    schedule_hours: int = DEFAULT_SCHEDULE_HOURS
    is_active: bool = True

    @property
    def is_consolidated(self) -> bool:
        return self.is_active and self.role != Role.ADMIN
