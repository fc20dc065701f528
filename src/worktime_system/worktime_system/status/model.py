from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, StatusKind
from ..core.exceptions import ValidationError

_STATUS_RE = re.compile(r"^(USER|TEAM|ADMIN)_(INPUT|EDITED|IN_PROCESS|FINAL|DELETED)(?:_(\d+))?$")

_VERSIONED_KINDS = frozenset({StatusKind.EDITED, StatusKind.DELETED})


@dataclass(frozen=True)
class EntryStatus:
    """Audit status tag of an entry: who touched it last and how.

    String form is ``{ROLE}_{KIND}`` with an optional ``_<minutes since epoch>``
    suffix on edited/deleted tags, e.g. ``USER_INPUT``, ``ADMIN_EDITED_29000000``,
    ``USER_IN_PROCESS``, ``ADMIN_FINAL``.
    """

    role: Role
    kind: StatusKind
    timestamp: Optional[int] = None

    def __post_init__(self):
        if self.timestamp is not None and self.kind not in _VERSIONED_KINDS:
            raise ValidationError(f"{self.role.value}_{self.kind.value} cannot carry a timestamp")

    def __str__(self) -> str:
        base = f"{self.role.value}_{self.kind.value}"
        if self.timestamp is None:
            return base
        return f"{base}_{self.timestamp}"

    @classmethod
    def parse(cls, value: str) -> "EntryStatus":
        m = _STATUS_RE.match((value or "").strip())
        if not m:
            raise ValidationError(f"Unknown status tag: {value!r}")
        role, kind, ts = m.groups()
        return cls(Role(role), StatusKind(kind), int(ts) if ts else None)

    @classmethod
    def parse_or_none(cls, value: Optional[str]) -> Optional["EntryStatus"]:
        if value is None:
            return None
        try:
            return cls.parse(value)
        except ValidationError:
            return None

    @classmethod
    def input(cls, role: Role) -> "EntryStatus":
        return cls(role, StatusKind.INPUT)

    @classmethod
    def edited(cls, role: Role, timestamp: Optional[int] = None) -> "EntryStatus":
        return cls(role, StatusKind.EDITED, timestamp)

    @classmethod
    def in_process(cls, role: Role) -> "EntryStatus":
        return cls(role, StatusKind.IN_PROCESS)

    @classmethod
    def final(cls, role: Role) -> "EntryStatus":
        return cls(role, StatusKind.FINAL)

    @classmethod
    def deleted(cls, role: Role, timestamp: Optional[int] = None) -> "EntryStatus":
        return cls(role, StatusKind.DELETED, timestamp)

    @property
    def is_final(self) -> bool:
        return self.kind == StatusKind.FINAL

    @property
    def is_in_process(self) -> bool:
        return self.kind == StatusKind.IN_PROCESS

    @property
    def is_admin_authored(self) -> bool:
        """Explicit admin edit: ADMIN_INPUT, ADMIN_EDITED_* or ADMIN_DELETED_*."""
        return self.role == Role.ADMIN and self.kind in (StatusKind.INPUT, StatusKind.EDITED, StatusKind.DELETED)


USER_INPUT = EntryStatus.input(Role.USER)
ADMIN_INPUT = EntryStatus.input(Role.ADMIN)
USER_IN_PROCESS = EntryStatus.in_process(Role.USER)
ADMIN_FINAL = EntryStatus.final(Role.ADMIN)
TEAM_FINAL = EntryStatus.final(Role.TEAM)

