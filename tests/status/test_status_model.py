from __future__ import annotations

import pytest

from src.worktime_system.worktime_system.core.enums import Role, StatusKind
from src.worktime_system.worktime_system.core.exceptions import ValidationError
from src.worktime_system.worktime_system.status.model import ADMIN_FINAL, USER_IN_PROCESS, EntryStatus


@pytest.mark.parametrize(
    "raw, role, kind, ts",
    [
        ("USER_INPUT", Role.USER, StatusKind.INPUT, None),
        ("ADMIN_EDITED_29000000", Role.ADMIN, StatusKind.EDITED, 29000000),
        ("USER_IN_PROCESS", Role.USER, StatusKind.IN_PROCESS, None),
        ("TEAM_FINAL", Role.TEAM, StatusKind.FINAL, None),
        ("USER_DELETED_42", Role.USER, StatusKind.DELETED, 42),
    ],
)
def test_parse_known_tags(raw, role, kind, ts):
    status = EntryStatus.parse(raw)

    assert (status.role, status.kind, status.timestamp) == (role, kind, ts)
    assert str(status) == raw


@pytest.mark.parametrize("raw", ["", "SYSTEM_INPUT", "USER_FINAL_12", "user_input", "ADMIN_EDITED_x"])
def test_unknown_tags_are_rejected(raw):
    with pytest.raises(ValidationError):
        EntryStatus.parse(raw)
    assert EntryStatus.parse_or_none(raw) is None


def test_only_edited_and_deleted_carry_a_timestamp():
    with pytest.raises(ValidationError):
        EntryStatus(Role.ADMIN, StatusKind.FINAL, 5)


def test_admin_authored_classification():
    assert EntryStatus.input(Role.ADMIN).is_admin_authored
    assert EntryStatus.edited(Role.ADMIN, 1).is_admin_authored
    assert EntryStatus.deleted(Role.ADMIN, 1).is_admin_authored
    assert not ADMIN_FINAL.is_admin_authored
    assert not EntryStatus.edited(Role.USER, 1).is_admin_authored
    assert USER_IN_PROCESS.is_in_process
