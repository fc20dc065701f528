from __future__ import annotations

from datetime import date

import pytest

from src.worktime_system.worktime_system.common.datetime_utils import epoch_minutes
from src.worktime_system.worktime_system.core.enums import OperationKind, Role
from src.worktime_system.worktime_system.core.exceptions import FinalizedRecordError
from src.worktime_system.worktime_system.status.cleanup import cleanup_statuses
from src.worktime_system.worktime_system.status.engine import assign_status, assign_statuses, require_status
from src.worktime_system.worktime_system.status.model import (
    ADMIN_FINAL,
    ADMIN_INPUT,
    TEAM_FINAL,
    USER_IN_PROCESS,
    USER_INPUT,
    EntryStatus,
)
from src.worktime_system.worktime_system.worktime.model import WorkEntry


def _entry(status=None) -> WorkEntry:
    return WorkEntry(user_id=7, work_date=date(2024, 3, 4), status=status)


def test_final_entry_rejects_every_operation(fixed_now):
    entry = _entry(ADMIN_FINAL)

    for op in OperationKind:
        result = assign_status(entry, Role.ADMIN, op, now=fixed_now)
        assert result.success is False
        assert result.entry is entry
        assert "ADMIN_FINAL" in result.message


def test_open_day_is_protected_from_other_roles(fixed_now):
    result = assign_status(_entry(USER_IN_PROCESS), Role.ADMIN, OperationKind.EDIT, now=fixed_now)

    assert result.success is False
    assert result.new_status == USER_IN_PROCESS


def test_owner_can_edit_open_day(fixed_now):
    result = assign_status(_entry(USER_IN_PROCESS), Role.USER, OperationKind.EDIT, now=fixed_now)

    assert result.success is True
    assert result.new_status == EntryStatus.edited(Role.USER, epoch_minutes(fixed_now))
    assert result.entry.status == result.new_status


def test_consolidate_keeps_merge_decision(fixed_now):
    edited = EntryStatus.edited(Role.USER, 123)
    result = assign_status(_entry(edited), Role.ADMIN, OperationKind.CONSOLIDATE, now=fixed_now)

    assert result.success is True
    assert result.new_status == edited


@pytest.mark.parametrize(
    "operation, role, expected",
    [
        (OperationKind.START_DAY, Role.USER, "USER_IN_PROCESS"),
        (OperationKind.FINALIZE, Role.TEAM, "TEAM_FINAL"),
        (OperationKind.FINALIZE, Role.ADMIN, "ADMIN_FINAL"),
    ],
)
def test_fixed_transitions(operation, role, expected, fixed_now):
    result = assign_status(_entry(USER_INPUT), role, operation, now=fixed_now)

    assert result.success is True
    assert str(result.new_status) == expected


def test_delete_stamps_timestamp(fixed_now):
    result = assign_status(_entry(USER_INPUT), Role.ADMIN, OperationKind.DELETE, now=fixed_now)

    assert str(result.new_status) == f"ADMIN_DELETED_{epoch_minutes(fixed_now)}"


def test_user_cannot_finalize(fixed_now):
    result = assign_status(_entry(USER_INPUT), Role.USER, OperationKind.FINALIZE, now=fixed_now)

    assert result.success is False
    assert result.new_status == USER_INPUT


def test_creation_yields_input_and_holidays_are_admin_input(fixed_now):
    assert assign_status(_entry(), Role.TEAM, OperationKind.CREATE, now=fixed_now).new_status == EntryStatus.input(Role.TEAM)
    assert assign_status(_entry(), Role.TEAM, OperationKind.ADD_NATIONAL_HOLIDAY, now=fixed_now).new_status == ADMIN_INPUT


def test_require_status_raises_on_final(fixed_now):
    with pytest.raises(FinalizedRecordError):
        require_status(_entry(TEAM_FINAL), Role.ADMIN, OperationKind.EDIT, now=fixed_now)


def test_batch_reports_failures_per_entry(fixed_now):
    results = assign_statuses(
        [_entry(USER_INPUT), _entry(ADMIN_FINAL), _entry(USER_IN_PROCESS)],
        Role.ADMIN,
        OperationKind.EDIT,
        now=fixed_now,
    )

    assert [r.success for r in results] == [True, False, False]


def test_cleanup_converts_missing_statuses():
    cleaned, converted = cleanup_statuses([_entry(), _entry(ADMIN_FINAL), _entry()])

    assert converted == 2
    assert [e.status for e in cleaned] == [USER_INPUT, ADMIN_FINAL, USER_INPUT]
