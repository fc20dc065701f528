from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of the actor touching an entry."""

    USER = "USER"
    TEAM = "TEAM"
    ADMIN = "ADMIN"


class StatusKind(str, Enum):
    """Provenance class of an entry status tag."""

    INPUT = "INPUT"
    EDITED = "EDITED"
    IN_PROCESS = "IN_PROCESS"
    FINAL = "FINAL"
    DELETED = "DELETED"


class OperationKind(str, Enum):
    """Operations that go through the status lifecycle."""

    CREATE = "CREATE"
    EDIT = "EDIT"
    START_DAY = "START_DAY"
    DELETE = "DELETE"
    FINALIZE = "FINALIZE"
    CONSOLIDATE = "CONSOLIDATE"
    ADD_NATIONAL_HOLIDAY = "ADD_NATIONAL_HOLIDAY"


class TimeOffCode(str, Enum):
    """Plain time-off codes stored on an entry."""

    NATIONAL_HOLIDAY = "SN"
    VACATION = "CO"
    MEDICAL_LEAVE = "CM"
    WEEKEND_WORK = "W"
    SPECIAL_EVENT = "CE"
    DELEGATION = "D"
    UNPAID_LEAVE = "CN"
    RECOVERY_LEAVE = "CR"
