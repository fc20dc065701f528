"""Time-off code registry.

Single place that knows which codes exist, which of them accept work hours
(``SN:5``) and how the synthesized short-day code ``ZS-<N>`` is formatted.
"""
from __future__ import annotations

import re
from typing import Optional

from ..core.enums import TimeOffCode
from ..core.exceptions import ValidationError

SPECIAL_DAY_CODES = frozenset(
    {
        TimeOffCode.NATIONAL_HOLIDAY.value,
        TimeOffCode.VACATION.value,
        TimeOffCode.MEDICAL_LEAVE.value,
        TimeOffCode.WEEKEND_WORK.value,
        TimeOffCode.SPECIAL_EVENT.value,
    }
)

PLAIN_ONLY_CODES = frozenset(
    {
        TimeOffCode.DELEGATION.value,
        TimeOffCode.UNPAID_LEAVE.value,
        TimeOffCode.RECOVERY_LEAVE.value,
    }
)

PLAIN_CODES = SPECIAL_DAY_CODES | PLAIN_ONLY_CODES

SHORT_DAY_PREFIX = "ZS-"
_SHORT_DAY_RE = re.compile(r"^ZS-(\d+)$")


def is_plain_code(code: Optional[str]) -> bool:
    return code is not None and code.upper() in PLAIN_CODES


def is_special_day_code(code: Optional[str]) -> bool:
    return code is not None and code.upper() in SPECIAL_DAY_CODES


def is_short_day_code(code: Optional[str]) -> bool:
    return code is not None and _SHORT_DAY_RE.match(code) is not None


def short_day_code(missing_hours: int) -> str:
    if missing_hours < 1:
        raise ValidationError("Short day must miss at least one hour")
    return f"{SHORT_DAY_PREFIX}{missing_hours}"


def normalize_code(code: Optional[str]) -> Optional[str]:
    """Upper-case a plain code, keep ZS codes, reject anything else."""

    if code is None or not code.strip():
        return None
    value = code.strip().upper()
    if value in PLAIN_CODES or is_short_day_code(value):
        return value
    raise ValidationError(f"Unknown time-off type: {code!r}")
