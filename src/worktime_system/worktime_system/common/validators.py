from __future__ import annotations

from datetime import date

from ..core.constants import MAX_CONSOLIDATION_YEAR, MIN_CONSOLIDATION_YEAR
from ..core.exceptions import ValidationError


def require_valid_period(year: int, month: int) -> tuple[int, int]:
    try:
        year, month = int(year), int(month)
    except (TypeError, ValueError):
        raise ValidationError("Year and month must be integers")

    if not MIN_CONSOLIDATION_YEAR <= year <= MAX_CONSOLIDATION_YEAR:
        raise ValidationError(f"Invalid year: {year}")
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    return year, month


def require_not_future_month(year: int, month: int, *, today: date) -> None:
    if (year, month) > (today.year, today.month):
        raise ValidationError(f"Cannot consolidate future month {year}-{month:02d}")
