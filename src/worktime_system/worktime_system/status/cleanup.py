from __future__ import annotations

from typing import Iterable

from ..logging_config import get_logger
from ..worktime.model import WorkEntry
from .model import USER_INPUT

logger = get_logger("status.cleanup")


def cleanup_statuses(entries: Iterable[WorkEntry], *, source: str = "") -> tuple[list[WorkEntry], int]:
    """Replace missing/unrecognized status tags with USER_INPUT.

    Returns the cleaned entries and the number of conversions.
    """

    cleaned: list[WorkEntry] = []
    converted = 0
    for entry in entries:
        if entry.status is None:
            entry = entry.with_changes(status=USER_INPUT)
            converted += 1
        cleaned.append(entry)

    if converted:
        logger.info("status_cleanup", extra={"source": source, "converted": converted})
    return cleaned, converted
