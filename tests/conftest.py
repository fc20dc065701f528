from __future__ import annotations

from datetime import date, datetime

import pytest

from src.worktime_system.worktime_system.logging_config import reset_logging


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 20, 9, 30, 0)


@pytest.fixture
def today() -> date:
    # Consolidation runs in the tests target March 2024.
    return date(2024, 4, 15)


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()
