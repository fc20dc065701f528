from __future__ import annotations

import io
import json
import logging

from src.worktime_system.worktime_system.logging_config import configure_logging, get_logger


def test_records_are_json_lines_with_extra_fields():
    stream = io.StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)

    get_logger("tests").info("short_day_marked", extra={"user_id": 3, "code": "ZS-2"})

    payload = json.loads(stream.getvalue().strip())
    assert payload["message"] == "short_day_marked"
    assert payload["logger"] == "worktime_system.tests"
    assert payload["user_id"] == 3
    assert payload["code"] == "ZS-2"


def test_configure_logging_is_idempotent():
    stream = io.StringIO()
    configure_logging(stream=stream)
    configure_logging(stream=stream)

    assert len(logging.getLogger("worktime_system").handlers) == 1
