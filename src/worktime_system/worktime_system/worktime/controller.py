from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_valid_period
from ..core.exceptions import (
    DomainError,
    FinalizedRecordError,
    StoreUnavailableError,
    UnsupportedOperationError,
    ValidationError,
)
from ..container import Container
from ..logging_config import get_logger
from .model import WorkEntry

logger = get_logger("worktime.controller")

_ERROR_STATUS = (
    (ValidationError, 400),
    (FinalizedRecordError, 409),
    (UnsupportedOperationError, 405),
    (StoreUnavailableError, 503),
)


def entry_to_dict(e: WorkEntry) -> dict:
    return {
        "user_id": e.user_id,
        "date": e.work_date.isoformat(),
        "start_time": e.start_time.isoformat() if e.start_time else None,
        "end_time": e.end_time.isoformat() if e.end_time else None,
        "worked_minutes": e.worked_minutes,
        "overtime_minutes": e.overtime_minutes,
        "temp_stop_minutes": e.temp_stop_minutes,
        "temp_stop_count": e.temp_stop_count,
        "lunch_deducted": e.lunch_deducted,
        "time_off_type": e.time_off_type,
        "status": str(e.status) if e.status else None,
    }


def _error(exc: DomainError):
    code = next((status for kind, status in _ERROR_STATUS if isinstance(exc, kind)), 400)
    return jsonify({"success": False, "message": str(exc)}), code


def register(app: Flask, container: Container) -> None:
    @app.post("/api/admin/worktime/consolidate")
    def consolidate_worktime():
        payload = request.get_json(silent=True) or {}
        try:
            result = container.consolidation_service.consolidate(payload.get("year"), payload.get("month"))
        except DomainError as e:
            return _error(e)
        return jsonify(result.to_dict()), (200 if result.success else 500)

    @app.get("/api/admin/worktime/<int:year>/<int:month>")
    def admin_worktime_month(year: int, month: int):
        try:
            year, month = require_valid_period(year, month)
            entries = container.edit_service.list_entries(year, month)
        except DomainError as e:
            return _error(e)
        return jsonify(
            {
                "success": True,
                "year": year,
                "month": month,
                "entries": [entry_to_dict(e) for e in entries],
            }
        )

    @app.post("/api/admin/worktime/entry")
    def admin_worktime_entry():
        payload = request.get_json(silent=True) or {}
        try:
            user_id = int(payload.get("user_id"))
            work_date = parse_iso_date(str(payload.get("date", "")))
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "user_id and date (YYYY-MM-DD) are required"}), 400

        try:
            entry = container.edit_service.admin_update(user_id, work_date, str(payload.get("value") or ""))
        except DomainError as e:
            logger.info("admin_update_rejected", extra={"user_id": user_id, "error": str(e)})
            return _error(e)
        return jsonify({"success": True, "entry": entry_to_dict(entry)})
