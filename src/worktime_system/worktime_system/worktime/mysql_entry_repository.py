from __future__ import annotations

from typing import Sequence

from ..common.datetime_utils import month_bounds
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, store_errors
from ..logging_config import get_logger
from ..status.model import EntryStatus
from ..users.model import Employee
from .model import WorkEntry
from .repository import EntryRepository

logger = get_logger("worktime.mysql_repository")

_ENTRY_COLUMNS = (
    "user_id, work_date, start_time, end_time, worked_minutes, overtime_minutes, "
    "temp_stop_minutes, temp_stop_count, lunch_deducted, time_off_type, status"
)


def _row_to_entry(r: dict) -> WorkEntry:
    # Unknown tags load as None; the status cleanup pass normalizes them.
    return WorkEntry(
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        start_time=r.get("start_time"),
        end_time=r.get("end_time"),
        worked_minutes=int(r.get("worked_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        temp_stop_minutes=int(r.get("temp_stop_minutes") or 0),
        temp_stop_count=int(r.get("temp_stop_count") or 0),
        lunch_deducted=bool(r.get("lunch_deducted")),
        time_off_type=r.get("time_off_type"),
        status=EntryStatus.parse_or_none(r.get("status")),
    )


def _entry_params(owner: str, e: WorkEntry) -> tuple:
    return (
        owner,
        e.user_id,
        e.work_date,
        e.start_time,
        e.end_time,
        e.worked_minutes,
        e.overtime_minutes,
        e.temp_stop_minutes,
        e.temp_stop_count,
        int(e.lunch_deducted),
        e.time_off_type,
        str(e.status) if e.status else None,
    )


class MySQLEntryRepository(EntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def load_entries(self, owner: str, year: int, month: int) -> Sequence[WorkEntry]:
        start, end = month_bounds(year, month)
        with store_errors(f"Loading {owner} {year}-{month:02d}"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT {_ENTRY_COLUMNS}
                    FROM worktime_entries
                    WHERE owner=%s AND work_date BETWEEN %s AND %s
                    ORDER BY work_date ASC, user_id ASC
                    """,
                    (owner, start, end),
                )
                return [_row_to_entry(r) for r in fetchall(cur)]

    def save_entries(
        self,
        owner: str,
        entries: Sequence[WorkEntry],
        year: int,
        month: int,
        acting_role: Role,
    ) -> None:
        start, end = month_bounds(year, month)
        with store_errors(f"Saving {owner} {year}-{month:02d}"):
            # One transaction: the month is replaced as a whole or not at all.
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "DELETE FROM worktime_entries WHERE owner=%s AND work_date BETWEEN %s AND %s",
                    (owner, start, end),
                )
                if entries:
                    cur.executemany(
                        f"""
                        INSERT INTO worktime_entries(owner, {_ENTRY_COLUMNS})
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        [_entry_params(owner, e) for e in entries],
                    )
                cur.execute(
                    """
                    INSERT INTO worktime_writes(owner, period_year, period_month, acting_role, entry_count)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (owner, int(year), int(month), acting_role.value, len(entries)),
                )
        logger.info(
            "entries_saved",
            extra={"owner": owner, "year": year, "month": month, "count": len(entries), "role": acting_role.value},
        )

    def load_roster(self) -> Sequence[Employee]:
        with store_errors("Loading roster"):
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT user_id, username, full_name, role, schedule_hours, is_active
                    FROM users
                    ORDER BY user_id ASC
                    """
                )
                return [
                    Employee(
                        user_id=int(r["user_id"]),
                        username=r["username"],
                        full_name=r["full_name"],
                        role=Role(str(r["role"]).upper()),
                        schedule_hours=int(r.get("schedule_hours") or 0),
                        is_active=bool(r.get("is_active", 1)),
                    )
                    for r in fetchall(cur)
                ]
