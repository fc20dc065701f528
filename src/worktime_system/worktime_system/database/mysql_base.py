from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

import mysql.connector

from ..core.exceptions import StoreUnavailableError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate connector failures and unreadable rows into StoreUnavailableError."""
    try:
        yield
    except mysql.connector.Error as exc:
        raise StoreUnavailableError(f"{action} failed: {exc}") from exc
    except (KeyError, TypeError, ValueError) as exc:
        # Rows that do not map onto the domain types.
        raise StoreUnavailableError(f"{action} returned unreadable data: {exc}") from exc


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
