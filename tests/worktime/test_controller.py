from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from src.worktime_system.worktime_system.container import build_services
from src.worktime_system.worktime_system.core.enums import Role
from src.worktime_system.worktime_system.main import create_app
from src.worktime_system.worktime_system.status.model import ADMIN_FINAL, USER_INPUT
from src.worktime_system.worktime_system.users.model import Employee
from src.worktime_system.worktime_system.worktime.model import WorkEntry

SETTINGS = SimpleNamespace(DEBUG=False, TESTING=True, LOG_LEVEL="WARNING", CONSOLIDATION_MAX_WORKERS=2)


class InMemoryEntryRepository:
    def __init__(self, stores):
        self.stores = {k: list(v) for k, v in stores.items()}

    def load_entries(self, owner: str, year: int, month: int):
        return [e for e in self.stores.get(owner, []) if (e.work_date.year, e.work_date.month) == (year, month)]

    def save_entries(self, owner: str, entries, year: int, month: int, acting_role: Role) -> None:
        self.stores[owner] = list(entries)

    def load_roster(self):
        return [Employee(user_id=1, username="alice", full_name="Alice")]


@pytest.fixture
def client():
    repo = InMemoryEntryRepository(
        {
            "alice": [
                WorkEntry(1, date(2024, 3, 4), datetime(2024, 3, 4, 8), datetime(2024, 3, 4, 16, 30), 480, status=USER_INPUT)
            ],
            "admin": [WorkEntry(1, date(2024, 3, 8), status=ADMIN_FINAL, time_off_type="CO")],
        }
    )
    app = create_app(settings=SETTINGS, container=build_services(repo, settings=SETTINGS))
    return app.test_client()


def test_consolidate_returns_structured_result(client):
    resp = client.post("/api/admin/worktime/consolidate", json={"year": 2024, "month": 3})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["written"] is True
    assert body["total_entries"] == 2
    assert body["per_employee"][0]["username"] == "alice"


def test_consolidate_rejects_invalid_period(client):
    resp = client.post("/api/admin/worktime/consolidate", json={"year": 2024, "month": 13})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_month_listing(client):
    client.post("/api/admin/worktime/consolidate", json={"year": 2024, "month": 3})
    resp = client.get("/api/admin/worktime/2024/3")

    body = resp.get_json()
    assert body["success"] is True
    assert [e["date"] for e in body["entries"]] == ["2024-03-04", "2024-03-08"]


def test_admin_entry_update(client):
    resp = client.post("/api/admin/worktime/entry", json={"user_id": 1, "date": "2024-03-11", "value": "SN:5"})

    entry = resp.get_json()["entry"]
    assert entry["time_off_type"] == "SN"
    assert entry["overtime_minutes"] == 300
    assert entry["status"] == "ADMIN_INPUT"


def test_admin_entry_errors_map_to_status_codes(client):
    assert client.post("/api/admin/worktime/entry", json={"date": "2024-03-11"}).status_code == 400
    assert client.post(
        "/api/admin/worktime/entry", json={"user_id": 1, "date": "2024-03-11", "value": "ZS-1"}
    ).status_code == 400
    assert client.post(
        "/api/admin/worktime/entry", json={"user_id": 1, "date": "2024-03-08", "value": "8"}
    ).status_code == 409
