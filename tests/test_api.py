# tests/test_api.py
"""HTTP-level tests: status codes and payloads of the public endpoints."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi.testclient import TestClient
from app.database import get_db
from app.main import app
from app.models.alert import Alert
from app.services.alert_service import create_alert
from conftest import gate_id, zone_named


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestTickets:
    def test_entry_returns_ticket_with_spot(self, client, compact_pool):
        resp = client.post("/api/v1/tickets", json={
            "plate_number": "ABC-1234", "vehicle_type": "CAR",
            "entry_gate_id": gate_id(compact_pool, "MAIN"),
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["spot_code"] == "P-03"
        assert body["status"] == "ACTIVE"
        assert body["fee"] is None

    def test_lot_full_is_409(self, client, compact_pool):
        payload = {"vehicle_type": "TRUCK", "entry_gate_id": gate_id(compact_pool, "MAIN")}
        assert client.post("/api/v1/tickets", json=payload).status_code == 201
        assert client.post("/api/v1/tickets", json=payload).status_code == 201

        resp = client.post("/api/v1/tickets", json=payload)
        assert resp.status_code == 409
        assert resp.json()["spot_type"] == "LARGE"

    def test_unknown_vehicle_type_is_422(self, client, compact_pool):
        resp = client.post("/api/v1/tickets", json={
            "vehicle_type": "BUS", "entry_gate_id": gate_id(compact_pool, "MAIN"),
        })
        assert resp.status_code == 422

    def test_missing_field_is_422(self, client, compact_pool):
        assert client.post("/api/v1/tickets", json={"vehicle_type": "CAR"}).status_code == 422

    def test_exit_closes_ticket(self, client, lot):
        created = client.post("/api/v1/tickets", json={
            "vehicle_type": "MOTORCYCLE", "entry_gate_id": gate_id(lot, "IN"),
        }).json()

        resp = client.post(f"/api/v1/tickets/{created['id']}/exit",
                           json={"exit_gate_id": gate_id(lot, "OUT")})
        assert resp.status_code == 200
        assert resp.json()["status"] == "CLOSED"
        assert resp.json()["fee"] > 0

        again = client.post(f"/api/v1/tickets/{created['id']}/exit",
                            json={"exit_gate_id": gate_id(lot, "OUT")})
        assert again.status_code == 422

    def test_unknown_ticket_is_404(self, client, lot):
        assert client.get("/api/v1/tickets/999").status_code == 404


class TestOccupancy:
    def test_snapshot(self, client, lot):
        client.post("/api/v1/tickets", json={"vehicle_type": "CAR", "entry_gate_id": gate_id(lot, "IN")})

        body = client.get("/api/v1/occupancy").json()
        assert body["total_spots"] == 6
        assert body["occupied_spots"] == 1
        assert body["per_type_availability"]["COMPACT"] == 3

    def test_zones(self, client, lot):
        zones = client.get("/api/v1/occupancy/zones").json()
        assert [z["name"] for z in zones] == ["A", "B"]
        assert zones[0]["status"] == "ACTIVE"
        assert zones[0]["occupancy_percent"] == 0

    def test_reset_floor(self, client, lot):
        floor_id = zone_named(lot, "A").floor_id
        resp = client.put(f"/api/v1/floors/{floor_id}/zones/reset")
        assert resp.status_code == 200
        assert resp.json()["active_zone_id"] == zone_named(lot, "A").id

        assert client.put("/api/v1/floors/999/zones/reset").status_code == 404


class TestAlertsAndHealth:
    def test_list_and_resolve_alerts(self, client, lot):
        alert = create_alert(lot, "occupancy_high", "Floor Ground at 90% capacity")

        listed = client.get("/api/v1/alerts", params={"alert_type": "occupancy_high"}).json()
        assert [a["id"] for a in listed] == [alert.id]
        assert client.get("/api/v1/alerts", params={"floor_id": 999}).json() == []

        assert client.put(f"/api/v1/alerts/{alert.id}/resolve").status_code == 200
        lot.expire_all()
        assert lot.get(Alert, alert.id).is_resolved == 1
        assert client.put("/api/v1/alerts/999/resolve").status_code == 404

    def test_health(self, client, db):
        body = client.get("/api/v1/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["spots"] == {"VACANT": 0, "RESERVED": 0, "OCCUPIED": 0}
        assert body["floors_without_active_zone"] == []
