# tests/test_api.py
"""HTTP surface: routing, identity headers and error → status mapping."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from decimal import Decimal
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from app.database import get_db
from app.main import app
from app.services.payment_processor import SimulatedPaymentProcessor, get_payment_processor

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
STAFF = {"X-User-Id": "sam", "X-User-Role": "staff"}
ADMIN = {"X-User-Id": "ada", "X-User-Role": "admin"}


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_payment_processor] = lambda: SimulatedPaymentProcessor(success_rate=1.0)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _book(client, space_id, start="2030-01-15T09:00:00", end="2030-01-15T11:00:00", headers=ALICE):
    return client.post("/api/v1/bookings", headers=headers,
                       json={"space_id": space_id, "start_time": start, "end_time": end})


class TestSpaces:
    def test_browse_without_identity(self, client, seed_space):
        seed_space(number="A-01")
        resp = client.get("/api/v1/spaces", params={"available": "true"})
        assert resp.status_code == 200
        assert [s["number"] for s in resp.json()] == ["A-01"]

    def test_unknown_space_is_404(self, client):
        resp = client.get("/api/v1/spaces/missing")
        assert resp.status_code == 404
        assert resp.json()["error"] == "SpaceNotFound"

    def test_availability_window_listing(self, client, seed_space):
        space_id = seed_space()
        booking_id = _book(client, space_id).json()["id"]

        resp = client.get(f"/api/v1/spaces/{space_id}/availability",
                          params={"startDate": "2030-01-15T00:00:00", "endDate": "2030-01-16T00:00:00"})
        assert resp.status_code == 200
        assert [w["booking_id"] for w in resp.json()["bookings"]] == [booking_id]

        check = client.get(f"/api/v1/spaces/{space_id}/check",
                           params={"start": "2030-01-15T10:00:00", "end": "2030-01-15T12:00:00"})
        assert check.json()["available"] is False
        assert check.json()["conflict"]["booking_id"] == booking_id

    def test_admin_creates_and_staff_cannot(self, client):
        body = {"number": "E-01", "floor": 1, "section": "E", "type": "electric",
                "hourly_rate": "6.00", "position": {"x": 1, "y": 2}}
        assert client.post("/api/v1/spaces", headers=STAFF, json=body).status_code == 403
        resp = client.post("/api/v1/spaces", headers=ADMIN, json=body)
        assert resp.status_code == 201
        assert client.post("/api/v1/spaces", headers=ADMIN, json=body).status_code == 409

    def test_store_failure_is_503_with_retry_hint(self, client):
        with patch("app.routers.spaces.space_service.list_spaces",
                   side_effect=OperationalError("SELECT", {}, Exception("canceling statement due to lock timeout"))):
            resp = client.get("/api/v1/spaces")
        assert resp.status_code == 503
        assert resp.json()["error"] == "StoreTimeout"
        assert resp.headers["Retry-After"] == "1"


class TestBookings:
    def test_identity_required(self, client, seed_space):
        space_id = seed_space()
        resp = client.post("/api/v1/bookings",
                           json={"space_id": space_id, "start_time": "2030-01-15T09:00:00",
                                 "end_time": "2030-01-15T10:00:00"})
        assert resp.status_code == 401

    def test_book_conflict_and_adjacent(self, client, seed_space):
        space_id = seed_space(rate="10.00")

        first = _book(client, space_id)
        assert first.status_code == 201
        assert first.json()["status"] == "pending"
        assert Decimal(first.json()["total_amount"]) == Decimal("20.00")
        assert client.get(f"/api/v1/spaces/{space_id}").json()["status"] == "reserved"

        clash = _book(client, space_id, start="2030-01-15T10:30:00", end="2030-01-15T12:00:00", headers=BOB)
        assert clash.status_code == 409
        assert clash.json()["error"] == "Conflict"
        assert clash.json()["conflict"]["booking_id"] == first.json()["id"]
        assert clash.headers["Retry-After"] == "1"

        adjacent = _book(client, space_id, start="2030-01-15T11:00:00", end="2030-01-15T12:00:00", headers=BOB)
        assert adjacent.status_code == 201

    def test_timezone_aware_times_are_normalised(self, client, seed_space):
        space_id = seed_space()
        resp = _book(client, space_id, start="2030-01-15T11:00:00+02:00", end="2030-01-15T12:00:00+02:00")
        assert resp.status_code == 201
        assert resp.json()["start_time"].startswith("2030-01-15T09:00:00")

    def test_invalid_window_is_400(self, client, seed_space):
        space_id = seed_space()
        resp = _book(client, space_id, start="2030-01-15T11:00:00", end="2030-01-15T09:00:00")
        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidWindow"

    def test_other_customer_gets_403(self, client, seed_space):
        booking_id = _book(client, seed_space()).json()["id"]
        assert client.get(f"/api/v1/bookings/{booking_id}", headers=BOB).status_code == 403
        assert client.get(f"/api/v1/bookings/{booking_id}", headers=STAFF).status_code == 200

    def test_lifecycle_over_http(self, client, seed_space):
        space_id = seed_space()
        booking_id = _book(client, space_id).json()["id"]

        bad = client.put(f"/api/v1/bookings/{booking_id}", headers=STAFF, json={"status": "active"})
        assert bad.status_code == 409
        assert bad.json()["error"] == "IllegalTransition"

        for new_status, space_status in (("confirmed", "reserved"), ("active", "occupied"),
                                         ("completed", "available")):
            resp = client.put(f"/api/v1/bookings/{booking_id}", headers=STAFF, json={"status": new_status})
            assert resp.status_code == 200
            assert resp.json()["space_status"] == space_status

        cancel = client.delete(f"/api/v1/bookings/{booking_id}", headers=ALICE)
        assert cancel.status_code == 400
        assert cancel.json()["error"] == "NotCancellable"

    def test_empty_update_is_rejected(self, client, seed_space):
        booking_id = _book(client, seed_space()).json()["id"]
        assert client.put(f"/api/v1/bookings/{booking_id}", headers=ALICE, json={}).status_code == 422

    def test_cancel_frees_space(self, client, seed_space):
        space_id = seed_space()
        booking_id = _book(client, space_id).json()["id"]

        resp = client.delete(f"/api/v1/bookings/{booking_id}", headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["booking"]["status"] == "cancelled"
        assert resp.json()["space_status"] == "available"

    def test_list_own_and_admin_listing(self, client, seed_space):
        space_id = seed_space()
        _book(client, space_id)
        _book(client, space_id, start="2030-01-15T12:00:00", end="2030-01-15T13:00:00", headers=BOB)

        mine = client.get("/api/v1/bookings", headers=ALICE).json()
        assert [b["user_id"] for b in mine] == ["alice"]
        assert client.get("/api/v1/bookings/admin/all", headers=ALICE).status_code == 403
        assert len(client.get("/api/v1/bookings/admin/all", headers=STAFF).json()) == 2

    def test_qr_render_and_verify(self, client, seed_space):
        booking = _book(client, seed_space()).json()

        qr = client.get(f"/api/v1/bookings/{booking['id']}/qr", headers=ALICE)
        assert qr.status_code == 200
        assert qr.json()["image"].startswith("data:image/png;base64,")

        verified = client.post("/api/v1/bookings/verify-qr", json={"token": booking["qr_code"]})
        assert verified.status_code == 200
        assert verified.json()["booking_id"] == booking["id"]

        bogus = client.post("/api/v1/bookings/verify-qr", json={"token": "bogus"})
        assert bogus.status_code == 400
        assert bogus.json()["error"] == "InvalidQrToken"


class TestPaymentsAndNotifications:
    def test_pay_then_read_notifications(self, client, seed_space):
        booking = _book(client, seed_space(rate="10.00")).json()

        mismatch = client.post("/api/v1/payments", headers=ALICE,
                               json={"booking_id": booking["id"], "method": "card", "amount": "15.00"})
        assert mismatch.status_code == 400
        assert mismatch.json()["error"] == "AmountMismatch"

        paid = client.post("/api/v1/payments", headers=ALICE,
                           json={"booking_id": booking["id"], "method": "card", "amount": "20.00"})
        assert paid.status_code == 201
        assert paid.json()["success"] is True
        assert paid.json()["booking_status"] == "confirmed"
        assert paid.json()["payment_status"] == "paid"

        again = client.post("/api/v1/payments", headers=ALICE,
                            json={"booking_id": booking["id"], "method": "card", "amount": "20.00"})
        assert again.json()["error"] == "AlreadyPaid"

        notes = client.get("/api/v1/notifications", headers=ALICE).json()
        assert {n["type"] for n in notes} == {"booking", "payment"}
        assert client.put("/api/v1/notifications/read-all", headers=ALICE).json()["updated"] == len(notes)
        assert client.get("/api/v1/notifications", headers=ALICE, params={"read": "false"}).json() == []

    def test_refund_is_admin_only(self, client, seed_space):
        booking = _book(client, seed_space(rate="10.00")).json()
        payment = client.post("/api/v1/payments", headers=ALICE,
                              json={"booking_id": booking["id"], "method": "card", "amount": "20.00"}).json()
        payment_id = payment["payment"]["id"]

        assert client.post(f"/api/v1/payments/{payment_id}/refund", headers=STAFF).status_code == 403
        refunded = client.post(f"/api/v1/payments/{payment_id}/refund", headers=ADMIN)
        assert refunded.status_code == 200
        assert refunded.json()["status"] == "refunded"


class TestHealth:
    def test_health_reports_space_counts(self, client, seed_space):
        seed_space()
        seed_space(status="maintenance")
        body = client.get("/api/v1/health").json()
        assert body["database"] == "ok"
        assert body["spaces"] == {"available": 1, "maintenance": 1}
