# tests/test_api.py
"""End-to-end checks through the FastAPI routes"""
from datetime import date

import pytest

from tests.conftest import at

FUTURE_MONDAY = "2030-01-07"
HEADERS = {"X-Business-Id": "biz1"}


@pytest.fixture
def seeded(client, business, service):
    response = client.put("/api/v1/dashboard/business-hours", headers=HEADERS, json={
        "days": {
            "1": {"isOpen": True, "slots": [{"start": "08:00", "end": "12:00"}, {"start": "13:00", "end": "18:00"}]},
        }
    })
    assert response.status_code == 200
    return service


def test_health(client):
    response = client.get("/health/", headers={"X-Correlation-ID": "abc-123"})
    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert client.get("/health/").json()["status"] == "healthy"
    assert client.get("/health/detailed").json()["overall"] == "healthy"


def test_dashboard_requires_business_identity(client):
    assert client.get("/api/v1/dashboard/business-hours").status_code == 403


def test_business_hours_defaults_then_saved(client, business):
    body = client.get("/api/v1/dashboard/business-hours", headers=HEADERS).json()
    assert body["saved"] is False
    assert body["days"]["0"]["isOpen"] is False

    copied = client.post("/api/v1/dashboard/business-hours/copy/1", headers=HEADERS).json()
    assert copied["saved"] is True
    assert all(day["isOpen"] for day in copied["days"].values())


def test_invalid_interval_is_422(client, business):
    response = client.put("/api/v1/dashboard/overrides/2030-01-07", headers=HEADERS, json={
        "is_open": True,
        "slots": [{"start": "12:00", "end": "08:00"}],
    })
    assert response.status_code == 422


def test_public_slots_and_booking_flow(client, seeded):
    params = {"service_id": seeded.id, "date": FUTURE_MONDAY}
    slots = client.get("/api/v1/public/biz1/slots", params=params).json()
    assert slots["source"] == "weekly"
    assert slots["slots"][0] == "08:00"
    assert "17:30" not in slots["slots"]

    created = client.post("/api/v1/public/biz1/bookings", json={
        "service_id": seeded.id,
        "date": FUTURE_MONDAY,
        "time": "09:00",
        "customer_name": "Ana",
        "customer_phone": "11999990000",
    })
    assert created.status_code == 201
    body = created.json()
    assert body["booking"]["status"] == "pending"
    assert body["whatsapp_url"].startswith("https://wa.me/5511988887777?text=")

    after = client.get("/api/v1/public/biz1/slots", params=params).json()["slots"]
    assert after[:2] == ["08:00", "10:00"]

    conflict = client.post("/api/v1/public/biz1/bookings", json={
        "service_id": seeded.id,
        "date": FUTURE_MONDAY,
        "time": "09:30",
        "customer_name": "Bia",
    })
    assert conflict.status_code == 409
    assert conflict.json()["detail"]["error"] == "ConflictError"


def test_public_booking_outside_hours_is_422(client, seeded):
    response = client.post("/api/v1/public/biz1/bookings", json={
        "service_id": seeded.id,
        "date": FUTURE_MONDAY,
        "time": "18:00",
        "customer_name": "Ana",
    })
    assert response.status_code == 422


def test_unknown_business_is_404(client):
    response = client.get("/api/v1/public/nope/slots", params={"service_id": "x", "date": FUTURE_MONDAY})
    assert response.status_code == 404


def test_bulk_close_sundays_then_list_month(client, seeded):
    response = client.post("/api/v1/dashboard/overrides/bulk/weekdays", headers=HEADERS, json={
        "year": 2030, "month": 1, "weekdays": [0], "config": {"isOpen": False, "slots": []},
    })
    assert response.status_code == 200
    assert response.json()["applied"] == 4

    listed = client.get("/api/v1/dashboard/overrides/2030/1", headers=HEADERS).json()["overrides"]
    assert [o["date"] for o in listed] == ["2030-01-06", "2030-01-13", "2030-01-20", "2030-01-27"]

    sunday = client.get("/api/v1/public/biz1/slots", params={"service_id": seeded.id, "date": "2030-01-06"}).json()
    assert sunday["source"] == "override"
    assert sunday["slots"] == []

    assert client.delete("/api/v1/dashboard/overrides/2030-01-06", headers=HEADERS).status_code == 200
    assert client.delete("/api/v1/dashboard/overrides/2030-01-06", headers=HEADERS).status_code == 404


def test_bulk_override_with_scoped_interval(client, seeded):
    response = client.post("/api/v1/dashboard/overrides/bulk", headers=HEADERS, json={
        "dates": [FUTURE_MONDAY],
        "config": {"isOpen": True, "slots": [{"start": "08:00", "end": "18:00", "serviceIds": ["svcA"]}]},
    })
    assert response.status_code == 200

    slots = client.get("/api/v1/public/biz1/slots", params={"service_id": seeded.id, "date": FUTURE_MONDAY}).json()
    assert slots["slots"] == []


def test_staff_booking_status_and_summary(client, seeded):
    created = client.post("/api/v1/dashboard/bookings", headers=HEADERS, json={
        "service_id": seeded.id,
        "date": FUTURE_MONDAY,
        "time": "14:00",
        "customer_name": "Carla",
    })
    assert created.status_code == 201
    booking = created.json()
    assert booking["status"] == "confirmed"

    listed = client.get("/api/v1/dashboard/bookings", headers=HEADERS, params={"date": FUTURE_MONDAY}).json()
    assert [b["id"] for b in listed["bookings"]] == [booking["id"]]

    done = client.patch(f"/api/v1/dashboard/bookings/{booking['id']}/status", headers=HEADERS, json={"status": "completed"})
    assert done.json()["status"] == "completed"

    back = client.patch(f"/api/v1/dashboard/bookings/{booking['id']}/status", headers=HEADERS, json={"status": "pending"})
    assert back.status_code == 422

    summary = client.get(
        "/api/v1/dashboard/bookings/summary", headers=HEADERS,
        params={"start": "2030-01-01", "end": "2030-01-31"},
    ).json()
    assert summary["total_bookings"] == 1
    assert summary["total_revenue"] == 50.0


def test_blocks_remove_capacity(client, seeded):
    listed = client.get("/api/v1/public/biz1/slots", params={"service_id": seeded.id, "date": FUTURE_MONDAY}).json()
    assert "08:00" in listed["slots"]

    created = client.post("/api/v1/dashboard/blocks", headers=HEADERS, json={
        "startTime": at(FUTURE_MONDAY, "08:00"),
        "endTime": at(FUTURE_MONDAY, "12:00"),
        "reason": "Reunião",
    })
    assert created.status_code == 201

    after = client.get("/api/v1/public/biz1/slots", params={"service_id": seeded.id, "date": FUTURE_MONDAY}).json()
    assert after["slots"][0] == "13:00"

    blocks = client.get("/api/v1/dashboard/blocks", headers=HEADERS, params={"date": FUTURE_MONDAY}).json()["blocks"]
    assert len(blocks) == 1
    assert client.delete(f"/api/v1/dashboard/blocks/{blocks[0]['id']}", headers=HEADERS).status_code == 200


def test_services_and_business_routes(client):
    created = client.post("/api/v1/dashboard/business", json={"name": "Clinica", "slug": "clinica"})
    assert created.status_code == 201
    business_id = created.json()["id"]
    headers = {"X-Business-Id": business_id}

    assert client.get("/api/v1/dashboard/business/me", headers=headers).json()["slug"] == "clinica"
    assert client.get("/api/v1/public/by-slug/clinica").json()["id"] == business_id

    service = client.post("/api/v1/dashboard/services", headers=headers, json={"name": "Consulta", "duration_minutes": 45})
    assert service.status_code == 201
    service_id = service.json()["id"]

    patched = client.patch(f"/api/v1/dashboard/services/{service_id}", headers=headers, json={"is_active": False})
    assert patched.json()["is_active"] is False
    assert patched.json()["duration_minutes"] == 45

    public = client.get(f"/api/v1/public/{business_id}/services").json()
    assert public["services"] == []

    inactive = client.get(
        f"/api/v1/public/{business_id}/slots", params={"service_id": service_id, "date": FUTURE_MONDAY}
    )
    assert inactive.status_code == 422

    duplicate = client.post("/api/v1/dashboard/business", json={"name": "Outra", "slug": "clinica"})
    assert duplicate.status_code == 422


def test_future_monday_is_a_monday():
    assert date.fromisoformat(FUTURE_MONDAY).isoweekday() == 1
