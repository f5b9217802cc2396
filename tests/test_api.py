import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from vfast.db.session import get_db
from vfast.main import create_app


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def as_user(principal):
    return {"X-User-Id": str(principal.user_id)}


def booking_payload(department_id, **overrides):
    payload = {
        "purpose": "Audit committee visit",
        "booking_type": "official",
        "department_id": department_id,
        "guest_count": 2,
        "number_of_rooms": 1,
        "check_in_date": "2025-01-10",
        "check_out_date": "2025-01-12",
    }
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "X-Request-ID" in response.headers
    assert "X-Process-Time" in response.headers


def test_request_id_is_echoed(client):
    response = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


def test_missing_user_header(client):
    response = client.get("/api/v1/bookings")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_FAILED"


def test_unknown_user(client):
    response = client.get("/api/v1/bookings", headers={"X-User-Id": "4242"})
    assert response.status_code == 401


def test_full_workflow(client, requestor, approver, admin, vfast, finance, room_r01):
    response = client.post("/api/v1/bookings", json=booking_payload(finance.id), headers=as_user(requestor))
    assert response.status_code == 201
    booking = response.json()
    assert booking["status"] == "pending_department_approval"
    assert booking["current_workflow_stage"] == "department_review"
    booking_id = booking["id"]

    response = client.post(
        f"/api/v1/bookings/{booking_id}/department-approve",
        json={"notes": "ok"},
        headers=as_user(approver),
    )
    assert response.status_code == 200
    assert response.json()["department_notes"] == "ok"

    response = client.post(f"/api/v1/bookings/{booking_id}/admin-approve", json={}, headers=as_user(admin))
    assert response.json()["status"] == "approved"

    response = client.post(
        f"/api/v1/bookings/{booking_id}/allocate",
        json={"room_ids": [room_r01.id]},
        headers=as_user(vfast),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "allocated"
    assert response.json()["room_numbers"] == ["R01"]

    response = client.get(f"/api/v1/rooms/{room_r01.id}", headers=as_user(vfast))
    assert response.json()["status"] == "occupied"

    response = client.post(
        f"/api/v1/bookings/{booking_id}/guests",
        json={"name": "Dr. Meera Iyer"},
        headers=as_user(vfast),
    )
    assert response.status_code == 201
    guest_id = response.json()["id"]

    response = client.post(f"/api/v1/guests/{guest_id}/check-in", headers=as_user(vfast))
    assert response.json()["checked_in"] is True

    response = client.post(f"/api/v1/bookings/{booking_id}/check-in", headers=as_user(vfast))
    assert response.json()["current_workflow_stage"] == "checked_in"

    response = client.post(f"/api/v1/bookings/{booking_id}/check-out", headers=as_user(vfast))
    assert response.json()["current_workflow_stage"] == "checked_out"

    response = client.get(f"/api/v1/bookings/{booking_id}/journey", headers=as_user(requestor))
    events = [entry["event"] for entry in response.json()["entries"]]
    assert events[:4] == ["create", "department_approve", "admin_approve", "allocate"]


def test_conflicting_allocation_returns_409(client, make_approved, vfast, room_r01):
    first = make_approved()
    second = make_approved()
    client.post(f"/api/v1/bookings/{first.id}/allocate", json={"room_ids": [room_r01.id]}, headers=as_user(vfast))

    response = client.post(
        f"/api/v1/bookings/{second.id}/allocate",
        json={"room_ids": [room_r01.id]},
        headers=as_user(vfast),
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ROOM_UNAVAILABLE"


def test_illegal_transition_returns_409(client, requestor, admin, finance):
    response = client.post("/api/v1/bookings", json=booking_payload(finance.id), headers=as_user(requestor))
    booking_id = response.json()["id"]

    response = client.post(
        f"/api/v1/bookings/{booking_id}/admin-reject",
        json={"reason": "budget"},
        headers=as_user(admin),
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"


def test_wrong_role_returns_403(client, make_approved, requestor, room_r01):
    booking = make_approved()
    response = client.post(
        f"/api/v1/bookings/{booking.id}/allocate",
        json={"room_ids": [room_r01.id]},
        headers=as_user(requestor),
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "AUTHORIZATION_FAILED"


def test_invalid_payload_returns_422(client, requestor, finance):
    response = client.post(
        "/api/v1/bookings",
        json=booking_payload(finance.id, check_out_date="2025-01-09"),
        headers=as_user(requestor),
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_rejection_requires_reason(client, requestor, approver, finance):
    response = client.post("/api/v1/bookings", json=booking_payload(finance.id), headers=as_user(requestor))
    booking_id = response.json()["id"]

    response = client.post(
        f"/api/v1/bookings/{booking_id}/department-reject",
        json={"reason": ""},
        headers=as_user(approver),
    )
    assert response.status_code == 422


def test_soft_delete(client, requestor, finance):
    response = client.post("/api/v1/bookings", json=booking_payload(finance.id), headers=as_user(requestor))
    booking_id = response.json()["id"]

    assert client.delete(f"/api/v1/bookings/{booking_id}", headers=as_user(requestor)).status_code == 204
    assert client.get(f"/api/v1/bookings/{booking_id}", headers=as_user(requestor)).status_code == 404


def test_booking_report_endpoint(client, make_approved, admin):
    make_approved()
    make_approved()
    response = client.get("/api/v1/reports/bookings?page=1&page_size=1", headers=as_user(admin))
    assert response.status_code == 200
    body = response.json()
    assert body["meta"]["total_items"] == 2
    assert len(body["items"]) == 1


def test_report_rejects_inverted_range(client, admin):
    response = client.get(
        "/api/v1/reports/bookings?start_date=2025-02-01&end_date=2025-01-01",
        headers=as_user(admin),
    )
    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "INVALID_DATE_RANGE"
    assert error["details"] == {"start_date": "2025-02-01", "end_date": "2025-01-01"}


def test_room_registry_endpoints(client, vfast):
    response = client.post(
        "/api/v1/rooms",
        json={"room_number": "R20", "room_type": "suite", "floor": 3},
        headers=as_user(vfast),
    )
    assert response.status_code == 201
    room_id = response.json()["id"]

    response = client.post(
        f"/api/v1/rooms/{room_id}/maintenance",
        json={"reason": "Repainting", "start_date": "2025-01-05"},
        headers=as_user(vfast),
    )
    assert response.status_code == 201
    maintenance_id = response.json()["id"]

    response = client.get("/api/v1/rooms/available", headers=as_user(vfast))
    assert response.json() == []

    response = client.post(f"/api/v1/rooms/maintenance/{maintenance_id}/complete", headers=as_user(vfast))
    assert response.json()["status"] == "completed"

    response = client.get("/api/v1/rooms/by-number/R20", headers=as_user(vfast))
    assert response.json()["status"] == "available"


def test_directory_endpoints(client, admin):
    response = client.post("/api/v1/departments", json={"name": "Chemistry", "code": "CHEM"}, headers=as_user(admin))
    assert response.status_code == 201
    department_id = response.json()["id"]

    response = client.post(
        "/api/v1/users",
        json={
            "name": "Chem Head",
            "email": "chem.head@example.org",
            "role": "department_approver",
            "department_id": department_id,
        },
        headers=as_user(admin),
    )
    assert response.status_code == 201

    response = client.get("/api/v1/users?role=department_approver", headers=as_user(admin))
    assert [u["email"] for u in response.json()] == ["chem.head@example.org"]

    response = client.get("/api/v1/me", headers=as_user(admin))
    assert response.json()["role"] == "admin"


def test_duplicate_department_code_returns_409(client, admin, finance):
    response = client.post(
        "/api/v1/departments",
        json={"name": "Financial Services", "code": finance.code},
        headers=as_user(admin),
    )
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_ENTRY"

    response = client.get("/api/v1/departments", headers=as_user(admin))
    assert [d["name"] for d in response.json()] == ["Finance"]
