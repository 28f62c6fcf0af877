from __future__ import annotations

from datetime import datetime

import pytest

from src.hr_attendance.hr_attendance.container import build_services
from src.hr_attendance.hr_attendance.main import create_app

OFFICE = {"latitude": 23.7925, "longitude": 90.4078, "address": "Gulshan-1, Dhaka"}


@pytest.fixture
def app(monkeypatch, employees_repo, attendance_repo, leaves_repo, clock, staff):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_services(
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        clock=clock,
    )
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, staff_code, password):
    return client.post("/api/auth/login", json={"staff_code": staff_code, "password": password})


def test_login_and_logout(client):
    res = login(client, "EMP001", "alice123")
    assert res.status_code == 200
    assert res.get_json()["user"]["role"] == "employee"

    assert client.get("/api/me").status_code == 200
    client.post("/api/auth/logout")
    assert client.get("/api/me").status_code == 401


def test_login_with_bad_password_is_401(client):
    res = login(client, "EMP001", "nope-nope")

    assert res.status_code == 401
    assert res.get_json() == {
        "success": False,
        "error": "AuthenticationError",
        "message": "Invalid staff ID or password",
    }


def test_unauthenticated_and_wrong_role(client):
    assert client.get("/api/attendance/today").status_code == 401

    login(client, "EMP001", "alice123")
    assert client.get("/api/admin/attendance").status_code == 403


def test_check_in_check_out_flow(client, clock):
    login(client, "EMP001", "alice123")

    assert client.get("/api/attendance/today").status_code == 404

    clock.set(datetime(2026, 3, 2, 9, 15))
    res = client.post("/api/attendance/check-in", json=OFFICE)
    assert res.status_code == 201
    body = res.get_json()
    assert body["status"] == "late"
    assert body["attendance"]["state"] == "checked_in"

    again = client.post("/api/attendance/check-in", json=OFFICE)
    assert again.status_code == 409
    assert again.get_json()["error"] == "StateConflict"

    clock.set(datetime(2026, 3, 2, 17, 0))
    res = client.post("/api/attendance/check-out", json=OFFICE)
    assert res.status_code == 200
    assert res.get_json()["attendance"]["work_hours"] == pytest.approx(7.75)

    history = client.get("/api/attendance/history").get_json()
    assert history["total"] == 1
    assert history["attendances"][0]["state"] == "complete"


def test_check_in_validation_is_422(client):
    login(client, "EMP001", "alice123")

    res = client.post("/api/attendance/check-in", json={**OFFICE, "latitude": 120})

    assert res.status_code == 422
    assert "Latitude" in res.get_json()["message"]


def test_check_out_before_check_in_is_409(client):
    login(client, "EMP001", "alice123")

    res = client.post("/api/attendance/check-out", json=OFFICE)

    assert res.status_code == 409


def test_employee_report_rejects_bad_dates(client):
    login(client, "EMP001", "alice123")

    res = client.get("/api/attendance/report?start_date=2026-13-01")

    assert res.status_code == 422


def test_admin_listing_statistics_and_correction(client, attendance_repo, staff, fixed_now):
    login(client, "EMP001", "alice123")
    client.post("/api/attendance/check-in", json=OFFICE)
    client.post("/api/auth/logout")

    login(client, "ADMIN001", "admin123")
    listing = client.get("/api/admin/attendance?date=2026-03-02").get_json()
    assert listing["stats"] == {"date": "2026-03-02", "present": 1, "absent": 1, "late": 0, "total_employees": 2}
    assert [r["status"] for r in listing["rows"]] == ["present", "absent"]

    stats = client.get("/api/admin/attendance/statistics?start_date=2026-03-01&end_date=2026-03-02").get_json()
    assert len(stats["daily_stats"]) == 2
    assert stats["ranking"][0]["employee_id"] == staff["alice"].employee_id

    record_id = listing["rows"][0]["attendance"]["attendance_id"]
    bad = client.put(f"/api/admin/attendance/{record_id}", json={"check_in_time": "09:00", "check_out_time": "08:00"})
    assert bad.status_code == 422

    ok = client.put(f"/api/admin/attendance/{record_id}", json={"check_in_time": "08:00", "check_out_time": "17:30"})
    assert ok.status_code == 200
    assert ok.get_json()["attendance"]["check_out_time"] == "2026-03-02T17:30:00"

    assert client.get("/api/admin/attendance/9999").status_code == 404

    prepared = client.post("/api/admin/attendance/prepare?date=2026-03-02").get_json()
    assert prepared["created"] == 1


def test_admin_staff_lifecycle(client, staff):
    login(client, "ADMIN001", "admin123")

    res = client.post("/api/admin/staff", json={"full_name": "Dana Pham", "staff_code": "EMP010", "password": "pass1234"})
    assert res.status_code == 201
    new_id = res.get_json()["staff"]["employee_id"]

    assert client.delete(f"/api/admin/staff/{new_id}").status_code == 409
    assert client.post(f"/api/admin/staff/{new_id}/archive").status_code == 200
    archived = client.get("/api/admin/staff?archived=1").get_json()["staff"]
    assert [s["staff_code"] for s in archived] == ["EMP010"]
    assert client.delete(f"/api/admin/staff/{new_id}").status_code == 200
    assert client.post(f"/api/admin/staff/{new_id}/restore").status_code == 404


def test_leave_flow(client, staff):
    login(client, "EMP001", "alice123")
    res = client.post(
        "/api/leaves",
        json={"leave_type": "sick", "start_date": "2026-03-05", "end_date": "2026-03-06", "reason": "Doctor's appointment"},
    )
    assert res.status_code == 201
    leave_id = res.get_json()["leave"]["leave_id"]

    bad_type = client.post(
        "/api/leaves",
        json={"leave_type": "holiday", "start_date": "2026-03-05", "end_date": "2026-03-06", "reason": "Doctor's appointment"},
    )
    assert bad_type.status_code == 422
    client.post("/api/auth/logout")

    login(client, "ADMIN001", "admin123")
    approved = client.post(f"/api/admin/leaves/{leave_id}/approve")
    assert approved.status_code == 200
    assert approved.get_json()["leave"]["approver_id"] == staff["admin"].employee_id
    assert client.post(f"/api/admin/leaves/{leave_id}/reject").status_code == 409

    report = client.get(f"/api/admin/staff/{staff['alice'].employee_id}/leaves").get_json()
    assert report["stats"]["total_days"] == 2
    client.post("/api/auth/logout")

    login(client, "EMP001", "alice123")
    assert client.delete(f"/api/leaves/{leave_id}").status_code == 409


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"check_in_time": "2026-03-01T09:00:00+06:00", "check_out_time": "17:00"}, "UTC offset"),
        ({"check_in_time": "2026-02-28T09:00:00", "check_out_time": "17:00"}, "is not on 2026-03-01"),
        ({"check_in_time": "nine o'clock"}, "Invalid time"),
    ],
)
def test_admin_create_rejects_bad_timestamps(client, staff, payload, message):
    login(client, "ADMIN001", "admin123")

    res = client.post(
        "/api/admin/attendance",
        json={"employee_id": staff["alice"].employee_id, "work_date": "2026-03-01", **payload},
    )

    assert res.status_code == 422
    assert res.get_json()["error"] == "ValidationError"
    assert message in res.get_json()["message"]


def test_admin_create_accepts_local_iso_timestamp(client, staff):
    login(client, "ADMIN001", "admin123")

    res = client.post(
        "/api/admin/attendance",
        json={
            "employee_id": staff["alice"].employee_id,
            "work_date": "2026-03-01",
            "check_in_time": "2026-03-01T08:45:00",
            "check_out_time": "17:00",
        },
    )

    assert res.status_code == 201
    assert res.get_json()["attendance"]["check_in_time"] == "2026-03-01T08:45:00"


@pytest.mark.parametrize("employee_id", ["abc", "", 1.5, True])
def test_admin_create_rejects_malformed_employee_id(client, staff, employee_id):
    login(client, "ADMIN001", "admin123")

    attendance = client.post(
        "/api/admin/attendance",
        json={"employee_id": employee_id, "work_date": "2026-03-01", "check_in_time": "09:00"},
    )
    leave = client.post(
        "/api/admin/leaves",
        json={
            "employee_id": employee_id,
            "leave_type": "sick",
            "start_date": "2026-03-05",
            "end_date": "2026-03-06",
            "reason": "Doctor's appointment",
        },
    )

    assert attendance.status_code == 422
    assert leave.status_code == 422
    assert "Employee" in attendance.get_json()["message"]
    assert "Employee" in leave.get_json()["message"]


def test_admin_create_accepts_numeric_string_employee_id(client, staff):
    login(client, "ADMIN001", "admin123")

    res = client.post(
        "/api/admin/attendance",
        json={"employee_id": str(staff["bob"].employee_id), "work_date": "2026-03-01", "check_in_time": "09:00"},
    )

    assert res.status_code == 201
    assert res.get_json()["attendance"]["employee_id"] == staff["bob"].employee_id


def test_check_in_response_echoes_stored_record(client, clock, attendance_repo, staff):
    login(client, "EMP001", "alice123")
    clock.set(datetime(2026, 3, 2, 9, 0, 0, 400000))

    res = client.post("/api/attendance/check-in", json=OFFICE)

    body = res.get_json()
    stored = attendance_repo.find_by_employee_and_date(staff["alice"].employee_id, clock.today())
    assert body["attendance"] == stored.to_dict()
    assert body["status"] == "present"
