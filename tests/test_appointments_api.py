import threading
import time as time_module
from datetime import date, time

import pytest
from fastapi.testclient import TestClient

from app.core.database import get_redis
from app.core.security import HospitalRole
from app.main import app
from app.api.deps import get_appointment_service, get_slot_lock
from app.models.appointment import Appointment
from app.services.slot_lock import SlotLock
from tests.conftest import auth_headers

BASE = "/api/v1/appointment"

staff = auth_headers(HospitalRole.STAFF, 2)
admin = auth_headers(HospitalRole.ADMIN, 1)

slot = {
    "patientId": 1,
    "doctorId": 2,
    "date": "2030-01-10",
    "time": "09:00:00"
}


@pytest.fixture
def seeded(patients):
    return patients


def book(client, headers=staff, **overrides):
    body = dict(slot, **overrides)
    return client.post(f"{BASE}/", json=body, headers=headers)


class TestAppointmentsApi:

    def test_requires_token(self, client, seeded):
        response = client.get(f"{BASE}/mine")
        assert response.status_code == 401

    def test_rejects_invalid_token(self, client, seeded):
        response = client.get(f"{BASE}/mine", headers={"Authorization": "Bearer invalid_token"})
        assert response.status_code == 401

    def test_create_returns_projection(self, client, seeded):
        response = book(client, headers=auth_headers(HospitalRole.PATIENT, 1))
        assert response.status_code == 201

        data = response.json()
        assert data["status"] == "BOOKED"
        assert data["date"] == "2030-01-10"
        assert data["time"] == "09:00:00"
        assert data["patient"]["id"] == 1
        assert data["patient"]["firstName"] == "Patient1"
        assert data["patient"]["allergies"] == ["penicillin"]
        assert data["patient"]["biologicalSex"] == "FEMALE"
        assert data["doctor"]["id"] == 2
        assert data["doctor"]["specialization"] == "Diagnostics"

    def test_double_booking_conflict(self, client, seeded):
        assert book(client).status_code == 201

        response = book(client, patientId=5)
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "SLOT_UNAVAILABLE"
        assert body["path"] == f"{BASE}/"

    def test_cancel_then_rebook(self, client, seeded):
        first = book(client).json()

        cancelled = client.delete(f"{BASE}/{first['id']}", headers=staff)
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "CANCELLED"

        again = client.delete(f"{BASE}/{first['id']}", headers=staff)
        assert again.status_code == 200

        assert book(client, patientId=5).status_code == 201

    @pytest.mark.parametrize("overrides, code", [
        ({"patientId": 999}, "PATIENT_NOT_FOUND"),
        ({"doctorId": 999}, "DOCTOR_NOT_FOUND"),
    ])
    def test_unknown_references(self, client, seeded, overrides, code):
        response = book(client, **overrides)
        assert response.status_code == 404
        assert response.json()["error"] == code

    def test_past_date(self, client, seeded):
        response = book(client, date="2020-01-01")
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_DATE"

    def test_malformed_body(self, client, seeded):
        response = book(client, date="not-a-date")
        assert response.status_code == 422

    def test_get_unknown(self, client, seeded):
        response = client.get(f"{BASE}/404", headers=staff)
        assert response.status_code == 404
        assert response.json()["error"] == "APPOINTMENT_NOT_FOUND"

    def test_update_and_terminal_status(self, client, seeded):
        created = book(client).json()

        response = client.put(
            f"{BASE}/{created['id']}",
            json={"doctorId": 9, "status": "COMPLETED"},
            headers=staff
        )
        assert response.status_code == 200
        assert response.json()["doctor"]["id"] == 9
        assert response.json()["status"] == "COMPLETED"

        response = client.put(
            f"{BASE}/{created['id']}",
            json={"doctorId": 9, "status": "BOOKED"},
            headers=staff
        )
        assert response.status_code == 409
        assert response.json()["error"] == "INVALID_TRANSITION"

    def test_patient_cannot_update(self, client, seeded):
        created = book(client).json()

        response = client.put(
            f"{BASE}/{created['id']}",
            json={"doctorId": 9, "status": "COMPLETED"},
            headers=auth_headers(HospitalRole.PATIENT, 1)
        )
        assert response.status_code == 403

    def test_list_all_is_staff_only(self, client, seeded):
        book(client)
        book(client, patientId=3, doctorId=4)

        response = client.get(f"{BASE}/", headers=admin)
        assert response.status_code == 200
        assert len(response.json()) == 2

        response = client.get(f"{BASE}/", headers=auth_headers(HospitalRole.PATIENT, 1))
        assert response.status_code == 403

    def test_list_filters(self, client, seeded):
        first = book(client).json()
        book(client, patientId=3, doctorId=4, date="2030-02-01")
        client.delete(f"{BASE}/{first['id']}", headers=staff)

        cancelled = client.get(f"{BASE}/", params={"status": "CANCELLED"}, headers=staff)
        assert [a["id"] for a in cancelled.json()] == [first["id"]]

        february = client.get(
            f"{BASE}/", params={"start": "2030-02-01", "end": "2030-02-28"}, headers=staff
        )
        assert [a["doctor"]["id"] for a in february.json()] == [4]

        half_range = client.get(f"{BASE}/", params={"start": "2030-02-01"}, headers=staff)
        assert half_range.status_code == 400

    def test_mine_is_scoped_by_role(self, client, seeded):
        book(client, patientId=7, doctorId=3)
        book(client, patientId=7, doctorId=4)
        book(client, patientId=1, doctorId=3, time="10:00:00")

        mine = client.get(f"{BASE}/mine", headers=auth_headers(HospitalRole.PATIENT, 7))
        assert mine.status_code == 200
        assert {a["patient"]["id"] for a in mine.json()} == {7}
        assert len(mine.json()) == 2

        doctor_view = client.get(f"{BASE}/mine", headers=auth_headers(HospitalRole.STAFF, 3))
        assert {a["doctor"]["id"] for a in doctor_view.json()} == {3}
        assert len(doctor_view.json()) == 2

    def test_availability(self, client, seeded):
        params = {"doctorId": 2, "date": "2030-01-10", "time": "09:00:00"}

        before = client.get(f"{BASE}/availability", params=params, headers=staff)
        assert before.status_code == 200
        assert before.json()["available"] is True

        book(client)
        after = client.get(f"{BASE}/availability", params=params, headers=staff)
        assert after.json()["available"] is False
        assert after.json()["doctorId"] == 2

    def test_storage_failure_is_internal_error(self, seeded):
        class BrokenService:
            def list_all(self):
                raise RuntimeError("connection reset")

        app.dependency_overrides[get_appointment_service] = lambda: BrokenService()
        try:
            with TestClient(app, raise_server_exceptions=False) as client:
                response = client.get(f"{BASE}/", headers=staff)
        finally:
            app.dependency_overrides.pop(get_appointment_service, None)

        assert response.status_code == 500
        assert response.json()["error"] == "Internal Server Error"
        assert "connection reset" not in response.text


class TestDirectoryApi:

    def test_list_and_get_doctor(self, client, seeded):
        doctors = client.get("/api/v1/doctor/", headers=staff)
        assert doctors.status_code == 200
        assert len(doctors.json()) == 10

        doctor = client.get("/api/v1/doctor/3", headers=staff)
        assert doctor.json()["email"] == "doctor3@clinic.test"

        assert client.get("/api/v1/doctor/99", headers=staff).status_code == 404

    def test_patient_record_visibility(self, client, seeded):
        own = client.get("/api/v1/patient/4", headers=auth_headers(HospitalRole.PATIENT, 4))
        assert own.status_code == 200
        assert own.json()["dateOfBirth"] == "1990-12-10"

        other = client.get("/api/v1/patient/5", headers=auth_headers(HospitalRole.PATIENT, 4))
        assert other.status_code == 403

        assert client.get("/api/v1/patient/5", headers=staff).status_code == 200
        assert client.get("/api/v1/patient/99", headers=staff).status_code == 404


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestBookingUnderLockContention:

    def slot_key(self):
        return SlotLock.key(2, date(2030, 1, 10), time(9, 0))

    def test_lock_timeout_is_internal_error(self, db, seeded):
        app.dependency_overrides[get_slot_lock] = lambda: SlotLock(get_redis(), blocking_timeout=0.05)
        try:
            with get_redis().lock(self.slot_key(), blocking_timeout=1):
                with TestClient(app, raise_server_exceptions=False) as client:
                    response = book(client)
        finally:
            app.dependency_overrides.pop(get_slot_lock, None)

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert body["message"] == "An unexpected error occurred"
        assert db.query(Appointment).count() == 0

    def test_waiting_booking_does_not_stall_other_requests(self, client, seeded):
        outcome = {}

        def book_in_background():
            outcome["response"] = book(client)

        with get_redis().lock(self.slot_key(), blocking_timeout=1):
            booking = threading.Thread(target=book_in_background)
            booking.start()
            time_module.sleep(0.1)

            started = time_module.monotonic()
            health = client.get("/health")
            elapsed = time_module.monotonic() - started

        booking.join(timeout=10)

        assert health.status_code == 200
        assert elapsed < 0.5
        assert outcome["response"].status_code == 201
