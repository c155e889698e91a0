import os
import tempfile
from datetime import date
from pathlib import Path

import pytest

# Set testing environment before the app reads its settings
os.environ["TESTING"] = "1"
_db_dir = tempfile.mkdtemp(prefix="clinic-tests-")
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{Path(_db_dir) / 'test.db'}"

from fastapi.testclient import TestClient

from app.main import app
from app.core.database import Base, SessionLocal, engine, get_redis
from app.core.security import HospitalRole, create_access_token
from app.models.doctor import Doctor
from app.models.patient import BiologicalSex, Patient
from app.repositories.appointments import SqlAppointmentStore
from app.repositories.directory import SqlDirectoryStore
from app.services.appointment_service import AppointmentService
from app.services.slot_lock import SlotLock

# Appointments in tests are dated 2030; "today" is pinned before that
TODAY = date(2026, 1, 15)


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def make_doctor(db, **overrides) -> Doctor:
    n = db.query(Doctor).count() + 1
    fields = dict(
        first_name="Gregory",
        last_name=f"House{n}",
        specialization="Diagnostics",
        department="Internal Medicine",
        phone="555-0100",
        email=f"doctor{n}@clinic.test",
    )
    fields.update(overrides)
    return SqlDirectoryStore(db).save_doctor(Doctor(**fields))


def make_patient(db, **overrides) -> Patient:
    fields = dict(
        first_name="Ada",
        last_name="Lovelace",
        date_of_birth=date(1990, 12, 10),
        biological_sex=BiologicalSex.FEMALE,
        phone_number="555-0199",
        address="12 Analytical Way",
        allergies=["penicillin"],
    )
    fields.update(overrides)
    return SqlDirectoryStore(db).save_patient(Patient(**fields))


@pytest.fixture
def doctors(db):
    """Ten doctors, so ids 1..10 exist."""
    return [make_doctor(db) for _ in range(10)]


@pytest.fixture
def patients(db, doctors):
    """Eight patients, so ids 1..8 exist."""
    return [
        make_patient(db, first_name=f"Patient{i}", primary_doctor_id=doctors[0].id)
        for i in range(1, 9)
    ]


def build_service(session) -> AppointmentService:
    return AppointmentService(
        SqlDirectoryStore(session),
        SqlAppointmentStore(session),
        SlotLock(get_redis()),
        today=lambda: TODAY,
    )


@pytest.fixture
def service(db, patients):
    return build_service(db)


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


def auth_headers(role: HospitalRole, subject_id: int) -> dict:
    token = create_access_token({
        "sub": subject_id,
        "email": f"{role.value.lower()}{subject_id}@clinic.test",
        "role": role,
    })
    return {"Authorization": f"Bearer {token}"}
