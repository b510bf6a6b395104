import os

# Must be set before the application modules read their settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic_appointments.main import app
from clinic_appointments.core.database import get_db, get_redis, Base, RedisMock
from clinic_appointments.core.security import UserRole, create_token_pair, get_password_hash
from clinic_appointments.models import User, Patient, Appointment

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "TestPassword123"
# Hash once, bcrypt is slow on purpose
PASSWORD_HASH = get_password_hash(PASSWORD)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(autouse=True)
def redis_mock():
    mock = RedisMock()
    app.dependency_overrides[get_redis] = lambda: mock
    yield mock
    app.dependency_overrides.pop(get_redis, None)

@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client

@pytest.fixture
def make_user(test_db):
    def _make_user(email, role=UserRole.SECRETARY, **fields):
        db = TestingSessionLocal()
        try:
            user = User(
                email=email,
                password_hash=PASSWORD_HASH,
                role=role,
                is_active=fields.pop("is_active", True),
                **fields
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            return user
        finally:
            db.close()

    return _make_user

@pytest.fixture
def make_patient(test_db):
    def _make_patient(first_name="Awa", last_name="Diop"):
        db = TestingSessionLocal()
        try:
            patient = Patient(first_name=first_name, last_name=last_name)
            db.add(patient)
            db.commit()
            db.refresh(patient)
            return patient
        finally:
            db.close()

    return _make_patient

@pytest.fixture
def admin(make_user):
    return make_user("admin@clinic.example.com", UserRole.ADMIN)

@pytest.fixture
def secretary(make_user):
    return make_user("secretary@clinic.example.com", UserRole.SECRETARY, first_name="Fatou", last_name="Ndiaye")

@pytest.fixture
def doctor(make_user):
    return make_user("doctor@clinic.example.com", UserRole.DOCTOR, first_name="Moussa", last_name="Sow")

@pytest.fixture
def other_doctor(make_user):
    return make_user("other.doctor@clinic.example.com", UserRole.DOCTOR, first_name="Aminata", last_name="Fall")

@pytest.fixture
def patient(make_patient):
    return make_patient()

def auth_headers(user):
    tokens = create_token_pair(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {tokens.access_token}"}

def count_appointments():
    db = TestingSessionLocal()
    try:
        return db.query(Appointment).count()
    finally:
        db.close()
