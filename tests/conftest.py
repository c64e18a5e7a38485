import os

# Must be set before the application settings are imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clinic.main import app
from clinic.core.database import get_db, get_redis, Base, RedisMock

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

API = "/api/v1"
DAY = "2030-01-07"

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(scope="function")
def test_db():
    # Create tables
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
    redis_mock = RedisMock()
    app.dependency_overrides[get_redis] = lambda: redis_mock
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.pop(get_redis, None)

def at(clock: str) -> str:
    """ISO timestamp on the test day, e.g. at("10:30")."""
    return f"{DAY}T{clock}:00"

def register_user(client, username: str, role: str, password: str = "Secret123") -> dict:
    response = client.post(f"{API}/auth/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
        "role": role,
    })
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        "id": data["user"]["id"],
        "username": username,
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }

def book(client, headers, clinician_id, patient_id, start, end, note=None):
    payload = {
        "clinicianId": clinician_id,
        "patientId": patient_id,
        "startTime": start,
        "endTime": end,
    }
    if note is not None:
        payload["note"] = note
    return client.post(f"{API}/appointments", json=payload, headers=headers)

@pytest.fixture
def admin(client):
    return register_user(client, "admin", "ADMIN")

@pytest.fixture
def reception(client):
    return register_user(client, "frontdesk", "RECEPTION")

@pytest.fixture
def clinician(client):
    return register_user(client, "dr_lee", "CLINICIAN")

@pytest.fixture
def other_clinician(client):
    return register_user(client, "dr_park", "CLINICIAN")

test_patient_data = {
    "firstName": "Somchai",
    "lastName": "Jaidee",
    "gender": "male",
    "dateOfBirth": "1985-04-12",
    "phoneNumber": "0812345678",
    "email": "somchai@example.com",
    "allergies": "penicillin",
}

@pytest.fixture
def patient(client, reception):
    response = client.post(
        f"{API}/patients", json=test_patient_data, headers=reception["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()
