import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
import requests
from fastapi.testclient import TestClient

from database import Base, engine, SessionLocal
from main import app
from models.students import Student
from models.parents import ParentDetail

PROVIDER_VARS = ["GREEN_API_INSTANCE", "GREEN_API_TOKEN", "ULTRAMSG_INSTANCE", "ULTRAMSG_TOKEN"]


@pytest.fixture(autouse=True)
def fresh_db(monkeypatch):
    for var in PROVIDER_VARS:
        monkeypatch.delenv(var, raising=False)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    res = client.post("/auth/signup", json={"email": "admin@school.edu", "password": "secret123"})
    assert res.status_code == 200
    return client


@pytest.fixture
def make_student(db):
    def _make(roll_no, name="Student", class_name="10-A", contact=None, is_enrolled=False, identifier_code=None,
              created_at=None):
        extra = {"created_at": created_at} if created_at else {}
        db.add(Student(
            roll_no=roll_no,
            name=name,
            class_name=class_name,
            is_enrolled=is_enrolled,
            identifier_code=identifier_code,
            **extra,
        ))
        if contact:
            db.add(ParentDetail(roll_no=roll_no, parent_name=f"Parent of {name}", contact=contact))
        db.commit()
        return roll_no
    return _make


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self.payload


@pytest.fixture
def fake_response():
    return FakeResponse
