"""
Shared fixtures for the ward dashboard tests.

Every test gets its own in-memory SQLite database. ``StaticPool`` keeps the
single connection alive so the table created on connect is visible to the
sessions the app opens from its worker threads.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from ehr.app.core.database import Database
from ehr.app.main import create_app
from ehr.app.models.patient import Patient
from ehr.app.services import patients as patient_service


def make_database():
    return Database(
        "sqlite+pysqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


@pytest.fixture
def database():
    db = make_database()
    yield db
    db.close()


@pytest.fixture
def session(database):
    """A connected session for calling the service layer directly."""
    database.connect()
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def add_patient(session):
    """
    Insert a patient through the service and return it.

    Keyword arguments use the form field names (``fullName``, ``roomNumber``...).
    """

    def _add(**fields):
        payload = {"fullName": "Test Patient", "age": "40", "condition": "Observation"}
        payload.update(fields)
        result = patient_service.create_patient(session, payload)
        assert result.success, result.error
        return result.patient

    return _add


def stored_patients(database):
    with database.SessionLocal() as db:
        return db.query(Patient).all()
