import os
import tempfile

# Settings are read at import time; point them at a throwaway SQLite file first
_DB_DIR = tempfile.mkdtemp(prefix="placement-portal-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'portal.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import mongomock
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event, text

from placement_portal.core.auth import create_access_token
from placement_portal.db import mongodb
from placement_portal.db.postgres import engine, get_db_session
from placement_portal.db.tables import metadata
from placement_portal.main import app

STUDENT_ID = "student-1"
ADMIN_ID = "admin-1"


@pytest.fixture(autouse=True)
def database():
    metadata.drop_all(bind=engine)
    metadata.create_all(bind=engine)
    yield engine


@pytest.fixture(autouse=True)
def mongo():
    mongodb._client = mongomock.MongoClient()
    mongodb._db = None
    yield mongodb.get_mongo_db()
    mongodb._client = None
    mongodb._db = None


@pytest.fixture
def client():
    return TestClient(app)


def auth_headers(user_id: str, email: str = None, name: str = None) -> dict:
    token = create_access_token({"sub": user_id, "email": email or f"{user_id}@gmail.com", "name": name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers():
    return auth_headers(STUDENT_ID)


@pytest.fixture
def admin_headers():
    with get_db_session() as db:
        db.execute(
            text("INSERT INTO users (user_id, email, name, role) VALUES (:id, :email, 'Placement Cell', 'ADMIN')"),
            {"id": ADMIN_ID, "email": "cell@gmail.com"}
        )
    return auth_headers(ADMIN_ID, email="cell@gmail.com")


def insert_profile(user_id: str = STUDENT_ID, **columns) -> None:
    """Write a profile row straight to the store, creating the user if needed."""
    row = {
        "first_name": "ASHA",
        "last_name": "RAO",
        "branch": "CSE",
        "batch": "2025",
        "cgpa": 8.0,
        "final_cgpa": None,
        "active_backlogs": False,
        "resume": "https://files.example.com/asha.pdf",
        "calling_mobile": "9876543210",
        "current_address": "12 MG Road, Bengaluru",
        "is_complete": True,
        "kyc_status": "PENDING",
        "completion_step": 7,
    }
    row.update(columns)
    with get_db_session() as db:
        exists = db.execute(text("SELECT 1 FROM users WHERE user_id = :id"), {"id": user_id}).fetchone()
        if not exists:
            db.execute(
                text("INSERT INTO users (user_id, email, role) VALUES (:id, :email, 'STUDENT')"),
                {"id": user_id, "email": f"{user_id}@gmail.com"}
            )
        names = ["user_id", *row]
        db.execute(
            text(f"INSERT INTO profiles ({', '.join(names)}) VALUES ({', '.join(':' + n for n in names)})"),
            {"user_id": user_id, **row}
        )


def insert_placement(user_id: str = STUDENT_ID, tier: str = "TIER_3", is_exception: bool = False) -> None:
    with get_db_session() as db:
        db.execute(
            text("""
                INSERT INTO placements (user_id, company_name, tier, is_exception)
                VALUES (:uid, 'Acme Corp', :tier, :exc)
            """),
            {"uid": user_id, "tier": tier, "exc": is_exception}
        )


@pytest.fixture
def create_job(client, admin_headers):
    """Post a job as admin and return its JSON."""
    def _create(**overrides):
        body = {
            "title": "Software Engineer",
            "company_name": "Globex",
            "tier": "TIER_2",
            "min_cgpa": 7.5,
            "allowed_branches": ["CSE"],
            "eligible_batch": "2025",
            "max_backlogs": 0,
            "status": "ACTIVE",
        }
        body.update(overrides)
        response = client.post("/api/jobs", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _create


@pytest.fixture
def seed_profile():
    return insert_profile


@pytest.fixture
def seed_placement():
    return insert_placement


@pytest.fixture
def insert_first(database):
    """
    Simulate a concurrent writer: the first statement starting with
    ``prefix`` is preceded by ``sql`` committed on another connection.
    """
    hooks = []

    def _arm(prefix: str, sql: str, params: dict = None):
        fired = []

        def before_execute(conn, cursor, statement, parameters, context, executemany):
            if fired or not statement.lstrip().startswith(prefix):
                return
            fired.append(statement)
            with database.begin() as other:
                other.execute(text(sql), params or {})

        event.listen(database, "before_cursor_execute", before_execute)
        hooks.append(before_execute)
        return fired

    yield _arm
    for hook in hooks:
        event.remove(database, "before_cursor_execute", hook)
