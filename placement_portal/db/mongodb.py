"""
MongoDB - notifications and audit events.

Both are append-mostly documents that nothing transactional depends on:
PostgreSQL remains the source of truth for profiles, jobs and applications,
and a MongoDB outage only costs notifications and audit history.
"""
import logging

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from placement_portal.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

COLLECTIONS = {
    "notifications": "notifications",
    "audit_events": "audit_events"
}

# Lazily created; pymongo pools connections inside the client
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    global _client
    if _client is None:
        # Fail fast so a down server never stalls a request for 30s
        _client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms
        )
    return _client


def get_mongo_db() -> Database:
    global _db
    if _db is None:
        _db = get_mongo_client()[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """One of ``COLLECTIONS``; unknown names are a programming error."""
    if name not in COLLECTIONS.values():
        raise KeyError(f"Unknown collection: {name}")
    return get_mongo_db()[name]


def test_mongo_connection() -> bool:
    try:
        get_mongo_client().admin.command("ping")
        return True
    except Exception:
        logger.warning("MongoDB connection failed", exc_info=True)
        return False


def init_mongo_indexes() -> None:
    """Called once at startup."""
    db = get_mongo_db()

    # Unread notifications per student, newest first
    db[COLLECTIONS["notifications"]].create_index([
        ("user_id", 1),
        ("is_read", 1),
        ("created_at", -1)
    ])

    # Audit trail per student and per event type
    db[COLLECTIONS["audit_events"]].create_index([("user_id", 1), ("created_at", -1)])
    db[COLLECTIONS["audit_events"]].create_index([("event", 1), ("created_at", -1)])

    logger.info("MongoDB indexes created")
