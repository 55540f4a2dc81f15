"""
Notification & Audit Service - MongoDB writes off the critical path.

Collections:
1. notifications - messages shown to a student (shortlisted, interview scheduled)
2. audit_events  - profile created/updated, KYC decisions, application removals

Callers go through ``safe_notify`` / ``safe_audit``: a MongoDB outage is
logged and swallowed so the primary operation still succeeds.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo.collection import Collection

from placement_portal.db.mongodb import get_collection, COLLECTIONS
from placement_portal.schemas.schemas import ApplicationStatus

logger = logging.getLogger(__name__)


def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


class NotificationService:
    """Per-student notifications."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["notifications"])

    def create(self, user_id: str, title: str, message: str, notification_type: str,
               job_id: Optional[int] = None) -> str:
        doc = {
            "user_id": user_id,
            "title": title,
            "message": message,
            "type": notification_type,
            "job_id": job_id,
            "is_read": False,
            "created_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)

    def list_for_user(self, user_id: str, unread_only: bool = False, limit: int = 20) -> List[dict]:
        query: Dict[str, Any] = {"user_id": user_id}
        if unread_only:
            query["is_read"] = False
        docs = self.collection.find(query).sort("created_at", -1).limit(limit)
        return [serialize_doc(doc) for doc in docs]


class AuditLogService:
    """Security-relevant events, append-only."""

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["audit_events"])

    def record(self, event: str, user_id: Optional[str] = None, **details) -> str:
        doc = {
            "event": event,
            "user_id": user_id,
            "details": details,
            "created_at": datetime.utcnow()
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)


def status_notification(status: ApplicationStatus, job_title: str, company_name: str) -> Optional[dict]:
    """Notification content for a status change, or None when nobody is told."""
    if status == ApplicationStatus.SHORTLISTED:
        return {
            "title": "You have been shortlisted",
            "message": f"Your application for {job_title} at {company_name} has been shortlisted.",
        }
    if status == ApplicationStatus.INTERVIEW_SCHEDULED:
        return {
            "title": "Interview scheduled",
            "message": f"Interview scheduled for {job_title} at {company_name}.",
        }
    return None


def safe_notify(user_id: str, status: ApplicationStatus, job_id: int, job_title: str,
                company_name: str) -> Optional[str]:
    content = status_notification(status, job_title, company_name)
    if content is None:
        return None
    try:
        return NotificationService().create(
            user_id=user_id,
            title=content["title"],
            message=content["message"],
            notification_type=status.value,
            job_id=job_id
        )
    except Exception:
        logger.warning("Notification for user %s (job %s) not stored", user_id, job_id, exc_info=True)
        return None


def safe_audit(event: str, user_id: Optional[str] = None, **details) -> Optional[str]:
    try:
        return AuditLogService().record(event, user_id=user_id, **details)
    except Exception:
        logger.warning("Audit event '%s' not stored", event, exc_info=True)
        return None
