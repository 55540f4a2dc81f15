"""
Notification Routes

GET /notifications - Own notifications, newest first
"""

import logging

from fastapi import APIRouter, Depends, Query

from placement_portal.core.auth import get_request_context
from placement_portal.models.domain import RequestContext
from placement_portal.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(20, ge=1, le=100),
    ctx: RequestContext = Depends(get_request_context)
):
    """Notifications are best-effort; an unreachable document store yields an empty list."""
    try:
        notifications = NotificationService().list_for_user(ctx.user_id, unread_only=unread_only, limit=limit)
    except Exception:
        logger.warning("Notifications for %s unavailable", ctx.user_id, exc_info=True)
        notifications = []
    return {"notifications": notifications, "count": len(notifications)}
