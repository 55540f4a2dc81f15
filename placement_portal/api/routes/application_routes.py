"""
Application Routes

POST /applications - Apply to a job (eligibility enforced)
GET /applications - Own applications, paginated
PUT /applications/{application_id}/status - Update status (admin only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from placement_portal.core.auth import get_request_context, require_admin
from placement_portal.models.domain import RequestContext
from placement_portal.schemas.schemas import (
    ApplicationCreate, ApplicationCreatedResponse, ApplicationListResponse, ApplicationStatus,
    ApplicationStatusUpdate, StatusUpdateResponse
)
from placement_portal.services import application_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", response_model=ApplicationCreatedResponse, status_code=201)
async def apply(data: ApplicationCreate, ctx: RequestContext = Depends(get_request_context)):
    """
    Apply to a job.
    400 carries the eligibility reason, or the already-applied message.
    """
    return application_service.apply_to_job(ctx, data.job_id)


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    status: Optional[ApplicationStatus] = Query(None),
    ctx: RequestContext = Depends(get_request_context)
):
    return application_service.list_own_applications(ctx, page=page, limit=limit, status=status)


@router.put("/{application_id}/status", response_model=StatusUpdateResponse)
async def update_status(
    application_id: int,
    update: ApplicationStatusUpdate,
    ctx: RequestContext = Depends(require_admin)
):
    """Transition an application; INTERVIEW_SCHEDULED with a date also books the interview."""
    return application_service.update_status(ctx, application_id, update)
