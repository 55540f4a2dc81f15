"""
Admin Routes (ADMIN role only)

GET /admin/applications - All applications with filters
DELETE /admin/applications/{id} - Soft-remove an application
PUT /admin/profiles/{user_id}/kyc - KYC verdict
POST /admin/placements - Record a placement
GET /admin/placements - List placements
GET /admin/stats - Dashboard counts
GET /admin/interviews - Upcoming interviews
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from placement_portal.core.auth import require_admin
from placement_portal.models.domain import RequestContext
from placement_portal.schemas.schemas import (
    ApplicationListResponse, ApplicationResponse, ApplicationStatus, DashboardStatsResponse,
    InterviewScheduleResponse, KycDecision, PlacementCreate, PlacementResponse, ProfileResponse
)
from placement_portal.services import admin_service, application_service, placement_service

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/applications", response_model=ApplicationListResponse)
async def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[ApplicationStatus] = Query(None),
    job_id: Optional[int] = Query(None),
    include_removed: bool = Query(False)
):
    return application_service.list_all_applications(
        page=page, limit=limit, status=status, job_id=job_id, include_removed=include_removed
    )


@router.delete("/applications/{application_id}", response_model=ApplicationResponse)
async def remove_application(application_id: int, ctx: RequestContext = Depends(require_admin)):
    """Soft removal; the student cannot re-apply to the same job."""
    return application_service.remove_application(ctx, application_id)


@router.put("/profiles/{user_id}/kyc", response_model=ProfileResponse)
async def set_kyc_status(user_id: str, decision: KycDecision, ctx: RequestContext = Depends(require_admin)):
    return admin_service.set_kyc_status(ctx, user_id, decision)


@router.post("/placements", response_model=PlacementResponse, status_code=201)
async def record_placement(placement: PlacementCreate, ctx: RequestContext = Depends(require_admin)):
    """Record a secured offer. Non-exception placements lock lower tiers for the student."""
    return placement_service.record_placement(ctx, placement)


@router.get("/placements", response_model=List[PlacementResponse])
async def list_placements(user_id: Optional[str] = Query(None)):
    return placement_service.list_placements(user_id)


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_stats():
    return admin_service.get_dashboard_stats()


@router.get("/interviews", response_model=List[InterviewScheduleResponse])
async def list_interviews(days: Optional[int] = Query(None, ge=1, le=90)):
    return admin_service.list_upcoming_interviews(days)
