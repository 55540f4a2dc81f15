"""
Job Routes

GET /jobs - List open jobs with per-job eligibility
GET /jobs/{job_id} - Job details with eligibility
POST /jobs - Create job posting (admin only)
PUT /jobs/{job_id} - Update job posting (admin only)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from placement_portal.core.auth import get_request_context, require_admin
from placement_portal.models.domain import RequestContext
from placement_portal.schemas.schemas import (
    JobCreate, JobDetailResponse, JobListResponse, JobResponse, JobStatus, JobUpdate, Tier
)
from placement_portal.services import job_service

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None, description="Search in title or company"),
    tier: Optional[Tier] = Query(None),
    status: Optional[JobStatus] = Query(None, description="Admin only"),
    ctx: RequestContext = Depends(get_request_context)
):
    """List jobs, newest first. Eligibility here is informational only."""
    return job_service.list_jobs(
        ctx, page=page, page_size=page_size, search=search,
        tier=tier.value if tier else None, status=status
    )


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: int, ctx: RequestContext = Depends(get_request_context)):
    return job_service.get_job_detail(ctx, job_id)


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, ctx: RequestContext = Depends(require_admin)):
    """Create a job posting. Admins only."""
    return job_service.create_job(ctx, job)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: int, update: JobUpdate, ctx: RequestContext = Depends(require_admin)):
    return job_service.update_job(ctx, job_id, update)
