"""
Profile Routes

GET /profile - Get own profile
PUT /profile - Flat partial update
GET /profile/progress - Wizard progress and completion score
PUT /profile/steps/{step} - Save one wizard step (1-7)
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from placement_portal.core.auth import get_request_context
from placement_portal.models.domain import RequestContext
from placement_portal.schemas.schemas import (
    ProfileProgressResponse, ProfileResponse, ProfileSaveResponse
)
from placement_portal.services import profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(ctx: RequestContext = Depends(get_request_context)):
    """Get the caller's profile, nested by wizard section."""
    return profile_service.get_profile(ctx)


@router.put("", response_model=ProfileSaveResponse)
async def update_profile(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context)
):
    """
    Partial update with flat column names.
    Client-supplied ``id``/``user_id`` are ignored; completeness is recomputed here.
    """
    profile = profile_service.update_profile(ctx, payload)
    return ProfileSaveResponse(message="Profile updated successfully", profile=profile)


@router.get("/progress", response_model=ProfileProgressResponse)
async def get_progress(ctx: RequestContext = Depends(get_request_context)):
    return profile_service.get_progress(ctx)


@router.put("/steps/{step}", response_model=ProfileSaveResponse)
async def save_step(
    step: int,
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context)
):
    """Save one wizard step. Step 7 finishes the wizard."""
    profile, redirect_to = profile_service.save_step(ctx, step, payload)
    message = "Profile completed successfully" if redirect_to else f"Step {step} saved"
    return ProfileSaveResponse(message=message, profile=profile, redirect_to=redirect_to)
