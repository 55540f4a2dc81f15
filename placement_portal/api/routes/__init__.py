"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placement_portal.api.routes.profile_routes import router as profile_router
from placement_portal.api.routes.job_routes import router as job_router
from placement_portal.api.routes.application_routes import router as application_router
from placement_portal.api.routes.admin_routes import router as admin_router
from placement_portal.api.routes.notification_routes import router as notification_router
from placement_portal.schemas.schemas import ErrorResponse

# Every PortalError renders as ErrorResponse (see main.py)
api_router = APIRouter(responses={
    400: {"model": ErrorResponse, "description": "Validation, eligibility or conflict"},
    401: {"model": ErrorResponse, "description": "Missing or invalid token"},
    403: {"model": ErrorResponse, "description": "Admin access required"},
    404: {"model": ErrorResponse, "description": "Not found"},
})

api_router.include_router(profile_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(admin_router)
api_router.include_router(notification_router)
