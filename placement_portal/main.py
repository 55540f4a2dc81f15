"""
Campus Placement Portal - Main Application

FastAPI backend with:
- PostgreSQL for profiles, jobs, applications and placements
- MongoDB for notifications and audit events
- JWT verification of identity-provider tokens

Run: uvicorn placement_portal.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from placement_portal.api import api_router
from placement_portal.core.config import get_settings
from placement_portal.core.exceptions import PortalError, ValidationError
from placement_portal.core.logging import setup_logging
from placement_portal.db.mongodb import init_mongo_indexes, test_mongo_connection
from placement_portal.db.postgres import init_schema, test_postgres_connection

logger = logging.getLogger(__name__)

settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title="Campus Placement Portal",
    description="""
    Placement-cell backend for a single institution.

    ## Features
    - **Profile**: 7-step KYC wizard with server-side completeness
    - **Jobs**: Postings with CGPA, branch, batch, backlog and tier constraints
    - **Applications**: Eligibility-gated applying, one application per job
    - **Admin**: KYC verification, status updates, placements, dashboard
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# ============================================================
# ERROR HANDLERS
# ============================================================

@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.error_code}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError.from_errors(exc.errors())
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.message, "code": error.error_code}
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "code": "INTERNAL_ERROR"}
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    """Configure logging, create missing tables and MongoDB indexes."""
    setup_logging(settings.log_level, structured=settings.log_json)
    init_schema()
    logger.info("Relational schema ready")
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception:
        logger.warning("MongoDB index initialization failed", exc_info=True)


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
