"""
Application Service

Apply flow (student):
1. job must exist (404 otherwise)
2. the (job, student) pair must not be claimed yet, removed or not
3. Eligibility Evaluator over the fresh profile, job and placements
4. INSERT; the unique (job_id, user_id) constraint settles a racing apply

Admin flow: status transitions (with interview scheduling and student
notifications), listing, and soft removal.
"""

import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from placement_portal.core.exceptions import ConflictError, EligibilityError, NotFoundError
from placement_portal.db.postgres import execute_raw_sql, fetch_one, get_db_session
from placement_portal.models.domain import RequestContext
from placement_portal.schemas.schemas import (
    ApplicationCreatedResponse, ApplicationListResponse, ApplicationResponse, ApplicationStatus,
    ApplicationStatusUpdate, Pagination, StatusUpdateResponse
)
from placement_portal.services.eligibility_service import evaluate
from placement_portal.services.job_service import get_job_posting
from placement_portal.services.notification_service import safe_audit, safe_notify
from placement_portal.services.placement_service import load_placement_records
from placement_portal.services.profile_service import get_student_profile

logger = logging.getLogger(__name__)

ALREADY_APPLIED = "You have already applied to this job"
REMOVED_BY_ADMIN = "Your application was removed by admin"

APPLICATION_SELECT = """
    SELECT a.*, j.title AS job_title, j.company_name, j.tier,
           NULLIF(TRIM(COALESCE(p.first_name, '') || ' ' || COALESCE(p.last_name, '')), '') AS student_name,
           p.branch
    FROM applications a
    JOIN jobs j ON j.job_id = a.job_id
    LEFT JOIN profiles p ON p.user_id = a.user_id
"""


def _find_existing(job_id: int, user_id: str) -> Optional[dict]:
    return fetch_one(
        "SELECT application_id, is_removed FROM applications WHERE job_id = :jid AND user_id = :uid",
        {"jid": job_id, "uid": user_id}
    )


def get_application(application_id: int) -> ApplicationResponse:
    row = fetch_one(f"{APPLICATION_SELECT} WHERE a.application_id = :aid", {"aid": application_id})
    if not row:
        raise NotFoundError("Application not found", resource="application")
    return ApplicationResponse.model_validate(row)


def _paginate(where: str, params: dict, page: int, limit: int) -> ApplicationListResponse:
    total = execute_raw_sql(
        f"SELECT COUNT(*) AS total FROM applications a JOIN jobs j ON j.job_id = a.job_id {where}", params
    )[0]["total"]
    rows = execute_raw_sql(
        f"{APPLICATION_SELECT} {where} ORDER BY a.applied_at DESC, a.application_id DESC LIMIT :limit OFFSET :offset",
        {**params, "limit": limit, "offset": (page - 1) * limit}
    )
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(row) for row in rows],
        pagination=Pagination(total=total, page=page, limit=limit, pages=(total + limit - 1) // limit)
    )


# ============================================================
# STUDENT
# ============================================================

def apply_to_job(ctx: RequestContext, job_id: int) -> ApplicationCreatedResponse:
    job = get_job_posting(job_id)

    existing = _find_existing(job_id, ctx.user_id)
    if existing:
        raise ConflictError(REMOVED_BY_ADMIN if existing["is_removed"] else ALREADY_APPLIED)

    profile = get_student_profile(ctx.user_id)
    verdict = evaluate(profile, job, load_placement_records(ctx.user_id))
    if not verdict.eligible:
        logger.info("User %s rejected for job %s: %s", ctx.user_id, job_id, verdict.reason)
        raise EligibilityError(verdict.reason)

    try:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    INSERT INTO applications (job_id, user_id, status, resume_used)
                    VALUES (:jid, :uid, :status, :resume)
                    RETURNING application_id
                """),
                {
                    "jid": job_id,
                    "uid": ctx.user_id,
                    "status": ApplicationStatus.APPLIED.value,
                    "resume": profile.resume
                }
            )
            application_id = result.fetchone()[0]
    except IntegrityError:
        logger.info("Duplicate apply by %s for job %s settled by unique constraint", ctx.user_id, job_id)
        raise ConflictError(ALREADY_APPLIED)

    logger.info("User %s applied to job %s (application %s)", ctx.user_id, job_id, application_id)
    return ApplicationCreatedResponse(
        application=get_application(application_id),
        message=f"Applied to {job.title} at {job.company_name}"
    )


def list_own_applications(ctx: RequestContext, page: int = 1, limit: int = 10,
                          status: Optional[ApplicationStatus] = None) -> ApplicationListResponse:
    where = "WHERE a.user_id = :uid AND a.is_removed = FALSE"
    params = {"uid": ctx.user_id}
    if status:
        where += " AND a.status = :status"
        params["status"] = status.value
    return _paginate(where, params, page, limit)


# ============================================================
# ADMIN
# ============================================================

def list_all_applications(
    page: int = 1,
    limit: int = 20,
    status: Optional[ApplicationStatus] = None,
    job_id: Optional[int] = None,
    include_removed: bool = False,
) -> ApplicationListResponse:
    conditions = []
    params = {}
    if not include_removed:
        conditions.append("a.is_removed = FALSE")
    if status:
        conditions.append("a.status = :status")
        params["status"] = status.value
    if job_id is not None:
        conditions.append("a.job_id = :jid")
        params["jid"] = job_id
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return _paginate(where, params, page, limit)


def update_status(ctx: RequestContext, application_id: int, update: ApplicationStatusUpdate) -> StatusUpdateResponse:
    """
    Move an application to ``update.status``.

    INTERVIEW_SCHEDULED with an ``interview_date`` also creates an interview
    schedule in the same transaction. The student notification goes out
    after commit and never fails the update.
    """
    schedule_id = None
    with get_db_session() as db:
        row = db.execute(
            text("""
                SELECT a.user_id, a.job_id, j.title, j.company_name
                FROM applications a JOIN jobs j ON j.job_id = a.job_id
                WHERE a.application_id = :aid
            """),
            {"aid": application_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Application not found", resource="application")
        user_id, job_id, job_title, company_name = row

        params = {"aid": application_id, "status": update.status.value}
        assignments = "status = :status"
        if update.feedback is not None:
            assignments += ", feedback = :feedback"
            params["feedback"] = update.feedback
        db.execute(
            text(f"UPDATE applications SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE application_id = :aid"),
            params
        )

        if update.status == ApplicationStatus.INTERVIEW_SCHEDULED and update.interview_date:
            result = db.execute(
                text("""
                    INSERT INTO interview_schedules (application_id, user_id, scheduled_at)
                    VALUES (:aid, :uid, :at)
                    RETURNING schedule_id
                """),
                {"aid": application_id, "uid": user_id, "at": update.interview_date}
            )
            schedule_id = result.fetchone()[0]

    logger.info("Admin %s moved application %s to %s", ctx.user_id, application_id, update.status.value)
    safe_notify(user_id, update.status, job_id, job_title, company_name)

    return StatusUpdateResponse(updated=get_application(application_id), interview_schedule_id=schedule_id)


def remove_application(ctx: RequestContext, application_id: int) -> ApplicationResponse:
    """Soft removal: the row stays so the student cannot re-apply."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                UPDATE applications SET is_removed = TRUE, updated_at = CURRENT_TIMESTAMP
                WHERE application_id = :aid
            """),
            {"aid": application_id}
        )
        if result.rowcount == 0:
            raise NotFoundError("Application not found", resource="application")

    logger.info("Admin %s removed application %s", ctx.user_id, application_id)
    application = get_application(application_id)
    safe_audit("application_removed", user_id=application.user_id,
               application_id=application_id, removed_by=ctx.user_id)
    return application
