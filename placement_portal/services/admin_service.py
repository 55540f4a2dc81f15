"""
Admin Service - KYC decisions and the placement-cell dashboard.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import text

from placement_portal.core.config import get_settings
from placement_portal.core.exceptions import NotFoundError, ValidationError
from placement_portal.db.postgres import get_db_session, execute_raw_sql
from placement_portal.models.domain import RequestContext
from placement_portal.schemas.schemas import (
    DashboardStatsResponse, InterviewScheduleResponse, JobStatus, KycDecision, KycStatus,
    ProfileResponse, Tier, UserRole
)
from placement_portal.services.notification_service import safe_audit
from placement_portal.services.profile_service import get_profile_row, to_profile_response

logger = logging.getLogger(__name__)

settings = get_settings()


def set_kyc_status(ctx: RequestContext, user_id: str, decision: KycDecision) -> ProfileResponse:
    """Record the admin's KYC verdict on a student's profile."""
    with get_db_session() as db:
        row = db.execute(
            text("SELECT kyc_status, is_complete FROM profiles WHERE user_id = :uid"), {"uid": user_id}
        ).fetchone()
        if not row:
            raise NotFoundError("Profile not found", resource="profile")
        previous, is_complete = row

        if decision.status == KycStatus.VERIFIED and not is_complete:
            raise ValidationError("Cannot verify an incomplete profile", field="status")

        db.execute(
            text("""
                UPDATE profiles SET kyc_status = :status, kyc_remarks = :remarks, updated_at = CURRENT_TIMESTAMP
                WHERE user_id = :uid
            """),
            {"status": decision.status.value, "remarks": decision.remarks, "uid": user_id}
        )

    logger.info("Admin %s set KYC of %s: %s -> %s", ctx.user_id, user_id, previous, decision.status.value)
    safe_audit(
        "kyc_status_changed",
        user_id=user_id,
        previous=previous,
        status=decision.status.value,
        remarks=decision.remarks,
        decided_by=ctx.user_id
    )
    return to_profile_response(get_profile_row(user_id))


def _count(sql: str, params: Optional[dict] = None) -> int:
    return execute_raw_sql(sql, params)[0]["count"]


def get_dashboard_stats(now: Optional[datetime] = None) -> DashboardStatsResponse:
    now = now or datetime.utcnow()
    window = {"now": now, "until": now + timedelta(days=settings.upcoming_interview_days)}

    branch_rows = execute_raw_sql(
        """
        SELECT branch, COUNT(*) AS count FROM profiles
        WHERE kyc_status = :verified AND branch IS NOT NULL
        GROUP BY branch
        """,
        {"verified": KycStatus.VERIFIED.value}
    )
    tier_rows = execute_raw_sql("SELECT tier, COUNT(*) AS count FROM placements GROUP BY tier")
    tier_counts = {tier.value: 0 for tier in Tier}
    tier_counts.update({row["tier"]: row["count"] for row in tier_rows})

    return DashboardStatsResponse(
        total_students=_count(
            "SELECT COUNT(*) AS count FROM users WHERE role = :role", {"role": UserRole.STUDENT.value}
        ),
        verified_students=_count(
            "SELECT COUNT(*) AS count FROM profiles WHERE kyc_status = :s", {"s": KycStatus.VERIFIED.value}
        ),
        pending_verifications=_count(
            "SELECT COUNT(*) AS count FROM profiles WHERE kyc_status IN (:p, :r)",
            {"p": KycStatus.PENDING.value, "r": KycStatus.UNDER_REVIEW.value}
        ),
        active_jobs=_count(
            "SELECT COUNT(*) AS count FROM jobs WHERE status = :s", {"s": JobStatus.ACTIVE.value}
        ),
        total_applications=_count("SELECT COUNT(*) AS count FROM applications WHERE is_removed = FALSE"),
        placed_students=_count("SELECT COUNT(DISTINCT user_id) AS count FROM placements"),
        upcoming_interviews=_count(
            "SELECT COUNT(*) AS count FROM interview_schedules WHERE scheduled_at >= :now AND scheduled_at <= :until",
            window
        ),
        branch_wise_verified={row["branch"]: row["count"] for row in branch_rows},
        tier_wise_placements=tier_counts
    )


def list_upcoming_interviews(days: Optional[int] = None, now: Optional[datetime] = None) -> List[InterviewScheduleResponse]:
    now = now or datetime.utcnow()
    until = now + timedelta(days=days if days is not None else settings.upcoming_interview_days)
    rows = execute_raw_sql(
        """
        SELECT s.*, j.title AS job_title, j.company_name,
               NULLIF(TRIM(COALESCE(p.first_name, '') || ' ' || COALESCE(p.last_name, '')), '') AS student_name
        FROM interview_schedules s
        JOIN applications a ON a.application_id = s.application_id
        JOIN jobs j ON j.job_id = a.job_id
        LEFT JOIN profiles p ON p.user_id = s.user_id
        WHERE s.scheduled_at >= :now AND s.scheduled_at <= :until
        ORDER BY s.scheduled_at
        """,
        {"now": now, "until": until}
    )
    return [InterviewScheduleResponse.model_validate(row) for row in rows]
