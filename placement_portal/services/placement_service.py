"""
Placement Service - secured offers, the input to the tier-lock.
"""

import logging
from typing import List, Optional

from sqlalchemy import text

from placement_portal.core.exceptions import NotFoundError
from placement_portal.db.postgres import execute_raw_sql, fetch_one, get_db_session
from placement_portal.models.domain import PlacementRecord, RequestContext
from placement_portal.schemas.schemas import PlacementCreate, PlacementResponse
from placement_portal.services.notification_service import safe_audit

logger = logging.getLogger(__name__)

PLACEMENT_SELECT = """
    SELECT pl.*, NULLIF(TRIM(COALESCE(p.first_name, '') || ' ' || COALESCE(p.last_name, '')), '') AS student_name
    FROM placements pl
    LEFT JOIN profiles p ON p.user_id = pl.user_id
"""


def load_placement_records(user_id: str) -> List[PlacementRecord]:
    rows = execute_raw_sql(
        "SELECT tier, is_exception FROM placements WHERE user_id = :uid", {"uid": user_id}
    )
    return [PlacementRecord.model_validate(row) for row in rows]


def record_placement(ctx: RequestContext, placement: PlacementCreate) -> PlacementResponse:
    with get_db_session() as db:
        user = db.execute(
            text("SELECT user_id FROM users WHERE user_id = :uid"), {"uid": placement.user_id}
        ).fetchone()
        if not user:
            raise NotFoundError("Student not found", resource="user")

        if placement.job_id is not None:
            job = db.execute(
                text("SELECT job_id FROM jobs WHERE job_id = :jid"), {"jid": placement.job_id}
            ).fetchone()
            if not job:
                raise NotFoundError("Job not found", resource="job")

        result = db.execute(
            text("""
                INSERT INTO placements (user_id, job_id, company_name, tier, is_exception, package_lpa)
                VALUES (:user_id, :job_id, :company_name, :tier, :is_exception, :package_lpa)
                RETURNING placement_id
            """),
            {
                "user_id": placement.user_id,
                "job_id": placement.job_id,
                "company_name": placement.company_name,
                "tier": placement.tier.value,
                "is_exception": placement.is_exception,
                "package_lpa": placement.package_lpa
            }
        )
        placement_id = result.fetchone()[0]

    logger.info(
        "Admin %s recorded placement %s for %s (%s%s)",
        ctx.user_id, placement_id, placement.user_id, placement.tier.value,
        ", exception" if placement.is_exception else ""
    )
    safe_audit(
        "placement_recorded",
        user_id=placement.user_id,
        placement_id=placement_id,
        tier=placement.tier.value,
        is_exception=placement.is_exception,
        recorded_by=ctx.user_id
    )

    return PlacementResponse.model_validate(
        fetch_one(f"{PLACEMENT_SELECT} WHERE pl.placement_id = :pid", {"pid": placement_id})
    )


def list_placements(user_id: Optional[str] = None) -> List[PlacementResponse]:
    sql = PLACEMENT_SELECT
    params = {}
    if user_id:
        sql += " WHERE pl.user_id = :uid"
        params["uid"] = user_id
    sql += " ORDER BY pl.placed_at DESC, pl.placement_id DESC"
    return [PlacementResponse.model_validate(row) for row in execute_raw_sql(sql, params)]
