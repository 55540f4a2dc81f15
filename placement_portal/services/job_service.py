"""
Job Service - job postings and the student's view of them.

Postings live in ``jobs``; the allowed-branch set lives in ``job_branches``
(empty set = every branch). Listing attaches an informational eligibility
verdict per job; the apply path re-evaluates authoritatively.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import bindparam, text

from placement_portal.core.exceptions import NotFoundError, ValidationError
from placement_portal.db.postgres import get_db_session, execute_raw_sql
from placement_portal.models.domain import JobPosting, RequestContext
from placement_portal.schemas.schemas import (
    EligibilityResponse, JobCreate, JobDetailResponse, JobListItem, JobListResponse,
    JobResponse, JobStatus, JobUpdate
)
from placement_portal.services.eligibility_service import evaluate
from placement_portal.services.placement_service import load_placement_records
from placement_portal.services.profile_service import get_student_profile

logger = logging.getLogger(__name__)

JOB_COLUMNS = (
    "title", "company_name", "description", "location", "salary", "tier",
    "is_dream_offer", "min_cgpa", "eligible_batch", "max_backlogs", "status",
    "is_visible", "deadline",
)

JOB_SELECT = """
    SELECT j.*,
           (SELECT COUNT(*) FROM applications a
            WHERE a.job_id = j.job_id AND a.is_removed = FALSE) AS application_count
    FROM jobs j
"""


def _column_params(data: dict) -> dict:
    params = {}
    for column in JOB_COLUMNS:
        if column not in data:
            continue
        value = data[column]
        params[column] = value.value if hasattr(value, "value") else value
    return params


def _load_branches(db, job_ids: List[int]) -> Dict[int, List[str]]:
    branches = {job_id: [] for job_id in job_ids}
    if not job_ids:
        return branches
    result = db.execute(
        text("SELECT job_id, branch FROM job_branches WHERE job_id IN :ids ORDER BY branch")
        .bindparams(bindparam("ids", expanding=True)),
        {"ids": job_ids}
    )
    for job_id, branch in result.fetchall():
        branches[job_id].append(branch)
    return branches


def _replace_branches(db, job_id: int, branches) -> None:
    db.execute(text("DELETE FROM job_branches WHERE job_id = :jid"), {"jid": job_id})
    for branch in dict.fromkeys(branches):
        db.execute(
            text("INSERT INTO job_branches (job_id, branch) VALUES (:jid, :branch)"),
            {"jid": job_id, "branch": branch.value}
        )


def _fetch_jobs(where: str, params: dict, suffix: str = "") -> List[dict]:
    with get_db_session() as db:
        rows = db.execute(text(f"{JOB_SELECT} {where} {suffix}"), params).mappings().fetchall()
        rows = [dict(row) for row in rows]
        branches = _load_branches(db, [row["job_id"] for row in rows])
    for row in rows:
        row["allowed_branches"] = branches[row["job_id"]]
    return rows


def get_job_row(job_id: int) -> Optional[dict]:
    rows = _fetch_jobs("WHERE j.job_id = :jid", {"jid": job_id})
    return rows[0] if rows else None


def get_job_posting(job_id: int) -> JobPosting:
    row = get_job_row(job_id)
    if not row:
        raise NotFoundError("Job not found", resource="job")
    return JobPosting.model_validate(row)


def applied_job_ids(user_id: str) -> set:
    rows = execute_raw_sql("SELECT job_id FROM applications WHERE user_id = :uid", {"uid": user_id})
    return {r["job_id"] for r in rows}


# ============================================================
# ADMIN WRITES
# ============================================================

def create_job(ctx: RequestContext, job: JobCreate) -> JobResponse:
    params = _column_params(job.model_dump())
    params["created_by"] = ctx.user_id
    columns = list(params)

    with get_db_session() as db:
        result = db.execute(
            text(f"""
                INSERT INTO jobs ({', '.join(columns)})
                VALUES ({', '.join(':' + c for c in columns)})
                RETURNING job_id
            """),
            params
        )
        job_id = result.fetchone()[0]
        _replace_branches(db, job_id, job.allowed_branches)

    logger.info("Admin %s created job %s (%s, %s)", ctx.user_id, job_id, job.company_name, job.tier.value)
    return JobResponse.model_validate(get_job_row(job_id))


def update_job(ctx: RequestContext, job_id: int, update: JobUpdate) -> JobResponse:
    data = update.model_dump(exclude_unset=True)
    branches = data.pop("allowed_branches", None)
    params = _column_params({k: v for k, v in data.items() if v is not None})
    if not params and branches is None:
        raise ValidationError("No fields to update")

    with get_db_session() as db:
        found = db.execute(text("SELECT job_id FROM jobs WHERE job_id = :jid"), {"jid": job_id}).fetchone()
        if not found:
            raise NotFoundError("Job not found", resource="job")

        if params:
            assignments = ", ".join(f"{column} = :{column}" for column in params)
            db.execute(
                text(f"UPDATE jobs SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE job_id = :jid"),
                {**params, "jid": job_id}
            )
        if branches is not None:
            _replace_branches(db, job_id, update.allowed_branches)

    logger.info("Admin %s updated job %s: %s", ctx.user_id, job_id, sorted(params))
    return JobResponse.model_validate(get_job_row(job_id))


# ============================================================
# LISTING
# ============================================================

def list_jobs(
    ctx: RequestContext,
    page: int = 1,
    page_size: int = 10,
    search: Optional[str] = None,
    tier: Optional[str] = None,
    status: Optional[JobStatus] = None,
) -> JobListResponse:
    """
    Jobs visible to the caller, newest first.

    Students see visible ACTIVE jobs only; admins may filter on any status.
    """
    conditions = []
    params = {}
    if ctx.is_admin:
        if status:
            conditions.append("j.status = :status")
            params["status"] = status.value
    else:
        conditions.append("j.status = :status AND j.is_visible = TRUE")
        params["status"] = JobStatus.ACTIVE.value
    if search:
        conditions.append("(LOWER(j.title) LIKE :search OR LOWER(j.company_name) LIKE :search)")
        params["search"] = f"%{search.lower()}%"
    if tier:
        conditions.append("j.tier = :tier")
        params["tier"] = tier

    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    total = execute_raw_sql(f"SELECT COUNT(*) AS total FROM jobs j {where}", params)[0]["total"]

    offset = (page - 1) * page_size
    rows = _fetch_jobs(
        where, {**params, "limit": page_size, "offset": offset},
        "ORDER BY j.created_at DESC, j.job_id DESC LIMIT :limit OFFSET :offset"
    )

    profile = get_student_profile(ctx.user_id)
    placements = load_placement_records(ctx.user_id)
    applied = applied_job_ids(ctx.user_id)

    jobs = []
    for row in rows:
        verdict = evaluate(profile, JobPosting.model_validate(row), placements)
        jobs.append(JobListItem(
            **JobResponse.model_validate(row).model_dump(),
            has_applied=row["job_id"] in applied,
            eligibility=EligibilityResponse(**verdict.model_dump())
        ))

    return JobListResponse(jobs=jobs, total=total, page=page, page_size=page_size)


def get_job_detail(ctx: RequestContext, job_id: int) -> JobDetailResponse:
    row = get_job_row(job_id)
    if not row or (not ctx.is_admin and (row["status"] != JobStatus.ACTIVE.value or not row["is_visible"])):
        raise NotFoundError("Job not found", resource="job")

    profile = get_student_profile(ctx.user_id)
    verdict = evaluate(profile, JobPosting.model_validate(row), load_placement_records(ctx.user_id))

    return JobDetailResponse(
        job=JobResponse.model_validate(row),
        has_applied=job_id in applied_job_ids(ctx.user_id),
        profile_complete=bool(profile and profile.is_complete),
        eligibility=EligibilityResponse(**verdict.model_dump())
    )
