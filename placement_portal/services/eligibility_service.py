"""
Eligibility Evaluator

Decides whether a student may apply to a job. Pure function over records the
caller already fetched; the listing endpoint uses it for display and the apply
endpoint uses it as the authoritative gate.

Checks run in a fixed order and the first failure wins:
1. job is ACTIVE and its deadline has not passed
2. profile is complete
3. tier-lock (see tier_lock.py)
4. minimum CGPA
5. allowed branches (empty list = every branch)
6. eligible batch
7. backlogs (only when the job allows zero)
"""

from datetime import datetime
from typing import Iterable, Optional

from placement_portal.models.domain import (
    EligibilityResult, JobPosting, PlacementRecord, StudentProfile
)
from placement_portal.schemas.schemas import JobStatus
from placement_portal.services.tier_lock import can_apply_to_tier, highest_locked_tier

PROFILE_INCOMPLETE_REASON = "Complete your profile before applying to jobs"


def check_job_open(job: JobPosting, now: Optional[datetime] = None) -> EligibilityResult:
    if job.status != JobStatus.ACTIVE:
        return EligibilityResult.reject("This job is no longer accepting applications")
    now = now or datetime.utcnow()
    if job.deadline is not None and job.deadline < now:
        return EligibilityResult.reject("Application deadline has passed")
    return EligibilityResult.ok()


def evaluate(
    profile: Optional[StudentProfile],
    job: JobPosting,
    placements: Iterable[PlacementRecord] = (),
    now: Optional[datetime] = None,
) -> EligibilityResult:
    """Admit or reject ``profile`` for ``job``, with the first failing reason."""
    result = check_job_open(job, now)
    if not result.eligible:
        return result

    if profile is None or not profile.is_complete:
        return EligibilityResult.reject(PROFILE_INCOMPLETE_REASON)

    result = can_apply_to_tier(highest_locked_tier(placements), job.tier, job.is_dream_offer)
    if not result.eligible:
        return result

    cgpa = profile.effective_cgpa
    if job.min_cgpa and cgpa < job.min_cgpa:
        return EligibilityResult.reject(
            f"Minimum CGPA required: {job.min_cgpa:g}. Your CGPA: {cgpa:.2f}"
        )

    if job.allowed_branches and profile.branch not in job.allowed_branches:
        branch = profile.branch.value if profile.branch else "not set"
        return EligibilityResult.reject(f"Your branch ({branch}) is not eligible for this job")

    if job.eligible_batch and profile.batch != job.eligible_batch:
        return EligibilityResult.reject(f"Only {job.eligible_batch} batch is eligible")

    if job.max_backlogs == 0 and profile.active_backlogs:
        return EligibilityResult.reject("No active backlogs allowed")

    return EligibilityResult.ok()
