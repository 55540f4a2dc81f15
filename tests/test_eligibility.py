from datetime import datetime, timedelta

import pytest

from placement_portal.models.domain import JobPosting, PlacementRecord, StudentProfile
from placement_portal.schemas.schemas import Branch, JobStatus, Tier
from placement_portal.services.eligibility_service import PROFILE_INCOMPLETE_REASON, evaluate


def make_profile(**overrides):
    data = {
        "user_id": "student-1",
        "cgpa": 7.0,
        "branch": "CSE",
        "batch": "2025",
        "active_backlogs": False,
        "is_complete": True,
    }
    data.update(overrides)
    return StudentProfile(**data)


def make_job(**overrides):
    data = {
        "job_id": 1,
        "min_cgpa": 7.5,
        "allowed_branches": ["CSE"],
        "eligible_batch": "2025",
        "max_backlogs": 0,
        "status": "ACTIVE",
    }
    data.update(overrides)
    return JobPosting(**data)


def test_low_cgpa_rejected_with_both_values():
    result = evaluate(make_profile(), make_job())
    assert not result.eligible
    assert "Minimum CGPA required: 7.5" in result.reason
    assert "Your CGPA: 7.00" in result.reason


def test_meeting_every_constraint_is_eligible():
    result = evaluate(make_profile(cgpa=8.0), make_job())
    assert result.eligible
    assert result.reason is None


def test_final_cgpa_preferred_over_running_cgpa():
    assert evaluate(make_profile(cgpa=6.0, final_cgpa=8.2), make_job()).eligible


@pytest.mark.parametrize("overrides", [
    {},
    {"cgpa": 10.0},
    {"branch": "ME", "batch": "2019", "active_backlogs": True},
])
def test_incomplete_profile_always_rejected(overrides):
    result = evaluate(make_profile(is_complete=False, **overrides), make_job(min_cgpa=None))
    assert not result.eligible
    assert result.reason == PROFILE_INCOMPLETE_REASON


def test_missing_profile_treated_as_incomplete():
    assert evaluate(None, make_job()).reason == PROFILE_INCOMPLETE_REASON


@pytest.mark.parametrize("branch", list(Branch) + [None])
def test_empty_allowed_branches_never_rejects_on_branch(branch):
    result = evaluate(make_profile(cgpa=9.0, branch=branch), make_job(allowed_branches=[]))
    assert result.eligible


def test_branch_outside_allowed_set_rejected():
    result = evaluate(make_profile(cgpa=9.0, branch="ECE"), make_job())
    assert result.reason == "Your branch (ECE) is not eligible for this job"


def test_batch_mismatch_rejected():
    result = evaluate(make_profile(cgpa=9.0, batch="2026"), make_job())
    assert result.reason == "Only 2025 batch is eligible"


def test_active_backlog_rejected_only_when_job_allows_none():
    profile = make_profile(cgpa=9.0, active_backlogs=True)
    assert evaluate(profile, make_job()).reason == "No active backlogs allowed"
    assert evaluate(profile, make_job(max_backlogs=2)).eligible
    assert evaluate(profile, make_job(max_backlogs=None)).eligible


@pytest.mark.parametrize("status", [JobStatus.CLOSED, JobStatus.DRAFT])
def test_inactive_job_rejected_first(status):
    result = evaluate(make_profile(is_complete=False), make_job(status=status))
    assert result.reason == "This job is no longer accepting applications"


def test_past_deadline_rejected():
    now = datetime(2026, 3, 1, 12, 0)
    job = make_job(deadline=now - timedelta(minutes=1))
    assert evaluate(make_profile(cgpa=9.0), job, now=now).reason == "Application deadline has passed"
    assert evaluate(make_profile(cgpa=9.0), make_job(deadline=now + timedelta(days=1)), now=now).eligible


def test_tier_lock_checked_before_cgpa():
    history = [PlacementRecord(tier=Tier.TIER_1)]
    result = evaluate(make_profile(), make_job(tier=Tier.TIER_2), history)
    assert "already placed in Tier 1" in result.reason


def test_dream_offer_ignores_tier_lock():
    history = [PlacementRecord(tier=Tier.TIER_1)]
    job = make_job(tier=Tier.TIER_3, is_dream_offer=True)
    assert evaluate(make_profile(cgpa=8.0), job, history).eligible
