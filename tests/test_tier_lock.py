import pytest

from placement_portal.models.domain import PlacementRecord
from placement_portal.schemas.schemas import Tier
from placement_portal.services.tier_lock import can_apply_to_tier, highest_locked_tier, tier_rank


def placements(*specs):
    return [PlacementRecord(tier=tier, is_exception=exc) for tier, exc in specs]


def test_no_placements_means_no_lock():
    assert highest_locked_tier([]) is None


def test_exception_placements_never_lock():
    assert highest_locked_tier(placements((Tier.TIER_1, True), (Tier.TIER_3, True))) is None


def test_most_prestigious_placement_wins():
    history = placements((Tier.TIER_3, False), (Tier.TIER_2, False), (Tier.TIER_1, True))
    assert highest_locked_tier(history) == Tier.TIER_2


def test_tier_rank_orders_tier_1_first():
    assert tier_rank(Tier.TIER_1) < tier_rank(Tier.TIER_2) < tier_rank(Tier.TIER_3)


@pytest.mark.parametrize("job_tier", list(Tier))
def test_tier_1_lock_blocks_everything(job_tier):
    result = can_apply_to_tier(Tier.TIER_1, job_tier, False)
    assert not result.eligible
    assert "already placed in Tier 1" in result.reason


@pytest.mark.parametrize("locked", [None, *Tier])
@pytest.mark.parametrize("job_tier", list(Tier))
def test_dream_offer_bypasses_lock(locked, job_tier):
    assert can_apply_to_tier(locked, job_tier, True).eligible


def test_tier_2_lock_allows_only_tier_1():
    assert can_apply_to_tier(Tier.TIER_2, Tier.TIER_1, False).eligible
    result = can_apply_to_tier(Tier.TIER_2, Tier.TIER_2, False)
    assert not result.eligible
    assert result.reason == "You are placed in Tier 2. You can only apply for Tier 1 jobs"
    assert not can_apply_to_tier(Tier.TIER_2, Tier.TIER_3, False).eligible


def test_tier_3_lock_allows_upward_moves():
    assert can_apply_to_tier(Tier.TIER_3, Tier.TIER_1, False).eligible
    assert can_apply_to_tier(Tier.TIER_3, Tier.TIER_2, False).eligible
    assert not can_apply_to_tier(Tier.TIER_3, Tier.TIER_3, False).eligible


def test_string_tiers_are_accepted():
    assert can_apply_to_tier("TIER_2", "TIER_1", False).eligible
    assert not can_apply_to_tier("TIER_2", "TIER_2", False).eligible
