"""
Tier-Lock Resolver

A student who already holds a placement may only apply upward:

    locked at TIER_1 -> blocked from further placements
    locked at TIER_2 -> TIER_1 jobs only
    locked at TIER_3 -> TIER_1 or TIER_2 jobs
    dream offers     -> always open, regardless of the lock

Placements flagged ``is_exception`` never contribute to the lock.
"""

from typing import Iterable, Optional

from placement_portal.models.domain import EligibilityResult, PlacementRecord
from placement_portal.schemas.schemas import Tier

# Highest priority first
TIER_PRIORITY = (Tier.TIER_1, Tier.TIER_2, Tier.TIER_3)


def tier_rank(tier: Tier) -> int:
    """Position in TIER_PRIORITY; lower is more prestigious."""
    return TIER_PRIORITY.index(Tier(tier))


def highest_locked_tier(placements: Iterable[PlacementRecord]) -> Optional[Tier]:
    """Most prestigious tier among non-exception placements, or None."""
    locked = None
    for placement in placements:
        if placement.is_exception:
            continue
        if locked is None or tier_rank(placement.tier) < tier_rank(locked):
            locked = Tier(placement.tier)
    return locked


def can_apply_to_tier(locked_tier: Optional[Tier], job_tier: Tier, is_dream_offer: bool) -> EligibilityResult:
    if is_dream_offer:
        return EligibilityResult.ok()
    if locked_tier is None:
        return EligibilityResult.ok()

    locked_tier = Tier(locked_tier)
    job_tier = Tier(job_tier)

    if locked_tier == Tier.TIER_1:
        return EligibilityResult.reject(
            "You are already placed in Tier 1 and blocked from further placements"
        )
    if locked_tier == Tier.TIER_2:
        if job_tier == Tier.TIER_1:
            return EligibilityResult.ok()
        return EligibilityResult.reject(
            "You are placed in Tier 2. You can only apply for Tier 1 jobs"
        )
    if locked_tier == Tier.TIER_3:
        if job_tier in (Tier.TIER_1, Tier.TIER_2):
            return EligibilityResult.ok()
        return EligibilityResult.reject(
            "You are placed in Tier 3. You can only apply for Tier 1 or Tier 2 jobs"
        )
    raise ValueError(f"Unhandled tier: {locked_tier}")
