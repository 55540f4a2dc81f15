"""
Models module - internal records the decision logic works on.

Difference from schemas:
- Models: rows fetched from the store, typed for the eligibility and
  tier-lock decisions
- Schemas: API contract (what client sends/receives)
"""
from placement_portal.models.domain import (
    EligibilityResult, JobPosting, PlacementRecord, RequestContext, StudentProfile
)

__all__ = [
    "EligibilityResult",
    "JobPosting",
    "PlacementRecord",
    "RequestContext",
    "StudentProfile"
]
