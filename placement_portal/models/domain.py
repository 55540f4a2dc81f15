"""
Domain records - typed views of store rows used by the decision functions.

Built with ``model_validate(row_dict)``; extra columns are ignored, so the
same record type works for a full profile row or a narrow SELECT.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from placement_portal.schemas.schemas import Branch, JobStatus, KycStatus, Tier, UserRole


class RequestContext(BaseModel):
    """Who is calling. Built once per request and passed down explicitly."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class StudentProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    branch: Optional[Branch] = None
    batch: Optional[str] = None
    cgpa: Optional[float] = None
    final_cgpa: Optional[float] = None
    active_backlogs: bool = False
    backlog_count: int = 0
    resume: Optional[str] = None
    is_complete: bool = False
    kyc_status: KycStatus = KycStatus.INCOMPLETE
    completion_step: int = 1

    @property
    def effective_cgpa(self) -> float:
        """Final CGPA once KYC is submitted, else the running CGPA, else 0."""
        return self.final_cgpa or self.cgpa or 0.0


class JobPosting(BaseModel):
    model_config = ConfigDict(extra="ignore")

    job_id: int
    title: str = ""
    company_name: str = ""
    tier: Tier = Tier.TIER_3
    is_dream_offer: bool = False
    min_cgpa: Optional[float] = None
    allowed_branches: List[Branch] = []
    eligible_batch: Optional[str] = None
    max_backlogs: Optional[int] = None
    status: JobStatus = JobStatus.DRAFT
    deadline: Optional[datetime] = None


class PlacementRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tier: Tier
    is_exception: bool = False


class EligibilityResult(BaseModel):
    eligible: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "EligibilityResult":
        return cls(eligible=True)

    @classmethod
    def reject(cls, reason: str) -> "EligibilityResult":
        return cls(eligible=False, reason=reason)
