"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Wizard step payloads live in profile_steps.py.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class Tier(str, Enum):
    TIER_1 = "TIER_1"
    TIER_2 = "TIER_2"
    TIER_3 = "TIER_3"


class KycStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"
    INCOMPLETE = "INCOMPLETE"


class JobStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    DRAFT = "DRAFT"


class ApplicationStatus(str, Enum):
    APPLIED = "APPLIED"
    UNDER_REVIEW = "UNDER_REVIEW"
    SHORTLISTED = "SHORTLISTED"
    INTERVIEW_SCHEDULED = "INTERVIEW_SCHEDULED"
    SELECTED = "SELECTED"
    REJECTED = "REJECTED"


class Branch(str, Enum):
    CSE = "CSE"
    ISE = "ISE"
    ECE = "ECE"
    EEE = "EEE"
    ME = "ME"
    CE = "CE"
    AIML = "AIML"
    DS = "DS"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class BloodGroup(str, Enum):
    A_POSITIVE = "A_POSITIVE"
    A_NEGATIVE = "A_NEGATIVE"
    B_POSITIVE = "B_POSITIVE"
    B_NEGATIVE = "B_NEGATIVE"
    AB_POSITIVE = "AB_POSITIVE"
    AB_NEGATIVE = "AB_NEGATIVE"
    O_POSITIVE = "O_POSITIVE"
    O_NEGATIVE = "O_NEGATIVE"


class CasteCategory(str, Enum):
    GEN = "GEN"
    OBC = "OBC"
    SC = "SC"
    ST = "ST"


class Board(str, Enum):
    STATE = "STATE"
    CBSE = "CBSE"
    ICSE = "ICSE"


class MarksType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    SUBJECTS_TOTAL = "SUBJECTS_TOTAL"
    OUT_OF_1000 = "OUT_OF_1000"


class EntryType(str, Enum):
    REGULAR = "REGULAR"
    LATERAL = "LATERAL"


class SeatCategory(str, Enum):
    KCET = "KCET"
    MANAGEMENT = "MANAGEMENT"
    COMEDK = "COMEDK"


class ResidencyStatus(str, Enum):
    HOSTELITE = "HOSTELITE"
    LOCALITE = "LOCALITE"


class TransportMode(str, Enum):
    COLLEGE_BUS = "COLLEGE_BUS"
    PRIVATE_TRANSPORT = "PRIVATE_TRANSPORT"
    PUBLIC_TRANSPORT = "PUBLIC_TRANSPORT"
    WALKING = "WALKING"


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store every timestamp as naive UTC, matching CURRENT_TIMESTAMP."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class BacklogSubject(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    title: str = Field(..., min_length=1, max_length=200)


class ProfileUpdate(BaseModel):
    """Flat partial update of the profile row (PUT /profile).

    Unknown keys are dropped, which is how client-supplied ``id``/``user_id``
    and ``is_complete``/``kyc_status`` claims are discarded.
    """
    model_config = ConfigDict(extra="ignore")

    first_name: Optional[str] = Field(None, max_length=100)
    middle_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[str] = None
    gender: Optional[Gender] = None
    blood_group: Optional[BloodGroup] = None
    state_of_domicile: Optional[str] = None
    nationality: Optional[str] = None
    caste_category: Optional[CasteCategory] = None
    profile_photo: Optional[str] = None

    email: Optional[str] = None
    calling_mobile: Optional[str] = Field(None, max_length=15)
    whatsapp_mobile: Optional[str] = Field(None, max_length=15)
    alternative_mobile: Optional[str] = Field(None, max_length=15)
    father_name: Optional[str] = None
    father_deceased: Optional[bool] = None
    father_mobile: Optional[str] = Field(None, max_length=15)
    father_email: Optional[str] = None
    father_occupation: Optional[str] = None
    mother_name: Optional[str] = None
    mother_deceased: Optional[bool] = None
    mother_mobile: Optional[str] = Field(None, max_length=15)
    mother_email: Optional[str] = None
    mother_occupation: Optional[str] = None

    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    same_as_current: Optional[bool] = None
    country: Optional[str] = None

    tenth_school_name: Optional[str] = None
    tenth_city: Optional[str] = None
    tenth_district: Optional[str] = None
    tenth_pincode: Optional[str] = Field(None, max_length=6)
    tenth_state: Optional[str] = None
    tenth_board: Optional[Board] = None
    tenth_passing_year: Optional[int] = Field(None, ge=2000, le=2100)
    tenth_passing_month: Optional[int] = Field(None, ge=1, le=12)
    tenth_marks_type: Optional[MarksType] = None
    tenth_percentage: Optional[float] = Field(None, ge=0, le=100)
    tenth_subjects: Optional[int] = Field(None, ge=1)
    tenth_total_marks: Optional[float] = Field(None, ge=0)
    tenth_marks_out_of_1000: Optional[float] = Field(None, ge=0, le=1000)
    tenth_marks_card: Optional[str] = None
    twelfth_school_name: Optional[str] = None
    twelfth_city: Optional[str] = None
    twelfth_district: Optional[str] = None
    twelfth_pincode: Optional[str] = Field(None, max_length=6)
    twelfth_state: Optional[str] = None
    twelfth_board: Optional[Board] = None
    twelfth_passing_year: Optional[int] = Field(None, ge=2000, le=2100)
    twelfth_passing_month: Optional[int] = Field(None, ge=1, le=12)
    twelfth_marks_type: Optional[MarksType] = None
    twelfth_percentage: Optional[float] = Field(None, ge=0, le=100)
    twelfth_subjects: Optional[int] = Field(None, ge=1)
    twelfth_total_marks: Optional[float] = Field(None, ge=0)
    twelfth_marks_out_of_1000: Optional[float] = Field(None, ge=0, le=1000)
    twelfth_marks_card: Optional[str] = None

    college_name: Optional[str] = None
    college_city: Optional[str] = None
    college_district: Optional[str] = None
    college_pincode: Optional[str] = Field(None, max_length=6)
    college_state: Optional[str] = None
    branch: Optional[Branch] = None
    batch: Optional[str] = Field(None, pattern=r"^\d{4}$")
    entry_type: Optional[EntryType] = None
    seat_category: Optional[SeatCategory] = None
    usn: Optional[str] = Field(None, max_length=20)
    library_id: Optional[str] = None
    residency_status: Optional[ResidencyStatus] = None
    hostel_name: Optional[str] = None
    room_number: Optional[str] = None
    floor_number: Optional[str] = None
    local_city: Optional[str] = None
    transport_mode: Optional[TransportMode] = None
    bus_route: Optional[str] = None
    cgpa: Optional[float] = Field(None, ge=0, le=10)

    final_cgpa: Optional[float] = Field(None, ge=0, le=10)
    active_backlogs: Optional[bool] = None
    # Legacy "yes"/"no" flag; migrated to active_backlogs, never stored
    has_backlogs: Optional[str] = None
    backlog_subjects: Optional[List[BacklogSubject]] = None
    branch_mentor_name: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    leetcode: Optional[str] = None
    resume: Optional[str] = None

    completion_step: Optional[int] = Field(None, ge=1, le=7)

    @field_validator("has_backlogs")
    @classmethod
    def legacy_backlog_flag(cls, v):
        if v is not None and v.strip().lower() not in ("yes", "no"):
            raise ValueError("has_backlogs must be 'yes' or 'no'")
        return v


class ProfileResponse(BaseModel):
    user_id: str
    completion_step: int
    is_complete: bool
    kyc_status: KycStatus
    kyc_remarks: Optional[str] = None
    completion_percentage: int
    sections: Dict[str, Dict[str, Any]]
    updated_at: datetime


class ProfileSaveResponse(BaseModel):
    success: bool = True
    message: str
    profile: ProfileResponse
    redirect_to: Optional[str] = None


class StepState(BaseModel):
    step: int
    key: str
    title: str
    is_done: bool


class ProfileProgressResponse(BaseModel):
    current_step: int
    total_steps: int = 7
    steps: List[StepState]
    completed_steps: List[int]
    is_complete: bool
    completion_percentage: int
    missing_fields: List[str] = []
    kyc_status: KycStatus


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    company_name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    tier: Tier = Tier.TIER_3
    is_dream_offer: bool = False
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    allowed_branches: List[Branch] = []
    eligible_batch: Optional[str] = Field(None, pattern=r"^\d{4}$")
    max_backlogs: Optional[int] = Field(None, ge=0)
    status: JobStatus = JobStatus.ACTIVE
    deadline: Optional[datetime] = None

    @field_validator("deadline")
    @classmethod
    def deadline_naive_utc(cls, v):
        return _naive_utc(v)


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    company_name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    tier: Optional[Tier] = None
    is_dream_offer: Optional[bool] = None
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    allowed_branches: Optional[List[Branch]] = None
    eligible_batch: Optional[str] = Field(None, pattern=r"^\d{4}$")
    max_backlogs: Optional[int] = Field(None, ge=0)
    status: Optional[JobStatus] = None
    is_visible: Optional[bool] = None
    deadline: Optional[datetime] = None

    @field_validator("deadline")
    @classmethod
    def deadline_naive_utc(cls, v):
        return _naive_utc(v)


class EligibilityResponse(BaseModel):
    eligible: bool
    reason: Optional[str] = None


class JobResponse(BaseModel):
    job_id: int
    title: str
    company_name: str
    description: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    tier: Tier
    is_dream_offer: bool
    min_cgpa: Optional[float] = None
    allowed_branches: List[Branch] = []
    eligible_batch: Optional[str] = None
    max_backlogs: Optional[int] = None
    status: JobStatus
    deadline: Optional[datetime] = None
    application_count: int = 0
    created_at: datetime


class JobListItem(JobResponse):
    has_applied: bool = False
    eligibility: Optional[EligibilityResponse] = None


class JobListResponse(BaseModel):
    jobs: List[JobListItem]
    total: int
    page: int
    page_size: int


class JobDetailResponse(BaseModel):
    job: JobResponse
    has_applied: bool
    profile_complete: bool
    eligibility: EligibilityResponse


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    job_id: int


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    feedback: Optional[str] = None
    interview_date: Optional[datetime] = None

    @field_validator("interview_date")
    @classmethod
    def interview_naive_utc(cls, v):
        return _naive_utc(v)


class ApplicationResponse(BaseModel):
    application_id: int
    job_id: int
    user_id: str
    status: ApplicationStatus
    is_removed: bool = False
    resume_used: Optional[str] = None
    feedback: Optional[str] = None
    applied_at: datetime
    updated_at: datetime
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    tier: Optional[Tier] = None
    student_name: Optional[str] = None
    branch: Optional[Branch] = None


class ApplicationCreatedResponse(BaseModel):
    success: bool = True
    application: ApplicationResponse
    message: str


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ApplicationListResponse(BaseModel):
    applications: List[ApplicationResponse]
    pagination: Pagination


class StatusUpdateResponse(BaseModel):
    success: bool = True
    updated: ApplicationResponse
    interview_schedule_id: Optional[int] = None


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class KycDecision(BaseModel):
    status: KycStatus
    remarks: Optional[str] = Field(None, max_length=1000)

    @field_validator("status")
    @classmethod
    def admin_settable(cls, v):
        if v not in (KycStatus.UNDER_REVIEW, KycStatus.VERIFIED, KycStatus.REJECTED):
            raise ValueError("KYC status must be UNDER_REVIEW, VERIFIED or REJECTED")
        return v


class PlacementCreate(BaseModel):
    user_id: str
    company_name: str = Field(..., min_length=2, max_length=200)
    tier: Tier
    job_id: Optional[int] = None
    is_exception: bool = False
    package_lpa: Optional[float] = Field(None, ge=0)


class PlacementResponse(BaseModel):
    placement_id: int
    user_id: str
    job_id: Optional[int] = None
    company_name: str
    tier: Tier
    is_exception: bool
    package_lpa: Optional[float] = None
    placed_at: datetime
    student_name: Optional[str] = None


class InterviewScheduleResponse(BaseModel):
    schedule_id: int
    application_id: int
    user_id: str
    scheduled_at: datetime
    mode: str
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    student_name: Optional[str] = None


class DashboardStatsResponse(BaseModel):
    total_students: int
    verified_students: int
    pending_verifications: int
    active_jobs: int
    total_applications: int
    placed_students: int
    upcoming_interviews: int
    branch_wise_verified: Dict[str, int]
    tier_wise_placements: Dict[str, int]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class ErrorResponse(BaseModel):
    detail: str
    code: Optional[str] = None
