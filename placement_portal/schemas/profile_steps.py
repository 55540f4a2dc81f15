"""
Profile Wizard Step Schemas

One schema per wizard section. A step submission is validated against its
section schema before anything is flattened into the profile row.
"""

from datetime import date, datetime
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from placement_portal.schemas.schemas import (
    BacklogSubject, BloodGroup, Board, Branch, CasteCategory, EntryType, Gender,
    MarksType, ResidencyStatus, SeatCategory, TransportMode
)

MOBILE_PATTERN = r"^[6-9]\d{9}$"
PINCODE_PATTERN = r"^\d{6}$"


def _upper(value: Optional[str]) -> Optional[str]:
    return value.strip().upper() if value else value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_host(url: Optional[str], host: str, label: str) -> Optional[str]:
    if url is None:
        return url
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ValueError(f"Please enter a valid {label} URL")
    hostname = parsed.hostname.lower()
    if hostname != host and not hostname.endswith("." + host):
        raise ValueError(f"Must be a {label} URL")
    return url


class PersonalInfo(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=100)
    middle_name: str = Field(".", min_length=1, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    date_of_birth: date
    gender: Gender
    blood_group: BloodGroup
    state_of_domicile: str = Field(..., min_length=2)
    nationality: str = "INDIAN"
    caste_category: CasteCategory
    profile_photo: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def uppercase_names(cls, v):
        return _upper(v)


class ContactParentDetails(BaseModel):
    email: EmailStr
    calling_mobile: str = Field(..., pattern=MOBILE_PATTERN)
    whatsapp_mobile: str = Field(..., pattern=MOBILE_PATTERN)
    alternative_mobile: Optional[str] = Field(None, pattern=MOBILE_PATTERN)

    father_name: Optional[str] = Field(None, min_length=2)
    father_deceased: bool = False
    father_mobile: Optional[str] = Field(None, pattern=MOBILE_PATTERN)
    father_email: Optional[EmailStr] = None
    father_occupation: Optional[str] = None

    mother_name: Optional[str] = Field(None, min_length=2)
    mother_deceased: bool = False
    mother_mobile: Optional[str] = Field(None, pattern=MOBILE_PATTERN)
    mother_email: Optional[EmailStr] = None
    mother_occupation: Optional[str] = None

    @field_validator("alternative_mobile", "father_email", "mother_email", mode="before")
    @classmethod
    def empty_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("email")
    @classmethod
    def gmail_only(cls, v):
        if not str(v).lower().endswith("@gmail.com"):
            raise ValueError("Email must be a Gmail address")
        return v

    @field_validator("father_name", "mother_name")
    @classmethod
    def uppercase_names(cls, v):
        return _upper(v)

    @model_validator(mode="after")
    def alternative_differs(self):
        if self.alternative_mobile and self.alternative_mobile == self.calling_mobile:
            raise ValueError("Alternative mobile must differ from calling mobile")
        return self


class AddressDetails(BaseModel):
    current_address: str = Field(..., min_length=10)
    permanent_address: Optional[str] = None
    same_as_current: bool = False
    country: str = "INDIA"

    @model_validator(mode="after")
    def copy_current(self):
        if self.same_as_current:
            self.permanent_address = self.current_address
        return self


class SchoolDetails(BaseModel):
    """10th and 12th standard share the same shape."""
    school_name: str = Field(..., min_length=2)
    city: str = Field(..., min_length=2)
    district: str = Field(..., min_length=2)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    state: str = Field(..., min_length=2)
    board: Board
    passing_year: int = Field(..., ge=2000)
    passing_month: int = Field(..., ge=1, le=12)
    marks_type: MarksType
    percentage: Optional[float] = Field(None, ge=0, le=100)
    subjects: Optional[int] = Field(None, ge=1)
    total_marks: Optional[float] = Field(None, ge=0)
    marks_out_of_1000: Optional[float] = Field(None, ge=0, le=1000)
    marks_card: str = Field(..., min_length=1)

    @field_validator("passing_year")
    @classmethod
    def not_in_future(cls, v):
        if v > datetime.utcnow().year:
            raise ValueError("Passing year cannot be in the future")
        return v

    @model_validator(mode="after")
    def marks_for_type(self):
        if self.marks_type == MarksType.PERCENTAGE and self.percentage is None:
            raise ValueError("Percentage is required")
        if self.marks_type == MarksType.SUBJECTS_TOTAL and (self.subjects is None or self.total_marks is None):
            raise ValueError("Number of subjects and total marks are required")
        if self.marks_type == MarksType.OUT_OF_1000 and self.marks_out_of_1000 is None:
            raise ValueError("Marks out of 1000 are required")
        return self


class EngineeringDetails(BaseModel):
    college_name: str = Field(..., min_length=2)
    city: str = Field(..., min_length=2)
    district: str = Field(..., min_length=2)
    pincode: str = Field(..., pattern=PINCODE_PATTERN)
    state: str = Field(..., min_length=2)
    branch: Branch
    batch: str = Field(..., pattern=r"^\d{4}$")
    entry_type: EntryType
    seat_category: SeatCategory
    usn: str = Field(..., min_length=1, max_length=20)
    library_id: str = Field(..., min_length=1)
    residency_status: ResidencyStatus
    cgpa: Optional[float] = Field(None, ge=0, le=10)

    hostel_name: Optional[str] = None
    room_number: Optional[str] = None
    floor_number: Optional[str] = None

    local_city: Optional[str] = None
    transport_mode: Optional[TransportMode] = None
    bus_route: Optional[str] = None

    @field_validator("usn")
    @classmethod
    def uppercase_usn(cls, v):
        return _upper(v)

    @model_validator(mode="after")
    def residency_fields(self):
        if self.residency_status == ResidencyStatus.HOSTELITE:
            ok = self.hostel_name and self.room_number and self.floor_number
        else:
            ok = self.local_city and self.transport_mode
        if not ok:
            raise ValueError("Please fill all required fields for your residency status")
        return self


class FinalKycDetails(BaseModel):
    final_cgpa: float = Field(..., ge=0, le=10)
    active_backlogs: bool
    backlog_subjects: List[BacklogSubject] = []
    branch_mentor_name: str = Field(..., min_length=2)
    linkedin: str
    github: Optional[str] = None
    leetcode: Optional[str] = None
    resume: str = Field(..., min_length=1)

    @field_validator("github", "leetcode", mode="before")
    @classmethod
    def empty_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("linkedin")
    @classmethod
    def linkedin_url(cls, v):
        return _check_host(v, "linkedin.com", "LinkedIn")

    @field_validator("github")
    @classmethod
    def github_url(cls, v):
        return _check_host(v, "github.com", "GitHub")

    @field_validator("leetcode")
    @classmethod
    def leetcode_url(cls, v):
        return _check_host(v, "leetcode.com", "LeetCode")

    @model_validator(mode="after")
    def backlog_subjects_listed(self):
        if self.active_backlogs and not self.backlog_subjects:
            raise ValueError("Please add at least one backlog subject")
        return self
