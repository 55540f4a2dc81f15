"""
Profile Completion Tracker

Two independent measures of a profile:

- ``is_profile_complete``: strict boolean that gates job applications. True
  only when name, CGPA, resume, branch, phone and address are all present,
  whichever wizard step filled them in.
- ``completion_percentage``: weighted 0-100 score for the dashboard. It never
  gates anything.

Plus the wizard bookkeeping: which of the 7 steps count as done, and how the
stored ``completion_step`` moves when a step is saved.
"""

from enum import IntEnum
from typing import Dict, List, Mapping, Tuple, Type

from pydantic import BaseModel

from placement_portal.schemas.profile_steps import (
    AddressDetails, ContactParentDetails, EngineeringDetails, FinalKycDetails,
    PersonalInfo, SchoolDetails
)
from placement_portal.schemas.schemas import KycStatus


class WizardStep(IntEnum):
    PERSONAL_INFO = 1
    CONTACT_PARENT = 2
    ADDRESS = 3
    TENTH = 4
    TWELFTH = 5
    ENGINEERING = 6
    FINAL_KYC = 7


FIRST_STEP = WizardStep.PERSONAL_INFO
LAST_STEP = WizardStep.FINAL_KYC

# step -> (section key, payload schema, title)
STEP_DEFINITIONS: Dict[WizardStep, Tuple[str, Type[BaseModel], str]] = {
    WizardStep.PERSONAL_INFO: ("personal_info", PersonalInfo, "Personal Information"),
    WizardStep.CONTACT_PARENT: ("contact_details", ContactParentDetails, "Contact & Family Details"),
    WizardStep.ADDRESS: ("address_details", AddressDetails, "Address Information"),
    WizardStep.TENTH: ("tenth_details", SchoolDetails, "10th Standard Details"),
    WizardStep.TWELFTH: ("twelfth_details", SchoolDetails, "12th/Diploma Details"),
    WizardStep.ENGINEERING: ("engineering_details", EngineeringDetails, "Engineering Details"),
    WizardStep.FINAL_KYC: ("kyc_details", FinalKycDetails, "Final Verification"),
}

# Strict completeness: every group needs at least one present column
REQUIRED_FIELD_GROUPS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("first_name", ("first_name",)),
    ("last_name", ("last_name",)),
    ("cgpa", ("final_cgpa", "cgpa")),
    ("resume", ("resume",)),
    ("branch", ("branch",)),
    ("phone", ("calling_mobile", "whatsapp_mobile")),
    ("address", ("current_address", "permanent_address")),
)

# Dashboard score: column -> weight, grouped by area; weights sum to 100
COMPLETION_WEIGHTS: Dict[str, Dict[str, int]] = {
    "personal": {
        "first_name": 5,
        "last_name": 5,
        "date_of_birth": 4,
        "gender": 3,
        "profile_photo": 3,
    },
    "contact": {
        "email": 5,
        "calling_mobile": 5,
        "whatsapp_mobile": 3,
        "current_address": 5,
        "father_name": 2,
    },
    "academic": {
        "tenth_percentage": 5,
        "twelfth_percentage": 5,
        "branch": 5,
        "usn": 5,
        "final_cgpa": 10,
    },
    "professional": {
        "resume": 10,
        "linkedin": 5,
        "github": 3,
        "leetcode": 2,
    },
}
KYC_WEIGHT = 10


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def missing_required_fields(row: Mapping) -> List[str]:
    return [
        name for name, columns in REQUIRED_FIELD_GROUPS
        if not any(_present(row.get(column)) for column in columns)
    ]


def is_profile_complete(row: Mapping) -> bool:
    return not missing_required_fields(row)


def completion_percentage(row: Mapping) -> int:
    score = 0
    for weights in COMPLETION_WEIGHTS.values():
        for column, weight in weights.items():
            if _present(row.get(column)):
                score += weight

    kyc_status = row.get("kyc_status")
    if kyc_status == KycStatus.VERIFIED.value:
        score += KYC_WEIGHT
    elif kyc_status in (KycStatus.PENDING.value, KycStatus.UNDER_REVIEW.value):
        score += KYC_WEIGHT // 2

    return min(score, 100)


def next_completion_step(stored_step: int, saved_step: int) -> int:
    """Stored step after ``saved_step`` was saved; it never moves backwards."""
    return max(stored_step or FIRST_STEP, saved_step)


def is_step_done(step: int, completion_step: int, is_complete: bool) -> bool:
    return step < completion_step or (step == LAST_STEP and is_complete)


def step_states(completion_step: int, is_complete: bool) -> List[dict]:
    completion_step = completion_step or FIRST_STEP
    return [
        {
            "step": int(step),
            "key": section,
            "title": title,
            "is_done": is_step_done(step, completion_step, is_complete),
        }
        for step, (section, _, title) in STEP_DEFINITIONS.items()
    ]


def parse_step(step: int) -> WizardStep:
    try:
        return WizardStep(step)
    except ValueError:
        raise ValueError(f"Step must be between {int(FIRST_STEP)} and {int(LAST_STEP)}")
