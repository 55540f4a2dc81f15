"""
Profile Field Mapping

The wizard works in nested sections (``personal_info``, ``tenth_details``...);
the store keeps one flat profile row. This table is the single place that
knows which section key lands in which column, in both directions.
"""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping

from pydantic import BaseModel

_SCHOOL_KEYS = (
    "school_name", "city", "district", "pincode", "state", "board",
    "passing_year", "passing_month", "marks_type", "percentage", "subjects",
    "total_marks", "marks_out_of_1000", "marks_card",
)

# section -> {section key: column}
SECTION_FIELDS: Dict[str, Dict[str, str]] = {
    "personal_info": {
        key: key for key in (
            "first_name", "middle_name", "last_name", "date_of_birth", "gender",
            "blood_group", "state_of_domicile", "nationality", "caste_category",
            "profile_photo",
        )
    },
    "contact_details": {
        key: key for key in (
            "email", "calling_mobile", "whatsapp_mobile", "alternative_mobile",
            "father_name", "father_deceased", "father_mobile", "father_email",
            "father_occupation", "mother_name", "mother_deceased", "mother_mobile",
            "mother_email", "mother_occupation",
        )
    },
    "address_details": {
        key: key for key in ("current_address", "permanent_address", "same_as_current", "country")
    },
    "tenth_details": {key: f"tenth_{key}" for key in _SCHOOL_KEYS},
    "twelfth_details": {key: f"twelfth_{key}" for key in _SCHOOL_KEYS},
    "engineering_details": {
        "college_name": "college_name",
        "city": "college_city",
        "district": "college_district",
        "pincode": "college_pincode",
        "state": "college_state",
        "branch": "branch",
        "batch": "batch",
        "entry_type": "entry_type",
        "seat_category": "seat_category",
        "usn": "usn",
        "library_id": "library_id",
        "residency_status": "residency_status",
        "hostel_name": "hostel_name",
        "room_number": "room_number",
        "floor_number": "floor_number",
        "local_city": "local_city",
        "transport_mode": "transport_mode",
        "bus_route": "bus_route",
        "cgpa": "cgpa",
    },
    "kyc_details": {
        key: key for key in (
            "final_cgpa", "active_backlogs", "backlog_subjects", "branch_mentor_name",
            "linkedin", "github", "leetcode", "resume",
        )
    },
}

# Columns holding JSON text
JSON_COLUMNS = {"backlog_subjects"}

# Every column a client may write, directly or through a section
WRITABLE_COLUMNS = frozenset(
    column for fields in SECTION_FIELDS.values() for column in fields.values()
) | {"backlog_count", "completion_step"}


def to_column_value(column: str, value: Any) -> Any:
    """Convert a validated value into what the column stores."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if column in JSON_COLUMNS and value is not None:
        return json.dumps([
            item.model_dump(mode="json") if isinstance(item, BaseModel) else item
            for item in value
        ])
    return value


def from_column_value(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS and isinstance(value, str):
        return json.loads(value)
    return value


def flatten_section(section: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Map one section's keys onto profile columns.

    Keys the section does not define are rejected rather than dropped, so a
    typo in the mapping surfaces immediately.
    """
    try:
        fields = SECTION_FIELDS[section]
    except KeyError:
        raise ValueError(f"Unknown profile section: {section}")

    flat = {}
    for key, value in data.items():
        if key not in fields:
            raise ValueError(f"Unknown field '{key}' for section '{section}'")
        column = fields[key]
        flat[column] = to_column_value(column, value)

    if "backlog_subjects" in flat:
        flat["backlog_count"] = len(data.get("backlog_subjects") or [])
    return flat


def unflatten(row: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Rebuild the nested wizard view from a flat profile row."""
    sections = {}
    for section, fields in SECTION_FIELDS.items():
        sections[section] = {
            key: from_column_value(column, row.get(column))
            for key, column in fields.items()
        }
    return sections


def migrate_legacy_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Fold legacy keys into their canonical columns.

    ``has_backlogs`` ("yes"/"no") becomes the boolean ``active_backlogs``
    unless the request also set the boolean explicitly.
    """
    legacy = data.pop("has_backlogs", None)
    if legacy is not None and data.get("active_backlogs") is None:
        data["active_backlogs"] = legacy.strip().lower() == "yes"
    return data
