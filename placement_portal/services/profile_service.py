"""
Profile Service - reads and writes the student's profile row.

Two write paths, both ending in ``_persist``:
- ``update_profile``: flat partial update (PUT /profile)
- ``save_step``: one wizard step (PUT /profile/steps/{step})

Every write recomputes ``is_complete`` server-side from the merged row; any
client claim about completeness is ignored. A failed write leaves the row,
including ``completion_step``, exactly as it was.
"""

import logging
import re
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from placement_portal.core.exceptions import ConflictError, NotFoundError, ValidationError
from placement_portal.db.postgres import fetch_one, get_db_session
from placement_portal.models.domain import RequestContext, StudentProfile
from placement_portal.schemas.schemas import KycStatus, ProfileResponse, ProfileUpdate
from placement_portal.services.notification_service import safe_audit
from placement_portal.services.profile_completion import (
    LAST_STEP, STEP_DEFINITIONS, completion_percentage, is_profile_complete,
    missing_required_fields, next_completion_step, parse_step, step_states
)
from placement_portal.services.profile_mapping import (
    WRITABLE_COLUMNS, flatten_section, migrate_legacy_fields, to_column_value, unflatten
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_USN_LENGTH = 20
SERVER_OWNED_KEYS = ("id", "user_id", "profile_id")
DASHBOARD_REDIRECT = "/dashboard"
USN_TAKEN = "USN already exists. Please use a different USN."


# ============================================================
# INPUT HYGIENE
# ============================================================

def sanitize_text(value: str) -> str:
    return value.replace("<", "").replace(">", "").strip()


def sanitize_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Strip identity fields and clean values before validation.

    - ``id``/``user_id`` never come from the client (the session decides)
    - null values are dropped, strings trimmed, empty objects dropped
    """
    cleaned = {}
    for key, value in data.items():
        if key in SERVER_OWNED_KEYS or value is None:
            continue
        if isinstance(value, str):
            value = sanitize_text(value)
        elif isinstance(value, dict) and not value:
            continue
        cleaned[key] = value
    return cleaned


def guard_critical_fields(data: Dict[str, Any]) -> None:
    """Synchronous checks that run before any persistence."""
    usn = data.get("usn")
    if isinstance(usn, str) and len(usn) > MAX_USN_LENGTH:
        raise ValidationError("USN too long", field="usn")

    email = data.get("email")
    if isinstance(email, str) and not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format", field="email")


# ============================================================
# READS
# ============================================================

def get_profile_row(user_id: str) -> Optional[dict]:
    return fetch_one("SELECT * FROM profiles WHERE user_id = :id", {"id": user_id})


def get_student_profile(user_id: str) -> Optional[StudentProfile]:
    row = get_profile_row(user_id)
    return StudentProfile.model_validate(row) if row else None


def to_profile_response(row: dict) -> ProfileResponse:
    return ProfileResponse(
        user_id=row["user_id"],
        completion_step=row["completion_step"],
        is_complete=bool(row["is_complete"]),
        kyc_status=row["kyc_status"],
        kyc_remarks=row.get("kyc_remarks"),
        completion_percentage=completion_percentage(row),
        sections=unflatten(row),
        updated_at=row["updated_at"]
    )


def get_profile(ctx: RequestContext) -> ProfileResponse:
    row = get_profile_row(ctx.user_id)
    if not row:
        raise NotFoundError("Profile not found. Complete the profile wizard first.", resource="profile")
    return to_profile_response(row)


def get_progress(ctx: RequestContext) -> dict:
    row = get_profile_row(ctx.user_id) or {}
    completion_step = row.get("completion_step") or 1
    is_complete = bool(row.get("is_complete"))
    steps = step_states(completion_step, is_complete)
    return {
        "current_step": completion_step,
        "steps": steps,
        "completed_steps": [s["step"] for s in steps if s["is_done"]],
        "is_complete": is_complete,
        "completion_percentage": completion_percentage(row),
        "missing_fields": missing_required_fields(row),
        "kyc_status": row.get("kyc_status") or KycStatus.INCOMPLETE.value,
    }


# ============================================================
# WRITES
# ============================================================

def _kyc_after_write(current: Optional[str], is_complete: bool, finished_wizard: bool) -> str:
    current = current or KycStatus.INCOMPLETE.value
    if not is_complete:
        # a profile that lost a required field leaves the review queue
        if current == KycStatus.REJECTED.value:
            return current
        return KycStatus.INCOMPLETE.value
    if current == KycStatus.INCOMPLETE.value:
        return KycStatus.PENDING.value
    if finished_wizard and current == KycStatus.REJECTED.value:
        # resubmission after a rejection goes back into the review queue
        return KycStatus.PENDING.value
    return current


def _raise_if_usn_taken(user_id: str, changes: Dict[str, Any]) -> None:
    if not changes.get("usn"):
        return
    owner = fetch_one(
        "SELECT user_id FROM profiles WHERE usn = :usn AND user_id <> :id",
        {"usn": changes["usn"], "id": user_id}
    )
    if owner:
        logger.info("USN %s requested by %s is taken", changes["usn"], user_id)
        raise ConflictError(USN_TAKEN)


def _write_profile(user_id: str, changes: Dict[str, Any], saved_step: Optional[int],
                   finish_wizard: bool) -> Tuple[dict, bool]:
    """One transaction: read, merge, validate, UPDATE or INSERT, re-read."""
    with get_db_session() as db:
        existing = db.execute(
            text("SELECT * FROM profiles WHERE user_id = :id"), {"id": user_id}
        ).mappings().fetchone()
        existing = dict(existing) if existing else {}

        merged = {**existing, **changes}
        if finish_wizard:
            missing = missing_required_fields(merged)
            if missing:
                raise ValidationError(
                    f"Profile is missing required fields: {', '.join(missing)}",
                    details={"missing_fields": missing}
                )

        values = dict(changes)
        values["is_complete"] = is_profile_complete(merged)
        values["kyc_status"] = _kyc_after_write(
            existing.get("kyc_status"), values["is_complete"], finish_wizard
        )

        requested_step = saved_step or changes.get("completion_step")
        values["completion_step"] = next_completion_step(
            existing.get("completion_step") or 1, requested_step or 1
        )

        params = {**values, "user_id": user_id}
        if existing:
            assignments = ", ".join(f"{column} = :{column}" for column in values)
            db.execute(
                text(f"UPDATE profiles SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :user_id"),
                params
            )
        else:
            columns = ["user_id", *values]
            db.execute(
                text(f"INSERT INTO profiles ({', '.join(columns)}) VALUES ({', '.join(':' + c for c in columns)})"),
                params
            )

        row = db.execute(
            text("SELECT * FROM profiles WHERE user_id = :id"), {"id": user_id}
        ).mappings().fetchone()
        return dict(row), not existing


def _persist(user_id: str, changes: Dict[str, Any], saved_step: Optional[int] = None,
             finish_wizard: bool = False) -> dict:
    """
    Merge ``changes`` into the stored row and write it in one transaction.

    Raises ValidationError (finishing with required fields missing) or
    ConflictError (USN taken); in both cases nothing is written. When a
    concurrent first save created the row between our read and our INSERT,
    the write is retried once and merges into that row.
    """
    unknown = set(changes) - WRITABLE_COLUMNS
    if unknown:
        raise ValueError(f"Not writable: {sorted(unknown)}")

    try:
        row, created = _write_profile(user_id, changes, saved_step, finish_wizard)
    except IntegrityError:
        _raise_if_usn_taken(user_id, changes)
        logger.info("Profile for %s was created concurrently, retrying as an update", user_id)
        try:
            row, created = _write_profile(user_id, changes, saved_step, finish_wizard)
        except IntegrityError:
            _raise_if_usn_taken(user_id, changes)
            raise

    safe_audit(
        "profile_created" if created else "profile_updated",
        user_id=user_id,
        step=saved_step,
        is_complete=row["is_complete"]
    )
    return row


def update_profile(ctx: RequestContext, payload: Dict[str, Any]) -> ProfileResponse:
    """Flat partial update from PUT /profile."""
    data = sanitize_payload(payload)
    guard_critical_fields(data)

    try:
        update = ProfileUpdate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_errors(e.errors())

    fields = migrate_legacy_fields(update.model_dump(exclude_none=True))
    if not fields:
        raise ValidationError("No fields to update")

    changes = {column: to_column_value(column, value) for column, value in fields.items()}
    if "backlog_subjects" in fields:
        changes["backlog_count"] = len(fields["backlog_subjects"])

    row = _persist(ctx.user_id, changes)
    return to_profile_response(row)


def save_step(ctx: RequestContext, step: int, payload: Dict[str, Any]) -> Tuple[ProfileResponse, Optional[str]]:
    """
    Save one wizard step.

    Returns the profile and, for the final step, where the client goes next.
    """
    try:
        wizard_step = parse_step(step)
    except ValueError as e:
        raise ValidationError(str(e), field="step")

    section, schema, _ = STEP_DEFINITIONS[wizard_step]
    data = sanitize_payload(payload)
    guard_critical_fields(data)

    try:
        validated = schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_errors(e.errors())

    changes = flatten_section(section, validated.model_dump())
    finishing = wizard_step == LAST_STEP

    row = _persist(ctx.user_id, changes, saved_step=int(wizard_step), finish_wizard=finishing)
    logger.info("User %s saved profile step %d (complete=%s)", ctx.user_id, wizard_step, row["is_complete"])

    return to_profile_response(row), DASHBOARD_REDIRECT if finishing else None
