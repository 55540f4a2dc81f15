import json

import pytest

from placement_portal.services.profile_mapping import (
    SECTION_FIELDS, WRITABLE_COLUMNS, flatten_section, migrate_legacy_fields, unflatten
)


def test_engineering_keys_land_in_college_columns():
    flat = flatten_section("engineering_details", {"city": "Mysuru", "pincode": "570001", "branch": "CSE"})
    assert flat == {"college_city": "Mysuru", "college_pincode": "570001", "branch": "CSE"}


def test_school_sections_are_prefixed():
    assert flatten_section("tenth_details", {"percentage": 91.0}) == {"tenth_percentage": 91.0}
    assert flatten_section("twelfth_details", {"percentage": 88.5}) == {"twelfth_percentage": 88.5}


def test_backlog_subjects_stored_as_json_with_count():
    subjects = [{"code": "18CS51", "title": "Management"}]
    flat = flatten_section("kyc_details", {"active_backlogs": True, "backlog_subjects": subjects})
    assert json.loads(flat["backlog_subjects"]) == subjects
    assert flat["backlog_count"] == 1


def test_unflatten_restores_sections():
    row = {"first_name": "ASHA", "college_city": "Mysuru", "backlog_subjects": '[{"code": "X1", "title": "Maths"}]'}
    sections = unflatten(row)
    assert set(sections) == set(SECTION_FIELDS)
    assert sections["personal_info"]["first_name"] == "ASHA"
    assert sections["engineering_details"]["city"] == "Mysuru"
    assert sections["kyc_details"]["backlog_subjects"] == [{"code": "X1", "title": "Maths"}]


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError):
        flatten_section("personal_info", {"is_complete": True})
    with pytest.raises(ValueError):
        flatten_section("hobbies", {})


def test_state_columns_are_not_client_writable():
    assert not {"is_complete", "kyc_status", "user_id"} & WRITABLE_COLUMNS


@pytest.mark.parametrize("flag, expected", [("yes", True), ("No", False), (" YES ", True)])
def test_legacy_backlog_flag_migrates_to_boolean(flag, expected):
    assert migrate_legacy_fields({"has_backlogs": flag}) == {"active_backlogs": expected}


def test_explicit_boolean_wins_over_legacy_flag():
    assert migrate_legacy_fields({"has_backlogs": "yes", "active_backlogs": False}) == {"active_backlogs": False}
