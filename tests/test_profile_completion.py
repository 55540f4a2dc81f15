import pytest

from placement_portal.services.profile_completion import (
    COMPLETION_WEIGHTS, KYC_WEIGHT, LAST_STEP, completion_percentage, is_profile_complete,
    missing_required_fields, next_completion_step, parse_step, step_states
)

COMPLETE_ROW = {
    "first_name": "ASHA",
    "last_name": "RAO",
    "final_cgpa": 8.1,
    "resume": "https://files.example.com/asha.pdf",
    "branch": "CSE",
    "whatsapp_mobile": "9876543210",
    "permanent_address": "12 MG Road, Bengaluru",
}


def test_weights_sum_to_one_hundred():
    total = sum(sum(group.values()) for group in COMPLETION_WEIGHTS.values())
    assert total + KYC_WEIGHT == 100


def test_complete_regardless_of_which_alternative_is_filled():
    assert is_profile_complete(COMPLETE_ROW)
    row = dict(COMPLETE_ROW, final_cgpa=None, cgpa=7.2, whatsapp_mobile=None,
               calling_mobile="9123456780", permanent_address=None, current_address="Hostel block C")
    assert is_profile_complete(row)


@pytest.mark.parametrize("field, group", [
    ("first_name", "first_name"),
    ("resume", "resume"),
    ("branch", "branch"),
    ("final_cgpa", "cgpa"),
    ("whatsapp_mobile", "phone"),
    ("permanent_address", "address"),
])
def test_each_required_group_is_needed(field, group):
    row = dict(COMPLETE_ROW, **{field: None})
    assert not is_profile_complete(row)
    assert missing_required_fields(row) == [group]


def test_blank_strings_do_not_count():
    assert "last_name" in missing_required_fields(dict(COMPLETE_ROW, last_name="   "))


def test_percentage_is_independent_of_strict_flag():
    assert completion_percentage({}) == 0
    assert completion_percentage({"first_name": "ASHA", "kyc_status": "VERIFIED"}) == 15
    assert completion_percentage({"kyc_status": "PENDING"}) == KYC_WEIGHT // 2
    assert completion_percentage({"kyc_status": "REJECTED"}) == 0


def test_completion_step_never_moves_backwards():
    assert next_completion_step(2, 3) == 3
    assert next_completion_step(5, 3) == 5
    assert next_completion_step(None, 1) == 1


def test_step_states_mark_steps_below_current_as_done():
    states = step_states(3, False)
    assert [s["is_done"] for s in states] == [True, True, False, False, False, False, False]
    assert states[0]["key"] == "personal_info"


def test_last_step_done_only_when_complete():
    assert not step_states(7, False)[-1]["is_done"]
    assert step_states(7, True)[-1]["is_done"]


def test_parse_step_bounds():
    assert parse_step(7) == LAST_STEP
    with pytest.raises(ValueError, match="between 1 and 7"):
        parse_step(8)
