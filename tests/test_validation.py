"""Unit tests for leave submission validation."""

import json
from datetime import date

import pytest

from app.api.v1.leaves.validation import REQUIRED_FIELDS, inclusive_leave_days, validate_submission
from app.core.exceptions import MalformedRequest, ValidationError

from conftest import SAMPLE_PAYLOAD


def test_valid_mapping_produces_typed_draft() -> None:
    draft = validate_submission(dict(SAMPLE_PAYLOAD))
    assert draft.name == "Test User"
    assert draft.leave_type == "Annual Leave"
    assert draft.start_date == date(2024, 2, 1)
    assert draft.end_date == date(2024, 2, 3)
    assert draft.leave_days == 3


def test_serialized_json_is_accepted() -> None:
    draft = validate_submission(json.dumps(SAMPLE_PAYLOAD).encode("utf-8"))
    assert draft.email == "test@company.com"


def test_fields_are_trimmed() -> None:
    payload = dict(SAMPLE_PAYLOAD, name="  Test User  ", department=" IT ")
    draft = validate_submission(payload)
    assert draft.name == "Test User"
    assert draft.department == "IT"


@pytest.mark.parametrize("raw", [None, b"", "", "   ", {}])
def test_absent_or_empty_payload_is_malformed(raw) -> None:
    with pytest.raises(MalformedRequest) as exc:
        validate_submission(raw)
    assert exc.value.message == "No data received"


def test_unparseable_json_is_malformed_with_detail() -> None:
    with pytest.raises(MalformedRequest) as exc:
        validate_submission('{"name": "Test User",')
    assert exc.value.message.startswith("Invalid JSON payload:")
    assert "line 1" in exc.value.message


def test_deeply_nested_json_is_malformed() -> None:
    depth = 100_000
    with pytest.raises(MalformedRequest) as exc:
        validate_submission(b"[" * depth + b"]" * depth)
    assert exc.value.message.startswith("Invalid JSON payload:")


def test_json_array_is_malformed() -> None:
    with pytest.raises(MalformedRequest):
        validate_submission("[1, 2, 3]")


@pytest.mark.parametrize("field", REQUIRED_FIELDS)
def test_missing_field_is_reported(field) -> None:
    payload = dict(SAMPLE_PAYLOAD)
    del payload[field]
    with pytest.raises(ValidationError) as exc:
        validate_submission(payload)
    assert exc.value.field == field
    assert exc.value.message == f"Missing required field: {field}"


def test_blank_field_counts_as_missing() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_submission(dict(SAMPLE_PAYLOAD, reason="   "))
    assert exc.value.field == "reason"


def test_first_missing_field_in_order_is_reported() -> None:
    payload = dict(SAMPLE_PAYLOAD, department="", reason="", email=None)
    with pytest.raises(ValidationError) as exc:
        validate_submission(payload)
    assert exc.value.field == "email"


def test_end_before_start_is_rejected() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_submission(dict(SAMPLE_PAYLOAD, startDate="2024-02-05", endDate="2024-02-01"))
    assert exc.value.message == "End date must not precede start date"


def test_single_day_range_is_allowed() -> None:
    draft = validate_submission(dict(SAMPLE_PAYLOAD, startDate="2024-02-05", endDate="2024-02-05"))
    assert draft.leave_days == 1


@pytest.mark.parametrize("value", ["2024-02-30", "01/02/2024", "tomorrow"])
def test_invalid_date_is_rejected(value) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_submission(dict(SAMPLE_PAYLOAD, startDate=value))
    assert exc.value.field == "startDate"


def test_inclusive_leave_days_counts_both_ends() -> None:
    assert inclusive_leave_days(date(2024, 2, 1), date(2024, 2, 3)) == 3
    assert inclusive_leave_days(date(2024, 2, 28), date(2024, 3, 1)) == 3  # leap year
    assert inclusive_leave_days(date(2023, 12, 31), date(2024, 1, 1)) == 2
