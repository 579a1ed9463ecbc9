"""Turn an untyped submission payload into a typed LeaveRequestDraft."""

import json
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Union

from app.core.exceptions import MalformedRequest, ValidationError

# Checked in this order; the first missing one is reported.
REQUIRED_FIELDS = ("name", "email", "department", "leaveType", "startDate", "endDate", "reason")

DATE_FORMAT = "%Y-%m-%d"

RawPayload = Union[None, str, bytes, Mapping[str, Any]]


def inclusive_leave_days(start_date: date, end_date: date) -> int:
    """Number of calendar days in [start_date, end_date], both ends counted."""
    return (end_date - start_date).days + 1


@dataclass(frozen=True)
class LeaveRequestDraft:
    name: str
    email: str
    department: str
    leave_type: str
    start_date: date
    end_date: date
    reason: str

    @property
    def leave_days(self) -> int:
        return inclusive_leave_days(self.start_date, self.end_date)


def _decode(raw: RawPayload) -> Mapping[str, Any]:
    if raw is None:
        raise MalformedRequest("No data received")
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedRequest(f"Invalid request payload: {e}") from e
    if isinstance(raw, str):
        if not raw.strip():
            raise MalformedRequest("No data received")
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, RecursionError) as e:
            raise MalformedRequest(f"Invalid JSON payload: {e}") from e
    if not isinstance(raw, Mapping):
        raise MalformedRequest("Invalid request payload: expected a JSON object")
    if not raw:
        raise MalformedRequest("No data received")
    return raw


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _parse_date(field: str, value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Invalid date for {field}: '{value}' (expected YYYY-MM-DD)", field=field) from e


def validate_submission(raw: RawPayload) -> LeaveRequestDraft:
    """
    Validate a submission and return the typed draft.

    Raises MalformedRequest when the payload is absent, empty or not a JSON
    object, and ValidationError for the first missing field or a bad date range.
    """
    payload = _decode(raw)

    values = {}
    for field in REQUIRED_FIELDS:
        value = _clean(payload.get(field))
        if not value:
            raise ValidationError(f"Missing required field: {field}", field=field)
        values[field] = value

    start_date = _parse_date("startDate", values["startDate"])
    end_date = _parse_date("endDate", values["endDate"])
    if start_date > end_date:
        raise ValidationError("End date must not precede start date", field="endDate")

    return LeaveRequestDraft(
        name=values["name"],
        email=values["email"],
        department=values["department"],
        leave_type=values["leaveType"],
        start_date=start_date,
        end_date=end_date,
        reason=values["reason"],
    )
