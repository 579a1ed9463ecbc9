import json
from datetime import date

import httpx
import pytest

from app.api.v1.leaves.calendar import CalendarNotifier, GoogleCalendarClient
from app.api.v1.leaves.validation import validate_submission
from app.core.exceptions import CalendarError

from conftest import SAMPLE_PAYLOAD


def _client(handler, calendar_id="leave@group.calendar.google.com") -> GoogleCalendarClient:
    return GoogleCalendarClient(
        calendar_id=calendar_id,
        client_id="client-id",
        client_secret="client-secret",
        refresh_token="refresh-token",
        transport=httpx.MockTransport(handler),
    )


def _google_handler(seen: list, event_status: int = 200, event_payload=None):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(200, json={"access_token": "token-123", "expires_in": 3600})
        return httpx.Response(event_status, json=event_payload if event_payload is not None else {"id": "evt-42"})

    return handler


@pytest.mark.asyncio
async def test_leave_event_is_all_day_with_exclusive_end() -> None:
    seen = []
    notifier = CalendarNotifier(_client(_google_handler(seen)), company_name="Acme Corp")
    draft = validate_submission(dict(SAMPLE_PAYLOAD))

    event_id = await notifier.create_leave_event("LR-ABCD1234", draft)

    assert event_id == "evt-42"
    token_request, event_request = seen
    assert b"grant_type=refresh_token" in token_request.content
    assert event_request.headers["Authorization"] == "Bearer token-123"
    assert event_request.url.path == "/calendar/v3/calendars/leave@group.calendar.google.com/events"

    body = json.loads(event_request.content)
    assert body["summary"] == "Annual Leave - Test User"
    assert body["start"] == {"date": "2024-02-01"}
    assert body["end"] == {"date": "2024-02-04"}
    assert body["location"] == "Acme Corp"
    assert body["visibility"] == "public"
    for text in ("Test User", "test@company.com", "IT", "Annual Leave", "Testing the system", "LR-ABCD1234"):
        assert text in body["description"]


@pytest.mark.asyncio
async def test_permission_denied_raises_calendar_error() -> None:
    seen = []
    client = _client(_google_handler(seen, event_status=403, event_payload={"error": {"message": "Forbidden"}}))

    with pytest.raises(CalendarError) as exc:
        await client.create_all_day_event("t", date(2024, 2, 1), date(2024, 2, 2))
    assert "permission denied" in exc.value.message
    assert "Forbidden" in exc.value.message


@pytest.mark.asyncio
async def test_unknown_calendar_raises_calendar_error() -> None:
    client = _client(_google_handler([], event_status=404, event_payload={"error": {"message": "Not Found"}}))
    with pytest.raises(CalendarError) as exc:
        await client.create_all_day_event("t", date(2024, 2, 1), date(2024, 2, 2))
    assert "not found" in exc.value.message


@pytest.mark.asyncio
async def test_token_refresh_failure_raises_calendar_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Token has been revoked"})

    with pytest.raises(CalendarError) as exc:
        await _client(handler).create_all_day_event("t", date(2024, 2, 1), date(2024, 2, 2))
    assert "Token has been revoked" in exc.value.message


@pytest.mark.asyncio
async def test_network_error_raises_calendar_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(CalendarError) as exc:
        await _client(handler).create_all_day_event("t", date(2024, 2, 1), date(2024, 2, 2))
    assert "unreachable" in exc.value.message


@pytest.mark.asyncio
async def test_missing_calendar_id_raises_without_network() -> None:
    seen = []
    client = _client(_google_handler(seen), calendar_id="  ")
    with pytest.raises(CalendarError) as exc:
        await client.create_all_day_event("t", date(2024, 2, 1), date(2024, 2, 2))
    assert exc.value.message == "Calendar ID is not configured"
    assert seen == []


@pytest.mark.asyncio
async def test_missing_credentials_raise_calendar_error() -> None:
    client = GoogleCalendarClient(calendar_id="primary", client_id=None, client_secret=None, refresh_token=None)
    with pytest.raises(CalendarError):
        await client.create_all_day_event("t", date(2024, 2, 1), date(2024, 2, 2))
