"""All-day calendar events for leave periods (Google Calendar REST API)."""

import logging
from datetime import date, timedelta
from typing import Optional
from urllib.parse import quote

import httpx

from app.core.config import Settings
from app.core.exceptions import CalendarError

from .validation import LeaveRequestDraft

log = logging.getLogger(__name__)

GOOGLE_OAUTH_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return str(error.get("message") or error)
    if isinstance(error, str):
        return str(payload.get("error_description") or error)
    return response.reason_phrase


class GoogleCalendarClient:
    """Creates events on one calendar using an OAuth refresh token."""

    def __init__(
        self,
        calendar_id: Optional[str],
        client_id: Optional[str],
        client_secret: Optional[str],
        refresh_token: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.calendar_id = calendar_id
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleCalendarClient":
        return cls(
            calendar_id=settings.calendar_id,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            refresh_token=settings.google_refresh_token,
            timeout=settings.calendar_timeout_seconds,
        )

    def _check_configured(self) -> None:
        if not self.calendar_id or not self.calendar_id.strip():
            raise CalendarError("Calendar ID is not configured")
        if not (self._client_id and self._client_secret and self._refresh_token):
            raise CalendarError("Google Calendar credentials are not configured")

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        r = await client.post(
            GOOGLE_OAUTH_TOKEN_URL,
            data={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "refresh_token": self._refresh_token,
                "grant_type": "refresh_token",
            },
            headers={"Accept": "application/json"},
        )
        if r.status_code < 200 or r.status_code >= 300:
            raise CalendarError(f"Google OAuth token refresh failed ({r.status_code}): {_error_detail(r)}")
        try:
            token = r.json().get("access_token")
        except (ValueError, AttributeError) as e:
            raise CalendarError("Google OAuth token endpoint returned invalid JSON") from e
        if not isinstance(token, str) or not token.strip():
            raise CalendarError("Google OAuth token response is missing access_token")
        return token.strip()

    async def create_all_day_event(
        self,
        title: str,
        start: date,
        end: date,
        description: str = "",
        location: str = "",
    ) -> str:
        """
        Create an all-day event and return its id.

        `end` is exclusive, as the Calendar API expects for all-day events.
        """
        self._check_configured()
        body = {
            "summary": title,
            "description": description,
            "location": location,
            "start": {"date": start.isoformat()},
            "end": {"date": end.isoformat()},
            "visibility": "public",
            "transparency": "opaque",
            "status": "confirmed",
        }
        url = f"{GOOGLE_CALENDAR_API_BASE_URL}/calendars/{quote(self.calendar_id.strip(), safe='')}/events"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                token = await self._access_token(client)
                r = await client.post(url, json=body, headers={"Authorization": f"Bearer {token}"})
        except httpx.HTTPError as e:
            raise CalendarError(f"Calendar request failed: {e}") from e

        if r.status_code in (401, 403):
            raise CalendarError(f"Calendar permission denied ({r.status_code}): {_error_detail(r)}")
        if r.status_code == 404:
            raise CalendarError(f"Calendar not found: {self.calendar_id}")
        if r.status_code < 200 or r.status_code >= 300:
            raise CalendarError(f"Calendar API error ({r.status_code}): {_error_detail(r)}")
        try:
            event_id = r.json().get("id")
        except (ValueError, AttributeError) as e:
            raise CalendarError("Calendar API returned invalid JSON") from e
        if not event_id:
            raise CalendarError("Calendar API response is missing the event id")
        return str(event_id)


def build_event_description(request_id: str, draft: LeaveRequestDraft) -> str:
    return (
        f"Employee: {draft.name}\n"
        f"Email: {draft.email}\n"
        f"Department: {draft.department}\n"
        f"Leave Type: {draft.leave_type}\n"
        f"Reason: {draft.reason}\n"
        f"Request ID: {request_id}"
    )


class CalendarNotifier:
    """Puts a leave period on the shared calendar as a visible all-day event."""

    def __init__(self, client: GoogleCalendarClient, company_name: str) -> None:
        self.client = client
        self.company_name = company_name

    async def create_leave_event(self, request_id: str, draft: LeaveRequestDraft) -> str:
        title = f"{draft.leave_type} - {draft.name}"
        # inclusive end date -> exclusive end for all-day events
        end = draft.end_date + timedelta(days=1)
        try:
            event_id = await self.client.create_all_day_event(
                title,
                draft.start_date,
                end,
                description=build_event_description(request_id, draft),
                location=self.company_name,
            )
        except CalendarError:
            raise
        except Exception as e:
            raise CalendarError(f"Calendar event creation failed: {e}") from e
        log.info("Calendar event %s created for leave request %s", event_id, request_id)
        return event_id
