import time
from datetime import date
from typing import AsyncGenerator, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.v1.leaves.calendar import CalendarNotifier
from app.api.v1.leaves.dependencies import get_calendar_client, get_mailer, get_record_store
from app.api.v1.leaves.notifications import EmailNotifier
from app.api.v1.leaves.service import LeaveIntakeService, LeaveQueryService
from app.api.v1.leaves.store import RecordStore, StoredRow, _new_row, _utcnow, generate_request_id
from app.api.v1.leaves.validation import LeaveRequestDraft
from app.core.config import Settings, get_settings
from app.core.exceptions import MailError, StoreError
from app.main import app


SAMPLE_PAYLOAD = {
    "name": "Test User",
    "email": "test@company.com",
    "department": "IT",
    "leaveType": "Annual Leave",
    "startDate": "2024-02-01",
    "endDate": "2024-02-03",
    "reason": "Testing the system",
}


class FakeStore(RecordStore):
    """In-memory record store that counts appends."""

    def __init__(self) -> None:
        self.rows: List[StoredRow] = []
        self.append_calls = 0
        self.fail_append = False
        self.fail_read = False

    async def append(self, draft: LeaveRequestDraft) -> str:
        self.append_calls += 1
        if self.fail_append:
            raise StoreError("Failed to save leave request: store offline")
        request_id = generate_request_id()
        self.rows.append(_new_row(request_id, _utcnow(), draft))
        return request_id

    async def read_all(self) -> List[StoredRow]:
        if self.fail_read:
            raise StoreError("Failed to read leave requests: store offline")
        return [dict(r) for r in self.rows]


class FakeCalendarClient:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.events: List[dict] = []
        self.error = error

    async def create_all_day_event(
        self, title: str, start: date, end: date, description: str = "", location: str = ""
    ) -> str:
        self.events.append(
            {"title": title, "start": start, "end": end, "description": description, "location": location}
        )
        if self.error is not None:
            raise self.error
        return f"evt-{len(self.events)}"


class FakeMailer:
    """Records every send; fails for recipients listed in fail_for."""

    def __init__(self, fail_for=()) -> None:
        self.sent: List[dict] = []
        self.fail_for = set(fail_for)

    async def send(self, to: str, subject: str, body: str, sender_name: str = "") -> None:
        self.sent.append({"to": to, "subject": subject, "body": body, "sender_name": sender_name})
        if to in self.fail_for:
            raise MailError(f"Email sending failed: mailbox {to} unavailable")


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        company_name="Acme Corp",
        hod_email="hod@acme.test",
        hr_email="hr@acme.test",
        sender_name="Acme Leave Desk",
    )


@pytest.fixture()
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def fake_calendar() -> FakeCalendarClient:
    return FakeCalendarClient()


@pytest.fixture()
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture()
def sample_payload() -> dict:
    return dict(SAMPLE_PAYLOAD)


@pytest.fixture()
def intake_service(fake_store, fake_calendar, fake_mailer, test_settings) -> LeaveIntakeService:
    return LeaveIntakeService(
        fake_store,
        CalendarNotifier(fake_calendar, company_name=test_settings.company_name),
        EmailNotifier.from_settings(fake_mailer, test_settings),
    )


@pytest.fixture()
def query_service(fake_store) -> LeaveQueryService:
    return LeaveQueryService(fake_store)


@pytest.fixture()
async def client(fake_store, fake_calendar, fake_mailer, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app with fake collaborators."""
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_record_store] = lambda: fake_store
    app.dependency_overrides[get_calendar_client] = lambda: fake_calendar
    app.dependency_overrides[get_mailer] = lambda: fake_mailer
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def new_york_tz(monkeypatch):
    """Run the test with America/New_York as the local timezone."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
