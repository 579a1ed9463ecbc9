"""Leave intake (validate, persist, calendar, notify) and the read-side list/stats queries."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, List, Optional, Union

from app.core.enums import LeaveStatus
from app.core.exceptions import StoreError, StoreUnavailable

from .calendar import CalendarNotifier
from .notifications import EmailNotifier, NotificationOutcome
from .schemas import LeaveRequestView, LeaveStats
from .store import RecordStore, StoredRow
from .validation import LeaveRequestDraft, RawPayload, validate_submission

log = logging.getLogger(__name__)


@dataclass
class SideEffectOutcome:
    ok: bool
    detail: Optional[str] = None


@dataclass
class SubmissionResult:
    request_id: str
    leave_days: int
    calendar: SideEffectOutcome = field(default_factory=lambda: SideEffectOutcome(ok=False))
    email: NotificationOutcome = field(default_factory=NotificationOutcome)


class LeaveIntakeService:
    def __init__(self, store: RecordStore, calendar: CalendarNotifier, notifier: EmailNotifier) -> None:
        self.store = store
        self.calendar = calendar
        self.notifier = notifier

    async def _create_calendar_event(self, request_id: str, draft: LeaveRequestDraft) -> SideEffectOutcome:
        try:
            event_id = await self.calendar.create_leave_event(request_id, draft)
        except Exception as e:
            log.exception("Calendar event not created for leave request %s", request_id)
            return SideEffectOutcome(ok=False, detail=str(e))
        return SideEffectOutcome(ok=True, detail=event_id)

    async def _send_notifications(self, request_id: str, draft: LeaveRequestDraft) -> NotificationOutcome:
        try:
            return await self.notifier.notify(request_id, draft)
        except Exception as e:
            log.exception("Email notification failed for leave request %s", request_id)
            return NotificationOutcome(failures=[str(e)])

    async def submit(self, raw: RawPayload) -> SubmissionResult:
        """
        Validate and store a leave request, then create the calendar event and send emails.

        MalformedRequest/ValidationError are raised before anything is written.
        StoreError from the append is raised and skips calendar and email.
        Calendar and email failures are logged and recorded on the result only.
        """
        draft = validate_submission(raw)
        request_id = await self.store.append(draft)
        log.info(
            "Leave request %s stored for %s (%s, %s to %s, %d day(s))",
            request_id,
            draft.email,
            draft.leave_type,
            draft.start_date,
            draft.end_date,
            draft.leave_days,
        )

        calendar_outcome = await self._create_calendar_event(request_id, draft)
        email_outcome = await self._send_notifications(request_id, draft)
        return SubmissionResult(
            request_id=request_id,
            leave_days=draft.leave_days,
            calendar=calendar_outcome,
            email=email_outcome,
        )


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _number(value: Any) -> Union[int, float]:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        as_float = float(str(value).strip())
    except (TypeError, ValueError):
        return 0
    return int(as_float) if as_float.is_integer() else as_float


def _as_datetime(value: Any) -> Optional[datetime]:
    """Submission timestamp in local time. Naive stored timestamps are UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        try:
            return _as_datetime(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def project_row(row: StoredRow, position: int) -> LeaveRequestView:
    """Admin view of one stored row; position is the 1-based insertion index."""
    leave_days = row.get("leave_days")
    return LeaveRequestView(
        id=f"req-{position}" if _is_blank(row.get("request_id")) else str(row["request_id"]),
        timestamp=_text(row.get("submitted_at")),
        name=_text(row.get("employee_name")),
        email=_text(row.get("email")),
        department=_text(row.get("department")),
        leaveType=_text(row.get("leave_type")),
        startDate=_text(row.get("start_date")),
        endDate=_text(row.get("end_date")),
        leaveDays=leave_days if isinstance(leave_days, (int, float, str)) else None,
        reason=_text(row.get("reason")),
        status=LeaveStatus.PENDING.value if _is_blank(row.get("status")) else str(row["status"]),
        hodApproval=_text(row.get("hod_approval")),
        hrApproval=_text(row.get("hr_approval")),
        comments=_text(row.get("comments")),
    )


class LeaveQueryService:
    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = datetime.now) -> None:
        self.store = store
        self.clock = clock

    async def _read_rows(self) -> List[StoredRow]:
        try:
            return await self.store.read_all()
        except StoreError as e:
            raise StoreUnavailable(f"Leave request store is unavailable: {e.message}") from e

    async def list_requests(self) -> List[LeaveRequestView]:
        """All requests, most recent first."""
        rows = await self._read_rows()
        views = [project_row(row, position) for position, row in enumerate(rows, start=1)]
        views.reverse()
        return views

    async def compute_stats(self) -> LeaveStats:
        rows = await self._read_rows()
        now = self.clock()
        stats = LeaveStats(total=len(rows))
        for row in rows:
            status = row.get("status")
            if status == LeaveStatus.PENDING.value:
                stats.pending += 1
            elif status == LeaveStatus.APPROVED.value:
                stats.approved += 1
            elif status == LeaveStatus.REJECTED.value:
                stats.rejected += 1

            submitted = _as_datetime(row.get("submitted_at"))
            if submitted is not None and submitted.year == now.year and submitted.month == now.month:
                stats.thisMonth += 1

            if not _is_blank(row.get("leave_days")):
                stats.totalLeaveDays += _number(row["leave_days"])
        return stats
