"""Emails sent after a leave request is stored: department head, HR, and the requester."""

import logging
from dataclasses import dataclass, field
from typing import List

from app.core.config import Settings
from app.core.mailer import SmtpMailer

from .validation import LeaveRequestDraft

log = logging.getLogger(__name__)

SIGNATURE = "Best regards,\n{sender_name}\n{company_name}"


@dataclass
class NotificationOutcome:
    attempted: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def approver_subject(draft: LeaveRequestDraft) -> str:
    return f"New Leave Request - {draft.name} ({draft.department})"


def requester_subject(draft: LeaveRequestDraft) -> str:
    return f"Leave Request Submitted - {draft.leave_type}"


def _leave_details(draft: LeaveRequestDraft) -> str:
    return (
        f"Leave Type: {draft.leave_type}\n"
        f"Start Date: {draft.start_date.isoformat()}\n"
        f"End Date: {draft.end_date.isoformat()}\n"
        f"Number of Days: {draft.leave_days}\n"
        f"Reason: {draft.reason}\n"
    )


class EmailNotifier:
    def __init__(
        self,
        mailer: SmtpMailer,
        hod_email: str,
        hr_email: str,
        sender_name: str,
        company_name: str,
    ) -> None:
        self.mailer = mailer
        self.hod_email = hod_email
        self.hr_email = hr_email
        self.sender_name = sender_name
        self.company_name = company_name

    @classmethod
    def from_settings(cls, mailer: SmtpMailer, settings: Settings) -> "EmailNotifier":
        return cls(
            mailer,
            hod_email=settings.hod_email,
            hr_email=settings.hr_email,
            sender_name=settings.sender_name,
            company_name=settings.company_name,
        )

    def _signature(self) -> str:
        return SIGNATURE.format(sender_name=self.sender_name, company_name=self.company_name)

    def approver_body(self, request_id: str, draft: LeaveRequestDraft) -> str:
        return (
            "Dear Approver,\n\n"
            "A new leave request has been submitted and requires your review.\n\n"
            "EMPLOYEE DETAILS\n"
            f"Name: {draft.name}\n"
            f"Email: {draft.email}\n"
            f"Department: {draft.department}\n"
            f"Request ID: {request_id}\n\n"
            "LEAVE DETAILS\n"
            f"{_leave_details(draft)}\n"
            "Please review this request in the leave management records.\n\n"
            f"{self._signature()}\n"
        )

    def requester_body(self, request_id: str, draft: LeaveRequestDraft) -> str:
        return (
            f"Dear {draft.name},\n\n"
            "Your leave request has been submitted successfully.\n\n"
            f"Request ID: {request_id}\n"
            f"{_leave_details(draft)}\n"
            "Your request is now pending approval from your department head and HR. "
            "You will be notified once a decision has been made.\n\n"
            f"{self._signature()}\n"
        )

    async def _send(self, outcome: NotificationOutcome, label: str, to: str, subject: str, body: str) -> None:
        outcome.attempted.append(label)
        try:
            await self.mailer.send(to, subject, body, self.sender_name)
        except Exception as e:
            log.exception("Failed to send %s email to %s", label, to)
            outcome.failures.append(f"{label}: {e}")

    async def notify(self, request_id: str, draft: LeaveRequestDraft) -> NotificationOutcome:
        """Send all three emails; each is attempted even if an earlier one failed. Never raises."""
        outcome = NotificationOutcome()
        approver_body = self.approver_body(request_id, draft)
        await self._send(outcome, "department head", self.hod_email, approver_subject(draft), approver_body)
        await self._send(outcome, "HR", self.hr_email, approver_subject(draft), approver_body)
        await self._send(
            outcome,
            "requester",
            draft.email,
            requester_subject(draft),
            self.requester_body(request_id, draft),
        )
        if outcome.ok:
            log.info("Notification emails sent for leave request %s", request_id)
        else:
            log.warning("Notification emails for leave request %s had failures: %s", request_id, outcome.failures)
        return outcome
