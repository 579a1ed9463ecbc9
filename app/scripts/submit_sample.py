"""
Push one sample leave request through the full intake pipeline with the configured
store, calendar and mailer, and print what happened to each side effect.

Usage: python -m app.scripts.submit_sample [--start 2024-02-01] [--end 2024-02-03]
"""

import argparse
import asyncio
import sys

from app.api.v1.leaves.calendar import CalendarNotifier, GoogleCalendarClient
from app.api.v1.leaves.dependencies import build_record_store
from app.api.v1.leaves.notifications import EmailNotifier
from app.api.v1.leaves.service import LeaveIntakeService
from app.core.config import settings
from app.core.exceptions import ServiceError
from app.core.logging_config import configure_logging
from app.core.mailer import SmtpMailer

SAMPLE_REQUEST = {
    "name": "Test User",
    "email": "test@company.com",
    "department": "IT",
    "leaveType": "Annual Leave",
    "startDate": "2024-02-01",
    "endDate": "2024-02-03",
    "reason": "Testing the system",
}


async def submit_sample(payload: dict) -> int:
    service = LeaveIntakeService(
        build_record_store(settings),
        CalendarNotifier(GoogleCalendarClient.from_settings(settings), company_name=settings.company_name),
        EmailNotifier.from_settings(SmtpMailer.from_settings(settings), settings),
    )
    try:
        result = await service.submit(payload)
    except ServiceError as e:
        print(f"Submission failed: {e.message}")
        return 1

    print(f"Request ID: {result.request_id}")
    print(f"Leave days: {result.leave_days}")
    if result.calendar.ok:
        print(f"Calendar event: {result.calendar.detail}")
    else:
        print(f"Calendar event FAILED - {result.calendar.detail}")
    print(f"Emails attempted: {', '.join(result.email.attempted)}")
    for failure in result.email.failures:
        print(f"  email FAILED - {failure}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Submit a sample leave request")
    parser.add_argument("--email", default=SAMPLE_REQUEST["email"])
    parser.add_argument("--start", default=SAMPLE_REQUEST["startDate"])
    parser.add_argument("--end", default=SAMPLE_REQUEST["endDate"])
    args = parser.parse_args()

    configure_logging(settings.log_level)
    payload = dict(SAMPLE_REQUEST, email=args.email, startDate=args.start, endDate=args.end)
    sys.exit(asyncio.run(submit_sample(payload)))


if __name__ == "__main__":
    main()
