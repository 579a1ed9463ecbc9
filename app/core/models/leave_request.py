"""Leave requests table: one row per submission, columns in the fixed sheet-header order."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, Integer, String, Text

from app.core.enums import LeaveStatus
from app.db.session import Base


# Header row of the leave request table, in column order.
LEAVE_SHEET_HEADERS = (
    "Request ID",
    "Timestamp",
    "Employee Name",
    "Email",
    "Department",
    "Leave Type",
    "Start Date",
    "End Date",
    "Leave Days",
    "Reason",
    "Status",
    "HOD Approval",
    "HR Approval",
    "Comments",
)

# Attribute name for each header, same order as LEAVE_SHEET_HEADERS.
LEAVE_ROW_FIELDS = (
    "request_id",
    "submitted_at",
    "employee_name",
    "email",
    "department",
    "leave_type",
    "start_date",
    "end_date",
    "leave_days",
    "reason",
    "status",
    "hod_approval",
    "hr_approval",
    "comments",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    # Surrogate key; keeps insertion order, not part of the sheet header.
    row_number = Column(Integer, primary_key=True, autoincrement=True)

    request_id = Column(String(16), nullable=True, index=True, info={"header": "Request ID"})
    submitted_at = Column(DateTime(timezone=True), default=_utcnow, nullable=True, info={"header": "Timestamp"})
    employee_name = Column(String(255), nullable=True, info={"header": "Employee Name"})
    email = Column(String(255), nullable=True, info={"header": "Email"})
    department = Column(String(255), nullable=True, info={"header": "Department"})
    leave_type = Column(String(100), nullable=True, info={"header": "Leave Type"})
    start_date = Column(Date, nullable=True, info={"header": "Start Date"})
    end_date = Column(Date, nullable=True, info={"header": "End Date"})
    leave_days = Column(Integer, nullable=True, info={"header": "Leave Days"})
    reason = Column(Text, nullable=True, info={"header": "Reason"})
    status = Column(String(20), nullable=True, default=LeaveStatus.PENDING.value, info={"header": "Status"})
    hod_approval = Column(Text, nullable=True, default="", info={"header": "HOD Approval"})
    hr_approval = Column(Text, nullable=True, default="", info={"header": "HR Approval"})
    comments = Column(Text, nullable=True, default="", info={"header": "Comments"})

    def __repr__(self) -> str:
        return f"<LeaveRequest request_id={self.request_id} status={self.status}>"
