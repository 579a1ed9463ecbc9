from typing import List, Optional, Union

from pydantic import BaseModel, Field


# ----- Leave request as shown to the admin view -----
class LeaveRequestView(BaseModel):
    id: str
    timestamp: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    leaveType: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    leaveDays: Optional[Union[int, float, str]] = None
    reason: Optional[str] = None
    status: str = "Pending"
    hodApproval: Optional[str] = None
    hrApproval: Optional[str] = None
    comments: Optional[str] = None


class LeaveStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    thisMonth: int = 0
    totalLeaveDays: Union[int, float] = 0


# ----- Response envelopes -----
class SubmitResponse(BaseModel):
    success: bool = True
    message: str
    requestId: str


class RequestsResponse(BaseModel):
    success: bool = True
    requests: List[LeaveRequestView] = Field(default_factory=list)


class StatsResponse(BaseModel):
    success: bool = True
    stats: LeaveStats


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
