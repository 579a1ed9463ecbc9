from app.core.models.leave_request import LeaveRequest

__all__ = ["LeaveRequest"]
