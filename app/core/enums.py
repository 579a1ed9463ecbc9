from enum import Enum


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class StoreBackend(str, Enum):
    DATABASE = "database"
    WORKBOOK = "workbook"
