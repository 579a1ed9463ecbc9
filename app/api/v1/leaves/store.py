"""
Record store for leave requests: append-only tabular persistence.

Two backends share the same 14-column layout (see LEAVE_SHEET_HEADERS):
- DatabaseRecordStore: the leave_requests table via SQLAlchemy (async).
- WorkbookRecordStore: a sheet in an .xlsx workbook via openpyxl.
"""

import abc
import logging
import secrets
import string
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List
from zipfile import BadZipFile

from fastapi.concurrency import run_in_threadpool
from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.enums import LeaveStatus
from app.core.exceptions import StoreError
from app.core.models.leave_request import LEAVE_ROW_FIELDS, LEAVE_SHEET_HEADERS, LeaveRequest
from app.db.session import Base

from .validation import LeaveRequestDraft

log = logging.getLogger(__name__)

REQUEST_ID_PREFIX = "LR-"
REQUEST_ID_LENGTH = 8
_REQUEST_ID_ALPHABET = string.ascii_uppercase + string.digits

# One stored row, keyed by LEAVE_ROW_FIELDS. Cells edited by hand may be blank (None).
StoredRow = Dict[str, Any]


def generate_request_id() -> str:
    """LR- followed by 8 random uppercase alphanumeric characters."""
    return REQUEST_ID_PREFIX + "".join(secrets.choice(_REQUEST_ID_ALPHABET) for _ in range(REQUEST_ID_LENGTH))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_row(request_id: str, submitted_at: datetime, draft: LeaveRequestDraft) -> StoredRow:
    return {
        "request_id": request_id,
        "submitted_at": submitted_at,
        "employee_name": draft.name,
        "email": draft.email,
        "department": draft.department,
        "leave_type": draft.leave_type,
        "start_date": draft.start_date,
        "end_date": draft.end_date,
        "leave_days": draft.leave_days,
        "reason": draft.reason,
        "status": LeaveStatus.PENDING.value,
        "hod_approval": "",
        "hr_approval": "",
        "comments": "",
    }


class RecordStore(abc.ABC):
    """Append-only store of leave requests."""

    @abc.abstractmethod
    async def append(self, draft: LeaveRequestDraft) -> str:
        """Persist one request and return its generated request id. Raises StoreError."""

    @abc.abstractmethod
    async def read_all(self) -> List[StoredRow]:
        """Every stored row in insertion order. Raises StoreError."""


class DatabaseRecordStore(RecordStore):
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
        self._table_ready = False

    async def _ensure_table(self) -> None:
        if self._table_ready:
            return
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, tables=[LeaveRequest.__table__])
        self._table_ready = True

    async def append(self, draft: LeaveRequestDraft) -> str:
        request_id = generate_request_id()
        row = LeaveRequest(**_new_row(request_id, _utcnow(), draft))
        try:
            await self._ensure_table()
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            log.exception("Failed to append leave request %s", request_id)
            raise StoreError(f"Failed to save leave request: {e}") from e
        return request_id

    async def read_all(self) -> List[StoredRow]:
        try:
            await self._ensure_table()
            async with self._session_factory() as session:
                result = await session.execute(select(LeaveRequest).order_by(LeaveRequest.row_number))
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            log.exception("Failed to read leave requests")
            raise StoreError(f"Failed to read leave requests: {e}") from e
        return [{field: getattr(r, field) for field in LEAVE_ROW_FIELDS} for r in rows]


def _cell_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    return value


class WorkbookRecordStore(RecordStore):
    """
    Leave requests kept in one sheet of an .xlsx workbook.

    The workbook and sheet are created with the header row when absent.
    openpyxl rewrites the whole file on save, so appends are serialized
    with a lock owned by the store.
    """

    def __init__(self, path: str, sheet_name: str = "Leave Requests") -> None:
        self.path = Path(path)
        self.sheet_name = sheet_name
        self._lock = threading.Lock()

    def _open(self):
        if self.path.exists():
            wb = load_workbook(self.path)
        else:
            wb = Workbook()
            wb.active.title = self.sheet_name
        if self.sheet_name not in wb.sheetnames:
            wb.create_sheet(self.sheet_name)
        ws = wb[self.sheet_name]
        if ws.max_row == 1 and ws.cell(row=1, column=1).value is None:
            for col, header in enumerate(LEAVE_SHEET_HEADERS, start=1):
                ws.cell(row=1, column=col, value=header)
        return wb, ws

    def ensure_sheet(self) -> None:
        """Create the workbook/sheet with its header row if missing."""
        with self._lock:
            wb, _ = self._open()
            self.path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(self.path)

    def _append_sync(self, draft: LeaveRequestDraft) -> str:
        request_id = generate_request_id()
        # Excel cells cannot hold timezone-aware datetimes
        row = _new_row(request_id, _utcnow().replace(tzinfo=None), draft)
        with self._lock:
            wb, ws = self._open()
            ws.append([row[field] for field in LEAVE_ROW_FIELDS])
            self.path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(self.path)
        return request_id

    def _read_sync(self) -> List[StoredRow]:
        if not self.path.exists():
            return []
        with self._lock:
            wb = load_workbook(self.path, read_only=True)
            try:
                if self.sheet_name not in wb.sheetnames:
                    return []
                ws = wb[self.sheet_name]
                rows: List[StoredRow] = []
                for values in ws.iter_rows(min_row=2, values_only=True):
                    if values is None or all(v is None or v == "" for v in values):
                        continue
                    cells = list(values) + [None] * (len(LEAVE_ROW_FIELDS) - len(values))
                    row = dict(zip(LEAVE_ROW_FIELDS, cells))
                    row["start_date"] = _cell_date(row["start_date"])
                    row["end_date"] = _cell_date(row["end_date"])
                    rows.append(row)
                return rows
            finally:
                wb.close()

    async def append(self, draft: LeaveRequestDraft) -> str:
        try:
            return await run_in_threadpool(self._append_sync, draft)
        except (OSError, ValueError, InvalidFileException, BadZipFile) as e:
            log.exception("Failed to append leave request to %s", self.path)
            raise StoreError(f"Failed to save leave request: {e}") from e

    async def read_all(self) -> List[StoredRow]:
        try:
            return await run_in_threadpool(self._read_sync)
        except (OSError, ValueError, InvalidFileException, BadZipFile) as e:
            log.exception("Failed to read leave requests from %s", self.path)
            raise StoreError(f"Failed to read leave requests: {e}") from e
