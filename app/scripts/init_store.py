"""
Create the leave request table (or workbook sheet) with its header if it does not exist.

Safe to run more than once.
Usage: python -m app.scripts.init_store
"""

import asyncio

from app.api.v1.leaves.store import WorkbookRecordStore
from app.core.config import settings
from app.core.enums import StoreBackend
from app.core.models.leave_request import LEAVE_SHEET_HEADERS
from app.db.session import init_db


async def init_store() -> None:
    backend = settings.store_backend.strip().lower()
    if backend == StoreBackend.WORKBOOK.value:
        store = WorkbookRecordStore(settings.workbook_path, settings.workbook_sheet_name)
        store.ensure_sheet()
        print(f"Workbook ready: {store.path} (sheet '{store.sheet_name}')")
    else:
        await init_db()
        print("Table leave_requests ready.")
    print("Columns: " + ", ".join(LEAVE_SHEET_HEADERS))


if __name__ == "__main__":
    asyncio.run(init_store())
