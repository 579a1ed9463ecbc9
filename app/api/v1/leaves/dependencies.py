"""FastAPI dependencies that wire the leave services to their collaborators from Settings."""

from functools import lru_cache

from fastapi import Depends

from app.core.config import Settings, get_settings
from app.core.enums import StoreBackend
from app.core.mailer import SmtpMailer
from app.db.session import engine

from .calendar import CalendarNotifier, GoogleCalendarClient
from .notifications import EmailNotifier
from .service import LeaveIntakeService, LeaveQueryService
from .store import DatabaseRecordStore, RecordStore, WorkbookRecordStore


@lru_cache(maxsize=None)
def _workbook_store(path: str, sheet_name: str) -> WorkbookRecordStore:
    # One instance per file so its lock covers every request
    return WorkbookRecordStore(path, sheet_name)


_database_store = DatabaseRecordStore(engine)


def build_record_store(settings: Settings) -> RecordStore:
    backend = settings.store_backend.strip().lower()
    if backend == StoreBackend.WORKBOOK.value:
        return _workbook_store(settings.workbook_path, settings.workbook_sheet_name)
    if backend == StoreBackend.DATABASE.value:
        return _database_store
    raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend}")


def get_record_store(settings: Settings = Depends(get_settings)) -> RecordStore:
    return build_record_store(settings)


def get_calendar_client(settings: Settings = Depends(get_settings)) -> GoogleCalendarClient:
    return GoogleCalendarClient.from_settings(settings)


def get_mailer(settings: Settings = Depends(get_settings)) -> SmtpMailer:
    return SmtpMailer.from_settings(settings)


def get_intake_service(
    store: RecordStore = Depends(get_record_store),
    calendar_client: GoogleCalendarClient = Depends(get_calendar_client),
    mailer: SmtpMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> LeaveIntakeService:
    return LeaveIntakeService(
        store,
        CalendarNotifier(calendar_client, company_name=settings.company_name),
        EmailNotifier.from_settings(mailer, settings),
    )


def get_query_service(store: RecordStore = Depends(get_record_store)) -> LeaveQueryService:
    return LeaveQueryService(store)
