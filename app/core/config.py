from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./leave_requests.db", alias="DATABASE_URL")

    # "database" keeps rows in the leave_requests table, "workbook" in an .xlsx sheet
    store_backend: str = Field("database", alias="STORE_BACKEND")
    workbook_path: str = Field("./leave_requests.xlsx", alias="WORKBOOK_PATH")
    workbook_sheet_name: str = Field("Leave Requests", alias="WORKBOOK_SHEET_NAME")

    company_name: str = Field("Company", alias="COMPANY_NAME")
    hod_email: str = Field("hod@company.com", alias="HOD_EMAIL")
    hr_email: str = Field("hr@company.com", alias="HR_EMAIL")
    sender_name: str = Field("Leave Management System", alias="SENDER_NAME")

    smtp_host: Optional[str] = Field(None, alias="SMTP_HOST")
    smtp_port: int = Field(587, alias="SMTP_PORT")
    smtp_user: Optional[str] = Field(None, alias="SMTP_USER")
    smtp_password: Optional[str] = Field(None, alias="SMTP_PASSWORD")
    smtp_from_email: Optional[str] = Field(None, alias="SMTP_FROM_EMAIL")
    smtp_timeout_seconds: float = Field(30.0, alias="SMTP_TIMEOUT_SECONDS")

    calendar_id: Optional[str] = Field(None, alias="CALENDAR_ID")
    google_client_id: Optional[str] = Field(None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: Optional[str] = Field(None, alias="GOOGLE_CLIENT_SECRET")
    google_refresh_token: Optional[str] = Field(None, alias="GOOGLE_REFRESH_TOKEN")
    calendar_timeout_seconds: float = Field(10.0, alias="CALENDAR_TIMEOUT_SECONDS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    cors_origins: List[str] = Field(["*"], alias="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings; override it in tests."""
    return settings
