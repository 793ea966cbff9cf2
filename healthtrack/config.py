"""
Centralized application configuration.

This module uses Pydantic's BaseSettings to load configuration from
environment variables and a .env file, providing a single, type-safe
source of truth for all settings.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- Core API Settings ---
    PROJECT_NAME: str = "HealthTrack Reminder Service"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # --- Database Settings ---
    DATABASE_URL: str = "postgresql://postgres@localhost/healthtrack_db"

    # --- Auth Settings ---
    SECRET_KEY: Optional[str] = None
    ALGORITHM: str = "HS256"

    # --- Outbound Email (SMTP) Settings ---
    # When SMTP_HOST is unset, emails are logged instead of sent.
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    EMAIL_FROM: str = "Health Tracker <noreply@healthtracker.ai>"
    CLIENT_URL: str = "http://localhost:5173"

    # --- Server Reminder Scheduler Settings ---
    SCHEDULER_ENABLED: bool = True
    APPOINTMENT_REMINDER_HOUR: int = Field(8, ge=0, le=23)
    DEDUP_RETENTION_DAYS: int = Field(2, ge=1)

    # --- Client Reminder Watcher Settings ---
    API_BASE_URL: str = "http://localhost:8000/api"
    # Bearer token used by the `healthtrack-reminders` console script
    API_TOKEN: Optional[str] = None
    MEDICINE_POLL_SECONDS: int = Field(5, ge=1)
    # Must stay <= 60 so a minute boundary is never skipped
    REMINDER_CHECK_SECONDS: int = Field(10, ge=1, le=60)

    # --- Pydantic Model Configuration ---
    class Config:
        """Loads settings from the specified .env file."""
        env_file = ".env"
        env_file_encoding = 'utf-8'


# Create a single, globally accessible settings instance
settings = Settings()
