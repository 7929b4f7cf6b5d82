# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "scheduling-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8005"))

    DEFAULT_ORGANIZATION_ID: str = os.getenv("DEFAULT_ORGANIZATION_ID", "default-org")

    # Provisional window offered when a job is dropped on a person
    DEFAULT_START_TIME: str = os.getenv("DEFAULT_START_TIME", "09:00")
    DEFAULT_END_TIME: str = os.getenv("DEFAULT_END_TIME", "17:00")

    DAILY_CAPACITY: int = int(os.getenv("DAILY_CAPACITY", "3"))
    OVERTIME_THRESHOLD_HOURS: int = int(os.getenv("OVERTIME_THRESHOLD_HOURS", "8"))
    DEFAULT_GENERATION_MONTHS: int = int(os.getenv("DEFAULT_GENERATION_MONTHS", "1"))

    DEFAULT_HISTORY_LIMIT: int = int(os.getenv("DEFAULT_HISTORY_LIMIT", "100"))
    MAX_HISTORY_SIZE: int = int(os.getenv("MAX_HISTORY_SIZE", "10000"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SEED_DEFAULT_DATA: bool = (
        os.getenv("SEED_DEFAULT_DATA", "true").lower() == "true"
    )


settings = Settings()
