# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "volunteer-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8080"))

    VOLUNTEER_DATA_FILE: str = os.getenv(
        "VOLUNTEER_DATA_FILE", os.path.join("data", "volunteers.json")
    )
    SEED_DEFAULT_VOLUNTEERS: bool = (
        os.getenv("SEED_DEFAULT_VOLUNTEERS", "true").lower() == "true"
    )
    PERSIST_RETRY_ATTEMPTS: int = int(os.getenv("PERSIST_RETRY_ATTEMPTS", "1"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
