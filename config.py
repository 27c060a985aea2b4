"""
config.py
Runtime settings (API location, timeouts, polling). Values can be overridden
through environment variables or a local .env file.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings, SettingsConfigDict


def host_root(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}/"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Backend
    API_URL: str = "https://sistema-backend-b3zt.onrender.com/api"
    HEALTH_URL: Optional[str] = None

    # Timeouts (seconds). The health check waits for a sleeping backend to wake up.
    REQUEST_TIMEOUT: float = 30.0
    HEALTH_TIMEOUT: float = 60.0
    HEALTH_POLL_SECONDS: int = 30

    # UI
    ALERT_SECONDS: int = 5
    REPORT_DEFAULT_DAYS: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()
