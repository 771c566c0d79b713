"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./parking.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── Layout ────────────────────────────────────────────────────────────
    DEFAULT_FLOOR_NUMBER: int = 1
    SEED_DEFAULT_LAYOUT: bool = True            # Floor 1 + 20 slots on an empty DB

    # ── Allocation & billing ──────────────────────────────────────────────
    ALLOCATION_FALLBACK_TO_SCAN: bool = False   # False = strict preferred-slot checks
    OVERDUE_AFTER_MINUTES: int = 24 * 60

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
