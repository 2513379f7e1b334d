"""
config.py
Runtime settings loaded from the environment (.env supported).
"""

from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _parse_fee_overrides(raw: str) -> dict[str, int]:
    """
    "cardio=2600, strength=3100" -> {"cardio": 2600, "strength": 3100}
    Entries that don't parse are ignored.
    """
    overrides: dict[str, int] = {}
    for chunk in raw.split(","):
        if "=" not in chunk:
            continue
        key, _, value = chunk.partition("=")
        try:
            overrides[key.strip()] = int(value.strip())
        except ValueError:
            continue
    return overrides


class Settings:
    GYM_NAME: str = os.getenv("GYM_NAME", "Gym")

    # Google Apps Script web app backing the spreadsheet
    SHEETS_API_URL: str = os.getenv("SHEETS_API_URL", "")
    SHEETS_TIMEOUT: float = float(os.getenv("SHEETS_TIMEOUT", "15"))
    SHEETS_CACHE_TTL: float = float(os.getenv("SHEETS_CACHE_TTL", "30"))

    WHATSAPP_TOKEN: str = os.getenv("WHATSAPP_TOKEN", "")
    WHATSAPP_PHONE_NUMBER_ID: str = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "")
    WHATSAPP_API_VERSION: str = os.getenv("WHATSAPP_API_VERSION", "v20.0")
    WHATSAPP_TIMEOUT: float = float(os.getenv("WHATSAPP_TIMEOUT", "20"))

    EXPIRY_WARNING_DAYS: int = int(os.getenv("EXPIRY_WARNING_DAYS", "7"))
    DEFAULT_ADMISSION_FEE: int = int(os.getenv("DEFAULT_ADMISSION_FEE", "5000"))
    PLAN_FEES: dict[str, int] = _parse_fee_overrides(os.getenv("PLAN_FEES", ""))

    DEFAULT_ADMIN_USERNAME: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

__all__ = ["settings", "get_settings", "Settings"]
