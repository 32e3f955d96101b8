"""
config.py
Environment configuration (.env supported) + logging setup.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")

DB_FILE = Path(os.getenv("COMPLEX_DB_FILE", str(BASE_DIR / "complex.db")))
CACHE_FILE = Path(os.getenv("COMPLEX_CACHE_FILE", str(BASE_DIR / ".complex_cache.json")))

# Empty = any registered owner may sign in
ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "").strip()

CURRENCYAPI_KEY: str = os.getenv("CURRENCYAPI_KEY", "").strip()
CURRENCYAPI_URL: str = os.getenv("CURRENCYAPI_URL", "https://api.currencyapi.com").rstrip("/")
CRON_SECRET: str = os.getenv("CRON_SECRET", "").strip()

RATE_REFRESH_HOURS: float = float(os.getenv("RATE_REFRESH_HOURS", "24"))
HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "10"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
