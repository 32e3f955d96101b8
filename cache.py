"""
cache.py
Local JSON cache: the whole AppData snapshot + the last rate-refresh timestamp.
Failures are logged and treated as "nothing cached".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import config
from models import AppData, data_from_dict, data_to_dict

logger = logging.getLogger(__name__)

CACHE_FILE: Path = config.CACHE_FILE

DATA_KEY = "complex_data_v1"
RATE_KEY = "complex_rate_last"


def _read() -> dict:
    try:
        raw = json.loads(Path(CACHE_FILE).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning("Local cache unreadable (%s); ignoring it.", e)
        return {}
    return raw if isinstance(raw, dict) else {}


def _write(payload: dict) -> None:
    try:
        Path(CACHE_FILE).write_text(json.dumps(payload), encoding="utf-8")
    except OSError as e:
        logger.warning("Could not write local cache: %s", e)


def save_data(data: AppData) -> None:
    payload = _read()
    payload[DATA_KEY] = data_to_dict(data)
    _write(payload)


def load_data() -> AppData | None:
    raw = _read().get(DATA_KEY)
    if not raw:
        return None
    try:
        return data_from_dict(raw)
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning("Cached data is corrupt (%s); ignoring it.", e)
        return None


def get_rate_timestamp() -> float | None:
    """Epoch seconds of the last successful rate refresh."""
    value = _read().get(RATE_KEY)
    try:
        return float(value) if value else None
    except (TypeError, ValueError):
        return None


def set_rate_timestamp(ts: float) -> None:
    payload = _read()
    payload[RATE_KEY] = ts
    _write(payload)
