"""
rates.py
JOD->ILS rate from currencyapi.com + the daily auto-refresh policy.
"""

from __future__ import annotations

import logging
import time

import requests

import config

logger = logging.getLogger(__name__)


class RateFetchError(Exception):
    pass


def fetch_jod_ils_rate(api_key: str | None = None) -> float:
    """
    GET /v3/latest?base_currency=JOD&currencies=ILS -> data.ILS.value
    Raises RateFetchError on a missing key, HTTP failure or malformed payload.
    """
    api_key = config.CURRENCYAPI_KEY if api_key is None else api_key
    if not api_key:
        raise RateFetchError("Missing currencyapi key. Set CURRENCYAPI_KEY.")

    try:
        response = requests.get(
            f"{config.CURRENCYAPI_URL}/v3/latest",
            params={"base_currency": "JOD", "currencies": "ILS", "apikey": api_key},
            timeout=config.HTTP_TIMEOUT,
        )
    except requests.RequestException as e:
        raise RateFetchError(f"Failed to reach currencyapi: {e}") from e

    if response.status_code != 200:
        raise RateFetchError(f"currencyapi returned HTTP {response.status_code}")

    try:
        payload = response.json()
    except ValueError as e:
        raise RateFetchError("currencyapi returned invalid JSON") from e

    data = payload.get("data") if isinstance(payload, dict) else None
    ils = data.get("ILS") if isinstance(data, dict) else None
    rate = ils.get("value") if isinstance(ils, dict) else None
    # bool is an int subclass
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        raise RateFetchError("Invalid exchange-rate data")
    return float(rate)


def is_stale(last_updated: float | None, now: float | None = None, max_age_hours: float | None = None) -> bool:
    """True when never refreshed, or the last refresh is older than the window."""
    if not last_updated:
        return True
    now = time.time() if now is None else now
    hours = config.RATE_REFRESH_HOURS if max_age_hours is None else max_age_hours
    return now - last_updated > hours * 3600
