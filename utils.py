"""
utils.py
Ids, dates/periods, validation, exports, sample data.
"""

from __future__ import annotations

import random
import re
import string
from datetime import date, timedelta

import pandas as pd

from models import (
    CURRENCIES,
    UNIT_KINDS,
    UTILITY_TYPES,
    Tenant,
    Unit,
    UtilityCharge,
    Payment,
)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_PERIOD_RE = re.compile(r"^\d{4}(-(0[1-9]|1[0-2]))?$")


def uid(prefix: str = "id") -> str:
    return f"{prefix}_{''.join(random.choices(_ID_ALPHABET, k=8))}"


def current_month() -> str:
    return date.today().isoformat()[:7]


def parse_iso(d: str) -> date:
    return date.fromisoformat(d)


def is_valid_period(period: str) -> bool:
    """YYYY-MM or YYYY."""
    return bool(_PERIOD_RE.match(period.strip()))


def is_valid_scope_period(period: str, scope: str) -> bool:
    """Monthly billing needs a full YYYY-MM; yearly takes YYYY or YYYY-MM."""
    period = period.strip()
    if scope == "monthly":
        return is_valid_period(period) and len(period) == 7
    return is_valid_period(period)


def _check_amount(raw, label: str, errors: list[str]) -> None:
    try:
        if float(raw) < 0:
            errors.append(f"{label} must not be negative.")
    except (TypeError, ValueError):
        errors.append(f"{label} must be numeric.")


def validate_unit_inputs(name: str, kind: str, rent_amount, rent_currency: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Unit name is required.")
    if kind not in UNIT_KINDS:
        errors.append("Unit kind must be apartment or shop.")
    if rent_currency not in CURRENCIES:
        errors.append("Unknown currency.")
    _check_amount(rent_amount, "Rent", errors)
    return errors


def validate_tenant_inputs(name: str, unit_id: str, start_date: str) -> list[str]:
    errors: list[str] = []
    if not name.strip():
        errors.append("Tenant name is required.")
    if not unit_id:
        errors.append("Choose a unit.")
    try:
        parse_iso(start_date)
    except (TypeError, ValueError):
        errors.append("Start date must be a valid ISO date (YYYY-MM-DD).")
    return errors


def validate_utility_inputs(unit_id: str, period: str, type_: str, amount, currency: str) -> list[str]:
    errors: list[str] = []
    if not unit_id:
        errors.append("Choose a unit.")
    if not is_valid_period(period):
        errors.append("Period must be YYYY-MM or YYYY.")
    if type_ not in UTILITY_TYPES:
        errors.append("Utility type must be water or electricity.")
    if currency not in CURRENCIES:
        errors.append("Unknown currency.")
    _check_amount(amount, "Amount", errors)
    return errors


def validate_payment_inputs(tenant_id: str, pay_date: str, amount, currency: str, period: str) -> list[str]:
    errors: list[str] = []
    if not tenant_id:
        errors.append("Choose a tenant.")
    try:
        parse_iso(pay_date)
    except (TypeError, ValueError):
        errors.append("Date must be a valid ISO date (YYYY-MM-DD).")
    if currency not in CURRENCIES:
        errors.append("Unknown currency.")
    if period and not is_valid_period(period):
        errors.append("Period must be YYYY-MM or YYYY.")
    _check_amount(amount, "Amount", errors)
    return errors


def invoices_to_csv_bytes(rows: list[dict]) -> bytes:
    df = pd.DataFrame(rows)
    return df.to_csv(index=False).encode("utf-8")


def payments_to_csv_bytes(rows: list[dict]) -> bytes:
    df = pd.DataFrame(rows)
    return df.to_csv(index=False).encode("utf-8")


def sample_records() -> tuple[list[Unit], list[Tenant], list[UtilityCharge], list[Payment]]:
    """
    Two apartments + one shop, their tenants, a few utility bills and payments.
    Fresh ids every call (adds new rows each run).
    """
    today = date.today()
    month = today.isoformat()[:7]
    year = month[:4]

    units = [
        Unit(uid("unit"), "Apartment 1A", "apartment", 250.0, "JOD"),
        Unit(uid("unit"), "Apartment 2B", "apartment", 1200.0, "ILS"),
        Unit(uid("unit"), "Corner Shop", "shop", 3000.0, "JOD"),
    ]
    start = (today - timedelta(days=90)).isoformat()
    tenants = [
        Tenant(uid("tenant"), "Ahmad Khalil", units[0].id, start, True, "0790000001"),
        Tenant(uid("tenant"), "Rana Saleh", units[1].id, start, True, "0520000002"),
        Tenant(uid("tenant"), "Yousef Market", units[2].id, start, True, None),
    ]
    utilities = [
        UtilityCharge(uid("util"), units[0].id, month, "water", 12.5, "JOD"),
        UtilityCharge(uid("util"), units[0].id, month, "electricity", 40.0, "JOD"),
        UtilityCharge(uid("util"), units[1].id, month, "electricity", 180.0, "ILS"),
        UtilityCharge(uid("util"), units[2].id, year, "water", 60.0, "JOD"),
    ]
    payments = [
        Payment(uid("pay"), tenants[0].id, units[0].id, today.isoformat(), 250.0, "JOD", month, "Sample payment"),
        Payment(uid("pay"), tenants[1].id, units[1].id, today.isoformat(), 1200.0, "ILS", month, None),
    ]
    return units, tenants, utilities, payments
