"""
models.py
Lightweight domain types (dataclasses) and constants.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields

CURRENCIES = ("JOD", "ILS")
CURRENCY_LABELS = {"JOD": "Jordanian Dinar", "ILS": "Israeli Shekel"}

UNIT_KINDS = ("apartment", "shop")
UTILITY_TYPES = ("water", "electricity")

# Billing cadence per unit kind
SCOPE_BY_KIND = {
    "apartment": "monthly",
    "shop": "yearly",
}
SCOPES = tuple(SCOPE_BY_KIND.values())

DEFAULT_RATE = 5.0


@dataclass(frozen=True)
class Settings:
    base_currency: str = "JOD"
    jod_to_ils_rate: float = DEFAULT_RATE  # 1 JOD = x ILS


@dataclass(frozen=True)
class Unit:
    id: str
    name: str
    kind: str  # 'apartment' or 'shop'
    rent_amount: float
    rent_currency: str


@dataclass(frozen=True)
class Tenant:
    id: str
    name: str
    unit_id: str
    start_date: str  # YYYY-MM-DD
    active: bool = True
    phone: str | None = None


@dataclass(frozen=True)
class UtilityCharge:
    id: str
    unit_id: str
    period: str  # YYYY-MM or YYYY
    type: str  # 'water' or 'electricity'
    amount: float
    currency: str


@dataclass(frozen=True)
class Invoice:
    id: str
    unit_id: str
    tenant_id: str
    period: str
    scope: str  # 'monthly' or 'yearly'
    rent_base: float
    utilities_base: float
    total_base: float


@dataclass(frozen=True)
class Payment:
    id: str
    tenant_id: str
    unit_id: str
    date: str
    amount: float
    currency: str
    period: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class AppData:
    """One in-process snapshot of everything an owner sees."""

    settings: Settings = field(default_factory=Settings)
    units: tuple[Unit, ...] = ()
    tenants: tuple[Tenant, ...] = ()
    utilities: tuple[UtilityCharge, ...] = ()
    invoices: tuple[Invoice, ...] = ()
    payments: tuple[Payment, ...] = ()


COLLECTIONS = {
    "units": Unit,
    "tenants": Tenant,
    "utilities": UtilityCharge,
    "invoices": Invoice,
    "payments": Payment,
}


def record_from_dict(cls, raw: dict):
    """Build a record from a row/JSON dict, ignoring unknown keys (owner_id, created_at...)."""
    names = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in dict(raw).items() if k in names})


def data_to_dict(data: AppData) -> dict:
    return asdict(data)


def data_from_dict(raw: dict | None) -> AppData:
    """
    Rebuild an AppData from its serialized form.
    Missing keys fall back to the defaults (same as merging over an empty snapshot).
    """
    raw = raw or {}
    settings_raw = raw.get("settings") or {}
    settings = record_from_dict(Settings, settings_raw) if settings_raw else Settings()
    kwargs = {"settings": settings}
    for name, cls in COLLECTIONS.items():
        kwargs[name] = tuple(record_from_dict(cls, r) for r in (raw.get(name) or []))
    return AppData(**kwargs)
