"""
gateway.py
Owner-scoped persistence: one function per entity per verb, plus fetch-all and backups.
Records travel as dataclasses; rows use the store's snake_case column names.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import asdict, replace
from functools import wraps

import db
from models import (
    AppData,
    Invoice,
    Payment,
    Settings,
    Tenant,
    Unit,
    UtilityCharge,
    data_from_dict,
    data_to_dict,
    record_from_dict,
)

logger = logging.getLogger(__name__)


class AuthorizationError(Exception):
    """No owner identity established."""


class StoreError(Exception):
    """The store rejected or failed an operation."""


def _require_owner(owner_id: str | None) -> str:
    if not owner_id:
        raise AuthorizationError("Not signed in.")
    return owner_id


def _store_call(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except sqlite3.Error as e:
            logger.error("Store operation %s failed: %s", fn.__name__, e)
            raise StoreError(str(e)) from e

    return wrapper


def _insert(table: str, owner_id: str | None, record) -> None:
    row = {**asdict(record), "owner_id": _require_owner(owner_id)}
    cols = ", ".join(row)
    marks = ", ".join("?" for _ in row)
    db.execute(f"INSERT INTO {table}({cols}) VALUES({marks})", tuple(row.values()))


def _delete(table: str, owner_id: str | None, record_id: str) -> None:
    db.execute(
        f"DELETE FROM {table} WHERE id = ? AND owner_id = ?",
        (record_id, _require_owner(owner_id)),
    )


# ---------- Settings ----------

@_store_call
def upsert_settings(owner_id: str | None, settings: Settings) -> None:
    db.execute(
        """
        INSERT INTO settings(owner_id, base_currency, jod_to_ils_rate, updated_at) VALUES(?,?,?,?)
        ON CONFLICT(owner_id) DO UPDATE SET
            base_currency=excluded.base_currency,
            jod_to_ils_rate=excluded.jod_to_ils_rate,
            updated_at=excluded.updated_at
        """,
        (_require_owner(owner_id), settings.base_currency, settings.jod_to_ils_rate, db.utc_now_iso()),
    )


@_store_call
def fetch_settings(owner_id: str | None) -> Settings | None:
    row = db.fetch_one(
        "SELECT base_currency, jod_to_ils_rate FROM settings WHERE owner_id = ?",
        (_require_owner(owner_id),),
    )
    return record_from_dict(Settings, row) if row else None


# ---------- Units ----------

@_store_call
def insert_unit(owner_id: str | None, unit: Unit) -> None:
    _insert("units", owner_id, unit)


@_store_call
def delete_unit(owner_id: str | None, unit_id: str) -> None:
    _delete("units", owner_id, unit_id)


# ---------- Tenants ----------

@_store_call
def insert_tenant(owner_id: str | None, tenant: Tenant) -> None:
    _insert("tenants", owner_id, tenant)


@_store_call
def set_tenant_active(owner_id: str | None, tenant_id: str, active: bool) -> None:
    db.execute(
        "UPDATE tenants SET active = ? WHERE id = ? AND owner_id = ?",
        (int(active), tenant_id, _require_owner(owner_id)),
    )


@_store_call
def delete_tenant(owner_id: str | None, tenant_id: str) -> None:
    _delete("tenants", owner_id, tenant_id)


# ---------- Utilities ----------

@_store_call
def insert_utility(owner_id: str | None, utility: UtilityCharge) -> None:
    _insert("utilities", owner_id, utility)


@_store_call
def delete_utility(owner_id: str | None, utility_id: str) -> None:
    _delete("utilities", owner_id, utility_id)


# ---------- Invoices ----------

@_store_call
def insert_invoice(owner_id: str | None, invoice: Invoice) -> None:
    _insert("invoices", owner_id, invoice)


@_store_call
def delete_invoice(owner_id: str | None, invoice_id: str) -> None:
    _delete("invoices", owner_id, invoice_id)


# ---------- Payments ----------

@_store_call
def insert_payment(owner_id: str | None, payment: Payment) -> None:
    _insert("payments", owner_id, payment)


@_store_call
def delete_payment(owner_id: str | None, payment_id: str) -> None:
    _delete("payments", owner_id, payment_id)


# ---------- Fetch everything ----------

_LIST_QUERIES = {
    "units": ("SELECT id, name, kind, rent_amount, rent_currency FROM units WHERE owner_id = ? ORDER BY name", Unit),
    "tenants": ("SELECT id, name, phone, unit_id, start_date, active FROM tenants WHERE owner_id = ? ORDER BY name", Tenant),
    "utilities": (
        "SELECT id, unit_id, period, type, amount, currency FROM utilities WHERE owner_id = ? ORDER BY period DESC",
        UtilityCharge,
    ),
    "invoices": (
        """
        SELECT id, unit_id, tenant_id, period, scope, rent_base, utilities_base, total_base
        FROM invoices WHERE owner_id = ? ORDER BY period DESC
        """,
        Invoice,
    ),
    "payments": (
        "SELECT id, tenant_id, unit_id, date, amount, currency, period, note FROM payments WHERE owner_id = ? ORDER BY date DESC",
        Payment,
    ),
}


@_store_call
def fetch_all(owner_id: str | None) -> AppData:
    """
    All six collections for one owner. Without an owner identity this returns
    an empty snapshot instead of raising.
    """
    if not owner_id:
        return AppData()

    settings = fetch_settings(owner_id) or Settings()
    collections = {}
    with db.get_conn() as conn:
        for name, (sql, cls) in _LIST_QUERIES.items():
            rows = conn.execute(sql, (owner_id,)).fetchall()
            collections[name] = tuple(record_from_dict(cls, r) for r in rows)

    # sqlite stores booleans as 0/1
    collections["tenants"] = tuple(replace(t, active=bool(t.active)) for t in collections["tenants"])
    return AppData(settings=settings, **collections)


# ---------- Backups ----------

@_store_call
def insert_backup(owner_id: str | None, data: AppData) -> None:
    db.execute(
        "INSERT INTO backups(owner_id, payload, created_at) VALUES(?,?,?)",
        (_require_owner(owner_id), json.dumps(data_to_dict(data)), db.utc_now_iso()),
    )


@_store_call
def fetch_latest_backup(owner_id: str | None) -> AppData | None:
    row = db.fetch_one(
        "SELECT payload FROM backups WHERE owner_id = ? ORDER BY created_at DESC, id DESC LIMIT 1",
        (_require_owner(owner_id),),
    )
    if not row:
        return None
    return data_from_dict(json.loads(row["payload"]))
