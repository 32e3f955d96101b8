"""
actions.py
User- and load-triggered operations.

Each user action applies its change to the snapshot first, then writes to the store.
A failed write is reported in the Outcome but the local change is kept (no rollback).
Background work (initial load, daily rate refresh) never raises.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import billing
import cache
import gateway
import rates
import state
import utils
from gateway import AuthorizationError, StoreError
from models import AppData, Payment, Tenant, Unit, UtilityCharge
from rates import RateFetchError

logger = logging.getLogger(__name__)

_REMOTE_ERRORS = (AuthorizationError, StoreError)


@dataclass(frozen=True)
class Outcome:
    data: AppData
    ok: bool = True
    message: str | None = None


def _optimistic(new_data: AppData, failure: str, remote, *args) -> Outcome:
    try:
        remote(*args)
    except _REMOTE_ERRORS as e:
        logger.error("%s: %s", failure, e)
        return Outcome(new_data, ok=False, message=f"{failure}: {e}")
    return Outcome(new_data)


# ---------- Loading ----------

def initial_load(owner_id: str | None) -> AppData:
    """Store first, then the local cache, then an empty snapshot."""
    try:
        return gateway.fetch_all(owner_id)
    except _REMOTE_ERRORS as e:
        logger.warning("Initial load failed (%s); falling back to local cache.", e)
    return cache.load_data() or AppData()


def refresh_rate_if_stale(data: AppData, owner_id: str | None, now: float | None = None) -> AppData:
    """Fetch + persist a new rate when the cached refresh timestamp is missing or too old."""
    now = time.time() if now is None else now
    if not rates.is_stale(cache.get_rate_timestamp(), now):
        return data
    try:
        rate = rates.fetch_jod_ils_rate()
        new_data = state.set_rate(data, rate)
        gateway.upsert_settings(owner_id, new_data.settings)
    except (RateFetchError, *_REMOTE_ERRORS) as e:
        logger.warning("Daily rate refresh skipped: %s", e)
        return data
    cache.set_rate_timestamp(now)
    logger.info("Exchange rate refreshed: 1 JOD = %s ILS", rate)
    return new_data


def auto_fetch_rate(data: AppData, owner_id: str | None) -> Outcome:
    """Manual refresh; ignores the 24h window. State is untouched on failure."""
    try:
        rate = rates.fetch_jod_ils_rate()
        new_data = state.set_rate(data, rate)
        gateway.upsert_settings(owner_id, new_data.settings)
    except (RateFetchError, *_REMOTE_ERRORS) as e:
        logger.error("Rate update failed: %s", e)
        return Outcome(data, ok=False, message=str(e))
    cache.set_rate_timestamp(time.time())
    return Outcome(new_data, message="Exchange rate updated automatically.")


# ---------- Settings ----------

def update_base_currency(data: AppData, owner_id: str | None, currency: str) -> Outcome:
    new_data = state.set_base_currency(data, currency)
    return _optimistic(new_data, "Could not save settings", gateway.upsert_settings, owner_id, new_data.settings)


def update_exchange_rate(data: AppData, owner_id: str | None, rate: float) -> Outcome:
    new_data = state.set_rate(data, rate)
    return _optimistic(new_data, "Could not save settings", gateway.upsert_settings, owner_id, new_data.settings)


# ---------- Units / tenants / utilities ----------

def add_unit(data: AppData, owner_id: str | None, name: str, kind: str, rent_amount: float, rent_currency: str) -> Outcome:
    unit = Unit(utils.uid("unit"), name.strip(), kind, float(rent_amount), rent_currency)
    return _optimistic(state.add_unit(data, unit), "Could not save unit", gateway.insert_unit, owner_id, unit)


def remove_unit(data: AppData, owner_id: str | None, unit_id: str) -> Outcome:
    return _optimistic(state.remove_unit(data, unit_id), "Could not delete unit", gateway.delete_unit, owner_id, unit_id)


def add_tenant(
    data: AppData,
    owner_id: str | None,
    name: str,
    unit_id: str,
    start_date: str,
    active: bool = True,
    phone: str | None = None,
) -> Outcome:
    tenant = Tenant(utils.uid("tenant"), name.strip(), unit_id, start_date, active, (phone or "").strip() or None)
    return _optimistic(state.add_tenant(data, tenant), "Could not save tenant", gateway.insert_tenant, owner_id, tenant)


def toggle_tenant(data: AppData, owner_id: str | None, tenant_id: str) -> Outcome:
    new_data = state.toggle_tenant(data, tenant_id)
    tenant = state.find_tenant(new_data, tenant_id)
    active = tenant.active if tenant else True
    return _optimistic(new_data, "Could not update tenant", gateway.set_tenant_active, owner_id, tenant_id, active)


def remove_tenant(data: AppData, owner_id: str | None, tenant_id: str) -> Outcome:
    return _optimistic(
        state.remove_tenant(data, tenant_id), "Could not delete tenant", gateway.delete_tenant, owner_id, tenant_id
    )


def add_utility(
    data: AppData, owner_id: str | None, unit_id: str, period: str, type_: str, amount: float, currency: str
) -> Outcome:
    utility = UtilityCharge(utils.uid("util"), unit_id, period.strip(), type_, float(amount), currency)
    return _optimistic(
        state.add_utility(data, utility), "Could not save utility charge", gateway.insert_utility, owner_id, utility
    )


def remove_utility(data: AppData, owner_id: str | None, utility_id: str) -> Outcome:
    return _optimistic(
        state.remove_utility(data, utility_id), "Could not delete utility charge", gateway.delete_utility, owner_id, utility_id
    )


# ---------- Invoices ----------

def generate_invoices(
    data: AppData, owner_id: str | None, scope: str, period: str, tenant_filter: str | None = None
) -> Outcome:
    """Each invoice is inserted independently; a failed insert does not stop the others."""
    try:
        invoices = billing.generate_invoices(data, scope, period.strip(), tenant_filter)
    except ValueError as e:
        return Outcome(data, ok=False, message=str(e))
    new_data = state.add_invoices(data, invoices)

    failures = []
    for inv in invoices:
        try:
            gateway.insert_invoice(owner_id, inv)
        except _REMOTE_ERRORS as e:
            logger.error("Could not save invoice %s: %s", inv.id, e)
            failures.append(str(e))

    if failures:
        return Outcome(
            new_data, ok=False, message=f"{len(failures)} of {len(invoices)} invoices were not saved: {failures[0]}"
        )
    return Outcome(new_data, message=f"Generated {len(invoices)} invoice(s).")


def remove_invoice(data: AppData, owner_id: str | None, invoice_id: str) -> Outcome:
    return _optimistic(
        state.remove_invoice(data, invoice_id), "Could not delete invoice", gateway.delete_invoice, owner_id, invoice_id
    )


# ---------- Payments ----------

def add_payment(
    data: AppData,
    owner_id: str | None,
    tenant_id: str,
    pay_date: str,
    amount: float,
    currency: str,
    period: str | None = None,
    note: str | None = None,
) -> Outcome:
    tenant = state.find_tenant(data, tenant_id)
    if tenant is None:
        return Outcome(data, ok=False, message="Unknown tenant.")
    payment = Payment(
        utils.uid("pay"),
        tenant.id,
        tenant.unit_id,
        pay_date,
        float(amount),
        currency,
        (period or "").strip() or None,
        (note or "").strip() or None,
    )
    return _optimistic(state.add_payment(data, payment), "Could not save payment", gateway.insert_payment, owner_id, payment)


def remove_payment(data: AppData, owner_id: str | None, payment_id: str) -> Outcome:
    return _optimistic(
        state.remove_payment(data, payment_id), "Could not delete payment", gateway.delete_payment, owner_id, payment_id
    )


# ---------- Backup / restore ----------

def backup(data: AppData, owner_id: str | None) -> Outcome:
    try:
        gateway.insert_backup(owner_id, data)
    except _REMOTE_ERRORS as e:
        logger.error("Backup failed: %s", e)
        return Outcome(data, ok=False, message=f"Backup failed: {e}")
    return Outcome(data, message="Backup saved.")


def restore(data: AppData, owner_id: str | None) -> Outcome:
    try:
        latest = gateway.fetch_latest_backup(owner_id)
    except (*_REMOTE_ERRORS, ValueError, TypeError) as e:
        logger.error("Restore failed: %s", e)
        return Outcome(data, ok=False, message=f"Restore failed: {e}")
    if latest is None:
        return Outcome(data, ok=False, message="No backup found.")
    return Outcome(latest, message="Restored from the latest backup.")


def load_sample_data(data: AppData, owner_id: str | None) -> Outcome:
    units, tenants, utilities, payments = utils.sample_records()
    out = Outcome(data)
    messages = []
    steps = (
        [(state.add_unit, gateway.insert_unit, u) for u in units]
        + [(state.add_tenant, gateway.insert_tenant, t) for t in tenants]
        + [(state.add_utility, gateway.insert_utility, u) for u in utilities]
        + [(state.add_payment, gateway.insert_payment, p) for p in payments]
    )
    for local, remote, record in steps:
        out = _optimistic(local(out.data, record), "Could not save sample data", remote, owner_id, record)
        if not out.ok:
            messages.append(out.message)
    if messages:
        return Outcome(out.data, ok=False, message=messages[0])
    return Outcome(out.data, message="Sample data inserted.")
