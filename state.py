"""
state.py
Pure transitions over the AppData snapshot. Each returns a new snapshot; nothing mutates.
New records are prepended, deletes cascade to dependent collections.
"""

from __future__ import annotations

from dataclasses import replace
from collections.abc import Iterable

from models import AppData, Invoice, Payment, Tenant, Unit, UtilityCharge


def set_base_currency(data: AppData, currency: str) -> AppData:
    return replace(data, settings=replace(data.settings, base_currency=currency))


def set_rate(data: AppData, rate: float) -> AppData:
    return replace(data, settings=replace(data.settings, jod_to_ils_rate=rate or 0))


def add_unit(data: AppData, unit: Unit) -> AppData:
    return replace(data, units=(unit,) + data.units)


def remove_unit(data: AppData, unit_id: str) -> AppData:
    return replace(
        data,
        units=tuple(u for u in data.units if u.id != unit_id),
        tenants=tuple(t for t in data.tenants if t.unit_id != unit_id),
        utilities=tuple(u for u in data.utilities if u.unit_id != unit_id),
        invoices=tuple(i for i in data.invoices if i.unit_id != unit_id),
        payments=tuple(p for p in data.payments if p.unit_id != unit_id),
    )


def add_tenant(data: AppData, tenant: Tenant) -> AppData:
    return replace(data, tenants=(tenant,) + data.tenants)


def toggle_tenant(data: AppData, tenant_id: str) -> AppData:
    return replace(
        data,
        tenants=tuple(replace(t, active=not t.active) if t.id == tenant_id else t for t in data.tenants),
    )


def remove_tenant(data: AppData, tenant_id: str) -> AppData:
    return replace(
        data,
        tenants=tuple(t for t in data.tenants if t.id != tenant_id),
        invoices=tuple(i for i in data.invoices if i.tenant_id != tenant_id),
        payments=tuple(p for p in data.payments if p.tenant_id != tenant_id),
    )


def add_utility(data: AppData, utility: UtilityCharge) -> AppData:
    return replace(data, utilities=(utility,) + data.utilities)


def remove_utility(data: AppData, utility_id: str) -> AppData:
    return replace(data, utilities=tuple(u for u in data.utilities if u.id != utility_id))


def add_invoices(data: AppData, invoices: Iterable[Invoice]) -> AppData:
    return replace(data, invoices=tuple(invoices) + data.invoices)


def remove_invoice(data: AppData, invoice_id: str) -> AppData:
    return replace(data, invoices=tuple(i for i in data.invoices if i.id != invoice_id))


def add_payment(data: AppData, payment: Payment) -> AppData:
    return replace(data, payments=(payment,) + data.payments)


def remove_payment(data: AppData, payment_id: str) -> AppData:
    return replace(data, payments=tuple(p for p in data.payments if p.id != payment_id))


def find_tenant(data: AppData, tenant_id: str) -> Tenant | None:
    return next((t for t in data.tenants if t.id == tenant_id), None)
