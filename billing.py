"""
billing.py
Currency conversion, invoice generation and balance summaries.
"""

from __future__ import annotations

from collections.abc import Iterable

from models import (
    CURRENCY_LABELS,
    DEFAULT_RATE,
    SCOPE_BY_KIND,
    SCOPES,
    AppData,
    Invoice,
    Settings,
    Tenant,
    UtilityCharge,
)
import utils


def effective_rate(settings: Settings) -> float:
    # zero / missing rate falls back to the default
    return settings.jod_to_ils_rate or DEFAULT_RATE


def convert_to_base(amount: float, from_currency: str, settings: Settings) -> float:
    """
    Convert `amount` from `from_currency` into settings.base_currency.
    Rate is 'ILS per 1 JOD'.
    """
    if from_currency == settings.base_currency:
        return amount
    rate = effective_rate(settings)
    if settings.base_currency == "JOD":
        return amount / rate
    return amount * rate


def format_currency(amount: float, settings: Settings) -> str:
    return f"{amount:,.2f} {CURRENCY_LABELS[settings.base_currency]}"


def period_for_scope(period: str, scope: str) -> str:
    """Monthly invoices keep YYYY-MM; yearly ones are stored as YYYY."""
    return period if scope == "monthly" else period[:4]


def utility_matches(utility: UtilityCharge, period: str, scope: str) -> bool:
    if scope == "monthly":
        return utility.period == period
    return utility.period[:4] == period[:4]


def eligible_tenants(data: AppData, scope: str, tenant_filter: str | None = None) -> list[Tenant]:
    units_by_id = {u.id: u for u in data.units}
    out = []
    for t in data.tenants:
        if not t.active:
            continue
        unit = units_by_id.get(t.unit_id)
        if unit is None or SCOPE_BY_KIND.get(unit.kind) != scope:
            continue
        if tenant_filter and t.id != tenant_filter:
            continue
        out.append(t)
    return out


def sum_utilities_base(
    utilities: Iterable[UtilityCharge], unit_id: str, period: str, scope: str, settings: Settings
) -> float:
    return sum(
        (
            convert_to_base(u.amount, u.currency, settings)
            for u in utilities
            if u.unit_id == unit_id and utility_matches(u, period, scope)
        ),
        0.0,
    )


def generate_invoices(
    data: AppData, scope: str, period: str, tenant_filter: str | None = None
) -> list[Invoice]:
    """
    One invoice per eligible tenant: rent (converted, no proration) + matching utilities.
    Already-invoiced periods are NOT skipped; see find_duplicates().
    """
    if scope not in SCOPES:
        raise ValueError(f"Unknown scope: {scope!r}")
    period = period.strip()
    if not utils.is_valid_scope_period(period, scope):
        raise ValueError(f"Invalid {scope} period: {period!r}")

    settings = data.settings
    units_by_id = {u.id: u for u in data.units}
    invoices = []
    for t in eligible_tenants(data, scope, tenant_filter):
        unit = units_by_id[t.unit_id]
        rent_base = convert_to_base(unit.rent_amount, unit.rent_currency, settings)
        utilities_base = sum_utilities_base(data.utilities, unit.id, period, scope, settings)
        invoices.append(
            Invoice(
                id=utils.uid("inv"),
                unit_id=unit.id,
                tenant_id=t.id,
                period=period_for_scope(period, scope),
                scope=scope,
                rent_base=rent_base,
                utilities_base=utilities_base,
                total_base=rent_base + utilities_base,
            )
        )
    return invoices


def find_duplicates(
    data: AppData, scope: str, period: str, tenant_filter: str | None = None
) -> list[Invoice]:
    """Existing invoices that a new generation run would duplicate."""
    target = period_for_scope(period.strip(), scope)
    tenant_ids = {t.id for t in eligible_tenants(data, scope, tenant_filter)}
    return [
        i for i in data.invoices
        if i.scope == scope and i.period == target and i.tenant_id in tenant_ids
    ]


def tenant_balances(data: AppData) -> list[dict]:
    """Invoiced vs paid per tenant, in base currency."""
    rows = []
    for t in data.tenants:
        invoiced = sum((i.total_base for i in data.invoices if i.tenant_id == t.id), 0.0)
        paid = sum(
            (convert_to_base(p.amount, p.currency, data.settings) for p in data.payments if p.tenant_id == t.id),
            0.0,
        )
        rows.append(
            {
                "tenant_id": t.id,
                "tenant": t.name,
                "invoiced": round(invoiced, 2),
                "paid": round(paid, 2),
                "balance": round(invoiced - paid, 2),
            }
        )
    return rows
