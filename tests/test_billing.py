import pytest
from dataclasses import replace

import billing
import state
from models import Invoice, Payment, Settings, Tenant


@pytest.mark.parametrize("base", ["JOD", "ILS"])
@pytest.mark.parametrize("amount", [0, 1, 123.45, -7.5, 1e9])
def test_same_currency_is_unchanged(base, amount):
    assert billing.convert_to_base(amount, base, Settings(base, 3.7)) == amount


def test_ils_to_jod_divides_by_rate():
    assert billing.convert_to_base(100, "ILS", Settings("JOD", 5)) == 20


def test_jod_to_ils_multiplies_by_rate():
    assert billing.convert_to_base(20, "JOD", Settings("ILS", 5)) == 100


@pytest.mark.parametrize("rate", [0, None])
def test_missing_rate_defaults_to_five(rate):
    assert billing.convert_to_base(100, "ILS", Settings("JOD", rate)) == 20


@pytest.mark.parametrize("x", [1.0, 33.333, 4821.07])
def test_round_trip_between_bases(x):
    rate = 4.87
    to_jod = billing.convert_to_base(x, "ILS", Settings("JOD", rate))
    back = billing.convert_to_base(to_jod, "JOD", Settings("ILS", rate))
    assert back == pytest.approx(x)


def test_monthly_invoice_for_active_apartment(sample_data):
    invoices = billing.generate_invoices(sample_data, "monthly", "2024-05")

    assert len(invoices) == 1
    inv = invoices[0]
    assert inv.tenant_id == "tenant_a"
    assert inv.unit_id == "unit_apt1"
    assert inv.period == "2024-05"
    assert inv.scope == "monthly"
    assert inv.rent_base == 200
    assert inv.utilities_base == 50
    assert inv.total_base == 250
    assert inv.id.startswith("inv_")


def test_monthly_requires_exact_period(sample_data):
    # 2024-06 electricity only
    (inv,) = billing.generate_invoices(sample_data, "monthly", "2024-06")
    assert inv.utilities_base == 30

    (inv,) = billing.generate_invoices(sample_data, "monthly", "2024-07")
    assert inv.utilities_base == 0
    assert inv.total_base == 200


def test_yearly_sums_every_month_of_the_year_only(sample_data):
    invoices = billing.generate_invoices(sample_data, "yearly", "2024-03")

    assert len(invoices) == 1
    inv = invoices[0]
    assert inv.tenant_id == "tenant_s"
    assert inv.period == "2024"
    # 3000 ILS rent, 100 + 50 ILS utilities, 2023-12 excluded
    assert inv.rent_base == pytest.approx(600)
    assert inv.utilities_base == pytest.approx(30)
    assert inv.total_base == pytest.approx(630)


def test_yearly_rent_is_not_prorated(sample_data):
    (inv,) = billing.generate_invoices(sample_data, "yearly", "2023")
    assert inv.rent_base == pytest.approx(600)
    assert inv.utilities_base == pytest.approx(100)


def test_inactive_tenants_are_skipped(sample_data):
    data = state.toggle_tenant(sample_data, "tenant_a")
    assert billing.generate_invoices(data, "monthly", "2024-05") == []


def test_tenant_filter(sample_data, apartment):
    data = state.add_tenant(sample_data, Tenant("tenant_b", "Rana", apartment.id, "2024-02-01", True))

    assert len(billing.generate_invoices(data, "monthly", "2024-05")) == 2
    (inv,) = billing.generate_invoices(data, "monthly", "2024-05", tenant_filter="tenant_b")
    assert inv.tenant_id == "tenant_b"


def test_tenant_of_missing_unit_is_skipped(sample_data):
    data = state.add_tenant(sample_data, Tenant("tenant_x", "Ghost", "unit_gone", "2024-01-01", True))
    assert [i.tenant_id for i in billing.generate_invoices(data, "monthly", "2024-05")] == ["tenant_a"]


def test_ils_base_converts_rent_and_utilities(sample_data):
    data = replace(sample_data, settings=Settings("ILS", 5))
    (inv,) = billing.generate_invoices(data, "monthly", "2024-05")
    assert inv.rent_base == 1000
    assert inv.utilities_base == 250
    assert inv.total_base == 1250


def test_unknown_scope_rejected(sample_data):
    with pytest.raises(ValueError):
        billing.generate_invoices(sample_data, "weekly", "2024-05")


@pytest.mark.parametrize("period", ["2024", "May", ""])
def test_monthly_scope_needs_year_and_month(sample_data, period):
    with pytest.raises(ValueError):
        billing.generate_invoices(sample_data, "monthly", period)


def test_padded_period_matches_utilities(sample_data):
    (inv,) = billing.generate_invoices(sample_data, "monthly", "2024-05 ")
    assert inv.period == "2024-05"
    assert inv.utilities_base == 50

    (inv,) = billing.generate_invoices(sample_data, "yearly", " 2024")
    assert inv.period == "2024"
    assert inv.utilities_base == pytest.approx(30)


def test_generating_twice_produces_duplicates(sample_data):
    first = billing.generate_invoices(sample_data, "monthly", "2024-05")
    data = state.add_invoices(sample_data, first)
    assert billing.find_duplicates(data, "monthly", "2024-05") == first

    second = billing.generate_invoices(data, "monthly", "2024-05")
    assert len(second) == 1
    assert second[0].id != first[0].id


def test_find_duplicates_matches_yearly_period(sample_data):
    existing = Invoice("inv_old", "unit_shop", "tenant_s", "2024", "yearly", 600, 30, 630)
    data = state.add_invoices(sample_data, [existing])
    assert billing.find_duplicates(data, "yearly", "2024-09") == [existing]
    assert billing.find_duplicates(data, "yearly", "2025") == []
    assert billing.find_duplicates(data, "yearly", " 2024 ") == [existing]


def test_tenant_balances(sample_data):
    inv = Invoice("inv_1", "unit_apt1", "tenant_a", "2024-05", "monthly", 200, 50, 250)
    data = state.add_invoices(sample_data, [inv])
    data = state.add_payment(data, Payment("pay_1", "tenant_a", "unit_apt1", "2024-05-03", 500, "ILS"))
    rows = {r["tenant_id"]: r for r in billing.tenant_balances(data)}

    assert rows["tenant_a"]["invoiced"] == 250
    assert rows["tenant_a"]["paid"] == 100
    assert rows["tenant_a"]["balance"] == 150
    assert rows["tenant_s"]["balance"] == 0


def test_format_currency():
    assert billing.format_currency(1234.5, Settings("JOD", 5)) == "1,234.50 Jordanian Dinar"
