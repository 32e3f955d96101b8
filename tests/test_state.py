from models import AppData, Invoice, Payment, Tenant, Unit, UtilityCharge
import state


def _populated(sample_data):
    data = state.add_invoices(
        sample_data,
        [
            Invoice("inv_a", "unit_apt1", "tenant_a", "2024-05", "monthly", 200, 50, 250),
            Invoice("inv_s", "unit_shop", "tenant_s", "2024", "yearly", 600, 30, 630),
        ],
    )
    data = state.add_payment(data, Payment("pay_a", "tenant_a", "unit_apt1", "2024-05-02", 250, "JOD"))
    data = state.add_payment(data, Payment("pay_s", "tenant_s", "unit_shop", "2024-05-02", 3000, "ILS"))
    return data


def test_remove_unit_cascades_to_all_dependents(sample_data):
    data = _populated(sample_data)
    after = state.remove_unit(data, "unit_apt1")

    assert [u.id for u in after.units] == ["unit_shop"]
    assert all(t.unit_id != "unit_apt1" for t in after.tenants)
    assert all(u.unit_id != "unit_apt1" for u in after.utilities)
    assert all(i.unit_id != "unit_apt1" for i in after.invoices)
    assert all(p.unit_id != "unit_apt1" for p in after.payments)
    # the other unit's records survive
    assert [t.id for t in after.tenants] == ["tenant_s"]
    assert [i.id for i in after.invoices] == ["inv_s"]
    assert [p.id for p in after.payments] == ["pay_s"]
    assert len(after.utilities) == 3


def test_remove_tenant_cascades_invoices_and_payments(sample_data):
    data = _populated(sample_data)
    after = state.remove_tenant(data, "tenant_a")

    assert [t.id for t in after.tenants] == ["tenant_s"]
    assert [i.id for i in after.invoices] == ["inv_s"]
    assert [p.id for p in after.payments] == ["pay_s"]
    # units and utilities are untouched
    assert after.units == data.units
    assert after.utilities == data.utilities


def test_transitions_do_not_mutate_input(sample_data):
    before = sample_data
    state.remove_unit(before, "unit_apt1")
    state.toggle_tenant(before, "tenant_a")
    assert len(before.units) == 2
    assert before.tenants[0].active is True


def test_new_records_are_prepended():
    data = AppData()
    data = state.add_unit(data, Unit("u1", "A", "apartment", 1, "JOD"))
    data = state.add_unit(data, Unit("u2", "B", "shop", 1, "JOD"))
    assert [u.id for u in data.units] == ["u2", "u1"]

    data = state.add_utility(data, UtilityCharge("x1", "u1", "2024-01", "water", 1, "JOD"))
    data = state.add_utility(data, UtilityCharge("x2", "u1", "2024-02", "water", 1, "JOD"))
    assert [u.id for u in data.utilities] == ["x2", "x1"]

    data = state.add_invoices(data, [Invoice("i1", "u1", "t", "2024-01", "monthly", 1, 0, 1)])
    data = state.add_invoices(
        data,
        [
            Invoice("i2", "u1", "t", "2024-02", "monthly", 1, 0, 1),
            Invoice("i3", "u1", "t", "2024-02", "monthly", 1, 0, 1),
        ],
    )
    assert [i.id for i in data.invoices] == ["i2", "i3", "i1"]


def test_toggle_tenant_flips_only_target(sample_data):
    data = state.toggle_tenant(sample_data, "tenant_a")
    assert state.find_tenant(data, "tenant_a").active is False
    assert state.find_tenant(data, "tenant_s").active is True

    data = state.toggle_tenant(data, "tenant_a")
    assert state.find_tenant(data, "tenant_a").active is True


def test_single_record_removals(sample_data):
    data = _populated(sample_data)
    assert [u.id for u in state.remove_utility(data, "util_1").utilities] == ["util_2", "util_3", "util_4", "util_5"]
    assert [i.id for i in state.remove_invoice(data, "inv_a").invoices] == ["inv_s"]
    assert [p.id for p in state.remove_payment(data, "pay_s").payments] == ["pay_a"]


def test_settings_transitions(sample_data):
    data = state.set_base_currency(sample_data, "ILS")
    assert data.settings.base_currency == "ILS"
    assert data.settings.jod_to_ils_rate == 5.0

    data = state.set_rate(data, 4.9)
    assert data.settings.jod_to_ils_rate == 4.9
    assert state.set_rate(data, None).settings.jod_to_ils_rate == 0


def test_find_tenant_missing():
    assert state.find_tenant(AppData(tenants=(Tenant("t1", "A", "u", "2024-01-01"),)), "nope") is None
