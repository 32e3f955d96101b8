"""
app.py
Streamlit bookkeeping for a residential/commercial complex (owner-only).
Run: streamlit run app.py
"""

from __future__ import annotations

import sqlite3
from datetime import date

import pandas as pd
import streamlit as st

import actions
import auth
import billing
import cache
import config
import db
import utils
from models import CURRENCIES, CURRENCY_LABELS, SCOPE_BY_KIND, SCOPES, UNIT_KINDS, UTILITY_TYPES, AppData

st.set_page_config(page_title="Complex Accounting", layout="wide")


def init_once() -> bool:
    try:
        db.init_db()
    except sqlite3.Error as e:
        st.error(f"Could not open the database: {e}")
        return False
    return True


def require_login():
    if "owner_id" not in st.session_state:
        st.session_state.owner_id = None
    if "email" not in st.session_state:
        st.session_state.email = None


def logout():
    st.session_state.owner_id = None
    st.session_state.email = None
    st.session_state.pop("data", None)
    st.success("Logged out.")


def login_screen():
    st.title("🔐 Owner Login")

    col1, col2 = st.columns([1, 1])
    with col1:
        email = st.text_input("Email", value=config.ADMIN_EMAIL)
        password = st.text_input("Password", type="password")
        try:
            first_run = not db.has_owner()
        except sqlite3.Error as e:
            st.error(f"Could not read owner accounts: {e}")
            return
        label = "Create account" if first_run else "Login"
        if st.button(label, type="primary"):
            try:
                if first_run:
                    owner_id = auth.register_owner(email, password)
                else:
                    owner_id = auth.sign_in(email, password)
            except auth.AuthError as e:
                st.error(str(e))
            else:
                st.session_state.owner_id = owner_id
                st.session_state.email = email.strip().lower()
                st.rerun()

    with col2:
        if config.ADMIN_EMAIL:
            st.info(f"Allowed email: **{config.ADMIN_EMAIL}**")
        else:
            st.info("No allowed email configured. Any registered owner may sign in.")
        if first_run:
            st.caption("No owner account yet: the first login creates it.")


# ---------- Snapshot handling ----------

def get_data() -> AppData:
    return st.session_state.data


def set_data(data: AppData) -> None:
    st.session_state.data = data
    cache.save_data(data)


def apply(outcome: actions.Outcome, success: str | None = None) -> None:
    """Keep the (optimistic) snapshot, then surface the result."""
    set_data(outcome.data)
    if not outcome.ok:
        st.session_state.flash = ("error", outcome.message)
    elif outcome.message or success:
        st.session_state.flash = ("success", outcome.message or success)


def show_flash():
    flash = st.session_state.pop("flash", None)
    if flash:
        kind, msg = flash
        (st.error if kind == "error" else st.success)(msg)


def load_data_once():
    if "data" in st.session_state:
        return
    owner_id = st.session_state.owner_id
    data = actions.initial_load(owner_id)
    data = actions.refresh_rate_if_stale(data, owner_id)
    set_data(data)


def money(amount: float) -> str:
    return billing.format_currency(amount, get_data().settings)


def unit_label(data: AppData, unit_id: str) -> str:
    unit = next((u for u in data.units if u.id == unit_id), None)
    return unit.name if unit else "(deleted)"


def tenant_label(data: AppData, tenant_id: str) -> str:
    tenant = next((t for t in data.tenants if t.id == tenant_id), None)
    return tenant.name if tenant else "(deleted)"


def delete_picker(label: str, options: dict[str, str], key: str) -> str | None:
    """Select + confirm + button. Returns the chosen id when the delete is confirmed."""
    if not options:
        return None
    c1, c2, c3 = st.columns([2, 1, 1])
    with c1:
        chosen = st.selectbox(label, ["(none)"] + list(options.keys()), key=f"{key}_sel")
    with c2:
        confirm = st.checkbox("Confirm delete", value=False, key=f"{key}_confirm")
    with c3:
        clicked = st.button("Delete", key=f"{key}_btn", disabled=not confirm or chosen == "(none)")
    if clicked and chosen != "(none)":
        return options[chosen]
    return None


# ---------- Pages ----------

def home_page():
    st.header("📊 Home")
    data = get_data()

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Units", len(data.units))
    c2.metric("Tenants", len(data.tenants))
    c3.metric("Invoices", len(data.invoices))
    c4.metric("Payments", len(data.payments))

    st.divider()

    st.subheader("General")
    st.write(f"Base currency: **{CURRENCY_LABELS[data.settings.base_currency]}**")
    st.write(f"Current rate: 1 JOD = **{data.settings.jod_to_ils_rate}** ILS")


def settings_page():
    st.header("⚙️ Settings")
    data = get_data()
    owner_id = st.session_state.owner_id

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Base currency")
        base = st.radio(
            "Show totals in",
            CURRENCIES,
            index=CURRENCIES.index(data.settings.base_currency),
            format_func=lambda c: CURRENCY_LABELS[c],
            horizontal=True,
        )
        if base != data.settings.base_currency:
            apply(actions.update_base_currency(data, owner_id, base))
            st.rerun()

    with col2:
        st.subheader("Exchange rate")
        rate = st.number_input(
            "1 JOD = how many ILS?",
            min_value=0.0,
            value=float(data.settings.jod_to_ils_rate),
            step=0.0001,
            format="%.6f",
        )
        st.text_input("1 ILS ≈ how many JOD?", value=f"{1 / (data.settings.jod_to_ils_rate or 1):.6f}", disabled=True)
        c1, c2 = st.columns(2)
        with c1:
            if st.button("Save rate", disabled=rate == data.settings.jod_to_ils_rate):
                apply(actions.update_exchange_rate(data, owner_id, rate), "Rate saved.")
                st.rerun()
        with c2:
            if st.button("Auto update", type="primary"):
                with st.spinner("Updating..."):
                    apply(actions.auto_fetch_rate(data, owner_id))
                st.rerun()
        st.caption("Affects currency conversion in all totals.")

    st.divider()

    st.subheader("Backup & restore")
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Back up now"):
            apply(actions.backup(data, owner_id))
            st.rerun()
    with c2:
        if st.button("Restore latest backup"):
            apply(actions.restore(data, owner_id))
            st.rerun()

    st.divider()

    st.subheader("Change password")
    p1 = st.text_input("New password", type="password")
    p2 = st.text_input("Confirm new password", type="password")
    if st.button("Update password"):
        if p1 != p2:
            st.error("Passwords do not match.")
        else:
            try:
                auth.change_password(owner_id, p1)
            except auth.AuthError as e:
                st.error(str(e))
            else:
                st.success("Password updated.")

    st.divider()

    st.subheader("Sample data")
    st.caption("Insert 3 sample units with tenants, utilities and payments (adds new rows each run).")
    if st.button("Insert sample data"):
        apply(actions.load_sample_data(data, owner_id))
        st.rerun()


def units_page():
    st.header("🏢 Units")
    data = get_data()
    owner_id = st.session_state.owner_id

    st.subheader("➕ Add unit")
    col1, col2, col3, col4 = st.columns([2, 1, 1, 1])
    with col1:
        name = st.text_input("Unit name (e.g. Apartment 3A)")
    with col2:
        kind = st.selectbox("Kind", UNIT_KINDS)
    with col3:
        rent = st.text_input("Rent", value="")
    with col4:
        rent_currency = st.selectbox("Currency", CURRENCIES, key="unit_currency")

    if st.button("Add unit", type="primary"):
        errors = utils.validate_unit_inputs(name, kind, rent, rent_currency)
        if errors:
            for e in errors:
                st.error(e)
        else:
            apply(actions.add_unit(data, owner_id, name, kind, float(rent), rent_currency), "Unit added.")
            st.rerun()

    st.divider()

    tenant_counts = {}
    for t in data.tenants:
        tenant_counts[t.unit_id] = tenant_counts.get(t.unit_id, 0) + 1
    rows = [
        {
            "name": u.name,
            "kind": u.kind,
            "billing": SCOPE_BY_KIND[u.kind],
            "rent": u.rent_amount,
            "currency": u.rent_currency,
            "rent (base)": round(billing.convert_to_base(u.rent_amount, u.rent_currency, data.settings), 2),
            "tenants": tenant_counts.get(u.id, 0),
        }
        for u in data.units
    ]
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No units yet.")

    st.caption("Deleting a unit also removes its tenants, utilities, invoices and payments.")
    unit_id = delete_picker("Unit", {u.name: u.id for u in data.units}, "unit_del")
    if unit_id:
        apply(actions.remove_unit(data, owner_id, unit_id), "Unit deleted.")
        st.rerun()


def tenants_page():
    st.header("👥 Tenants")
    data = get_data()
    owner_id = st.session_state.owner_id

    if not data.units:
        st.info("No units yet. Add a unit first.")
        return

    st.subheader("➕ Add tenant")
    units = {u.name: u.id for u in data.units}
    col1, col2, col3 = st.columns(3)
    with col1:
        name = st.text_input("Name")
        phone = st.text_input("Phone (optional)")
    with col2:
        unit_name = st.selectbox("Unit", list(units.keys()))
        start_date = st.date_input("Start date", value=date.today()).isoformat()
    with col3:
        active = st.checkbox("Active", value=True)

    if st.button("Add tenant", type="primary"):
        errors = utils.validate_tenant_inputs(name, units.get(unit_name, ""), start_date)
        if errors:
            for e in errors:
                st.error(e)
        else:
            apply(actions.add_tenant(data, owner_id, name, units[unit_name], start_date, active, phone), "Tenant added.")
            st.rerun()

    st.divider()

    rows = [
        {
            "name": t.name,
            "phone": t.phone or "",
            "unit": unit_label(data, t.unit_id),
            "start_date": t.start_date,
            "active": t.active,
        }
        for t in data.tenants
    ]
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No tenants yet.")
        return

    tenants = {f"{t.name} ({unit_label(data, t.unit_id)}) - {t.id}": t.id for t in data.tenants}
    c1, c2 = st.columns([2, 1])
    with c1:
        chosen = st.selectbox("Tenant", list(tenants.keys()), key="tenant_toggle_sel")
    with c2:
        if st.button("Toggle active"):
            apply(actions.toggle_tenant(data, owner_id, tenants[chosen]))
            st.rerun()

    st.caption("Deleting a tenant also removes their invoices and payments.")
    tenant_id = delete_picker("Tenant to delete", tenants, "tenant_del")
    if tenant_id:
        apply(actions.remove_tenant(data, owner_id, tenant_id), "Tenant deleted.")
        st.rerun()


def utilities_page():
    st.header("💡 Utilities")
    data = get_data()
    owner_id = st.session_state.owner_id

    if not data.units:
        st.info("No units yet. Add a unit first.")
        return

    st.subheader("➕ Add utility charge")
    units = {u.name: u.id for u in data.units}
    c1, c2, c3, c4, c5 = st.columns(5)
    with c1:
        unit_name = st.selectbox("Unit", list(units.keys()))
    with c2:
        period = st.text_input("Period (YYYY-MM or YYYY)", value=utils.current_month())
    with c3:
        type_ = st.selectbox("Type", UTILITY_TYPES)
    with c4:
        amount = st.text_input("Amount", value="")
    with c5:
        currency = st.selectbox("Currency", CURRENCIES, key="util_currency")

    if st.button("Add charge", type="primary"):
        errors = utils.validate_utility_inputs(units.get(unit_name, ""), period, type_, amount, currency)
        if errors:
            for e in errors:
                st.error(e)
        else:
            apply(actions.add_utility(data, owner_id, units[unit_name], period, type_, float(amount), currency), "Charge added.")
            st.rerun()

    st.divider()

    rows = [
        {
            "unit": unit_label(data, u.unit_id),
            "period": u.period,
            "type": u.type,
            "amount": u.amount,
            "currency": u.currency,
            "amount (base)": round(billing.convert_to_base(u.amount, u.currency, data.settings), 2),
        }
        for u in data.utilities
    ]
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No utility charges yet.")

    options = {f"{unit_label(data, u.unit_id)} {u.period} {u.type} {u.amount} {u.currency} - {u.id}": u.id for u in data.utilities}
    utility_id = delete_picker("Charge", options, "util_del")
    if utility_id:
        apply(actions.remove_utility(data, owner_id, utility_id), "Charge deleted.")
        st.rerun()


def invoices_page():
    st.header("🧾 Invoices")
    data = get_data()
    owner_id = st.session_state.owner_id

    st.subheader("Generate")
    c1, c2, c3 = st.columns(3)
    with c1:
        scope = st.radio("Scope", SCOPES, format_func=lambda s: f"{s} ({'apartments' if s == 'monthly' else 'shops'})")
    with c2:
        period = st.text_input("Period (YYYY-MM)", value=utils.current_month())
    with c3:
        candidates = billing.eligible_tenants(data, scope)
        options = {"All eligible tenants": ""}
        options.update({f"{t.name} ({unit_label(data, t.unit_id)})": t.id for t in candidates})
        tenant_filter = options[st.selectbox("Tenant", list(options.keys()))]

    duplicates = billing.find_duplicates(data, scope, period, tenant_filter or None)
    if duplicates:
        st.warning(
            f"{len(duplicates)} invoice(s) already exist for this period. Generating again creates duplicates."
        )

    if st.button("Generate invoices", type="primary", disabled=not utils.is_valid_scope_period(period, scope)):
        apply(actions.generate_invoices(data, owner_id, scope, period, tenant_filter or None))
        st.rerun()

    st.divider()

    rows = [
        {
            "period": i.period,
            "scope": i.scope,
            "unit": unit_label(data, i.unit_id),
            "tenant": tenant_label(data, i.tenant_id),
            "rent": money(i.rent_base),
            "utilities": money(i.utilities_base),
            "total": money(i.total_base),
        }
        for i in data.invoices
    ]
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No invoices yet.")

    options = {f"{i.period} {tenant_label(data, i.tenant_id)} {money(i.total_base)} - {i.id}": i.id for i in data.invoices}
    invoice_id = delete_picker("Invoice", options, "inv_del")
    if invoice_id:
        apply(actions.remove_invoice(data, owner_id, invoice_id), "Invoice deleted.")
        st.rerun()


def payments_page():
    st.header("💳 Payments")
    data = get_data()
    owner_id = st.session_state.owner_id

    if not data.tenants:
        st.info("No tenants yet. Add a tenant first.")
        return

    st.subheader("Add payment")
    tenants = {f"{t.name} ({unit_label(data, t.unit_id)})": t.id for t in data.tenants}
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        tenant_name = st.selectbox("Tenant", list(tenants.keys()))
        pay_date = st.date_input("Date", value=date.today()).isoformat()
    with c2:
        amount = st.text_input("Amount", value="")
        currency = st.selectbox("Currency", CURRENCIES, key="pay_currency")
    with c3:
        period = st.text_input("Period", value=utils.current_month())
    with c4:
        note = st.text_input("Note", value="")

    if st.button("Record payment", type="primary"):
        errors = utils.validate_payment_inputs(tenants[tenant_name], pay_date, amount, currency, period)
        if errors:
            for e in errors:
                st.error(e)
        else:
            apply(
                actions.add_payment(data, owner_id, tenants[tenant_name], pay_date, float(amount), currency, period, note),
                "Payment recorded.",
            )
            st.rerun()

    st.divider()

    rows = [
        {
            "date": p.date,
            "tenant": tenant_label(data, p.tenant_id),
            "unit": unit_label(data, p.unit_id),
            "amount": p.amount,
            "currency": p.currency,
            "amount (base)": money(billing.convert_to_base(p.amount, p.currency, data.settings)),
            "period": p.period or "",
            "note": p.note or "",
        }
        for p in data.payments
    ]
    if rows:
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No payments yet.")

    options = {f"{p.date} {tenant_label(data, p.tenant_id)} {p.amount} {p.currency} - {p.id}": p.id for p in data.payments}
    payment_id = delete_picker("Payment", options, "pay_del")
    if payment_id:
        apply(actions.remove_payment(data, owner_id, payment_id), "Payment deleted.")
        st.rerun()


def reports_page():
    st.header("📑 Reports")
    data = get_data()

    st.subheader("Balances (base currency)")
    balances = billing.tenant_balances(data)
    if balances:
        st.dataframe(pd.DataFrame(balances).drop(columns=["tenant_id"]), use_container_width=True, hide_index=True)
    else:
        st.caption("No tenants yet.")

    st.divider()

    st.subheader("Export invoices to CSV")
    if data.invoices:
        st.download_button(
            "Download invoices.csv",
            data=utils.invoices_to_csv_bytes(
                [{**vars(i), "tenant": tenant_label(data, i.tenant_id), "unit": unit_label(data, i.unit_id)} for i in data.invoices]
            ),
            file_name="invoices.csv",
            mime="text/csv",
        )
    else:
        st.caption("No invoices to export.")

    st.subheader("Export payments to CSV")
    if data.payments:
        st.download_button(
            "Download payments.csv",
            data=utils.payments_to_csv_bytes(
                [{**vars(p), "tenant": tenant_label(data, p.tenant_id), "unit": unit_label(data, p.unit_id)} for p in data.payments]
            ),
            file_name="payments.csv",
            mime="text/csv",
        )
    else:
        st.caption("No payments to export.")


PAGES = {
    "Home": home_page,
    "Settings": settings_page,
    "Units": units_page,
    "Tenants": tenants_page,
    "Utilities": utilities_page,
    "Invoices": invoices_page,
    "Payments": payments_page,
    "Reports": reports_page,
}


def main_app():
    load_data_once()

    st.sidebar.title("🏘️ Complex Accounting")
    st.sidebar.caption(f"Logged in as: {st.session_state.email}")
    st.sidebar.caption(f"Base currency: {CURRENCY_LABELS[get_data().settings.base_currency]}")

    pages = list(PAGES.keys())
    if "page" not in st.session_state:
        st.session_state.page = "Home"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        logout()
        st.rerun()

    show_flash()
    PAGES[st.session_state.page]()


# --------- App entry ---------

def run():
    if not init_once():
        return
    require_login()

    if not st.session_state.owner_id:
        login_screen()
        return

    main_app()


if __name__ == "__main__":
    run()
