"""
app.py
Streamlit gym business console (admin / partner / employee).
Run: streamlit run app.py
"""

from __future__ import annotations

import logging
from datetime import date

import pandas as pd
import streamlit as st

import auth
import billing
import finance
import members
import reports
import utils
from config import settings
from models import EXPENSE_CATEGORIES, PAYMENT_METHODS, TRANSACTION_TYPES, UnknownCatalogEntry, build_catalog
from notify import WhatsAppDispatcher
from sheets import SheetsClient, StoreError

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

st.set_page_config(page_title=f"{settings.GYM_NAME} Console", layout="wide")


@st.cache_resource
def get_store() -> SheetsClient:
    return SheetsClient()


@st.cache_resource
def get_dispatcher() -> WhatsAppDispatcher:
    return WhatsAppDispatcher()


@st.cache_resource
def get_catalog():
    return build_catalog(settings.PLAN_FEES)


def init_once():
    if st.session_state.get("initialized"):
        return
    # first run against an empty users sheet creates the default admin
    auth.ensure_default_admin(get_store(), settings.DEFAULT_ADMIN_USERNAME, settings.DEFAULT_ADMIN_PASSWORD)
    st.session_state.initialized = True


def require_login():
    if "user" not in st.session_state:
        st.session_state.user = None


def logout():
    st.session_state.user = None
    st.success("Logged out.")


def login_screen():
    st.title(f"🔐 {settings.GYM_NAME} Staff Login")

    store = get_store()
    if not store.is_configured:
        st.error("SHEETS_API_URL is not set. Configure it in the environment or .env file.")
        return

    col1, col2 = st.columns([1, 1])
    with col1:
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        if st.button("Login", type="primary"):
            try:
                user = auth.login(store, username, password)
            except StoreError as exc:
                show_store_error(exc)
                return
            if user:
                st.session_state.user = user
                st.rerun()
            else:
                st.error("Invalid username or password.")

    with col2:
        st.info(
            "On first run an admin account is created from DEFAULT_ADMIN_USERNAME / "
            "DEFAULT_ADMIN_PASSWORD. Change the password under Settings after logging in."
        )


# ---------- Data access helpers ----------

def load_all_members():
    return members.load_members(get_store(), get_catalog(), date.today())


def show_store_error(exc: StoreError):
    st.error(f"Could not reach the data sheet: {exc}")


def member_label(m) -> str:
    return f"{m.name} ({m.phone}) - ID {m.id}"


def dashboard_page():
    st.header("📊 Dashboard")

    today = date.today()
    try:
        all_members = load_all_members()
        transactions = finance.load_transactions(get_store())
        expenses = finance.load_expenses(get_store())
    except StoreError as exc:
        show_store_error(exc)
        return

    stats = reports.dashboard_stats(all_members, transactions, expenses, today, settings.EXPIRY_WARNING_DAYS)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total members", stats["totalMembers"])
    c2.metric("Active members", stats["activeMembers"])
    c3.metric(f"Expiring in {settings.EXPIRY_WARNING_DAYS} days", stats["expiringMemberships"])
    c4.metric("New this month", stats["thisMonthMembers"])

    if auth.can_access(st.session_state.user.role, "Reports"):
        c5, c6, c7 = st.columns(3)
        c5.metric("Revenue (this month)", f"Rs {stats['thisMonthRevenue']:,}")
        c6.metric("Expenses (this month)", f"Rs {stats['thisMonthExpenses']:,}")
        c7.metric("Net profit (all time)", f"Rs {stats['netProfit']:,}")

    st.divider()

    st.subheader("Expiring soon")
    expiring = members.expiring_members(all_members, today, settings.EXPIRY_WARNING_DAYS)
    if expiring:
        st.dataframe(reports.members_frame(expiring, get_catalog(), today), use_container_width=True, hide_index=True)
    else:
        st.caption("No members expiring soon.")

    st.subheader("Recent payments")
    recent = finance.filter_transactions(finance.visible_transactions(transactions, st.session_state.user))[:5]
    if recent:
        st.dataframe(pd.DataFrame([{"member": t.member_name, "amount": t.amount, "method": t.payment_method,
                                    "date": t.date, "type": t.type} for t in recent]),
                     use_container_width=True, hide_index=True)
    else:
        st.caption("No payments yet.")


def fee_preview(plan_id: str, period_id: str, start: date, admission_fee: int):
    catalog = get_catalog()
    period = catalog.period(period_id)
    plan = catalog.plan(plan_id)
    expiry = billing.compute_expiry(start, period)
    fee = billing.compute_total_fee(admission_fee, plan.base_fee, period)
    note = " (admission waived for daily pass)" if period.is_daily_pass else ""
    st.info(f"Expiry: **{expiry.isoformat()}** | Total fee: **Rs {fee:,}**{note}")


def member_form(existing=None):
    catalog = get_catalog()
    user = st.session_state.user
    plan_ids = [p.id for p in catalog.plans]
    period_ids = [p.id for p in catalog.periods]

    if existing:
        st.subheader(f"✏️ Edit Member (ID: {existing.id})")
    else:
        st.subheader("➕ Register Member")

    col1, col2, col3 = st.columns(3)
    with col1:
        name = st.text_input("Full name", value=(existing.name if existing else ""))
        phone = st.text_input("Phone", value=(existing.phone if existing else ""))
        cnic = st.text_input("CNIC", value=(existing.cnic if existing else ""))

    with col2:
        address = st.text_input("Address", value=(existing.address if existing else ""))
        plan_id = st.selectbox(
            "Membership type",
            options=plan_ids,
            key=f"mf_plan_{existing.id if existing else 'new'}",
            format_func=catalog.plan_label,
            index=(plan_ids.index(existing.plan_id) if existing and existing.plan_id in plan_ids else 0),
        )
        period_id = st.selectbox(
            "Fee type",
            options=period_ids,
            key=f"mf_period_{existing.id if existing else 'new'}",
            format_func=catalog.period_label,
            index=(period_ids.index(existing.period_id) if existing and existing.period_id in period_ids else 1),
        )

    with col3:
        joining_date = st.date_input(
            "Joining date", value=(existing.joining_date if existing and existing.joining_date else date.today())
        )
        if existing:
            admission_raw = "0"
        else:
            admission_raw = st.text_input("Admission fee (Rs)", value=str(settings.DEFAULT_ADMISSION_FEE))
        payment_method = st.selectbox("Payment method", PAYMENT_METHODS, disabled=bool(existing), key="mf_method")

    admission_fee = utils.coerce_amount(admission_raw)
    fee_preview(plan_id, period_id, joining_date, admission_fee)

    errors = utils.validate_member_inputs(name, phone, cnic, address, admission_raw)
    for e in errors:
        st.error(e)

    if not st.button("Save", type="primary", disabled=bool(errors)):
        return

    store = get_store()
    try:
        if existing:
            result = members.update_member(
                store, catalog, existing, name=name, phone=phone, cnic=cnic, address=address,
                plan=plan_id, period=period_id, joining_date=joining_date, actor=user, today=date.today(),
            )
        else:
            result = members.register_member(
                store, catalog, name=name, phone=phone, cnic=cnic, address=address, plan=plan_id,
                period=period_id, joining_date=joining_date, admission_fee=admission_fee, actor=user,
                today=date.today(), dispatcher=get_dispatcher(), payment_method=payment_method,
            )
    except UnknownCatalogEntry as exc:
        st.error(str(exc))
        return

    if not result.success:
        st.error(result.error)
        return
    if existing:
        st.session_state.edit_member_id = None
        st.success("Member updated.")
    else:
        st.success(f"Member registered. Fee: Rs {result.member.fee:,}")
        if not result.payment_recorded:
            st.warning("Member saved, but the payment could not be recorded.")
    st.rerun()


def members_page():
    st.header("👥 Members")

    catalog = get_catalog()
    today = date.today()
    try:
        all_members = load_all_members()
    except StoreError as exc:
        show_store_error(exc)
        return

    with st.sidebar:
        st.subheader("Search & Filters")
        search = st.text_input("Search (name/phone/ID)")
        status_filter = st.selectbox("Status", ["all", "active", "expired", "pending", "expiring_soon"])
        plan_filter = st.selectbox("Membership type", ["all"] + [p.id for p in catalog.plans],
                                   format_func=lambda k: "All" if k == "all" else catalog.plan_label(k))

    rows = members.filter_members(all_members, today, search, status_filter, plan_filter,
                                  settings.EXPIRY_WARNING_DAYS)
    st.dataframe(reports.members_frame(rows, catalog, today), use_container_width=True, hide_index=True)

    st.divider()

    by_id = {m.id: m for m in rows if m.id}
    colA, colB = st.columns([1, 2])
    with colA:
        st.subheader("Select member")
        selected_id = st.selectbox("Member", options=["(none)"] + list(by_id.keys()),
                                   format_func=lambda k: k if k == "(none)" else member_label(by_id[k]))

    with colB:
        if selected_id != "(none)":
            st.subheader("Member actions")
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Edit"):
                    st.session_state.edit_member_id = selected_id
                    st.rerun()
            with c2:
                delete_confirm = st.checkbox("Confirm delete", value=False, key="del_confirm")
                if st.button("Delete", type="secondary", disabled=not delete_confirm):
                    result = members.delete_member(get_store(), by_id[selected_id], st.session_state.user)
                    if result.success:
                        st.success("Member deleted.")
                        st.rerun()
                    else:
                        st.error(result.error)

            with st.expander("Payment history"):
                try:
                    history = finance.visible_transactions(
                        finance.member_transactions(get_store(), selected_id), st.session_state.user
                    )
                except StoreError as exc:
                    show_store_error(exc)
                    history = []
                if history:
                    st.dataframe(pd.DataFrame([{"date": t.date, "amount": t.amount, "type": t.type,
                                                "method": t.payment_method, "notes": t.notes} for t in history]),
                                 use_container_width=True, hide_index=True)
                else:
                    st.caption("No payments recorded for this member.")

    st.divider()

    edit_id = st.session_state.get("edit_member_id")
    existing = next((m for m in all_members if m.id == edit_id), None) if edit_id else None
    if existing:
        member_form(existing=existing)
        if st.button("Cancel edit"):
            st.session_state.edit_member_id = None
            st.rerun()
    else:
        member_form(existing=None)


def renewals_page():
    st.header("🔁 Renewals")

    catalog = get_catalog()
    today = date.today()
    try:
        all_members = [m for m in load_all_members() if m.id]
    except StoreError as exc:
        show_store_error(exc)
        return
    if not all_members:
        st.info("No members yet.")
        return

    by_id = {m.id: m for m in sorted(all_members, key=lambda m: m.name)}
    member_id = st.selectbox("Member", list(by_id.keys()), format_func=lambda k: member_label(by_id[k]))
    m = by_id[member_id]

    st.write(
        f"Plan: **{catalog.plan_label(m.plan_id)}** | Fee type: **{catalog.period_label(m.period_id)}** | "
        f"Expires: **{utils.iso_or_empty(m.expiry_date) or '-'}** | Status: **{billing.member_status(m, today)}**"
    )

    if catalog.find_plan(m.plan_id) is None:
        st.error(f"This member's plan ({m.plan_id!r}) is not in the catalog. Edit the member first.")
        return

    period_ids = [p.id for p in catalog.periods]
    col1, col2, col3 = st.columns(3)
    with col1:
        period_id = st.selectbox("Fee type", period_ids, format_func=catalog.period_label,
                                 index=(period_ids.index(m.period_id) if m.period_id in period_ids else 1))
    with col2:
        can_stack = m.expiry_date is not None and m.expiry_date >= today
        stack = st.checkbox("Continue from current expiry", value=False, disabled=not can_stack)
        start_default = m.expiry_date if stack and can_stack else today
        start_date = st.date_input("Start date", value=start_default)
    with col3:
        record_payment = st.toggle("Record payment now", value=True)
        pay_method = st.selectbox("Payment method", PAYMENT_METHODS, disabled=not record_payment)

    fee_preview(m.plan_id, period_id, start_date, 0)

    if st.button("Renew", type="primary"):
        try:
            result = members.renew_member(
                get_store(), catalog, m, start_date=start_date, period=period_id, actor=st.session_state.user,
                today=today, dispatcher=get_dispatcher(), record_payment=record_payment,
                payment_method=pay_method,
            )
        except UnknownCatalogEntry as exc:
            st.error(str(exc))
            return
        if not result.success:
            st.error(result.error)
            return
        st.success(f"Renewed until {result.member.expiry_date.isoformat()}.")
        if record_payment and not result.payment_recorded:
            st.warning("Renewal saved, but the payment could not be recorded.")
        st.rerun()


def transactions_page():
    st.header("💳 Transactions")

    user = st.session_state.user
    try:
        transactions = finance.visible_transactions(finance.load_transactions(get_store()), user)
    except StoreError as exc:
        show_store_error(exc)
        return

    with st.sidebar:
        st.subheader("Search & Filters")
        search = st.text_input("Search (member name/ID)")
        method = st.selectbox("Payment method", ["all", *PAYMENT_METHODS])

    rows = finance.filter_transactions(transactions, search, method)
    st.metric("Total", f"Rs {sum(t.amount for t in rows):,}")
    if rows:
        st.dataframe(pd.DataFrame([t.__dict__ for t in rows]), use_container_width=True, hide_index=True)
    else:
        st.caption("No transactions found.")

    by_id = {t.id: t for t in rows if t.id}
    if by_id:
        selected = st.selectbox("Payment", ["(none)"] + list(by_id.keys()),
                                format_func=lambda k: k if k == "(none)" else
                                f"{by_id[k].member_name} - Rs {by_id[k].amount:,} ({utils.iso_or_empty(by_id[k].date)})")
        if selected != "(none)" and st.button("Edit payment"):
            st.session_state.edit_transaction_id = selected
            st.rerun()

    st.divider()
    edit_id = st.session_state.get("edit_transaction_id")
    transaction_form(existing=by_id.get(edit_id) if edit_id else None)


def transaction_form(existing=None):
    user = st.session_state.user
    st.subheader(f"✏️ Edit Payment (ID: {existing.id})" if existing else "Add payment")

    suffix = existing.id if existing else "new"
    c1, c2, c3 = st.columns(3)
    with c1:
        member_name = st.text_input("Member name", value=(existing.member_name if existing else ""), key=f"tx_name_{suffix}")
        member_phone = st.text_input("Member phone", value=(existing.member_phone if existing else ""),
                                     key=f"tx_phone_{suffix}")
    with c2:
        amount = st.text_input("Amount", value=(str(existing.amount) if existing else ""), key=f"tx_amount_{suffix}")
        pay_date = st.date_input("Date", value=(existing.date if existing and existing.date else date.today()),
                                 key=f"tx_date_{suffix}")
    with c3:
        pay_method = st.selectbox(
            "Method", PAYMENT_METHODS, key=f"tx_method_{suffix}",
            index=(PAYMENT_METHODS.index(existing.payment_method)
                   if existing and existing.payment_method in PAYMENT_METHODS else 0),
        )
        kind = st.selectbox(
            "Type", TRANSACTION_TYPES, key=f"tx_kind_{suffix}",
            index=TRANSACTION_TYPES.index(existing.type if existing and existing.type in TRANSACTION_TYPES
                                          else "membership"),
        )
        notes = st.text_input("Notes", value=(existing.notes if existing else ""), key=f"tx_notes_{suffix}")

    if existing and st.button("Cancel edit", key="tx_cancel"):
        st.session_state.edit_transaction_id = None
        st.rerun()
    if not st.button("Save payment" if existing else "Record payment", type="primary"):
        return
    errors = utils.validate_amount(amount)
    if len(member_name.strip()) < 3:
        errors.append("Member name is required.")
    for e in errors:
        st.error(e)
    if errors:
        return

    try:
        if existing:
            result = finance.update_transaction(
                get_store(), user, existing, member_name=member_name, member_phone=member_phone, amount=amount,
                payment_method=pay_method, on=pay_date, kind=kind, notes=notes,
            )
        else:
            result = finance.add_transaction(
                get_store(), user, member_name=member_name, member_phone=member_phone, amount=amount,
                payment_method=pay_method, on=pay_date, kind=kind, notes=notes,
            )
    except PermissionError as exc:
        st.error(str(exc))
        return
    if result.success:
        st.session_state.edit_transaction_id = None
        st.success("Payment saved." if existing else "Payment recorded.")
        st.rerun()
    else:
        st.error(result.error)


def expense_form(existing=None):
    user = st.session_state.user
    st.subheader(f"✏️ Edit Expense (ID: {existing.id})" if existing else "➕ Add Expense")

    c1, c2, c3 = st.columns(3)
    with c1:
        description = st.text_input("Description", value=(existing.description if existing else ""))
        amount = st.text_input("Amount", value=(str(existing.amount) if existing else ""))
    with c2:
        category = st.selectbox(
            "Category", EXPENSE_CATEGORIES, key="ef_category",
            index=(EXPENSE_CATEGORIES.index(existing.category) if existing and existing.category in EXPENSE_CATEGORIES else 0),
        )
        on = st.date_input("Date", value=(existing.date if existing and existing.date else date.today()))
    with c3:
        notes = st.text_input("Notes", value=(existing.notes if existing else ""))

    if not st.button("Save expense", type="primary"):
        return
    errors = utils.validate_amount(amount)
    if not description.strip():
        errors.append("Description is required.")
    for e in errors:
        st.error(e)
    if errors:
        return

    if existing:
        result = finance.update_expense(get_store(), user, existing, description=description, amount=amount,
                                        category=category, on=on, notes=notes)
    else:
        result = finance.add_expense(get_store(), user, description=description, amount=amount,
                                     category=category, on=on, notes=notes)
    if result.success:
        st.session_state.edit_expense_id = None
        st.success("Expense saved.")
        st.rerun()
    else:
        st.error(result.error)


def expenses_page():
    st.header("🧾 Expenses")

    try:
        expenses = finance.load_expenses(get_store())
    except StoreError as exc:
        show_store_error(exc)
        return

    with st.sidebar:
        st.subheader("Search & Filters")
        search = st.text_input("Search (description)")
        category = st.selectbox("Category", ["all", *EXPENSE_CATEGORIES])

    rows = finance.filter_expenses(expenses, search, category)
    st.metric("Total", f"Rs {sum(e.amount for e in rows):,}")
    if rows:
        st.dataframe(pd.DataFrame([e.__dict__ for e in rows]), use_container_width=True, hide_index=True)
    else:
        st.caption("No expenses found.")

    by_id = {e.id: e for e in rows if e.id}
    if by_id:
        selected = st.selectbox("Expense", ["(none)"] + list(by_id.keys()),
                                format_func=lambda k: k if k == "(none)" else f"{by_id[k].description} - Rs {by_id[k].amount:,}")
        if selected != "(none)":
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Edit expense"):
                    st.session_state.edit_expense_id = selected
                    st.rerun()
            with c2:
                confirm = st.checkbox("Confirm delete", value=False, key="del_expense")
                if st.button("Delete expense", disabled=not confirm):
                    result = finance.delete_expense(get_store(), st.session_state.user, by_id[selected])
                    if result.success:
                        st.success("Expense deleted.")
                        st.rerun()
                    else:
                        st.error(result.error)

    st.divider()
    edit_id = st.session_state.get("edit_expense_id")
    expense_form(existing=by_id.get(edit_id) if edit_id else None)


def reports_page():
    st.header("📈 Reports")

    catalog = get_catalog()
    today = date.today()
    try:
        all_members = load_all_members()
        transactions = finance.load_transactions(get_store())
        expenses = finance.load_expenses(get_store())
    except StoreError as exc:
        show_store_error(exc)
        return

    st.subheader("Export to CSV")
    c1, c2, c3 = st.columns(3)
    with c1:
        st.download_button("Download members.csv",
                           data=reports.members_frame(all_members, catalog, today).to_csv(index=False).encode("utf-8"),
                           file_name="members.csv", mime="text/csv", disabled=not all_members)
    with c2:
        st.download_button("Download transactions.csv", data=reports.to_csv_bytes(transactions),
                           file_name="transactions.csv", mime="text/csv", disabled=not transactions)
    with c3:
        st.download_button("Download expenses.csv", data=reports.to_csv_bytes(expenses),
                           file_name="expenses.csv", mime="text/csv", disabled=not expenses)

    st.divider()

    st.subheader("Revenue by month")
    revenue = reports.revenue_summary_by_month(transactions)
    if not revenue.empty:
        st.bar_chart(revenue.set_index("month")["revenue"].sort_index())
    st.dataframe(revenue, use_container_width=True, hide_index=True)

    st.subheader("Expenses by category")
    st.dataframe(reports.expense_summary_by_category(expenses), use_container_width=True, hide_index=True)


def notifications_page():
    st.header("💬 WhatsApp Notifications")

    dispatcher = get_dispatcher()
    if dispatcher.is_configured:
        st.success("WhatsApp service configured.")
    else:
        st.warning("WHATSAPP_TOKEN / WHATSAPP_PHONE_NUMBER_ID not set; messages will not be sent.")

    today = date.today()
    try:
        expiring = members.expiring_members(load_all_members(), today, settings.EXPIRY_WARNING_DAYS)
    except StoreError as exc:
        show_store_error(exc)
        return

    st.subheader(f"Expiring in the next {settings.EXPIRY_WARNING_DAYS} days")
    if not expiring:
        st.caption("No expiring-soon members.")
        return
    frame = reports.members_frame(expiring, get_catalog(), today)
    frame["days_left"] = [billing.days_until_expiry(m, today) for m in expiring]
    st.dataframe(frame, use_container_width=True, hide_index=True)

    if st.button("Send reminders", type="primary", disabled=not dispatcher.is_configured):
        result = dispatcher.send_bulk_expiry_reminders(expiring, get_catalog())
        st.success(f"Sent {result['success']} reminders. {result['failed']} failed.")

    st.subheader("Send to one member")
    by_id = {m.id: m for m in expiring if m.id}
    if by_id:
        target = st.selectbox("Member", list(by_id.keys()), format_func=lambda k: member_label(by_id[k]))
        if st.button("Send reminder", disabled=not dispatcher.is_configured):
            m = by_id[target]
            if dispatcher.send_expiry_reminder(m, get_catalog().plan_label(m.plan_id)):
                st.success(f"Reminder sent to {m.name}.")
            else:
                st.error("Reminder could not be sent. See the logs for details.")


def admin_page():
    st.header("🛠️ Admin Panel")

    user = st.session_state.user
    store = get_store()

    st.subheader("Staff accounts")
    try:
        staff = auth.fetch_users(store)
    except StoreError as exc:
        show_store_error(exc)
        return
    if staff:
        st.dataframe(pd.DataFrame([{"id": u.id, "username": u.username, "name": u.name, "role": u.role,
                                    "phone": u.phone} for u in staff]),
                     use_container_width=True, hide_index=True)

    with st.expander("Add user"):
        c1, c2 = st.columns(2)
        with c1:
            username = st.text_input("Username", key="new_username")
            name = st.text_input("Name", key="new_name")
            phone = st.text_input("Phone", key="new_phone")
        with c2:
            role = st.selectbox("Role", ["employee", "partner", "admin"])
            password = st.text_input("Password", type="password", key="new_password")
        if st.button("Create user", type="primary"):
            if len(password) < 6:
                st.error("Password must be at least 6 characters.")
            elif not username.strip() or not name.strip():
                st.error("Username and name are required.")
            else:
                result = auth.add_user(store, user, username, password, role, name, phone)
                if result.success:
                    st.success("User created.")
                    st.rerun()
                else:
                    st.error(result.error)

    others = {u.id: u for u in staff if u.id and u.id != user.id}
    if others:
        with st.expander("Remove user"):
            target = st.selectbox("User", list(others.keys()),
                                  format_func=lambda k: f"{others[k].name} ({others[k].role})")
            confirm = st.checkbox("Confirm removal", value=False, key="del_user")
            if st.button("Remove", disabled=not confirm):
                result = auth.delete_user(store, user, others[target])
                if result.success:
                    st.success("User removed.")
                    st.rerun()
                else:
                    st.error(result.error)

    st.divider()

    st.subheader("Activity log")
    logs = store.get_activity_logs()
    if logs.success and logs.rows("logs"):
        st.dataframe(pd.DataFrame(logs.rows("logs")), use_container_width=True, hide_index=True)
    else:
        st.caption(logs.error or "No activity yet.")

    st.subheader("Connection")
    if st.button("Test sheet API"):
        health = store.health_check()
        if health.success:
            st.success("Sheet API reachable.")
        else:
            st.error(health.error)


def settings_page():
    st.header("⚙️ Settings")

    st.subheader("Change password")
    p1 = st.text_input("New password", type="password")
    p2 = st.text_input("Confirm new password", type="password")
    if st.button("Update password", type="primary"):
        if len(p1) < 6:
            st.error("Password must be at least 6 characters.")
        elif p1 != p2:
            st.error("Passwords do not match.")
        else:
            result = auth.change_password(get_store(), st.session_state.user, p1)
            if result.success:
                st.success("Password updated.")
            else:
                st.error(result.error)

    st.divider()

    st.subheader("Membership catalog")
    catalog = get_catalog()
    st.dataframe(pd.DataFrame([{"plan": p.label, "monthly fee": p.base_fee} for p in catalog.plans]),
                 use_container_width=True, hide_index=True)
    st.dataframe(pd.DataFrame([{"fee type": p.label, "months": p.month_multiplier, "daily pass": p.is_daily_pass}
                               for p in catalog.periods]),
                 use_container_width=True, hide_index=True)


PAGES = {
    "Dashboard": dashboard_page,
    "Members": members_page,
    "Renewals": renewals_page,
    "Transactions": transactions_page,
    "Expenses": expenses_page,
    "Reports": reports_page,
    "Notifications": notifications_page,
    "Admin": admin_page,
    "Settings": settings_page,
}


def main_app():
    user = st.session_state.user
    st.sidebar.title(f"🏋️ {settings.GYM_NAME}")
    st.sidebar.caption(f"Logged in as: {user.name} ({user.role})")

    pages = auth.allowed_pages(user.role)
    if st.session_state.get("page") not in pages:
        st.session_state.page = pages[0]
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        logout()
        st.rerun()

    if st.sidebar.button("Refresh data"):
        get_store().clear_cache()
        st.rerun()

    PAGES[st.session_state.page]()


# --------- App entry ---------

def run():
    require_login()

    if st.session_state.user is None:
        if get_store().is_configured:
            init_once()
        login_screen()
        return

    main_app()


if __name__ == "__main__":
    run()
