"""
Streamlit Frontend for InvestTrack

The user interface for tracking money lent to customers and the
payments that come back.

DESIGN PRINCIPLES:
1. Every number on screen comes from PortfolioQueries
2. Every change goes through the PortfolioStore (one save per action)
3. Deletions always ask for confirmation first
4. Errors are shown in plain language, never as stack traces

Session state holds:
- store: the signed-in user's PortfolioStore
- app_lock / idle_timer: the PIN overlay and its idle clock
- insights: the last AI analysis, if any
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from investtrack.config import get_settings, validate_all_settings
from investtrack.models import (
    AUTO_LOCK_CHOICES,
    BackupFrequency,
    Customer,
    Investment,
    InvestmentStatus,
    LockType,
    Payment,
    PaymentType,
)
from investtrack.orchestrator import (
    AuthenticationError,
    BackupFormatError,
    DataTransferFlow,
    InsightsError,
    InsightsFlow,
    SessionFlow,
    create_app_components,
)
from investtrack.queries import PortfolioQueries
from investtrack.security import IdleTimer, LockState, lock_if_idle
from investtrack.services.image import (
    AttachmentError,
    decode_data_url,
    encode_image_attachment,
)
from investtrack.validation import FormValidator


# Page configuration
st.set_page_config(
    page_title="InvestTrack",
    page_icon="💼",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .lock-box {
        padding: 30px;
        background-color: #1e293b;
        color: #f8fafc;
        border-radius: 16px;
        text-align: center;
        margin: 10px 0;
    }
    .pin-dots {
        font-size: 2em;
        letter-spacing: 0.4em;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

PAGES = [
    "📊 Dashboard",
    "💼 Investments",
    "👥 Customers",
    "🧾 History",
    "✨ AI Insights",
    "⚙️ Settings",
]

validator = FormValidator()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol} {Decimal(amount):,.0f}"


def show_image(data_url, width=120):
    if not data_url:
        return
    try:
        _, image_bytes = decode_data_url(data_url)
    except AttachmentError:
        st.caption("Attachment could not be displayed")
        return
    st.image(image_bytes, width=width)


def read_attachment(uploaded_file):
    """Encode an uploaded image, or show why it was refused."""
    if uploaded_file is None:
        return None
    try:
        return encode_image_attachment(uploaded_file.getvalue(), uploaded_file.name)
    except AttachmentError as e:
        st.error(f"Image not attached: {e}")
        return None


def start_session(session_flow: SessionFlow, store):
    st.session_state.store = store
    st.session_state.app_lock = session_flow.create_lock(store)
    st.session_state.idle_timer = IdleTimer()
    st.session_state.insights = None


def clear_session():
    for key in (
        "store", "app_lock", "idle_timer", "insights",
        "pending_delete", "backup_download", "editing_payment", "viewing_receipt",
    ):
        st.session_state.pop(key, None)


def main():
    """Main application entry point."""
    session_flow, transfer_flow, insights_flow = get_components()

    if "store" not in st.session_state:
        store = session_flow.restore()
        if store is None:
            render_login_page(session_flow)
            return
        start_session(session_flow, store)

    store = st.session_state.store
    app_lock = st.session_state.app_lock
    timer = st.session_state.idle_timer

    # Idle check runs before this interaction counts as activity
    lock_if_idle(app_lock, timer, store.state.security)
    timer.touch()
    idle_watch()

    if app_lock.state is not LockState.UNLOCKED:
        render_lock_screen()
        return

    # Sidebar navigation
    st.sidebar.title("💼 InvestTrack")
    st.sidebar.caption(f"Signed in as {store.user_id}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio("Navigate to:", PAGES, index=0)

    st.sidebar.markdown("---")
    if store.state.security.enabled and st.sidebar.button("🔒 Lock now"):
        app_lock.lock()
        st.rerun()
    if st.sidebar.button("🚪 Sign out"):
        session_flow.logout()
        clear_session()
        st.rerun()

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(store)
    elif page == "💼 Investments":
        render_investments_page(store)
    elif page == "👥 Customers":
        render_customers_page(store)
    elif page == "🧾 History":
        render_history_page(store, transfer_flow)
    elif page == "✨ AI Insights":
        render_insights_page(store, insights_flow)
    elif page == "⚙️ Settings":
        render_settings_page(store, transfer_flow)


@st.fragment(run_every=get_settings().app.idle_check_interval_seconds)
def idle_watch():
    """Periodic idle check; a fragment rerun is not user activity."""
    if "store" not in st.session_state:
        return
    if lock_if_idle(
        st.session_state.app_lock,
        st.session_state.idle_timer,
        st.session_state.store.state.security,
    ):
        st.rerun()


# =============================================================================
# SIGN IN AND LOCK
# =============================================================================

def render_login_page(session_flow: SessionFlow):
    """Render the sign-in form."""
    st.title("💼 InvestTrack")
    st.markdown("Track your investments, customers and repayments.")

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        try:
            store = session_flow.login(email, password)
        except AuthenticationError as e:
            st.error(str(e))
            return
        start_session(session_flow, store)
        st.rerun()


def render_lock_screen():
    """PIN pad for unlocking or choosing a new PIN."""
    app_lock = st.session_state.app_lock

    if app_lock.state is LockState.LOCKED:
        title, prompt = "App Locked", "Enter PIN to access InvestTrack"
    elif app_lock.state is LockState.SETUP_FIRST_ENTRY:
        title, prompt = "Create PIN", "Enter a 4-digit security PIN"
    else:
        title, prompt = "Confirm PIN", "Enter the same PIN again"

    dots = "●" * app_lock.digits_entered + "○" * (app_lock.pin_length - app_lock.digits_entered)
    st.markdown(f"""
    <div class="lock-box">
        <h2>🔒 {title}</h2>
        <p>{app_lock.error or prompt}</p>
        <div class="pin-dots">{dots}</div>
    </div>
    """, unsafe_allow_html=True)

    _, pad, _ = st.columns([2, 1, 2])
    with pad:
        for row in (("1", "2", "3"), ("4", "5", "6"), ("7", "8", "9")):
            cols = st.columns(3)
            for col, digit in zip(cols, row):
                if col.button(digit, key=f"pin_{digit}"):
                    press_digit(digit)
        left, middle, right = st.columns(3)
        if app_lock.in_setup and left.button("Cancel", key="pin_cancel"):
            app_lock.cancel_setup()
            st.rerun()
        if middle.button("0", key="pin_0"):
            press_digit("0")
        if right.button("⌫", key="pin_delete"):
            app_lock.delete()
            st.rerun()


def press_digit(digit: str):
    store = st.session_state.store
    result = st.session_state.app_lock.press(digit)
    if result.committed_pin is not None:
        security = store.state.security.model_copy(
            update={"pin": result.committed_pin, "enabled": True}
        )
        store.update_security(security)
        st.toast("App lock enabled")
    st.rerun()


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard_page(store):
    """Render the dashboard."""
    st.title("📊 Dashboard")
    queries = PortfolioQueries(store.state)
    summary = queries.dashboard()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Invested", money(summary.total_invested))
    col2.metric("Total Received", money(summary.total_received))
    col3.metric(
        "Net Position",
        money(summary.net_position),
        delta=(
            f"{summary.net_return_percent:.1f}%"
            if summary.net_return_percent is not None
            else None
        ),
    )
    col4.metric("Expected Return", money(summary.total_expected_return))

    st.caption(
        f"Projected profit {money(summary.projected_profit)} across "
        f"{summary.investment_count} investments "
        f"({summary.active_investment_count} active)"
    )

    st.markdown("### Income Stream")
    income = queries.monthly_income()
    st.bar_chart(
        [{"Month": m.label, "Received": float(m.amount)} for m in income],
        x="Month",
        y="Received",
    )

    st.markdown("### Investment Progress")
    progress = queries.all_progress()
    if not progress:
        st.info("No investments yet. Add one on the Investments page.")
    for item in progress:
        st.markdown(
            f"**{item.investment.title}** · {money(item.received)} of "
            f"{money(item.expected_total)}"
        )
        st.progress(float(item.percentage) / 100)


# =============================================================================
# INVESTMENTS
# =============================================================================

def render_investments_page(store):
    """Render the investment list, forms and detail view."""
    st.title("💼 Investments")
    state = store.state

    if not state.customers:
        st.info("Add a customer first, then create an investment for them.")
        return

    with st.expander("➕ New Investment"):
        render_investment_form(store, None)

    queries = PortfolioQueries(state)
    for item in queries.all_progress():
        inv = item.investment
        customer = state.get_customer(inv.customer_id)
        with st.expander(
            f"{inv.title} · {customer.name if customer else 'Unknown'} · "
            f"{inv.status.value.title()}"
        ):
            render_investment_detail(store, inv.id)


def render_investment_form(store, investment):
    state = store.state
    customers = state.customers
    key = investment.id if investment else "new"

    with st.form(f"investment_form_{key}"):
        customer_ids = [c.id for c in customers]
        customer_id = st.selectbox(
            "Customer *",
            options=customer_ids,
            index=customer_ids.index(investment.customer_id)
            if investment and investment.customer_id in customer_ids else 0,
            format_func=lambda cid: state.get_customer(cid).name,
        )
        title = st.text_input(
            "Title *",
            value=investment.title if investment else "",
            placeholder="e.g. Personal Loan",
        )
        col1, col2 = st.columns(2)
        amount = col1.number_input(
            "Principal (Rs) *",
            min_value=0.0,
            value=float(investment.amount_invested) if investment else 0.0,
            step=1000.0,
        )
        rate = col2.number_input(
            "Rate (%)",
            min_value=0.0,
            value=float(investment.expected_return_rate) if investment else 0.0,
            step=0.5,
        )
        start_date = col1.date_input(
            "Start Date", value=investment.start_date if investment else date.today()
        )
        end_date = col2.date_input(
            "End Date", value=investment.end_date if investment else date.today()
        )
        statuses = list(InvestmentStatus)
        status = st.selectbox(
            "Status",
            options=statuses,
            index=statuses.index(investment.status) if investment else 0,
            format_func=lambda s: s.value.title(),
        )
        notes = st.text_area(
            "Notes (Optional)",
            value=(investment.notes or "") if investment else "",
            placeholder="Add any additional details about this investment...",
        )
        submitted = st.form_submit_button("Save", type="primary")

    if not submitted:
        return

    result = validator.validate_investment(title, customer_id, amount)
    if not result.is_valid:
        st.warning(result.hint)
        return

    fields = dict(
        customer_id=customer_id,
        title=title,
        amount_invested=Decimal(str(amount)),
        expected_return_rate=Decimal(str(rate)),
        start_date=start_date,
        end_date=end_date,
        status=status,
        notes=notes or None,
    )
    if investment:
        store.update_investment(investment.model_copy(update=fields))
    else:
        store.add_investment(Investment(**fields))
    st.rerun()


def render_investment_detail(store, investment_id):
    state = store.state
    investment = state.get_investment(investment_id)
    progress = PortfolioQueries(state).investment_progress(investment)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Principal", money(investment.amount_invested))
    col2.metric("Money Given", money(progress.lent))
    col3.metric("Received", money(progress.received))
    col4.metric("Balance Due", money(progress.balance_due))
    st.progress(float(progress.percentage) / 100)
    if investment.notes:
        st.caption(investment.notes)

    tab_log, tab_pay, tab_funds, tab_edit = st.tabs(
        ["Transaction Log", "Receive Payment", "Give Money", "Edit"]
    )

    with tab_log:
        payments = sorted(state.payments_for(investment.id), key=lambda p: p.date, reverse=True)
        if not payments:
            st.info("No transactions yet.")
        for payment in payments:
            sign = "-" if payment.is_outgoing else "+"
            cols = st.columns([3, 2, 1, 1])
            cols[0].markdown(f"**{payment.type.label}** · {payment.date.isoformat()}")
            cols[1].markdown(f"{sign}{money(payment.amount)}")
            if cols[2].button("✏️", key=f"edit_pay_btn_{payment.id}"):
                st.session_state.editing_payment = payment.id
            if cols[3].button("🗑️", key=f"del_pay_{payment.id}"):
                st.session_state.pending_delete = ("payment", payment.id)
            if payment.receipt_image:
                show_image(payment.receipt_image, width=160)
            if st.session_state.get("editing_payment") == payment.id:
                render_payment_form(store, investment, payment)
                if st.button("Cancel Edit", key=f"cancel_edit_{payment.id}"):
                    st.session_state.editing_payment = None
                    st.rerun()
            confirm_delete(store, "payment", payment.id, "Delete Transaction?")

    with tab_pay:
        render_payment_form(store, investment)

    with tab_funds:
        with st.form(f"funds_form_{investment.id}"):
            amount = st.number_input("Amount to Give (Rs) *", min_value=0.0, step=1000.0)
            on = st.date_input("Date", value=date.today())
            submitted = st.form_submit_button("Give Money", type="primary")
        if submitted:
            result = validator.validate_funds(amount)
            if not result.is_valid:
                st.warning(result.hint)
            else:
                store.add_funds(investment.id, Decimal(str(amount)), on=on)
                st.rerun()

    with tab_edit:
        render_investment_form(store, investment)
        if st.button("Delete Account", key=f"del_inv_{investment.id}"):
            st.session_state.pending_delete = ("investment", investment.id)
        confirm_delete(store, "investment", investment.id, "Delete Account?")


def render_payment_form(store, investment, payment=None):
    """Receive a repayment, or edit an existing transaction when one is given."""
    # Only an edit may touch LEND records; new money out goes through Give Money
    options = list(PaymentType) if payment else PaymentType.received()
    key = f"edit_pay_{payment.id}" if payment else f"payment_form_{investment.id}"
    with st.form(key):
        amount = st.number_input(
            "Amount (Rs) *",
            min_value=0.0,
            step=500.0,
            value=float(payment.amount) if payment else 0.0,
        )
        on = st.date_input("Date", value=payment.date if payment else date.today())
        payment_type = st.selectbox(
            "Type",
            options=options,
            index=options.index(payment.type) if payment else 0,
            format_func=lambda t: t.label,
        )
        receipt = st.file_uploader(
            "Receipt",
            type=get_settings().app.supported_formats_list,
        )
        notes = st.text_input("Notes (Optional)", value=(payment.notes or "") if payment else "")
        submitted = st.form_submit_button(
            "Save Changes" if payment else "Record Payment", type="primary"
        )

    if not submitted:
        return

    result = validator.validate_payment(amount)
    if not result.is_valid:
        st.warning(result.hint)
        return

    fields = dict(
        amount=Decimal(str(amount)),
        date=on,
        type=payment_type,
        notes=notes or None,
    )
    if payment:
        fields["receipt_image"] = read_attachment(receipt) or payment.receipt_image
        store.update_payment(payment.model_copy(update=fields))
        st.session_state.editing_payment = None
    else:
        store.add_payment(Payment(
            investment_id=investment.id,
            receipt_image=read_attachment(receipt),
            **fields,
        ))
    st.rerun()


def confirm_delete(store, entity_type, entity_id, title):
    """Second step of a delete: nothing is removed until confirmed."""
    if st.session_state.get("pending_delete") != (entity_type, entity_id):
        return

    st.warning(f"**{title}** This cannot be undone.")
    col1, col2 = st.columns(2)
    if col1.button("Delete", type="primary", key=f"confirm_{entity_type}_{entity_id}"):
        if entity_type == "customer":
            store.delete_customer(entity_id)
        elif entity_type == "investment":
            store.delete_investment(entity_id)
        else:
            store.delete_payment(entity_id)
        st.session_state.pending_delete = None
        st.rerun()
    if col2.button("Cancel", key=f"cancel_{entity_type}_{entity_id}"):
        st.session_state.pending_delete = None
        st.rerun()


# =============================================================================
# CUSTOMERS
# =============================================================================

def render_customers_page(store):
    """Render the customer list, search and reports."""
    st.title("👥 Customers")

    with st.expander("➕ New Customer"):
        render_customer_form(store, None)

    term = st.text_input("Search", placeholder="Name or phone")
    queries = PortfolioQueries(store.state)
    customers = queries.search_customers(term)
    if not customers:
        st.info("No customers found.")

    for customer in customers:
        report = queries.customer_report(customer)
        with st.expander(f"{customer.name} · {customer.phone}"):
            cols = st.columns([1, 3])
            with cols[0]:
                show_image(customer.profile_image)
            with cols[1]:
                if customer.email:
                    st.markdown(f"📧 {customer.email}")
                st.markdown(f"📅 Joined {customer.joined_date.isoformat()}")

            col1, col2, col3, col4 = st.columns(4)
            col1.metric("Principal", money(report.total_principal))
            col2.metric("Repaid", money(report.total_repaid))
            col3.metric("Expected", money(report.total_expected))
            col4.metric("Balance Due", money(report.balance_due))

            for item in report.investments:
                st.markdown(
                    f"- {item.investment.title}: {money(item.received)} repaid of "
                    f"{money(item.expected_total)}"
                )

            render_customer_form(store, customer)
            if st.button("Delete Customer", key=f"del_cust_{customer.id}"):
                st.session_state.pending_delete = ("customer", customer.id)
            confirm_delete(
                store, "customer", customer.id,
                "Delete Customer? Their investments and payments are deleted too.",
            )


def render_customer_form(store, customer):
    key = customer.id if customer else "new"
    with st.form(f"customer_form_{key}"):
        name = st.text_input("Name *", value=customer.name if customer else "")
        phone = st.text_input("Phone *", value=customer.phone if customer else "")
        email = st.text_input("Email", value=customer.email if customer else "")
        picture = st.file_uploader(
            "Profile Picture",
            type=get_settings().app.supported_formats_list,
        )
        submitted = st.form_submit_button("Save" if customer else "Add Customer", type="primary")

    if not submitted:
        return

    result = validator.validate_customer(name, phone)
    if not result.is_valid:
        st.warning(result.hint)
        return

    profile_image = read_attachment(picture)
    if customer:
        update = {"name": name, "phone": phone, "email": email}
        if profile_image:
            update["profile_image"] = profile_image
        store.update_customer(customer.model_copy(update=update))
    else:
        store.add_customer(Customer(
            name=name,
            phone=phone,
            email=email,
            profile_image=profile_image,
        ))
    st.rerun()


# =============================================================================
# HISTORY
# =============================================================================

def render_history_page(store, transfer_flow: DataTransferFlow):
    """Render every transaction, newest first."""
    st.title("🧾 Transaction History")

    rows = PortfolioQueries(store.state).transaction_history()
    if not rows:
        st.info("No transactions recorded yet.")
        return

    st.dataframe(
        [
            {
                "Date": row.payment.date.isoformat(),
                "Type": row.payment.type.label,
                "Amount": float(row.payment.amount),
                "Direction": row.direction.value,
                "Investment": row.investment_title,
                "Customer": row.customer_name,
            }
            for row in rows
        ],
        use_container_width=True,
        hide_index=True,
    )

    st.subheader("Manage")
    for row in rows:
        payment = row.payment
        cols = st.columns([4, 2, 1, 1])
        cols[0].markdown(
            f"**{payment.type.label}** · {payment.date.isoformat()} · "
            f"{row.investment_title} ({row.customer_name})"
        )
        cols[1].markdown(f"{'-' if payment.is_outgoing else '+'}{money(payment.amount)}")
        if payment.receipt_image and cols[2].button("🧾", key=f"hist_receipt_{payment.id}"):
            st.session_state.viewing_receipt = (
                None if st.session_state.get("viewing_receipt") == payment.id else payment.id
            )
        if cols[3].button("🗑️", key=f"hist_del_{payment.id}"):
            st.session_state.pending_delete = ("payment", payment.id)
        if st.session_state.get("viewing_receipt") == payment.id and payment.receipt_image:
            show_image(payment.receipt_image, width=320)
        confirm_delete(store, "payment", payment.id, "Delete Transaction?")

    filename, content = transfer_flow.export_csv(store)
    st.download_button(
        "⬇️ Export CSV",
        data=content,
        file_name=filename,
        mime="text/csv",
    )


# =============================================================================
# AI INSIGHTS
# =============================================================================

def render_insights_page(store, insights_flow: InsightsFlow):
    """Render the AI analysis page."""
    st.title("✨ AI Insights")
    st.markdown(
        "Get a short analysis of your portfolio. Only totals and per-investment "
        "figures are sent; customer details stay on this device."
    )

    if not insights_flow.is_available:
        st.info("Set GEMINI_API_KEY in your .env file to enable AI insights.")

    if st.button("Generate Insights", type="primary"):
        with st.spinner("Analyzing your portfolio..."):
            try:
                st.session_state.insights = run_async(insights_flow.analyze(store))
            except InsightsError as e:
                st.error(str(e))

    result = st.session_state.get("insights")
    if result:
        st.markdown("### Summary")
        st.write(result.summary)
        st.markdown("### Risk Assessment")
        st.write(result.risk_assessment)
        st.markdown("### Opportunities")
        st.write(result.opportunities)
        st.caption(f"Generated {result.timestamp:%d %b %Y %H:%M} UTC")


# =============================================================================
# SETTINGS
# =============================================================================

def render_settings_page(store, transfer_flow: DataTransferFlow):
    """Render the settings page."""
    st.title("⚙️ Settings")
    app_lock = st.session_state.app_lock
    security = store.state.security
    backup = store.state.backup

    st.markdown("### App Lock")
    if security.enabled:
        st.success("✅ App lock is on")
        col1, col2 = st.columns(2)
        if col1.button("Change PIN"):
            app_lock.begin_setup()
            st.rerun()
        if col2.button("Turn off app lock"):
            store.update_security(security.model_copy(update={"enabled": False}))
            st.rerun()
    else:
        st.info("App lock is off")
        if st.button("Set up PIN"):
            app_lock.begin_setup()
            st.rerun()

    auto_lock = st.selectbox(
        "Auto-lock after",
        options=list(AUTO_LOCK_CHOICES),
        index=list(AUTO_LOCK_CHOICES).index(security.auto_lock_minutes)
        if security.auto_lock_minutes in AUTO_LOCK_CHOICES else 0,
        format_func=lambda m: "Never" if m == 0 else f"{m} min",
        disabled=not security.enabled,
    )
    if auto_lock != security.auto_lock_minutes:
        store.update_security(security.model_copy(update={"auto_lock_minutes": auto_lock}))
        st.rerun()

    lock_types = list(LockType)
    lock_type = st.radio(
        "Unlock method",
        options=lock_types,
        index=lock_types.index(security.lock_type),
        format_func=lambda t: t.label,
        horizontal=True,
        disabled=not security.enabled,
    )
    if lock_type is not LockType.PIN:
        st.caption(f"{lock_type.label} unlock is not available yet; the PIN pad is used.")
    if lock_type != security.lock_type:
        store.update_security(security.model_copy(update={"lock_type": lock_type}))
        st.rerun()

    st.markdown("---")
    st.markdown("### Backup")
    col1, col2 = st.columns(2)
    enabled = col1.toggle("Backup reminders", value=backup.enabled)
    frequencies = list(BackupFrequency)
    frequency = col2.selectbox(
        "Frequency",
        options=frequencies,
        index=frequencies.index(backup.frequency),
        format_func=lambda f: f.value.title(),
    )
    if enabled != backup.enabled or frequency != backup.frequency:
        store.update_backup(backup.model_copy(update={"enabled": enabled, "frequency": frequency}))
        st.rerun()

    if backup.last_backup_date:
        st.caption(f"Last backup: {backup.last_backup_date:%d %b %Y %H:%M}")
    else:
        st.caption("No backup taken yet")

    if st.button("Prepare backup"):
        st.session_state.backup_download = transfer_flow.export_backup(store)
    if st.session_state.get("backup_download"):
        filename, content = st.session_state.backup_download
        st.download_button(
            "⬇️ Download backup",
            data=content,
            file_name=filename,
            mime="application/json",
            on_click=transfer_flow.record_backup_downloaded,
            args=(store, filename),
        )

    uploaded = st.file_uploader("Restore from backup", type=["json"])
    if uploaded is not None:
        st.warning("Restoring replaces all data on this device.")
        if st.button("Restore", type="primary"):
            try:
                state = transfer_flow.import_backup(store, uploaded.getvalue())
            except BackupFormatError as e:
                st.error(f"Invalid backup file: {e}")
            else:
                app_lock.set_pin(state.security.pin)
                st.success(
                    f"Restored {len(state.customers)} customers and "
                    f"{len(state.investments)} investments."
                )

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Gemini (AI Insights)", "gemini"),
        ("Local Storage", "storage"),
        ("Application", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Ready")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Recent Activity")
    for event in store.audit_logger.recent_events[:10]:
        st.markdown(f"- `{event.timestamp:%H:%M:%S}` {event.description}")


if __name__ == "__main__":
    main()
