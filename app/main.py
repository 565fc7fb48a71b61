"""
Streamlit Frontend for the Personal Finance Tracker

Pages: login/register for anonymous users; dashboard, categories,
transactions and budgets once signed in.

DESIGN PRINCIPLES:
1. Pages render controller state only; all rules live in finance_tracker
2. Every failure is shown in an error box, never hidden
3. Buttons are disabled while a change is being saved
4. Nothing changes on screen until the server confirms it

Each browser session gets its own components (and so its own Session and
token) through st.session_state.
"""

import asyncio
from datetime import date

import streamlit as st

from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.models.finance import CategoryType
from finance_tracker.models.period import current_period, month_label, period_to_date
from finance_tracker.orchestrator import AppComponents, create_app_components
from finance_tracker.presentation import (
    ListState,
    can_submit_budget,
    category_label,
    empty_budgets_title,
    format_amount,
    list_state,
)


# Page configuration
st.set_page_config(
    page_title="Personal Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components() -> AppComponents:
    """Get or create this browser session's components."""
    if "components" not in st.session_state:
        st.session_state.components = create_app_components()
    return st.session_state.components


def currency() -> str:
    return get_settings().app.currency_symbol


def show_error(message):
    if message:
        st.error(message)


def show_error_with_reload(ctrl, key: str):
    """Error box with a Reload button that re-runs the screen's load."""
    if not ctrl.error_message:
        return
    col1, col2 = st.columns([5, 1])
    col1.error(ctrl.error_message)
    if col2.button("Reload", key=f"{key}_reload"):
        run_async(ctrl.load())
        st.rerun()


def month_picker(key: str, period: str) -> str:
    """Pick a month; any day inside it selects the month."""
    picked = st.date_input("Month", value=period_to_date(period), key=key)
    return current_period(picked) if isinstance(picked, date) else period


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown("---")

    if not components.session.is_authenticated:
        page = st.sidebar.radio("Navigate to:", ["🔑 Login", "📝 Register"], index=0)
        if page == "🔑 Login":
            render_login_page(components)
        else:
            render_register_page(components)
        return

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🏷️ Categories", "💸 Transactions", "🎯 Budgets", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("Logout"):
        components.auth.logout()
        del st.session_state["components"]
        st.rerun()

    if page == "📊 Dashboard":
        render_dashboard_page(components)
    elif page == "🏷️ Categories":
        render_categories_page(components)
    elif page == "💸 Transactions":
        render_transactions_page(components)
    elif page == "🎯 Budgets":
        render_budgets_page(components)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_login_page(components: AppComponents):
    """Render the login form."""
    auth = components.auth
    st.title("Welcome back")
    st.markdown("Log in to manage personal finances")

    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login", type="primary", disabled=auth.busy)

    if submitted:
        with st.spinner("Logging in..."):
            ok = run_async(auth.login(email, password))
        if ok:
            # Fresh screens for the signed-in user; nothing cached from before
            components.client.close()
            st.session_state.components = create_app_components(session=components.session)
            st.rerun()

    show_error(auth.error_message)


def render_register_page(components: AppComponents):
    """Render the registration form."""
    auth = components.auth
    st.title("Create account")
    st.markdown("Start tracking spending and income today")

    with st.form("register"):
        name = st.text_input("Full name")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Register", type="primary", disabled=auth.busy)

    if submitted:
        with st.spinner("Registering..."):
            ok = run_async(auth.register(name, email, password))
        if ok:
            st.success("Account created. Log in from the sidebar.")

    show_error(auth.error_message)


def render_dashboard_page(components: AppComponents):
    """Render the monthly summary."""
    dashboard = components.dashboard
    st.title("📊 Dashboard")

    period = month_picker("dashboard_month", dashboard.period)
    if period != dashboard.period or not dashboard.loaded:
        with st.spinner("Loading summary..."):
            run_async(dashboard.load(period))

    show_error_with_reload(dashboard, "dashboard")

    summary = dashboard.summary
    if summary is None:
        return

    st.subheader(month_label(summary.month))
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_amount(summary.income_total, currency()))
    col2.metric("Expenses", format_amount(summary.expense_total, currency()))
    col3.metric("Net", format_amount(summary.net, currency()))


def render_categories_page(components: AppComponents):
    """Render the categories list with create / rename / delete."""
    ctrl = components.categories
    st.title("🏷️ Categories")
    st.markdown("Group your income and expenses.")

    if not ctrl.loaded:
        run_async(ctrl.load())

    with st.form("create_category", clear_on_submit=True):
        col1, col2, col3 = st.columns([3, 2, 1])
        name = col1.text_input("Name")
        kind = col2.selectbox(
            "Type",
            options=list(CategoryType),
            format_func=lambda x: x.value.title(),
        )
        submitted = col3.form_submit_button("Add", type="primary", disabled=ctrl.pending)
    if submitted:
        run_async(ctrl.create(name, kind))
        st.rerun()

    show_error_with_reload(ctrl, "categories")

    state = list_state(ctrl.fetching, ctrl.categories)
    if state == ListState.EMPTY:
        st.info("No categories yet. Add one above.")
        return

    for kind in CategoryType:
        items = ctrl.of_type(kind)
        if not items:
            continue
        st.subheader(kind.value.title())
        for category in items:
            col1, col2, col3 = st.columns([4, 1, 1])
            new_name = col1.text_input(
                "Name", value=category.name, key=f"cat_name_{category.id}", label_visibility="collapsed"
            )
            if col2.button("Save", key=f"cat_save_{category.id}", disabled=ctrl.pending or new_name == category.name):
                run_async(ctrl.update(category.id, new_name, category.type))
                st.rerun()
            if col3.button("Delete", key=f"cat_del_{category.id}", disabled=ctrl.pending):
                run_async(ctrl.delete(category.id))
                st.rerun()


def render_transactions_page(components: AppComponents):
    """Render the month's transactions."""
    ctrl = components.transactions
    st.title("💸 Transactions")

    period = month_picker("transactions_month", ctrl.period)
    if period != ctrl.period or not ctrl.loaded:
        with st.spinner("Loading transactions..."):
            run_async(ctrl.load(period))

    with st.form("create_transaction", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        kind = col1.selectbox("Type", options=list(CategoryType), format_func=lambda x: x.value.title())
        amount = col2.text_input("Amount")
        on = col3.date_input("Date", value=period_to_date(ctrl.period))
        category_id = st.selectbox(
            "Category",
            options=[None] + [c.id for c in ctrl.categories],
            format_func=lambda cid: "No category" if cid is None else category_label(ctrl.categories, cid),
        )
        description = st.text_input("Description (optional)")
        submitted = st.form_submit_button("Add", type="primary", disabled=ctrl.pending)
    if submitted:
        run_async(ctrl.create(amount, kind, on=on, category_id=category_id, description=description))
        st.rerun()

    show_error_with_reload(ctrl, "transactions")

    col1, col2 = st.columns(2)
    col1.metric("Income", format_amount(ctrl.income_total, currency()))
    col2.metric("Expenses", format_amount(ctrl.expense_total, currency()))

    state = list_state(ctrl.fetching, ctrl.transactions)
    if state == ListState.LOADING:
        st.markdown("Loading…")
    elif state == ListState.EMPTY:
        st.info(f"No transactions for {month_label(ctrl.period)}")
    else:
        for t in ctrl.transactions:
            col1, col2 = st.columns([5, 1])
            sign = "+" if t.type == CategoryType.INCOME else "−"
            col1.markdown(
                f"**{sign}{format_amount(t.amount, currency())}** · "
                f"{category_label(ctrl.categories, t.category_id)} · {t.date.isoformat()}"
                + (f" · {t.description}" if t.description else "")
            )
            if col2.button("Delete", key=f"txn_del_{t.id}", disabled=ctrl.pending):
                run_async(ctrl.delete(t.id))
                st.rerun()


def render_budgets_page(components: AppComponents):
    """Render monthly budgets with create, inline edit and delete."""
    ctrl = components.budgets
    st.title("🎯 Budgets")
    st.markdown("Track monthly caps for expense categories.")

    period = month_picker("budgets_month", ctrl.period)
    if period != ctrl.period or not ctrl.loaded:
        with st.spinner("Loading budgets..."):
            run_async(ctrl.set_period(period))

    # Create form
    st.markdown("### Create budget")
    expense_ids = [c.id for c in ctrl.expense_categories]
    col1, col2, col3 = st.columns([3, 2, 1])
    ctrl.create_form.category_id = col1.selectbox(
        "Category",
        options=[None] + expense_ids,
        index=([None] + expense_ids).index(ctrl.create_form.category_id)
        if ctrl.create_form.category_id in expense_ids else 0,
        format_func=lambda cid: "Select category" if cid is None else category_label(ctrl.categories, cid),
    )
    ctrl.create_form.limit_amount = col2.text_input(
        "Limit amount", value=ctrl.create_form.limit_amount, placeholder="Limit amount"
    )
    if col3.button("Add", type="primary", disabled=not can_submit_budget(ctrl.create_form, ctrl.pending)):
        run_async(ctrl.create(ctrl.create_form.category_id, ctrl.create_form.limit_amount))
        st.rerun()

    show_error_with_reload(ctrl, "budgets")

    # Quick stats
    col1, col2 = st.columns(2)
    col1.metric("Budgets this month", len(ctrl.budgets))
    col2.metric("Total limit", format_amount(ctrl.total_limit, currency()))

    st.markdown("---")

    state = list_state(ctrl.fetching, ctrl.budgets)
    if state == ListState.LOADING:
        st.markdown("Loading…")
        return
    if state == ListState.EMPTY:
        st.info(f"**{empty_budgets_title(ctrl.period)}**\n\nCreate a budget to set a monthly spending cap.")
        return

    for budget in ctrl.budgets:
        if ctrl.editing_id == budget.id:
            render_budget_edit_row(ctrl, budget)
            continue
        col1, col2, col3 = st.columns([5, 1, 1])
        col1.markdown(
            f"**{category_label(ctrl.categories, budget.category_id)}**  \n"
            f"Limit: {format_amount(budget.limit_amount, currency())} • {budget.period_month}"
        )
        if col2.button("Edit", key=f"budget_edit_{budget.id}", disabled=ctrl.pending or ctrl.edit is not None):
            ctrl.start_edit(budget.id)
            st.rerun()
        if col3.button("Delete", key=f"budget_del_{budget.id}", disabled=ctrl.pending):
            run_async(ctrl.delete(budget.id))
            st.rerun()


def render_budget_edit_row(ctrl, budget):
    """Inline editor for the single budget under edit."""
    edit = ctrl.edit
    expense_ids = [c.id for c in ctrl.expense_categories]
    current = category_label(ctrl.categories, budget.category_id)

    col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
    edit.category_id = col1.selectbox(
        "Category",
        options=[None] + expense_ids,
        format_func=lambda cid: f"Keep current ({current})" if cid is None else category_label(ctrl.categories, cid),
        key=f"budget_edit_cat_{budget.id}",
    )
    edit.limit_amount = col2.text_input(
        "Limit amount", value=edit.limit_amount, key=f"budget_edit_limit_{budget.id}"
    )
    if col3.button("Save", key=f"budget_save_{budget.id}", type="primary", disabled=ctrl.pending):
        run_async(ctrl.submit_edit())
        st.rerun()
    if col4.button("Cancel", key=f"budget_cancel_{budget.id}"):
        ctrl.cancel_edit()
        st.rerun()


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()

    for name, key in [("API connection", "api"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    if status.get("api"):
        st.markdown(f"**API base URL:** `{get_settings().api.base_url}`")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
