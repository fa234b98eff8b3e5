# finance_dashboard/streamlit_app.py

import time
from datetime import date, datetime

import streamlit as st
import plotly.express as px

from finance_dashboard import api_client
from finance_dashboard.api_client import error_message, safe_json

# ---------------- Page config ----------------
st.set_page_config(page_title="Finance Tracker", layout="wide", page_icon="💰")

CACHE_SECONDS = 120
CACHE_KEYS = ["transactions", "categories", "summary", "monthly", "by_category"]


# ---------------- Session State Management ----------------
def init_session_state():
    for key, default in (("token", None), ("user_email", None), ("first_name", None),
                         ("flash", None)):
        if key not in st.session_state:
            st.session_state[key] = default


def clear_user_cache():
    for key in CACHE_KEYS:
        st.session_state.pop(f"cache_{key}", None)
        st.session_state.pop(f"cache_{key}_ts", None)


def logout(message=None):
    clear_user_cache()
    st.session_state.token = None
    st.session_state.user_email = None
    st.session_state.first_name = None
    if message:
        st.session_state.flash = message


def ensure_session():
    """Drop a missing or locally-expired token so the login form shows."""
    token = st.session_state.token
    if token and api_client.token_expired(token):
        logout("Your session has expired, please sign in again.")
    return st.session_state.token is not None


def fetch(key, call):
    """Cached GET through the api client; a 401 ends the session."""
    cache_key, ts_key = f"cache_{key}", f"cache_{key}_ts"
    now = time.time()
    if cache_key in st.session_state and now - st.session_state.get(ts_key, 0) < CACHE_SECONDS:
        return st.session_state[cache_key]

    r = call(st.session_state.token)
    if r is not None and r.status_code == 401:
        logout("Your session has expired, please sign in again.")
        st.rerun()
    if r is None or r.status_code != 200:
        st.error(f"❌ {error_message(r)}")
        return None

    data = safe_json(r)
    st.session_state[cache_key] = data
    st.session_state[ts_key] = now
    return data


# ---------------- Authentication ----------------
def handle_login(email, password):
    r = api_client.login(email, password)
    if r is None or r.status_code != 200:
        st.error(f"❌ {error_message(r, 'Login failed. Please try again.')}")
        return False
    payload = safe_json(r) or {}
    st.session_state.token = payload.get("token")
    st.session_state.user_email = payload.get("email", email)
    st.session_state.first_name = payload.get("firstName")
    clear_user_cache()
    return True


def handle_register(first_name, email, password, confirm):
    problems = api_client.registration_errors(first_name, email, password, confirm)
    if problems:
        st.error(". ".join(problems))
        return False
    r = api_client.register(first_name, email, password)
    if r is None or r.status_code != 201:
        st.error(f"❌ {error_message(r, 'Registration failed. Please try again.')}")
        return False
    st.success("✅ Account created! You can now sign in.")
    return True


# ---------------- Sidebar ----------------
def render_sidebar():
    with st.sidebar:
        st.title("🔐 Account")
        if st.session_state.flash:
            st.warning(st.session_state.flash)
            st.session_state.flash = None

        if st.session_state.token:
            st.success(f"Logged in as **{st.session_state.first_name or st.session_state.user_email}**")
            if st.button("🚪 Logout", use_container_width=True, key="logout_btn"):
                logout()
                st.rerun()
            return

        auth_tab = st.radio("Action", ["Login", "Register"], horizontal=True, key="auth_tab")
        if auth_tab == "Register":
            first_name = st.text_input("👤 First name", key="reg_first_name")
        email = st.text_input("📧 Email", key="email_input")
        password = st.text_input("🔒 Password", type="password", key="password_input")
        if auth_tab == "Register":
            confirm = st.text_input("🔒 Confirm password", type="password", key="confirm_input")

        if st.button("Submit", use_container_width=True, key="auth_submit"):
            if auth_tab == "Register":
                handle_register(first_name, email, password, confirm)
            elif email and password:
                if handle_login(email, password):
                    st.rerun()
            else:
                st.warning("Please enter both email and password")


# ---------------- Dashboard Tab ----------------
def render_dashboard():
    st.header("📊 Dashboard")

    summary = fetch("summary", api_client.get_summary)
    if summary:
        income = float(summary.get("totalIncome", 0))
        expenses = float(summary.get("totalExpenses", 0))
        net = income - expenses
        col1, col2, col3 = st.columns(3)
        col1.metric("Income", f"{income:,.2f}")
        col2.metric("Expenses", f"{expenses:,.2f}")
        col3.metric("Net Balance", f"{net:,.2f}")

    col1, col2 = st.columns([3, 2])
    with col1:
        monthly = api_client.monthly_frame(fetch("monthly", api_client.get_monthly_summary))
        if monthly.empty:
            st.info("No monthly data yet")
        else:
            fig = px.bar(monthly, x="month", y=["totalIncome", "totalExpenses"], barmode="group",
                         title="Monthly Income vs Expenses")
            fig.update_layout(template="plotly_white", legend_title_text="")
            st.plotly_chart(fig, use_container_width=True)
    with col2:
        spending = api_client.category_frame(fetch("by_category", api_client.get_category_spending))
        if spending.empty:
            st.info("No expenses recorded yet")
        else:
            fig = px.pie(spending, names="categoryName", values="totalSpent",
                         title="Spending by Category", hole=0.4)
            st.plotly_chart(fig, use_container_width=True)


# ---------------- Transactions Tab ----------------
def render_transactions():
    st.header("💳 Transactions")

    categories = fetch("categories", api_client.get_categories) or []
    with st.expander("➕ Add Transaction", expanded=True):
        if not categories:
            st.info("Create a category first")
        else:
            with st.form("add_tx", clear_on_submit=True):
                col_a, col_b = st.columns(2)
                with col_a:
                    title = st.text_input("📝 Title", placeholder="e.g., Groceries")
                    amount = st.number_input("💰 Amount", value=0.0, format="%.2f", step=10.0)
                    t_date = st.date_input("📅 Date", value=date.today())
                with col_b:
                    kind = st.selectbox("🔸 Type", ["Expense", "Income"])
                    options = {f"{c['name']} ({c['type']})": c["id"] for c in categories}
                    label = st.selectbox("📁 Category", list(options))
                submitted = st.form_submit_button("💾 Add Transaction", use_container_width=True)
                if submitted:
                    if not title.strip():
                        st.error("❌ Title is required")
                    elif amount == 0:
                        st.error("❌ Amount cannot be zero")
                    else:
                        occurred = datetime.combine(t_date, datetime.now().time().replace(microsecond=0))
                        r = api_client.create_transaction(
                            st.session_state.token, title.strip(), f"{amount:.2f}", kind,
                            options[label], occurred,
                        )
                        if r is not None and r.status_code == 201:
                            st.success(f"✅ Added {title.strip()}")
                            clear_user_cache()
                        else:
                            st.error(f"❌ {error_message(r, 'Failed to add transaction')}")

    st.subheader("📋 Your Transactions")
    df = api_client.transactions_frame(fetch("transactions", api_client.get_transactions))
    if df.empty:
        st.info("💳 No transactions found. Add your first transaction above!")
        return

    display_df = df.copy()
    display_df["date"] = display_df["date"].dt.strftime("%Y-%m-%d")
    display_df["amount"] = display_df["amount"].map(lambda x: f"{x:,.2f}")
    st.dataframe(
        display_df.drop(columns=["categoryId"]).rename(columns={
            "id": "ID", "date": "Date", "title": "Title", "amount": "Amount",
            "type": "Type", "categoryName": "Category",
        }),
        use_container_width=True, hide_index=True,
    )

    col1, col2 = st.columns([3, 1])
    with col1:
        tx_id = st.selectbox("Transaction to delete", df["id"].tolist(), key="delete_tx_id")
    with col2:
        if st.button("🗑️ Delete", use_container_width=True, key="delete_tx_btn"):
            r = api_client.delete_transaction(st.session_state.token, tx_id)
            if r is not None and r.status_code == 204:
                st.success(f"✅ Transaction {tx_id} deleted")
                clear_user_cache()
            else:
                st.error(f"❌ {error_message(r, 'Delete failed')}")


# ---------------- Categories Tab ----------------
def render_categories():
    st.header("📁 Categories")

    with st.form("add_category", clear_on_submit=True):
        col_a, col_b = st.columns(2)
        name = col_a.text_input("Name")
        kind = col_b.selectbox("Type", ["Expense", "Income"])
        if st.form_submit_button("➕ Add Category", use_container_width=True):
            r = api_client.create_category(st.session_state.token, name, kind)
            if r is not None and r.status_code == 201:
                st.success(f"✅ Category {name} added")
                clear_user_cache()
            else:
                st.error(f"❌ {error_message(r, 'Failed to add category')}")

    categories = fetch("categories", api_client.get_categories) or []
    if not categories:
        st.info("No categories yet")
        return
    for category in categories:
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.write(category["name"])
        col2.caption(category["type"])
        if col3.button("🗑️", key=f"delete_cat_{category['id']}"):
            r = api_client.delete_category(st.session_state.token, category["id"])
            if r is not None and r.status_code == 204:
                clear_user_cache()
                st.rerun()
            else:
                st.error(f"❌ {error_message(r, 'Delete failed')}")


# ---------------- Main App ----------------
def main():
    init_session_state()
    st.title("💰 Finance Tracker")

    signed_in = ensure_session()
    render_sidebar()
    if not signed_in:
        st.info("🔐 Please sign in from the sidebar to view your finances")
        return

    tab1, tab2, tab3 = st.tabs(["📊 Dashboard", "💳 Transactions", "📁 Categories"])
    with tab1:
        render_dashboard()
    with tab2:
        render_transactions()
    with tab3:
        render_categories()


if __name__ == "__main__":
    main()
