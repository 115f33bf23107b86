"""
Receipt Analytics — Interactive Dashboard

Run with:  streamlit run app.py

Reads SUPABASE_URL / SUPABASE_KEY from the environment (or .env). Without
them the dashboard runs on simulated receipts.
"""

import sys
from pathlib import Path

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).resolve().parent))

from receipt_dashboard.config import (
    CHART_COLORS,
    CHART_TYPES,
    CURRENCY_SYMBOL,
    EXPORT_MIME,
    NO_DATA_MESSAGE,
    REALTIME_POLL_SECONDS,
    TREND_COLORS,
    BackendConfig,
)
from receipt_dashboard.dashboard import get_dashboard_overview
from receipt_dashboard.export import prepare_export
from receipt_dashboard.kpis import classify_trend
from receipt_dashboard.loaders import ReceiptChangeListener, ReceiptRepository
from receipt_dashboard.session import DashboardSession
from receipt_dashboard.simulator import SimulatedReceiptRepository

load_dotenv()

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Analytics Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

CHART_LAYOUT = dict(
    plot_bgcolor="rgba(0,0,0,0)",
    margin=dict(l=10, r=10, t=10, b=40),
)


# ---------------------------------------------------------------------------
# Session (one per browser tab)
# ---------------------------------------------------------------------------
def get_session() -> DashboardSession:
    if "dashboard_session" not in st.session_state:
        config = BackendConfig.from_env()
        if config.is_configured:
            repository = ReceiptRepository.from_config(config)
        else:
            repository = SimulatedReceiptRepository()
        st.session_state.backend_config = config
        st.session_state.dashboard_session = DashboardSession(repository)
    return st.session_state.dashboard_session


def set_realtime(session: DashboardSession, enabled: bool) -> None:
    listener = st.session_state.get("change_listener")
    if enabled and listener is None:
        listener = ReceiptChangeListener(
            st.session_state.backend_config, session.notify_change
        )
        try:
            listener.start()
        except RuntimeError as exc:
            st.sidebar.error(str(exc))
            return
        st.session_state.change_listener = listener
    elif not enabled and listener is not None:
        listener.stop()
        del st.session_state["change_listener"]


def fmt_money(value: float) -> str:
    return f"{CURRENCY_SYMBOL}{value:,.2f}"


session = get_session()
config = st.session_state.backend_config

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("Analytics Dashboard")
st.sidebar.markdown("Real-time insights and performance metrics")
st.sidebar.divider()

start = st.sidebar.date_input("From", value=session.start, format="YYYY-MM-DD")
end = st.sidebar.date_input("To", value=session.end, format="YYYY-MM-DD")

col_clear, col_refresh = st.sidebar.columns(2)
clear_clicked = col_clear.button("Clear", use_container_width=True)
refresh_clicked = col_refresh.button("Refresh", use_container_width=True)

if clear_clicked:
    session.clear_date_range()
    session.refresh()
    st.rerun()

range_changed = session.set_date_range(start, end)
if range_changed or refresh_clicked or not session.loaded:
    with st.spinner("Loading analytics data..."):
        session.refresh()

st.sidebar.divider()
chart_type = st.sidebar.selectbox("Revenue chart", CHART_TYPES)

if config.is_configured:
    realtime = st.sidebar.toggle("Live updates", value="change_listener" in st.session_state)
    set_realtime(session, realtime)
else:
    st.sidebar.info("Demo mode: SUPABASE_URL / SUPABASE_KEY not set, showing simulated receipts.")

st.sidebar.caption(f"Window: {session.window_label}")


@st.fragment(run_every=REALTIME_POLL_SECONDS)
def watch_changes():
    if session.has_pending_changes:
        session.refresh()
        st.rerun()


if "change_listener" in st.session_state:
    watch_changes()

# ---------------------------------------------------------------------------
# Error state
# ---------------------------------------------------------------------------
if session.error:
    st.title("Error Loading Data")
    st.error(session.error)
    if st.button("Try Again", type="primary"):
        session.refresh()
        st.rerun()
    st.stop()

overview = get_dashboard_overview(session.rows, session.previous_rows)
kpis = overview["kpis"]

# ===========================================================================
# Header + export
# ===========================================================================
col_title, col_export = st.columns([4, 1])
with col_title:
    st.title("Analytics Dashboard")
    st.caption(f"{kpis['total_transactions']:,} receipts · {session.window_label}")
with col_export:
    export = prepare_export(session.rows)
    if export is None:
        if st.button("Export", use_container_width=True):
            st.info(NO_DATA_MESSAGE)
    else:
        st.download_button(
            "Export",
            data=export.data,
            file_name=export.filename,
            mime=EXPORT_MIME,
            use_container_width=True,
        )

# ---------------------------------------------------------------------------
# KPI cards
# ---------------------------------------------------------------------------
trends = kpis["trends"]


def trend_delta(key: str) -> str | None:
    pct = trends.get(key)
    return f"{pct:+.1f}%" if pct is not None else None


cards = st.columns(5)
cards[0].metric("Total Revenue", fmt_money(kpis["total_revenue"]), delta=trend_delta("revenue"))
cards[1].metric("Transactions", f"{kpis['total_transactions']:,}", delta=trend_delta("transactions"))
cards[2].metric("Avg Transaction", fmt_money(kpis["avg_transaction_value"]))
cards[3].metric("Total Discount", fmt_money(kpis["total_discount"]))
cards[4].metric("Outstanding Due", fmt_money(kpis["outstanding_due"]))

if trends:
    direction = classify_trend(trends.get("revenue"))
    st.markdown(
        f"<span style='color: {TREND_COLORS[direction]}; font-size: 13px;'>"
        "Trends compare against the previous window of equal length.</span>",
        unsafe_allow_html=True,
    )

st.divider()

if kpis["total_transactions"] == 0:
    st.warning("No receipts in the selected window.")
    st.stop()

series = overview["time_series"].dropna(subset=["date"])

# ===========================================================================
# Revenue trend + payment methods
# ===========================================================================
col1, col2 = st.columns([3, 2])

with col1:
    st.subheader("Revenue Trend")
    if chart_type == "Area":
        fig = px.area(series, x="date", y="revenue", color_discrete_sequence=CHART_COLORS)
    elif chart_type == "Line":
        fig = px.line(series, x="date", y="revenue", color_discrete_sequence=CHART_COLORS)
    else:
        fig = px.bar(series, x="date", y="revenue", color_discrete_sequence=CHART_COLORS)
    fig.update_layout(height=320, xaxis_title="", yaxis_title=CURRENCY_SYMBOL, **CHART_LAYOUT)
    st.plotly_chart(fig, use_container_width=True)

with col2:
    st.subheader("Payment Methods Distribution")
    categories = overview["categories"]
    fig = px.pie(
        categories,
        names="name",
        values="value",
        color_discrete_sequence=CHART_COLORS,
        hover_data=["count"],
    )
    fig.update_traces(textinfo="label+percent")
    fig.update_layout(height=320, showlegend=False, **CHART_LAYOUT)
    st.plotly_chart(fig, use_container_width=True)

# ===========================================================================
# Top users
# ===========================================================================
st.subheader("Top 10 Users by Revenue")
top_users = overview["top_users"].iloc[::-1]  # largest bar on top

fig = go.Figure(go.Bar(
    x=top_users["value"],
    y=top_users["name"],
    orientation="h",
    marker_color="#10B981",
    text=top_users["value"].apply(fmt_money),
    textposition="outside",
    customdata=top_users["transactions"],
    hovertemplate="%{y}: %{text} (%{customdata} receipts)<extra></extra>",
))
fig.update_layout(height=max(300, len(top_users) * 40), xaxis_title=CURRENCY_SYMBOL, **CHART_LAYOUT)
st.plotly_chart(fig, use_container_width=True)

# ===========================================================================
# Daily transactions & discounts
# ===========================================================================
st.subheader("Daily Transactions & Discounts")
fig = go.Figure()
fig.add_trace(go.Scatter(
    x=series["date"], y=series["transactions"],
    name="Transactions", fill="tozeroy",
    line=dict(color="#8B5CF6"),
))
fig.add_trace(go.Scatter(
    x=series["date"], y=series["discount"],
    name=f"Discount ({CURRENCY_SYMBOL})", fill="tozeroy",
    line=dict(color="#F59E0B"),
))
fig.update_layout(height=320, **CHART_LAYOUT)
st.plotly_chart(fig, use_container_width=True)

# ===========================================================================
# Recent transactions
# ===========================================================================
st.subheader("Recent Transactions")
transactions = overview["transactions"].copy()
for col in ["Amount", "Discount", "Net Amount"]:
    transactions[col] = transactions[col].apply(lambda x: fmt_money(x) if pd.notna(x) else "")
transactions["Date"] = transactions["Date"].dt.strftime("%Y-%m-%d")
st.dataframe(transactions, use_container_width=True, hide_index=True)
