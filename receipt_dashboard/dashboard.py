"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end.
Each function returns plain dicts or DataFrames suitable for rendering
cards, charts, and tables.
"""

import logging

import pandas as pd

from .config import DEFAULT_TOP_N, TRANSACTION_TABLE_LABELS
from .kpis import calculate_kpis
from .transforms import ReceiptInput, ensure_fact_receipts

logger = logging.getLogger(__name__)

TIME_SERIES_COLUMNS = ["date", "revenue", "total_amount", "transactions", "discount"]
CATEGORY_COLUMNS = ["name", "value", "count"]
TOP_USER_COLUMNS = ["name", "value", "transactions"]


def prepare_time_series(receipts: ReceiptInput) -> pd.DataFrame:
    """Per-date revenue series for the trend charts.

    Returns
    -------
    DataFrame with columns:
        date, revenue, total_amount, transactions, discount

    One row per distinct date, ascending. Dates without receipts are not
    filled in. Receipts without a parseable date collect in a trailing
    NaT row so that revenue still sums to the KPI total.
    """
    df = ensure_fact_receipts(receipts)
    if df.empty:
        return pd.DataFrame(columns=TIME_SERIES_COLUMNS)

    result = (
        df.groupby("date", sort=True, dropna=False)
        .agg(
            revenue=("net_amount", "sum"),
            total_amount=("gross_amount", "sum"),
            transactions=("net_amount", "count"),
            discount=("discount", "sum"),
        )
        .reset_index()
    )

    logger.info("Prepared time series with %d dates", len(result))
    return result[TIME_SERIES_COLUMNS]


def prepare_category_distribution(receipts: ReceiptInput) -> pd.DataFrame:
    """Revenue and count per payment method (the remarks field).

    Returns
    -------
    DataFrame with columns: name, value, count
    in order of first appearance.
    """
    df = ensure_fact_receipts(receipts)
    if df.empty:
        return pd.DataFrame(columns=CATEGORY_COLUMNS)

    result = (
        df.groupby("category", sort=False)
        .agg(value=("net_amount", "sum"), count=("net_amount", "count"))
        .reset_index()
        .rename(columns={"category": "name"})
    )
    return result[CATEGORY_COLUMNS]


def prepare_top_users(receipts: ReceiptInput, limit: int = DEFAULT_TOP_N) -> pd.DataFrame:
    """Top users by revenue.

    Returns
    -------
    DataFrame with columns: name, value, transactions
    sorted by value descending (ties keep first-appearance order) and cut
    to ``limit`` rows.
    """
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    df = ensure_fact_receipts(receipts)
    if df.empty:
        return pd.DataFrame(columns=TOP_USER_COLUMNS)

    result = (
        df.groupby("user_id", sort=False)
        .agg(value=("net_amount", "sum"), transactions=("net_amount", "count"))
        .reset_index()
        .rename(columns={"user_id": "name"})
        .sort_values("value", ascending=False, kind="stable")
        .head(limit)
        .reset_index(drop=True)
    )
    return result[TOP_USER_COLUMNS]


def get_recent_transactions(receipts: ReceiptInput) -> pd.DataFrame:
    """Receipt table for display, newest first, with human column labels."""
    df = ensure_fact_receipts(receipts)
    columns = list(TRANSACTION_TABLE_LABELS)
    if df.empty:
        return pd.DataFrame(columns=list(TRANSACTION_TABLE_LABELS.values()))

    table = df[columns].sort_values("date", ascending=False, kind="stable")
    return table.rename(columns=TRANSACTION_TABLE_LABELS).reset_index(drop=True)


def get_dashboard_overview(
    receipts: ReceiptInput,
    previous: ReceiptInput = None,
    top_n: int = DEFAULT_TOP_N,
) -> dict:
    """Single entry point the app calls on each data refresh.

    The fact table is built once and shared by every aggregation.

    Returns
    -------
    Dict with keys: kpis, time_series, categories, top_users, transactions
    """
    df = ensure_fact_receipts(receipts)
    return {
        "kpis": calculate_kpis(df, previous),
        "time_series": prepare_time_series(df),
        "categories": prepare_category_distribution(df),
        "top_users": prepare_top_users(df, top_n),
        "transactions": get_recent_transactions(df),
    }
