"""
KPI computation functions — pure functions with no side effects.

Provides percentage-change calculation, trend classification and the
scalar KPI summary shown on the dashboard cards.
"""

import logging

from .config import TREND_DECIMALS
from .transforms import ReceiptInput, ensure_fact_receipts

logger = logging.getLogger(__name__)


def calc_pct_change(current: float, previous: float) -> float | None:
    """Return the percentage change from previous to current.

    None if previous == 0.
    """
    if previous == 0:
        return None
    return (current - previous) / previous * 100


def classify_trend(pct_change: float | None) -> str:
    """Return 'up', 'down', or 'flat' for a card's trend arrow."""
    if pct_change is None or pct_change == 0:
        return "flat"
    return "up" if pct_change > 0 else "down"


def calculate_kpis(
    receipts: ReceiptInput,
    previous: ReceiptInput = None,
) -> dict:
    """Return the scalar KPIs for a receipt set.

    Parameters
    ----------
    receipts : Raw rows or fact_receipts DataFrame for the selected window.
    previous : Optional rows for the prior period, used for trends.

    Returns
    -------
    Dict with structure:
    {
        "total_revenue": 150.0,
        "total_transactions": 2,
        "avg_transaction_value": 75.0,
        "total_discount": 10.0,
        "outstanding_due": 0.0,
        "trends": {"revenue": 12.5, "transactions": -4.0},
    }

    A trend key is omitted when the prior value it divides by is zero.
    """
    df = ensure_fact_receipts(receipts)

    total_transactions = len(df)
    total_revenue = float(df["net_amount"].sum())
    total_discount = float(df["discount"].sum())
    outstanding_due = float(df["due"].sum())
    avg_transaction_value = (
        total_revenue / total_transactions if total_transactions else 0.0
    )

    trends: dict[str, float] = {}
    prev_df = ensure_fact_receipts(previous)
    if not prev_df.empty:
        revenue_change = calc_pct_change(total_revenue, float(prev_df["net_amount"].sum()))
        if revenue_change is not None:
            trends["revenue"] = round(revenue_change, TREND_DECIMALS)
        count_change = calc_pct_change(total_transactions, len(prev_df))
        if count_change is not None:
            trends["transactions"] = round(count_change, TREND_DECIMALS)

    logger.debug(
        "KPIs over %d receipts: revenue=%.2f trends=%s",
        total_transactions, total_revenue, trends,
    )

    return {
        "total_revenue": total_revenue,
        "total_transactions": total_transactions,
        "avg_transaction_value": avg_transaction_value,
        "total_discount": total_discount,
        "outstanding_due": outstanding_due,
        "trends": trends,
    }
