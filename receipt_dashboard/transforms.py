"""
Data transforms: turn raw provider rows into the typed receipt fact table.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import pandas as pd

from .config import (
    AMOUNT_COLUMNS,
    FACT_RECEIPT_COLUMNS,
    LABEL_COLUMNS,
    RECEIPT_COLUMN_MAP,
)
from .loaders.utils import normalise_date, normalise_label, parse_amount

logger = logging.getLogger(__name__)

ReceiptInput = pd.DataFrame | Sequence[Mapping[str, Any]] | None


def build_fact_receipts(rows: Sequence[Mapping[str, Any]] | None) -> pd.DataFrame:
    """Build the receipt fact table from raw ``moneyreciept`` rows.

    Parameters
    ----------
    rows : Raw rows as returned by ReceiptRepository.fetch_receipts().

    Returns
    -------
    fact_receipts DataFrame with columns:
        id, date, bill_no, payer, gross_amount, discount, net_amount,
        due, category, user_id

    Amounts go through parse_amount (zero default), dates through
    normalise_date (NaT when unparseable), and category/user_id through
    normalise_label ('Unknown' when blank). Input order is preserved.
    """
    if not rows:
        return _empty_fact_receipts()

    records = []
    for row in rows:
        record = {
            canonical: row.get(raw) for raw, canonical in RECEIPT_COLUMN_MAP.items()
        }
        for col in AMOUNT_COLUMNS:
            record[col] = parse_amount(record[col])
        for col in LABEL_COLUMNS:
            record[col] = normalise_label(record[col])
        record["date"] = normalise_date(record["date"])
        records.append(record)

    df = pd.DataFrame(records, columns=FACT_RECEIPT_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    for col in AMOUNT_COLUMNS:
        df[col] = df[col].astype("float64")

    undated = int(df["date"].isna().sum())
    if undated:
        logger.warning("%d receipts have no parseable date", undated)

    logger.info("Built fact_receipts with %d rows", len(df))
    return df


def ensure_fact_receipts(receipts: ReceiptInput) -> pd.DataFrame:
    """Accept raw rows or an existing fact table and return the fact table.

    A DataFrame that lacks the fact columns is treated as raw provider rows.
    """
    if isinstance(receipts, pd.DataFrame):
        if receipts.empty:
            return _empty_fact_receipts()
        if set(FACT_RECEIPT_COLUMNS).issubset(receipts.columns):
            return receipts
        raw = receipts.astype(object).where(receipts.notna(), None)
        return build_fact_receipts(raw.to_dict(orient="records"))
    return build_fact_receipts(receipts)


def _empty_fact_receipts() -> pd.DataFrame:
    df = pd.DataFrame(columns=FACT_RECEIPT_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    for col in AMOUNT_COLUMNS:
        df[col] = df[col].astype("float64")
    return df
