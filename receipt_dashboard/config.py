"""
Configuration: backend settings, receipt column registry, constants.

RECEIPT_COLUMN_MAP maps each raw column of the hosted ``moneyreciept``
table to the canonical name used in the in-memory fact table.
"""

import os
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Backend — hosted Supabase project
# ---------------------------------------------------------------------------
RECEIPTS_TABLE = "moneyreciept"
RECEIPTS_SCHEMA = "public"
DATE_COLUMN = "rcdt"
REALTIME_CHANNEL = f"{RECEIPTS_TABLE}-channel"


@dataclass(frozen=True)
class BackendConfig:
    """Endpoint and key for the hosted data store.

    Passed explicitly to the repository and realtime listener so callers can
    substitute their own client in tests.
    """

    url: str = ""
    key: str = ""

    @classmethod
    def from_env(cls) -> "BackendConfig":
        return cls(
            url=os.getenv("SUPABASE_URL", ""),
            key=os.getenv("SUPABASE_KEY", ""),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)


# ---------------------------------------------------------------------------
# Receipt column registry
# ---------------------------------------------------------------------------
# raw provider column -> canonical fact-table column
RECEIPT_COLUMN_MAP: dict[str, str] = {
    "id": "id",
    "rcdt": "date",
    "mrbillno": "bill_no",
    "paidby": "payer",
    "totalamt": "gross_amount",
    "discamt": "discount",
    "netamt": "net_amount",
    "due": "due",
    "remarks": "category",
    "userid": "user_id",
}

AMOUNT_COLUMNS = ["gross_amount", "discount", "net_amount", "due"]
LABEL_COLUMNS = ["category", "user_id"]

FACT_RECEIPT_COLUMNS = list(RECEIPT_COLUMN_MAP.values())

# Display labels for the recent-transactions table
TRANSACTION_TABLE_LABELS: dict[str, str] = {
    "date": "Date",
    "bill_no": "Bill No",
    "payer": "Patient",
    "gross_amount": "Amount",
    "discount": "Discount",
    "net_amount": "Net Amount",
    "category": "Payment",
}

# ---------------------------------------------------------------------------
# Aggregation constants
# ---------------------------------------------------------------------------
UNKNOWN_LABEL = "Unknown"
DEFAULT_TOP_N = 10
TREND_DECIMALS = 1

# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------
EXPORT_BASENAME = "analytics-export"
EXPORT_MIME = "text/csv"
NO_DATA_MESSAGE = "No data to export"

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
CURRENCY_SYMBOL = "₹"
CHART_TYPES = ["Area", "Line", "Bar"]
CHART_COLORS = ["#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#EC4899"]
TREND_COLORS = {
    "up": "#10B981",
    "down": "#EF4444",
    "flat": "#6B7280",
}
REALTIME_POLL_SECONDS = 5
