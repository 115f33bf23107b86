"""Data access for the hosted receipts table."""

from .realtime import ReceiptChangeListener, change_event_type, subscribe_to_receipts
from .receipts import DataAccessError, ReceiptRepository, previous_window
from .utils import normalise_date, normalise_label, parse_amount

__all__ = [
    "DataAccessError",
    "ReceiptRepository",
    "previous_window",
    "ReceiptChangeListener",
    "change_event_type",
    "subscribe_to_receipts",
    "normalise_date",
    "normalise_label",
    "parse_amount",
]
