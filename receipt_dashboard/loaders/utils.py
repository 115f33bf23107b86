"""
Shared utilities for receipt ingestion: amount parsing, date
normalisation, grouping-label cleanup.
"""

import logging
import math
from typing import Any

import pandas as pd

from ..config import UNKNOWN_LABEL

logger = logging.getLogger(__name__)


def parse_amount(val: Any) -> float:
    """Coerce a receipt amount to float.

    The provider returns numeric columns as text. Policy: None, blank
    strings, unparseable text and non-finite values all become 0.0.
    Thousands separators and a leading rupee sign are stripped first,
    so "₹1,250.50" parses to 1250.5.
    """
    if val is None or isinstance(val, bool):
        return 0.0
    if isinstance(val, str):
        val = val.strip().lstrip("₹").replace(",", "").strip()
        if not val:
            return 0.0
    try:
        result = float(val)
    except (ValueError, TypeError):
        logger.debug("Could not parse amount %r, defaulting to 0", val)
        return 0.0
    if not math.isfinite(result):
        return 0.0
    return result


def normalise_date(val: Any) -> pd.Timestamp | None:
    """Convert an ISO date string, date or datetime to a midnight pd.Timestamp.

    Timezone-aware values keep their calendar date and lose the offset.
    Returns None for missing or unparseable values.
    """
    if val is None:
        return None
    if isinstance(val, str) and not val.strip():
        return None
    try:
        ts = pd.Timestamp(val)
    except (ValueError, TypeError):
        logger.warning("Could not parse date value: %s", val)
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.normalize()


def normalise_label(val: Any) -> str:
    """Return a grouping label, falling back to 'Unknown' for blanks."""
    if val is None:
        return UNKNOWN_LABEL
    if isinstance(val, float) and math.isnan(val):
        return UNKNOWN_LABEL
    label = str(val).strip()
    return label or UNKNOWN_LABEL
