"""
Simulated receipt generator for the dashboard's demo mode.

Generates rows shaped like the hosted ``moneyreciept`` table, with amounts
as text the way the provider returns them. All values are synthetic.
"""

import numpy as np
import pandas as pd

from .loaders.receipts import DateBound, ReceiptRepository, format_date_bound
from .loaders.utils import normalise_date

# ---------------------------------------------------------------------------
# Typical clinic billing parameters
# ---------------------------------------------------------------------------
_PAYMENT_METHODS = [
    ("Cash", 0.45),
    ("UPI", 0.30),
    ("Card", 0.15),
    ("Insurance", 0.07),
    (None, 0.03),  # remarks left blank at the counter
]

_CASHIERS = ["reception1", "reception2", "pharmacy", "lab", "billing_admin", "opd_desk"]

_PAYERS = [
    "A. Sharma", "R. Iyer", "S. Khan", "P. Nair", "M. Das", "K. Reddy",
    "V. Patel", "J. Singh", "L. Fernandes", "T. Bose", "N. Gupta", "D. Menon",
]


def generate_receipts(
    start_date: str = "2024-01-01",
    n_days: int = 60,
    mean_per_day: float = 12.0,
    seed: int = 42,
) -> list[dict]:
    """Generate simulated receipt rows, newest first.

    Produces roughly ``mean_per_day`` receipts per day over ``n_days``
    days starting at ``start_date``.
    """
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start_date, periods=n_days, freq="D")
    methods = [m for m, _ in _PAYMENT_METHODS]
    weights = [w for _, w in _PAYMENT_METHODS]

    rows = []
    bill_no = 1000
    for day in dates:
        # Sundays are quieter
        lam = mean_per_day * (0.5 if day.dayofweek == 6 else 1.0)
        for _ in range(rng.poisson(lam)):
            bill_no += 1
            gross = round(float(rng.gamma(2.0, 450.0)), 2)
            discount = round(gross * float(rng.choice([0, 0, 0, 0.05, 0.1])), 2)
            net = round(gross - discount, 2)
            due = round(net * 0.2, 2) if rng.random() < 0.08 else 0.0

            rows.append({
                "id": bill_no,
                "rcdt": day.strftime("%Y-%m-%d"),
                "mrbillno": f"MR{bill_no}",
                "paidby": str(rng.choice(_PAYERS)),
                "totalamt": f"{gross:.2f}",
                "discamt": f"{discount:.2f}",
                "netamt": f"{net:.2f}",
                "due": f"{due:.2f}",
                "remarks": methods[rng.choice(len(methods), p=weights)],
                "userid": str(rng.choice(_CASHIERS)),
            })

    rows.sort(key=lambda r: r["rcdt"], reverse=True)
    return rows


class SimulatedReceiptRepository(ReceiptRepository):
    """In-memory stand-in for the hosted table, used when no backend is configured."""

    def __init__(self, rows: list[dict] | None = None):
        super().__init__(client=None)
        self._rows = rows if rows is not None else generate_receipts()

    def fetch_receipts(self, start: DateBound = None, end: DateBound = None) -> list[dict]:
        start_ts = normalise_date(format_date_bound(start))
        end_ts = normalise_date(format_date_bound(end))

        selected = []
        for row in self._rows:
            row_date = normalise_date(row.get("rcdt"))
            if start_ts is not None and (row_date is None or row_date < start_ts):
                continue
            if end_ts is not None and (row_date is None or row_date > end_ts):
                continue
            selected.append(dict(row))

        selected.sort(key=lambda r: str(r.get("rcdt") or ""), reverse=True)
        return selected
