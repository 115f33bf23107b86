"""
Receipt Analytics — End-to-end pipeline smoke test.

Fetches receipts (or simulates them when no backend is configured), runs
every aggregation, writes a CSV export and prints summaries.

Usage:
    python main.py
"""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from receipt_dashboard.config import BackendConfig
from receipt_dashboard.dashboard import get_dashboard_overview
from receipt_dashboard.export import prepare_export, write_export
from receipt_dashboard.loaders import ReceiptRepository
from receipt_dashboard.session import DashboardSession
from receipt_dashboard.simulator import SimulatedReceiptRepository

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

EXPORT_DIR = Path(__file__).resolve().parent / "exports"


def main() -> int:
    """Run the analytics pipeline and print smoke-test outputs."""
    load_dotenv()

    print("=" * 70)
    print("  RECEIPT ANALYTICS DASHBOARD")
    print("  Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load receipts
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING RECEIPTS")
    print("-" * 40)

    config = BackendConfig.from_env()
    if config.is_configured:
        repository = ReceiptRepository.from_config(config)
        print(f"Source: {config.url}")
    else:
        repository = SimulatedReceiptRepository()
        print("Source: simulated receipts (SUPABASE_URL / SUPABASE_KEY not set)")

    session = DashboardSession(repository)
    session.refresh()
    if session.error:
        logger.error("Fetch failed: %s", session.error)
        print(f"\nError loading data: {session.error}")
        return 1

    print(f"\nReceipts: {len(session.rows)} rows loaded")

    # ------------------------------------------------------------------
    # 2. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    overview = get_dashboard_overview(session.rows, session.previous_rows)

    print("\nKPIs:")
    for key, value in overview["kpis"].items():
        print(f"  {key:22s} | {value}")

    series = overview["time_series"]
    print(f"\nTime series: {len(series)} dates")
    if not series.empty:
        print(series.tail(10).to_string(index=False))

    print("\nPayment methods:")
    print(overview["categories"].to_string(index=False))

    print("\nTop users:")
    print(overview["top_users"].to_string(index=False))

    # ------------------------------------------------------------------
    # 3. Export
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] EXPORT")
    print("-" * 40)

    export = prepare_export(session.rows)
    if export is None:
        print("\nNo data to export")
    else:
        try:
            path = write_export(export, EXPORT_DIR)
        except OSError as e:
            logger.warning("Could not write export: %s", e)
        else:
            print(f"\nWrote {path}")

    # ------------------------------------------------------------------
    # 4. Consistency checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] CONSISTENCY CHECKS")
    print("-" * 40)

    kpis = overview["kpis"]
    check1 = abs(series["revenue"].sum() - kpis["total_revenue"]) < 1e-6
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] Per-date revenue sums to total revenue")

    check2 = int(overview["categories"]["count"].sum()) == kpis["total_transactions"]
    print(f"  [{'PASS' if check2 else 'FAIL'}] Payment-method counts cover every receipt")

    values = overview["top_users"]["value"].tolist()
    check3 = all(a >= b for a, b in zip(values, values[1:]))
    print(f"  [{'PASS' if check3 else 'FAIL'}] Top users sorted by revenue")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
