"""
Receipt Analytics Dashboard

Analytics backend for turning the hosted ``moneyreciept`` table into
dashboard-ready KPIs, charts and CSV exports.

To connect a front end:
    Build a ReceiptRepository from BackendConfig.from_env(), wrap it in a
    DashboardSession, call session.refresh(), then pass session.rows to
    dashboard.get_dashboard_overview() for cards, trend charts (Plotly)
    and tables.

To receive live updates:
    Start a loaders.ReceiptChangeListener with session.notify_change as
    the callback and refresh whenever session.has_pending_changes is set.

To add a grouping:
    Add the raw column to config.RECEIPT_COLUMN_MAP, then add a
    prepare_* function in dashboard.py over the fact_receipts table.
"""
