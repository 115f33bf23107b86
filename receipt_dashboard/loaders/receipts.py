"""
Loader for the hosted ``moneyreciept`` table.

Receipts are read through the Supabase PostgREST builder:
    table -> select("*") -> order(rcdt desc) -> gte/lte(rcdt) -> execute

The client is passed in rather than created at import time, so tests and
alternative front ends can hand over their own client.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from ..config import DATE_COLUMN, RECEIPTS_TABLE, BackendConfig
from .utils import normalise_date

logger = logging.getLogger(__name__)

DateBound = date | datetime | str | None


class DataAccessError(RuntimeError):
    """Raised when the backend query fails; message is safe to show users."""


def format_date_bound(bound: DateBound) -> str | None:
    if bound is None or bound == "":
        return None
    if isinstance(bound, datetime):
        return bound.date().isoformat()
    if isinstance(bound, date):
        return bound.isoformat()
    return str(bound)


def previous_window(start: DateBound, end: DateBound) -> tuple[date, date] | None:
    """Return the inclusive window of equal length ending the day before start.

    None when either bound is missing or unparseable.
    """
    start_ts = normalise_date(format_date_bound(start))
    end_ts = normalise_date(format_date_bound(end))
    if start_ts is None or end_ts is None or end_ts < start_ts:
        return None
    span = end_ts - start_ts
    prev_end = start_ts - timedelta(days=1)
    prev_start = prev_end - span
    return prev_start.date(), prev_end.date()


class ReceiptRepository:
    """Read access to the receipts table.

    Attributes:
        client: Supabase client (or any object with the same query builder)
        table: Table name, defaults to ``moneyreciept``
    """

    def __init__(self, client: Client | Any, table: str = RECEIPTS_TABLE):
        self.client = client
        self.table = table

    @classmethod
    def from_config(cls, config: BackendConfig) -> "ReceiptRepository":
        if not config.is_configured:
            raise DataAccessError(
                "Backend is not configured: set SUPABASE_URL and SUPABASE_KEY"
            )
        return cls(create_client(config.url, config.key))

    def fetch_receipts(
        self,
        start: DateBound = None,
        end: DateBound = None,
    ) -> list[dict[str, Any]]:
        """Fetch all receipts, newest first, optionally bounded by date.

        Args:
            start: Inclusive lower bound on the receipt date
            end: Inclusive upper bound on the receipt date

        Returns:
            Raw rows as returned by the provider

        Raises:
            DataAccessError: If the backend call fails
        """
        start_bound = format_date_bound(start)
        end_bound = format_date_bound(end)

        query = (
            self.client.table(self.table)
            .select("*")
            .order(DATE_COLUMN, desc=True)
        )
        if start_bound:
            query = query.gte(DATE_COLUMN, start_bound)
        if end_bound:
            query = query.lte(DATE_COLUMN, end_bound)

        try:
            response = query.execute()
        except APIError as exc:
            logger.exception("Error fetching receipts from %s", self.table)
            raise DataAccessError(exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            logger.exception("Error fetching receipts from %s", self.table)
            raise DataAccessError(f"Could not reach the receipts backend: {exc}") from exc

        rows = list(response.data or [])
        logger.info(
            "Fetched %d receipts (start=%s, end=%s)", len(rows), start_bound, end_bound
        )
        return rows

    def fetch_window(
        self,
        start: DateBound = None,
        end: DateBound = None,
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Fetch the selected window and the equal-length window before it.

        The previous window is only queried when both bounds are set;
        otherwise it comes back empty.
        """
        current = self.fetch_receipts(start, end)
        window = previous_window(start, end)
        if window is None:
            return current, []
        previous = self.fetch_receipts(*window)
        return current, previous
