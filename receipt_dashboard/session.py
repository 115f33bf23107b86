"""
Dashboard session state shared between the UI and the realtime listener.

Every refresh takes a new request number. A response is only committed if
no newer refresh has started in the meantime, so an older, slower fetch
can never overwrite newer data.
"""

import logging
import threading
from datetime import date
from typing import Any

from .loaders.realtime import change_event_type
from .loaders.receipts import DataAccessError, DateBound, ReceiptRepository

logger = logging.getLogger(__name__)


class DashboardSession:
    """Receipt snapshot, filters and error state for one dashboard instance.

    Attributes:
        repository: Source of receipts
        start: Inclusive lower date bound, or None
        end: Inclusive upper date bound, or None
        rows: Raw rows of the last committed fetch
        previous_rows: Rows of the comparison window
        error: Message of the last failed fetch, or None
    """

    def __init__(
        self,
        repository: ReceiptRepository,
        start: DateBound = None,
        end: DateBound = None,
    ):
        self.repository = repository
        self.start = start
        self.end = end
        self.rows: list[dict[str, Any]] = []
        self.previous_rows: list[dict[str, Any]] = []
        self.error: str | None = None
        self.loaded = False
        self._sequence = 0
        self._pending_changes = 0
        self._lock = threading.Lock()

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def has_pending_changes(self) -> bool:
        with self._lock:
            return self._pending_changes > 0

    def set_date_range(self, start: DateBound, end: DateBound) -> bool:
        """Update the filter window. Returns True if it changed."""
        start = start or None
        end = end or None
        if (start, end) == (self.start, self.end):
            return False
        self.start, self.end = start, end
        return True

    def clear_date_range(self) -> bool:
        return self.set_date_range(None, None)

    def begin_request(self) -> int:
        with self._lock:
            self._sequence += 1
            self._pending_changes = 0
            return self._sequence

    def is_current(self, request_id: int) -> bool:
        with self._lock:
            return request_id == self._sequence

    def refresh(self) -> bool:
        """Fetch receipts for the current window.

        Returns True if the result (data or error) was committed, False if a
        newer request superseded it.
        """
        request_id = self.begin_request()
        start, end = self.start, self.end

        try:
            rows, previous_rows = self.repository.fetch_window(start, end)
        except DataAccessError as exc:
            if not self.is_current(request_id):
                logger.info("Discarding stale error from request %d", request_id)
                return False
            self.rows = []
            self.previous_rows = []
            self.error = str(exc)
            self.loaded = True
            return True

        if not self.is_current(request_id):
            logger.info("Discarding stale response from request %d", request_id)
            return False

        self.rows = rows
        self.previous_rows = previous_rows
        self.error = None
        self.loaded = True
        return True

    def notify_change(self, payload: dict[str, Any]) -> None:
        """Realtime callback: note that the snapshot is out of date."""
        with self._lock:
            self._pending_changes += 1
        logger.debug("Marked session stale after %s", change_event_type(payload))

    @property
    def window_label(self) -> str:
        def _fmt(bound: DateBound) -> str:
            if isinstance(bound, date):
                return bound.isoformat()
            return str(bound) if bound else "…"

        if not self.start and not self.end:
            return "All dates"
        return f"{_fmt(self.start)} to {_fmt(self.end)}"
