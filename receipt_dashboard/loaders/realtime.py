"""
Push subscription to row changes on the receipts table.

Supabase delivers realtime events over an async websocket channel.
``ReceiptChangeListener`` runs that channel on its own event loop in a
daemon thread so a synchronous front end (Streamlit) can consume it.
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import Any

from supabase import AsyncClient, acreate_client

from ..config import RECEIPTS_SCHEMA, RECEIPTS_TABLE, REALTIME_CHANNEL, BackendConfig

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict[str, Any]], None]

_EVENT_TYPES = {"INSERT", "UPDATE", "DELETE"}


def change_event_type(payload: dict[str, Any]) -> str:
    """Return INSERT / UPDATE / DELETE for a change payload, UNKNOWN otherwise."""
    data = payload.get("data") if isinstance(payload, dict) else None
    candidates = [
        payload.get("eventType") if isinstance(payload, dict) else None,
        payload.get("type") if isinstance(payload, dict) else None,
        data.get("type") if isinstance(data, dict) else None,
    ]
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.upper() in _EVENT_TYPES:
            return candidate.upper()
    return "UNKNOWN"


async def subscribe_to_receipts(
    client: AsyncClient | Any,
    callback: ChangeCallback,
    table: str = RECEIPTS_TABLE,
):
    """Subscribe ``callback`` to every insert/update/delete on the table.

    The callback is invoked once per change event, in arrival order.
    Returns the subscribed channel so the caller can remove it later.
    """
    channel = client.channel(REALTIME_CHANNEL)
    channel.on_postgres_changes(
        "*",
        schema=RECEIPTS_SCHEMA,
        table=table,
        callback=callback,
    )
    await channel.subscribe()
    logger.info("Subscribed to changes on %s.%s", RECEIPTS_SCHEMA, table)
    return channel


async def _create_async_client(config: BackendConfig) -> AsyncClient:
    return await acreate_client(config.url, config.key)


class ReceiptChangeListener:
    """Background realtime subscription for synchronous callers.

    Attributes:
        callback: Called with each change payload, on the listener thread
    """

    def __init__(
        self,
        config: BackendConfig,
        callback: ChangeCallback,
        client_factory: Callable[[BackendConfig], Awaitable[Any]] | None = None,
    ):
        self.config = config
        self.callback = callback
        self._client_factory = client_factory or _create_async_client
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._client: Any = None
        self._channel: Any = None
        self._ready = threading.Event()
        self._stopping = threading.Event()
        self._stop_event: asyncio.Event | None = None
        self._error: BaseException | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, timeout: float = 10.0) -> None:
        """Start the listener thread and wait until the channel is subscribed.

        On timeout the listener is stopped before raising, so a subscription
        that completes late is removed again.

        Raises:
            RuntimeError: If the subscription could not be established
        """
        if self.is_running:
            return

        self._ready.clear()
        self._stopping.clear()
        self._stop_event = None
        self._error = None
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._loop,),
            name="receipt-change-listener",
            daemon=True,
        )
        self._thread.start()

        if not self._ready.wait(timeout):
            self.stop()
            raise RuntimeError("Timed out subscribing to receipt changes")
        if self._error is not None:
            raise RuntimeError(
                f"Could not subscribe to receipt changes: {self._error}"
            ) from self._error

    def stop(self, timeout: float = 5.0) -> None:
        """Remove the channel and join the listener thread."""
        if self._loop is None or self._thread is None:
            return

        self._stopping.set()
        if not self._loop.is_closed():
            try:
                self._loop.call_soon_threadsafe(self._wake)
            except RuntimeError:
                # Loop closed after the check; the thread has already finished
                pass
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Receipt change listener did not stop within %.1fs", timeout)
        self._thread = None
        self._loop = None
        logger.info("Stopped receipt change listener")

    def _run(self, loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(self._main())
        except Exception as exc:
            if self._stopping.is_set():
                logger.info("Realtime subscription abandoned: %s", exc)
            else:
                logger.exception("Realtime subscription failed")
            self._error = exc
        finally:
            loop.close()
            self._ready.set()

    async def _main(self) -> None:
        self._stop_event = asyncio.Event()
        if self._stopping.is_set():
            self._stop_event.set()

        self._client = await self._client_factory(self.config)
        self._channel = await subscribe_to_receipts(self._client, self._dispatch)
        self._ready.set()

        await self._stop_event.wait()
        try:
            await self._client.remove_channel(self._channel)
        except Exception:
            logger.warning("Failed to remove realtime channel cleanly", exc_info=True)
        self._channel = None

    def _wake(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    def _dispatch(self, payload: dict[str, Any]) -> None:
        logger.info("Receipt change received: %s", change_event_type(payload))
        try:
            self.callback(payload)
        except Exception:
            logger.exception("Receipt change callback failed")
