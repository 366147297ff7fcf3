"""Per-request cancellation token tied to the client connection."""

from __future__ import annotations

import asyncio
import logging

from starlette.types import Message

logger = logging.getLogger(__name__)


class CancellationSignal:
    """Set once when the client goes away; awaited at every blocking pull.

    One instance per request. `on_client_close` is handed to
    `EventSourceResponse(client_close_handler_callable=...)` so the transport's
    disconnect notification flips the signal.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()
        logger.debug("Request cancelled: %s", reason)

    async def wait(self) -> None:
        await self._event.wait()

    async def on_client_close(self, message: Message) -> None:
        self.cancel(f"client disconnected ({message.get('type', 'unknown')})")
