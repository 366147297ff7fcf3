"""Upstream chat-completion stream: one OpenAI-compatible session per request.

`UpstreamStream.open()` performs the request; `next()` pulls one chunk at a
time, racing the network read against the request's cancellation signal.
The handle is finite and non-restartable: once `next()` returns None it
stays exhausted, and `error` / `cancelled` explain why.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import anyio
from openai import AsyncOpenAI, OpenAIError

from codehelp.cancellation import CancellationSignal
from codehelp.config import Settings
from codehelp.errors import ConfigurationError, UpstreamConnectionError
from codehelp.models import ExplainRequest
from codehelp.prompts import build_messages

logger = logging.getLogger(__name__)


@dataclass
class StreamChunk:
    """Delta fragments carried by one upstream pull, one per choice."""

    fragments: list[str] = field(default_factory=list)

    @classmethod
    def from_completion_chunk(cls, chunk: Any) -> StreamChunk:
        fragments = []
        for choice in chunk.choices or []:
            delta = choice.delta
            fragments.append((delta.content if delta else None) or "")
        return cls(fragments=fragments)

    @property
    def text(self) -> str:
        # Every choice's delta is joined into one block
        return "".join(fragment for fragment in self.fragments if fragment)


class UpstreamStream:
    """Handle over an open streaming chat completion."""

    def __init__(
        self,
        stream: Any,
        client: AsyncOpenAI,
        signal: CancellationSignal,
    ) -> None:
        self._stream = stream
        self._client = client
        self._signal = signal
        self._iterator = stream.__aiter__()
        self._finished = False
        self._closed = False
        self.error: Exception | None = None
        self.cancelled = False

    @classmethod
    async def open(
        cls,
        request: ExplainRequest,
        settings: Settings,
        signal: CancellationSignal,
    ) -> UpstreamStream:
        """Start the completion. Raises before streaming if it cannot start."""
        if not settings.api_key:
            raise ConfigurationError("API_KEY is not set")

        client = AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.upstream_base_url,
            timeout=settings.upstream_timeout,
            max_retries=0,
        )
        try:
            stream = await client.chat.completions.create(
                model=settings.upstream_model,
                messages=build_messages(request),
                seed=settings.upstream_seed,
                stream=True,
            )
        except OpenAIError as exc:
            logger.error("Failed to open upstream stream: %s", exc)
            await client.close()
            raise UpstreamConnectionError(str(exc)) from exc

        logger.info(
            "Upstream stream opened (model=%s, language=%s)",
            settings.upstream_model,
            request.language or "-",
        )
        return cls(stream, client, signal)

    async def next(self) -> StreamChunk | None:
        """Return the next chunk, or None once exhausted, failed or cancelled."""
        if self._finished:
            return None
        if self._signal.cancelled:
            await self._finish_cancelled()
            return None

        pull = asyncio.ensure_future(self._iterator.__anext__())
        cancel_wait = asyncio.ensure_future(self._signal.wait())
        try:
            done, _ = await asyncio.wait(
                {pull, cancel_wait}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (pull, cancel_wait):
                if not task.done():
                    task.cancel()

        if pull not in done:
            # Let the interrupted read unwind before the connection is released
            await asyncio.wait({pull})
            await self._finish_cancelled()
            return None

        try:
            raw = pull.result()
        except StopAsyncIteration:
            self._finished = True
            return None
        except Exception as exc:
            logger.warning("Upstream stream failed: %s", exc)
            self._finished = True
            self.error = exc
            return None

        return StreamChunk.from_completion_chunk(raw)

    async def close(self) -> None:
        """Release the HTTP response and client. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        self._finished = True
        # Runs inside cancelled scopes when the client disconnects
        with anyio.CancelScope(shield=True):
            try:
                await self._stream.close()
            finally:
                await self._client.close()
        logger.debug("Upstream stream closed")

    async def _finish_cancelled(self) -> None:
        self.cancelled = True
        await self.close()
