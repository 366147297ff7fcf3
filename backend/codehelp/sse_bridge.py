"""SSE bridge: turns an upstream completion stream into SSE frames.

`encode_event()` formats one frame. `StreamBridge` drives the pull loop for a
single request and owns its terminal state: every successfully opened stream
ends with exactly one `done` event (preceded by one `error` event when the
upstream failed), unless the client disconnected, in which case nothing more
is written.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Mapping
from typing import Any, Protocol

from sse_starlette.sse import ServerSentEvent

from codehelp.cancellation import CancellationSignal
from codehelp.errors import TransportUnsupportedError
from codehelp.models import ChunkEventData, DoneEventData, ErrorEventData

logger = logging.getLogger(__name__)


def normalize_newlines(text: str) -> str:
    """A bare CR would end an SSE line early, so fold every line break to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def encode_event(name: str, payload: Mapping[str, Any]) -> bytes | None:
    """Format one SSE frame, or return None if the payload cannot be encoded.

    The `data` field, when it is a string, is newline-normalized before
    encoding. The JSON is compact with sorted keys, so equal inputs always
    produce identical bytes.
    """
    sanitized = dict(payload)
    if isinstance(sanitized.get("data"), str):
        sanitized["data"] = normalize_newlines(sanitized["data"])

    try:
        body = json.dumps(
            sanitized,
            ensure_ascii=False,
            separators=(",", ":"),
            sort_keys=True,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        logger.error("Failed to encode SSE payload for event %r: %s", name, e)
        return None

    return ServerSentEvent(data=body, event=name or None, sep="\n").encode()


def _encode_done_frame() -> bytes:
    frame = encode_event("done", DoneEventData().model_dump())
    if frame is None:
        raise RuntimeError("done event payload is not encodable")
    return frame


# Every completed stream ends with this exact frame
DONE_FRAME = _encode_done_frame()


class ChunkSource(Protocol):
    """What the bridge needs from an upstream stream."""

    error: Exception | None
    cancelled: bool

    async def next(self) -> Any: ...

    async def close(self) -> None: ...


class StreamBridge:
    """Pull/encode/emit loop for one request.

    States: streaming (initial) -> done (terminal). `step()` is one loop
    invocation; `stream()` drives it to completion for the HTTP response.
    """

    def __init__(
        self,
        source: ChunkSource,
        signal: CancellationSignal,
    ) -> None:
        self._source = source
        self._signal = signal
        self.terminal = False
        self.chunks_sent = 0

    async def step(self) -> list[bytes] | None:
        """Pull until there is something to write.

        Returns the frames to write, an empty list if a frame was dropped,
        or None when there is no more work.
        """
        if self.terminal:
            return None

        while True:
            chunk = await self._source.next()
            if chunk is None:
                break
            text = chunk.text
            if not text:
                # Give other tasks a turn between empty chunks
                await asyncio.sleep(0)
                continue
            frame = encode_event("chunk", ChunkEventData(data=text).model_dump())
            if frame is None:
                return []
            self.chunks_sent += 1
            return [frame]

        self.terminal = True
        if self._source.cancelled or self._signal.cancelled:
            logger.info("Stream cancelled after %d chunks", self.chunks_sent)
            return None

        frames = []
        if self._source.error is not None:
            error_frame = encode_event(
                "error", ErrorEventData(message=str(self._source.error)).model_dump()
            )
            if error_frame is not None:
                frames.append(error_frame)
        frames.append(DONE_FRAME)
        logger.info(
            "Stream finished after %d chunks%s",
            self.chunks_sent,
            " (upstream error)" if self._source.error is not None else "",
        )
        return frames

    async def stream(self) -> AsyncGenerator[bytes, None]:
        """Yield frames until the terminal `done` has been delivered."""
        try:
            while True:
                frames = await self.step()
                if frames is None:
                    return
                for frame in frames:
                    if self._signal.cancelled:
                        self.terminal = True
                        return
                    yield frame
        finally:
            await self._source.close()


def ensure_streaming_transport(scope: Mapping[str, Any]) -> None:
    """Raise if the connection cannot carry frames written one at a time.

    HTTP/1.0 has no chunked transfer encoding, so a long-lived event stream
    cannot be delimited on it.
    """
    if scope.get("type") != "http":
        raise TransportUnsupportedError("streaming not supported")
    if scope.get("http_version", "1.1") == "1.0":
        raise TransportUnsupportedError("streaming not supported")
