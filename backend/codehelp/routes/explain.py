"""Error explanation endpoint: POST /ai → SSE stream."""

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse
from starlette.background import BackgroundTask

from codehelp.cancellation import CancellationSignal
from codehelp.config import settings
from codehelp.errors import ConfigurationError
from codehelp.models import ExplainRequest
from codehelp.sse_bridge import StreamBridge, ensure_streaming_transport
from codehelp.upstream import UpstreamStream

router = APIRouter()


@router.post("/ai")
async def explain(body: ExplainRequest, request: Request) -> EventSourceResponse:
    """Explain a failing program, streamed as SSE.

    Events emitted: chunk, error, done. Anything that fails before the
    upstream stream is open is returned as a plain JSON error instead.
    """
    if not settings.upstream_configured:
        raise ConfigurationError("API_KEY is not set")
    ensure_streaming_transport(request.scope)

    signal = CancellationSignal()
    source = await UpstreamStream.open(body, settings, signal)
    bridge = StreamBridge(source, signal)
    # An unstarted generator never reaches its finally; release here as well
    return EventSourceResponse(
        bridge.stream(),
        media_type="text/event-stream",
        ping=settings.sse_ping_seconds,
        sep="\n",
        client_close_handler_callable=signal.on_client_close,
        background=BackgroundTask(source.close),
    )
