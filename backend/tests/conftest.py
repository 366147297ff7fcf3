"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from openai import APIConnectionError
from openai.types.chat.chat_completion_chunk import (
    ChatCompletionChunk,
    Choice,
    ChoiceDelta,
)

from codehelp.main import app


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
async def setup_test_db(tmp_path):
    """Initialize a fresh SQLite database for each test."""
    from codehelp.database import init_db
    import codehelp.database as db_mod

    db_file = str(tmp_path / "test.db")
    with patch.object(db_mod, "settings") as mock_s:
        mock_s.database_url = f"sqlite:///{db_file}"
        await init_db()

    yield


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse-starlette keeps a process-wide exit event bound to the first loop."""
    from sse_starlette.sse import AppStatus

    if hasattr(AppStatus, "should_exit_event"):
        AppStatus.should_exit_event = None
    yield


# ---------------------------------------------------------------------------
# Mock helpers for the upstream chat-completion API
# ---------------------------------------------------------------------------


def make_completion_chunk(*contents: str | None) -> ChatCompletionChunk:
    """Create a ChatCompletionChunk with one choice per delta content."""
    return ChatCompletionChunk(
        id="chatcmpl-test",
        object="chat.completion.chunk",
        created=0,
        model="deepseek-chat",
        choices=[
            Choice(index=i, delta=ChoiceDelta(content=content), finish_reason=None)
            for i, content in enumerate(contents)
        ],
    )


def make_connection_error() -> APIConnectionError:
    return APIConnectionError(
        request=httpx.Request("POST", "https://api.deepseek.com/chat/completions"),
    )


class FakeCompletionStream:
    """Stands in for openai.AsyncStream: iterates canned chunks.

    After the chunks it raises `error` if given, blocks forever if `block`
    is set, and otherwise ends.
    """

    def __init__(self, chunks=(), error: Exception | None = None, block: bool = False):
        self.chunks = list(chunks)
        self.error = error
        self.block = block
        self.close = AsyncMock()

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error
        if self.block:
            await asyncio.Event().wait()


def make_mock_openai_client(stream: FakeCompletionStream | None = None) -> MagicMock:
    mock_client = MagicMock()
    mock_client.chat.completions.create = AsyncMock(
        return_value=stream or FakeCompletionStream()
    )
    mock_client.close = AsyncMock()
    return mock_client


@pytest.fixture
def mock_upstream():
    """Patch AsyncOpenAI and route settings so /ai streams canned chunks.

    Usage:
        def test_explain(mock_upstream):
            mock_upstream["set_stream"](FakeCompletionStream([...]))
    """
    mock_client = make_mock_openai_client(
        FakeCompletionStream([make_completion_chunk("Hello"), make_completion_chunk(" world")])
    )

    def set_stream(stream: FakeCompletionStream) -> None:
        mock_client.chat.completions.create = AsyncMock(return_value=stream)

    def set_open_error(error: Exception) -> None:
        mock_client.chat.completions.create = AsyncMock(side_effect=error)

    with patch("codehelp.upstream.AsyncOpenAI", return_value=mock_client) as mock_cls:
        with patch("codehelp.routes.explain.settings") as mock_settings:
            mock_settings.upstream_configured = True
            mock_settings.api_key = "test-key"
            mock_settings.upstream_base_url = "https://api.deepseek.com"
            mock_settings.upstream_model = "deepseek-chat"
            mock_settings.upstream_seed = 0
            mock_settings.upstream_timeout = 60.0
            mock_settings.sse_ping_seconds = 15
            yield {
                "client": mock_client,
                "client_cls": mock_cls,
                "settings": mock_settings,
                "set_stream": set_stream,
                "set_open_error": set_open_error,
            }
