"""Exceptions surfaced to HTTP clients as JSON error bodies.

Each exception carries the status code it maps to. The handler in
`codehelp.main` renders any `CodeHelpError` as `{"error": message}`.
"""

from __future__ import annotations

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class CodeHelpError(Exception):
    """Base class for errors returned before any response body is streamed."""

    status_code: int = status.HTTP_400_BAD_REQUEST


class ConfigurationError(CodeHelpError):
    """Upstream credentials are missing."""


class UpstreamConnectionError(CodeHelpError):
    """The upstream streaming session could not be opened."""


class TransportUnsupportedError(CodeHelpError):
    """The connection cannot carry an incrementally written response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class PresetNotFoundError(CodeHelpError):
    status_code = status.HTTP_404_NOT_FOUND


class DuplicatePresetError(CodeHelpError):
    pass


async def codehelp_error_handler(request: Request, exc: CodeHelpError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies as 400 with a readable message."""
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg", ""))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(messages) or "invalid request body"},
    )
