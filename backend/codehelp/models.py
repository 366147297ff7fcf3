"""Pydantic models: the shared contract between backend and frontend.

These models define the request/response shapes and SSE event data structures.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ExplainRequest(BaseModel):
    """POST /ai request body."""
    code: str = ""
    error_info: str = ""
    language: str = ""


class PresetCodeInput(BaseModel):
    """POST / request body."""
    query: str = Field(min_length=1)
    code: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class PresetCode(BaseModel):
    """A stored preset, keyed by its unique query."""
    id: int
    query: str
    code: str


class HealthResponse(BaseModel):
    """GET /health response."""
    status: Literal["ok", "degraded"]
    version: str = "0.1.0"
    upstream_configured: bool


# ---------------------------------------------------------------------------
# SSE event data shapes (what goes in the `data` field of each SSE event)
# ---------------------------------------------------------------------------

class ChunkEventData(BaseModel):
    """data for event: chunk"""
    data: str


class ErrorEventData(BaseModel):
    """data for event: error"""
    message: str


class DoneEventData(BaseModel):
    """data for event: done"""
    data: str = ""
