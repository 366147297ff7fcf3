"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from codehelp.config import settings, setup_logging
from codehelp.database import init_db
from codehelp.errors import (
    CodeHelpError,
    codehelp_error_handler,
    validation_error_handler,
)
from codehelp.routes import explain, health, presets

setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: init DB."""
    await init_db()
    yield


app = FastAPI(
    title="Code Helper",
    description="Preset code store and streaming error explanations",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "DELETE", "PUT"],
    allow_headers=["*"],
)

app.add_exception_handler(CodeHelpError, codehelp_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.include_router(health.router)
app.include_router(explain.router)
app.include_router(presets.router)
