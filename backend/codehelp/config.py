"""Application configuration via pydantic-settings.

Reads from environment variables and .env file.
"""

import logging
import sys

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream chat-completion API (OpenAI-compatible)
    api_key: str = ""
    upstream_base_url: str = "https://api.deepseek.com"
    upstream_model: str = "deepseek-chat"
    upstream_seed: int = 0
    upstream_timeout: float = 60.0

    # Streaming
    sse_ping_seconds: int = 15

    # Infrastructure
    database_url: str = "sqlite:///./database.db"
    log_level: str = "INFO"

    # Frontend
    cors_origins: list[str] = [
        "https://code.xuyue.cc",
        "http://code.xuyue.cc",
        "http://10.13.114.114",
        "http://localhost:3000",
    ]

    @property
    def upstream_configured(self) -> bool:
        return bool(self.api_key)


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Third-party clients log every request at INFO
    for name in ("httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


settings = Settings()
