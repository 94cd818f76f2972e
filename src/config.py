"""Process configuration, read once from environment variables at startup."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_LINE_API_BASE = "https://api.line.me"

_REQUIRED = {
    "channel_secret": "LINE_CHANNEL_SECRET",
    "channel_access_token": "LINE_CHANNEL_ACCESS_TOKEN",
    "gemini_api_key": "GEMINI_API_KEY",
}


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel_secret: str = Field(min_length=1)
    channel_access_token: str = Field(min_length=1)
    gemini_api_key: str = Field(min_length=1)
    gemini_model: str = DEFAULT_GEMINI_MODEL
    webhook_path: str = "/"
    line_api_base: str = DEFAULT_LINE_API_BASE
    line_reply_timeout: float = Field(default=10.0, gt=0)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from the environment.

        A local ``.env`` file is loaded first unless running in production.
        Passing ``environ`` skips the ``.env`` lookup entirely.
        """
        if environ is None:
            if not _is_production(os.environ):
                load_dotenv()
            environ = os.environ

        missing = [var for var in _REQUIRED.values() if not environ.get(var)]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        webhook_path = environ.get("WEBHOOK_PATH", "/")
        if not webhook_path.startswith("/"):
            webhook_path = f"/{webhook_path}"

        try:
            timeout = float(environ.get("LINE_REPLY_TIMEOUT", "10"))
        except ValueError as exc:
            raise ConfigError(f"LINE_REPLY_TIMEOUT must be a number: {exc}") from exc

        try:
            return cls(
                **{field: environ[var] for field, var in _REQUIRED.items()},
                gemini_model=environ.get("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
                webhook_path=webhook_path,
                line_api_base=environ.get("LINE_API_BASE", DEFAULT_LINE_API_BASE),
                line_reply_timeout=timeout,
                log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            )
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def _is_production(environ: Mapping[str, str]) -> bool:
    env = environ.get("APP_ENV") or environ.get("NODE_ENV") or ""
    return env.lower() == "production"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
