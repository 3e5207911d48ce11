"""Environment-driven settings.

Every knob is read from a ``TEAMDRAW_*`` environment variable so the same
values apply to the CLI, the terminal UI and the web app.  Malformed numeric
values fall back to their defaults instead of failing at import time.

Usage::

    from teamdraw.config import Settings

    settings = Settings.from_env()
    if settings.gemini_api_key:
        ...
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Final

logger = logging.getLogger(__name__)

DEFAULT_THEME: Final = "Animals representing teamwork"
DEFAULT_MODEL: Final = "gemini-3-flash-preview"
DEFAULT_ENDPOINT: Final = "https://generativelanguage.googleapis.com/v1beta"

_KEY_VARS: Final = ("TEAMDRAW_GEMINI_API_KEY", "GEMINI_API_KEY", "API_KEY")


def _float(env: Mapping[str, str], name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", name, raw, default)
        return default
    if value != value or value < minimum:  # NaN or below range
        logger.warning("Ignoring out-of-range %s=%r; using %s", name, raw, default)
        return default
    return value


def _text(env: Mapping[str, str], name: str, default: str) -> str:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_MODEL
    gemini_endpoint: str = DEFAULT_ENDPOINT
    http_timeout: float = 20.0
    reveal_seconds: float = 3.0
    default_theme: str = DEFAULT_THEME

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        source = os.environ if env is None else env
        api_key = next((source[name].strip() for name in _KEY_VARS if source.get(name, "").strip()), None)
        return cls(
            gemini_api_key=api_key,
            gemini_model=_text(source, "TEAMDRAW_GEMINI_MODEL", DEFAULT_MODEL),
            gemini_endpoint=_text(source, "TEAMDRAW_GEMINI_ENDPOINT", DEFAULT_ENDPOINT).rstrip("/"),
            http_timeout=_float(source, "TEAMDRAW_HTTP_TIMEOUT", 20.0, minimum=0.1),
            reveal_seconds=_float(source, "TEAMDRAW_REVEAL_SECONDS", 3.0),
            default_theme=_text(source, "TEAMDRAW_DEFAULT_THEME", DEFAULT_THEME),
        )


__all__ = ["DEFAULT_ENDPOINT", "DEFAULT_MODEL", "DEFAULT_THEME", "Settings"]
