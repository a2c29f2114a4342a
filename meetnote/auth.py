"""
Authentication helpers.
"""

from __future__ import annotations

from .config import Settings
from .errors import ConfigurationError


def require_api_key(settings: Settings) -> str:
    key = (settings.api_key or "").strip()
    if not key:
        raise ConfigurationError(
            "API key is missing. Set OPENAI_API_KEY or add api_key to your settings file."
        )
    return key
