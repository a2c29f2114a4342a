"""
Configuration constants and settings for meetnote.

Constants hold the defaults; `Settings` carries the values a run actually
uses, optionally overlaid from a JSON settings file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

OPENAI_BASE_URL = "https://api.openai.com/v1"
TRANSCRIPTION_URL = f"{OPENAI_BASE_URL}/audio/transcriptions"
TRANSCRIPTION_MODEL = "whisper-1"
CHAT_MODEL = "gpt-4o-mini"
HTTP_TIMEOUT_S = 300

MAX_CHUNK_BYTES = 24 * 1024 * 1024   # stays under the 25 MiB upload limit
WARN_CHUNK_BYTES = 20 * 1024 * 1024
ASSUMED_BITRATE = 24_000             # bits/s, typical for voice webm/opus

DEFAULT_LANGUAGE = "en"
DEFAULT_PARAGRAPH_BREAK_S = 2.0
DEFAULT_TEMPLATE = "general"
DEFAULT_WHISPER_MODEL = "small"
DEFAULT_OUT_SUBPATH = "Meeting_Notes"

TRANSCRIPTION_PLACEHOLDER = "<!-- Transcription will be added after recording -->"

DEFAULT_ANALYSIS_PROMPT = """Analyze this meeting transcription and any provided notes to extract:

1. **Participants**: List all people mentioned or speaking in the meeting
2. **Agenda**: Main topics or purpose of the meeting (2-3 bullet points)
3. **Key Points**: 3-5 main topics or decisions discussed
4. **Action Items**: Specific tasks with owners if mentioned (format as "- [ ] Task description @owner")
5. **Next Steps**: Future actions or follow-ups discussed

Be concise and focus on actionable insights. If notes are provided, prioritize information from the notes over the transcription."""


class Settings(BaseSettings):
    """
    Values a run uses. Besides keyword arguments, fields can come from
    `MEETNOTE_*` environment variables; the key also from `OPENAI_API_KEY`.
    """

    model_config = SettingsConfigDict(env_prefix="MEETNOTE_", extra="ignore")

    api_key: str = Field(default="", validation_alias=AliasChoices("api_key", "openai_api_key"))
    transcription_url: str = TRANSCRIPTION_URL
    model: str = TRANSCRIPTION_MODEL
    language: str = DEFAULT_LANGUAGE
    prompt: str = ""
    paragraph_break_threshold: float = DEFAULT_PARAGRAPH_BREAK_S
    enable_ai_analysis: bool = False
    ai_model: str = CHAT_MODEL
    ai_prompt: str = DEFAULT_ANALYSIS_PROMPT
    use_meeting_template: bool = False
    selected_template: str = DEFAULT_TEMPLATE
    prompt_for_metadata: bool = True
    default_attendees: str = ""
    debug_mode: bool = False
    backend: Literal["api", "local"] = "api"
    whisper_model: str = DEFAULT_WHISPER_MODEL
    out_subpath: str = DEFAULT_OUT_SUBPATH

    @field_validator("api_key")
    @classmethod
    def _strip_key(cls, value: str) -> str:
        return value.strip()

    @property
    def chat_url(self) -> str:
        return chat_url_for(self.transcription_url)


def chat_url_for(transcription_url: str) -> str:
    if "/audio/transcriptions" in transcription_url:
        return transcription_url.replace("/audio/transcriptions", "/chat/completions")
    return f"{OPENAI_BASE_URL}/chat/completions"


def load_settings(path: Path | None = None) -> Settings:
    """
    Build Settings from defaults, the environment and a JSON settings file
    (if given and present). Values saved in the file win over the
    environment; an empty saved key falls back to OPENAI_API_KEY. Values are
    coerced to their field types, so "false" and "3" work as expected.
    """
    saved: dict = {}
    if path is not None and path.exists():
        try:
            saved = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not read settings file {path}: {e}") from e
        if not isinstance(saved, dict):
            raise ConfigurationError(f"Settings file {path} must hold a JSON object")

    if not str(saved.get("api_key") or "").strip():
        saved.pop("api_key", None)
    try:
        return Settings(**saved)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
