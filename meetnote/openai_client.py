"""
Thin requests wrappers around OpenAI-style HTTP endpoints.

Contains:
- audio_transcription: multipart upload to a speech-to-text endpoint
- chat_completion: chat completions call used by the meeting analyzer

Neither function retries; callers decide what a failure means.
"""

from __future__ import annotations

import json

import requests

from .config import CHAT_MODEL, HTTP_TIMEOUT_S, TRANSCRIPTION_MODEL, TRANSCRIPTION_URL
from .errors import AnalysisFailure, TranscriptionFailure


def audio_transcription(
    api_key: str,
    audio: bytes,
    filename: str,
    *,
    url: str = TRANSCRIPTION_URL,
    model: str = TRANSCRIPTION_MODEL,
    language: str = "en",
    prompt: str = "",
    mime_type: str = "application/octet-stream",
) -> dict | str:
    """
    Upload one audio payload and return the decoded JSON body (or raw text
    when the service does not answer with JSON).
    """
    headers = {"Authorization": f"Bearer {api_key}"}
    data = {
        "model": model,
        "language": language,
        "response_format": "verbose_json",
        "timestamp_granularities": "segment",
    }
    if prompt:
        data["prompt"] = prompt

    try:
        r = requests.post(
            url,
            headers=headers,
            data=data,
            files={"file": (filename, audio, mime_type)},
            timeout=HTTP_TIMEOUT_S,
        )
    except requests.RequestException as e:
        raise TranscriptionFailure(f"Transcription request failed: {e}", cause=e) from e

    if not 200 <= r.status_code < 300:
        raise TranscriptionFailure(f"Transcription failed ({r.status_code}): {r.text}")

    try:
        return r.json()
    except ValueError:
        return r.text


def chat_completion(
    api_key: str,
    messages: list[dict],
    temperature: float,
    *,
    url: str,
    model: str = CHAT_MODEL,
    max_tokens: int | None = None,
) -> str:
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    payload: dict = {"model": model, "messages": messages, "temperature": temperature}
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens

    try:
        r = requests.post(url, headers=headers, data=json.dumps(payload), timeout=HTTP_TIMEOUT_S)
    except requests.RequestException as e:
        raise AnalysisFailure(f"Chat completion request failed: {e}", cause=e) from e

    if not 200 <= r.status_code < 300:
        raise AnalysisFailure(f"Chat completion failed ({r.status_code}): {r.text}")

    try:
        data = r.json()
        return (data["choices"][0]["message"]["content"] or "").strip()
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise AnalysisFailure(f"Unexpected chat completion response: {r.text[:500]}", cause=e) from e
