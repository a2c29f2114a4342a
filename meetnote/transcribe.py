"""
Transcription of clips and chunks.

The remote service answers with either time-coded segments or plain text;
that shape is resolved once here into a `Segmented` or `PlainText` result.
A local faster-whisper backend is available for machines that have it
installed; it always yields segments.
"""

from __future__ import annotations

import tempfile
import time
from pathlib import Path
from typing import List

from . import openai_client
from .config import DEFAULT_WHISPER_MODEL, Settings
from .errors import TranscriptionFailure
from .models import AudioClip, Chunk, PlainText, extension_for, Segment, Segmented, TranscriptionResult
from .timing import status

_FASTER_WHISPER_CACHE: dict[tuple[str, str, str], object] = {}


def parse_transcription_response(body: object) -> TranscriptionResult:
    if isinstance(body, str):
        return PlainText(body.strip())
    if not isinstance(body, dict):
        raise TranscriptionFailure(f"Unexpected transcription response: {type(body).__name__}")

    raw_segments = body.get("segments")
    if isinstance(raw_segments, list):
        segments: List[Segment] = []
        for s in raw_segments:
            try:
                start = float(s["start"])
                end = float(s["end"])
            except (KeyError, TypeError, ValueError) as e:
                raise TranscriptionFailure(f"Malformed segment in response: {s!r}", cause=e) from e
            segments.append(Segment(start, max(start, end), str(s.get("text") or "")))
        return Segmented(segments)

    text = body.get("text")
    if isinstance(text, str):
        return PlainText(text.strip())
    raise TranscriptionFailure("Transcription response had neither segments nor text")


def transcribe(
    api_key: str,
    audio: AudioClip | Chunk,
    settings: Settings,
    *,
    mime_type: str = "audio/webm",
    filename: str | None = None,
    extension: str | None = None,
) -> TranscriptionResult:
    """
    Send one clip or chunk to the configured speech-to-text endpoint.
    Chunks are named after their index; `extension` should be the source
    clip's, since the service checks the file name.
    Raises TranscriptionFailure on network or service errors.
    """
    if isinstance(audio, Chunk):
        payload = audio.payload
        ext = extension or extension_for(mime_type)
        name = filename or f"chunk_{audio.index:03d}.{ext}"
    else:
        payload = audio.data
        mime_type = audio.mime_type
        name = filename or f"recording.{audio.extension}"

    status(f"Uploading {name} ({len(payload) / 1024:.0f} KB) for transcription")
    body = openai_client.audio_transcription(
        api_key,
        payload,
        name,
        url=settings.transcription_url,
        model=settings.model,
        language=settings.language,
        prompt=settings.prompt,
        mime_type=mime_type,
    )
    return parse_transcription_response(body)


def _pick_faster_whisper_device() -> str:
    try:
        import torch
    except ImportError:
        return "cpu"
    return "cuda" if torch.cuda.is_available() else "cpu"


def load_faster_whisper_model(model_name: str, device: str | None = None, compute_type: str = "int8"):
    """
    Load and cache faster-whisper WhisperModel.
    """
    try:
        from faster_whisper import WhisperModel
    except ImportError as e:
        raise TranscriptionFailure(
            "The local backend needs faster-whisper (pip install 'meetnote[local]').", cause=e
        ) from e

    dev = device or _pick_faster_whisper_device()
    key = (model_name, dev, compute_type)
    if key in _FASTER_WHISPER_CACHE:
        return _FASTER_WHISPER_CACHE[key]

    status(f"Loading faster-whisper model '{model_name}' on {dev} (compute_type={compute_type})…")
    t0 = time.perf_counter()
    m = WhisperModel(model_name, device=dev, compute_type=compute_type)
    status(f"faster-whisper model ready ({time.perf_counter() - t0:.1f}s).")
    _FASTER_WHISPER_CACHE[key] = m
    return m


def transcribe_file_fw(model, audio_path: Path, *, language: str = "en", prompt: str = "") -> Segmented:
    segments, _info = model.transcribe(
        str(audio_path),
        language=language,
        task="transcribe",
        initial_prompt=prompt or None,
        beam_size=1,
        best_of=1,
        temperature=0.0,
        vad_filter=True,
    )
    out: List[Segment] = []
    for seg in segments:
        t = (seg.text or "").strip()
        if t:
            out.append(Segment(float(seg.start), float(seg.end), t))
    return Segmented(out)


def transcribe_local(
    clip: AudioClip,
    settings: Settings,
    *,
    whisper_model: str = DEFAULT_WHISPER_MODEL,
    device: str | None = None,
    compute_type: str = "int8",
) -> Segmented:
    """
    Local faster-whisper transcription of a whole clip. The model decodes the
    container itself, so the clip is written to a temporary file untouched.
    """
    model = load_faster_whisper_model(whisper_model, device=device, compute_type=compute_type)
    with tempfile.TemporaryDirectory(prefix="meetnote_") as tmp:
        audio_path = Path(tmp) / f"recording.{clip.extension}"
        audio_path.write_bytes(clip.data)
        try:
            return transcribe_file_fw(model, audio_path, language=settings.language, prompt=settings.prompt)
        except (RuntimeError, ValueError, OSError) as e:
            raise TranscriptionFailure(f"Local transcription failed: {e}", cause=e) from e
