"""
Orchestration: clip -> chunks -> transcripts -> analysis -> note.

Chunks are transcribed one at a time, in index order. A failed chunk is
reported and skipped; the run fails only when every chunk fails. Analysis is
optional and never stops a run. Notes are read and written through a
`NoteStore`; a read-modify-write on one note assumes nobody else edits it
meanwhile.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from . import chunking
from .analyze import analyze_meeting
from .assemble import assemble, assemble_chunks, format_pasted_transcription, render
from .auth import require_api_key
from .config import TRANSCRIPTION_PLACEHOLDER, Settings
from .document import NoteDocument
from .errors import ConfigurationError, SynthesisError, TranscriptionFailure
from .io import NoteStore
from .models import (
    AssembledTranscript,
    AudioClip,
    Chunk,
    MeetingMetadata,
    PlainText,
    Template,
    TranscriptionResult,
)
from .synthesize import format_timestamps, render_template, synthesize
from .timing import notice, status, step
from .transcribe import transcribe, transcribe_local
from .utils import meeting_note_name, safe_filename


class NoteWriteError(SynthesisError):
    """The note body was produced but could not be saved; `content` holds it."""

    def __init__(self, message: str, content: str):
        super().__init__(message)
        self.content = content


def resolve_template(
    settings: Settings,
    catalog: Mapping[str, Template],
    metadata: Optional[MeetingMetadata] = None,
) -> Optional[Template]:
    if not settings.use_meeting_template:
        return None
    name = (metadata.meeting_type if metadata and metadata.meeting_type else settings.selected_template)
    template = catalog.get(name)
    if template is None:
        raise ConfigurationError(
            f"Meeting template '{name}' not found. Available: {', '.join(sorted(catalog)) or 'none'}"
        )
    return template


def _result_to_transcript(result: TranscriptionResult, threshold: float) -> AssembledTranscript:
    if isinstance(result, PlainText):
        return AssembledTranscript(plain_text=result.text)
    return assemble(result.segments, threshold)


def transcribe_chunks(api_key: str, clip: AudioClip, settings: Settings) -> AssembledTranscript:
    chunks = chunking.plan(clip)
    notice(
        f"Audio ({chunking.size_in_mb(clip):.1f} MB, ~{chunking.format_duration(chunking.estimate_duration(clip))}) "
        f"split into {len(chunks)} chunks for processing"
    )

    results: List[Tuple[Chunk, TranscriptionResult]] = []
    failed: List[int] = []
    for chunk in chunks:
        with step(f"Transcribing chunk {chunk.index + 1}/{len(chunks)}"):
            try:
                results.append((chunk, transcribe(
                    api_key, chunk, settings, mime_type=clip.mime_type, extension=clip.extension
                )))
            except TranscriptionFailure as e:
                failed.append(chunk.index)
                notice(f"Chunk {chunk.index + 1}/{len(chunks)} failed and was skipped: {e}")

    if not results:
        raise TranscriptionFailure(f"All {len(chunks)} chunks failed to transcribe.")
    if failed:
        notice(f"{len(failed)} of {len(chunks)} chunks could not be transcribed; the transcript is partial.")
    return assemble_chunks(results, settings.paragraph_break_threshold)


def transcribe_clip(clip: AudioClip, settings: Settings, api_key: str = "") -> AssembledTranscript:
    """
    Transcribe a whole clip, chunking it first when it is over the upload
    limit. Failure of a single (unchunked) upload propagates.
    """
    if settings.backend == "local":
        with step("Transcribing audio locally with faster-whisper"):
            result = transcribe_local(clip, settings, whisper_model=settings.whisper_model)
        return _result_to_transcript(result, settings.paragraph_break_threshold)

    if chunking.needs_chunking(clip):
        return transcribe_chunks(api_key, clip, settings)

    if chunking.is_approaching_limit(clip):
        status(f"Audio is {chunking.size_in_mb(clip):.1f} MB, close to the upload limit")
    with step("Transcribing audio"):
        result = transcribe(api_key, clip, settings)
    return _result_to_transcript(result, settings.paragraph_break_threshold)


def _save(store: NoteStore, name: str, content: str, *, existing: bool) -> Path:
    try:
        if existing:
            return store.write(name, content)
        return store.create(name, content)
    except SynthesisError as e:
        raise NoteWriteError(f"The note could not be saved: {e}", content) from e


def start_meeting_note(
    store: NoteStore,
    settings: Settings,
    catalog: Mapping[str, Template],
    metadata: Optional[MeetingMetadata] = None,
    *,
    now: Optional[dt.datetime] = None,
) -> str:
    """
    Create the note a recording will later fill in. The transcript goes
    where the transcription marker is left.
    """
    now = now or dt.datetime.now()
    template = resolve_template(settings, catalog, metadata)
    if template is not None:
        content = render_template(template, transcription=TRANSCRIPTION_PLACEHOLDER, metadata=metadata, now=now)
    else:
        content = f"## Notes\n\n\n## Transcription\n{TRANSCRIPTION_PLACEHOLDER}\n"
    name = store.unique_name(meeting_note_name(now))
    store.create(name, content)
    return name


def create_meeting_note_only(
    store: NoteStore,
    settings: Settings,
    catalog: Mapping[str, Template],
    metadata: Optional[MeetingMetadata] = None,
    *,
    now: Optional[dt.datetime] = None,
) -> str:
    now = now or dt.datetime.now()
    template = resolve_template(settings, catalog, metadata)
    if template is not None:
        content = render_template(template, transcription="", metadata=metadata, now=now)
    else:
        content = f"# Meeting Notes\n\n## Date: {format_timestamps(now)['date']}\n\n## Notes\n\n"
    name = store.unique_name(meeting_note_name(now))
    store.create(name, content)
    return name


def process_recording(
    clip: AudioClip,
    settings: Settings,
    store: NoteStore,
    catalog: Mapping[str, Template],
    *,
    metadata: Optional[MeetingMetadata] = None,
    existing_note: Optional[str] = None,
    source_name: Optional[str] = None,
    now: Optional[dt.datetime] = None,
) -> str:
    """
    Transcribe `clip` and write the note. Updates `existing_note` when given,
    otherwise creates a new note. Returns the note name.
    """
    now = now or dt.datetime.now()

    # configuration problems surface before any upload
    api_key = require_api_key(settings) if settings.backend != "local" else settings.api_key
    template = None if existing_note else resolve_template(settings, catalog, metadata)
    existing = store.read(existing_note) if existing_note else None

    if clip.length == 0:
        raise TranscriptionFailure("The recording is empty.")

    transcript = transcribe_clip(clip, settings, api_key)
    if transcript.is_empty():
        raise TranscriptionFailure("No transcript returned.")
    rendered = render(transcript)

    doc = NoteDocument.parse(existing) if existing is not None else None
    with step("Analyzing meeting"):
        analysis = analyze_meeting(
            settings,
            transcript.plain_text or rendered,
            existing_participants=doc.body_of("Participants") if doc else "",
            existing_agenda=doc.body_of("Agenda") if doc else "",
            existing_notes=doc.body_of("Notes") if doc else "",
        )

    content = synthesize(rendered, analysis, metadata, template, existing, now=now)

    if existing_note:
        _save(store, existing_note, content, existing=True)
        return existing_note

    if source_name:
        name = store.unique_name(f"{safe_filename(Path(source_name).stem)}.md")
    else:
        name = store.unique_name(meeting_note_name(now))
    _save(store, name, content, existing=False)
    return name


def process_pasted(
    text: str,
    settings: Settings,
    store: NoteStore,
    catalog: Mapping[str, Template],
    *,
    metadata: Optional[MeetingMetadata] = None,
    now: Optional[dt.datetime] = None,
) -> str:
    """
    Build a note from a transcript produced elsewhere. Only the analysis and
    metadata end up in the note, not the pasted text itself.
    """
    now = now or dt.datetime.now()
    if not text.strip():
        raise ConfigurationError("Please paste a transcription.")
    template = resolve_template(settings, catalog, metadata)

    formatted = format_pasted_transcription(text)
    analysis = analyze_meeting(settings, formatted)
    if analysis is None:
        notice("No meeting analysis available; the note holds metadata only.")

    content = synthesize(formatted, analysis, metadata, template, pasted=True, now=now)
    name = store.unique_name(meeting_note_name(now))
    _save(store, name, content, existing=False)
    return name
