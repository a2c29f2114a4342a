"""
Transcript assembly: segments -> timestamped paragraphs -> markdown text.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence, Tuple

from .config import DEFAULT_PARAGRAPH_BREAK_S
from .models import AssembledTranscript, Chunk, Paragraph, PlainText, Segment, TranscriptionResult

CHUNK_SEPARATOR = "---\n\n"

_TERMINAL = re.compile(r"[.!?]$")


def format_time(seconds: float) -> str:
    total = int(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _group(
    tagged: Iterable[Tuple[int, Segment]],
    silence_threshold: float,
) -> List[Paragraph]:
    paragraphs: List[Paragraph] = []
    current: Paragraph | None = None
    last_end = 0.0

    for chunk_index, seg in tagged:
        text = seg.text.strip()
        if not text:
            continue
        if current is not None and (
            seg.start_seconds - last_end > silence_threshold
            or _TERMINAL.search(current.text)
        ):
            paragraphs.append(current)
            current = None
        if current is None:
            current = Paragraph(lead_timestamp=seg.start_seconds, text=text, chunk_index=chunk_index)
        else:
            current.text = f"{current.text} {text}"
        last_end = seg.end_seconds

    if current is not None:
        paragraphs.append(current)
    return paragraphs


def assemble(
    segments: Sequence[Segment],
    silence_threshold: float = DEFAULT_PARAGRAPH_BREAK_S,
) -> AssembledTranscript:
    """
    Group segments into paragraphs. A new paragraph starts after a silence
    longer than `silence_threshold` or once the running text ends a sentence.
    """
    return AssembledTranscript(
        paragraphs=_group(((0, s) for s in segments), silence_threshold),
        plain_text=" ".join(s.text.strip() for s in segments if s.text.strip()),
    )


def rebase(segments: Iterable[Segment], offset: float) -> List[Segment]:
    return [s.shifted(offset) for s in segments]


def assemble_chunks(
    results: Sequence[Tuple[Chunk, TranscriptionResult]],
    silence_threshold: float = DEFAULT_PARAGRAPH_BREAK_S,
) -> AssembledTranscript:
    """
    Assemble per-chunk results onto one timeline. Segments are shifted by
    their chunk's start offset; results are merged strictly by chunk index.
    A plain-text result becomes a single paragraph at its chunk's offset.
    """
    tagged: List[Tuple[int, Segment]] = []
    plain_parts: List[str] = []
    for chunk, result in sorted(results, key=lambda r: r[0].index):
        if isinstance(result, PlainText):
            segs = [Segment(chunk.start_time_offset, chunk.end_time_offset, result.text)]
        else:
            segs = rebase(result.segments, chunk.start_time_offset)
        tagged.extend((chunk.index, s) for s in segs)
        text = " ".join(s.text.strip() for s in segs if s.text.strip())
        if text:
            plain_parts.append(text)

    return AssembledTranscript(
        paragraphs=_group(tagged, silence_threshold),
        plain_text="\n\n".join(plain_parts),
    )


def render(transcript: AssembledTranscript) -> str:
    """Markdown body: `**[M:SS]** text` paragraphs, chunk boundaries marked."""
    if not transcript.paragraphs:
        return transcript.plain_text.strip()

    out: List[str] = []
    prev_chunk = transcript.paragraphs[0].chunk_index
    for p in transcript.paragraphs:
        if p.chunk_index != prev_chunk:
            out.append(CHUNK_SEPARATOR)
            prev_chunk = p.chunk_index
        out.append(f"**[{format_time(p.lead_timestamp)}]** {p.text}\n\n")
    return "".join(out).rstrip() + "\n"


_PASTED_TIMESTAMPS = [
    re.compile(r"\[(\d{1,2}:\d{2}(?::\d{2})?)\]"),
    re.compile(r"\((\d{1,2}:\d{2}(?::\d{2})?)\)"),
    re.compile(r"^(\d{1,2}:\d{2}(?::\d{2})?)\s*[-–—]", re.MULTILINE),
]


def format_pasted_transcription(text: str) -> str:
    """Bold any recognisable timestamps and give every line its own paragraph."""
    formatted = text
    for pattern in _PASTED_TIMESTAMPS:
        formatted = pattern.sub(r"**[\1]**", formatted)
    # lookarounds so consecutive single-line breaks all get doubled
    formatted = re.sub(r"(?<=[^\n])\n(?=[^\n])", "\n\n", formatted)
    return formatted.strip()
