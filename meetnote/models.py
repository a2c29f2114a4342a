"""
Data types passed between pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union


_MIME_EXTENSIONS = {"x-wav": "wav", "wave": "wav", "mpeg": "mp3", "x-m4a": "m4a", "mp4": "m4a"}


def extension_for(mime_type: str, suffix: str = "") -> str:
    """Upload file extension: the source file's suffix, else the MIME subtype."""
    if suffix.strip("."):
        return suffix.lstrip(".").lower()
    subtype = mime_type.split("/")[-1].split(";")[0].strip().lower()
    return _MIME_EXTENSIONS.get(subtype, subtype) or "webm"


@dataclass(frozen=True)
class AudioClip:
    data: bytes
    mime_type: str = "audio/webm"
    suffix: str = ""  # e.g. ".wav", from the file the clip was read from

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return extension_for(self.mime_type, self.suffix)


@dataclass(frozen=True)
class Chunk:
    payload: bytes
    index: int
    start_time_offset: float
    end_time_offset: float


@dataclass(frozen=True)
class Segment:
    start_seconds: float
    end_seconds: float
    text: str

    def shifted(self, offset: float) -> "Segment":
        return Segment(self.start_seconds + offset, self.end_seconds + offset, self.text)


@dataclass(frozen=True)
class Segmented:
    segments: List[Segment]


@dataclass(frozen=True)
class PlainText:
    text: str


TranscriptionResult = Union[Segmented, PlainText]


@dataclass
class Paragraph:
    lead_timestamp: float
    text: str
    chunk_index: int = 0


@dataclass
class AssembledTranscript:
    paragraphs: List[Paragraph] = field(default_factory=list)
    plain_text: str = ""

    def is_empty(self) -> bool:
        return not self.paragraphs and not self.plain_text.strip()


@dataclass
class MeetingAnalysis:
    participants: List[str] = field(default_factory=list)
    agenda: List[str] = field(default_factory=list)
    key_points: List[str] = field(default_factory=list)
    action_items: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    raw_response: str = ""


@dataclass
class MeetingMetadata:
    attendees: str = ""
    agenda: str = ""
    meeting_type: str = ""


@dataclass(frozen=True)
class Template:
    name: str
    body: str
