"""
Document synthesis: transcript + analysis + metadata -> markdown note.

Three modes:
- an existing note is updated in place (the recording-in-progress flow),
- a template is filled in,
- or, with no template, a minimal fixed layout is produced.

Analysis sections are merged without discarding what the user already typed.
"""

from __future__ import annotations

import datetime as dt
import re
from typing import Dict, List, Optional

from .config import TRANSCRIPTION_PLACEHOLDER
from .document import NoteDocument
from .models import MeetingAnalysis, MeetingMetadata, Template
from .templates import fill_placeholders

_PLACEHOLDER_BULLET = re.compile(r"^\s*[-*]\s*(\[[ xX]?\]\s*)?$")
_BULLET_PREFIX = re.compile(r"^\s*[-*•]\s*")
_CHECKBOX = re.compile(r"^\[[ xX]\]")


def format_timestamps(now: dt.datetime) -> Dict[str, str]:
    date = now.strftime("%Y-%m-%d")
    time = now.strftime("%H:%M")
    return {"date": date, "time": time, "datetime": f"{date} {time}"}


def normalize_action_item(item: str) -> str:
    text = _BULLET_PREFIX.sub("", item.strip())
    if _CHECKBOX.match(text):
        return f"- {text}"
    return f"- [ ] {text}"


def _item_key(line: str) -> str:
    text = _BULLET_PREFIX.sub("", line.strip())
    text = re.sub(r"^\[[ xX]\]\s*", "", text)
    return text.strip().casefold()


def _split_names(text: str) -> List[str]:
    names: List[str] = []
    for line in text.splitlines():
        line = _BULLET_PREFIX.sub("", line)
        names.extend(p.strip() for p in re.split(r"[,;]", line) if p.strip() and p.strip() != "-")
    return names


def merge_participants(existing: str, found: List[str]) -> Optional[List[str]]:
    """
    Append participants not already listed (case-insensitive). Returns None
    when there is nothing to change.
    """
    existing_list = _split_names(existing)
    seen = {p.casefold() for p in existing_list}
    new: List[str] = []
    for p in found:
        if p.casefold() not in seen:
            seen.add(p.casefold())
            new.append(p)
    if not new and existing_list:
        return None
    return existing_list + new


def merge_agenda(existing: str, found: List[str]) -> Optional[List[str]]:
    existing_items = []
    for line in existing.splitlines():
        item = re.sub(r"^[-*]\s*", "", line.strip()).strip()
        if item and item != "-":
            existing_items.append(item)
    seen = {i.casefold() for i in existing_items}
    new: List[str] = []
    for item in found:
        if item.casefold() not in seen:
            seen.add(item.casefold())
            new.append(item)
    if not new and existing_items:
        return None
    return existing_items + new


def fill_list_section(body: str, lines: List[str]) -> str:
    """
    Put bullet `lines` into a section body. The first empty placeholder
    bullet is replaced; lines already present are not added again; other
    user content stays where it is.
    """
    present = {_item_key(line) for line in body.splitlines() if line.strip() and not _PLACEHOLDER_BULLET.match(line)}
    to_add = [line for line in lines if _item_key(line) not in present]

    body_lines = body.strip("\n").splitlines()
    for i, line in enumerate(body_lines):
        if _PLACEHOLDER_BULLET.match(line):
            body_lines[i:i + 1] = to_add
            return "\n".join(body_lines)

    content = [line for line in body_lines if line.strip()]
    if not content:
        return "\n".join(to_add)
    last = max(i for i, line in enumerate(body_lines) if line.strip())
    body_lines[last + 1:last + 1] = to_add
    return "\n".join(body_lines)


def merge_analysis(doc: NoteDocument, analysis: MeetingAnalysis) -> None:
    """Merge analysis results into the anchor sections that exist in `doc`."""
    participants = doc.find("Participants")
    if participants is not None and analysis.participants:
        merged = merge_participants(participants.body, analysis.participants)
        if merged is not None:
            doc.set_body(participants, ", ".join(merged))

    agenda = doc.find("Agenda")
    if agenda is not None and analysis.agenda:
        merged = merge_agenda(agenda.body, analysis.agenda)
        if merged is not None:
            doc.set_body(agenda, "\n".join(f"- {item}" for item in merged))

    for title, items, fmt in (
        ("Key Points", analysis.key_points, lambda s: f"- {s}"),
        ("Action Items", analysis.action_items, normalize_action_item),
        ("Next Steps", analysis.next_steps, lambda s: f"- {s}"),
    ):
        section = doc.find(title)
        if section is not None and items:
            doc.set_body(section, fill_list_section(section.body, [fmt(i) for i in items]))


def analysis_markdown(analysis: MeetingAnalysis) -> str:
    parts: List[str] = []
    if analysis.participants:
        parts.append("### Participants\n" + ", ".join(analysis.participants))
    if analysis.agenda:
        parts.append("### Agenda\n" + "\n".join(f"- {a}" for a in analysis.agenda))
    if analysis.key_points:
        parts.append("### Key Points\n" + "\n".join(f"- {k}" for k in analysis.key_points))
    if analysis.action_items:
        parts.append("### Action Items\n" + "\n".join(normalize_action_item(a) for a in analysis.action_items))
    if analysis.next_steps:
        parts.append("### Next Steps\n" + "\n".join(f"- {n}" for n in analysis.next_steps))
    return "\n\n".join(parts)


def _attendees(metadata: Optional[MeetingMetadata], analysis: Optional[MeetingAnalysis]) -> str:
    if metadata and metadata.attendees.strip():
        return metadata.attendees.strip()
    if analysis and analysis.participants:
        return ", ".join(analysis.participants)
    return ""


def _agenda(metadata: Optional[MeetingMetadata], analysis: Optional[MeetingAnalysis]) -> str:
    if metadata and metadata.agenda.strip():
        return metadata.agenda.strip()
    if analysis and analysis.agenda:
        return "\n".join(f"- {a}" for a in analysis.agenda)
    return ""


def _drop_transcription(doc: NoteDocument) -> None:
    for section in list(doc):
        if "{{transcription}}" not in section.body:
            continue
        if section.title.casefold() == "transcription":
            doc.remove(section)
        else:
            section.body = section.body.replace("{{transcription}}", "")


def render_template(
    template: Template,
    *,
    transcription: Optional[str],
    metadata: Optional[MeetingMetadata] = None,
    analysis: Optional[MeetingAnalysis] = None,
    now: Optional[dt.datetime] = None,
) -> str:
    """
    Fill a template. `transcription=None` means there is no transcript to
    show (pasted source): the placeholder is removed along with a
    Transcription section that holds it.
    """
    body = template.body
    if transcription is None:
        doc = NoteDocument.parse(body)
        _drop_transcription(doc)
        body = doc.render()

    values = format_timestamps(now or dt.datetime.now())
    values.update({
        "attendees": _attendees(metadata, analysis),
        "agenda": _agenda(metadata, analysis),
        "notes": "",
        "audio": "",
    })
    if transcription is not None:
        values["transcription"] = transcription
    return fill_placeholders(body, values)


def _fallback_layout(
    transcription: str,
    *,
    pasted: bool,
    metadata: Optional[MeetingMetadata],
    analysis: Optional[MeetingAnalysis],
    audio_link: Optional[str],
    now: dt.datetime,
) -> str:
    if not pasted:
        parts = []
        if audio_link:
            parts.append(f"![[{audio_link}]]")
        parts.append(transcription.strip())
        if analysis is not None:
            parts.append(analysis_markdown(analysis))
        return "\n\n".join(p for p in parts if p) + "\n"

    ts = format_timestamps(now)
    header = [
        "# Meeting Notes",
        "",
        f"**Date:** {ts['date']}",
        f"**Time:** {ts['time']}",
    ]
    attendees = _attendees(metadata, None)
    if attendees:
        header.append(f"**Attendees:** {attendees}")
    agenda = _agenda(metadata, None)
    if agenda:
        header.append(f"**Agenda:** {agenda}")

    parts = ["\n".join(header)]
    if analysis is not None:
        parts.append(analysis_markdown(analysis))
    return "\n\n".join(p for p in parts if p) + "\n"


def synthesize(
    transcription: str,
    analysis: Optional[MeetingAnalysis] = None,
    metadata: Optional[MeetingMetadata] = None,
    template: Optional[Template] = None,
    existing_document: Optional[str] = None,
    *,
    pasted: bool = False,
    audio_link: Optional[str] = None,
    now: Optional[dt.datetime] = None,
) -> str:
    """
    Build the note body. A pasted transcript is summarised, never reproduced:
    its text does not appear in the result.
    """
    now = now or dt.datetime.now()
    text_for_note: Optional[str] = None if pasted else transcription

    if existing_document is not None:
        doc = NoteDocument.parse(existing_document)
        if text_for_note is None:
            doc.replace_text(TRANSCRIPTION_PLACEHOLDER, "")
            _drop_transcription(doc)
        else:
            doc.replace_text("{{transcription}}", text_for_note)
            doc.replace_text(TRANSCRIPTION_PLACEHOLDER, text_for_note)
    elif template is not None:
        doc = NoteDocument.parse(render_template(
            template, transcription=text_for_note, metadata=metadata, analysis=analysis, now=now
        ))
    else:
        return _fallback_layout(
            transcription, pasted=pasted, metadata=metadata, analysis=analysis,
            audio_link=audio_link, now=now,
        )

    if analysis is not None:
        merge_analysis(doc, analysis)
    return doc.render()
