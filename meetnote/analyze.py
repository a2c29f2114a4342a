"""
Meeting analysis: one chat completion over the transcript, parsed into
participants, agenda, key points, action items and next steps.

The reply is free text. Parsing looks for bolded section headers first and
falls back to keyword classification of every bullet when none of the
point/action/next-step sections yielded anything.
"""

from __future__ import annotations

import re
from typing import List

from . import openai_client
from .config import Settings
from .errors import AnalysisFailure
from .models import MeetingAnalysis
from .timing import notice, status

_SECTION_SPLIT = re.compile(
    r"\*\*\s*(Participants|Agenda|Key Points|Action Items|Next Steps)\s*:?\s*\*\*\s*:?",
    re.IGNORECASE,
)
_PLACEHOLDER_TOKENS = {"", "-", "•", "none", "n/a", "na", "unknown", "tbd"}
_LIST_NUMBER = re.compile(r"\d+[.)]?")


def _is_bullet(line: str) -> bool:
    s = line.strip()
    return s.startswith("-") or s.startswith("•")


def _bullets(text: str) -> List[str]:
    items = []
    for line in text.splitlines():
        if _is_bullet(line):
            item = line.strip()[1:].strip()
            if item.strip("-"):
                items.append(item)
    return items


def _dedupe_casefold(items: List[str]) -> List[str]:
    seen: set[str] = set()
    out: List[str] = []
    for item in items:
        key = item.casefold()
        if key not in seen:
            seen.add(key)
            out.append(item)
    return out


def parse_participants(section: str) -> List[str]:
    """
    Bulleted names are taken one per bullet; prose is split on commas and
    semicolons. Either way each bullet may itself hold a delimited list.
    """
    lines = _bullets(section) or [line.strip() for line in section.splitlines() if line.strip()]
    names: List[str] = []
    for line in lines:
        for token in re.split(r"[,;]", line):
            name = token.strip().strip("*").strip()
            if name.casefold() not in _PLACEHOLDER_TOKENS and not _LIST_NUMBER.fullmatch(name):
                names.append(name)
    return _dedupe_casefold(names)


def classify_bullet(bullet: str) -> str:
    lower = bullet.lower()
    if "action" in lower or "task" in lower or "[ ]" in lower:
        return "action_items"
    if "next" in lower or "follow" in lower:
        return "next_steps"
    return "key_points"


def parse_analysis(response: str) -> MeetingAnalysis:
    analysis = MeetingAnalysis(raw_response=response)

    parts = _SECTION_SPLIT.split(response)
    for i in range(1, len(parts), 2):
        title = parts[i].lower()
        content = parts[i + 1] if i + 1 < len(parts) else ""
        if not content.strip():
            continue
        if "participant" in title:
            analysis.participants = parse_participants(content)
        elif "agenda" in title:
            analysis.agenda = _bullets(content)
        elif "key point" in title:
            analysis.key_points = _bullets(content)
        elif "action item" in title:
            analysis.action_items = _bullets(content)
        elif "next step" in title:
            analysis.next_steps = _bullets(content)

    if not (analysis.key_points or analysis.action_items or analysis.next_steps):
        for bullet in _bullets(response):
            getattr(analysis, classify_bullet(bullet)).append(bullet)

    return analysis


def build_user_content(
    transcript_text: str,
    existing_notes: str = "",
    existing_participants: str = "",
    existing_agenda: str = "",
) -> str:
    prior: List[str] = []
    if existing_participants.strip():
        prior.append(f"Participants: {existing_participants.strip()}")
    if existing_agenda.strip():
        prior.append(f"Agenda:\n{existing_agenda.strip()}")
    if existing_notes.strip():
        prior.append(existing_notes.strip())
    if not prior:
        return transcript_text
    return "User Notes:\n" + "\n\n".join(prior) + f"\n\nTranscription:\n{transcript_text}"


def analyze_meeting(
    settings: Settings,
    transcript_text: str,
    *,
    existing_participants: str = "",
    existing_agenda: str = "",
    existing_notes: str = "",
) -> MeetingAnalysis | None:
    """
    Return the parsed analysis, or None when analysis is switched off, no key
    is configured, or the call fails. Failures are reported, never raised.
    """
    if not settings.enable_ai_analysis:
        return None
    if not settings.api_key:
        notice("API key is missing; skipping meeting analysis.")
        return None

    content = build_user_content(transcript_text, existing_notes, existing_participants, existing_agenda)
    try:
        status(f"Analyzing meeting with {settings.ai_model}")
        reply = openai_client.chat_completion(
            settings.api_key,
            [
                {"role": "system", "content": settings.ai_prompt},
                {"role": "user", "content": content},
            ],
            temperature=0.7,
            url=settings.chat_url,
            model=settings.ai_model,
            max_tokens=1000,
        )
    except AnalysisFailure as e:
        notice(f"Error analyzing meeting: {e}")
        return None

    return parse_analysis(reply)
