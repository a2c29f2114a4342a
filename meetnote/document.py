"""
Markdown note as a sequence of header/body sections.

The note is parsed once into sections, edited in memory and rendered back.
Rendering an unedited document reproduces the input exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

_HEADER = re.compile(r"^(#{1,6})[ \t]+(.*?)[ \t]*#*[ \t]*$")
_FENCE = re.compile(r"^\s*(```|~~~)")


@dataclass
class Section:
    header: Optional[str]  # None for text before the first header
    body: str = ""

    @property
    def title(self) -> str:
        if self.header is None:
            return ""
        m = _HEADER.match(self.header.rstrip("\n"))
        return m.group(2).strip() if m else ""

    @property
    def level(self) -> int:
        if self.header is None:
            return 0
        m = _HEADER.match(self.header.rstrip("\n"))
        return len(m.group(1)) if m else 0


@dataclass
class NoteDocument:
    sections: List[Section] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "NoteDocument":
        sections = [Section(header=None)]
        in_fence = False
        for line in text.splitlines(keepends=True):
            if _FENCE.match(line):
                in_fence = not in_fence
            elif not in_fence and _HEADER.match(line.rstrip("\r\n")):
                sections.append(Section(header=line))
                continue
            sections[-1].body += line
        return cls(sections)

    def render(self) -> str:
        return "".join((s.header or "") + s.body for s in self.sections)

    def __iter__(self) -> Iterator[Section]:
        return iter(self.sections)

    def find(self, title: str) -> Optional[Section]:
        wanted = title.strip().casefold()
        for s in self.sections:
            if s.header is not None and s.title.casefold() == wanted:
                return s
        return None

    def body_of(self, title: str) -> str:
        s = self.find(title)
        return s.body.strip() if s else ""

    def set_body(self, section: Section, text: str) -> None:
        if section.header is not None and not section.header.endswith("\n"):
            section.header += "\n"
        is_last = section is self.sections[-1]
        text = text.strip("\n")
        if not text:
            section.body = "\n" if not is_last else ""
            return
        section.body = text + ("\n" if is_last else "\n\n")

    def remove(self, section: Section) -> None:
        self.sections = [s for s in self.sections if s is not section]

    def replace_text(self, old: str, new: str) -> bool:
        """Replace `old` in section bodies; returns whether anything changed."""
        changed = False
        for s in self.sections:
            if old in s.body:
                s.body = s.body.replace(old, new)
                changed = True
        return changed
