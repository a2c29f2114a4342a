"""
Filesystem note store: the create/read/write/exists boundary the pipeline
persists notes through.
"""

from __future__ import annotations

from pathlib import Path

from .errors import SynthesisError


def ensure_output_dir(subpath: str) -> Path:
    out_dir = Path.home() / "Documents" / subpath
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir


class NoteStore:
    def __init__(self, root: Path):
        self.root = root

    def path_for(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def unique_name(self, name: str) -> str:
        """`name`, or `name (2).md`, `name (3).md`… if it is taken."""
        if not self.exists(name):
            return name
        stem, suffix = Path(name).stem, Path(name).suffix
        n = 2
        while self.exists(f"{stem} ({n}){suffix}"):
            n += 1
        return f"{stem} ({n}){suffix}"

    def create(self, name: str, content: str) -> Path:
        path = self.path_for(name)
        if path.exists():
            raise SynthesisError(f"Note already exists: {path}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise SynthesisError(f"Could not create note {path}: {e}") from e
        return path

    def read(self, name: str) -> str:
        path = self.path_for(name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise SynthesisError(f"Note not found: {path}") from e
        except OSError as e:
            raise SynthesisError(f"Could not read note {path}: {e}") from e

    def write(self, name: str, content: str) -> Path:
        path = self.path_for(name)
        if not path.exists():
            raise SynthesisError(f"Note not found: {path}")
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise SynthesisError(f"Could not write note {path}: {e}") from e
        return path
