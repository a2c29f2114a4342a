"""
Template catalog and placeholder substitution.

Templates ship as markdown files in the package's `templates/` directory;
the file stem is the template name.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Mapping

from .models import Template

TEMPLATES_DIR = Path(__file__).parent / "templates"

PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def load_catalog(directory: Path = TEMPLATES_DIR) -> Dict[str, Template]:
    catalog: Dict[str, Template] = {}
    for path in sorted(directory.glob("*.md")):
        if "readme" in path.name.lower():
            continue
        catalog[path.stem] = Template(name=path.stem, body=path.read_text(encoding="utf-8"))
    return catalog


def fill_placeholders(body: str, values: Mapping[str, str]) -> str:
    """
    Substitute `{{name}}` placeholders whose name is a key of `values`,
    matched exactly. Anything else, `{{Date}}` included, is left as written.
    """
    def _sub(m: re.Match) -> str:
        key = m.group(1)
        return values[key] if key in values else m.group(0)

    return PLACEHOLDER.sub(_sub, body)
