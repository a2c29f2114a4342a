"""
meetnote package

Turns meeting audio (or a pasted transcript) into a structured markdown note.
Use `python -m meetnote.cli` or import `meetnote.cli.main` as the CLI
entrypoint.
"""

__all__ = ["cli", "pipeline"]
__version__ = "0.1.0"
