"""
CLI entrypoint for meetnote.

Run as: python -m meetnote.cli (or the `meetnote` console script).
"""
from __future__ import annotations

import argparse
import mimetypes
import sys
import time
from pathlib import Path

from . import __version__ as VERSION
from . import config
from . import pipeline
from . import timing
from . import utils
from . import io as io_mod
from .errors import ConfigurationError, MeetnoteError
from .models import AudioClip, MeetingMetadata
from .templates import load_catalog

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "meetnote" / "settings.json"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="meetnote", description="Turn meeting audio into structured notes.")
    g = p.add_mutually_exclusive_group()
    g.add_argument("--audio", type=str, help="Path to audio file to transcribe")
    g.add_argument("--paste", type=str, help="Path to a transcript made elsewhere ('-' reads stdin)")
    g.add_argument("--start", action="store_true",
                   help="Create a meeting note to be filled in by a later --audio ... --update run")
    g.add_argument("--new-note", action="store_true", help="Create an empty meeting note and exit")
    g.add_argument("--list-templates", action="store_true", help="List meeting templates and exit")

    p.add_argument("--update", type=str, default=None,
                   help="Existing note (name inside the output folder) to fill with the transcript")
    p.add_argument("--settings", type=str, default=str(DEFAULT_SETTINGS_PATH), help="JSON settings file")
    p.add_argument("--out-subpath", type=str, default=None, help="Output subpath under ~/Documents")

    p.add_argument("--attendees", type=str, default=None, help="Meeting attendees")
    p.add_argument("--agenda", type=str, default=None, help="Meeting agenda")
    p.add_argument("--template", type=str, default=None, help="Meeting template name (implies templates on)")

    p.add_argument("--analyze", dest="analyze", action="store_true", default=None,
                   help="Extract participants, key points and action items with a chat model")
    p.add_argument("--no-analyze", dest="analyze", action="store_false")
    p.add_argument("--language", type=str, default=None, help="Transcription language (ISO code)")
    p.add_argument("--prompt", type=str, default=None, help="Vocabulary hints for transcription")
    p.add_argument("--backend", choices=["api", "local"], default=None,
                   help="Transcribe through the API or locally with faster-whisper")

    p.add_argument("--debug_timing", action="store_true",
                   help="Enable timestamped step/timing logs.")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    return p


def apply_overrides(settings: config.Settings, args: argparse.Namespace) -> config.Settings:
    if args.out_subpath:
        settings.out_subpath = args.out_subpath
    if args.template:
        settings.use_meeting_template = True
        settings.selected_template = args.template
    if args.analyze is not None:
        settings.enable_ai_analysis = args.analyze
    if args.language:
        settings.language = args.language
    if args.prompt is not None:
        settings.prompt = args.prompt
    if args.backend:
        settings.backend = args.backend
    if args.debug_timing:
        settings.debug_mode = True
    return settings


def collect_metadata(settings: config.Settings, args: argparse.Namespace) -> MeetingMetadata | None:
    if args.attendees is not None or args.agenda is not None:
        return MeetingMetadata(
            attendees=args.attendees or settings.default_attendees,
            agenda=args.agenda or "",
            meeting_type=settings.selected_template,
        )
    if not (settings.prompt_for_metadata and settings.use_meeting_template and sys.stdin.isatty()):
        return None

    default = f" [{settings.default_attendees}]" if settings.default_attendees else ""
    attendees = input(f"Attendees{default}: ").strip() or settings.default_attendees
    agenda = input("Agenda: ").strip()
    return MeetingMetadata(attendees=attendees, agenda=agenda, meeting_type=settings.selected_template)


def read_clip(path: Path) -> AudioClip:
    mime, _ = mimetypes.guess_type(path.name)
    return AudioClip(data=path.read_bytes(), mime_type=mime or "audio/webm", suffix=path.suffix)


def run(args: argparse.Namespace) -> None:
    settings = apply_overrides(config.load_settings(Path(args.settings).expanduser()), args)
    timing.DEBUG_TIMING = bool(settings.debug_mode)
    timing.START_TS = time.perf_counter()

    catalog = load_catalog()
    if args.list_templates:
        for name in catalog:
            marker = "*" if name == settings.selected_template else " "
            print(f"{marker} {name}")
        return

    store = io_mod.NoteStore(io_mod.ensure_output_dir(settings.out_subpath))

    if args.new_note or args.start:
        metadata = collect_metadata(settings, args)
        create = pipeline.start_meeting_note if args.start else pipeline.create_meeting_note_only
        name = create(store, settings, catalog, metadata)
        print(f"Created note: {store.path_for(name)}")
        return

    if args.paste:
        text = sys.stdin.read() if args.paste == "-" else Path(args.paste).expanduser().read_text(encoding="utf-8")
        metadata = collect_metadata(settings, args)
        name = pipeline.process_pasted(text, settings, store, catalog, metadata=metadata)
    elif args.audio:
        audio_path = Path(args.audio).expanduser().resolve()
        if not audio_path.exists():
            raise ConfigurationError(f"Audio file not found: {audio_path}")
        metadata = None if args.update else collect_metadata(settings, args)
        name = pipeline.process_recording(
            read_clip(audio_path),
            settings,
            store,
            catalog,
            metadata=metadata,
            existing_note=args.update,
            source_name=None if args.update else audio_path.name,
        )
    else:
        raise ConfigurationError("Provide --audio PATH, --paste PATH, --start or --new-note")

    print(f"Saved notes to: {store.path_for(name)}")
    utils.send_notification("meetnote", "Meeting notes ready")


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    if args.version:
        print(f"meetnote {VERSION}")
        return

    try:
        run(args)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)
    except pipeline.NoteWriteError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        print("The generated note is printed below so it is not lost:\n", file=sys.stderr)
        print(e.content)
        sys.exit(1)
    except MeetnoteError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
