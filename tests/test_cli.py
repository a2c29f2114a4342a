"""Tests for the command line entrypoint."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest

from meetnote import cli


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    return tmp_path


def _settings_file(home, **values) -> str:
    path = home / "settings.json"
    path.write_text(json.dumps(values))
    return str(path)


class TestCli:
    def test_version(self, capsys) -> None:
        cli.main(["--version"])
        assert capsys.readouterr().out.startswith("meetnote ")

    def test_list_templates(self, home, capsys) -> None:
        cli.main(["--settings", _settings_file(home), "--list-templates"])
        out = capsys.readouterr().out
        assert "* general" in out
        assert "  standup" in out

    def test_missing_audio_file_exits_2(self, home, capsys) -> None:
        with pytest.raises(SystemExit) as exc:
            cli.main(["--settings", _settings_file(home), "--audio", str(home / "nope.webm")])
        assert exc.value.code == 2
        assert "Audio file not found" in capsys.readouterr().err

    @patch("meetnote.cli.utils.send_notification")
    @patch("meetnote.openai_client.requests.post")
    def test_audio_to_note(self, mock_post, _notify, home, capsys) -> None:
        r = MagicMock(status_code=200)
        r.json.return_value = {"segments": [{"start": 0, "end": 1, "text": "Hi."}]}
        mock_post.return_value = r
        audio = home / "standup.webm"
        audio.write_bytes(b"fake audio")

        cli.main(["--settings", _settings_file(home), "--audio", str(audio), "--no-analyze"])

        note = home / "Documents" / "Meeting_Notes" / "standup.md"
        assert note.read_text(encoding="utf-8") == "**[0:00]** Hi.\n"
        assert "Saved notes to:" in capsys.readouterr().out

    @patch("meetnote.cli.utils.send_notification")
    @patch("meetnote.openai_client.requests.post")
    def test_wav_file_uploaded_with_wav_name(self, mock_post, _notify, home) -> None:
        r = MagicMock(status_code=200)
        r.json.return_value = {"text": "Hi."}
        mock_post.return_value = r
        audio = home / "meeting.wav"
        audio.write_bytes(b"RIFF fake")

        cli.main(["--settings", _settings_file(home), "--audio", str(audio), "--no-analyze"])

        filename, payload, _ = mock_post.call_args[1]["files"]["file"]
        assert (filename, payload) == ("recording.wav", b"RIFF fake")

    def test_mistyped_setting_exits_2(self, home, capsys) -> None:
        with pytest.raises(SystemExit) as exc:
            cli.main(["--settings", _settings_file(home, paragraph_break_threshold="soon"), "--list-templates"])
        assert exc.value.code == 2
        assert "Invalid settings" in capsys.readouterr().err

    def test_new_note_with_template(self, home) -> None:
        settings = _settings_file(home, prompt_for_metadata=False)
        cli.main(["--settings", settings, "--new-note", "--template", "standup", "--attendees", "Ann"])

        notes = list((home / "Documents" / "Meeting_Notes").glob("*.md"))
        assert len(notes) == 1
        body = notes[0].read_text(encoding="utf-8")
        assert body.startswith("# Daily Standup - ")
        assert "### Participants\nAnn\n" in body
