"""Tests for meeting analysis parsing and the analysis call."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import requests

from meetnote.analyze import analyze_meeting, build_user_content, classify_bullet, parse_analysis
from meetnote.config import Settings

WELL_FORMED = """Here is the analysis.

1. **Participants**: Alice, Bob; Carol
2. **Agenda**:
- Budget review
- Hiring plan

3. **Key Points**:
- Budget is 10% over
- Two roles approved

4. **Action Items**:
- [ ] Send revised budget @Alice
- Book interview rooms

5. **Next Steps**:
- Review again next month
"""


def _chat_response(content: str) -> MagicMock:
    r = MagicMock()
    r.status_code = 200
    r.json.return_value = {"choices": [{"message": {"content": content}}]}
    return r


class TestParseAnalysis:
    def test_sections_are_parsed(self) -> None:
        analysis = parse_analysis(WELL_FORMED)

        assert analysis.participants == ["Alice", "Bob", "Carol"]
        assert analysis.agenda == ["Budget review", "Hiring plan"]
        assert analysis.key_points == ["Budget is 10% over", "Two roles approved"]
        assert analysis.action_items == ["[ ] Send revised budget @Alice", "Book interview rooms"]
        assert analysis.next_steps == ["Review again next month"]
        assert analysis.raw_response == WELL_FORMED

    def test_headers_are_case_insensitive(self) -> None:
        analysis = parse_analysis("**KEY POINTS**:\n- One\n**next steps**:\n- Two\n")
        assert analysis.key_points == ["One"]
        assert analysis.next_steps == ["Two"]

    def test_bulleted_participants_are_deduplicated(self) -> None:
        analysis = parse_analysis("**Participants**:\n- Alice\n- alice\n- Bob, Dan\n- N/A\n**Key Points**:\n- x\n")
        assert analysis.participants == ["Alice", "Bob", "Dan"]

    def test_bullet_markers_are_stripped(self) -> None:
        analysis = parse_analysis("**Key Points**:\n• Dot bullet\n  - Indented dash\nnot a bullet\n")
        assert analysis.key_points == ["Dot bullet", "Indented dash"]

    def test_fallback_classifies_flat_bullets(self) -> None:
        analysis = parse_analysis("- Review budget\n- [ ] File report @Sam\n- Follow up next week")

        assert analysis.key_points == ["Review budget"]
        assert analysis.action_items == ["[ ] File report @Sam"]
        assert analysis.next_steps == ["Follow up next week"]

    def test_fallback_prefers_action_over_next(self) -> None:
        assert classify_bullet("Action: schedule next review") == "action_items"
        assert classify_bullet("Create a task for Ops") == "action_items"
        assert classify_bullet("Next sync on Monday") == "next_steps"

    def test_fallback_not_used_when_sections_found(self) -> None:
        analysis = parse_analysis("**Key Points**:\n- Only this\n\nStray:\n- next action")
        assert analysis.key_points == ["Only this", "next action"]
        assert analysis.action_items == []

    def test_reply_without_bullets(self) -> None:
        analysis = parse_analysis("Nothing structured here.")
        assert analysis.key_points == analysis.action_items == analysis.next_steps == []


class TestBuildUserContent:
    def test_transcript_alone(self) -> None:
        assert build_user_content("hello") == "hello"

    def test_user_notes_come_first(self) -> None:
        content = build_user_content("hello", existing_notes="Decided X", existing_participants="Alice")
        assert content.startswith("User Notes:\nParticipants: Alice\n\nDecided X")
        assert content.endswith("\n\nTranscription:\nhello")


class TestAnalyzeMeeting:
    def test_disabled_returns_none_without_call(self) -> None:
        with patch("meetnote.openai_client.requests.post") as mock_post:
            assert analyze_meeting(Settings(api_key="sk", enable_ai_analysis=False), "t") is None
        mock_post.assert_not_called()

    def test_missing_key_returns_none(self) -> None:
        with patch("meetnote.openai_client.requests.post") as mock_post:
            assert analyze_meeting(Settings(api_key="", enable_ai_analysis=True), "t") is None
        mock_post.assert_not_called()

    @patch("meetnote.openai_client.requests.post")
    def test_request_payload(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _chat_response(WELL_FORMED)
        settings = Settings(api_key="sk", enable_ai_analysis=True, ai_model="gpt-4o-mini", ai_prompt="SYS")

        analysis = analyze_meeting(settings, "the transcript")

        assert analysis is not None
        assert analysis.participants == ["Alice", "Bob", "Carol"]
        url = mock_post.call_args[0][0]
        payload = json.loads(mock_post.call_args[1]["data"])
        assert url == "https://api.openai.com/v1/chat/completions"
        assert payload == {
            "model": "gpt-4o-mini",
            "messages": [
                {"role": "system", "content": "SYS"},
                {"role": "user", "content": "the transcript"},
            ],
            "temperature": 0.7,
            "max_tokens": 1000,
        }

    @patch("meetnote.openai_client.requests.post")
    def test_transport_failure_is_swallowed(self, mock_post: MagicMock, capsys) -> None:
        mock_post.side_effect = requests.ConnectionError("down")
        settings = Settings(api_key="sk", enable_ai_analysis=True)

        assert analyze_meeting(settings, "t") is None
        assert "Error analyzing meeting" in capsys.readouterr().err

    @patch("meetnote.openai_client.requests.post")
    def test_error_status_is_swallowed(self, mock_post: MagicMock) -> None:
        r = MagicMock(status_code=500, text="boom")
        mock_post.return_value = r
        assert analyze_meeting(Settings(api_key="sk", enable_ai_analysis=True), "t") is None
