"""Tests for paragraph assembly and transcript rendering."""

from __future__ import annotations

from meetnote.assemble import (
    CHUNK_SEPARATOR,
    assemble,
    assemble_chunks,
    format_pasted_transcription,
    format_time,
    rebase,
    render,
)
from meetnote.models import AssembledTranscript, Chunk, PlainText, Segment, Segmented


def _texts(transcript: AssembledTranscript) -> list[tuple[float, str]]:
    return [(p.lead_timestamp, p.text) for p in transcript.paragraphs]


class TestFormatTime:
    def test_minutes_and_seconds(self) -> None:
        assert format_time(0) == "0:00"
        assert format_time(65.9) == "1:05"
        assert format_time(450) == "7:30"

    def test_hours(self) -> None:
        assert format_time(3600) == "1:00:00"
        assert format_time(3725) == "1:02:05"


class TestAssemble:
    def test_empty_segments(self) -> None:
        transcript = assemble([])
        assert transcript.paragraphs == []
        assert render(transcript) == ""

    def test_joins_segments_without_pause_or_sentence_end(self) -> None:
        segments = [
            Segment(0.0, 1.5, " so the plan is"),
            Segment(1.6, 3.0, "to ship on friday"),
        ]
        assert _texts(assemble(segments)) == [(0.0, "so the plan is to ship on friday")]

    def test_breaks_on_silence(self) -> None:
        segments = [
            Segment(0.0, 1.0, "first part"),
            Segment(4.5, 6.0, "after a pause"),
        ]
        assert _texts(assemble(segments, silence_threshold=2)) == [
            (0.0, "first part"),
            (4.5, "after a pause"),
        ]

    def test_breaks_after_terminal_punctuation(self) -> None:
        segments = [
            Segment(0.0, 1.0, "Is that right?"),
            Segment(1.1, 2.0, "Yes it is"),
            Segment(2.1, 3.0, "and more!"),
            Segment(3.1, 4.0, "Done"),
        ]
        assert [t for _, t in _texts(assemble(segments))] == [
            "Is that right?",
            "Yes it is and more!",
            "Done",
        ]

    def test_render_prefixes_timestamps(self) -> None:
        segments = [
            Segment(0.0, 1.0, "Hello."),
            Segment(65.0, 66.0, "Later."),
        ]
        assert render(assemble(segments)) == "**[0:00]** Hello.\n\n**[1:05]** Later.\n"


class TestAssembleChunks:
    def test_second_chunk_is_rebased(self) -> None:
        chunk0 = Chunk(b"a", 0, 0.0, 450.0)
        chunk1 = Chunk(b"b", 1, 450.0, 900.0)
        transcript = assemble_chunks([
            (chunk0, Segmented([Segment(0, 5, "Hello")])),
            (chunk1, Segmented([Segment(0, 3, "World")])),
        ])

        assert _texts(transcript) == [(0.0, "Hello"), (450.0, "World")]
        assert render(transcript) == f"**[0:00]** Hello\n\n{CHUNK_SEPARATOR}**[7:30]** World\n"

    def test_results_are_merged_by_index_not_arrival_order(self) -> None:
        chunk0 = Chunk(b"a", 0, 0.0, 100.0)
        chunk1 = Chunk(b"b", 1, 100.0, 200.0)
        transcript = assemble_chunks([
            (chunk1, Segmented([Segment(0, 1, "second.")])),
            (chunk0, Segmented([Segment(0, 1, "first.")])),
        ])
        assert [p.text for p in transcript.paragraphs] == ["first.", "second."]
        assert transcript.plain_text == "first.\n\nsecond."

    def test_split_halves_match_whole_list(self) -> None:
        """Rebased halves give the same paragraphs as the unsplit list."""
        whole = [
            Segment(0.0, 2.0, "We start"),
            Segment(2.5, 4.0, "with the budget."),
            Segment(4.25, 5.5, "Then hiring"),
            Segment(6.0, 8.0, "comes up"),
            Segment(12.5, 14.0, "after a long gap."),
            Segment(14.25, 15.0, "Wrap up"),
        ]
        offset = 5.0
        first = [s for s in whole if s.start_seconds < offset]
        second = [Segment(s.start_seconds - offset, s.end_seconds - offset, s.text)
                  for s in whole if s.start_seconds >= offset]

        chunked = assemble_chunks([
            (Chunk(b"", 0, 0.0, offset), Segmented(first)),
            (Chunk(b"", 1, offset, 20.0), Segmented(second)),
        ])
        single = assemble(whole)

        assert _texts(chunked) == _texts(single)

    def test_plain_text_chunk_becomes_paragraph(self) -> None:
        transcript = assemble_chunks([
            (Chunk(b"", 0, 0.0, 60.0), PlainText("no timestamps here")),
        ])
        assert _texts(transcript) == [(0.0, "no timestamps here")]

    def test_rebase_shifts_both_ends(self) -> None:
        assert rebase([Segment(1, 2, "x")], 10) == [Segment(11, 12, "x")]


class TestPastedFormatting:
    def test_timestamps_are_bolded(self) -> None:
        text = "[00:10] Alice: hi\n(01:02:03) Bob: hello\n12:30 - Carol: hey"
        assert format_pasted_transcription(text) == (
            "**[00:10]** Alice: hi\n\n**[01:02:03]** Bob: hello\n\n**[12:30]** Carol: hey"
        )

    def test_existing_paragraph_breaks_kept(self) -> None:
        assert format_pasted_transcription("  one\n\ntwo  ") == "one\n\ntwo"
