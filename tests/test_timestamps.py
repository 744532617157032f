"""Tests for the bracketed timestamp tokenizer.

RULES:
- Two groups are MM:SS, three are HH:MM:SS
- Anything that doesn't match the whole pattern is ordinary content
"""

from __future__ import annotations

import pytest

from gemini_transcript.core.timestamps import find_markers, parse_marker, split_leading_marker


class TestParseMarker:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("[1:02:03]", 3723.0),
            ("[02:03]", 123.0),
            ("[0:05]", 5.0),
            ("[00:00]", 0.0),
            ("[12:34:56]", 45296.0),
        ],
    )
    def test_valid_markers(self, raw, expected):
        assert parse_marker(raw) == expected

    @pytest.mark.parametrize("raw", ["[123:45]", "[1:2]", "(01:02)", "01:02", "[aa:bb]", "", None])
    def test_invalid_markers(self, raw):
        assert parse_marker(raw) is None


class TestFindMarkers:

    def test_positions_and_offsets(self):
        text = "[00:05] Hello [01:00:00] again"
        markers = find_markers(text)

        assert [m.raw_text for m in markers] == ["[00:05]", "[01:00:00]"]
        assert [m.offset_s for m in markers] == [5.0, 3600.0]
        assert markers[0].source_index == 0
        assert markers[1].source_index == text.index("[01:00:00]")
        assert markers[1].end_index == markers[1].source_index + len("[01:00:00]")

    def test_no_markers(self):
        assert find_markers("Just text with [brackets] and 10:30 times.") == []

    def test_empty(self):
        assert find_markers("") == []
        assert find_markers(None) == []

    def test_three_digit_minutes_not_a_marker(self):
        assert find_markers("[100:00] not a marker") == []


class TestSplitLeadingMarker:

    def test_with_marker(self):
        assert split_leading_marker("[00:05]   Hello there") == ("[00:05]", "Hello there")

    def test_without_marker(self):
        assert split_leading_marker("Hello [00:05] there") == ("", "Hello [00:05] there")

    def test_marker_only(self):
        assert split_leading_marker("[1:02:03]") == ("[1:02:03]", "")
