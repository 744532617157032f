"""Tests for the line-level duplicate filter.

WHY: The filter is the first thing that touches model output; if it
drops too much the transcript loses content, if it drops too little the
subtitles stutter. These tests pin down each rule separately.

HOW: Tests are grouped by rule:
  - TestExactRepeats: long repeats removed at any distance
  - TestNearDuplicates: Jaccard > threshold within the window only
  - TestNoise: short content removed
  - TestStructure: blank lines, markers, and idempotence
  - TestDuplicateTracker: the per-call state object itself

RULES:
- Thresholds come from CleanupConfig; tests that change them build
  their own config
"""

from __future__ import annotations

import pytest

from gemini_transcript.config import CleanupConfig
from gemini_transcript.core.dedup import DuplicateTracker, dedupe_lines

from conftest import LECTURE_TEXT, SCENARIO_A_TEXT, SCENARIO_B_TEXT


class TestExactRepeats:

    def test_long_repeat_far_away_is_removed(self):
        repeated = "This sentence is long enough to be remembered exactly."
        fillers = [
            "Filler line number {} talks about something else.".format(word)
            for word in ("one", "two", "three", "four", "five", "six", "seven")
        ]
        text = "\n".join([repeated] + fillers + [repeated])

        result = dedupe_lines(text).split("\n")

        assert result.count(repeated) == 1
        assert len(result) == 8

    def test_repeat_with_different_marker_is_removed(self):
        text = (
            "[00:10] The speaker introduces the main topic of the talk.\n"
            "[00:25] The speaker introduces the main topic of the talk."
        )
        assert dedupe_lines(text) == "[00:10] The speaker introduces the main topic of the talk."

    def test_repeat_with_different_punctuation_is_removed(self):
        text = "Well, this is how it works today!\nwell this is how it works today"
        assert dedupe_lines(text) == "Well, this is how it works today!"


class TestNearDuplicates:

    def test_scenario_a_short_repeat_caught_by_window(self):
        assert dedupe_lines(SCENARIO_A_TEXT) == (
            "[00:05] Hello world there\n[00:40] Next part begins"
        )

    def test_scenario_b_similar_paragraph_dropped(self):
        assert dedupe_lines(SCENARIO_B_TEXT) == (
            "The quick brown fox jumps over the lazy dog today\n"
        )

    def test_near_duplicate_outside_window_survives(self):
        first = "alpha beta gamma delta epsilon zeta eta theta"
        variant = "alpha beta gamma delta epsilon zeta eta theta iota"
        fillers = [
            "completely different words number {} here".format(n)
            for n in ("one", "two", "three")
        ]
        text = "\n".join([first] + fillers + [variant])
        config = CleanupConfig(window_size=2)

        result = dedupe_lines(text, config).split("\n")

        assert variant in result

    def test_threshold_is_strict(self):
        # {a..e} vs {a..d}: 4/5 == 0.8, not greater
        text = "aaaa bbbb cccc dddd eeee\naaaa bbbb cccc dddd"
        assert dedupe_lines(text).split("\n") == [
            "aaaa bbbb cccc dddd eeee",
            "aaaa bbbb cccc dddd",
        ]

    def test_lower_threshold_drops_more(self):
        text = "aaaa bbbb cccc dddd eeee\naaaa bbbb cccc dddd"
        config = CleanupConfig(similarity_threshold=0.5)
        assert dedupe_lines(text, config) == "aaaa bbbb cccc dddd eeee"


class TestNoise:

    @pytest.mark.parametrize("line", ["ok", "[00:05] uh huh", "0123456789"])
    def test_short_content_is_dropped(self, line):
        assert dedupe_lines(line) == ""

    def test_eleven_characters_survive(self):
        assert dedupe_lines("abcdefghijk") == "abcdefghijk"

    def test_marker_does_not_count_toward_length(self):
        assert dedupe_lines("[01:02:03] short") == ""

    def test_dropped_noise_is_not_remembered(self):
        # "ok" is dropped; it must not block a later identical noise check
        text = "ok\nA real sentence follows the noise."
        assert dedupe_lines(text) == "A real sentence follows the noise."


class TestStructure:

    def test_empty_input(self):
        assert dedupe_lines("") == ""
        assert dedupe_lines(None) == ""

    def test_blank_lines_preserved_as_empty(self):
        text = "First paragraph has enough text.\n   \nSecond paragraph is different."
        assert dedupe_lines(text) == (
            "First paragraph has enough text.\n\nSecond paragraph is different."
        )

    def test_kept_lines_written_verbatim(self):
        text = "  [00:03]   Indented line with its marker kept.  "
        assert dedupe_lines(text) == text

    def test_lecture_sample(self):
        result = dedupe_lines(LECTURE_TEXT).split("\n")
        assert len(result) == 5
        assert "ok" not in result
        assert result.count("[00:12] Last week we covered the basics of replication.") == 1

    @pytest.mark.parametrize("text", [LECTURE_TEXT, SCENARIO_A_TEXT, SCENARIO_B_TEXT])
    def test_idempotent(self, text):
        once = dedupe_lines(text)
        assert dedupe_lines(once) == once

    def test_calls_do_not_share_state(self):
        line = "This line appears in two separate jobs."
        assert dedupe_lines(line) == line
        assert dedupe_lines(line) == line


class TestDuplicateTracker:

    def test_window_is_bounded(self):
        tracker = DuplicateTracker(CleanupConfig(window_size=3))
        for word in ("one", "two", "three", "four"):
            tracker.remember(word)
        assert tracker.window == ["two", "three", "four"]
        assert len(tracker) == 4

    def test_unbounded_window_keeps_everything(self):
        tracker = DuplicateTracker(CleanupConfig(window_size=2), unbounded=True)
        for word in ("one", "two", "three", "four"):
            tracker.remember(word)
        assert tracker.window == ["one", "two", "three", "four"]
        assert tracker.is_duplicate("one") is True

    def test_unbounded_catches_near_duplicate_at_any_distance(self):
        tracker = DuplicateTracker(CleanupConfig(window_size=1), unbounded=True)
        tracker.remember("the quick brown fox jumps over the lazy sleeping dog today")
        for filler in ("apples and pears", "plums and grapes", "cherries and figs"):
            tracker.remember(filler)
        assert tracker.is_duplicate("the quick brown fox jumps over the lazy sleeping dog") is True

    def test_exact_hit_respects_min_length(self):
        tracker = DuplicateTracker(CleanupConfig(similarity_threshold=1.0))
        tracker.remember("short text")
        assert tracker.is_duplicate("short text") is True
        assert tracker.is_duplicate("short text", min_exact_length=20) is False

    def test_is_duplicate_does_not_mutate(self):
        tracker = DuplicateTracker()
        assert tracker.is_duplicate("never seen before") is False
        assert len(tracker) == 0
        assert tracker.window == []


class TestCleanupConfig:

    def test_defaults(self):
        config = CleanupConfig()
        assert config.similarity_threshold == 0.8
        assert config.window_size == 5
        assert config.min_content_length == 10
        assert config.trailing_segment_seconds == 30.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"similarity_threshold": -0.1},
            {"similarity_threshold": 1.5},
            {"window_size": 0},
            {"min_content_length": -1},
            {"trailing_segment_seconds": 0},
        ],
    )
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ValueError):
            CleanupConfig(**kwargs)
