"""Shared test fixtures for the gemini_transcript test suite.

WHY: Most test modules need the same handful of model responses: text
with repeated timestamped lines, text with no markers at all, a
structured segment list, plus a processing report to hang them on.
Centralizing them here keeps every module testing the same inputs.

HOW: Module-level constants hold the raw texts so tests can also use them
in parametrize; fixtures wrap them and build ready-made Transcripts.

RULES:
- Raw texts are what Gemini actually returns: markers at line starts,
  repeated lines, blank lines between paragraphs
- The report timestamp is fixed so rendered output is deterministic
- No fixture touches the network or the real API key
"""

from __future__ import annotations

from typing import List

import pytest

from gemini_transcript.core.ir import (
    ProcessingReport,
    RawTextResult,
    Segment,
    StructuredSegmentsResult,
    Transcript,
)
from gemini_transcript.core.pipeline import build_transcript


# ---------------------------------------------------------------------------
# Raw model responses
# ---------------------------------------------------------------------------

# Repeated marker line: second copy must vanish, 5 → 40 → 70
SCENARIO_A_TEXT = (
    "[00:05] Hello world there\n"
    "[00:05] Hello world there\n"
    "[00:40] Next part begins"
)

# Second paragraph shares 8 of 9 words with the first
SCENARIO_B_TEXT = (
    "The quick brown fox jumps over the lazy dog today\n"
    "\n"
    "The quick brown fox jumps over the lazy dog"
)

# Two distinct paragraphs without markers
SCENARIO_E_TEXT = (
    "Welcome to the lecture on distributed systems.\n"
    "\n"
    "Today we talk about consensus protocols."
)

LECTURE_TEXT = (
    "[00:00] Good morning everyone and welcome back to the course.\n"
    "[00:12] Last week we covered the basics of replication.\n"
    "[00:12] Last week we covered the basics of replication.\n"
    "[00:31] Today we move on to leader election in practice.\n"
    "[01:05] First, a quick recap of the failure model we assume.\n"
    "ok\n"
    "[01:40] Let us start with the bully algorithm and its messages."
)

FIXED_TIMESTAMP = "2024-03-01T14:30:05+00:00"


@pytest.fixture
def scenario_a_text() -> str:
    return SCENARIO_A_TEXT


@pytest.fixture
def lecture_text() -> str:
    return LECTURE_TEXT


@pytest.fixture
def sample_report() -> ProcessingReport:
    """A report as produced by a direct transcription of lecture.mp4."""
    return ProcessingReport(
        video_path="/videos/lecture.mp4",
        video_size="12.34 MB",
        processing_method="direct",
        model="gemini-2.0-flash",
        language="English",
        timestamp=FIXED_TIMESTAMP,
        output_formats=["txt", "json", "srt", "vtt", "md"],
    )


@pytest.fixture
def sample_segments() -> List[Segment]:
    return [
        Segment(start=0.0, end=12.0, text="Good morning everyone and welcome back to the course."),
        Segment(start=12.0, end=31.0, text="Last week we covered the basics of replication."),
        Segment(start=31.0, end=65.0, text="Today we move on to leader election in practice."),
    ]


@pytest.fixture
def lecture_transcript(sample_report) -> Transcript:
    """Transcript built from LECTURE_TEXT through the real pipeline."""
    return build_transcript(RawTextResult(text=LECTURE_TEXT), sample_report, "lecture")


@pytest.fixture
def structured_transcript(sample_report, sample_segments) -> Transcript:
    """Transcript built from an already-segmented model response."""
    return build_transcript(
        StructuredSegmentsResult(segments=sample_segments), sample_report, "lecture"
    )


@pytest.fixture
def empty_transcript(sample_report) -> Transcript:
    return build_transcript(RawTextResult(text=""), sample_report, "lecture")
