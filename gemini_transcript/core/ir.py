"""Intermediate representation dataclasses for cleaned transcripts.

WHY: Gemini returns free-form text, sometimes already split into segment
objects, sometimes not. Downstream formatters (SRT, VTT, Markdown, plain
text, JSON) each need the cleaned text, the time-coded segments, and the
run metadata, but in different groupings. The IR provides a single,
well-typed form that all formatters consume, decoupling cleanup from
formatting.

HOW: Small dataclasses form the model:
  TimestampMarker          — one bracketed time marker found in raw text
  Segment                  — a time-bounded unit of transcript text
  RawTextResult            — model output that is one block of text
  StructuredSegmentsResult — model output that is already a segment list
  ProcessingReport         — metadata describing one transcription run
  Transcript               — everything a formatter needs

RULES:
- All times are float seconds
- Segments are derived values; nothing mutates them after creation
- TranscriptionResult is the tagged union of the two result variants;
  use core.pipeline.result_text() / result_segments() to read either one
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# H:MM:SS or MM:SS, optional ",mmm" / ".mmm" fraction
_CLOCK_RE = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})(?:[.,](\d+))?$")


@dataclass(frozen=True)
class TimestampMarker:
    """A bracketed time marker such as ``[01:23]`` found in raw text.

    RULES:
    - raw_text: the marker exactly as written, brackets included
    - offset_s: hours*3600 + minutes*60 + seconds
    - source_index: character offset of "[" in the scanned text
    - length: len(raw_text)
    """

    raw_text: str
    offset_s: float
    source_index: int
    length: int

    @property
    def end_index(self) -> int:
        """Character offset just past the closing bracket."""
        return self.source_index + self.length


@dataclass(frozen=True)
class Segment:
    """A time-bounded unit of transcript text.

    RULES:
    - start: seconds, >= 0
    - end: seconds, greater than start in the general case
    - text: trimmed segment text, never empty in a produced list
    """

    start: float
    end: float
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "text": self.text}

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        default_start: float = 0.0,
        default_duration: float = 30.0,
    ) -> Segment:
        """Parse a segment from a loosely-shaped dict.

        Times may be numbers, numeric strings, or clock strings such as
        "0:05" or "00:01:02,500". A start that is missing or unreadable
        falls back to *default_start*; an end that is missing, unreadable,
        or not after start becomes start + *default_duration*. Text is
        coerced to a string so malformed model output never raises.
        """
        start = seconds_from_value(data.get("start"))
        if start is None:
            start = default_start
        end = seconds_from_value(data.get("end"))
        if end is None or end <= start:
            end = start + default_duration
        return cls(start=start, end=end, text=str(data.get("text") or ""))


def seconds_from_value(value: Any) -> Optional[float]:
    """Read a time field from model output; None when it can't be used."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        text = value.strip()
        match = _CLOCK_RE.match(text)
        if match:
            hours, minutes, secs, fraction = match.groups()
            seconds = int(hours or 0) * 3600 + int(minutes) * 60 + int(secs)
            if fraction:
                seconds += float("0." + fraction)
        else:
            try:
                seconds = float(text)
            except ValueError:
                return None
    else:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


@dataclass(frozen=True)
class RawTextResult:
    """Model output delivered as a single block of text."""

    text: str


@dataclass(frozen=True)
class StructuredSegmentsResult:
    """Model output delivered as a list of segment objects."""

    segments: List[Segment] = field(default_factory=list)


TranscriptionResult = Union[RawTextResult, StructuredSegmentsResult]


@dataclass
class ProcessingReport:
    """Metadata describing one transcription run.

    WHY: The Markdown header, the JSON output, and the processing report
    file all show the same facts about how a transcript was produced.

    RULES:
    - video_size: human-readable, e.g. "12.34 MB"
    - processing_method: "direct", "chunked", or "text" (offline cleanup)
    - language: "auto-detected" when the caller gave none
    - timestamp: ISO-8601 string
    """

    video_path: str
    video_size: str
    processing_method: str
    model: str
    language: str
    timestamp: str
    output_formats: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videoPath": self.video_path,
            "videoSize": self.video_size,
            "processingMethod": self.processing_method,
            "model": self.model,
            "language": self.language,
            "timestamp": self.timestamp,
            "outputFormats": list(self.output_formats),
        }


@dataclass
class Transcript:
    """The complete intermediate representation handed to formatters.

    RULES:
    - cleaned_text: output of the line-level dedup filter
    - segments: ordered, deduplicated segment list (may be empty)
    - report: run metadata for headers and JSON output
    - source_name: stem of the source video, used in document titles
    - metadata: free-form details about how the result was obtained
    """

    cleaned_text: str
    segments: List[Segment]
    report: ProcessingReport
    source_name: str
    metadata: Dict[str, Any] = field(default_factory=dict)
