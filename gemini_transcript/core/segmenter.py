"""Time-coded segmentation of cleaned transcript text.

WHY: Subtitle formats need discrete cues with start and end times, but
the model returns running text with markers sprinkled through it, or
no markers at all. The segmenter turns either shape into an ordered list
of Segment objects.

HOW: If the text contains timestamp markers, each marker opens a segment
that runs until the next marker (or the end of the text). The segment's
end time is the next marker's offset; the last segment gets a fixed
trailing duration. Without any markers, the text is split into
paragraphs on blank lines and each paragraph gets a synthetic fixed-size
time slot by position.

Segment-level dedup runs on top: the line filter works on physical
lines, but segment boundaries don't line up with line boundaries, so a
repeat can survive the line filter and still show up here.

RULES:
- Empty segment texts are discarded
- A segment whose normalized text was already kept, or that is a
  near-duplicate of any kept segment, is dropped (at any distance)
- A marker whose successor is not later than itself gets the trailing
  duration instead of a zero/negative span
- The result is stably sorted by start time
- Markers present but every slice empty → empty list (no paragraph fallback)
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from gemini_transcript.config import DEFAULT_CLEANUP_CONFIG, CleanupConfig
from gemini_transcript.core.dedup import DuplicateTracker
from gemini_transcript.core.ir import Segment, TimestampMarker
from gemini_transcript.core.similarity import normalize
from gemini_transcript.core.timestamps import find_markers

logger = logging.getLogger(__name__)

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


def _segments_from_markers(
    text: str,
    markers: List[TimestampMarker],
    config: CleanupConfig,
) -> List[Segment]:
    tracker = DuplicateTracker(config, unbounded=True)
    segments: List[Segment] = []

    for i, marker in enumerate(markers):
        next_marker = markers[i + 1] if i + 1 < len(markers) else None
        end_index = next_marker.source_index if next_marker else len(text)
        segment_text = text[marker.end_index:end_index].strip()
        if not segment_text:
            continue

        normalized = normalize(segment_text)
        if tracker.is_duplicate(normalized):
            continue
        tracker.remember(normalized)

        start = marker.offset_s
        if next_marker is not None and next_marker.offset_s > start:
            end = next_marker.offset_s
        else:
            end = start + config.trailing_segment_seconds

        segments.append(Segment(start=start, end=end, text=segment_text))

    return segments


def _segments_from_paragraphs(text: str, config: CleanupConfig) -> List[Segment]:
    tracker = DuplicateTracker(config, unbounded=True)
    slot = config.paragraph_segment_seconds
    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK_RE.split(text) if p.strip()]

    segments: List[Segment] = []
    for index, paragraph in enumerate(paragraphs):
        normalized = normalize(paragraph)
        if tracker.is_duplicate(normalized):
            continue
        tracker.remember(normalized)
        segments.append(Segment(start=index * slot, end=(index + 1) * slot, text=paragraph))
    return segments


def segment_text(text: Optional[str], config: CleanupConfig = DEFAULT_CLEANUP_CONFIG) -> List[Segment]:
    """Build an ordered, deduplicated segment list from cleaned text.

    Args:
        text: Cleaned transcript text (output of dedupe_lines()).
        config: Durations and dedup thresholds.

    Returns:
        Segments sorted by non-decreasing start time. Empty for empty input.
    """
    if not text:
        return []

    markers = find_markers(text)
    if markers:
        segments = _segments_from_markers(text, markers, config)
    else:
        segments = _segments_from_paragraphs(text, config)

    segments.sort(key=lambda s: s.start)
    logger.debug(
        "Segmented text into %d segments (%s)",
        len(segments),
        "markers" if markers else "paragraphs",
    )
    return segments
