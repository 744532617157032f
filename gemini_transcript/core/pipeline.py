"""Normalization of transcription results into the Transcript IR.

WHY: The model call can hand back plain text or a list of segment
objects. Every consumer (formatters, CLI, HTTP API) needs the same two
views of it (cleaned text and an ordered segment list), so the shape is
resolved here, once, instead of being sniffed at every call site.

HOW: result_text() and result_segments() accept either variant of
TranscriptionResult. For raw text, the line filter runs first and the
segmenter runs on its output. For structured results, segment texts are
joined into paragraphs for the text view, and the segments themselves
are sorted, deduplicated (exact or near-duplicate, at any distance), and
given a positive span. build_transcript() bundles both views
with the processing report.

RULES:
- Empty or missing text gives "" and []
- Each call builds its own dedup state (no caching between calls)
- Formatter-agnostic: nothing here knows about output formats
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from gemini_transcript.config import DEFAULT_CLEANUP_CONFIG, CleanupConfig
from gemini_transcript.core.dedup import DuplicateTracker, dedupe_lines
from gemini_transcript.core.ir import (
    ProcessingReport,
    RawTextResult,
    Segment,
    StructuredSegmentsResult,
    Transcript,
    TranscriptionResult,
)
from gemini_transcript.core.segmenter import segment_text
from gemini_transcript.core.similarity import normalize


def coerce_result(
    data: Any,
    config: CleanupConfig = DEFAULT_CLEANUP_CONFIG,
) -> TranscriptionResult:
    """Wrap a loosely-shaped model payload in a TranscriptionResult.

    Accepts a plain string, a dict with ``text``, a dict with a
    ``segments`` list (items may be strings or dicts), or an existing
    result. Anything else becomes an empty RawTextResult.

    Segment items without usable times get the slot of their position,
    ``index * paragraph_segment_seconds``; a missing end (or one not
    after start) becomes start + ``trailing_segment_seconds``.
    """
    if isinstance(data, (RawTextResult, StructuredSegmentsResult)):
        return data
    if isinstance(data, str):
        return RawTextResult(text=data)
    if isinstance(data, dict):
        if isinstance(data.get("text"), str):
            return RawTextResult(text=data["text"])
        items = data.get("segments")
        if isinstance(items, list):
            slot = config.paragraph_segment_seconds
            segments = []
            for item in items:
                if isinstance(item, str):
                    item = {"text": item}
                elif not isinstance(item, dict):
                    continue
                segments.append(Segment.from_dict(
                    item,
                    default_start=len(segments) * slot,
                    default_duration=config.trailing_segment_seconds,
                ))
            return StructuredSegmentsResult(segments=segments)
    return RawTextResult(text="")


def result_text(
    result: Optional[TranscriptionResult],
    config: CleanupConfig = DEFAULT_CLEANUP_CONFIG,
) -> str:
    """Cleaned text view of either result variant."""
    if isinstance(result, RawTextResult):
        return dedupe_lines(result.text, config)
    if isinstance(result, StructuredSegmentsResult):
        joined = "\n\n".join(
            seg.text for seg in result.segments if seg.text.strip()
        )
        return dedupe_lines(joined, config)
    return ""


def result_segments(
    result: Optional[TranscriptionResult],
    config: CleanupConfig = DEFAULT_CLEANUP_CONFIG,
) -> List[Segment]:
    """Ordered, deduplicated segment view of either result variant."""
    if isinstance(result, RawTextResult):
        return segment_text(dedupe_lines(result.text, config), config)
    if isinstance(result, StructuredSegmentsResult):
        tracker = DuplicateTracker(config, unbounded=True)
        segments: List[Segment] = []
        for seg in sorted(result.segments, key=lambda s: s.start):
            text = seg.text.strip()
            if not text:
                continue
            key = normalize(text)
            if tracker.is_duplicate(key):
                continue
            tracker.remember(key)
            end = seg.end if seg.end > seg.start else seg.start + config.trailing_segment_seconds
            segments.append(Segment(start=seg.start, end=end, text=text))
        return segments
    return []


def build_transcript(
    result: Optional[TranscriptionResult],
    report: ProcessingReport,
    source_name: str,
    config: CleanupConfig = DEFAULT_CLEANUP_CONFIG,
    metadata: Optional[Dict[str, Any]] = None,
) -> Transcript:
    """Run cleanup and segmentation and return the Transcript IR.

    Args:
        result: The model output, either variant.
        report: Metadata for headers and JSON output.
        source_name: Source video stem, used in document titles.
        config: Cleanup thresholds.
        metadata: Extra details stored on the transcript as-is.

    Returns:
        A Transcript ready for any formatter.
    """
    response_type = "segments" if isinstance(result, StructuredSegmentsResult) else "text"
    meta: Dict[str, Any] = {
        "processingMethod": report.processing_method,
        "responseType": response_type,
    }
    if metadata:
        meta.update(metadata)

    return Transcript(
        cleaned_text=result_text(result, config),
        segments=result_segments(result, config),
        report=report,
        source_name=source_name,
        metadata=meta,
    )
