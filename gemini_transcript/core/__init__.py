"""Core cleanup engine and intermediate representation modules.

WHY: The core package contains the stable heart of the converter: the IR
dataclasses, the duplicate filter, the timestamp tokenizer, the
segmenter, and time-code arithmetic. These are consumed by all formatters
and never perform I/O.

HOW: ir.py defines the data structures, similarity.py scores text
overlap, dedup.py filters lines, timestamps.py finds markers,
segmenter.py builds segments, timecode.py formats offsets, pipeline.py
resolves a model result into a Transcript.

RULES:
- IR dataclasses are the contract; change with care
- Every function here is total: bad input gives empty output, not errors
- Dedup state lives on per-call objects, never at module level
"""

from gemini_transcript.core.dedup import DuplicateTracker, dedupe_lines
from gemini_transcript.core.ir import (
    ProcessingReport,
    RawTextResult,
    Segment,
    StructuredSegmentsResult,
    TimestampMarker,
    Transcript,
)
from gemini_transcript.core.segmenter import segment_text
from gemini_transcript.core.similarity import normalize, similarity
from gemini_transcript.core.timestamps import find_markers

__all__ = [
    "DuplicateTracker",
    "ProcessingReport",
    "RawTextResult",
    "Segment",
    "StructuredSegmentsResult",
    "TimestampMarker",
    "Transcript",
    "dedupe_lines",
    "find_markers",
    "normalize",
    "segment_text",
    "similarity",
]
