"""Bracketed timestamp marker tokenizer.

WHY: Gemini is prompted to write ``[MM:SS]`` or ``[HH:MM:SS]`` before each
new segment. Finding those markers is the only parsing the segmenter
needs, so it lives on its own and is tested on its own.

HOW: One regex with two mandatory numeric groups and an optional third.
Three groups read as HH:MM:SS; two groups read as MM:SS.

RULES:
- "[1:02:03]" → 3723 seconds; "[02:03]" → 123 seconds (never HH:MM)
- Matches are non-overlapping, returned in document order
- Bracket-like text that doesn't match the full pattern is ordinary content
- Never raises; zero markers is a normal result
"""

from __future__ import annotations

import re
from typing import List, Optional

from gemini_transcript.core.ir import TimestampMarker

MARKER_PATTERN = r"\[(\d{1,2}):(\d{2})(?::(\d{2}))?\]"

MARKER_RE = re.compile(MARKER_PATTERN)
LEADING_MARKER_RE = re.compile("^" + MARKER_PATTERN)


def _offset_from_groups(first: str, second: str, third: Optional[str]) -> float:
    if third is not None:
        hours, minutes, seconds = int(first), int(second), int(third)
    else:
        hours, minutes, seconds = 0, int(first), int(second)
    return float(hours * 3600 + minutes * 60 + seconds)


def find_markers(text: str | None) -> List[TimestampMarker]:
    """Return every timestamp marker in *text*, left to right."""
    if not text:
        return []
    return [
        TimestampMarker(
            raw_text=match.group(0),
            offset_s=_offset_from_groups(*match.groups()),
            source_index=match.start(),
            length=len(match.group(0)),
        )
        for match in MARKER_RE.finditer(text)
    ]


def parse_marker(raw: str | None) -> Optional[float]:
    """Offset in seconds of a single marker string, or None if it isn't one."""
    if not raw:
        return None
    match = MARKER_RE.fullmatch(raw.strip())
    if match is None:
        return None
    return _offset_from_groups(*match.groups())


def split_leading_marker(line: str) -> tuple[str, str]:
    """Split a trimmed line into ``(marker, content)``.

    marker is "" when the line doesn't start with one; content is the
    rest of the line, trimmed.
    """
    match = LEADING_MARKER_RE.match(line)
    if match is None:
        return "", line
    return match.group(0), line[match.end():].strip()
