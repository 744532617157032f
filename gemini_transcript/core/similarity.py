"""Text normalization and lexical similarity scoring.

WHY: Both the line filter and the segmenter decide "is this the same
thing again?" by comparing normalized text. Keeping normalization and
scoring in one place guarantees every stage compares text the same way.

HOW: normalize() lowercases, drops non-word/non-space characters, and
collapses whitespace. similarity() is the Jaccard index over the
whitespace-split word sets of two strings.

RULES:
- Both functions are total: any string (or None) is accepted
- similarity() ignores word multiplicity (sets, not multisets)
- Empty or missing operands score 0, identical non-empty operands score 1
"""

from __future__ import annotations

import re

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str | None) -> str:
    """Return the comparison form of *text*."""
    if not text:
        return ""
    stripped = _NON_WORD_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def similarity(a: str | None, b: str | None) -> float:
    """Jaccard similarity of the word sets of *a* and *b*, in [0, 1]."""
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0

    words_a = set(a.split())
    words_b = set(b.split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)
