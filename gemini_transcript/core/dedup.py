"""Line-level duplicate and near-duplicate removal for raw model text.

WHY: Generative models repeat themselves: the same sentence twice in a
row, a paragraph restated a few lines later, the same timestamped line
emitted again after a retry inside the model. Subtitles built from that
text repeat too. This filter drops the repeats before anything else
looks at the text.

HOW: Each physical line is trimmed and its leading timestamp marker (if
any) split off. The remaining content is normalized and checked against
two memories held by a DuplicateTracker:
  exact set — every normalized line kept so far (unbounded)
  window    — the last N normalized lines kept (bounded FIFO)
A line is a duplicate when its normalized form is already in the exact
set (and long enough to be meaningful), or when it is a near-duplicate
(Jaccard > threshold) of anything in the window. Kept lines are written
back verbatim, timestamp included.

RULES:
- Blank lines are preserved as empty lines (paragraph breaks)
- Lines whose content is min_content_length chars or shorter are noise
  and dropped; dropped lines never enter either memory
- Exact duplicates are caught at any distance; near-duplicates only
  within the window
- dedupe_lines() is idempotent
- A fresh DuplicateTracker is built per call; nothing is module-global
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional, Set

from gemini_transcript.config import DEFAULT_CLEANUP_CONFIG, CleanupConfig
from gemini_transcript.core.similarity import normalize, similarity
from gemini_transcript.core.timestamps import split_leading_marker

logger = logging.getLogger(__name__)


class DuplicateTracker:
    """Per-invocation memory of kept text for duplicate detection.

    WHY: Two transcript jobs may be cleaned at the same time. Keeping the
    seen-set and window on an object created for one call means nothing
    leaks between jobs.

    RULES:
    - is_duplicate() never mutates state; remember() is the only writer
    - The window holds at most config.window_size entries, oldest evicted
    - unbounded=True keeps every remembered entry in the window, so
      near-duplicates are caught at any distance (segment lists)
    """

    def __init__(
        self,
        config: CleanupConfig = DEFAULT_CLEANUP_CONFIG,
        unbounded: bool = False,
    ) -> None:
        self._config = config
        self._seen: Set[str] = set()
        self._window: Deque[str] = deque(maxlen=None if unbounded else config.window_size)

    def is_duplicate(self, normalized: str, min_exact_length: int = 0) -> bool:
        """True if *normalized* repeats something already remembered.

        Args:
            normalized: Comparison form of the candidate text.
            min_exact_length: Exact-set hits only count when the
                normalized text is longer than this.
        """
        if len(normalized) > min_exact_length and normalized in self._seen:
            return True
        threshold = self._config.similarity_threshold
        return any(similarity(normalized, recent) > threshold for recent in self._window)

    def remember(self, normalized: str) -> None:
        self._seen.add(normalized)
        self._window.append(normalized)

    @property
    def window(self) -> List[str]:
        """Snapshot of the similarity window, oldest first."""
        return list(self._window)

    def __len__(self) -> int:
        return len(self._seen)


def dedupe_lines(text: Optional[str], config: CleanupConfig = DEFAULT_CLEANUP_CONFIG) -> str:
    """Remove exact and near-duplicate lines from raw model text.

    Args:
        text: Raw text, possibly with leading ``[MM:SS]`` markers per line.
        config: Thresholds for the filter.

    Returns:
        The cleaned text, lines joined with ``\\n``. Empty input gives "".
    """
    if not text:
        return ""

    tracker = DuplicateTracker(config)
    kept: List[str] = []
    dropped = 0

    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            kept.append("")
            continue

        _marker, content = split_leading_marker(trimmed)
        normalized = normalize(content)

        if tracker.is_duplicate(normalized, config.min_exact_match_length):
            dropped += 1
            continue
        if len(content) <= config.min_content_length:
            dropped += 1
            continue

        kept.append(line)
        tracker.remember(normalized)

    logger.debug("Line filter kept %d unique lines, dropped %d", len(tracker), dropped)
    return "\n".join(kept)
