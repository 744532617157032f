"""Greedy word wrap shared by the caption formatters."""

from __future__ import annotations

from typing import List


def wrap_words(text: str, max_length: int) -> List[str]:
    """Split *text* into lines of at most *max_length* characters.

    Words are appended to the current line while
    ``len(line) + len(word) + 1 <= max_length``; otherwise the line is
    flushed and the word starts a new one. A single word longer than
    max_length is never split; it gets a line to itself.

    Text that already fits is returned unchanged as one line.
    """
    if not text:
        return []
    if len(text) <= max_length:
        return [text]

    lines: List[str] = []
    current = ""
    for word in text.split():
        if len(current) + len(word) + 1 <= max_length:
            current = "{} {}".format(current, word) if current else word
        else:
            if current:
                lines.append(current)
            current = word

    if current:
        lines.append(current)
    return lines


def wrap_text(text: str, max_length: int) -> str:
    """wrap_words() joined with newlines, ready for a cue body."""
    return "\n".join(wrap_words(text, max_length))
