"""Seconds → time-code string conversions.

RULES:
- Subtitle clock "HH:MM:SS,mmm": hours never wrap at 24 and are always at
  least two digits; milliseconds are truncated, not rounded
- Web clock is the subtitle clock with "." instead of ","
- Display clock "H:MM:SS" (or "M:SS" under an hour) for headings
- Negative offsets are clamped to zero
"""

from __future__ import annotations

import math


def _split(seconds: float) -> tuple[int, int, int, int]:
    seconds = max(0.0, float(seconds))
    hours = math.floor(seconds / 3600)
    minutes = math.floor((seconds % 3600) / 60)
    secs = math.floor(seconds % 60)
    millis = math.floor((seconds % 1) * 1000)
    return hours, minutes, secs, millis


def to_subtitle_clock(seconds: float) -> str:
    hours, minutes, secs, millis = _split(seconds)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, secs, millis)


def to_web_clock(seconds: float) -> str:
    return to_subtitle_clock(seconds).replace(",", ".")


def to_display_clock(seconds: float) -> str:
    hours, minutes, secs, _millis = _split(seconds)
    if hours > 0:
        return "{}:{:02d}:{:02d}".format(hours, minutes, secs)
    return "{}:{:02d}".format(minutes, secs)
