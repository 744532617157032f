"""WebVTT caption formatter.

WHY: Browsers' <track> element only accepts WebVTT. Structure matches
the SRT output minus the index line, with "." before the milliseconds.

RULES:
- Document starts with "WEBVTT\\n\\n"
- Cue block: "<start> --> <end>\\n<wrapped text>\\n\\n"
- Same second-pass dedup as SRT
- Output suffix: "_transcript.vtt"
- Media type: "text/vtt"
"""

from __future__ import annotations

from typing import Iterable, List

from gemini_transcript.core.ir import Segment, Transcript
from gemini_transcript.core.timecode import to_web_clock
from gemini_transcript.formatters.base import BaseFormatter, FormatterOutput
from gemini_transcript.formatters.srt_captions import unique_segments
from gemini_transcript.formatters.wrap import wrap_text

VTT_HEADER = "WEBVTT\n\n"


def render_vtt(segments: Iterable[Segment], max_line_length: int) -> str:
    """Render segments as a WebVTT document."""
    parts = [VTT_HEADER]
    for segment in unique_segments(segments):
        parts.append("{} --> {}\n{}\n\n".format(
            to_web_clock(segment.start),
            to_web_clock(segment.end),
            wrap_text(segment.text.strip(), max_line_length),
        ))
    return "".join(parts)


class WebVTTFormatter(BaseFormatter):
    """Formatter that produces one WebVTT caption file."""

    suffix = "_transcript.vtt"

    @property
    def name(self) -> str:
        return "WebVTT Captions"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=render_vtt(transcript.segments, self.max_line_length),
                media_type="text/vtt",
            )
        ]
