"""SRT subtitle formatter.

WHY: SubRip is the lowest-common-denominator subtitle format; every
player and editor reads it. Cues come straight from the segment list.

HOW: unique_segments() runs a second exact-match dedup pass over the
segments (a formatter may be handed a segment list that never went
through the segmenter), then each surviving segment becomes one cue,
numbered contiguously from 1, with its text word-wrapped.

RULES:
- Cue block: "<index>\\n<start> --> <end>\\n<wrapped text>\\n\\n"
- Time codes "HH:MM:SS,mmm", hours unbounded
- Segments with empty text are skipped and don't consume an index
- Output suffix: "_transcript.srt"
- Media type: "application/x-subrip"
"""

from __future__ import annotations

from typing import Iterable, List

from gemini_transcript.core.ir import Segment, Transcript
from gemini_transcript.core.similarity import normalize
from gemini_transcript.core.timecode import to_subtitle_clock
from gemini_transcript.formatters.base import BaseFormatter, FormatterOutput
from gemini_transcript.formatters.wrap import wrap_text


def unique_segments(segments: Iterable[Segment]) -> List[Segment]:
    """Drop empty segments and exact normalized-text repeats, keeping order."""
    seen = set()
    unique: List[Segment] = []
    for segment in segments:
        text = segment.text.strip()
        if not text:
            continue
        key = normalize(text)
        if key in seen:
            continue
        seen.add(key)
        unique.append(segment)
    return unique


def render_srt(segments: Iterable[Segment], max_line_length: int) -> str:
    """Render segments as an SRT document."""
    blocks: List[str] = []
    for index, segment in enumerate(unique_segments(segments), start=1):
        blocks.append("{}\n{} --> {}\n{}\n\n".format(
            index,
            to_subtitle_clock(segment.start),
            to_subtitle_clock(segment.end),
            wrap_text(segment.text.strip(), max_line_length),
        ))
    return "".join(blocks)


class SRTCaptionFormatter(BaseFormatter):
    """Formatter that produces one SRT subtitle file."""

    suffix = "_transcript.srt"

    @property
    def name(self) -> str:
        return "SRT Subtitles"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=render_srt(transcript.segments, self.max_line_length),
                media_type="application/x-subrip",
            )
        ]
