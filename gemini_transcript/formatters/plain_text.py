"""Plain text transcript formatter.

WHY: Editors need a simple, readable transcript for review, archival,
and quick reference: no timecodes, just the cleaned text. This is the
simplest output format and the baseline proof that the pluggable
formatter pattern works.

HOW: Emits the cleaned text produced by the line filter. When the
cleaned text is empty but segments exist (a structured model result with
nothing the line filter kept), the segment texts are joined with blank
lines instead.

RULES:
- No timing information in the output
- Timestamp markers written by the model stay in the text as-is
- Output suffix: "_transcript.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from gemini_transcript.core.ir import Transcript
from gemini_transcript.formatters.base import BaseFormatter, FormatterOutput


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces the cleaned transcript as plain text."""

    suffix = "_transcript.txt"

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        content = transcript.cleaned_text
        if not content.strip() and transcript.segments:
            content = "\n\n".join(seg.text for seg in transcript.segments)

        return [
            FormatterOutput(
                suffix=self.suffix,
                content=content,
                media_type="text/plain",
            )
        ]
