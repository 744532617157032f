"""Markdown transcript document formatter.

WHY: A Markdown document is the readable deliverable: a header saying
how the transcript was produced, then the transcript broken into
headed sections that can be skimmed, linked, and pasted into wikis.

HOW: The header comes from the ProcessingReport. The body is one
"### Segment N [start - end]" heading per segment when a segment list is
available. With no segments, the cleaned text is re-split into
"### Section N" blocks: each line containing a timestamp marker starts
a new section and every following non-blank line joins it.

RULES:
- Segment ranges use the display clock ("M:SS" / "H:MM:SS")
- Blank lines are dropped inside fallback sections
- Document ends with a horizontal rule and a generator note
- Output suffix: "_transcript.md"
- Media type: "text/markdown"
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from gemini_transcript.core.ir import ProcessingReport, Segment, Transcript
from gemini_transcript.core.timecode import to_display_clock
from gemini_transcript.core.timestamps import MARKER_RE
from gemini_transcript.formatters.base import BaseFormatter, FormatterOutput

FOOTER = "---\n\n*Transcript generated using Gemini AI*\n"


def format_processed_time(timestamp: str) -> str:
    """Render an ISO-8601 timestamp as "YYYY-MM-DD HH:MM:SS" when possible."""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
    except ValueError:
        return timestamp


def _render_header(title: str, report: ProcessingReport) -> str:
    return (
        "# Video Transcript: {title}\n\n"
        "## Processing Information\n\n"
        "- **Video Size**: {size}\n"
        "- **Processing Method**: {method}\n"
        "- **Model Used**: {model}\n"
        "- **Language**: {language}\n"
        "- **Processed**: {processed}\n\n"
    ).format(
        title=title,
        size=report.video_size,
        method=report.processing_method,
        model=report.model,
        language=report.language,
        processed=format_processed_time(report.timestamp),
    )


def _render_segments(segments: List[Segment]) -> str:
    parts = []
    for index, segment in enumerate(segments, start=1):
        parts.append("### Segment {} [{} - {}]\n\n{}\n\n".format(
            index,
            to_display_clock(segment.start),
            to_display_clock(segment.end),
            segment.text.strip(),
        ))
    return "".join(parts)


def split_sections(cleaned_text: str) -> List[str]:
    """Group cleaned text into sections that each start at a marker line."""
    sections: List[List[str]] = []
    current: List[str] = []

    for line in cleaned_text.split("\n"):
        if MARKER_RE.search(line.strip()):
            if current:
                sections.append(current)
            current = [line]
        elif line.strip():
            current.append(line)

    if current:
        sections.append(current)
    return ["\n".join(lines).strip() for lines in sections]


def _render_sections(cleaned_text: str) -> str:
    return "".join(
        "### Section {}\n\n{}\n\n".format(index, body)
        for index, body in enumerate(split_sections(cleaned_text), start=1)
    )


class MarkdownFormatter(BaseFormatter):
    """Formatter that produces a Markdown transcript document."""

    suffix = "_transcript.md"

    @property
    def name(self) -> str:
        return "Markdown Document"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        content = _render_header(transcript.source_name, transcript.report)
        content += "## Transcript\n\n"
        if transcript.segments:
            content += _render_segments(transcript.segments)
        else:
            content += _render_sections(transcript.cleaned_text)
        content += FOOTER

        return [
            FormatterOutput(
                suffix=self.suffix,
                content=content,
                media_type="text/markdown",
            )
        ]
