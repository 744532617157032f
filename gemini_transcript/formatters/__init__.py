"""Output formatter registry, a pluggable format hub.

WHY: The CLI and API layers need a single lookup to find the right
formatter by name. A central dict makes it trivial to add new formats:
create the formatter class, import it here, add one line.

HOW: FORMATTERS maps format keys to formatter *classes* (not instances).
Callers instantiate as needed:
``formatter = FORMATTERS["srt"](max_line_length=42)``.
render_outputs() runs a list of keys over one transcript.

RULES:
- Keys are the file extensions users ask for: txt, json, srt, vtt, md
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List

from gemini_transcript.config import DEFAULT_MAX_LINE_LENGTH
from gemini_transcript.formatters.json_report import JSONFormatter
from gemini_transcript.formatters.markdown import MarkdownFormatter
from gemini_transcript.formatters.plain_text import PlainTextFormatter
from gemini_transcript.formatters.srt_captions import SRTCaptionFormatter
from gemini_transcript.formatters.webvtt import WebVTTFormatter

if TYPE_CHECKING:
    from gemini_transcript.core.ir import Transcript
    from gemini_transcript.formatters.base import BaseFormatter, FormatterOutput

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "txt": PlainTextFormatter,
    "json": JSONFormatter,
    "srt": SRTCaptionFormatter,
    "vtt": WebVTTFormatter,
    "md": MarkdownFormatter,
}


def parse_format_keys(value: str | None, default: Iterable[str]) -> List[str]:
    """Split a comma-separated format list, raising ValueError on unknown keys."""
    if not value:
        return list(default)
    keys = [k.strip() for k in value.split(",") if k.strip()]
    for key in keys:
        if key not in FORMATTERS:
            raise ValueError(
                "Unknown output format '{}'. Available: {}".format(
                    key, ", ".join(sorted(FORMATTERS.keys()))
                )
            )
    return keys


def render_outputs(
    transcript: Transcript,
    format_keys: Iterable[str],
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
) -> List[FormatterOutput]:
    """Run each requested formatter over *transcript*, in order."""
    outputs: List[FormatterOutput] = []
    for key in format_keys:
        formatter = FORMATTERS[key](max_line_length=max_line_length)
        outputs.extend(formatter.format(transcript))
    return outputs
