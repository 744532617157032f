"""JSON transcript formatter.

WHY: Downstream tools (search indexers, editors' import scripts) want the
segments as data, together with the facts about how they were produced.

HOW: Serializes the processing report fields at the top level and the
transcription under a "transcription" key: cleaned text, segment dicts,
and the metadata recorded by the pipeline.

RULES:
- Two-space indented JSON, UTF-8, non-ASCII kept as-is
- Shape is described by transcript_report.schema.json next to this module
- Output suffix: "_transcript.json"
- Media type: "application/json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from gemini_transcript.core.ir import Transcript
from gemini_transcript.formatters.base import BaseFormatter, FormatterOutput

SCHEMA_PATH = Path(__file__).resolve().parent / "transcript_report.schema.json"


def transcript_to_dict(transcript: Transcript) -> Dict[str, Any]:
    data = transcript.report.to_dict()
    data["transcription"] = {
        "text": transcript.cleaned_text,
        "segments": [seg.to_dict() for seg in transcript.segments],
        "metadata": dict(transcript.metadata),
    }
    return data


class JSONFormatter(BaseFormatter):
    """Formatter that produces the transcript and report as JSON."""

    suffix = "_transcript.json"

    @property
    def name(self) -> str:
        return "JSON Transcript"

    def format(self, transcript: Transcript) -> List[FormatterOutput]:
        return [
            FormatterOutput(
                suffix=self.suffix,
                content=json.dumps(transcript_to_dict(transcript), indent=2, ensure_ascii=False),
                media_type="application/json",
            )
        ]
