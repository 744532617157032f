"""Markdown rendering for video analysis results.

WHY: Analysis runs return a JSON object whose keys depend on the
analysis type and on the model's mood. The Markdown view gives each key
its own heading so the result is readable without knowing the shape.

RULES:
- Top-level keys become "## Key" headings (first letter capitalised)
- String values are written verbatim; anything else as fenced JSON
- Non-dict results are written under a single "## Analysis" heading
"""

from __future__ import annotations

import json
from typing import Any


def render_analysis_markdown(
    data: Any,
    video_name: str,
    analysis_type: str,
    generated_at: str,
) -> str:
    markdown = "# Video Analysis: {}\n\n".format(video_name)
    markdown += "**Analysis Type**: {}\n".format(analysis_type)
    markdown += "**Generated**: {}\n\n".format(generated_at)

    if isinstance(data, dict):
        for key, value in data.items():
            heading = str(key)
            markdown += "## {}\n\n".format(heading[:1].upper() + heading[1:])
            if isinstance(value, str):
                markdown += "{}\n\n".format(value)
            else:
                markdown += "```json\n{}\n```\n\n".format(
                    json.dumps(value, indent=2, ensure_ascii=False)
                )
    else:
        markdown += "## Analysis\n\n{}\n\n".format(data)

    markdown += "---\n*Analysis generated using Gemini AI*\n"
    return markdown
