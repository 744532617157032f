"""Formatter contract shared by every transcript renderer.

WHY: The CLI, the HTTP API, and /cleanup all hand the same cleaned
Transcript to whichever renderers the user picked. A common base lets
them loop over format keys without knowing what SRT or Markdown need.

HOW: BaseFormatter declares the class-level ``suffix``, keeps the wrap
width, and requires ``name`` plus ``format()``. Renderers return
FormatterOutput records: suffix, text content, MIME type.

RULES:
- ``suffix`` starts with an underscore, e.g. ``"_transcript.srt"``
- Renderers never touch the filesystem; output.py writes the files
- ``format()`` returns a list; every current renderer returns one item
- max_line_length only matters to renderers that wrap cue text
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from gemini_transcript.config import DEFAULT_MAX_LINE_LENGTH
from gemini_transcript.core.ir import Transcript


@dataclass
class FormatterOutput:
    """Rendered content for one file.

    ``suffix`` is joined to the source stem by output.py, so
    ``"_transcript.vtt"`` becomes ``"lecture_transcript.vtt"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Base class for renderers listed in ``FORMATTERS``.

    A new format needs a module here with a subclass that sets
    ``suffix``, implements ``name`` and ``format()``, and one registry
    line in formatters/__init__.py.
    """

    #: Suffix of the file this formatter writes, e.g. "_transcript.srt"
    suffix: str = ""

    def __init__(self, max_line_length: int = DEFAULT_MAX_LINE_LENGTH) -> None:
        self.max_line_length = max_line_length

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name shown by GET /formats."""

    @abstractmethod
    def format(self, transcript: Transcript) -> list[FormatterOutput]:
        """Render *transcript* into one or more files."""
