"""Configuration constants, cleanup tuning, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Supported video formats, output format keys, API
defaults, and the dedup/segmentation thresholds are plain data, not
buried in logic, so they can be tuned and tested independently.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level dicts, tuples, and strings. CleanupConfig bundles the
tunable core thresholds in one frozen dataclass. load_api_key() gives a
clear error when the key is missing.

RULES:
- API key is loaded from .env via python-dotenv, never hardcoded
- All API defaults can be overridden via environment variables
- CleanupConfig defaults (0.8 / 5 / 10 / 20 / 30 / 30) are the values the
  cleanup engine has always used; change them only deliberately
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Supported video file extensions → MIME type sent to Gemini
# ---------------------------------------------------------------------------

SUPPORTED_VIDEO_FORMATS: dict[str, str] = {
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".flv": "video/x-flv",
    ".wmv": "video/x-ms-wmv",
    ".m4v": "video/x-m4v",
}

DEFAULT_MIME_TYPE = "video/mp4"

# ---------------------------------------------------------------------------
# Output formats and analysis types
# ---------------------------------------------------------------------------

OUTPUT_FORMATS: tuple[str, ...] = ("txt", "json", "srt", "vtt", "md")
DEFAULT_OUTPUT_FORMATS: tuple[str, ...] = ("txt", "srt", "md")

ANALYSIS_TYPES: tuple[str, ...] = (
    "summary", "topics", "sentiment", "speakers", "full", "detailed",
)
DEFAULT_ANALYSIS_TYPE = "detailed"

# ---------------------------------------------------------------------------
# API configuration defaults
# ---------------------------------------------------------------------------

GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
MAX_FILE_SIZE_MB = float(os.getenv("MAX_FILE_SIZE_MB", "20"))
DEFAULT_MAX_LINE_LENGTH = int(os.getenv("DEFAULT_MAX_LINE_LENGTH", "80"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def load_api_key() -> str:
    """Load the Gemini API key from the environment.

    WHY: The API key is required for all Gemini calls. Loading it from
    the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("GEMINI_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Gemini API key not configured. "
            "Add GEMINI_API_KEY to the .env file in the app folder."
        )
    return key


def configure_logging(level: str | None = None) -> None:
    """Install a basic stderr handler for CLI and server entry points."""
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Cleanup engine tuning
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CleanupConfig:
    """Thresholds for the dedup filter and segmenter.

    WHY: The similarity threshold, lookback window, noise cutoff, and
    synthetic durations used to be scattered literals. Grouping them
    makes each one tunable per call and testable on its own.

    RULES:
    - similarity_threshold: a line is a near-duplicate when the Jaccard
      score is strictly greater than this value (0.0–1.0)
    - window_size: how many recently kept lines are compared (>= 1)
    - min_content_length: content of this length or shorter is noise
    - min_exact_match_length: exact-set hits only count for normalized
      lines longer than this (line filter only)
    - trailing_segment_seconds: duration given to the last marker segment
    - paragraph_segment_seconds: duration of each synthetic paragraph segment
    """

    similarity_threshold: float = 0.8
    window_size: int = 5
    min_content_length: int = 10
    min_exact_match_length: int = 20
    trailing_segment_seconds: float = 30.0
    paragraph_segment_seconds: float = 30.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError(
                "similarity_threshold must be between 0 and 1, got {}".format(
                    self.similarity_threshold
                )
            )
        if self.window_size < 1:
            raise ValueError("window_size must be at least 1, got {}".format(self.window_size))
        if self.min_content_length < 0 or self.min_exact_match_length < 0:
            raise ValueError("length cutoffs must not be negative")
        if self.trailing_segment_seconds <= 0 or self.paragraph_segment_seconds <= 0:
            raise ValueError("segment durations must be positive")


DEFAULT_CLEANUP_CONFIG = CleanupConfig()
