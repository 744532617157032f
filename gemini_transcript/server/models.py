"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each endpoint pair (request + response) has its own model. Enums
represent closed sets like output format keys. Cleanup tuning fields
are shared through CleanupTuning so URL jobs and synchronous cleanup
accept the same knobs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- OutputFormat values match keys in gemini_transcript.formatters.FORMATTERS
- similarity_threshold is bounded to 0–1; window_size to >= 1
- CleanupRequest needs text or segments (a 422 otherwise)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from gemini_transcript.config import (
    DEFAULT_CLEANUP_CONFIG,
    DEFAULT_MAX_LINE_LENGTH,
    CleanupConfig,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class OutputFormat(str, Enum):
    """Available output format identifiers."""

    txt = "txt"
    json = "json"
    srt = "srt"
    vtt = "vtt"
    md = "md"


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


class SegmentModel(BaseModel):
    """One time-bounded transcript segment."""

    start: float = Field(ge=0, description="Start offset in seconds.")
    end: float = Field(ge=0, description="End offset in seconds.")
    text: str = Field(description="Segment text.")


class CleanupTuning(BaseModel):
    """Dedup and wrapping knobs shared by URL jobs and /cleanup."""

    output_formats: Optional[List[OutputFormat]] = Field(
        default=None,
        description="Output formats to generate. Defaults to txt, srt, md.",
    )
    max_line_length: int = Field(
        default=DEFAULT_MAX_LINE_LENGTH,
        ge=1,
        description="Maximum characters per subtitle line.",
    )
    similarity_threshold: float = Field(
        default=DEFAULT_CLEANUP_CONFIG.similarity_threshold,
        ge=0.0,
        le=1.0,
        description="Lines more similar than this to a recent line are dropped.",
    )
    window_size: int = Field(
        default=DEFAULT_CLEANUP_CONFIG.window_size,
        ge=1,
        description="How many recently kept lines are compared.",
    )

    def cleanup_config(self) -> CleanupConfig:
        return CleanupConfig(
            similarity_threshold=self.similarity_threshold,
            window_size=self.window_size,
        )


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TranscriptionUrlRequest(CleanupTuning):
    """Body of POST /transcriptions/url."""

    url: str = Field(description="HTTP(S) URL of the video to download and transcribe.")
    language: Optional[str] = Field(
        default=None,
        description="Expected spoken language, e.g. 'English'. Auto-detected when omitted.",
    )
    prompt: Optional[str] = Field(
        default=None,
        description="Additional instructions appended to the transcription prompt.",
    )
    enable_chunking: bool = Field(
        default=True,
        description="Use large-video settings for files above the size limit.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "url": "https://example.com/lecture.mp4",
                "language": "English",
                "output_formats": ["txt", "srt", "md"],
                "max_line_length": 42,
            }
        ]
    }}


class CleanupRequest(CleanupTuning):
    """Body of POST /cleanup: a saved model response to clean offline."""

    text: Optional[str] = Field(
        default=None,
        description="Raw model response text, with or without [MM:SS] markers.",
    )
    segments: Optional[List[SegmentModel]] = Field(
        default=None,
        description="Model response already split into segments.",
    )
    source_name: str = Field(
        default="transcript",
        description="Name used in document titles and output filenames.",
    )
    language: Optional[str] = Field(default=None, description="Language to record in the report.")

    @model_validator(mode="after")
    def _require_content(self) -> CleanupRequest:
        if self.text is None and self.segments is None:
            raise ValueError("Provide either 'text' or 'segments'")
        return self


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class RenderedOutput(BaseModel):
    """One rendered output file, returned inline."""

    filename: str = Field(description="Suggested filename.")
    format: str = Field(description="Format key that produced this file.")
    media_type: str = Field(description="MIME type of the content.")
    content: str = Field(description="File content.")


class CleanupResponse(BaseModel):
    """Result of POST /cleanup."""

    cleaned_text: str = Field(description="Text after near-duplicate line removal.")
    segments: List[SegmentModel] = Field(description="Ordered, deduplicated segments.")
    outputs: List[RenderedOutput] = Field(description="Rendered files, in requested order.")
    metadata: Dict[str, Any] = Field(description="How the result was processed.")


class JobResponse(BaseModel):
    """Transcription job status response.

    RULES:
    - error is only set when status is 'failed'
    - output_files is only populated when status is 'completed'
    """

    id: str = Field(description="Unique job identifier (UUID).")
    status: str = Field(description="Current job status.")
    source: str = Field(description="Uploaded filename or source URL.")
    created_at: float = Field(description="Job creation timestamp (Unix epoch seconds).")
    updated_at: float = Field(description="Last status change (Unix epoch seconds).")
    config: Dict[str, Any] = Field(description="Configuration used for this job.")
    error: Optional[str] = Field(
        default=None,
        description="Error message, only present when status is 'failed'.",
    )
    summary: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Processing summary, only present when status is 'completed'.",
    )
    output_files: Optional[List[str]] = Field(
        default=None,
        description="List of output filenames, only present when status is 'completed'.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "id": "550e8400e29b41d4a716446655440000",
                "status": "transcribing",
                "source": "lecture.mp4",
                "created_at": 1739959200.0,
                "updated_at": 1739959210.0,
                "config": {"language": None, "output_formats": ["txt", "srt", "md"]},
                "error": None,
                "summary": None,
                "output_files": None,
            }
        ]
    }}


class JobCreatedResponse(BaseModel):
    """Response returned when a new transcription job is submitted."""

    id: str = Field(description="Unique job identifier (UUID) for polling status.")
    status: str = Field(description="Initial job status (always 'pending').")
    source: str = Field(description="Uploaded filename or source URL.")


class FileInfo(BaseModel):
    """Metadata for a single output file."""

    filename: str = Field(description="Output filename.")
    media_type: str = Field(description="MIME type of the file content.")
    size: int = Field(description="File size in bytes.")


class FileListResponse(BaseModel):
    """List of output files for a completed job."""

    job_id: str = Field(description="The job ID these files belong to.")
    files: List[FileInfo] = Field(description="Available output files.")


class FormatInfo(BaseModel):
    """Description of an available output format."""

    key: str = Field(description="Format identifier used in API requests.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '_transcript.srt').")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
