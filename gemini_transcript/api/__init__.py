"""Gemini API client package: async HTTP interface to the Gemini model.

WHY: The converter needs to send videos to Gemini for transcription and
analysis, and to download videos from URLs. This package encapsulates
all network communication behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Response data is
parsed into typed dataclasses defined in models.py; prompt text lives in
prompts.py.

RULES:
- All HTTP calls go through this package (no direct httpx usage elsewhere)
- Authentication is via the x-goog-api-key header from config
"""

from gemini_transcript.api.client import (
    EmptyResponseError,
    GeminiAPIError,
    GeminiClient,
    GeminiTimeoutError,
    download_video,
)

__all__ = [
    "EmptyResponseError",
    "GeminiAPIError",
    "GeminiClient",
    "GeminiTimeoutError",
    "download_video",
]
