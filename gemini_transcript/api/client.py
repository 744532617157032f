"""Async HTTP client for the Gemini generateContent API.

WHY: The converter needs to send a video plus a prompt to Gemini and get
text back, for transcription and for analysis. This module encapsulates
the request format, authentication, timeouts, and error mapping behind a
single client class so callers (CLI, HTTP API, tests) don't need to know
HTTP details.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. GeminiClient is an
async context manager. Enter it to get an authenticated client, exit to
close the connection pool. The video is sent inline as base64 next to
the prompt. Transcription answers come back as a RawTextResult for the
cleanup pipeline; analysis answers are parsed as JSON.

RULES:
- Always use the async context manager (async with GeminiClient() as client:)
- The API key goes in the x-goog-api-key header, never in the URL
- Direct transcription: 180s timeout, 16384 output tokens
- Large-video transcription: 300s timeout, 32768 output tokens
- 400 → GeminiAPIError with the API's own message; 403 → invalid key
- Timeouts → GeminiTimeoutError; no candidate text → EmptyResponseError
- Status callback (on_status) is optional; when provided, called with status strings
"""

from __future__ import annotations

import base64
import json
import logging
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from gemini_transcript.api.models import (
    GenerateContentResponse,
    GenerationConfig,
    error_message_from,
)
from gemini_transcript.api.prompts import build_analysis_prompt, build_transcription_prompt
from gemini_transcript.config import (
    DEFAULT_MIME_TYPE,
    GEMINI_BASE_URL,
    GEMINI_MODEL,
    SUPPORTED_VIDEO_FORMATS,
    load_api_key,
)
from gemini_transcript.core.ir import RawTextResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_DIRECT_TIMEOUT_S = 180.0
_LARGE_TIMEOUT_S = 300.0
_DOWNLOAD_TIMEOUT_S = 300.0
_CONNECT_TIMEOUT_S = 30.0

_DIRECT_MAX_TOKENS = 16384
_LARGE_MAX_TOKENS = 32768

_JSON_FENCE_RE = re.compile(r"^```(?:json)?\s*\n(.*)\n```\s*$", re.DOTALL)


class GeminiAPIError(Exception):
    """Raised when the Gemini API returns an error response.

    RULES:
    - Always include status_code and message
    - message is the API's error.message when present, else the body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Gemini API error {status_code}: {message}")


class GeminiTimeoutError(TimeoutError):
    """Raised when a Gemini request takes longer than its timeout."""


class EmptyResponseError(Exception):
    """Raised when Gemini answers without any candidate text."""


def mime_type_for(path: Path | str) -> str:
    """MIME type for a video path, by extension; unknown → video/mp4."""
    return SUPPORTED_VIDEO_FORMATS.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def parse_analysis_text(text: str, analysis_type: str) -> dict[str, Any]:
    """Parse an analysis answer as JSON, tolerating a ```json fence.

    Answers that aren't a JSON object are wrapped as
    ``{"analysis": text, "type": analysis_type}``.
    """
    candidate = text.strip()
    fenced = _JSON_FENCE_RE.match(candidate)
    if fenced:
        candidate = fenced.group(1)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return {"analysis": text, "type": analysis_type}
    if not isinstance(data, dict):
        return {"analysis": data, "type": analysis_type}
    return data


class GeminiClient:
    """Async client for Gemini video transcription and analysis.

    WHY: Provides a clean, typed interface for the two calls the converter
    makes. Handles auth, request shape, timeouts, and error wrapping.

    RULES:
    - Use as: async with GeminiClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url defaults to GEMINI_BASE_URL, model to GEMINI_MODEL
    - transport is for tests (httpx.MockTransport); None uses the network
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or GEMINI_BASE_URL).rstrip("/")
        self._model = model or GEMINI_MODEL
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def model(self) -> str:
        return self._model

    async def __aenter__(self) -> GeminiClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "x-goog-api-key": self._api_key,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(_DIRECT_TIMEOUT_S, connect=_CONNECT_TIMEOUT_S),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "GeminiClient must be used as an async context manager: "
                "async with GeminiClient() as client: ..."
            )
        return self._client

    # ------------------------------------------------------------------
    # Raw call
    # ------------------------------------------------------------------

    async def generate_content(
        self,
        parts: list[dict[str, Any]],
        generation_config: GenerationConfig,
        timeout_s: float = _DIRECT_TIMEOUT_S,
    ) -> GenerateContentResponse:
        """POST models/{model}:generateContent and parse the answer.

        Args:
            parts: Request parts (text prompt, inline video data).
            generation_config: Sampling parameters.
            timeout_s: Read timeout for this request.

        Returns:
            The parsed response.

        Raises:
            GeminiAPIError: Non-200 status.
            GeminiTimeoutError: The request timed out.
        """
        client = self._ensure_client()
        body = {
            "contents": [{"parts": parts}],
            "generationConfig": generation_config.to_dict(),
        }

        try:
            resp = await client.post(
                f"/models/{self._model}:generateContent",
                json=body,
                timeout=httpx.Timeout(timeout_s, connect=_CONNECT_TIMEOUT_S),
            )
        except httpx.TimeoutException as exc:
            raise GeminiTimeoutError(
                f"Request timeout - video processing took longer than {timeout_s:.0f}s. "
                "Try enabling chunking or reducing video size."
            ) from exc

        if resp.status_code != 200:
            raise _error_for(resp)

        return GenerateContentResponse.from_dict(resp.json())

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    async def transcribe_video(
        self,
        video_path: Path,
        language: str | None = None,
        custom_prompt: str | None = None,
        large: bool = False,
        on_status: Callable[[str], None] | None = None,
    ) -> RawTextResult:
        """Transcribe a video and return the model's raw text.

        WHY: The raw text still has duplicates and loose markers; cleanup
        happens in core.pipeline, not here, so the same text can be
        re-cleaned later with different thresholds.

        Args:
            video_path: Path to the video file.
            language: Expected spoken language, if known.
            custom_prompt: Extra instructions appended to the prompt.
            large: Use the large-video prompt, token budget, and timeout.
            on_status: Optional callback for status updates.

        Returns:
            RawTextResult with the model's answer.
        """
        video_path = Path(video_path)
        prompt = build_transcription_prompt(language, custom_prompt, large=large)
        config = GenerationConfig(
            temperature=0.1,
            max_output_tokens=_LARGE_MAX_TOKENS if large else _DIRECT_MAX_TOKENS,
        )

        if on_status:
            on_status("Sending transcription request to Gemini...")
        logger.info("Transcribing %s with %s (large=%s)", video_path.name, self._model, large)

        response = await self.generate_content(
            [{"text": prompt}, _inline_video(video_path)],
            config,
            timeout_s=_LARGE_TIMEOUT_S if large else _DIRECT_TIMEOUT_S,
        )
        text = response.text
        if text is None:
            raise EmptyResponseError("No response from Gemini API")

        if on_status:
            on_status("Transcription response received.")
        logger.info("Received %d characters for %s", len(text), video_path.name)
        return RawTextResult(text=text)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def analyze_video(
        self,
        video_path: Path,
        analysis_type: str = "detailed",
        include_transcript: bool = True,
        on_status: Callable[[str], None] | None = None,
    ) -> dict[str, Any]:
        """Ask Gemini for a structured analysis of a video.

        Returns:
            The parsed JSON answer, or {"analysis": text, "type": ...}
            when the answer isn't JSON.
        """
        video_path = Path(video_path)
        prompt = build_analysis_prompt(analysis_type, include_transcript)
        config = GenerationConfig(
            temperature=0.3,
            max_output_tokens=_DIRECT_MAX_TOKENS,
            top_p=None,
            top_k=None,
        )

        if on_status:
            on_status("Sending {} analysis request to Gemini...".format(analysis_type))

        response = await self.generate_content(
            [{"text": prompt}, _inline_video(video_path)],
            config,
        )
        text = response.text
        if text is None:
            raise EmptyResponseError("No response from Gemini API")
        return parse_analysis_text(text, analysis_type)


# ---------------------------------------------------------------------------
# Helpers (module-private)
# ---------------------------------------------------------------------------


def _inline_video(video_path: Path) -> dict[str, Any]:
    data = base64.b64encode(video_path.read_bytes()).decode("ascii")
    return {"inline_data": {"mime_type": mime_type_for(video_path), "data": data}}


def _error_for(resp: httpx.Response) -> GeminiAPIError:
    try:
        api_message = error_message_from(resp.json())
    except ValueError:
        api_message = None

    if resp.status_code == 400:
        return GeminiAPIError(400, api_message or "Invalid request - video may be too large")
    if resp.status_code == 403:
        return GeminiAPIError(403, "Invalid Gemini API key or insufficient permissions")
    return GeminiAPIError(resp.status_code, api_message or resp.text)


async def download_video(
    url: str,
    dest_path: Path,
    on_status: Callable[[str], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """Stream a video from *url* to *dest_path*.

    RULES:
    - Follows redirects; 300s read timeout
    - Non-2xx responses raise httpx.HTTPStatusError
    - A partially written file is removed when the download fails
    """
    dest_path = Path(dest_path)
    if on_status:
        on_status("Downloading video from: {}".format(url))

    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=httpx.Timeout(_DOWNLOAD_TIMEOUT_S, connect=_CONNECT_TIMEOUT_S),
            transport=transport,
        ) as client:
            async with client.stream("GET", url) as resp:
                resp.raise_for_status()
                with open(dest_path, "wb") as f:
                    async for chunk in resp.aiter_bytes():
                        f.write(chunk)
    except BaseException:
        dest_path.unlink(missing_ok=True)
        raise

    if on_status:
        on_status("Download completed.")
    logger.info("Downloaded %s to %s", url, dest_path)
    return dest_path
