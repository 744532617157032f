"""End-to-end integration test with the real Gemini API.

WHY: Unit tests replace the HTTP layer, so only a real call confirms the
request shape Gemini accepts and that its actual output survives cleanup
and formatting.

HOW: Sends a short sample video from test-assets/ to Gemini, builds the
Transcript, and renders every format. Skipped automatically when
GEMINI_API_KEY is not set or no sample video is present.

RULES:
- Never runs in a plain `pytest` invocation without credentials
- Validates the JSON output against the bundled schema
- Writes only into tmp_path
"""

import asyncio
import json
import os
from pathlib import Path

import pytest

_HAS_API_KEY = bool(os.getenv("GEMINI_API_KEY", "").strip())

_TEST_ASSETS = Path(__file__).resolve().parent.parent / "test-assets"


def _get_test_video():
    """Return the first sample video in test-assets/, if any."""
    if not _TEST_ASSETS.is_dir():
        return None
    for path in sorted(_TEST_ASSETS.iterdir()):
        if path.suffix.lower() in (".mp4", ".webm", ".mov"):
            return path
    return None


@pytest.mark.skipif(
    not _HAS_API_KEY,
    reason="GEMINI_API_KEY not set in environment, skipping real API test",
)
@pytest.mark.skipif(
    _get_test_video() is None,
    reason="No sample video found in test-assets/",
)
class TestRealAPIEndToEnd:

    def test_real_api_pipeline(self, tmp_path):
        """Transcribe → clean → render every format."""
        import jsonschema

        from gemini_transcript.api.client import GeminiClient
        from gemini_transcript.config import OUTPUT_FORMATS
        from gemini_transcript.core.pipeline import build_transcript
        from gemini_transcript.formatters.json_report import SCHEMA_PATH
        from gemini_transcript.output import build_report, write_outputs

        video_path = _get_test_video()

        async def _run():
            async with GeminiClient() as client:
                result = await client.transcribe_video(video_path)
                return result, client.model

        result, model = asyncio.run(_run())
        assert result.text.strip(), "Gemini returned no text"

        report = build_report(video_path, "direct", None, list(OUTPUT_FORMATS), model=model)
        transcript = build_transcript(result, report, video_path.stem)
        assert transcript.segments, "no segments derived from the response"

        saved, report_path = write_outputs(
            transcript, list(OUTPUT_FORMATS), 42, video_path.stem, tmp_path
        )
        assert len(saved) == len(OUTPUT_FORMATS)
        assert report_path.exists()

        by_suffix = {p.suffix: p for p in saved}
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(json.loads(by_suffix[".json"].read_text(encoding="utf-8")), schema)

        srt = by_suffix[".srt"].read_text(encoding="utf-8")
        assert srt.startswith("1\n")
        assert " --> " in srt
        assert by_suffix[".vtt"].read_text(encoding="utf-8").startswith("WEBVTT\n\n")
