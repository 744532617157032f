"""Command-line interface for the Gemini Transcript Converter.

WHY: Users need a simple way to transcribe videos from the terminal, and
to re-run cleanup on a saved model response without paying for another
model call. The CLI wires together file validation, the Gemini client,
the cleanup pipeline, the formatters, and file saving behind four
subcommands.

HOW: Uses argparse subparsers:
  transcribe VIDEO   — send a local video to Gemini, write outputs
  url URL            — download a video, then transcribe it
  clean TEXT_FILE    — run dedup/segmentation offline on saved text
  analyze VIDEO      — ask Gemini for a structured analysis
Async work runs via asyncio.run(). Status messages go to stderr; output
files are saved next to the source (or to --output-dir).

RULES:
- Validates the video extension against SUPPORTED_VIDEO_FORMATS before any API call
- --formats: comma-separated formatter keys (default: txt,srt,md)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (_transcript-2.srt)
- Every transcription run ends with {stem}_processing_report.json
- Status output goes to stderr (not stdout)
- Exit code 1 on errors, 130 on Ctrl-C
- url deletes the downloaded video unless --keep-video is given
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import httpx

from gemini_transcript.api.client import (
    EmptyResponseError,
    GeminiAPIError,
    GeminiClient,
    GeminiTimeoutError,
    download_video,
)
from gemini_transcript.config import (
    ANALYSIS_TYPES,
    DEFAULT_ANALYSIS_TYPE,
    DEFAULT_CLEANUP_CONFIG,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_OUTPUT_FORMATS,
    GEMINI_MODEL,
    SUPPORTED_VIDEO_FORMATS,
    CleanupConfig,
    configure_logging,
)
from gemini_transcript.core.ir import Transcript
from gemini_transcript.core.pipeline import build_transcript, coerce_result
from gemini_transcript.formatters import FORMATTERS, parse_format_keys
from gemini_transcript.formatters.analysis import render_analysis_markdown
from gemini_transcript.output import (
    build_report,
    choose_processing_method,
    download_filename,
    file_size_mb,
    write_outputs,
)

logger = logging.getLogger(__name__)


class CLIError(Exception):
    """A user-facing error: printed as 'Error: ...' and exit code 1."""


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.

    RULES:
    - All status messages go to stderr
    - Always flush after writing
    """
    print(msg, file=sys.stderr, flush=True)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _validate_video(path_arg: str) -> Path:
    video_path = Path(path_arg).resolve()
    if not video_path.is_file():
        raise CLIError("File not found: {}".format(video_path))

    ext = video_path.suffix.lower()
    if ext not in SUPPORTED_VIDEO_FORMATS:
        raise CLIError(
            "Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_VIDEO_FORMATS))
            )
        )
    return video_path


def _resolve_output_dir(output_dir: Optional[str], default: Path) -> Path:
    """Return the output directory, creating it when needed."""
    path = Path(output_dir).resolve() if output_dir else default
    if path.exists() and not path.is_dir():
        raise CLIError("Output path is not a directory: {}".format(path))
    path.mkdir(parents=True, exist_ok=True)
    return path


def _format_keys(value: Optional[str]) -> List[str]:
    try:
        return parse_format_keys(value, DEFAULT_OUTPUT_FORMATS)
    except ValueError as exc:
        raise CLIError(str(exc)) from exc


def _cleanup_config(args: argparse.Namespace) -> CleanupConfig:
    """Build a CleanupConfig from --similarity-threshold / --window-size."""
    threshold = getattr(args, "similarity_threshold", None)
    window = getattr(args, "window_size", None)
    if threshold is None and window is None:
        return DEFAULT_CLEANUP_CONFIG
    try:
        return CleanupConfig(
            similarity_threshold=(
                threshold if threshold is not None else DEFAULT_CLEANUP_CONFIG.similarity_threshold
            ),
            window_size=window if window is not None else DEFAULT_CLEANUP_CONFIG.window_size,
        )
    except ValueError as exc:
        raise CLIError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Output writing
# ---------------------------------------------------------------------------


def _write_outputs(
    transcript: Transcript,
    format_keys: List[str],
    max_line_length: int,
    stem: str,
    output_dir: Path,
) -> List[Path]:
    """Run each formatter and save its files; return the saved paths."""
    _status("Formatting output...")
    saved_files, report_path = write_outputs(
        transcript, format_keys, max_line_length, stem, output_dir, on_status=_status
    )
    _status("  Report: {}".format(report_path.name))
    return saved_files


def _summarize(transcript: Transcript, saved_files: List[Path], output_dir: Path) -> None:
    report = transcript.report
    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    _status("  Size: {}  Method: {}  Language: {}".format(
        report.video_size, report.processing_method, report.language
    ))
    _status("  {} segments, {} characters of cleaned text".format(
        len(transcript.segments), len(transcript.cleaned_text)
    ))
    for f in saved_files:
        _status("  {}".format(f.name))


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


async def _transcribe_to_files(
    video_path: Path,
    args: argparse.Namespace,
    output_dir: Path,
) -> List[Path]:
    """Transcribe *video_path* and write every requested output."""
    format_keys = _format_keys(args.formats)
    config = _cleanup_config(args)

    size_mb = file_size_mb(video_path)
    method = choose_processing_method(size_mb, enable_chunking=not args.no_chunking)
    _status("Video size: {:.2f} MB".format(size_mb))
    if method == "chunked":
        _status("File is large. Using large-video settings...")

    async with GeminiClient() as client:
        result = await client.transcribe_video(
            video_path,
            language=args.language,
            custom_prompt=args.prompt,
            large=method == "chunked",
            on_status=_status,
        )
        model = client.model

    report = build_report(video_path, method, args.language, format_keys, model=model)
    transcript = build_transcript(result, report, video_path.stem, config)

    saved_files = _write_outputs(
        transcript, format_keys, args.max_line_length, video_path.stem, output_dir
    )
    _summarize(transcript, saved_files, output_dir)
    return saved_files


async def _run_transcribe(args: argparse.Namespace) -> None:
    video_path = _validate_video(args.video)
    output_dir = _resolve_output_dir(args.output_dir, video_path.parent)
    _status("Transcribing: {}".format(video_path))
    await _transcribe_to_files(video_path, args, output_dir)


async def _run_url(args: argparse.Namespace) -> None:
    output_dir = _resolve_output_dir(args.output_dir, Path.cwd())
    video_path = output_dir / download_filename(args.url)

    await download_video(args.url, video_path, on_status=_status)
    try:
        await _transcribe_to_files(video_path, args, output_dir)
    finally:
        if args.keep_video:
            _status("Video saved at: {}".format(video_path))
        else:
            video_path.unlink(missing_ok=True)
            _status("Cleaned up downloaded video file.")


def _run_clean(args: argparse.Namespace) -> None:
    """Re-run cleanup on a saved model response (.txt or .json)."""
    text_path = Path(args.text_file).resolve()
    if not text_path.is_file():
        raise CLIError("File not found: {}".format(text_path))

    output_dir = _resolve_output_dir(args.output_dir, text_path.parent)
    format_keys = _format_keys(args.formats)
    config = _cleanup_config(args)

    raw = text_path.read_text(encoding="utf-8")
    if text_path.suffix.lower() == ".json":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CLIError("Invalid JSON in {}: {}".format(text_path, exc)) from exc
        # A previous _transcript.json keeps the model output under "transcription"
        if isinstance(data, dict) and isinstance(data.get("transcription"), dict):
            data = data["transcription"]
        result = coerce_result(data, config)
    else:
        result = coerce_result(raw, config)

    _status("Cleaning: {}".format(text_path))
    report = build_report(text_path, "text", args.language, format_keys, model=GEMINI_MODEL)
    transcript = build_transcript(result, report, text_path.stem, config)

    saved_files = _write_outputs(
        transcript, format_keys, args.max_line_length, text_path.stem, output_dir
    )
    _summarize(transcript, saved_files, output_dir)


async def _run_analyze(args: argparse.Namespace) -> None:
    video_path = _validate_video(args.video)
    output_dir = _resolve_output_dir(args.output_dir, video_path.parent)
    stem = video_path.stem

    _status("Starting {} analysis of: {}".format(args.type, video_path))
    async with GeminiClient() as client:
        data = await client.analyze_video(
            video_path,
            analysis_type=args.type,
            include_transcript=not args.no_transcript,
            on_status=_status,
        )
        model = client.model

    json_path = output_dir / "{}_analysis.json".format(stem)
    md_path = output_dir / "{}_analysis.md".format(stem)
    json_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    md_path.write_text(
        render_analysis_markdown(
            data, stem, args.type, datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        ),
        encoding="utf-8",
    )

    _status("")
    _status("Analysis completed and saved (model: {})".format(model))
    _status("  {}".format(json_path.name))
    _status("  {}".format(md_path.name))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_output_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: next to the input).",
    )
    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: {}.".format(
                 ", ".join(sorted(FORMATTERS.keys())), ",".join(DEFAULT_OUTPUT_FORMATS)
             ),
    )
    parser.add_argument(
        "--max-line-length",
        type=int,
        default=DEFAULT_MAX_LINE_LENGTH,
        help="Maximum characters per subtitle line (default: %(default)s).",
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Expected spoken language, e.g. 'English' (default: auto-detect).",
    )


def _add_cleanup_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--similarity-threshold",
        type=float,
        default=None,
        help="Near-duplicate threshold, 0-1 (default: {}).".format(
            DEFAULT_CLEANUP_CONFIG.similarity_threshold
        ),
    )
    parser.add_argument(
        "--window-size",
        type=int,
        default=None,
        help="How many recent lines to compare against (default: {}).".format(
            DEFAULT_CLEANUP_CONFIG.window_size
        ),
    )


def _add_transcription_args(parser: argparse.ArgumentParser) -> None:
    _add_output_args(parser)
    _add_cleanup_args(parser)
    parser.add_argument(
        "--prompt",
        default=None,
        help="Additional instructions for the transcription prompt.",
    )
    parser.add_argument(
        "--no-chunking",
        action="store_true",
        help="Always send the video as one direct request.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without running anything.
    """
    parser = argparse.ArgumentParser(
        prog="gemini_transcript",
        description="Transcribe videos with Gemini and produce clean, deduplicated "
                    "transcripts (plain text, JSON, SRT, WebVTT, Markdown).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: LOG_LEVEL env var or INFO).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    transcribe = subparsers.add_parser("transcribe", help="Transcribe a local video file.")
    transcribe.add_argument("video", help="Path to the video file.")
    _add_transcription_args(transcribe)

    url = subparsers.add_parser("url", help="Download a video from a URL and transcribe it.")
    url.add_argument("url", help="URL of the video to download.")
    _add_transcription_args(url)
    url.add_argument(
        "--keep-video",
        action="store_true",
        help="Keep the downloaded video file.",
    )

    clean = subparsers.add_parser(
        "clean", help="Clean up a saved transcription (.txt or .json) without calling Gemini."
    )
    clean.add_argument("text_file", help="Path to the saved transcription.")
    _add_output_args(clean)
    _add_cleanup_args(clean)

    analyze = subparsers.add_parser("analyze", help="Analyze video content with Gemini.")
    analyze.add_argument("video", help="Path to the video file.")
    analyze.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save analysis files (default: next to the video).",
    )
    analyze.add_argument(
        "--type",
        choices=ANALYSIS_TYPES,
        default=DEFAULT_ANALYSIS_TYPE,
        help="Type of analysis (default: %(default)s).",
    )
    analyze.add_argument(
        "--no-transcript",
        action="store_true",
        help="Leave the transcript out of the analysis.",
    )

    return parser


def run_command(args: argparse.Namespace) -> None:
    """Dispatch a parsed command. Raises on failure."""
    if args.command == "transcribe":
        asyncio.run(_run_transcribe(args))
    elif args.command == "url":
        asyncio.run(_run_url(args))
    elif args.command == "clean":
        _run_clean(args)
    elif args.command == "analyze":
        asyncio.run(_run_analyze(args))
    else:
        raise CLIError("Unknown command: {}".format(args.command))


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        run_command(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (CLIError, ValueError, GeminiAPIError, GeminiTimeoutError, EmptyResponseError) as e:
        # ValueError covers config errors (missing API key, bad thresholds)
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)
    except (httpx.HTTPError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
