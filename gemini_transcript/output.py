"""Output file writing and processing reports.

WHY: The CLI and the HTTP API both turn formatter outputs into files next
to the source video and finish with a processing report. Keeping path
resolution and report writing here means both entry points name files
identically and never overwrite earlier runs.

HOW: resolve_output_path() finds a free name for {stem}{suffix};
save_output() writes one FormatterOutput; build_report() measures the
video and records the processing method; write_outputs() runs the
formatters and finishes with write_processing_report(), which writes
{stem}_processing_report.json listing every saved file.

RULES:
- First attempt: {stem}{suffix} (e.g. lecture_transcript.srt)
- Conflict: counter inserted before the extension (lecture_transcript-2.srt)
- Counter starts at 2 and increments
- Files are written as UTF-8 text
- Video size is reported as "<MB, 2 decimals> MB"
- Method is "chunked" only when chunking is enabled and the file is
  larger than MAX_FILE_SIZE_MB
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from gemini_transcript.config import GEMINI_MODEL, MAX_FILE_SIZE_MB, SUPPORTED_VIDEO_FORMATS
from gemini_transcript.core.ir import ProcessingReport, Transcript
from gemini_transcript.formatters import FORMATTERS
from gemini_transcript.formatters.base import FormatterOutput

logger = logging.getLogger(__name__)

REPORT_SUFFIX = "_processing_report.json"


def resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Return a path for {stem}{suffix} in *output_dir* that doesn't exist yet."""
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    # "_transcript.srt" → ("_transcript", ".srt")
    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    """Write one formatter output and return where it landed."""
    path = resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    logger.debug("Wrote %s (%d chars)", path, len(output.content))
    return path


def download_filename(url: str) -> str:
    """Local filename for a video downloaded from *url*.

    Keeps the URL's own filename when it has a supported video
    extension, otherwise downloaded_video_<epoch ms>.mp4.
    """
    name = Path(urlparse(url).path).name
    if name and Path(name).suffix.lower() in SUPPORTED_VIDEO_FORMATS:
        return name
    return "downloaded_video_{}.mp4".format(int(time.time() * 1000))


def file_size_mb(path: Path) -> float:
    return path.stat().st_size / (1024 * 1024)


def choose_processing_method(
    size_mb: float,
    enable_chunking: bool = True,
    limit_mb: float = MAX_FILE_SIZE_MB,
) -> str:
    """'chunked' for oversized files when chunking is allowed, else 'direct'."""
    if enable_chunking and size_mb > limit_mb:
        return "chunked"
    return "direct"


def build_report(
    video_path: Path,
    method: str,
    language: Optional[str],
    formats: Iterable[str],
    model: str = GEMINI_MODEL,
    timestamp: Optional[str] = None,
) -> ProcessingReport:
    """Describe one run for headers, JSON output, and the report file.

    Args:
        video_path: Source video (or text file for offline cleanup).
        method: "direct", "chunked", or "text".
        language: Language the caller asked for; None → "auto-detected".
        formats: Output format keys requested.
        model: Model name recorded in the report.
        timestamp: ISO-8601 time; defaults to now (UTC).
    """
    video_path = Path(video_path)
    size = file_size_mb(video_path) if video_path.exists() else 0.0
    return ProcessingReport(
        video_path=str(video_path),
        video_size="{:.2f} MB".format(size),
        processing_method=method,
        model=model,
        language=language or "auto-detected",
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        output_formats=list(formats),
    )


def write_outputs(
    transcript: Transcript,
    format_keys: Iterable[str],
    max_line_length: int,
    stem: str,
    output_dir: Path,
    on_status: Optional[Callable[[str], None]] = None,
) -> Tuple[List[Path], Path]:
    """Render every requested format, save it, then write the report.

    Returns:
        (saved output paths in request order, processing report path)
    """
    saved_files: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key](max_line_length=max_line_length)
        if on_status:
            on_status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(transcript):
            saved_path = save_output(output, stem, output_dir)
            saved_files.append(saved_path)
            if on_status:
                on_status("  Saved: {}".format(saved_path.name))

    report_path = write_processing_report(transcript.report, saved_files, stem, output_dir)
    return saved_files, report_path


def write_processing_report(
    report: ProcessingReport,
    output_files: List[Path],
    stem: str,
    output_dir: Path,
) -> Path:
    """Write {stem}_processing_report.json and return its path.

    The report is the run metadata plus ``outputFiles`` and
    ``success: true``. An existing report from an earlier run is
    replaced, not numbered.
    """
    data = report.to_dict()
    data["outputFiles"] = [str(p) for p in output_files]
    data["success"] = True

    path = output_dir / "{}{}".format(stem, REPORT_SUFFIX)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info("Wrote processing report %s", path)
    return path
