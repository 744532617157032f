"""FastAPI application with transcription API routes and OpenAPI docs.

WHY: Other tools (editors' scripts, automation flows, curl) need an HTTP
way to submit videos for transcription, poll for status, download the
rendered files, and re-clean a saved model response without touching
the terminal. FastAPI provides OpenAPI docs, request validation, and
background task support.

HOW: Upload and URL submissions create a job and run the Gemini pipeline
in the background (download → transcribe → clean → render). POST
/cleanup runs the cleanup engine synchronously and returns every
rendered format inline. Remaining endpoints poll jobs, list and download
files, delete jobs, and describe formats.

RULES:
- Error responses use the ErrorResponse schema
- Background work uses FastAPI BackgroundTasks
- The job store is a module-level singleton; expired jobs are swept
  every 5 minutes
- Upload validation checks the extension against SUPPORTED_VIDEO_FORMATS
- Unknown formats or bad tuning → 400; job limit → 429
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import BackgroundTasks, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from gemini_transcript import __version__
from gemini_transcript.api.client import GeminiClient, download_video
from gemini_transcript.config import (
    DEFAULT_CLEANUP_CONFIG,
    DEFAULT_MAX_LINE_LENGTH,
    DEFAULT_OUTPUT_FORMATS,
    GEMINI_MODEL,
    SUPPORTED_VIDEO_FORMATS,
    CleanupConfig,
)
from gemini_transcript.core.ir import ProcessingReport, Segment, StructuredSegmentsResult
from gemini_transcript.core.pipeline import build_transcript, coerce_result
from gemini_transcript.formatters import FORMATTERS, parse_format_keys
from gemini_transcript.output import (
    build_report,
    choose_processing_method,
    download_filename,
    file_size_mb,
    write_outputs,
)
from gemini_transcript.server.jobs import Job, JobStatus, JobStore
from gemini_transcript.server.models import (
    CleanupRequest,
    CleanupResponse,
    ErrorResponse,
    FileInfo,
    FileListResponse,
    FormatInfo,
    HealthResponse,
    JobCreatedResponse,
    JobResponse,
    RenderedOutput,
    SegmentModel,
    TranscriptionUrlRequest,
)

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 300

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

job_store = JobStore()


async def _periodic_cleanup() -> None:
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        job_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Gemini Transcript Converter API",
    description=(
        "REST API for transcribing videos with Gemini and producing clean, "
        "deduplicated transcripts (plain text, JSON, SRT, WebVTT, Markdown). "
        "Submit a file or URL, poll for status, and download results, or "
        "clean a saved model response synchronously."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _job_to_response(job: Job) -> JobResponse:
    completed = job.status == JobStatus.COMPLETED
    return JobResponse(
        id=job.id,
        status=job.status.value,
        source=job.source,
        created_at=job.created_at,
        updated_at=job.updated_at,
        config=job.config,
        error=job.error,
        summary=job.summary if completed else None,
        output_files=job.output_files if completed and job.output_files else None,
    )


def _validate_file_extension(filename: str) -> None:
    ext = Path(filename).suffix.lower()
    if ext not in SUPPORTED_VIDEO_FORMATS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(SUPPORTED_VIDEO_FORMATS))
            ),
        )


def _parse_formats(value: Optional[str]) -> List[str]:
    try:
        return parse_format_keys(value, DEFAULT_OUTPUT_FORMATS)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _cleanup_config(similarity_threshold: Optional[float], window_size: Optional[int]) -> CleanupConfig:
    try:
        return CleanupConfig(
            similarity_threshold=(
                similarity_threshold
                if similarity_threshold is not None
                else DEFAULT_CLEANUP_CONFIG.similarity_threshold
            ),
            window_size=window_size if window_size is not None else DEFAULT_CLEANUP_CONFIG.window_size,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _create_job(source: str, config: dict) -> Job:
    try:
        return job_store.create_job(source=source, config=config)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))


def _get_job_or_404(job_id: str) -> Job:
    job = job_store.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return job


def _require_completed(job: Job) -> None:
    if job.status != JobStatus.COMPLETED:
        raise HTTPException(
            status_code=409,
            detail="Job is not completed (current status: {}).".format(job.status.value),
        )


async def _run_transcription_pipeline(job_id: str, store: JobStore) -> None:
    """Download (URL jobs), transcribe, clean, and render one job.

    RULES:
    - Status moves through downloading → transcribing → rendering
    - Any exception marks the job failed with the error text
    - Downloaded videos are removed once transcribed; uploads stay in
      the work dir until the job is deleted or expires
    """
    job = store.get_job(job_id)
    if job is None:
        return

    config = job.config
    url = config.get("url")
    video_path = job.work_dir / config["filename"]

    try:
        if url:
            store.update_job(job_id, status=JobStatus.DOWNLOADING)
            await download_video(url, video_path)

        store.update_job(job_id, status=JobStatus.TRANSCRIBING)
        method = choose_processing_method(
            file_size_mb(video_path), enable_chunking=config.get("enable_chunking", True)
        )
        format_keys = config["output_formats"]
        report = build_report(video_path, method, config.get("language"), format_keys)

        async with GeminiClient() as client:
            result = await client.transcribe_video(
                video_path,
                language=config.get("language"),
                custom_prompt=config.get("prompt"),
                large=method == "chunked",
            )
            report.model = client.model

        if url:
            video_path.unlink(missing_ok=True)

        store.update_job(job_id, status=JobStatus.RENDERING)
        cleanup = _cleanup_config(config.get("similarity_threshold"), config.get("window_size"))
        stem = video_path.stem
        transcript = build_transcript(result, report, stem, cleanup)
        saved_files, report_path = write_outputs(
            transcript,
            format_keys,
            config.get("max_line_length", DEFAULT_MAX_LINE_LENGTH),
            stem,
            job.work_dir,
        )

        store.update_job(
            job_id,
            status=JobStatus.COMPLETED,
            summary={
                "processingMethod": method,
                "videoSize": report.video_size,
                "model": report.model,
                "segments": len(transcript.segments),
                "characters": len(transcript.cleaned_text),
            },
            output_files=[p.name for p in saved_files] + [report_path.name],
        )
        logger.info("Job %s completed with %d file(s)", job_id, len(saved_files) + 1)

    except Exception as exc:
        logger.exception("Transcription pipeline failed for job %s", job_id)
        store.update_job(job_id, status=JobStatus.FAILED, error=str(exc))


def _run_transcription_sync(job_id: str, store: JobStore) -> None:
    """Synchronous wrapper so BackgroundTasks can run the async pipeline."""
    asyncio.run(_run_transcription_pipeline(job_id, store))


# ---------------------------------------------------------------------------
# Endpoints: Transcriptions
# ---------------------------------------------------------------------------


@app.post(
    "/transcriptions",
    response_model=JobCreatedResponse,
    status_code=201,
    tags=["transcriptions"],
    summary="Submit a video for transcription",
    description=(
        "Upload a video file with transcription settings. Returns a job ID "
        "immediately; poll GET /transcriptions/{id} for status."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid file type or configuration"},
        429: {"model": ErrorResponse, "description": "Too many concurrent jobs"},
    },
)
async def create_transcription(
    background_tasks: BackgroundTasks,
    file: Annotated[UploadFile, File(description="Video file to transcribe")],
    language: Annotated[
        Optional[str],
        Form(description="Expected spoken language, e.g. 'English'. Auto-detected when omitted."),
    ] = None,
    prompt: Annotated[
        Optional[str],
        Form(description="Additional instructions appended to the transcription prompt."),
    ] = None,
    output_formats: Annotated[
        Optional[str],
        Form(description="Comma-separated output formats (txt, json, srt, vtt, md). Default: txt,srt,md."),
    ] = None,
    max_line_length: Annotated[
        int,
        Form(description="Maximum characters per subtitle line."),
    ] = DEFAULT_MAX_LINE_LENGTH,
    enable_chunking: Annotated[
        bool,
        Form(description="Use large-video settings for files above the size limit."),
    ] = True,
    similarity_threshold: Annotated[
        Optional[float],
        Form(description="Near-duplicate threshold between 0 and 1."),
    ] = None,
    window_size: Annotated[
        Optional[int],
        Form(description="How many recently kept lines are compared."),
    ] = None,
) -> JobCreatedResponse:
    # Strip any directory part to prevent path traversal
    filename = Path(file.filename or "upload.mp4").name
    _validate_file_extension(filename)
    format_keys = _parse_formats(output_formats)
    if max_line_length < 1:
        raise HTTPException(status_code=400, detail="max_line_length must be at least 1")
    _cleanup_config(similarity_threshold, window_size)

    job = _create_job(
        filename,
        {
            "filename": filename,
            "language": language,
            "prompt": prompt,
            "output_formats": format_keys,
            "max_line_length": max_line_length,
            "enable_chunking": enable_chunking,
            "similarity_threshold": similarity_threshold,
            "window_size": window_size,
        },
    )

    (job.work_dir / filename).write_bytes(await file.read())
    background_tasks.add_task(_run_transcription_sync, job.id, job_store)

    return JobCreatedResponse(id=job.id, status=job.status.value, source=job.source)


@app.post(
    "/transcriptions/url",
    response_model=JobCreatedResponse,
    status_code=201,
    tags=["transcriptions"],
    summary="Transcribe a video from a URL",
    description=(
        "Download a video from a URL and transcribe it in the background. "
        "The downloaded video is removed once transcribed."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid URL or configuration"},
        429: {"model": ErrorResponse, "description": "Too many concurrent jobs"},
    },
)
async def create_url_transcription(
    request: TranscriptionUrlRequest,
    background_tasks: BackgroundTasks,
) -> JobCreatedResponse:
    if not request.url.startswith(("http://", "https://")):
        raise HTTPException(status_code=400, detail="URL must start with http:// or https://")

    format_keys = (
        [f.value for f in request.output_formats]
        if request.output_formats
        else list(DEFAULT_OUTPUT_FORMATS)
    )
    job = _create_job(
        request.url,
        {
            "url": request.url,
            "filename": download_filename(request.url),
            "language": request.language,
            "prompt": request.prompt,
            "output_formats": format_keys,
            "max_line_length": request.max_line_length,
            "enable_chunking": request.enable_chunking,
            "similarity_threshold": request.similarity_threshold,
            "window_size": request.window_size,
        },
    )
    background_tasks.add_task(_run_transcription_sync, job.id, job_store)

    return JobCreatedResponse(id=job.id, status=job.status.value, source=job.source)


@app.get(
    "/transcriptions/{job_id}",
    response_model=JobResponse,
    tags=["transcriptions"],
    summary="Get transcription job status",
    responses={404: {"model": ErrorResponse, "description": "Job not found"}},
)
async def get_transcription(job_id: str) -> JobResponse:
    return _job_to_response(_get_job_or_404(job_id))


@app.get(
    "/transcriptions/{job_id}/files",
    response_model=FileListResponse,
    tags=["transcriptions"],
    summary="List output files for a completed job",
    responses={
        404: {"model": ErrorResponse, "description": "Job not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
    },
)
async def list_transcription_files(job_id: str) -> FileListResponse:
    job = _get_job_or_404(job_id)
    _require_completed(job)

    files = []
    for fname in job.output_files:
        fpath = job.work_dir / fname
        if fpath.exists():
            files.append(FileInfo(
                filename=fname,
                media_type=_infer_media_type(fname),
                size=fpath.stat().st_size,
            ))
    return FileListResponse(job_id=job.id, files=files)


@app.get(
    "/transcriptions/{job_id}/files/{filename}",
    tags=["transcriptions"],
    summary="Download a single output file",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid filename"},
        404: {"model": ErrorResponse, "description": "Job or file not found"},
        409: {"model": ErrorResponse, "description": "Job not yet completed"},
    },
)
async def download_transcription_file(job_id: str, filename: str) -> Response:
    if "/" in filename or "\\" in filename or ".." in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    job = _get_job_or_404(job_id)
    _require_completed(job)

    if filename not in job.output_files:
        raise HTTPException(
            status_code=404,
            detail="File '{}' not found in job output files.".format(filename),
        )
    fpath = job.work_dir / filename
    if not fpath.exists():
        raise HTTPException(status_code=404, detail="File '{}' not found on disk.".format(filename))

    return Response(
        content=fpath.read_bytes(),
        media_type=_infer_media_type(filename),
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


@app.delete(
    "/transcriptions/{job_id}",
    status_code=204,
    tags=["transcriptions"],
    summary="Delete a transcription job",
    description="Delete a job and all its files.",
    responses={404: {"model": ErrorResponse, "description": "Job not found"}},
)
async def delete_transcription(job_id: str) -> Response:
    if not job_store.delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found: {}".format(job_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Cleanup
# ---------------------------------------------------------------------------


@app.post(
    "/cleanup",
    response_model=CleanupResponse,
    tags=["cleanup"],
    summary="Clean a saved model response",
    description=(
        "Remove repeated and near-duplicate lines from raw transcription text "
        "(or a segment list), derive time-coded segments, and return every "
        "requested format inline. No model call is made."
    ),
    responses={400: {"model": ErrorResponse, "description": "Invalid configuration"}},
)
async def cleanup_transcript(request: CleanupRequest) -> CleanupResponse:
    format_keys = (
        [f.value for f in request.output_formats]
        if request.output_formats
        else list(DEFAULT_OUTPUT_FORMATS)
    )
    if request.segments is not None:
        result = StructuredSegmentsResult(
            segments=[Segment(start=s.start, end=s.end, text=s.text) for s in request.segments]
        )
    else:
        result = coerce_result(request.text)

    report = ProcessingReport(
        video_path=request.source_name,
        video_size="0.00 MB",
        processing_method="text",
        model=GEMINI_MODEL,
        language=request.language or "auto-detected",
        timestamp=_now_iso(),
        output_formats=format_keys,
    )
    transcript = build_transcript(result, report, request.source_name, request.cleanup_config())

    outputs = []
    for key in format_keys:
        formatter = FORMATTERS[key](max_line_length=request.max_line_length)
        for output in formatter.format(transcript):
            outputs.append(RenderedOutput(
                filename="{}{}".format(request.source_name, output.suffix),
                format=key,
                media_type=output.media_type,
                content=output.content,
            ))

    return CleanupResponse(
        cleaned_text=transcript.cleaned_text,
        segments=[SegmentModel(**seg.to_dict()) for seg in transcript.segments],
        outputs=outputs,
        metadata=transcript.metadata,
    )


# ---------------------------------------------------------------------------
# Endpoints: Formats and health
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List available output formats",
)
async def list_formats() -> List[FormatInfo]:
    return [
        FormatInfo(key=key, name=formatter_cls().name, suffix=formatter_cls.suffix)
        for key, formatter_cls in sorted(FORMATTERS.items())
    ]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


# ---------------------------------------------------------------------------
# Helpers (private)
# ---------------------------------------------------------------------------


def run_api():
    """Entry point for the gemini-transcript-api console script."""
    import uvicorn

    from gemini_transcript.config import configure_logging

    configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _infer_media_type(filename: str) -> str:
    ext = Path(filename).suffix.lower()
    mapping = {
        ".json": "application/json",
        ".srt": "application/x-subrip",
        ".vtt": "text/vtt",
        ".md": "text/markdown",
        ".txt": "text/plain",
    }
    return mapping.get(ext, "application/octet-stream")
