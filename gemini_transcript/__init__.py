"""Gemini Transcript Converter: clean, time-coded transcripts from generative models.

WHY: Generative transcription models (Gemini) return free-form text that
repeats sentences, restates paragraphs, and writes timestamps in loose
bracket notation. Feeding that text straight into subtitle files produces
broken, repetitive captions. This package cleans the text, imposes temporal
structure on it, and renders it into subtitle and document formats.

HOW: Three-stage pipeline: ingest (Gemini API client), clean and segment
(core dedup + timestamp segmentation), format (pluggable formatters). Each
stage is independently testable; the core never performs I/O.

RULES:
- All formatters consume the same Transcript IR
- Adding a new output format = one new formatter module, no core changes
- Dedup state is created per call and never shared between jobs
"""

__version__ = "0.1.0"
