"""Prompt text for transcription and analysis requests.

WHY: Prompt wording affects how much the model repeats itself and how it
writes timestamps. Keeping it in one module makes it reviewable and
lets tests assert on it without an HTTP round trip.

RULES:
- Transcription prompts always ask for [MM:SS] / [HH:MM:SS] markers
- The large-video prompt adds an explicit "no duplicates" reminder
- Optional language and custom instructions are appended, never inlined
"""

from __future__ import annotations

_DIRECT_TRANSCRIPTION = (
    "Please transcribe this video accurately and completely. Provide a clean, "
    "continuous transcription without duplicating any content. Important:\n\n"
    "1. NO repetition of segments\n"
    "2. Timestamps in format [MM:SS] or [HH:MM:SS] for each segment\n"
    "3. Sequential and chronological order\n"
    "4. Clean, readable paragraphs"
)

_LARGE_TRANSCRIPTION = (
    "Please transcribe this video completely and accurately. Provide a clean, "
    "continuous transcription without duplicating content. Important instructions:\n\n"
    "1. DO NOT repeat segments or content\n"
    "2. Provide timestamps in format [MM:SS] or [HH:MM:SS] for each new segment\n"
    "3. Keep the transcription sequential and chronological\n"
    "4. If you detect repeated content in the video, only transcribe it once\n"
    "5. Format as readable paragraphs with clear transitions"
)

_ANALYSIS_FOCUS = {
    "summary": "Provide a comprehensive summary of the main topics, key points, and conclusions.",
    "topics": "Identify and list the main topics discussed in the video.",
    "sentiment": "Analyze the sentiment and tone of the video content.",
    "speakers": "Identify different speakers and analyze their contributions.",
    "detailed": (
        "Provide a detailed analysis including: summary, main topics, sentiment, "
        "key insights, notable patterns, themes, and speaker analysis if applicable."
    ),
}
_ANALYSIS_FOCUS["full"] = _ANALYSIS_FOCUS["detailed"]


def build_transcription_prompt(
    language: str | None = None,
    custom_prompt: str | None = None,
    large: bool = False,
) -> str:
    prompt = _LARGE_TRANSCRIPTION if large else _DIRECT_TRANSCRIPTION
    next_item = 6 if large else 5

    if language:
        prompt += "\n{}. The video is in {}.".format(next_item, language)

    if custom_prompt:
        label = "Additional instructions" if large else "Additional"
        prompt += "\n\n{}: {}".format(label, custom_prompt)

    if large:
        prompt += (
            "\n\nIMPORTANT: Ensure no duplicate content in the transcription. "
            "Each segment should appear only once."
        )
    return prompt


def build_analysis_prompt(analysis_type: str, include_transcript: bool = True) -> str:
    prompt = "Please analyze this video content thoroughly."
    focus = _ANALYSIS_FOCUS.get(analysis_type)
    if focus:
        prompt += " " + focus
    if include_transcript:
        prompt += " Also include the full transcript of the spoken content WITHOUT any repetition."
    prompt += " Format the response as structured JSON with clear sections."
    return prompt
