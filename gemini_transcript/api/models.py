"""Gemini generateContent request and response dataclasses.

WHY: The Gemini REST API returns nested JSON (candidates → content →
parts → text). Typed dataclasses make the fields we rely on explicit and
keep dict-walking out of the client.

HOW: Each dataclass maps to one level of the response. Factory methods
(from_dict) tolerate missing optional fields; GenerationConfig.to_dict()
produces the camelCase request object.

RULES:
- Only the first text part of the first candidate is used as the answer
- A response with no candidates or no text parts has text == None
- error_message_from() extracts error.message from an error body, if any
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class GenerationConfig:
    """Sampling parameters sent with every generateContent request."""

    temperature: float = 0.1
    max_output_tokens: int = 16384
    top_p: float | None = 0.8
    top_k: int | None = 40

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
        }
        if self.top_p is not None:
            body["topP"] = self.top_p
        if self.top_k is not None:
            body["topK"] = self.top_k
        return body


@dataclass
class Candidate:
    """One generated answer.

    RULES:
    - parts: the text of every text part, in order
    - finish_reason: e.g. "STOP", "MAX_TOKENS", "SAFETY"; None if absent
    """

    parts: list[str] = field(default_factory=list)
    finish_reason: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Candidate:
        content = data.get("content") or {}
        parts = [
            part["text"]
            for part in content.get("parts") or []
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        return cls(parts=parts, finish_reason=data.get("finishReason"))


@dataclass
class GenerateContentResponse:
    """Parsed body of a successful generateContent call."""

    candidates: list[Candidate] = field(default_factory=list)
    usage: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> GenerateContentResponse:
        return cls(
            candidates=[Candidate.from_dict(c) for c in data.get("candidates") or []],
            usage=dict(data.get("usageMetadata") or {}),
        )

    @property
    def text(self) -> str | None:
        """Text of the first part of the first candidate, if any."""
        if not self.candidates or not self.candidates[0].parts:
            return None
        return self.candidates[0].parts[0]


def error_message_from(data: Any) -> str | None:
    """Return error.message from a Gemini error body, or None."""
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return None
