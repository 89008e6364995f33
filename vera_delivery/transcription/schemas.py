"""OpenAI-compatible transcription request and response schemas.

Only the fields the pipeline reads are required; everything else an
OpenAI-compatible server returns is tolerated and ignored.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

OpenAIResponseFormat = Literal["json", "text", "srt", "verbose_json", "vtt"]
TimestampGranularity = Literal["word", "segment"]


class TranscriptionRequest(BaseModel):
    """Form fields sent with a transcription upload."""

    model: str = Field(..., description="Model identifier, e.g. 'whisper-1'.")
    response_format: OpenAIResponseFormat = Field(
        default="verbose_json",
        description="Word timestamps are only returned for verbose_json.",
    )
    timestamp_granularities: list[TimestampGranularity] = Field(
        default_factory=lambda: ["word"],
        description="Requested timing detail; the pipeline needs 'word'.",
    )
    language: str | None = Field(
        default=None, description="Optional ISO-639-1 hint for the service."
    )

    def to_form(self) -> dict[str, str | list[str]]:
        """Encode as multipart form fields; list values repeat their key."""
        fields: dict[str, str | list[str]] = {
            "model": self.model,
            "response_format": self.response_format,
            "timestamp_granularities[]": list(self.timestamp_granularities),
        }
        if self.language:
            fields["language"] = self.language
        return fields


class TranscriptionWord(BaseModel):
    """Word-level timing entry in OpenAI verbose JSON format."""

    model_config = ConfigDict(extra="ignore")

    word: str
    start: float
    end: float


class TranscriptionSegment(BaseModel):
    """Segment-level timing entry in OpenAI verbose JSON format."""

    model_config = ConfigDict(extra="ignore")

    id: int
    start: float
    end: float
    text: str


class TranscriptionResponseVerbose(BaseModel):
    """OpenAI-compatible verbose_json transcription response payload."""

    model_config = ConfigDict(extra="ignore")

    task: str = "transcribe"
    language: str | None = None
    duration: float | None = None
    text: str
    segments: list[TranscriptionSegment] | None = None
    words: list[TranscriptionWord] | None = None


class ErrorObject(BaseModel):
    """OpenAI-style error object."""

    message: str
    type: str | None = None
    code: str | None = None


class ErrorResponse(BaseModel):
    """OpenAI-style top-level error response wrapper."""

    error: ErrorObject
