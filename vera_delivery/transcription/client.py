"""Speech-to-text capability and its OpenAI-compatible HTTP implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import httpx
from pydantic import ValidationError

from vera_delivery.analytics.models import TimestampedWord
from vera_delivery.errors import TranscriptionError
from vera_delivery.transcription.schemas import (
    ErrorResponse,
    TranscriptionRequest,
    TranscriptionResponseVerbose,
)
from vera_delivery.utils.constant import (
    STT_API_BASE_URL,
    STT_API_KEY,
    STT_MODEL_NAME,
    STT_TIMEOUT_SEC,
)

logger = logging.getLogger(__name__)

__all__ = ["ChunkTranscript", "OpenAITranscriptionClient", "SpeechToText"]

_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".mpga": "audio/mpeg",
    ".mpeg": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".mp4": "video/mp4",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
}


@dataclass
class ChunkTranscript:
    """Transcript of one chunk with chunk-relative word timings."""

    text: str
    words: list[TimestampedWord] = field(default_factory=list)


class SpeechToText(Protocol):
    """Anything that can turn one audio file into text with word timings."""

    def transcribe(self, path: Path) -> ChunkTranscript:
        """Transcribe ``path``; raise on failure."""


def _error_detail(response: httpx.Response) -> str:
    try:
        return ErrorResponse.model_validate(response.json()).error.message
    except (ValueError, ValidationError):
        return response.text[:200] or response.reason_phrase


class OpenAITranscriptionClient:
    """Client for ``POST /audio/transcriptions`` with word timestamps.

    Args:
        base_url: API root, e.g. ``https://api.openai.com/v1``.
        api_key: Bearer token.
        model: Model identifier sent with every request.
        timeout: Request timeout in seconds.
        client: Optional preconfigured ``httpx.Client``.

    """

    def __init__(
        self,
        base_url: str = STT_API_BASE_URL,
        api_key: str = STT_API_KEY,
        model: str = STT_MODEL_NAME,
        *,
        timeout: float = STT_TIMEOUT_SEC,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.request = TranscriptionRequest(model=model)
        self._client = client or httpx.Client(timeout=timeout)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    def transcribe(self, path: Path) -> ChunkTranscript:
        """Upload ``path`` and parse the verbose JSON response.

        Raises:
            TranscriptionError: On transport failure, a non-2xx status or a
                body that is not a verbose transcription.
        """
        path = Path(path)
        mime = _MIME_TYPES.get(path.suffix.lower(), "application/octet-stream")
        try:
            with path.open("rb") as fh:
                response = self._client.post(
                    f"{self.base_url}/audio/transcriptions",
                    headers=self._headers(),
                    files={"file": (path.name, fh, mime)},
                    data=self.request.to_form(),
                )
        except httpx.HTTPError as exc:
            raise TranscriptionError(f"Transcription request failed: {exc}") from exc

        if response.is_error:
            raise TranscriptionError(
                f"Transcription failed ({response.status_code}): {_error_detail(response)}"
            )
        try:
            payload = TranscriptionResponseVerbose.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TranscriptionError(f"Invalid transcription response: {exc}") from exc

        words = [
            TimestampedWord(word=w.word.strip(), start=w.start, end=w.end)
            for w in payload.words or []
        ]
        logger.debug("Transcribed %s: %d words", path.name, len(words))
        return ChunkTranscript(text=payload.text.strip(), words=words)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
