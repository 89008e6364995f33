"""Exception taxonomy for the ingestion and delivery-analytics pipeline.

Every fatal failure raised by a pipeline stage derives from
:class:`DeliveryPipelineError`. Callers that need to pick between a friendly
and a generic message should use :func:`user_facing_message`.
"""

from __future__ import annotations

__all__ = [
    "GENERIC_FAILURE_MESSAGE",
    "NO_AUDIO_TRACK_MESSAGE",
    "BlobNotFoundError",
    "DeliveryPipelineError",
    "DownloadFailedError",
    "NoAudioTrackError",
    "TranscodeError",
    "TranscriptionError",
    "user_facing_message",
]

NO_AUDIO_TRACK_MESSAGE = (
    "This file does not contain an audio track. Please upload a file with audible speech."
)
GENERIC_FAILURE_MESSAGE = "Failed to transcribe file. Please try again."


class DeliveryPipelineError(RuntimeError):
    """Base class for fatal pipeline errors."""


class BlobNotFoundError(DeliveryPipelineError):
    """The storage provider has no record of the requested blob."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Blob does not exist in store: {url}")
        self.url = url


class DownloadFailedError(DeliveryPipelineError):
    """Every download attempt returned a non-success status.

    Attributes:
        attempts: Number of attempts made.
        last_status: HTTP status of the final attempt (``0`` when the final
            attempt failed before a response arrived).
    """

    def __init__(self, attempts: int, last_status: int) -> None:
        super().__init__(f"Failed to download file after {attempts} attempts: {last_status}")
        self.attempts = attempts
        self.last_status = last_status


class NoAudioTrackError(DeliveryPipelineError):
    """The media file has no audio stream to transcribe."""

    def __init__(self, message: str = NO_AUDIO_TRACK_MESSAGE) -> None:
        super().__init__(message)


class TranscodeError(DeliveryPipelineError):
    """FFmpeg or ffprobe rejected the input file."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class TranscriptionError(DeliveryPipelineError):
    """The speech-to-text service failed for one chunk."""

    def __init__(self, message: str, chunk_index: int | None = None) -> None:
        super().__init__(message)
        self.chunk_index = chunk_index


def user_facing_message(exc: BaseException) -> str:
    """Choose the message shown to an end user for a failed job.

    Args:
        exc: The exception that aborted the job.

    Returns:
        The exception's own text when it reports a missing audio track,
        otherwise a generic failure message.
    """
    message = str(exc)
    if isinstance(exc, NoAudioTrackError) or "does not contain an audio track" in message:
        return message
    return GENERIC_FAILURE_MESSAGE
