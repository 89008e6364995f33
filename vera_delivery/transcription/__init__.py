"""Speech-to-text client and chunk orchestration."""

from vera_delivery.transcription.client import (
    ChunkTranscript,
    OpenAITranscriptionClient,
    SpeechToText,
)
from vera_delivery.transcription.orchestrator import MergedTranscript, transcribe_chunks

__all__ = [
    "ChunkTranscript",
    "MergedTranscript",
    "OpenAITranscriptionClient",
    "SpeechToText",
    "transcribe_chunks",
]
