"""Bounded-concurrency transcription of audio chunks.

A small pool of worker threads claims chunk indices from a shared counter,
transcribes each chunk and writes the offset-shifted result into a slot of a
pre-sized list. Results are merged in index order, so the merged transcript
is ordered by chunk position regardless of which call finished first.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from vera_delivery.analytics.models import TimestampedWord
from vera_delivery.chunking.splitter import ChunkInfo
from vera_delivery.errors import TranscriptionError
from vera_delivery.transcription.client import ChunkTranscript, SpeechToText
from vera_delivery.utils.constant import TRANSCRIBE_CONCURRENCY

logger = logging.getLogger(__name__)

__all__ = ["MergedTranscript", "shift_words", "transcribe_chunks"]


@dataclass
class MergedTranscript:
    """Transcript of a whole job.

    Attributes:
        text: Per-chunk texts joined with single spaces.
        words: Words with absolute timestamps, in chunk order.

    """

    text: str = ""
    words: list[TimestampedWord] = field(default_factory=list)


def shift_words(words: Sequence[TimestampedWord], offset: float) -> list[TimestampedWord]:
    """Return copies of ``words`` moved ``offset`` seconds later."""
    if offset == 0:
        return list(words)
    return [
        TimestampedWord(word=w.word, start=w.start + offset, end=w.end + offset) for w in words
    ]


class _ChunkClaimer:
    """Hands out chunk indices exactly once across threads."""

    def __init__(self, total: int) -> None:
        self._total = total
        self._next = 0
        self._lock = threading.Lock()
        self.failed = threading.Event()

    def claim(self) -> int | None:
        with self._lock:
            if self.failed.is_set() or self._next >= self._total:
                return None
            index = self._next
            self._next += 1
            return index


def transcribe_chunks(
    chunks: Sequence[ChunkInfo],
    transcriber: SpeechToText,
    concurrency: int = TRANSCRIBE_CONCURRENCY,
) -> MergedTranscript:
    """Transcribe every chunk with at most ``concurrency`` calls in flight.

    Args:
        chunks: Chunks in playback order.
        transcriber: Speech-to-text capability shared by all workers; it must
            be safe to call from several threads.
        concurrency: Upper bound on parallel calls.

    Returns:
        MergedTranscript: Joined text and globally ordered words.

    Raises:
        TranscriptionError: If any chunk fails. Workers stop claiming new
            chunks after the first failure and no partial result is returned.
    """
    if not chunks:
        return MergedTranscript()

    results: list[ChunkTranscript | None] = [None] * len(chunks)
    errors: list[BaseException] = []
    claimer = _ChunkClaimer(len(chunks))

    def _worker() -> None:
        while (index := claimer.claim()) is not None:
            try:
                chunk = chunks[index]
                logger.debug(
                    "Transcribing chunk %d/%d (%s)", index + 1, len(chunks), chunk.path.name
                )
                transcript = transcriber.transcribe(chunk.path)
                results[index] = ChunkTranscript(
                    text=transcript.text,
                    words=shift_words(transcript.words, chunk.offset_seconds),
                )
            except Exception as exc:
                if isinstance(exc, TranscriptionError) and exc.chunk_index is None:
                    exc.chunk_index = index
                errors.append(exc)
                claimer.failed.set()
                return
            logger.debug("Chunk %d done: %d words", index + 1, len(transcript.words))

    workers = max(1, min(concurrency, len(chunks)))
    threads = [
        threading.Thread(target=_worker, name=f"transcribe-worker-{i}", daemon=True)
        for i in range(workers)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    if errors:
        raise errors[0]

    merged = MergedTranscript()
    texts: list[str] = []
    for index, result in enumerate(results):
        if result is None:
            raise TranscriptionError(f"Chunk {index + 1} produced no transcript", index)
        texts.append(result.text)
        merged.words.extend(result.words)
    merged.text = " ".join(texts)
    logger.info("Transcribed %d chunk(s): %d words", len(chunks), len(merged.words))
    return merged
