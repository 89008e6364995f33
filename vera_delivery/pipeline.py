"""End-to-end processing of one recording.

``process_file`` is the library's outer surface: it retrieves the source,
prepares and transcribes it, runs acoustic analysis and the analytics engine,
and always removes every scratch file it created.
"""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vera_delivery.acoustics.analyzer import AudioAnalysis, analyze_audio
from vera_delivery.analytics.engine import compute_delivery_analytics
from vera_delivery.analytics.models import DeliveryAnalytics
from vera_delivery.config import PipelineConfig
from vera_delivery.media.preparation import prepare_for_transcription
from vera_delivery.storage.blob_store import BlobStore, HttpBlobStore
from vera_delivery.storage.retrieval import download_to_tmp
from vera_delivery.transcription.client import OpenAITranscriptionClient, SpeechToText
from vera_delivery.transcription.orchestrator import transcribe_chunks
from vera_delivery.utils.temp_files import cleanup_temp_files, temp_path

logger = logging.getLogger(__name__)

__all__ = ["ProcessResult", "is_remote_source", "process_file"]


class ProcessResult(BaseModel):
    """Transcript and delivery analytics for one recording."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    source: str
    transcript: str
    chunk_count: int = Field(..., ge=0)
    analytics: DeliveryAnalytics
    elapsed_seconds: float = 0.0


def is_remote_source(source: str | Path) -> bool:
    """``True`` for ``http(s)://`` locators, ``False`` for filesystem paths."""
    return isinstance(source, str) and urlparse(source).scheme in ("http", "https")


def _copy_to_scratch(path: Path, file_name: str | None) -> Path:
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")
    suffix = PurePosixPath(file_name).suffix if file_name else path.suffix
    scratch_path = temp_path(suffix.lower() or ".bin")
    shutil.copyfile(path, scratch_path)
    return scratch_path


def _analyze_or_empty(path: Path | None, config: PipelineConfig) -> AudioAnalysis:
    if path is None:
        return AudioAnalysis()
    try:
        return analyze_audio(path, config.acoustics)
    except Exception as exc:
        logger.warning("Acoustic analysis failed, continuing without energy/pitch: %s", exc)
        return AudioAnalysis()


def process_file(
    source: str | Path,
    file_name: str | None = None,
    *,
    store: BlobStore | None = None,
    transcriber: SpeechToText | None = None,
    config: PipelineConfig | None = None,
    delete_source: bool = True,
) -> ProcessResult:
    """Run the full ingestion and analytics pipeline for ``source``.

    Args:
        source: Blob URL or local file path.
        file_name: Name the recording was uploaded under. Only its extension
            is used; defaults to the last component of ``source``.
        store: Network storage client. A default :class:`HttpBlobStore` is
            created (and closed) when ``source`` is remote and none is given.
        transcriber: Speech-to-text capability. Defaults to
            :class:`OpenAITranscriptionClient`.
        config: Stage settings.
        delete_source: Remove the source blob from storage once the job ends.
            Ignored for local paths, which are never touched.

    Returns:
        ProcessResult: Transcript text and analytics.

    Raises:
        BlobNotFoundError: If the source blob does not exist.
        DownloadFailedError: If the download keeps failing.
        NoAudioTrackError: If the recording has no audio stream.
        TranscodeError: If FFmpeg cannot process the recording.
        TranscriptionError: If any chunk fails to transcribe.
        FileNotFoundError: If a local ``source`` does not exist.
    """
    config = config or PipelineConfig()
    remote = is_remote_source(source)
    owned_store = store is None and remote
    owned_transcriber = transcriber is None
    if owned_store:
        store = HttpBlobStore()
    if transcriber is None:
        transcriber = OpenAITranscriptionClient()

    t0 = time.perf_counter()
    scratch: list[Path] = []
    try:
        if remote:
            name = file_name or PurePosixPath(urlparse(str(source)).path).name
            local_path = download_to_tmp(str(source), name, store=store, config=config.retrieval)
        else:
            local_path = _copy_to_scratch(Path(source), file_name)
        scratch.append(local_path)

        prepared = prepare_for_transcription(local_path, config.chunking, scratch=scratch)
        merged = transcribe_chunks(
            prepared.chunks, transcriber, concurrency=config.transcription.concurrency
        )
        analysis = _analyze_or_empty(prepared.analysis_path, config)
        analytics = compute_delivery_analytics(
            merged.words, analysis.energy_windows, analysis.pitch_windows
        )
        elapsed = time.perf_counter() - t0
        logger.info(
            "Processed %s in %.1fs: %d words, %d WPM",
            source,
            elapsed,
            len(merged.words),
            analytics.average_wpm,
        )
        return ProcessResult(
            source=str(source),
            transcript=merged.text,
            chunk_count=len(prepared.chunks),
            analytics=analytics,
            elapsed_seconds=round(elapsed, 2),
        )
    finally:
        cleanup_temp_files(scratch)
        if remote and delete_source and store is not None:
            try:
                store.delete(str(source))
            except httpx.HTTPError as exc:
                logger.warning("Could not delete source blob %s: %s", source, exc)
        if owned_store and isinstance(store, HttpBlobStore):
            store.close()
        if owned_transcriber and isinstance(transcriber, OpenAITranscriptionClient):
            transcriber.close()
