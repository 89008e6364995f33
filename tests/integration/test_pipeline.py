"""Integration tests for ``process_file``.

FFmpeg, the acoustic decoder, blob storage and the speech-to-text service are
replaced by in-process fakes; everything between them (retrieval, format
decision, splitting, orchestration, merging, analytics, cleanup) is real.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from vera_delivery import pipeline
from vera_delivery.acoustics.analyzer import AudioAnalysis
from vera_delivery.analytics.models import EnergyWindow, PitchWindow
from vera_delivery.chunking import splitter
from vera_delivery.config import ChunkingConfig, PipelineConfig, RetrievalConfig
from vera_delivery.errors import (
    BlobNotFoundError,
    NoAudioTrackError,
    TranscodeError,
    TranscriptionError,
)
from vera_delivery.media import preparation
from vera_delivery.media.ffmpeg import MediaProbe
from vera_delivery.pipeline import process_file
from vera_delivery.transcription.client import ChunkTranscript

pytestmark = pytest.mark.integration

URL = "https://store.example.com/uploads/talk.mp3"
KB = 1024


class FakeMedia:
    """Stands in for ffprobe/FFmpeg at both call sites."""

    def __init__(self, *, has_audio: bool = True, duration: float = 600.0, size: int = 60 * KB):
        self.has_audio = has_audio
        self.duration = duration
        self.size = size
        self.transcodes: list[tuple[Path, Path, float | None, float | None]] = []

    def probe(self, path) -> MediaProbe:
        return MediaProbe(self.has_audio, self.duration)

    def transcode(self, src, dst, params, *, start_seconds=None, duration_seconds=None) -> None:
        self.transcodes.append((Path(src), Path(dst), start_seconds, duration_seconds))
        Path(dst).write_bytes(b"\0" * (self.size if start_seconds is None else KB))


@pytest.fixture
def media(monkeypatch: pytest.MonkeyPatch) -> FakeMedia:
    """Patch FFmpeg entry points in the preparation and splitting stages."""
    fake = FakeMedia()
    for module in (preparation, splitter):
        monkeypatch.setattr(module, "probe_media", fake.probe)
        monkeypatch.setattr(module, "transcode", fake.transcode)
    return fake


@pytest.fixture
def analysis_calls(monkeypatch: pytest.MonkeyPatch) -> list[Path]:
    """Replace PCM analysis with canned windows, recording the decoded path."""
    calls: list[Path] = []

    def fake_analyze(path, config=None, **_kwargs):
        calls.append(Path(path))
        return AudioAnalysis(
            energy_windows=[EnergyWindow(start_time=0, end_time=600, rms_db=-21.5)],
            pitch_windows=[
                PitchWindow(
                    start_time=0,
                    end_time=600,
                    median_f0_hz=140.0,
                    median_f0_semitones=85.6,
                    voiced_frame_ratio=0.7,
                )
            ],
        )

    monkeypatch.setattr(pipeline, "analyze_audio", fake_analyze)
    return calls


@pytest.fixture
def config() -> PipelineConfig:
    """Limits scaled down so a 60 KB file behaves like a 60 MB one."""
    return PipelineConfig(
        retrieval=RetrievalConfig(max_retries=2, initial_delay_ms=0),
        chunking=ChunkingConfig(max_size_bytes=25 * KB, max_chunk_duration_sec=1400),
    )


def test_long_recording_is_split_and_merged(
    media: FakeMedia,
    analysis_calls: list[Path],
    config: PipelineConfig,
    blob_store_factory,
    fake_transcriber,
    scratch_dir: Path,
) -> None:
    """A 60 MB / 600 s recording becomes three chunks merged at 0/200/400s."""
    store = blob_store_factory(content=b"\0" * (60 * KB))

    result = process_file(URL, store=store, transcriber=fake_transcriber, config=config)

    assert result.chunk_count == 3
    assert len(fake_transcriber.calls) == 3
    cuts = [(start, length) for _src, _dst, start, length in media.transcodes[1:]]
    assert cuts == [(0, 200), (200, 200), (400, None)]

    words = result.analytics.words
    assert [w.start for w in words] == [0.0, 0.6, 200.0, 200.6, 400.0, 400.6]
    assert words[-1].end == pytest.approx(401.0)
    assert result.transcript == "hello world hello world hello world"

    assert analysis_calls == [media.transcodes[0][1]]
    assert result.analytics.peak_energy_db == -21.5
    assert result.analytics.average_pitch_hz == 140.0

    assert store.deleted == [URL]
    assert list(scratch_dir.iterdir()) == []


def test_small_native_file_skips_ffmpeg(
    media: FakeMedia,
    analysis_calls: list[Path],
    config: PipelineConfig,
    fake_store,
    fake_transcriber,
    scratch_dir: Path,
) -> None:
    """An mp3 under the size cap is uploaded as-is and analysed directly."""
    result = process_file(URL, store=fake_store, transcriber=fake_transcriber, config=config)

    assert result.chunk_count == 1
    assert media.transcodes == []
    assert fake_transcriber.calls == analysis_calls
    assert fake_transcriber.calls[0].suffix == ".mp3"
    assert result.analytics.total_duration_seconds == 1.0
    assert list(scratch_dir.iterdir()) == []


def test_video_without_audio_is_rejected(
    media: FakeMedia,
    config: PipelineConfig,
    fake_store,
    fake_transcriber,
    scratch_dir: Path,
) -> None:
    """Files with no audio stream fail with the friendly message."""
    media.has_audio = False

    with pytest.raises(NoAudioTrackError, match="does not contain an audio track"):
        process_file(
            "https://store.example.com/uploads/clip.mov",
            store=fake_store,
            transcriber=fake_transcriber,
            config=config,
        )

    assert fake_transcriber.calls == []
    assert fake_store.deleted == ["https://store.example.com/uploads/clip.mov"]
    assert list(scratch_dir.iterdir()) == []


def test_acoustic_failure_degrades_gracefully(
    media: FakeMedia,
    monkeypatch: pytest.MonkeyPatch,
    config: PipelineConfig,
    fake_store,
    fake_transcriber,
) -> None:
    """A decode failure leaves transcript analytics intact and acoustics empty."""

    def broken(*_args, **_kwargs):
        raise TranscodeError("decode failed")

    monkeypatch.setattr(pipeline, "analyze_audio", broken)

    result = process_file(URL, store=fake_store, transcriber=fake_transcriber, config=config)

    assert [w.word for w in result.analytics.words] == ["hello", "world"]
    assert result.analytics.energy_windows == []
    assert result.analytics.pitch_windows == []
    assert result.analytics.average_energy_db == 0.0


def test_transcription_failure_still_cleans_up(
    media: FakeMedia,
    analysis_calls: list[Path],
    config: PipelineConfig,
    blob_store_factory,
    scratch_dir: Path,
) -> None:
    """A failing chunk aborts the job; scratch files and the blob are removed."""

    class FailingTranscriber:
        def transcribe(self, path: Path) -> ChunkTranscript:
            raise TranscriptionError("Transcription failed (503): overloaded")

    store = blob_store_factory(content=b"\0" * (60 * KB))

    with pytest.raises(TranscriptionError) as excinfo:
        process_file(URL, store=store, transcriber=FailingTranscriber(), config=config)

    assert excinfo.value.chunk_index is not None
    assert analysis_calls == []
    assert store.deleted == [URL]
    assert list(scratch_dir.iterdir()) == []


def test_missing_blob(config: PipelineConfig, blob_store_factory, fake_transcriber) -> None:
    """A blob unknown to the metadata API fails before any download."""
    store = blob_store_factory(exists=False)

    with pytest.raises(BlobNotFoundError):
        process_file(URL, store=store, transcriber=fake_transcriber, config=config)

    assert store.fetch_calls == []
    assert store.deleted == [URL]


def test_keep_source_blob(
    media: FakeMedia, analysis_calls, config: PipelineConfig, fake_store, fake_transcriber
) -> None:
    """``delete_source=False`` leaves the blob in place."""
    process_file(
        URL, store=fake_store, transcriber=fake_transcriber, config=config, delete_source=False
    )
    assert fake_store.deleted == []


def test_local_source_is_copied_not_consumed(
    tmp_path: Path,
    media: FakeMedia,
    analysis_calls: list[Path],
    config: PipelineConfig,
    fake_transcriber,
    scratch_dir: Path,
) -> None:
    """Local inputs are processed from a scratch copy and left untouched."""
    source = tmp_path / "rehearsal.m4a"
    source.write_bytes(b"m4a-bytes")

    result = process_file(source, transcriber=fake_transcriber, config=config)

    assert source.read_bytes() == b"m4a-bytes"
    assert result.source == str(source)
    assert fake_transcriber.calls[0] != source
    assert fake_transcriber.calls[0].suffix == ".m4a"
    assert list(scratch_dir.iterdir()) == []


def test_local_source_missing(config: PipelineConfig, fake_transcriber, tmp_path: Path) -> None:
    """A missing local path raises ``FileNotFoundError``."""
    with pytest.raises(FileNotFoundError):
        process_file(tmp_path / "nope.mp3", transcriber=fake_transcriber, config=config)


def test_result_serialises_camel_case(
    media: FakeMedia, analysis_calls, config: PipelineConfig, fake_store, fake_transcriber
) -> None:
    """The result dumps with camelCase keys for the report layer."""
    result = process_file(URL, store=fake_store, transcriber=fake_transcriber, config=config)
    dumped = result.model_dump(by_alias=True)
    assert set(dumped) >= {"source", "transcript", "chunkCount", "analytics", "elapsedSeconds"}
    assert "averageWpm" in dumped["analytics"]
