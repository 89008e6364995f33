"""Configuration dataclasses for the ingestion pipeline.

This module groups related settings so that each stage receives only the
knobs it needs. Defaults come from :mod:`vera_delivery.utils.constant`, which
in turn honours environment overrides.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from vera_delivery.utils.constant import (
    ANALYSIS_SAMPLE_RATE,
    ANALYSIS_WINDOW_SEC,
    COMPRESSED_AUDIO_BITRATE,
    COMPRESSED_AUDIO_CODEC,
    COMPRESSED_AUDIO_FORMAT,
    DOWNLOAD_INITIAL_DELAY_MS,
    DOWNLOAD_MAX_RETRIES,
    MAX_CHUNK_DURATION_SEC,
    PITCH_FRAME_SEC,
    PITCH_HOP_SEC,
    PITCH_MAX_HZ,
    PITCH_MIN_HZ,
    SILENCE_FLOOR_DB,
    TRANSCRIBE_CONCURRENCY,
    TRANSCRIPTION_MAX_SIZE_BYTES,
    TRANSCRIPTION_NATIVE_EXTENSIONS,
    YIN_THRESHOLD,
)


@dataclass(frozen=True)
class AudioCodecParams:
    """Encoder settings for compressed audio and chunks.

    Attributes:
        codec: FFmpeg audio encoder name.
        bitrate: Target bitrate (FFmpeg syntax, e.g. ``"64k"``).
        channels: Output channel count.
        sample_rate: Output sample rate in Hz.
        format: Container format passed to ``-f``.

    """

    codec: str = COMPRESSED_AUDIO_CODEC
    bitrate: str = COMPRESSED_AUDIO_BITRATE
    channels: int = 1
    sample_rate: int = 16000
    format: str = COMPRESSED_AUDIO_FORMAT

    @property
    def extension(self) -> str:
        """File suffix matching :attr:`format`."""
        return f".{self.format}"


@dataclass
class RetrievalConfig:
    """Groups download retry settings.

    Attributes:
        max_retries: Total download attempts before giving up.
        initial_delay_ms: Delay before the second attempt; doubles afterwards.

    """

    max_retries: int = DOWNLOAD_MAX_RETRIES
    initial_delay_ms: int = DOWNLOAD_INITIAL_DELAY_MS


@dataclass
class ChunkingConfig:
    """Groups format-decision and splitting settings.

    Attributes:
        max_size_bytes: Upload ceiling of the speech-to-text service.
        max_chunk_duration_sec: Per-request duration ceiling.
        native_extensions: Extensions sent without conversion when small enough.
        codec: Encoder settings for compressed audio and chunks.

    """

    max_size_bytes: int = TRANSCRIPTION_MAX_SIZE_BYTES
    max_chunk_duration_sec: float = MAX_CHUNK_DURATION_SEC
    native_extensions: frozenset[str] = TRANSCRIPTION_NATIVE_EXTENSIONS
    codec: AudioCodecParams = field(default_factory=AudioCodecParams)


@dataclass
class TranscriptionConfig:
    """Groups transcription orchestration settings.

    Attributes:
        concurrency: Maximum number of chunks transcribed at once.

    """

    concurrency: int = TRANSCRIBE_CONCURRENCY


@dataclass
class AcousticConfig:
    """Groups PCM energy/pitch analysis settings.

    Attributes:
        sample_rate: Decode rate for analysis PCM.
        window_sec: Target window length shared by energy and pitch windows.
        silence_floor_db: dB value reported for digital silence.
        frame_sec: Pitch frame length.
        hop_sec: Pitch hop length.
        min_hz: Lowest plausible speaking pitch.
        max_hz: Highest plausible speaking pitch.
        yin_threshold: Absolute threshold of the YIN estimator.

    """

    sample_rate: int = ANALYSIS_SAMPLE_RATE
    window_sec: float = ANALYSIS_WINDOW_SEC
    silence_floor_db: float = SILENCE_FLOOR_DB
    frame_sec: float = PITCH_FRAME_SEC
    hop_sec: float = PITCH_HOP_SEC
    min_hz: float = PITCH_MIN_HZ
    max_hz: float = PITCH_MAX_HZ
    yin_threshold: float = YIN_THRESHOLD


@dataclass
class UIConfig:
    """Groups CLI output and logging settings.

    Attributes:
        verbose: Enable detailed diagnostic output.
        quiet: Suppress non-error output.
        as_json: Emit machine-readable JSON instead of the rich summary.

    """

    verbose: bool = False
    quiet: bool = False
    as_json: bool = False


@dataclass
class PipelineConfig:
    """Bundles every stage configuration for one analysis job."""

    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    chunking: ChunkingConfig = field(default_factory=ChunkingConfig)
    transcription: TranscriptionConfig = field(default_factory=TranscriptionConfig)
    acoustics: AcousticConfig = field(default_factory=AcousticConfig)
