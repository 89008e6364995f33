"""FFmpeg/ffprobe wrappers.

Provides stream probing, audio extraction/compression and decoding to raw
float PCM. Decoding prefers an FFmpeg pipe and falls back to *soundfile* +
*librosa* for formats libsndfile can read.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

import librosa  # type: ignore
import numpy as np
import soundfile as sf  # type: ignore

from vera_delivery.config import AudioCodecParams
from vera_delivery.errors import TranscodeError
from vera_delivery.utils.constant import (
    ANALYSIS_SAMPLE_RATE,
    FFMPEG_BINARY,
    FFPROBE_BINARY,
    FORCE_FFMPEG,
)

logger = logging.getLogger(__name__)

__all__ = ["MediaProbe", "decode_pcm", "probe_media", "transcode"]


@dataclass(frozen=True)
class MediaProbe:
    """Subset of ffprobe output the pipeline relies on.

    Attributes:
        has_audio_stream: ``True`` when at least one stream has
            ``codec_type == "audio"``.
        duration_seconds: Container duration (``0.0`` when unknown).

    """

    has_audio_stream: bool
    duration_seconds: float


def _run(cmd: list[str], *, action: str) -> bytes:
    """Run an FFmpeg-family command and return its stdout.

    Raises:
        TranscodeError: If the binary is missing or exits non-zero.
    """
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, check=True)
    except FileNotFoundError as exc:
        raise TranscodeError(f"{action} failed: {cmd[0]} is not installed or not in PATH.") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or b"").decode("utf-8", errors="ignore").strip()
        raise TranscodeError(f"{action} failed: {stderr[:500]}", stderr=stderr) from exc
    return result.stdout


def probe_media(path: Path | str) -> MediaProbe:
    """Inspect the streams and duration of a media file.

    Args:
        path: File to probe.

    Returns:
        MediaProbe: Audio-stream presence and duration.

    Raises:
        TranscodeError: If ffprobe cannot read the file.
    """
    cmd = [
        FFPROBE_BINARY,
        "-v",
        "error",
        "-print_format",
        "json",
        "-show_streams",
        "-show_format",
        str(path),
    ]
    raw = _run(cmd, action="ffprobe")
    try:
        metadata = json.loads(raw or b"{}")
    except json.JSONDecodeError as exc:
        raise TranscodeError(f"ffprobe returned invalid JSON for {path}") from exc

    streams = metadata.get("streams") or []
    has_audio = any(stream.get("codec_type") == "audio" for stream in streams)
    try:
        duration = float((metadata.get("format") or {}).get("duration") or 0.0)
    except (TypeError, ValueError):
        duration = 0.0
    return MediaProbe(has_audio_stream=has_audio, duration_seconds=duration)


def transcode(
    input_path: Path | str,
    output_path: Path | str,
    params: AudioCodecParams,
    *,
    start_seconds: float | None = None,
    duration_seconds: float | None = None,
) -> None:
    """Extract audio from ``input_path`` and re-encode it to ``output_path``.

    Video streams are dropped. ``start_seconds``/``duration_seconds`` select
    a time range (input seeking, so the output timeline starts at zero).

    Raises:
        TranscodeError: If FFmpeg fails on the input.
    """
    cmd = [FFMPEG_BINARY, "-nostdin", "-y", "-v", "error"]
    if start_seconds is not None:
        cmd += ["-ss", f"{start_seconds:g}"]
    cmd += ["-i", str(input_path)]
    if duration_seconds is not None:
        cmd += ["-t", f"{duration_seconds:g}"]
    cmd += [
        "-vn",
        "-acodec",
        params.codec,
        "-b:a",
        params.bitrate,
        "-ac",
        str(params.channels),
        "-ar",
        str(params.sample_rate),
        "-f",
        params.format,
        str(output_path),
    ]
    _run(cmd, action="Audio extraction")


def _decode_with_ffmpeg(path: Path | str, sample_rate: int) -> np.ndarray:
    """Decode to mono float32 PCM through an FFmpeg pipe.

    Returns:
        np.ndarray: 1-D float32 waveform at ``sample_rate``.
    """
    cmd = [
        FFMPEG_BINARY,
        "-nostdin",
        "-v",
        "error",
        "-i",
        str(path),
        "-vn",
        "-f",
        "f32le",
        "-acodec",
        "pcm_f32le",
        "-ac",
        "1",
        "-ar",
        str(sample_rate),
        "-",
    ]
    pcm = _run(cmd, action="FFmpeg decoding")
    return np.frombuffer(pcm, dtype="<f4").astype(np.float32)


def _decode_with_soundfile(path: Path | str, sample_rate: int) -> np.ndarray:
    """Decode with libsndfile, downmix and resample with librosa.

    Returns:
        np.ndarray: 1-D float32 waveform at ``sample_rate``.
    """
    data, sr = sf.read(str(path), always_2d=False, dtype="float32")
    if data.ndim > 1:
        data = np.mean(data, axis=-1)
    if sr != sample_rate:
        data = librosa.resample(data, orig_sr=sr, target_sr=sample_rate)
    return np.asarray(data, dtype=np.float32)


def decode_pcm(path: Path | str, sample_rate: int = ANALYSIS_SAMPLE_RATE) -> np.ndarray:
    """Decode a whole file to single-channel float32 PCM held in memory.

    Loading strategy order:
    1. If ``FORCE_FFMPEG``, the FFmpeg pipe, then soundfile.
    2. Otherwise soundfile, then the FFmpeg pipe.

    Args:
        path: Audio or video file.
        sample_rate: Target sample rate in Hz.

    Returns:
        np.ndarray: 1-D float32 samples, nominally in ``[-1, 1]``.

    Raises:
        TranscodeError: If no backend can decode the file.
    """
    if FORCE_FFMPEG:
        try:
            return _decode_with_ffmpeg(path, sample_rate)
        except TranscodeError as exc:
            logger.debug("FFmpeg decode failed, trying soundfile: %s", exc)
            try:
                return _decode_with_soundfile(path, sample_rate)
            except (RuntimeError, sf.LibsndfileError):
                raise exc from None

    try:
        return _decode_with_soundfile(path, sample_rate)
    except (RuntimeError, sf.LibsndfileError) as exc:
        logger.debug("soundfile decode failed, trying FFmpeg: %s", exc)
    return _decode_with_ffmpeg(path, sample_rate)
