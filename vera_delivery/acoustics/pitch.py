"""Fundamental-frequency estimation and per-window pitch statistics.

``detect_pitch_yin`` is a numpy implementation of the YIN estimator
(de Cheveigné & Kawahara, 2002): difference function, cumulative mean
normalised difference, absolute threshold and parabolic interpolation.
``compute_pitch_windows`` runs any estimator with the same signature over
short overlapping frames and rolls the voiced frames up into analysis windows.

``librosa.yin`` is not used because it reports a pitch for every frame with no
unvoiced decision. ``librosa.pyin`` has one but runs a Viterbi decode over the
whole recording, which is too slow for hour-long talks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

import numpy as np

from vera_delivery.analytics.models import PitchWindow
from vera_delivery.analytics.windows import bucket_by_point, tile_windows
from vera_delivery.config import AcousticConfig
from vera_delivery.utils.constant import YIN_THRESHOLD

logger = logging.getLogger(__name__)

PitchDetector = Callable[[np.ndarray, int], "float | None"]
MIN_VOICED_RATIO = 0.01

__all__ = [
    "FramePitch",
    "PitchDetector",
    "compute_pitch_windows",
    "detect_pitch_yin",
    "hz_to_semitones",
    "track_frame_pitches",
]


def hz_to_semitones(hz: float | np.ndarray) -> float | np.ndarray:
    """Convert Hz to semitones relative to 1 Hz (``12 * log2(hz)``)."""
    return 12.0 * np.log2(hz)


def detect_pitch_yin(
    frame: np.ndarray, sample_rate: int, threshold: float = YIN_THRESHOLD
) -> float | None:
    """Estimate the fundamental frequency of one frame.

    Args:
        frame: Mono float samples. Periods longer than half the frame cannot be
            resolved.
        sample_rate: Sample rate of ``frame`` in Hz.
        threshold: Absolute threshold on the normalised difference; lower is
            stricter.

    Returns:
        float | None: Estimated F0 in Hz, or ``None`` when no lag dips under
        the threshold (silence, noise, unvoiced speech).
    """
    x = np.asarray(frame, dtype=np.float64)
    half = x.size // 2
    if half < 3:
        return None

    # d(tau) = E(x[:W]) + E(x[tau:tau+W]) - 2 * acf(tau)
    head = x[:half]
    acf = np.correlate(x, head, mode="valid")[:half]
    cum_sq = np.concatenate(([0.0], np.cumsum(x * x)))
    lagged_energy = cum_sq[half : 2 * half] - cum_sq[:half]
    diff = np.maximum(cum_sq[half] + lagged_energy - 2.0 * acf, 0.0)

    taus = np.arange(half, dtype=np.float64)
    running = np.cumsum(diff[1:])
    cmnd = np.ones(half, dtype=np.float64)
    np.divide(diff[1:] * taus[1:], running, out=cmnd[1:], where=running > 0)

    below = np.flatnonzero(cmnd[2:] < threshold)
    if below.size == 0:
        return None
    tau = int(below[0]) + 2
    while tau + 1 < half and cmnd[tau + 1] < cmnd[tau]:
        tau += 1

    better_tau = float(tau)
    if tau + 1 < half:
        s0, s1, s2 = cmnd[tau - 1], cmnd[tau], cmnd[tau + 1]
        denom = 2.0 * (2.0 * s1 - s2 - s0)
        if denom != 0:
            better_tau = tau + (s2 - s0) / denom
    if better_tau <= 0:
        return None
    return float(sample_rate / better_tau)


@dataclass(frozen=True)
class FramePitch:
    """Pitch estimate for one analysis frame.

    Attributes:
        time: Frame start in seconds.
        hz: In-band F0, or ``None`` for an unvoiced frame.

    """

    time: float
    hz: float | None


def track_frame_pitches(
    samples: np.ndarray,
    config: AcousticConfig,
    detector: PitchDetector | None = None,
) -> list[FramePitch]:
    """Run ``detector`` over overlapping frames of ``samples``.

    Estimates outside ``[config.min_hz, config.max_hz]`` are treated as
    unvoiced. Without a ``detector`` the YIN estimator runs with
    ``config.yin_threshold``.
    """
    if detector is None:
        detector = partial(detect_pitch_yin, threshold=config.yin_threshold)
    sr = config.sample_rate
    frame_len = int(round(sr * config.frame_sec))
    hop_len = max(1, int(round(sr * config.hop_sec)))
    frames: list[FramePitch] = []
    for offset in range(0, samples.size - frame_len + 1, hop_len):
        raw = detector(samples[offset : offset + frame_len], sr)
        hz = raw if raw is not None and config.min_hz <= raw <= config.max_hz else None
        frames.append(FramePitch(time=offset / sr, hz=hz))
    return frames


def _window_stats(start: float, end: float, frames: list[FramePitch]) -> PitchWindow:
    voiced = np.array([f.hz for f in frames if f.hz is not None], dtype=np.float64)
    if voiced.size == 0:
        return PitchWindow(start_time=round(start, 1), end_time=round(end, 1))

    semitones = hz_to_semitones(voiced)
    p10, p90 = np.percentile(semitones, [10, 90])
    ratio = voiced.size / len(frames)
    return PitchWindow(
        start_time=round(start, 1),
        end_time=round(end, 1),
        median_f0_hz=round(float(np.median(voiced)), 1),
        median_f0_semitones=round(float(np.median(semitones)), 1),
        f0_range_semitones=round(float(p90 - p10), 1),
        f0_stddev_semitones=round(float(np.std(semitones)), 1),
        # A window with any voiced frame never reports a zero ratio.
        voiced_frame_ratio=max(round(ratio, 2), MIN_VOICED_RATIO),
    )


def compute_pitch_windows(
    samples: np.ndarray,
    config: AcousticConfig | None = None,
    detector: PitchDetector | None = None,
) -> list[PitchWindow]:
    """Roll per-frame pitch estimates up into fixed analysis windows.

    Windows use the same bucketing as the energy windows. A window with no
    frames, or with only unvoiced frames, is all zeros.

    Returns:
        list[PitchWindow]: Empty when the buffer is shorter than one frame.
    """
    config = config or AcousticConfig()
    if samples.size == 0:
        return []
    frames = track_frame_pitches(samples, config, detector)
    if not frames:
        return []

    total_duration = samples.size / config.sample_rate
    bounds = tile_windows(total_duration, config.window_sec)
    buckets = bucket_by_point(frames, bounds, lambda f: f.time)
    windows = [_window_stats(start, end, bucket) for (start, end), bucket in zip(bounds, buckets)]
    logger.debug(
        "Pitch: %d frames, %d windows, %d voiced",
        len(frames),
        len(windows),
        sum(1 for w in windows if w.is_voiced),
    )
    return windows
