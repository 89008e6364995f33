"""Single-pass acoustic analysis of a prepared audio file."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from vera_delivery.acoustics.energy import compute_energy_windows
from vera_delivery.acoustics.pitch import PitchDetector, compute_pitch_windows
from vera_delivery.analytics.models import EnergyWindow, PitchWindow
from vera_delivery.config import AcousticConfig
from vera_delivery.media.ffmpeg import decode_pcm

logger = logging.getLogger(__name__)

__all__ = ["AudioAnalysis", "analyze_audio", "analyze_samples"]


@dataclass
class AudioAnalysis:
    """Energy and pitch windows sharing one time grid."""

    energy_windows: list[EnergyWindow] = field(default_factory=list)
    pitch_windows: list[PitchWindow] = field(default_factory=list)


def analyze_samples(
    samples: np.ndarray,
    config: AcousticConfig | None = None,
    detector: PitchDetector | None = None,
) -> AudioAnalysis:
    """Compute energy and pitch windows from already-decoded PCM."""
    config = config or AcousticConfig()
    return AudioAnalysis(
        energy_windows=compute_energy_windows(samples, config),
        pitch_windows=compute_pitch_windows(samples, config, detector),
    )


def analyze_audio(
    path: Path | str,
    config: AcousticConfig | None = None,
    *,
    detector: PitchDetector | None = None,
    decoder: Callable[[Path | str, int], np.ndarray] = decode_pcm,
) -> AudioAnalysis:
    """Decode ``path`` once to mono float PCM and analyse it.

    Args:
        path: Audio or video file readable by FFmpeg.
        config: Analysis settings. Defaults to :class:`AcousticConfig`.
        detector: Frame-level F0 estimator. Defaults to YIN.
        decoder: Function returning mono float32 samples at the requested
            rate.

    Returns:
        AudioAnalysis: Windows for the whole file.

    Raises:
        TranscodeError: If the file cannot be decoded.
    """
    config = config or AcousticConfig()
    t0 = time.perf_counter()
    samples = decoder(path, config.sample_rate)
    analysis = analyze_samples(samples, config, detector)
    logger.info(
        "Analysed %.1fs of audio in %.2fs (%d energy / %d pitch windows)",
        samples.size / config.sample_rate,
        time.perf_counter() - t0,
        len(analysis.energy_windows),
        len(analysis.pitch_windows),
    )
    return analysis
