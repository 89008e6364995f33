"""RMS loudness per analysis window."""

from __future__ import annotations

import math

import numpy as np

from vera_delivery.analytics.models import EnergyWindow
from vera_delivery.analytics.windows import tile_windows
from vera_delivery.config import AcousticConfig

__all__ = ["compute_energy_windows", "rms_db"]


def rms_db(samples: np.ndarray, silence_floor_db: float) -> float:
    """Return ``20 * log10(rms)`` of ``samples``, or the floor for silence."""
    if samples.size == 0:
        return silence_floor_db
    rms = math.sqrt(float(np.mean(np.square(samples, dtype=np.float64))))
    return 20.0 * math.log10(rms) if rms > 0 else silence_floor_db


def compute_energy_windows(
    samples: np.ndarray, config: AcousticConfig | None = None
) -> list[EnergyWindow]:
    """Split ``samples`` into equal windows and measure each one's RMS level.

    Args:
        samples: Mono float PCM at ``config.sample_rate``.
        config: Window length, sample rate and silence floor.

    Returns:
        list[EnergyWindow]: Windows tiling the whole buffer; empty when the
        buffer is empty.
    """
    config = config or AcousticConfig()
    sr = config.sample_rate
    total_duration = samples.size / sr
    windows: list[EnergyWindow] = []
    for start, end in tile_windows(total_duration, config.window_sec):
        lo = int(round(start * sr))
        hi = min(samples.size, int(round(end * sr)))
        windows.append(
            EnergyWindow(
                start_time=round(start, 1),
                end_time=round(end, 1),
                rms_db=round(rms_db(samples[lo:hi], config.silence_floor_db), 1),
            )
        )
    return windows
