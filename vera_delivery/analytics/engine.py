"""Delivery analytics over a timestamped transcript.

All functions here are pure: the same words and windows always produce the
same :class:`DeliveryAnalytics`, and inputs are never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from vera_delivery.analytics.fillers import detect_fillers, summarize_fillers
from vera_delivery.analytics.models import (
    DeliveryAnalytics,
    EnergyWindow,
    PauseInstance,
    PitchWindow,
    TimestampedWord,
)
from vera_delivery.analytics.pace import compute_content_segments, compute_pace_windows
from vera_delivery.analytics.pauses import detect_pauses
from vera_delivery.analytics.windows import population_stddev, round_half_up

logger = logging.getLogger(__name__)

__all__ = [
    "compute_delivery_analytics",
    "empty_analytics",
    "energy_rollups",
    "pitch_rollups",
]


def empty_analytics(words: Sequence[TimestampedWord] = ()) -> DeliveryAnalytics:
    """Return the zero-valued analytics, optionally keeping ``words``."""
    return DeliveryAnalytics(words=list(words))


def energy_rollups(windows: Sequence[EnergyWindow]) -> dict[str, float]:
    """Average, peak and spread of per-window loudness."""
    if not windows:
        return {"average_energy_db": 0.0, "peak_energy_db": 0.0, "energy_variation": 0.0}
    values = [w.rms_db for w in windows]
    return {
        "average_energy_db": round(sum(values) / len(values), 1),
        "peak_energy_db": max(values),
        "energy_variation": round(population_stddev(values), 1),
    }


def pitch_rollups(windows: Sequence[PitchWindow]) -> dict[str, float]:
    """Pitch aggregates over voiced windows plus the overall voiced ratio.

    Unvoiced windows carry zeros and would drag every average down, so they
    only contribute to ``overall_voiced_ratio``.
    """
    rollups = {
        "average_pitch_hz": 0.0,
        "average_pitch_semitones": 0.0,
        "pitch_range_semitones": 0.0,
        "pitch_variation_semitones": 0.0,
        "overall_voiced_ratio": 0.0,
    }
    if not windows:
        return rollups
    rollups["overall_voiced_ratio"] = round(
        sum(w.voiced_frame_ratio for w in windows) / len(windows), 2
    )
    voiced = [w for w in windows if w.is_voiced]
    if not voiced:
        return rollups
    hz = [w.median_f0_hz for w in voiced]
    semitones = [w.median_f0_semitones for w in voiced]
    rollups.update(
        average_pitch_hz=round(sum(hz) / len(hz), 1),
        average_pitch_semitones=round(sum(semitones) / len(semitones), 1),
        pitch_range_semitones=round(max(semitones) - min(semitones), 1),
        pitch_variation_semitones=round(population_stddev(semitones), 1),
    )
    return rollups


def _longest(pauses: Sequence[PauseInstance]) -> PauseInstance | None:
    longest: PauseInstance | None = None
    for pause in pauses:
        if longest is None or pause.duration > longest.duration:
            longest = pause
    return longest


def compute_delivery_analytics(
    words: Sequence[TimestampedWord],
    energy_windows: Sequence[EnergyWindow] | None = None,
    pitch_windows: Sequence[PitchWindow] | None = None,
) -> DeliveryAnalytics:
    """Build the full analytics record for one transcript.

    Args:
        words: Merged transcript words in ascending time order.
        energy_windows: Optional loudness windows from the acoustic analyzer.
        pitch_windows: Optional pitch windows sharing the energy time grid.

    Returns:
        DeliveryAnalytics: Empty (but carrying ``words``) when there are no
        words or the words span no time.
    """
    words = list(words)
    if not words:
        return empty_analytics()
    total_duration = words[-1].end - words[0].start
    if total_duration <= 0:
        logger.debug("Transcript spans %.3fs; returning empty analytics", total_duration)
        return empty_analytics(words)

    total_minutes = total_duration / 60
    pace_windows = compute_pace_windows(words, total_duration)
    fillers = detect_fillers(words)
    pauses = detect_pauses(words)
    energy = list(energy_windows or [])
    pitch = list(pitch_windows or [])

    return DeliveryAnalytics(
        words=words,
        total_duration_seconds=total_duration,
        average_wpm=round_half_up(len(words) / total_minutes),
        pace_windows=pace_windows,
        pace_variation=population_stddev([w.wpm for w in pace_windows]),
        filler_instances=fillers,
        filler_summary=summarize_fillers(fillers, total_minutes),
        total_filler_count=len(fillers),
        fillers_per_minute=round(len(fillers) / total_minutes, 1),
        pauses=pauses,
        total_pause_count=len(pauses),
        average_pause_duration=(
            round(sum(p.duration for p in pauses) / len(pauses), 1) if pauses else 0.0
        ),
        longest_pause=_longest(pauses),
        content_segments=compute_content_segments(words, total_duration),
        energy_windows=energy,
        pitch_windows=pitch,
        **energy_rollups(energy),
        **pitch_rollups(pitch),
    )
