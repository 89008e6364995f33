"""Plain-text digest of delivery analytics.

The digest is what prompt builders paste into coaching and scoring prompts,
so it favours short labelled lines over tables.
"""

from __future__ import annotations

from typing import Final

from vera_delivery.analytics.models import DeliveryAnalytics, PitchWindow

__all__ = ["NO_DATA_MESSAGE", "describe_pace", "describe_pace_variation", "format_analytics_summary"]

NO_DATA_MESSAGE: Final[str] = "No delivery data available."

HIGH_FILLER_RATE_PER_MIN: Final[float] = 3.0
FLAT_VOLUME_DB: Final[float] = 2.0
MONOTONE_SEMITONES: Final[float] = 1.0
RISING_PITCH_SEMITONES: Final[float] = 2.0
UNIFORM_PACE_WPM: Final[float] = 8.0
ERRATIC_PACE_WPM: Final[float] = 35.0


def _clock(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def _num(value: float) -> str:
    return f"{round(value, 1):g}"


def describe_pace(wpm: float) -> str:
    """Verbal band for an average speaking rate."""
    if wpm < 100:
        return "very slow"
    if wpm < 120:
        return "measured, deliberate"
    if wpm < 150:
        return "conversational, good range"
    if wpm < 170:
        return "brisk but clear"
    if wpm < 190:
        return "fast"
    return "very fast, may lose audience"


def describe_pace_variation(stddev: float) -> str:
    """Verbal band for the spread of per-window pace."""
    if stddev < UNIFORM_PACE_WPM:
        return "very uniform, could benefit from more variation"
    if stddev < 20:
        return "natural variation"
    if stddev < ERRATIC_PACE_WPM:
        return "notable variation, may indicate rushing or hesitation"
    return "high variation, inconsistent pacing"


def _pace_lines(analytics: DeliveryAnalytics) -> list[str]:
    lines = [
        f"Speaking pace: {analytics.average_wpm} WPM average "
        f"({describe_pace(analytics.average_wpm)})",
        f"Pace variation: {analytics.pace_variation:.1f} WPM std dev "
        f"({describe_pace_variation(analytics.pace_variation)})",
    ]
    windows = analytics.pace_windows
    if len(windows) > 1:
        fastest = max(windows, key=lambda w: w.wpm)
        slowest = min(windows, key=lambda w: w.wpm)
        lines.append(f"Fastest section: {fastest.wpm} WPM at {_clock(fastest.start_time)}")
        lines.append(f"Slowest section: {slowest.wpm} WPM at {_clock(slowest.start_time)}")
    return lines


def _filler_lines(analytics: DeliveryAnalytics) -> list[str]:
    lines = [
        f"Filler words: {analytics.total_filler_count} total "
        f"({_num(analytics.fillers_per_minute)}/min)"
    ]
    if analytics.filler_summary:
        top = ", ".join(f'"{f.phrase}" ({f.count}x)' for f in analytics.filler_summary[:3])
        lines.append(f"Most frequent: {top}")
    return lines


def _pause_lines(analytics: DeliveryAnalytics) -> list[str]:
    lines = [f"Significant pauses (>1.5s): {analytics.total_pause_count}"]
    longest = analytics.longest_pause
    if longest is not None:
        lines.append(f'Longest pause: {longest.duration:.1f}s after "{longest.preceding_context}"')
    return lines


def _volume_lines(analytics: DeliveryAnalytics) -> list[str]:
    windows = analytics.energy_windows
    if not windows:
        return []
    loudest = max(windows, key=lambda w: w.rms_db)
    quietest = min(windows, key=lambda w: w.rms_db)
    return [
        f"Volume: {_num(analytics.average_energy_db)} dB RMS average",
        f"Volume variation: {_num(analytics.energy_variation)} dB std dev",
        f"Peak volume: {_num(analytics.peak_energy_db)} dB",
        f"Loudest section: {_num(loudest.rms_db)} dB at {_clock(loudest.start_time)}",
        f"Quietest section: {_num(quietest.rms_db)} dB at {_clock(quietest.start_time)}",
    ]


def _voiced(analytics: DeliveryAnalytics) -> list[PitchWindow]:
    return [w for w in analytics.pitch_windows if w.is_voiced]


def _pitch_lines(analytics: DeliveryAnalytics) -> list[str]:
    voiced = _voiced(analytics)
    if not voiced:
        return []
    highest = max(voiced, key=lambda w: w.median_f0_hz)
    lowest = min(voiced, key=lambda w: w.median_f0_hz)
    return [
        f"Pitch: {_num(analytics.average_pitch_hz)} Hz average "
        f"({_num(analytics.overall_voiced_ratio * 100)}% voiced)",
        f"Pitch range: {_num(analytics.pitch_range_semitones)} semitones across sections",
        f"Pitch variation: {_num(analytics.pitch_variation_semitones)} semitones std dev",
        f"Highest pitch section: {_num(highest.median_f0_hz)} Hz at {_clock(highest.start_time)}",
        f"Lowest pitch section: {_num(lowest.median_f0_hz)} Hz at {_clock(lowest.start_time)}",
    ]


def _segment_lines(analytics: DeliveryAnalytics) -> list[str]:
    segments = analytics.content_segments
    if len(segments) <= 1:
        return []
    lines = ["Pace by content section:"]
    for seg in segments:
        lines.append(
            f"  {_clock(seg.start_time)}-{_clock(seg.end_time)}: "
            f'{seg.wpm} WPM, "{seg.topic_label}"'
        )
    return lines


def _observations(analytics: DeliveryAnalytics) -> list[str]:
    notes: list[str] = []
    if analytics.total_filler_count == 0:
        notes.append("No filler words detected.")
    elif analytics.fillers_per_minute >= HIGH_FILLER_RATE_PER_MIN:
        notes.append(
            f"High filler word density ({_num(analytics.fillers_per_minute)}/min); "
            "fillers are likely noticeable to the audience."
        )

    if analytics.pace_variation < UNIFORM_PACE_WPM:
        notes.append("Pace is very uniform; varying speed would help emphasise key points.")
    elif analytics.pace_variation >= ERRATIC_PACE_WPM:
        notes.append("Pace swings widely between sections.")

    if analytics.energy_windows and analytics.energy_variation < FLAT_VOLUME_DB:
        notes.append("Volume is very flat; little vocal emphasis across the talk.")

    voiced = _voiced(analytics)
    if voiced:
        if analytics.pitch_variation_semitones < MONOTONE_SEMITONES:
            notes.append("Pitch is close to monotone across sections.")
        rise = voiced[-1].median_f0_semitones - voiced[0].median_f0_semitones
        if len(voiced) > 1 and rise >= RISING_PITCH_SEMITONES:
            notes.append(
                f"Pitch rises toward the end (+{_num(rise)} semitones), "
                "which can sound less confident."
            )
    return notes


def format_analytics_summary(analytics: DeliveryAnalytics) -> str:
    """Render ``analytics`` as labelled plain-text lines.

    Sections are separated by blank lines. Volume and pitch sections appear
    only when the acoustic analyzer produced windows, and the observations
    section only when there is something to observe.

    Returns:
        str: The digest, or :data:`NO_DATA_MESSAGE` for empty analytics.
    """
    if analytics.total_duration_seconds <= 0 or not analytics.words:
        return NO_DATA_MESSAGE

    sections = [
        _pace_lines(analytics),
        _filler_lines(analytics),
        _pause_lines(analytics),
        _volume_lines(analytics),
        _pitch_lines(analytics),
        _segment_lines(analytics),
    ]
    notes = _observations(analytics)
    if notes:
        sections.append(["Delivery observations:", *(f"- {n}" for n in notes)])
    return "\n\n".join("\n".join(lines) for lines in sections if lines)
