"""Words-per-minute over fixed windows and coarse content segments."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from vera_delivery.analytics.models import ContentSegment, PaceWindow, TimestampedWord
from vera_delivery.analytics.windows import bucket_by_point, round_half_up, tile_windows

__all__ = [
    "CONTENT_SEGMENT_SEC",
    "PACE_WINDOW_SEC",
    "compute_content_segments",
    "compute_pace_windows",
]

PACE_WINDOW_SEC: Final[float] = 30.0
CONTENT_SEGMENT_SEC: Final[float] = 120.0
TOPIC_LABEL_WORDS: Final[int] = 8
EMPTY_TOPIC_LABEL: Final[str] = "(empty)"


def _midpoint(word: TimestampedWord) -> float:
    return (word.start + word.end) / 2


def _wpm(word_count: int, window_seconds: float) -> int:
    minutes = window_seconds / 60
    return round_half_up(word_count / minutes) if minutes > 0 else 0


def _bucket_words(
    words: Sequence[TimestampedWord],
    total_duration: float,
    target_seconds: float,
    origin: float | None,
) -> tuple[list[tuple[float, float]], list[list[TimestampedWord]]]:
    if not words or total_duration <= 0:
        return [], []
    start = words[0].start if origin is None else origin
    bounds = tile_windows(total_duration, target_seconds, origin=start)
    return bounds, bucket_by_point(words, bounds, _midpoint, close_last=True)


def compute_pace_windows(
    words: Sequence[TimestampedWord],
    total_duration: float,
    *,
    window_seconds: float = PACE_WINDOW_SEC,
    origin: float | None = None,
) -> list[PaceWindow]:
    """Bucket words by midpoint into equal windows and report their pace.

    Args:
        words: Transcript words in ascending time order.
        total_duration: Seconds spanned by the words.
        window_seconds: Preferred window length.
        origin: Start of the first window. Defaults to the first word's start,
            not ``0``, so a talk with leading silence keeps its last words and
            window times are offset by that silence. Windows anchored at ``0``
            also need ``total_duration`` measured from ``0``.

    Returns:
        list[PaceWindow]: One entry per window, empty for degenerate input.
    """
    bounds, buckets = _bucket_words(words, total_duration, window_seconds, origin)
    size = total_duration / len(bounds) if bounds else 0.0
    return [
        PaceWindow(start_time=start, end_time=end, wpm=_wpm(len(bucket), size), word_count=len(bucket))
        for (start, end), bucket in zip(bounds, buckets)
    ]


def _topic_label(segment_words: Sequence[TimestampedWord]) -> str:
    head = " ".join(w.word for w in segment_words[:TOPIC_LABEL_WORDS])
    if not head:
        return EMPTY_TOPIC_LABEL
    return head + ("..." if len(segment_words) > TOPIC_LABEL_WORDS else "")


def compute_content_segments(
    words: Sequence[TimestampedWord],
    total_duration: float,
    *,
    segment_seconds: float = CONTENT_SEGMENT_SEC,
    origin: float | None = None,
) -> list[ContentSegment]:
    """Same bucketing as pace windows, at two-minute granularity, with text."""
    bounds, buckets = _bucket_words(words, total_duration, segment_seconds, origin)
    size = total_duration / len(bounds) if bounds else 0.0
    return [
        ContentSegment(
            start_time=start,
            end_time=end,
            text=" ".join(w.word for w in bucket),
            wpm=_wpm(len(bucket), size),
            word_count=len(bucket),
            topic_label=_topic_label(bucket),
        )
        for (start, end), bucket in zip(bounds, buckets)
    ]
