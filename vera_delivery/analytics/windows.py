"""Fixed-size time bucketing shared by every windowed metric.

Pace windows, content segments, energy windows and pitch windows all follow
the same shape: pick ``ceil(total / target)`` buckets, then stretch them so
they tile the real duration exactly instead of truncating the last one.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")

__all__ = ["bucket_by_point", "population_stddev", "round_half_up", "tile_windows"]


def tile_windows(
    total_seconds: float, target_seconds: float, *, origin: float = 0.0
) -> list[tuple[float, float]]:
    """Return ``(start, end)`` bounds of equal windows covering ``total_seconds``.

    Args:
        total_seconds: Duration to cover. Non-positive durations yield no windows.
        target_seconds: Preferred window length.
        origin: Timestamp the first window starts at.

    Returns:
        list[tuple[float, float]]: ``max(1, ceil(total / target))`` contiguous
        windows of identical length.
    """
    if total_seconds <= 0:
        return []
    count = max(1, math.ceil(total_seconds / target_seconds))
    size = total_seconds / count
    return [(origin + i * size, origin + (i + 1) * size) for i in range(count)]


def bucket_by_point(
    items: Iterable[T],
    bounds: Sequence[tuple[float, float]],
    point: Callable[[T], float],
    *,
    close_last: bool = False,
) -> list[list[T]]:
    """Group ``items`` into ``bounds`` using a half-open membership test.

    An item belongs to window ``[start, end)`` when ``point(item)`` falls in
    it. Items outside every window are dropped, and an item never lands in two
    windows. With ``close_last`` the final window also accepts its end point.
    """
    buckets: list[list[T]] = [[] for _ in bounds]
    last = len(bounds) - 1
    for item in items:
        p = point(item)
        for idx, (start, end) in enumerate(bounds):
            if start <= p < end or (close_last and idx == last and p == end):
                buckets[idx].append(item)
                break
    return buckets


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (``2.5`` -> ``3``)."""
    return math.floor(value + 0.5)


def population_stddev(values: Sequence[float]) -> float:
    """Population standard deviation; ``0`` for fewer than two values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
