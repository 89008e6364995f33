"""Unit tests for pace windows, content segments and window tiling."""

from __future__ import annotations

import pytest

from vera_delivery.analytics.pace import compute_content_segments, compute_pace_windows
from vera_delivery.analytics.windows import (
    bucket_by_point,
    population_stddev,
    round_half_up,
    tile_windows,
)


def test_tile_windows_stretches_to_total() -> None:
    """Windows tile the whole duration in equal pieces."""
    bounds = tile_windows(70.0, 30.0)
    assert len(bounds) == 3
    assert bounds[0] == (0.0, pytest.approx(70 / 3))
    assert bounds[-1][1] == pytest.approx(70.0)
    assert tile_windows(0.0, 30.0) == []
    assert tile_windows(5.0, 30.0, origin=2.0) == [(2.0, 7.0)]


def test_bucket_by_point_half_open() -> None:
    """Points land in exactly one window; the end point only with close_last."""
    bounds = [(0.0, 1.0), (1.0, 2.0)]
    assert bucket_by_point([0.5, 1.0, 2.0], bounds, float) == [[0.5], [1.0]]
    assert bucket_by_point([2.0], bounds, float, close_last=True) == [[], [2.0]]


def test_population_stddev() -> None:
    """Population (not sample) standard deviation; zero for short input."""
    assert population_stddev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)
    assert population_stddev([5]) == 0.0


def test_even_spacing_gives_sixty_wpm(make_words) -> None:
    """60 words over 60s with 30s windows: two windows at 60 WPM."""
    words = make_words([(f"word{i}", i, i + 0.5) for i in range(60)])
    windows = compute_pace_windows(words, 60)
    assert len(windows) == 2
    assert [w.wpm for w in windows] == [60, 60]
    assert [w.word_count for w in windows] == [30, 30]


def test_pace_windows_degenerate_input(make_words) -> None:
    """No words or no duration produce no windows."""
    assert compute_pace_windows([], 60) == []
    assert compute_pace_windows(make_words([("hi", 0, 0.3)]), 0) == []


def test_short_talk_single_window(make_words) -> None:
    """Anything under 30s is one window holding every word."""
    windows = compute_pace_windows(make_words([("hi", 0, 0.3), ("there", 0.5, 0.8)]), 10)
    assert len(windows) == 1
    assert windows[0].word_count == 2


def test_windows_anchor_at_first_word(make_words) -> None:
    """Talks starting late are bucketed from the first word, keeping the last."""
    words = make_words([("a", 100.0, 100.4), ("b", 110.0, 110.4), ("c", 130.0, 130.0)])
    windows = compute_pace_windows(words, 30.0)
    assert windows[0].start_time == 100.0
    assert sum(w.word_count for w in windows) == 3


def test_content_segments_two_minute_buckets(make_words) -> None:
    """300s of speech splits into three segments with labels and text."""
    words = make_words([(f"w{i}", i, i + 0.5) for i in range(300)])
    segments = compute_content_segments(words, 300)
    assert len(segments) == 3
    assert sum(s.word_count for s in segments) == 300
    assert segments[0].topic_label == "w0 w1 w2 w3 w4 w5 w6 w7..."
    assert segments[0].text.startswith("w0 w1")
    assert segments[0].wpm == 60


def test_content_segment_short_label_and_empty(make_words) -> None:
    """Labels without truncation carry no ellipsis; empty segments get a placeholder."""
    words = make_words([("hello", 0.0, 0.5), ("there", 1.0, 1.5), ("end", 299.0, 300.0)])
    segments = compute_content_segments(words, 300.0)
    assert segments[0].topic_label == "hello there"
    assert segments[1].topic_label == "(empty)"
    assert segments[1].text == ""
    assert segments[1].wpm == 0


def test_round_half_up() -> None:
    """Halves round up rather than to the nearest even integer."""
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(3.49) == 3
    assert round_half_up(0.0) == 0


def test_pace_window_wpm_rounds_half_up(make_words) -> None:
    """One word in a 24s window is 2.5 WPM, reported as 3."""
    windows = compute_pace_windows(make_words([("a", 0.0, 24.0)]), 24.0)
    assert [w.wpm for w in windows] == [3]
    segments = compute_content_segments(make_words([("a", 0.0, 24.0)]), 24.0)
    assert segments[0].wpm == 3
