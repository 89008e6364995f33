"""Filler word and phrase detection."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from typing import Final

from vera_delivery.analytics.models import FillerInstance, FillerSummary, TimestampedWord

__all__ = [
    "MULTI_WORD_FILLERS",
    "SINGLE_WORD_FILLERS",
    "clean_word",
    "detect_fillers",
    "summarize_fillers",
]

SINGLE_WORD_FILLERS: Final[frozenset[str]] = frozenset(
    {"um", "uh", "like", "basically", "so", "right", "actually", "well", "literally"}
)
MULTI_WORD_FILLERS: Final[tuple[tuple[str, ...], ...]] = (
    ("you", "know"),
    ("i", "mean"),
    ("kind", "of"),
    ("sort", "of"),
)
MULTI_WORD_MAX_GAP_SEC: Final[float] = 0.5

_NON_WORD_RE = re.compile(r"[^a-zA-Z']")


def clean_word(word: str) -> str:
    """Lowercase ``word`` and strip everything but ASCII letters and apostrophes."""
    return _NON_WORD_RE.sub("", word).lower()


def _match_phrase(
    words: Sequence[TimestampedWord],
    cleaned: Sequence[str],
    consumed: set[int],
    start: int,
    pattern: tuple[str, ...],
) -> bool:
    if start + len(pattern) > len(words):
        return False
    for j, token in enumerate(pattern):
        idx = start + j
        if idx in consumed or cleaned[idx] != token:
            return False
        if j > 0 and words[idx].start - words[idx - 1].end > MULTI_WORD_MAX_GAP_SEC:
            return False
    return True


def detect_fillers(words: Sequence[TimestampedWord]) -> list[FillerInstance]:
    """Find filler phrases first, then single filler words among the rest.

    Multi-word phrases are matched greedily and their words are consumed, so a
    token such as ``"so"`` inside ``"sort of"`` is never reported twice. A
    phrase only counts when every gap between its words is at most half a
    second.

    Returns:
        list[FillerInstance]: Instances sorted by timestamp.
    """
    cleaned = [clean_word(w.word) for w in words]
    consumed: set[int] = set()
    results: list[FillerInstance] = []

    for i in range(len(words)):
        if i in consumed:
            continue
        for pattern in MULTI_WORD_FILLERS:
            if _match_phrase(words, cleaned, consumed, i, pattern):
                indices = list(range(i, i + len(pattern)))
                consumed.update(indices)
                results.append(
                    FillerInstance(
                        phrase=" ".join(pattern),
                        timestamp=words[i].start,
                        word_indices=indices,
                    )
                )
                break

    for i, token in enumerate(cleaned):
        if i in consumed or token not in SINGLE_WORD_FILLERS:
            continue
        consumed.add(i)
        results.append(FillerInstance(phrase=token, timestamp=words[i].start, word_indices=[i]))

    results.sort(key=lambda f: f.timestamp)
    return results


def summarize_fillers(
    instances: Sequence[FillerInstance], total_minutes: float
) -> list[FillerSummary]:
    """Count instances per phrase, most frequent first."""
    counts = Counter(f.phrase for f in instances)
    summary = [
        FillerSummary(
            phrase=phrase,
            count=count,
            per_minute=round(count / total_minutes, 1) if total_minutes > 0 else 0.0,
        )
        for phrase, count in counts.items()
    ]
    summary.sort(key=lambda s: s.count, reverse=True)
    return summary
