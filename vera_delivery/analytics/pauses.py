"""Silence gap detection between adjacent words."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from vera_delivery.analytics.models import PauseInstance, TimestampedWord

__all__ = ["PAUSE_THRESHOLD_SEC", "PRECEDING_CONTEXT_WORDS", "detect_pauses"]

PAUSE_THRESHOLD_SEC: Final[float] = 1.5
PRECEDING_CONTEXT_WORDS: Final[int] = 5


def detect_pauses(
    words: Sequence[TimestampedWord], threshold: float = PAUSE_THRESHOLD_SEC
) -> list[PauseInstance]:
    """Report every gap of at least ``threshold`` seconds between two words.

    Each pause carries the bordering words and up to five preceding words of
    context, which lets feedback quote what was said right before the silence.
    """
    pauses: list[PauseInstance] = []
    for i in range(1, len(words)):
        prev, curr = words[i - 1], words[i]
        gap = curr.start - prev.end
        if gap < threshold:
            continue
        context = words[max(0, i - PRECEDING_CONTEXT_WORDS) : i]
        pauses.append(
            PauseInstance(
                start=prev.end,
                end=curr.start,
                duration=gap,
                preceding_word=prev.word,
                following_word=curr.word,
                preceding_context=" ".join(w.word for w in context),
            )
        )
    return pauses
