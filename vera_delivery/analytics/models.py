"""Common data models for transcripts and delivery analytics.

This module defines pydantic models that are shared across the transcription
orchestrator, the acoustic analyzer and the analytics engine. Fields are
snake_case in Python and serialise to camelCase (``model_dump(by_alias=True)``)
for the report and scoring layers; either casing is accepted on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "ContentSegment",
    "DeliveryAnalytics",
    "EnergyWindow",
    "FillerInstance",
    "FillerSummary",
    "PaceWindow",
    "PauseInstance",
    "PitchWindow",
    "TimestampedWord",
]


class _FrozenModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TimestampedWord(_FrozenModel):
    """A single transcribed word with timing information."""

    word: str = Field(..., description="The transcribed word as returned by the service.")
    start: float = Field(..., description="Start time of the word in seconds.")
    end: float = Field(..., description="End time of the word in seconds.")


class EnergyWindow(_FrozenModel):
    """RMS loudness of one analysis window."""

    start_time: float
    end_time: float
    rms_db: float = Field(..., description="RMS level in dBFS, floored for digital silence.")


class PitchWindow(_FrozenModel):
    """Fundamental-frequency statistics of one analysis window.

    Unvoiced windows (``voiced_frame_ratio == 0``) carry zeros in every
    numeric field and are excluded from pitch averages.
    """

    start_time: float
    end_time: float
    median_f0_hz: float = 0.0
    median_f0_semitones: float = 0.0
    f0_range_semitones: float = Field(0.0, description="10th-90th percentile spread.")
    f0_stddev_semitones: float = 0.0
    voiced_frame_ratio: float = Field(0.0, ge=0.0, le=1.0)

    @property
    def is_voiced(self) -> bool:
        """``True`` when at least one frame in the window carried a pitch."""
        return self.voiced_frame_ratio > 0


class FillerInstance(_FrozenModel):
    """A filler word or phrase anchored to the words it consumed."""

    phrase: str
    timestamp: float
    word_indices: list[int]


class FillerSummary(_FrozenModel):
    """Occurrences of one filler phrase across the transcript."""

    phrase: str
    count: int
    per_minute: float


class PauseInstance(_FrozenModel):
    """A silence between two adjacent words."""

    start: float
    end: float
    duration: float
    preceding_word: str
    following_word: str
    preceding_context: str


class PaceWindow(_FrozenModel):
    """Speaking rate over one fixed time bucket."""

    start_time: float
    end_time: float
    wpm: int
    word_count: int


class ContentSegment(_FrozenModel):
    """A coarse slice of the talk with its text and pace."""

    start_time: float
    end_time: float
    text: str
    wpm: int
    word_count: int
    topic_label: str


class DeliveryAnalytics(_FrozenModel):
    """Aggregate delivery metrics for one transcription job."""

    words: list[TimestampedWord] = Field(default_factory=list)
    total_duration_seconds: float = 0.0

    average_wpm: int = 0
    pace_windows: list[PaceWindow] = Field(default_factory=list)
    pace_variation: float = 0.0

    filler_instances: list[FillerInstance] = Field(default_factory=list)
    filler_summary: list[FillerSummary] = Field(default_factory=list)
    total_filler_count: int = 0
    fillers_per_minute: float = 0.0

    pauses: list[PauseInstance] = Field(default_factory=list)
    total_pause_count: int = 0
    average_pause_duration: float = 0.0
    longest_pause: PauseInstance | None = None

    content_segments: list[ContentSegment] = Field(default_factory=list)

    energy_windows: list[EnergyWindow] = Field(default_factory=list)
    average_energy_db: float = 0.0
    peak_energy_db: float = 0.0
    energy_variation: float = 0.0

    pitch_windows: list[PitchWindow] = Field(default_factory=list)
    average_pitch_hz: float = 0.0
    average_pitch_semitones: float = 0.0
    pitch_range_semitones: float = 0.0
    pitch_variation_semitones: float = 0.0
    overall_voiced_ratio: float = 0.0
