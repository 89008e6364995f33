"""Delivery analytics: fillers, pauses, pace, loudness and pitch rollups."""

from vera_delivery.analytics.engine import compute_delivery_analytics, empty_analytics
from vera_delivery.analytics.fillers import detect_fillers
from vera_delivery.analytics.models import (
    ContentSegment,
    DeliveryAnalytics,
    EnergyWindow,
    FillerInstance,
    FillerSummary,
    PaceWindow,
    PauseInstance,
    PitchWindow,
    TimestampedWord,
)
from vera_delivery.analytics.pace import compute_content_segments, compute_pace_windows
from vera_delivery.analytics.pauses import detect_pauses
from vera_delivery.analytics.summary import format_analytics_summary

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
    "compute_content_segments",
    "compute_delivery_analytics",
    "compute_pace_windows",
    "detect_fillers",
    "detect_pauses",
    "empty_analytics",
    "format_analytics_summary",
]
