"""PCM loudness and pitch analysis."""

from vera_delivery.acoustics.analyzer import AudioAnalysis, analyze_audio, analyze_samples
from vera_delivery.acoustics.energy import compute_energy_windows
from vera_delivery.acoustics.pitch import compute_pitch_windows, detect_pitch_yin

__all__ = [
    "AudioAnalysis",
    "analyze_audio",
    "analyze_samples",
    "compute_energy_windows",
    "compute_pitch_windows",
    "detect_pitch_yin",
]
