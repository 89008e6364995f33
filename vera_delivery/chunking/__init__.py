"""Chunk splitting for the speech-to-text service's per-request limits.

This module decides how many time-bounded pieces a recording needs and cuts
them with FFmpeg, recording each piece's offset so timestamps can be restored
after transcription.
"""

from .splitter import ChunkInfo, plan_chunk_count, split_audio_if_needed

__all__ = [
    "ChunkInfo",
    "plan_chunk_count",
    "split_audio_if_needed",
]
