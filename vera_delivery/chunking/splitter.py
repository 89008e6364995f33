"""Size- and duration-bounded audio splitter.

The speech-to-text service caps both the upload size and the audio duration
of a single request, so the number of chunks is whichever constraint is
stricter. Chunks are cut on an even time grid; the last one runs to the end
of the file to absorb the rounding remainder.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

from vera_delivery.config import ChunkingConfig
from vera_delivery.media.ffmpeg import probe_media, transcode
from vera_delivery.utils.temp_files import temp_path

logger = logging.getLogger(__name__)

__all__ = ["ChunkInfo", "plan_chunk_count", "split_audio_if_needed"]


@dataclass(frozen=True)
class ChunkInfo:
    """One transcribable piece of audio.

    Attributes:
        path: Scratch file holding the audio.
        offset_seconds: Seconds to add to every timestamp extracted from it.

    """

    path: Path
    offset_seconds: float = 0.0


def plan_chunk_count(
    size_bytes: int,
    duration_seconds: float,
    *,
    max_size_bytes: int,
    max_chunk_duration_sec: float,
) -> int:
    """Return how many chunks satisfy both service limits.

    Returns:
        int: ``max(ceil(size / max_size), ceil(duration / max_duration))``.
    """
    size_chunks = math.ceil(size_bytes / max_size_bytes)
    duration_chunks = math.ceil(duration_seconds / max_chunk_duration_sec)
    return max(size_chunks, duration_chunks)


def split_audio_if_needed(
    path: Path | str,
    config: ChunkingConfig | None = None,
    *,
    scratch: list[Path] | None = None,
) -> list[ChunkInfo]:
    """Split ``path`` into chunks that each fit the service limits.

    When one chunk suffices, the original path is returned untouched with
    offset ``0``. Otherwise every chunk is a new compressed scratch file.

    Args:
        path: Audio file to split (normally the compressed analysis file).
        config: Limits and encoder settings. Defaults to
            :class:`ChunkingConfig`.
        scratch: Optional list that receives every chunk path as soon as it
            is allocated, so a failed cut can still be cleaned up.

    Returns:
        list[ChunkInfo]: Chunks in playback order.

    Raises:
        TranscodeError: If probing or cutting fails.
    """
    config = config or ChunkingConfig()
    path = Path(path)
    size_bytes = path.stat().st_size
    duration = probe_media(path).duration_seconds

    num_chunks = plan_chunk_count(
        size_bytes,
        duration,
        max_size_bytes=config.max_size_bytes,
        max_chunk_duration_sec=config.max_chunk_duration_sec,
    )
    if num_chunks <= 1:
        return [ChunkInfo(path=path, offset_seconds=0.0)]

    chunk_duration = math.floor(duration / num_chunks)
    logger.info(
        "Splitting %s (%.1f MB, %.0fs) into %d chunks of ~%ds",
        path.name,
        size_bytes / 1024 / 1024,
        duration,
        num_chunks,
        chunk_duration,
    )

    chunks: list[ChunkInfo] = []
    for i in range(num_chunks):
        start = i * chunk_duration
        chunk_path = temp_path(f"-chunk{i}{config.codec.extension}")
        if scratch is not None:
            scratch.append(chunk_path)
        chunks.append(ChunkInfo(path=chunk_path, offset_seconds=float(start)))
        transcode(
            path,
            chunk_path,
            config.codec,
            start_seconds=start,
            duration_seconds=chunk_duration if i < num_chunks - 1 else None,
        )
    return chunks
