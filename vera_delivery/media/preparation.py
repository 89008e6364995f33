"""Format decision and audio preparation for transcription.

Small files already in a format the speech-to-text service accepts are passed
through untouched. Everything else is checked for an audio stream, extracted
to compressed mono audio and split into service-sized chunks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from vera_delivery.chunking.splitter import ChunkInfo, split_audio_if_needed
from vera_delivery.config import ChunkingConfig
from vera_delivery.errors import NoAudioTrackError
from vera_delivery.media.ffmpeg import probe_media, transcode
from vera_delivery.utils.temp_files import temp_path

logger = logging.getLogger(__name__)

__all__ = ["PreparedAudio", "needs_transcoding", "prepare_for_transcription"]


@dataclass
class PreparedAudio:
    """Result of preparing one source file.

    Attributes:
        chunks: Pieces to transcribe, in order.
        all_temp_paths: Every scratch path involved, including the input,
            for cleanup at job end.
        analysis_path: Single file the acoustic analyzer should decode.

    """

    chunks: list[ChunkInfo]
    all_temp_paths: list[Path] = field(default_factory=list)
    analysis_path: Path | None = None


def needs_transcoding(path: Path, size_bytes: int, config: ChunkingConfig) -> bool:
    """Return ``True`` unless the file is native-format and under the size cap."""
    ext = path.suffix.lower()
    return not (size_bytes <= config.max_size_bytes and ext in config.native_extensions)


def prepare_for_transcription(
    input_path: Path | str,
    config: ChunkingConfig | None = None,
    *,
    scratch: list[Path] | None = None,
) -> PreparedAudio:
    """Turn a downloaded file into transcribable chunks.

    Args:
        input_path: Scratch copy of the source file.
        config: Limits and encoder settings. Defaults to
            :class:`ChunkingConfig`.
        scratch: Optional list that accumulates scratch paths as they are
            created; returned as ``all_temp_paths``. Passing the job's own list
            lets cleanup cover files created before a failure.

    Returns:
        PreparedAudio: Chunks, scratch paths and the analysis file.

    Raises:
        NoAudioTrackError: If the file has no audio stream.
        TranscodeError: If FFmpeg cannot read or convert the file.
    """
    config = config or ChunkingConfig()
    input_path = Path(input_path)
    temp_paths = scratch if scratch is not None else []
    if input_path not in temp_paths:
        temp_paths.append(input_path)

    size_bytes = input_path.stat().st_size
    if not needs_transcoding(input_path, size_bytes, config):
        logger.info(
            "Skipping FFmpeg: native format (%s, %.1fMB)",
            input_path.suffix.lower(),
            size_bytes / 1024 / 1024,
        )
        return PreparedAudio(
            chunks=[ChunkInfo(path=input_path, offset_seconds=0.0)],
            all_temp_paths=temp_paths,
            analysis_path=input_path,
        )

    if not probe_media(input_path).has_audio_stream:
        raise NoAudioTrackError()

    compressed_path = temp_path(config.codec.extension)
    temp_paths.append(compressed_path)
    logger.info("Extracting compressed audio from %s", input_path.name)
    transcode(input_path, compressed_path, config.codec)

    chunks = split_audio_if_needed(compressed_path, config, scratch=temp_paths)
    return PreparedAudio(chunks=chunks, all_temp_paths=temp_paths, analysis_path=compressed_path)
