"""Project-wide constants for convenient reuse."""

# pylint: disable=line-too-long

from __future__ import annotations

import os
import shutil
import sys
from typing import Final

from vera_delivery.utils.env_loader import load_project_env

# Ensure .env is loaded exactly once at import time for the whole project
if "pytest" not in sys.modules:
    load_project_env()

# Upload ceiling of the speech-to-text service (bytes). Files above this are
# transcoded and split.
TRANSCRIPTION_MAX_SIZE_BYTES: Final[int] = int(
    os.getenv("TRANSCRIPTION_MAX_SIZE_BYTES", str(25 * 1024 * 1024))
)

# Per-request duration ceiling (seconds); the hosted Whisper limit is 1500 s,
# keep some headroom.
MAX_CHUNK_DURATION_SEC: Final[int] = int(os.getenv("MAX_CHUNK_DURATION_SEC", "1400"))

# Number of chunks transcribed concurrently
TRANSCRIBE_CONCURRENCY: Final[int] = int(os.getenv("TRANSCRIBE_CONCURRENCY", "3"))

# Download retry policy (CDN propagation lag after upload)
DOWNLOAD_MAX_RETRIES: Final[int] = int(os.getenv("DOWNLOAD_MAX_RETRIES", "3"))
DOWNLOAD_INITIAL_DELAY_MS: Final[int] = int(os.getenv("DOWNLOAD_INITIAL_DELAY_MS", "500"))

# Scratch files are named <prefix>-<16 hex chars><ext> in the system temp dir
TEMP_FILE_PREFIX: Final[str] = os.getenv("TEMP_FILE_PREFIX", "vera")

# Extensions the speech-to-text service accepts without conversion
TRANSCRIPTION_NATIVE_EXTENSIONS: Final[frozenset[str]] = frozenset({
    ".mp3",
    ".mp4",
    ".mpeg",
    ".mpga",
    ".m4a",
    ".wav",
    ".webm",
})

# Normalised codec used for compressed audio and chunks
COMPRESSED_AUDIO_CODEC: Final[str] = os.getenv("COMPRESSED_AUDIO_CODEC", "libmp3lame")
COMPRESSED_AUDIO_BITRATE: Final[str] = os.getenv("COMPRESSED_AUDIO_BITRATE", "64k")
COMPRESSED_AUDIO_FORMAT: Final[str] = os.getenv("COMPRESSED_AUDIO_FORMAT", "mp3")

# Acoustic analysis
ANALYSIS_SAMPLE_RATE: Final[int] = int(os.getenv("ANALYSIS_SAMPLE_RATE", "16000"))
ANALYSIS_WINDOW_SEC: Final[float] = float(os.getenv("ANALYSIS_WINDOW_SEC", "30"))
SILENCE_FLOOR_DB: Final[float] = float(os.getenv("SILENCE_FLOOR_DB", "-96"))
PITCH_FRAME_SEC: Final[float] = float(os.getenv("PITCH_FRAME_SEC", "0.03"))
PITCH_HOP_SEC: Final[float] = float(os.getenv("PITCH_HOP_SEC", "0.01"))
PITCH_MIN_HZ: Final[float] = float(os.getenv("PITCH_MIN_HZ", "50"))
PITCH_MAX_HZ: Final[float] = float(os.getenv("PITCH_MAX_HZ", "600"))
YIN_THRESHOLD: Final[float] = float(os.getenv("YIN_THRESHOLD", "0.15"))

# External tools. Prefer FFmpeg for PCM decoding (1 = yes, 0 = try soundfile first)
FFMPEG_BINARY: Final[str] = os.getenv("FFMPEG_BINARY", shutil.which("ffmpeg") or "ffmpeg")
FFPROBE_BINARY: Final[str] = os.getenv("FFPROBE_BINARY", shutil.which("ffprobe") or "ffprobe")
FORCE_FFMPEG: Final[bool] = os.getenv("FORCE_FFMPEG", "1") == "1"

# OpenAI-compatible speech-to-text endpoint
STT_API_BASE_URL: Final[str] = os.getenv("STT_API_BASE_URL", "https://api.openai.com/v1")
STT_API_KEY: Final[str] = os.getenv("STT_API_KEY", os.getenv("OPENAI_API_KEY", ""))
STT_MODEL_NAME: Final[str] = os.getenv("STT_MODEL_NAME", "whisper-1")
STT_TIMEOUT_SEC: Final[float] = float(os.getenv("STT_TIMEOUT_SEC", "300"))

# Blob storage provider (metadata API bypasses the CDN)
BLOB_API_URL: Final[str] = os.getenv("BLOB_API_URL", "https://blob.vercel-storage.com")
BLOB_API_TOKEN: Final[str] = os.getenv("BLOB_API_TOKEN", os.getenv("BLOB_READ_WRITE_TOKEN", ""))
BLOB_TIMEOUT_SEC: Final[float] = float(os.getenv("BLOB_TIMEOUT_SEC", "60"))
