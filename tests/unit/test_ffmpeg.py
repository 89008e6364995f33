"""Unit tests for the FFmpeg/ffprobe wrappers."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import numpy as np
import pytest

from vera_delivery.config import AudioCodecParams
from vera_delivery.errors import TranscodeError
from vera_delivery.media import ffmpeg


class _Completed:
    def __init__(self, stdout: bytes) -> None:
        self.stdout = stdout
        self.stderr = b""
        self.returncode = 0


@pytest.fixture
def recorded_commands(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Record subprocess commands and answer with empty stdout."""
    commands: list[list[str]] = []

    def fake_run(cmd: list[str], **_kwargs: object) -> _Completed:
        commands.append(cmd)
        return _Completed(b"")

    monkeypatch.setattr(ffmpeg.subprocess, "run", fake_run)
    return commands


def test_probe_media_detects_audio(monkeypatch: pytest.MonkeyPatch) -> None:
    """ffprobe JSON with an audio stream and a duration is parsed."""
    payload = {
        "streams": [{"codec_type": "video"}, {"codec_type": "audio"}],
        "format": {"duration": "612.48"},
    }
    monkeypatch.setattr(
        ffmpeg.subprocess, "run", lambda cmd, **kw: _Completed(json.dumps(payload).encode())
    )

    probe = ffmpeg.probe_media("talk.mp4")

    assert probe.has_audio_stream is True
    assert probe.duration_seconds == pytest.approx(612.48)


def test_probe_media_video_only(monkeypatch: pytest.MonkeyPatch) -> None:
    """A file with only a video stream has no audio and unknown duration."""
    payload = {"streams": [{"codec_type": "video"}], "format": {}}
    monkeypatch.setattr(
        ffmpeg.subprocess, "run", lambda cmd, **kw: _Completed(json.dumps(payload).encode())
    )

    probe = ffmpeg.probe_media("screen.mov")

    assert probe.has_audio_stream is False
    assert probe.duration_seconds == 0.0


def test_transcode_builds_command(recorded_commands: list[list[str]]) -> None:
    """Seeking goes before the input, duration and codec settings after."""
    ffmpeg.transcode(
        Path("in.mov"),
        Path("out.mp3"),
        AudioCodecParams(),
        start_seconds=200,
        duration_seconds=200,
    )

    cmd = recorded_commands[0]
    assert cmd.index("-ss") < cmd.index("-i") < cmd.index("-t")
    assert cmd[cmd.index("-ss") + 1] == "200"
    assert "-vn" in cmd
    assert cmd[cmd.index("-ac") + 1] == "1"
    assert cmd[cmd.index("-ar") + 1] == "16000"
    assert cmd[cmd.index("-b:a") + 1] == "64k"
    assert cmd[-1] == "out.mp3"


def test_transcode_without_range(recorded_commands: list[list[str]]) -> None:
    """Whole-file extraction passes neither ``-ss`` nor ``-t``."""
    ffmpeg.transcode("in.webm", "out.mp3", AudioCodecParams())
    assert "-ss" not in recorded_commands[0]
    assert "-t" not in recorded_commands[0]


def test_failure_raises_transcode_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """A non-zero exit becomes ``TranscodeError`` carrying stderr."""

    def failing_run(cmd: list[str], **_kwargs: object) -> None:
        raise subprocess.CalledProcessError(1, cmd, stderr=b"Invalid data found")

    monkeypatch.setattr(ffmpeg.subprocess, "run", failing_run)

    with pytest.raises(TranscodeError) as excinfo:
        ffmpeg.transcode("bad.mp4", "out.mp3", AudioCodecParams())
    assert "Invalid data found" in excinfo.value.stderr


def test_missing_binary_raises_transcode_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing ffprobe binary is reported as a transcode failure."""

    def missing(cmd: list[str], **_kwargs: object) -> None:
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(ffmpeg.subprocess, "run", missing)
    with pytest.raises(TranscodeError, match="not installed"):
        ffmpeg.probe_media("x.mp3")


def test_decode_pcm_reads_float32_pipe(monkeypatch: pytest.MonkeyPatch) -> None:
    """The FFmpeg pipe output is interpreted as little-endian float32."""
    samples = np.array([0.0, 0.5, -0.25, 1.0], dtype="<f4")
    monkeypatch.setattr(ffmpeg, "FORCE_FFMPEG", True)
    monkeypatch.setattr(ffmpeg.subprocess, "run", lambda cmd, **kw: _Completed(samples.tobytes()))

    decoded = ffmpeg.decode_pcm("talk.mp3", 16000)

    assert decoded.dtype == np.float32
    np.testing.assert_allclose(decoded, samples)


def test_decode_pcm_falls_back_to_soundfile(monkeypatch: pytest.MonkeyPatch) -> None:
    """When FFmpeg fails, libsndfile decoding is used and downmixed."""

    def failing_run(cmd: list[str], **_kwargs: object) -> None:
        raise subprocess.CalledProcessError(1, cmd, stderr=b"nope")

    stereo = np.array([[0.2, 0.4], [0.6, 0.8]], dtype=np.float32)
    monkeypatch.setattr(ffmpeg, "FORCE_FFMPEG", True)
    monkeypatch.setattr(ffmpeg.subprocess, "run", failing_run)
    monkeypatch.setattr(ffmpeg.sf, "read", lambda *a, **k: (stereo, 16000))

    decoded = ffmpeg.decode_pcm("talk.wav", 16000)

    np.testing.assert_allclose(decoded, [0.3, 0.7], rtol=1e-6)
