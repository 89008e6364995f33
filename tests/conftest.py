"""Shared test fixtures for the vera_delivery test suite."""

from __future__ import annotations

import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

import httpx
import pytest

from vera_delivery.analytics.models import TimestampedWord
from vera_delivery.storage.blob_store import BlobMetadata
from vera_delivery.transcription.client import ChunkTranscript


@pytest.fixture(autouse=True)
def _scratch_in_tmp_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Allocate every scratch file under the test's own temporary directory.

    ``temp_path`` builds paths from ``tempfile.gettempdir()``; pointing the
    module-level cache at ``tmp_path`` keeps tests isolated and lets them
    assert on leftover files.
    """
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


@pytest.fixture
def scratch_dir(_scratch_in_tmp_path: Path) -> Path:
    """Directory receiving scratch files during the test."""
    return _scratch_in_tmp_path


def words_from(timings: Sequence[tuple[str, float, float]]) -> list[TimestampedWord]:
    """Build timestamped words from ``(word, start, end)`` tuples."""
    return [TimestampedWord(word=w, start=s, end=e) for w, s, e in timings]


@pytest.fixture
def make_words() -> Callable[[Sequence[tuple[str, float, float]]], list[TimestampedWord]]:
    """Factory fixture returning :func:`words_from`."""
    return words_from


class FakeBlobStore:
    """In-memory ``BlobStore`` recording every call."""

    def __init__(
        self,
        content: bytes = b"audio-bytes",
        *,
        statuses: Sequence[int] = (200,),
        exists: bool = True,
    ) -> None:
        self.content = content
        self.statuses = list(statuses)
        self.exists = exists
        self.head_calls: list[str] = []
        self.fetch_calls: list[str] = []
        self.deleted: list[str] = []

    def head(self, url: str) -> BlobMetadata:
        self.head_calls.append(url)
        if not self.exists:
            request = httpx.Request("GET", url)
            raise httpx.HTTPStatusError(
                "not found", request=request, response=httpx.Response(404, request=request)
            )
        return BlobMetadata(url=url, size=len(self.content))

    def fetch(self, url: str) -> httpx.Response:
        self.fetch_calls.append(url)
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        body = self.content if 200 <= status < 300 else b""
        return httpx.Response(status, content=body, request=httpx.Request("GET", url))

    def delete(self, url: str) -> None:
        self.deleted.append(url)


@pytest.fixture
def fake_store() -> FakeBlobStore:
    """A blob store holding a small payload that downloads first time."""
    return FakeBlobStore()


class FakeTranscriber:
    """``SpeechToText`` returning canned transcripts keyed by file name."""

    def __init__(self, transcripts: dict[str, ChunkTranscript] | None = None) -> None:
        self.transcripts = transcripts or {}
        self.calls: list[Path] = []

    def transcribe(self, path: Path) -> ChunkTranscript:
        self.calls.append(Path(path))
        key = Path(path).name
        if key in self.transcripts:
            return self.transcripts[key]
        return ChunkTranscript(
            text="hello world",
            words=words_from([("hello", 0.0, 0.5), ("world", 0.6, 1.0)]),
        )


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    """A transcriber returning a two-word transcript for any file."""
    return FakeTranscriber()


@pytest.fixture
def blob_store_factory() -> type[FakeBlobStore]:
    """The fake store class, for tests needing custom statuses or content."""
    return FakeBlobStore


@pytest.fixture
def transcriber_factory() -> type[FakeTranscriber]:
    """The fake transcriber class, for tests needing canned transcripts."""
    return FakeTranscriber
