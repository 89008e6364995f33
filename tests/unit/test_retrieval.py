"""Unit tests for remote retrieval with existence check and backoff."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from vera_delivery.config import RetrievalConfig
from vera_delivery.errors import BlobNotFoundError, DownloadFailedError
from vera_delivery.storage.retrieval import download_to_tmp

URL = "https://cdn.example.com/uploads/talk.m4a"


def test_download_success_first_try(fake_store, scratch_dir: Path) -> None:
    """A healthy blob is written to a scratch file named after its extension."""
    delays: list[float] = []
    path = download_to_tmp(URL, "talk.m4a", store=fake_store, sleep=delays.append)

    assert path.parent == scratch_dir
    assert path.suffix == ".m4a"
    assert path.read_bytes() == b"audio-bytes"
    assert fake_store.head_calls == [URL]
    assert delays == []


def test_download_retries_with_exponential_backoff(blob_store_factory) -> None:
    """Non-2xx responses are retried after 500 ms then 1000 ms."""
    store = blob_store_factory(statuses=[404, 502, 200])
    delays: list[float] = []

    path = download_to_tmp(URL, "talk.m4a", store=store, sleep=delays.append)

    assert path.exists()
    assert len(store.fetch_calls) == 3
    assert delays == [0.5, 1.0]


def test_download_fails_with_last_status(blob_store_factory) -> None:
    """After the final attempt the last status is reported."""
    store = blob_store_factory(statuses=[500, 500, 403])
    delays: list[float] = []

    with pytest.raises(DownloadFailedError) as excinfo:
        download_to_tmp(URL, "talk.m4a", store=store, sleep=delays.append)

    assert excinfo.value.last_status == 403
    assert "after 3 attempts: 403" in str(excinfo.value)
    assert delays == [0.5, 1.0]


def test_missing_blob_fails_without_download(blob_store_factory) -> None:
    """A failed existence check aborts before any transfer attempt."""
    store = blob_store_factory(exists=False)
    with pytest.raises(BlobNotFoundError):
        download_to_tmp(URL, "talk.m4a", store=store, sleep=lambda _s: None)
    assert store.fetch_calls == []


def test_transport_errors_are_retried(fake_store, monkeypatch: pytest.MonkeyPatch) -> None:
    """Connection failures count as failed attempts with status 0."""

    def broken_fetch(url: str) -> httpx.Response:
        fake_store.fetch_calls.append(url)
        raise httpx.ConnectError("refused")

    monkeypatch.setattr(fake_store, "fetch", broken_fetch)
    config = RetrievalConfig(max_retries=2, initial_delay_ms=10)
    delays: list[float] = []

    with pytest.raises(DownloadFailedError) as excinfo:
        download_to_tmp(URL, "talk.m4a", store=fake_store, config=config, sleep=delays.append)

    assert excinfo.value.last_status == 0
    assert len(fake_store.fetch_calls) == 2
    assert delays == [0.01]


def test_name_without_extension_gets_bin(fake_store) -> None:
    """Upload names without a suffix produce ``.bin`` scratch files."""
    path = download_to_tmp(URL, "recording", store=fake_store, sleep=lambda _s: None)
    assert path.suffix == ".bin"
