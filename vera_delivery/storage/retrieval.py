"""Download a source recording into scratch space."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path, PurePosixPath

import httpx
from pydantic import ValidationError

from vera_delivery.config import RetrievalConfig
from vera_delivery.errors import BlobNotFoundError, DownloadFailedError
from vera_delivery.storage.blob_store import BlobStore
from vera_delivery.utils.temp_files import temp_path

logger = logging.getLogger(__name__)

__all__ = ["download_to_tmp"]


def download_to_tmp(
    url: str,
    file_name: str,
    *,
    store: BlobStore,
    config: RetrievalConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Path:
    """Download ``url`` to a uniquely named scratch file.

    The blob's existence is confirmed through the storage metadata API first;
    a missing blob fails immediately. The transfer itself is retried with
    exponential backoff (``initial_delay``, ``2 * initial_delay``, ...) to ride
    out CDN propagation lag after an upload.

    Args:
        url: Public blob URL.
        file_name: Name the file was uploaded under; only its extension is
            used (``.bin`` when it has none).
        store: Storage client.
        config: Retry settings. Defaults to :class:`RetrievalConfig`.
        sleep: Delay function, injectable for tests.

    Returns:
        Path to the downloaded file. The caller owns its cleanup.

    Raises:
        BlobNotFoundError: If the metadata lookup fails.
        DownloadFailedError: If every attempt failed.
    """
    config = config or RetrievalConfig()
    ext = PurePosixPath(file_name).suffix or ".bin"
    target = temp_path(ext)

    try:
        meta = store.head(url)
    except (httpx.HTTPError, ValidationError, ValueError) as exc:
        logger.error("Blob not found via metadata API: %s (%s)", url, exc)
        raise BlobNotFoundError(url) from exc
    logger.info("Blob exists in store: %d bytes, url: %s", meta.size, url)

    last_status = 0
    for attempt in range(config.max_retries):
        if attempt > 0:
            delay_ms = config.initial_delay_ms * 2 ** (attempt - 1)
            logger.warning(
                "Retry %d/%d after %dms (last status: %d)",
                attempt,
                config.max_retries,
                delay_ms,
                last_status,
            )
            sleep(delay_ms / 1000)

        try:
            response = store.fetch(url)
        except httpx.TransportError as exc:
            logger.warning("Download attempt %d failed: %s", attempt + 1, exc)
            last_status = 0
            continue

        if response.is_success:
            target.write_bytes(response.content)
            logger.debug("Downloaded %s to %s", url, target)
            return target
        last_status = response.status_code

    raise DownloadFailedError(config.max_retries, last_status)
