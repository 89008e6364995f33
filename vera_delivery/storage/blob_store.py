"""HTTP client for the blob storage provider.

Uploaded recordings live in a blob store fronted by a CDN. Freshly uploaded
blobs can take a moment to propagate to the CDN, so existence checks go to
the provider's metadata API while the bytes themselves are fetched from the
public URL.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

from vera_delivery.utils.constant import BLOB_API_TOKEN, BLOB_API_URL, BLOB_TIMEOUT_SEC

logger = logging.getLogger(__name__)

__all__ = ["BlobMetadata", "BlobStore", "HttpBlobStore"]


class BlobMetadata(BaseModel):
    """Metadata returned by the provider for an existing blob."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str
    size: int = Field(..., ge=0)
    content_type: str | None = Field(default=None, alias="contentType")


class BlobStore(Protocol):
    """Operations the pipeline needs from network storage."""

    def head(self, url: str) -> BlobMetadata:
        """Return metadata for ``url``; raise when the blob does not exist."""

    def fetch(self, url: str) -> httpx.Response:
        """Download ``url``. Non-2xx responses are returned, not raised."""

    def delete(self, url: str) -> None:
        """Remove ``url`` from the store."""


class HttpBlobStore:
    """`BlobStore` backed by the provider's REST API.

    Args:
        api_url: Base URL of the provider API.
        token: Bearer token for metadata and delete calls.
        timeout: Request timeout in seconds.
        client: Optional preconfigured ``httpx.Client`` (tests inject one
            with a mock transport).

    """

    def __init__(
        self,
        api_url: str = BLOB_API_URL,
        token: str = BLOB_API_TOKEN,
        *,
        timeout: float = BLOB_TIMEOUT_SEC,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def head(self, url: str) -> BlobMetadata:
        """Query the metadata API for ``url``.

        Raises:
            httpx.HTTPStatusError: When the provider reports a non-2xx status
                (404 for a missing blob).
        """
        response = self._client.get(
            f"{self.api_url}/", params={"url": url}, headers=self._headers()
        )
        response.raise_for_status()
        return BlobMetadata.model_validate(response.json())

    def fetch(self, url: str) -> httpx.Response:
        """GET the public blob URL and return the response as-is."""
        return self._client.get(url)

    def delete(self, url: str) -> None:
        """Ask the provider to delete ``url``."""
        response = self._client.post(
            f"{self.api_url}/delete", json={"urls": [url]}, headers=self._headers()
        )
        response.raise_for_status()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
