"""Network storage access and remote file retrieval."""

from .blob_store import BlobMetadata, BlobStore, HttpBlobStore
from .retrieval import download_to_tmp

__all__ = [
    "BlobMetadata",
    "BlobStore",
    "HttpBlobStore",
    "download_to_tmp",
]
