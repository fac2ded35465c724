"""Blob store factory.

``BLOB_STORE`` selects ``memory`` (default) or ``local``; the local adapter
writes under ``BLOB_STORE_ROOT``.
"""

import os

from ordering.blobstore.port import BlobStore

_current_store: BlobStore | None = None


def get_blob_store() -> BlobStore:
    global _current_store
    if _current_store is None:
        adapter = os.environ.get("BLOB_STORE", "memory")
        if adapter == "memory":
            from ordering.blobstore.memory_adapter import InMemoryBlobStore

            _current_store = InMemoryBlobStore()
        elif adapter == "local":
            from ordering.blobstore.local_adapter import LocalBlobStore

            _current_store = LocalBlobStore(os.environ.get("BLOB_STORE_ROOT", "./var/blobs"))
        else:
            raise ValueError(f"Unknown blob store adapter: {adapter}")
    return _current_store


def set_blob_store(store: BlobStore) -> None:
    global _current_store
    _current_store = store


def reset_blob_store() -> None:
    global _current_store
    _current_store = None
