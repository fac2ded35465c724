"""Blob store port for remittance evidence and other uploaded files.

Paths are slash-separated keys such as ``remittance/<order_id>/<file_id>_<name>``.
Adapters raise ``CollaboratorError`` on any storage failure.
"""

from abc import ABC, abstractmethod


class BlobStore(ABC):
    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        """Store ``data`` under ``path`` and return a URL for it."""
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove the blob. Deleting a missing blob is not an error."""
        ...

    @abstractmethod
    def list(self, prefix: str) -> list[str]:
        """Return every stored path starting with ``prefix``."""
        ...
