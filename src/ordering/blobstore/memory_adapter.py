"""In-memory blob store for development and testing."""

from ordering.blobstore.port import BlobStore
from ordering.errors import CollaboratorError


class InMemoryBlobStore(BlobStore):
    """Keeps blobs in a dict. ``fail_next`` simulates an outage for one call."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.content_types: dict[str, str | None] = {}
        self.fail_next: str | None = None
        self.calls: list[dict] = []

    def _maybe_fail(self, operation: str) -> None:
        if self.fail_next == operation:
            self.fail_next = None
            raise CollaboratorError("blob store", f"{operation} unavailable")

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        self.calls.append({"method": "upload", "path": path})
        self._maybe_fail("upload")
        self.blobs[path] = data
        self.content_types[path] = content_type
        return f"memory://{path}"

    def delete(self, path: str) -> None:
        self.calls.append({"method": "delete", "path": path})
        self._maybe_fail("delete")
        self.blobs.pop(path, None)
        self.content_types.pop(path, None)

    def list(self, prefix: str) -> list[str]:
        return sorted(path for path in self.blobs if path.startswith(prefix))
