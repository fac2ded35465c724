"""Filesystem-backed blob store rooted at a local directory."""

from pathlib import Path

from ordering.blobstore.port import BlobStore
from ordering.errors import CollaboratorError


class LocalBlobStore(BlobStore):
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root not in target.parents:
            raise CollaboratorError("blob store", f"Blob path escapes the store root: {path}")
        return target

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise CollaboratorError("blob store", str(exc)) from exc
        return target.as_uri()

    def delete(self, path: str) -> None:
        try:
            self._resolve(path).unlink(missing_ok=True)
        except OSError as exc:
            raise CollaboratorError("blob store", str(exc)) from exc

    def list(self, prefix: str) -> list[str]:
        if not self.root.exists():
            return []
        paths = (p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file())
        return sorted(p for p in paths if p.startswith(prefix))
