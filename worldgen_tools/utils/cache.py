"""File-based storage for downloaded payloads and their checksum markers."""

from __future__ import annotations

from pathlib import Path


class CacheStore:
    """Persist raw bytes on disk so expensive downloads can be reused.

    Every cache key maps to a path under ``root``; slashes in the key create
    sub-directories. The store does not lock: a single writer per key is
    assumed. Missing files surface as ``FileNotFoundError`` and any other
    filesystem problem as ``OSError``.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        """Return the path where the artifact for ``key`` should live."""
        return self.root.joinpath(*key.split("/"))

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def read_marker(self, path: Path) -> str:
        """Read a checksum marker, dropping its trailing newline."""
        text = self.read_bytes(path).decode("utf-8")
        return text[:-1] if text.endswith("\n") else text

    def write_marker(self, path: Path, checksum: str) -> Path:
        return self.write_bytes(path, f"{checksum}\n".encode("utf-8"))

    def remove(self, path: Path) -> None:
        path.unlink()
