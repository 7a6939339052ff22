"""Exceptions raised while fetching and decoding remote resources."""

from __future__ import annotations

from typing import Optional


class DownloaderError(Exception):
    """Base class for download failures."""


class TransportError(DownloaderError):
    """The remote endpoint answered with a non-success status or could not be reached."""

    def __init__(self, message: str, uri: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.uri = uri
        self.status_code = status_code


class TransformError(DownloaderError):
    """A caller supplied transformer, serializer or deserializer raised."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
