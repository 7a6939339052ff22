"""Declarative descriptions of a fetch and the stock byte transforms."""

from __future__ import annotations

import gzip
import json
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, TypeVar, Union

R = TypeVar("R")

HeaderValue = Union[str, Sequence[str]]
ByteTransform = Callable[[bytes], bytes]


@dataclass(frozen=True)
class DownloadOptions:
    """Transport options: headers (single or repeated values) and a timeout in milliseconds."""

    headers: Mapping[str, HeaderValue] = field(default_factory=dict)
    timeout: Optional[float] = None


@dataclass(frozen=True)
class ChecksumJob:
    """Fetches a short string describing the current remote state.

    It carries neither an id nor a cache policy, so resolving a checksum can
    never recurse into another checksum lookup.
    """

    uri: str
    transformer: Callable[[bytes], str]
    options: Optional[DownloadOptions] = None


@dataclass(frozen=True)
class CachePolicy:
    checksum_job: ChecksumJob
    checksum_extension: str
    serializer: Optional[ByteTransform] = None
    deserializer: Optional[ByteTransform] = None

    def __post_init__(self) -> None:
        if not self.checksum_extension.startswith("."):
            raise ValueError(
                f"checksum_extension must start with '.', got {self.checksum_extension!r}"
            )

    def serialize(self, data: bytes) -> bytes:
        return (self.serializer or identity)(data)

    def deserialize(self, data: bytes) -> bytes:
        return (self.deserializer or identity)(data)


@dataclass(frozen=True)
class Job(Generic[R]):
    """One fetch producing a value of type ``R``.

    ``id`` decides where the payload is cached; use slashes to create
    directories under the cache root.
    """

    id: str
    uri: str
    transformer: Callable[[bytes], R]
    cache: Optional[CachePolicy] = None
    options: Optional[DownloadOptions] = None


def identity(data: bytes) -> bytes:
    return data


def gzip_serializer(data: bytes) -> bytes:
    return gzip.compress(data)


def gzip_deserializer(data: bytes) -> bytes:
    return gzip.decompress(data)


def text_transformer(data: bytes) -> str:
    return data.decode("utf-8")


def version_transformer(data: bytes) -> str:
    return text_transformer(data).strip()


def json_transformer(data: bytes) -> Any:
    return json.loads(data.decode("utf-8"))
