"""Single-shot HTTP(S) GET with a fixture-backed twin for tests."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse

import requests
from requests.structures import CaseInsensitiveDict

from ..utils.config import load_settings
from .errors import TransportError
from .jobs import DownloadOptions, HeaderValue

LOGGER = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")

Fixture = Union[str, bytes, object]


class LowLevelDownloader(ABC):
    """Fetch the body of a remote resource as bytes."""

    @abstractmethod
    def get(self, uri: str, options: Optional[DownloadOptions] = None) -> bytes:
        """Return the response body or raise :class:`TransportError`."""


def _flatten_headers(headers: Mapping[str, HeaderValue]) -> Dict[str, str]:
    flat: Dict[str, str] = {}
    for name, value in headers.items():
        if isinstance(value, str):
            flat[name] = value
        else:
            # requests sends one line per header name; repeated values are folded.
            flat[name] = ", ".join(value)
    return flat


class RequestsDownloader(LowLevelDownloader):
    """Network transport backed by a ``requests`` session.

    A caller supplied session is used as is: its adapters and default headers
    are left untouched. ``user_agent`` is sent with every request unless the
    request options carry their own ``User-Agent``.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
        default_timeout_ms: Optional[float] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.user_agent = user_agent
        self.default_timeout_ms = default_timeout_ms

    def _timeout(self, options: DownloadOptions) -> Optional[float]:
        timeout_ms = options.timeout if options.timeout is not None else self.default_timeout_ms
        # Zero or negative means no timeout, like Node's http.get.
        if timeout_ms is None or timeout_ms <= 0:
            return None
        return timeout_ms / 1000

    def get(self, uri: str, options: Optional[DownloadOptions] = None) -> bytes:
        options = options or DownloadOptions()
        scheme = urlparse(uri).scheme.lower()
        if scheme not in SUPPORTED_SCHEMES:
            raise TransportError(f"Unsupported protocol '{scheme}:' for {uri}", uri=uri)

        headers = CaseInsensitiveDict({"User-Agent": self.user_agent} if self.user_agent else {})
        headers.update(_flatten_headers(options.headers))
        timeout = self._timeout(options)
        LOGGER.debug("GET %s timeout=%ss", uri, timeout)
        try:
            response = self.session.get(
                uri,
                headers=headers,
                timeout=timeout,
                allow_redirects=True,
            )
        except (requests.RequestException, ValueError) as exc:
            raise TransportError(f"Request to {uri} failed: {exc}", uri=uri) from exc

        if response.status_code != 200:
            raise TransportError(
                f"Status code {response.status_code}: {response.reason}",
                uri=uri,
                status_code=response.status_code,
            )
        return response.content


class FixtureDownloader(LowLevelDownloader):
    """Deterministic transport resolving fixed URIs to fixed content.

    ``bytes`` fixtures are returned as is, ``str`` fixtures are UTF-8 encoded
    and anything else is serialized to JSON first. Every requested URI is
    appended to ``requests`` so callers can check whether the network would
    have been hit.
    """

    def __init__(self, fixtures: Optional[Mapping[str, Fixture]] = None) -> None:
        self.fixtures: Dict[str, Fixture] = dict(fixtures or {})
        self.requests: List[str] = []

    def get(self, uri: str, options: Optional[DownloadOptions] = None) -> bytes:
        self.requests.append(uri)
        if uri not in self.fixtures:
            raise TransportError(f"404 not found: {uri}", uri=uri, status_code=404)
        fixture = self.fixtures[uri]
        if isinstance(fixture, bytes):
            return fixture
        if isinstance(fixture, str):
            return fixture.encode("utf-8")
        return json.dumps(fixture).encode("utf-8")


class OfflineDownloader(LowLevelDownloader):
    """Transport that refuses every request, leaving only cached data."""

    def get(self, uri: str, options: Optional[DownloadOptions] = None) -> bytes:
        raise TransportError(f"Offline mode: not fetching {uri}", uri=uri)


def create_downloader() -> LowLevelDownloader:
    settings = load_settings()
    return RequestsDownloader(
        user_agent=settings.user_agent,
        default_timeout_ms=settings.timeout_ms,
    )
