"""Checksum-validated download cache.

A :class:`Job` with a :class:`CachePolicy` is served in up to three phases:

1. fetch the small checksum document of the remote resource,
2. compare it with the marker written next to the cached payload and return
   the cached payload when they agree,
3. otherwise download the payload, refresh the cache and return it, falling
   back to whatever payload is cached when the download fails.

:meth:`Downloader.download` never raises. Failures are logged and turned
into a stale cached value or ``None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar, Union

from ..utils.cache import CacheStore
from .errors import TransformError
from .jobs import CachePolicy, Job
from .transport import LowLevelDownloader, create_downloader

LOGGER = logging.getLogger(__name__)

R = TypeVar("R")
T = TypeVar("T")

_MISS = object()


@dataclass
class DownloadOut:
    """Side channel reporting the cache path and checksum a call used."""

    cache_path: Optional[Path] = None
    checksum: Optional[str] = None


def _apply(stage: str, func: Callable[[bytes], T], data: bytes) -> T:
    try:
        return func(data)
    except Exception as exc:
        raise TransformError(stage, exc) from exc


class Downloader:
    """Fetch jobs through a transport, caching payloads under ``cache_root``."""

    def __init__(
        self,
        cache_root: Union[str, Path],
        transport: Optional[LowLevelDownloader] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.store = CacheStore(Path(cache_root))
        self.transport = transport or create_downloader()
        self.logger = logger or LOGGER

    def download(self, job: Job[R], out: Optional[DownloadOut] = None) -> Optional[R]:
        out = out if out is not None else DownloadOut()
        cache = job.cache
        cache_path: Optional[Path] = None
        checksum_path: Optional[Path] = None
        checksum: Optional[str] = None

        if cache is not None:
            cache_path = self.store.path_for(job.id)
            checksum_path = self.store.path_for(job.id + cache.checksum_extension)
            out.cache_path = cache_path

            checksum = self._latest_checksum(job, cache)
            out.checksum = checksum
            if checksum is not None:
                cached = self._load_if_fresh(job, cache, checksum, cache_path, checksum_path)
                if cached is not _MISS:
                    return cached

        try:
            data = self.transport.get(job.uri, job.options)
            if cache is not None and cache_path is not None and checksum_path is not None:
                self._write_cache(job, cache, data, checksum, cache_path, checksum_path)
            self.logger.info("[Downloader] [%s] Downloaded from '%s'", job.id, job.uri)
            return _apply("transformer", job.transformer, data)
        except Exception:
            self.logger.error("[Downloader] [%s] Downloading '%s'", job.id, job.uri, exc_info=True)

        if cache is not None and cache_path is not None:
            try:
                result = self._read_cached(job, cache, cache_path)
                self.logger.warning("[Downloader] [%s] Fell back to cached file '%s'", job.id, cache_path)
                return result
            except Exception:
                self.logger.error(
                    "[Downloader] [%s] Fallback: loading cached file '%s'", job.id, cache_path, exc_info=True
                )
        return None

    def _latest_checksum(self, job: Job[Any], cache: CachePolicy) -> Optional[str]:
        checksum_job = cache.checksum_job
        checksum = self.download(
            Job(
                id=job.id + cache.checksum_extension,
                uri=checksum_job.uri,
                transformer=checksum_job.transformer,
                options=checksum_job.options,
            )
        )
        if checksum is None:
            self.logger.error(
                "[Downloader] [%s] Fetching latest checksum '%s' failed; checksum unknown",
                job.id,
                checksum_job.uri,
            )
        return checksum

    def _load_if_fresh(
        self,
        job: Job[R],
        cache: CachePolicy,
        checksum: str,
        cache_path: Path,
        checksum_path: Path,
    ) -> Any:
        try:
            cached_checksum = self.store.read_marker(checksum_path)
        except FileNotFoundError:
            return _MISS
        except Exception:
            self.logger.error(
                "[Downloader] [%s] Loading cache checksum '%s'", job.id, checksum_path, exc_info=True
            )
            return _MISS

        if cached_checksum != checksum:
            return _MISS

        try:
            result = self._read_cached(job, cache, cache_path)
        except Exception as exc:
            self.logger.error("[Downloader] [%s] Loading cached file '%s'", job.id, cache_path, exc_info=True)
            if isinstance(exc, FileNotFoundError):
                # Marker without payload: drop it so the next run starts clean.
                try:
                    self.store.remove(checksum_path)
                except OSError:
                    self.logger.error(
                        "[Downloader] [%s] Removing invalid cache checksum '%s'",
                        job.id,
                        checksum_path,
                        exc_info=True,
                    )
            return _MISS

        self.logger.info("[Downloader] [%s] Skipped downloading thanks to cache %s", job.id, cached_checksum)
        return result

    def _read_cached(self, job: Job[R], cache: CachePolicy, cache_path: Path) -> R:
        raw = self.store.read_bytes(cache_path)
        return _apply("transformer", job.transformer, _apply("deserializer", cache.deserialize, raw))

    def _write_cache(
        self,
        job: Job[Any],
        cache: CachePolicy,
        data: bytes,
        checksum: Optional[str],
        cache_path: Path,
        checksum_path: Path,
    ) -> None:
        # An empty checksum cannot prove freshness, so no marker is written for it.
        if checksum:
            try:
                self.store.write_marker(checksum_path, checksum)
            except Exception:
                self.logger.error(
                    "[Downloader] [%s] Saving cache checksum '%s'", job.id, checksum_path, exc_info=True
                )
        try:
            self.store.write_bytes(cache_path, _apply("serializer", cache.serialize, data))
        except Exception:
            self.logger.error("[Downloader] [%s] Caching file '%s'", job.id, cache_path, exc_info=True)
