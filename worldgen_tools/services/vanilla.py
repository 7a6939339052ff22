"""Vanilla worldgen data from the mcmeta summary repository."""

from __future__ import annotations

import copy
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from ..data.downloader import Downloader
from ..data.jobs import (
    CachePolicy,
    ChecksumJob,
    Job,
    gzip_deserializer,
    gzip_serializer,
    json_transformer,
    version_transformer,
)
from ..utils.config import DEFAULT_MC_VERSION

LOGGER = logging.getLogger(__name__)

MCMETA_URL = "https://raw.githubusercontent.com/misode/mcmeta"


@dataclass(frozen=True)
class ResourceType:
    key: str
    name: str


RESOURCE_TYPES: Sequence[ResourceType] = (
    ResourceType(key="worldgen/noise", name="Noise"),
    ResourceType(key="worldgen/density_function", name="Density function"),
)

VanillaData = Dict[str, Dict[str, str]]


class VanillaDataService:
    """Fetch and memoize the vanilla registries for every resource type.

    Each type is one cached download validated against the summary's
    ``version.txt``. Types are fetched concurrently; a type that cannot be
    fetched at all comes back as an empty mapping.
    """

    def __init__(
        self,
        downloader: Downloader,
        version: str = DEFAULT_MC_VERSION,
        base_url: str = MCMETA_URL,
        resource_types: Sequence[ResourceType] = RESOURCE_TYPES,
        max_workers: int = 4,
    ) -> None:
        self.downloader = downloader
        self.version = version
        self.base_url = base_url.rstrip("/")
        self.resource_types = tuple(resource_types)
        self.max_workers = max_workers
        self._vanilla: Optional[VanillaData] = None
        self._lock = threading.Lock()

    def job_for(self, key: str) -> Job[Any]:
        summary = f"{self.base_url}/{self.version}-summary"
        return Job(
            id=f"mc-je/{self.version}/{key}.json.gz",
            uri=f"{summary}/data/{key}/data.min.json",
            transformer=json_transformer,
            cache=CachePolicy(
                checksum_job=ChecksumJob(
                    uri=f"{summary}/version.txt",
                    transformer=version_transformer,
                ),
                checksum_extension=".cache",
                serializer=gzip_serializer,
                deserializer=gzip_deserializer,
            ),
        )

    def _fetch(self, key: str) -> Dict[str, str]:
        data = self.downloader.download(self.job_for(key))
        if not isinstance(data, dict):
            LOGGER.error("[VanillaDataService] Failed to fetch data for '%s'", key)
            return {}
        return {f"minecraft:{path}": json.dumps(value) for path, value in data.items()}

    def load(self) -> VanillaData:
        """Return a private copy of the vanilla data, fetching it on first use."""
        with self._lock:
            if self._vanilla is None:
                keys = [resource.key for resource in self.resource_types]
                with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                    results = list(executor.map(self._fetch, keys))
                self._vanilla = dict(zip(keys, results))
                LOGGER.info(
                    "Loaded vanilla data for %s: %s",
                    self.version,
                    ", ".join(f"{key}={len(entries)}" for key, entries in self._vanilla.items()),
                )
        return copy.deepcopy(self._vanilla)
