"""Configuration helpers for cache location and transport defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

DIST_NAME = "worldgen-tools"
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_MC_VERSION = "1.19.2"


def package_version() -> str:
    """Installed distribution version; pyproject.toml is the single source."""
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return "0+unknown"


DEFAULT_USER_AGENT = f"{DIST_NAME}/{package_version()}"


@dataclass(frozen=True)
class Settings:
    cache_root: Path
    timeout_ms: float
    user_agent: str
    mc_version: str


def _read_env(env_path: Path | None = None) -> Dict[str, Optional[str]]:
    """Merge the process environment over values from a .env file."""
    env_path = env_path or Path(".env")
    values: Dict[str, Optional[str]] = {}
    if env_path.exists():
        values.update(dotenv_values(str(env_path)))
    for key, value in os.environ.items():
        if key.startswith("WORLDGEN_"):
            values[key] = value
    return values


def _default_cache_root() -> Path:
    base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / "worldgen-tools"


def resolve_cache_root(env_path: Path | None = None) -> Path:
    """Return the configured cache directory without creating it."""
    value = _read_env(env_path).get("WORLDGEN_CACHE_ROOT")
    return Path(value) if value else _default_cache_root()


def get_cache_root(env_path: Path | None = None) -> Path:
    """Return the directory where downloads and checksum markers live, creating it."""
    root = resolve_cache_root(env_path)
    root.mkdir(parents=True, exist_ok=True)
    return root


def load_settings(env_path: Path | None = None) -> Settings:
    values = _read_env(env_path)
    raw_timeout = values.get("WORLDGEN_HTTP_TIMEOUT_MS")
    try:
        timeout_ms = float(raw_timeout) if raw_timeout else float(DEFAULT_TIMEOUT_MS)
    except ValueError as exc:
        raise RuntimeError(
            f"WORLDGEN_HTTP_TIMEOUT_MS must be a number of milliseconds, got {raw_timeout!r}"
        ) from exc
    return Settings(
        cache_root=resolve_cache_root(env_path),
        timeout_ms=timeout_ms,
        user_agent=values.get("WORLDGEN_USER_AGENT") or DEFAULT_USER_AGENT,
        mc_version=values.get("WORLDGEN_MC_VERSION") or DEFAULT_MC_VERSION,
    )
