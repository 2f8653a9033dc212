"""
PoolConfig — Configuration for the shared worker pool

Environment variables:
- GADGETMETA_WORKERS: Thread pool size for gadget processing (default: 8)
- GADGETMETA_SHUTDOWN_TIMEOUT: Pool shutdown timeout in seconds (default: 10)

Unset or unparsable values fall back to the defaults.
"""

import os
from dataclasses import dataclass
from typing import Callable, TypeVar


T = TypeVar("T")


@dataclass
class PoolConfig:
    """Worker pool settings."""

    # Spec fetching is network-bound, so the pool is sized above the core count
    workers: int = 8
    shutdown_timeout: float = 10.0         # seconds
    thread_name_prefix: str = "gadgetmeta-worker-"

    @classmethod
    def from_env(cls) -> 'PoolConfig':
        """Build from GADGETMETA_* environment variables."""
        return cls(
            workers=_from_env("GADGETMETA_WORKERS", int, 8),
            shutdown_timeout=_from_env("GADGETMETA_SHUTDOWN_TIMEOUT", float, 10.0),
        )

    def validate(self) -> None:
        """
        Raises:
            ValueError: If a setting is out of range
        """
        if self.workers < 1:
            raise ValueError("GADGETMETA_WORKERS must be >= 1")
        if self.shutdown_timeout < 0:
            raise ValueError("GADGETMETA_SHUTDOWN_TIMEOUT must be >= 0")

    def to_dict(self) -> dict:
        return {
            "workers": self.workers,
            "shutdown_timeout": self.shutdown_timeout,
        }


def _from_env(key: str, cast: Callable[[str], T], default: T) -> T:
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        return default
