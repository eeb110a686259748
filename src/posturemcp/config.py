"""Application configuration dataclasses.

Frozen dataclasses with sensible defaults for each subsystem.
Only ``StoreConfig`` reads the environment; everything else is plain
defaults that can be overridden at construction time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

_STORE_BACKENDS = ("memory", "redis")


@dataclass(frozen=True)
class StoreConfig:
    """Inventory store backend selection."""

    backend: str = "memory"
    redis_url: str = "redis://localhost:6379"
    key_prefix: str = "posturemcp"

    def __post_init__(self) -> None:
        if self.backend not in _STORE_BACKENDS:
            msg = f"Unknown store backend: {self.backend!r}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Build from ``POSTUREMCP_*`` environment variables."""
        defaults = cls()
        return cls(
            backend=os.environ.get("POSTUREMCP_STORE", defaults.backend),
            redis_url=os.environ.get("POSTUREMCP_REDIS_URL", defaults.redis_url),
            key_prefix=os.environ.get("POSTUREMCP_KEY_PREFIX", defaults.key_prefix),
        )


@dataclass(frozen=True)
class DriftConfig:
    """Drift summary formatting and listing limits."""

    summary_max_keys: int = 5
    truncation_marker: str = "…"
    drift_list_limit: int = 50


@dataclass(frozen=True)
class AuditConfig:
    """Settings for the JSONL audit logger."""

    file_path: str = "posturemcp_audit.jsonl"
    enabled: bool = True
