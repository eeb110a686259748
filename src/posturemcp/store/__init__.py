"""Store domain — inventory storage collaborators."""

from __future__ import annotations

from redis.asyncio import Redis  # type: ignore[import-untyped]

from posturemcp.config import StoreConfig
from posturemcp.store.base import InventoryStore
from posturemcp.store.memory import InMemoryInventoryStore
from posturemcp.store.redis_store import RedisInventoryStore

__all__ = [
    "InMemoryInventoryStore",
    "InventoryStore",
    "RedisInventoryStore",
    "build_store",
]


def build_store(config: StoreConfig) -> InventoryStore:
    """Instantiate the store backend selected by *config*."""
    if config.backend == "redis":
        return RedisInventoryStore(
            Redis.from_url(config.redis_url), prefix=config.key_prefix
        )
    return InMemoryInventoryStore()
