"""Redis-backed inventory store.

Entities are JSON strings keyed by ``{prefix}:{kind}:{id}``.  Sorted sets
index them for ordered reads:

- ``{prefix}:institutions`` and ``{prefix}:institution:{id}:assets``
  (score = created_at),
- ``{prefix}:asset:{id}:snapshots:{kind}`` and
  ``{prefix}:institution:{id}:drift`` (score = created_at, member =
  ``{seq:020d}:{entity_id}`` so equal timestamps fall back to ``seq``).

Zero-trust checks live in one hash per institution, ``{prefix}:checks:{id}``,
field = check key.  ``HSETNX`` makes ``(institution, key)`` unique, so a
racing seed cannot duplicate rows.  ``{prefix}:seq`` is the global
insertion counter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Sequence
from typing import Any

from redis.asyncio import Redis  # type: ignore[import-untyped]

from posturemcp.errors import UnknownAssetError
from posturemcp.errors import UnknownCheckError
from posturemcp.errors import UnknownInstitutionError
from posturemcp.models.inventory import Asset
from posturemcp.models.inventory import ConfigSnapshot
from posturemcp.models.inventory import DriftEvent
from posturemcp.models.inventory import Institution
from posturemcp.models.inventory import ScoreSnapshot
from posturemcp.models.inventory import SnapshotKind
from posturemcp.models.inventory import ZeroTrustCheck

logger = logging.getLogger(__name__)

_CLEAR_BATCH_SIZE = 100


def _decode(raw: bytes | str) -> str:
    return raw.decode() if isinstance(raw, bytes) else raw


def _member(seq: int, entity_id: str) -> str:
    return f"{seq:020d}:{entity_id}"


def _member_id(member: bytes | str) -> str:
    return _decode(member).split(":", 1)[1]


class RedisInventoryStore:
    """``InventoryStore`` over a ``redis.asyncio`` client."""

    def __init__(self, redis: Redis, *, prefix: str = "posturemcp") -> None:
        self._redis = redis
        self._prefix = prefix

    # -- keys --

    def _key(self, *parts: str) -> str:
        return ":".join((self._prefix, *parts))

    async def _next_seq(self, count: int = 1) -> int:
        """Reserve *count* sequence numbers and return the first one."""
        last = await self._redis.incrby(self._key("seq"), count)
        return int(last) - count + 1

    async def _load_many(self, keys: list[str]) -> list[str]:
        if not keys:
            return []
        raw_values = await self._redis.mget(keys)
        return [_decode(raw) for raw in raw_values if raw is not None]

    # -- institutions --

    async def create_institution(self, name: str) -> Institution:
        institution = Institution(name=name)
        pipe = self._redis.pipeline()
        pipe.set(
            self._key("institution", institution.id), institution.model_dump_json()
        )
        pipe.zadd(self._key("institutions"), {institution.id: institution.created_at})
        await pipe.execute()
        return institution

    async def get_institution(self, institution_id: str) -> Institution | None:
        raw = await self._redis.get(self._key("institution", institution_id))
        if raw is None:
            return None
        return Institution.model_validate_json(raw)

    async def list_institutions(self) -> list[Institution]:
        """Newest first."""
        ids = await self._redis.zrevrange(self._key("institutions"), 0, -1)
        raw = await self._load_many(
            [self._key("institution", _decode(i)) for i in ids]
        )
        return [Institution.model_validate_json(r) for r in raw]

    # -- assets --

    async def _require_institution(self, institution_id: str) -> None:
        if not await self._redis.exists(self._key("institution", institution_id)):
            raise UnknownInstitutionError(institution_id)

    async def create_asset(self, asset: Asset) -> Asset:
        await self.create_assets([asset])
        return asset

    async def create_assets(self, assets: Sequence[Asset]) -> int:
        for institution_id in {a.institution_id for a in assets}:
            await self._require_institution(institution_id)

        pipe = self._redis.pipeline()
        for asset in assets:
            pipe.set(self._key("asset", asset.id), asset.model_dump_json())
            pipe.zadd(
                self._key("institution", asset.institution_id, "assets"),
                {asset.id: asset.created_at},
            )
        await pipe.execute()
        return len(assets)

    async def get_asset(self, asset_id: str) -> Asset | None:
        raw = await self._redis.get(self._key("asset", asset_id))
        if raw is None:
            return None
        return Asset.model_validate_json(raw)

    async def list_assets(self, institution_id: str) -> list[Asset]:
        """Newest first."""
        ids = await self._redis.zrevrange(
            self._key("institution", institution_id, "assets"), 0, -1
        )
        raw = await self._load_many([self._key("asset", _decode(i)) for i in ids])
        return [Asset.model_validate_json(r) for r in raw]

    # -- snapshots --

    async def create_snapshot(
        self,
        asset_id: str,
        kind: SnapshotKind | str,
        data: Any,
        *,
        created_at: float | None = None,
    ) -> ConfigSnapshot:
        kind = SnapshotKind(kind)
        if not await self._redis.exists(self._key("asset", asset_id)):
            raise UnknownAssetError(asset_id)

        fields: dict[str, Any] = {
            "asset_id": asset_id,
            "kind": kind,
            "data": data,
            "seq": await self._next_seq(),
        }
        if created_at is not None:
            fields["created_at"] = created_at
        snapshot = ConfigSnapshot(**fields)

        pipe = self._redis.pipeline()
        pipe.set(self._key("snapshot", snapshot.id), snapshot.model_dump_json())
        pipe.zadd(
            self._key("asset", asset_id, "snapshots", kind.value),
            {_member(snapshot.seq, snapshot.id): snapshot.created_at},
        )
        await pipe.execute()
        return snapshot

    async def find_latest_snapshot(
        self, asset_id: str, kind: SnapshotKind | str
    ) -> ConfigSnapshot | None:
        # Equal scores come back in reverse lexicographic member order,
        # i.e. highest zero-padded seq first.
        members = await self._redis.zrevrange(
            self._key("asset", asset_id, "snapshots", SnapshotKind(kind).value), 0, 0
        )
        if not members:
            return None
        raw = await self._redis.get(self._key("snapshot", _member_id(members[0])))
        if raw is None:
            logger.warning(
                "Snapshot index for asset %s points at a missing snapshot", asset_id
            )
            return None
        return ConfigSnapshot.model_validate_json(raw)

    # -- drift --

    async def create_drift_event(
        self,
        asset_id: str,
        summary: str,
        diff: dict[str, dict[str, Any]],
        *,
        fingerprint: str | None = None,
    ) -> DriftEvent:
        event = DriftEvent(
            asset_id=asset_id,
            summary=summary,
            diff=diff,
            fingerprint=fingerprint,
            seq=await self._next_seq(),
        )
        member = {_member(event.seq, event.id): event.created_at}

        pipe = self._redis.pipeline()
        pipe.set(self._key("drift", event.id), event.model_dump_json())
        pipe.zadd(self._key("asset", asset_id, "drift"), member)
        asset = await self.get_asset(asset_id)
        if asset is not None:
            pipe.zadd(self._key("institution", asset.institution_id, "drift"), member)
        await pipe.execute()
        return event

    async def list_drift_events(
        self, institution_id: str, *, limit: int = 50
    ) -> list[DriftEvent]:
        """Newest first, at most *limit* events."""
        if limit <= 0:
            return []
        members = await self._redis.zrevrange(
            self._key("institution", institution_id, "drift"), 0, limit - 1
        )
        raw = await self._load_many(
            [self._key("drift", _member_id(m)) for m in members]
        )
        return [DriftEvent.model_validate_json(r) for r in raw]

    async def count_drift_events(self, institution_id: str) -> int:
        return await self._redis.zcard(
            self._key("institution", institution_id, "drift")
        )

    # -- zero-trust checks --

    async def list_checks(self, institution_id: str) -> list[ZeroTrustCheck]:
        """Oldest first, matching seeding order."""
        raw_values = await self._redis.hvals(self._key("checks", institution_id))
        checks = [ZeroTrustCheck.model_validate_json(_decode(r)) for r in raw_values]
        checks.sort(key=lambda c: c.seq)
        return checks

    async def count_checks(self, institution_id: str) -> int:
        return await self._redis.hlen(self._key("checks", institution_id))

    async def create_checks(
        self, institution_id: str, checks: Iterable[tuple[str, str]]
    ) -> int:
        pending = list(checks)
        if not pending:
            return 0
        first_seq = await self._next_seq(len(pending))

        pipe = self._redis.pipeline()
        for offset, (key, title) in enumerate(pending):
            check = ZeroTrustCheck(
                institution_id=institution_id,
                key=key,
                title=title,
                seq=first_seq + offset,
            )
            pipe.hsetnx(
                self._key("checks", institution_id), key, check.model_dump_json()
            )
        results = await pipe.execute()
        return sum(1 for created in results if created)

    async def update_check(
        self,
        institution_id: str,
        key: str,
        *,
        passed: bool,
        evidence: str | None = None,
    ) -> ZeroTrustCheck:
        hash_key = self._key("checks", institution_id)
        raw = await self._redis.hget(hash_key, key)
        if raw is None:
            raise UnknownCheckError(f"{institution_id}/{key}")
        check = ZeroTrustCheck.model_validate_json(_decode(raw))
        updated = check.model_copy(update={"passed": passed, "evidence": evidence})
        await self._redis.hset(hash_key, key, updated.model_dump_json())
        return updated

    # -- score history --

    async def record_score_snapshot(self, snapshot: ScoreSnapshot) -> None:
        await self._redis.rpush(
            self._key("scores", snapshot.institution_id), snapshot.model_dump_json()
        )

    async def list_score_snapshots(self, institution_id: str) -> list[ScoreSnapshot]:
        raw_values = await self._redis.lrange(
            self._key("scores", institution_id), 0, -1
        )
        return [ScoreSnapshot.model_validate_json(_decode(r)) for r in raw_values]

    # -- lifecycle --

    async def clear(self) -> None:
        """Remove every key under the store prefix.

        Deletes in batches to avoid loading all keys into memory at once.
        """
        batch: list = []
        async for key in self._redis.scan_iter(match=f"{self._prefix}:*"):
            batch.append(key)
            if len(batch) >= _CLEAR_BATCH_SIZE:
                await self._redis.delete(*batch)
                batch.clear()
        if batch:
            await self._redis.delete(*batch)

    async def close(self) -> None:
        await self._redis.aclose()
