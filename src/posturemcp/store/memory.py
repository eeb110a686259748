"""In-process inventory store.

Backs the unit tests and single-process deployments.  All mutations are
serialized by one ``asyncio.Lock``; nothing is persisted across restarts.
Snapshot payloads and drift diffs are deep-copied on the way in and out,
so callers never share mutable state with stored rows.
"""

from __future__ import annotations

import asyncio
import copy
import itertools
from collections import defaultdict
from collections.abc import Iterable
from collections.abc import Sequence
from typing import Any

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


def _recency(item: ConfigSnapshot | DriftEvent) -> tuple[float, int]:
    return (item.created_at, item.seq)


class InMemoryInventoryStore:
    """Dictionary-backed ``InventoryStore``."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._seq = itertools.count(1)
        self._institutions: dict[str, Institution] = {}
        self._assets: dict[str, Asset] = {}
        self._snapshots: dict[tuple[str, SnapshotKind], list[ConfigSnapshot]] = (
            defaultdict(list)
        )
        self._drift: dict[str, list[DriftEvent]] = defaultdict(list)
        self._checks: dict[str, dict[str, ZeroTrustCheck]] = defaultdict(dict)
        self._scores: dict[str, list[ScoreSnapshot]] = defaultdict(list)

    # -- institutions --

    async def create_institution(self, name: str) -> Institution:
        institution = Institution(name=name)
        async with self._lock:
            self._institutions[institution.id] = institution
        return institution

    async def get_institution(self, institution_id: str) -> Institution | None:
        return self._institutions.get(institution_id)

    async def list_institutions(self) -> list[Institution]:
        """Newest first."""
        return sorted(
            self._institutions.values(), key=lambda i: i.created_at, reverse=True
        )

    # -- assets --

    async def create_asset(self, asset: Asset) -> Asset:
        async with self._lock:
            if asset.institution_id not in self._institutions:
                raise UnknownInstitutionError(asset.institution_id)
            self._assets[asset.id] = asset
        return asset

    async def create_assets(self, assets: Sequence[Asset]) -> int:
        async with self._lock:
            for asset in assets:
                if asset.institution_id not in self._institutions:
                    raise UnknownInstitutionError(asset.institution_id)
            for asset in assets:
                self._assets[asset.id] = asset
        return len(assets)

    async def get_asset(self, asset_id: str) -> Asset | None:
        return self._assets.get(asset_id)

    async def list_assets(self, institution_id: str) -> list[Asset]:
        """Newest first."""
        assets = [a for a in self._assets.values() if a.institution_id == institution_id]
        assets.sort(key=lambda a: a.created_at, reverse=True)
        return assets

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
        async with self._lock:
            if asset_id not in self._assets:
                raise UnknownAssetError(asset_id)
            fields: dict[str, Any] = {
                "asset_id": asset_id,
                "kind": kind,
                "data": copy.deepcopy(data),
                "seq": next(self._seq),
            }
            if created_at is not None:
                fields["created_at"] = created_at
            snapshot = ConfigSnapshot(**fields)
            self._snapshots[(asset_id, kind)].append(snapshot)
        return snapshot.model_copy(deep=True)

    async def find_latest_snapshot(
        self, asset_id: str, kind: SnapshotKind | str
    ) -> ConfigSnapshot | None:
        candidates = self._snapshots.get((asset_id, SnapshotKind(kind)))
        if not candidates:
            return None
        return max(candidates, key=_recency).model_copy(deep=True)

    # -- drift --

    async def create_drift_event(
        self,
        asset_id: str,
        summary: str,
        diff: dict[str, dict[str, Any]],
        *,
        fingerprint: str | None = None,
    ) -> DriftEvent:
        async with self._lock:
            event = DriftEvent(
                asset_id=asset_id,
                summary=summary,
                diff=copy.deepcopy(diff),
                fingerprint=fingerprint,
                seq=next(self._seq),
            )
            self._drift[asset_id].append(event)
        return event.model_copy(deep=True)

    def _institution_events(self, institution_id: str) -> list[DriftEvent]:
        events: list[DriftEvent] = []
        for asset_id, asset_events in self._drift.items():
            asset = self._assets.get(asset_id)
            if asset is not None and asset.institution_id == institution_id:
                events.extend(asset_events)
        return events

    async def list_drift_events(
        self, institution_id: str, *, limit: int = 50
    ) -> list[DriftEvent]:
        """Newest first, at most *limit* events."""
        if limit <= 0:
            return []
        events = self._institution_events(institution_id)
        events.sort(key=_recency, reverse=True)
        return [event.model_copy(deep=True) for event in events[:limit]]

    async def count_drift_events(self, institution_id: str) -> int:
        return len(self._institution_events(institution_id))

    # -- zero-trust checks --

    async def list_checks(self, institution_id: str) -> list[ZeroTrustCheck]:
        """Oldest first, matching seeding order."""
        checks = list(self._checks.get(institution_id, {}).values())
        checks.sort(key=lambda c: c.seq)
        return checks

    async def count_checks(self, institution_id: str) -> int:
        return len(self._checks.get(institution_id, {}))

    async def create_checks(
        self, institution_id: str, checks: Iterable[tuple[str, str]]
    ) -> int:
        created = 0
        async with self._lock:
            existing = self._checks[institution_id]
            for key, title in checks:
                # (institution_id, key) is unique; duplicates are skipped
                if key in existing:
                    continue
                existing[key] = ZeroTrustCheck(
                    institution_id=institution_id,
                    key=key,
                    title=title,
                    seq=next(self._seq),
                )
                created += 1
        return created

    async def update_check(
        self,
        institution_id: str,
        key: str,
        *,
        passed: bool,
        evidence: str | None = None,
    ) -> ZeroTrustCheck:
        async with self._lock:
            check = self._checks.get(institution_id, {}).get(key)
            if check is None:
                raise UnknownCheckError(f"{institution_id}/{key}")
            updated = check.model_copy(update={"passed": passed, "evidence": evidence})
            self._checks[institution_id][key] = updated
        return updated

    # -- score history --

    async def record_score_snapshot(self, snapshot: ScoreSnapshot) -> None:
        async with self._lock:
            self._scores[snapshot.institution_id].append(snapshot)

    async def list_score_snapshots(self, institution_id: str) -> list[ScoreSnapshot]:
        return list(self._scores.get(institution_id, []))

    # -- lifecycle --

    async def clear(self) -> None:
        async with self._lock:
            self._institutions.clear()
            self._assets.clear()
            self._snapshots.clear()
            self._drift.clear()
            self._checks.clear()
            self._scores.clear()

    async def close(self) -> None:
        return None
