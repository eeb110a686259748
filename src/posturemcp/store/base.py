"""Inventory store protocol.

The drift evaluator and scorers only need the first block of methods;
the remainder backs the MCP tools.  Implementations must give
snapshots, drift events and checks a strictly increasing ``seq`` and
must treat ``(institution_id, key)`` as unique for zero-trust checks.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Sequence
from typing import Any
from typing import Protocol

from posturemcp.models.inventory import Asset
from posturemcp.models.inventory import ConfigSnapshot
from posturemcp.models.inventory import DriftEvent
from posturemcp.models.inventory import Institution
from posturemcp.models.inventory import ScoreSnapshot
from posturemcp.models.inventory import SnapshotKind
from posturemcp.models.inventory import ZeroTrustCheck


class InventoryStore(Protocol):
    """Storage collaborator injected into every core operation."""

    # -- core --

    async def find_latest_snapshot(
        self, asset_id: str, kind: SnapshotKind | str
    ) -> ConfigSnapshot | None: ...

    async def create_drift_event(
        self,
        asset_id: str,
        summary: str,
        diff: dict[str, dict[str, Any]],
        *,
        fingerprint: str | None = None,
    ) -> DriftEvent: ...

    async def list_assets(self, institution_id: str) -> list[Asset]: ...

    async def list_checks(self, institution_id: str) -> list[ZeroTrustCheck]: ...

    async def count_checks(self, institution_id: str) -> int: ...

    async def create_checks(
        self, institution_id: str, checks: Iterable[tuple[str, str]]
    ) -> int: ...

    # -- institutions / assets / snapshots --

    async def create_institution(self, name: str) -> Institution: ...

    async def get_institution(self, institution_id: str) -> Institution | None: ...

    async def list_institutions(self) -> list[Institution]: ...

    async def create_asset(self, asset: Asset) -> Asset: ...

    async def create_assets(self, assets: Sequence[Asset]) -> int: ...

    async def get_asset(self, asset_id: str) -> Asset | None: ...

    async def create_snapshot(
        self,
        asset_id: str,
        kind: SnapshotKind | str,
        data: Any,
        *,
        created_at: float | None = None,
    ) -> ConfigSnapshot: ...

    # -- drift / checks / history --

    async def list_drift_events(
        self, institution_id: str, *, limit: int = 50
    ) -> list[DriftEvent]: ...

    async def count_drift_events(self, institution_id: str) -> int: ...

    async def update_check(
        self,
        institution_id: str,
        key: str,
        *,
        passed: bool,
        evidence: str | None = None,
    ) -> ZeroTrustCheck: ...

    async def record_score_snapshot(self, snapshot: ScoreSnapshot) -> None: ...

    async def list_score_snapshots(
        self, institution_id: str
    ) -> list[ScoreSnapshot]: ...

    # -- lifecycle --

    async def clear(self) -> None: ...

    async def close(self) -> None: ...
