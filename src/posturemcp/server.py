"""PostureMCP — FastMCP v2 server over the inventory posture core.

Tools delegate to the drift evaluator and scorers with the configured
``InventoryStore``.  Call ``configure(...)`` before using the server.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from time import perf_counter
from typing import Any
from typing import TypeVar

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import ValidationError

from posturemcp import drift
from posturemcp import scoring
from posturemcp.audit import AuditEvent
from posturemcp.audit import AuditEventType
from posturemcp.audit import AuditLogger
from posturemcp.config import AuditConfig
from posturemcp.config import DriftConfig
from posturemcp.config import StoreConfig
from posturemcp.errors import PostureError
from posturemcp.ingest import parse_assets_csv
from posturemcp.models.inventory import Asset
from posturemcp.models.inventory import ScoreScope
from posturemcp.models.inventory import ScoreSnapshot
from posturemcp.models.inventory import SnapshotKind
from posturemcp.models.schemas import AssetListResult
from posturemcp.models.schemas import AssetResult
from posturemcp.models.schemas import CheckResult
from posturemcp.models.schemas import CybersecurityDashboard
from posturemcp.models.schemas import DriftEventView
from posturemcp.models.schemas import DriftListResult
from posturemcp.models.schemas import EvaluateDriftResult
from posturemcp.models.schemas import ImportResult
from posturemcp.models.schemas import InstitutionListResult
from posturemcp.models.schemas import InstitutionResult
from posturemcp.models.schemas import ModernizationDashboard
from posturemcp.models.schemas import OverallDashboard
from posturemcp.models.schemas import SnapshotResult
from posturemcp.models.schemas import ToolResult
from posturemcp.models.schemas import ZeroTrustReport
from posturemcp.observability import counters_snapshot
from posturemcp.observability import latency_metrics_snapshot
from posturemcp.observability import record_latency
from posturemcp.store import build_store
from posturemcp.store import InventoryStore

logger = logging.getLogger(__name__)

mcp = FastMCP("PostureMCP")

# ---------------------------------------------------------------------------
# Backend instances (set via configure())
# ---------------------------------------------------------------------------

_store: InventoryStore | None = None
_audit_logger: AuditLogger | None = None
_drift_config: DriftConfig = DriftConfig()


async def configure(
    *,
    store: InventoryStore | None = None,
    store_config: StoreConfig | None = None,
    audit_config: AuditConfig | None = None,
    drift_config: DriftConfig | None = None,
) -> None:
    """Initialize the store and audit backends.

    An explicit *store* wins over *store_config*.  Must be called before
    the MCP tools can function.
    """
    global _store, _audit_logger, _drift_config
    if _store is not None and _store is not store:
        try:
            await _store.close()
        except RuntimeError:
            # Tests may reconfigure across event loops.
            pass

    _store = store if store is not None else build_store(store_config or StoreConfig())
    _audit_logger = AuditLogger(audit_config or AuditConfig())
    _drift_config = drift_config or DriftConfig()


async def shutdown() -> None:
    """Close the store and release server resources."""
    global _store, _audit_logger
    if _store is not None:
        await _store.close()
        _store = None
    _audit_logger = None


async def _reset_store() -> None:
    """Clear all stored data — exposed for test cleanup."""
    if _store is not None:
        await _store.clear()


def _get_store() -> InventoryStore:
    """Return the store instance or raise."""
    if _store is None:
        raise RuntimeError("Store not configured. Call configure() first.")
    return _store


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_R = TypeVar("_R", bound=ToolResult)


@contextmanager
def _timed(operation: str) -> Iterator[dict[str, bool]]:
    """Record latency for one tool call; set ``outcome["ok"]`` on success."""
    start = perf_counter()
    outcome = {"ok": False}
    try:
        yield outcome
    finally:
        record_latency(
            operation=operation,
            duration_ms=(perf_counter() - start) * 1000,
            ok=outcome["ok"],
        )


def _rejected(result_type: type[_R], error_code: str, message: str) -> _R:
    return result_type(status="error", error_code=error_code, message=message)


def _from_exception(result_type: type[_R], exc: Exception) -> _R:
    if isinstance(exc, ValidationError):
        err = exc.errors()[0] if exc.errors() else {}
        return _rejected(
            result_type, "validation_error", str(err.get("msg", "Invalid input"))
        )
    if isinstance(exc, PostureError):
        return _rejected(result_type, exc.error_code, str(exc))
    raise exc


def _missing_institution(result_type: type[_R], institution_id: str) -> _R | None:
    if institution_id.strip():
        return None
    return _rejected(
        result_type, "missing_institution_id", "institution_id is required"
    )


async def _audit(
    event_type: AuditEventType,
    institution_id: str | None,
    payload: dict[str, Any],
) -> None:
    """Write an audit event when audit logging is configured."""
    if _audit_logger is None:
        return
    await _audit_logger.log(
        AuditEvent(
            event_type=event_type, institution_id=institution_id, payload=payload
        )
    )


async def _record_scores(snapshot: ScoreSnapshot) -> None:
    await _get_store().record_score_snapshot(snapshot)
    await _audit(
        AuditEventType.SCORES_RECORDED,
        snapshot.institution_id,
        snapshot.model_dump(mode="json", exclude={"institution_id"}),
    )


# ---------------------------------------------------------------------------
# Foundation: institutions, assets, snapshots
# ---------------------------------------------------------------------------


@mcp.tool
async def create_institution(name: str = "Pilot Institution") -> InstitutionResult:
    """Create an institution and seed its default zero-trust checks.

    Args:
        name: Display name of the institution.
    """
    with _timed("mcp.create_institution") as outcome:
        if not name.strip():
            return _rejected(InstitutionResult, "validation_error", "name is required")
        store = _get_store()
        institution = await store.create_institution(name.strip())
        seeded = await scoring.seed_default_checks(store, institution.id)
        await _audit(
            AuditEventType.INSTITUTION_CREATED,
            institution.id,
            {"name": institution.name},
        )
        if seeded:
            await _audit(
                AuditEventType.CHECKS_SEEDED, institution.id, {"created": seeded}
            )
        outcome["ok"] = True
        return InstitutionResult(institution=institution, checks_seeded=seeded)


@mcp.tool
async def list_institutions() -> InstitutionListResult:
    """List institutions, newest first."""
    with _timed("mcp.list_institutions") as outcome:
        institutions = await _get_store().list_institutions()
        outcome["ok"] = True
        return InstitutionListResult(institutions=institutions)


@mcp.tool
async def register_asset(
    institution_id: str,
    hostname: str | None = None,
    ip: str | None = None,
    asset_type: str = "unknown",
    os: str | None = None,
    owner: str | None = None,
    tags: str | None = None,
) -> AssetResult:
    """Add one asset to an institution's inventory.

    Args:
        institution_id: Owning institution.
        hostname: DNS or NetBIOS name.
        ip: Management IP address.
        asset_type: Classification, e.g. server, switch, firewall.
        os: Operating system string, e.g. "Ubuntu 22.04".
        owner: Responsible team or person.
        tags: Comma-separated tags such as "prod, logs:on".
    """
    with _timed("mcp.register_asset") as outcome:
        if rejected := _missing_institution(AssetResult, institution_id):
            return rejected
        try:
            asset = await _get_store().create_asset(
                Asset(
                    institution_id=institution_id,
                    hostname=hostname,
                    ip=ip,
                    asset_type=asset_type,
                    os=os,
                    owner=owner,
                    tags=tags,
                )
            )
        except (PostureError, ValidationError) as exc:
            return _from_exception(AssetResult, exc)
        await _audit(
            AuditEventType.ASSET_REGISTERED, institution_id, {"asset_id": asset.id}
        )
        outcome["ok"] = True
        return AssetResult(asset=asset)


@mcp.tool
async def list_assets(institution_id: str) -> AssetListResult:
    """List an institution's assets, newest first."""
    with _timed("mcp.list_assets") as outcome:
        if rejected := _missing_institution(AssetListResult, institution_id):
            return rejected
        assets = await _get_store().list_assets(institution_id)
        outcome["ok"] = True
        return AssetListResult(assets=assets)


@mcp.tool
async def import_assets_csv(institution_id: str, csv_text: str) -> ImportResult:
    """Bulk-import assets from CSV text.

    Args:
        institution_id: Owning institution.
        csv_text: CSV with header columns hostname, ip, assetType, os, owner, tags.
    """
    with _timed("mcp.import_assets_csv") as outcome:
        if rejected := _missing_institution(ImportResult, institution_id):
            return rejected
        try:
            assets = parse_assets_csv(institution_id, csv_text)
            imported = await _get_store().create_assets(assets)
        except (PostureError, ValidationError) as exc:
            return _from_exception(ImportResult, exc)
        await _audit(
            AuditEventType.ASSETS_IMPORTED, institution_id, {"imported": imported}
        )
        outcome["ok"] = True
        return ImportResult(imported=imported)


@mcp.tool
async def record_snapshot(
    asset_id: str,
    kind: str,
    data: Any = None,
) -> SnapshotResult:
    """Store a baseline or current configuration snapshot for an asset.

    Args:
        asset_id: Asset the configuration belongs to.
        kind: "baseline" or "current".
        data: Configuration document, normally a JSON object.
    """
    with _timed("mcp.record_snapshot") as outcome:
        try:
            snapshot_kind = SnapshotKind(kind)
        except ValueError:
            return _rejected(
                SnapshotResult, "invalid_kind", "kind must be 'baseline' or 'current'."
            )
        store = _get_store()
        try:
            snapshot = await store.create_snapshot(
                asset_id, snapshot_kind, {} if data is None else data
            )
        except PostureError as exc:
            return _from_exception(SnapshotResult, exc)
        asset = await store.get_asset(asset_id)
        await _audit(
            AuditEventType.SNAPSHOT_RECORDED,
            asset.institution_id if asset else None,
            {
                "asset_id": asset_id,
                "kind": snapshot_kind.value,
                "snapshot_id": snapshot.id,
            },
        )
        outcome["ok"] = True
        return SnapshotResult(snapshot=snapshot)


# ---------------------------------------------------------------------------
# Cybersecurity: drift and zero trust
# ---------------------------------------------------------------------------


@mcp.tool
async def evaluate_drift(asset_id: str) -> EvaluateDriftResult:
    """Diff the asset's latest baseline and current snapshots.

    Records a drift event when any top-level key changed.  ``drift`` is
    null when a snapshot is missing or nothing changed.
    """
    with _timed("mcp.evaluate_drift") as outcome:
        result = await drift.evaluate_drift(
            _get_store(),
            asset_id,
            config=_drift_config,
            audit_logger=_audit_logger,
        )
        outcome["ok"] = True
        return EvaluateDriftResult(drift=result)


@mcp.tool
async def list_drift_events(
    institution_id: str, limit: int | None = None
) -> DriftListResult:
    """List an institution's drift events, newest first.

    Args:
        institution_id: Institution to list.
        limit: Maximum events to return (defaults to 50).
    """
    with _timed("mcp.list_drift_events") as outcome:
        if rejected := _missing_institution(DriftListResult, institution_id):
            return rejected
        if limit is not None and limit < 1:
            return _rejected(
                DriftListResult, "validation_error", "limit must be at least 1"
            )
        store = _get_store()
        events = await store.list_drift_events(
            institution_id,
            limit=_drift_config.drift_list_limit if limit is None else limit,
        )
        assets = {a.id: a for a in await store.list_assets(institution_id)}
        views = []
        for event in events:
            asset = assets.get(event.asset_id)
            views.append(
                DriftEventView(
                    id=event.id,
                    created_at=event.created_at,
                    summary=event.summary,
                    hostname=asset.hostname if asset else None,
                    ip=asset.ip if asset else None,
                    diff=event.diff,
                )
            )
        outcome["ok"] = True
        return DriftListResult(events=views)


@mcp.tool
async def zero_trust_report(institution_id: str) -> ZeroTrustReport:
    """Return the institution's zero-trust checks and readiness score."""
    with _timed("mcp.zero_trust_report") as outcome:
        if rejected := _missing_institution(ZeroTrustReport, institution_id):
            return rejected
        checks = await _get_store().list_checks(institution_id)
        outcome["ok"] = True
        return ZeroTrustReport(score=scoring.score_checks(checks), checks=checks)


@mcp.tool
async def update_zero_trust_check(
    institution_id: str,
    key: str,
    passed: bool,
    evidence: str | None = None,
) -> CheckResult:
    """Mark a zero-trust check as passed or failed.

    Args:
        institution_id: Institution owning the check.
        key: Stable check key, e.g. "mfa".
        passed: Whether the control is in place.
        evidence: Optional supporting note or link.
    """
    with _timed("mcp.update_zero_trust_check") as outcome:
        if rejected := _missing_institution(CheckResult, institution_id):
            return rejected
        try:
            check = await _get_store().update_check(
                institution_id, key, passed=passed, evidence=evidence
            )
        except PostureError as exc:
            return _from_exception(CheckResult, exc)
        await _audit(
            AuditEventType.CHECK_UPDATED,
            institution_id,
            {"key": key, "passed": passed},
        )
        outcome["ok"] = True
        return CheckResult(check=check)


@mcp.tool
async def cybersecurity_dashboard(institution_id: str) -> CybersecurityDashboard:
    """Drift event total and zero-trust score; appends a score history row."""
    with _timed("mcp.cybersecurity_dashboard") as outcome:
        if rejected := _missing_institution(CybersecurityDashboard, institution_id):
            return rejected
        store = _get_store()
        drift_events = await store.count_drift_events(institution_id)
        zero_trust_score = await scoring.compute_zero_trust_score(store, institution_id)
        await _record_scores(
            ScoreSnapshot(
                institution_id=institution_id,
                scope=ScoreScope.cybersecurity,
                drift_events=drift_events,
                zero_trust_score=zero_trust_score,
            )
        )
        outcome["ok"] = True
        return CybersecurityDashboard(
            totals={"drift_events": drift_events},
            zero_trust_score=zero_trust_score,
        )


# ---------------------------------------------------------------------------
# Modernization and overall dashboards
# ---------------------------------------------------------------------------


@mcp.tool
async def modernization_dashboard(institution_id: str) -> ModernizationDashboard:
    """Asset totals, per-type and per-legacy-OS counts, modernization scores."""
    with _timed("mcp.modernization_dashboard") as outcome:
        if rejected := _missing_institution(ModernizationDashboard, institution_id):
            return rejected
        assets = await _get_store().list_assets(institution_id)
        scores = scoring.score_assets(assets)
        await _record_scores(
            ScoreSnapshot(
                institution_id=institution_id,
                scope=ScoreScope.modernization,
                **scores.model_dump(),
            )
        )
        outcome["ok"] = True
        return ModernizationDashboard(
            totals={"assets": len(assets)},
            by_type=scoring.assets_by_type(assets),
            legacy_os=scoring.legacy_os_breakdown(assets),
            modernization=scores,
        )


@mcp.tool
async def overall_dashboard(institution_id: str) -> OverallDashboard:
    """Combined inventory, drift and zero-trust view."""
    with _timed("mcp.overall_dashboard") as outcome:
        if rejected := _missing_institution(OverallDashboard, institution_id):
            return rejected
        store = _get_store()
        assets = await store.list_assets(institution_id)
        scores = scoring.score_assets(assets)
        zero_trust_score = await scoring.compute_zero_trust_score(store, institution_id)
        drift_events = await store.count_drift_events(institution_id)
        await _record_scores(
            ScoreSnapshot(
                institution_id=institution_id,
                scope=ScoreScope.overall,
                zero_trust_score=zero_trust_score,
                drift_events=drift_events,
                **scores.model_dump(),
            )
        )
        outcome["ok"] = True
        return OverallDashboard(
            totals={"assets": len(assets), "drift_events": drift_events},
            by_type=scoring.assets_by_type(assets),
            modernization=scores,
            zero_trust_score=zero_trust_score,
        )


@mcp.tool
async def server_metrics() -> dict[str, Any]:
    """In-process tool latency aggregates and event counters."""
    return {"latency": latency_metrics_snapshot(), "counters": counters_snapshot()}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Run the MCP server over stdio with settings from the environment."""
    load_dotenv(override=False)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(configure(store_config=StoreConfig.from_env()))
    mcp.run()


if __name__ == "__main__":
    main()
