"""Drift evaluation for one asset.

Loads the latest baseline and current snapshots, diffs them and, when
anything changed, appends a ``DriftEvent``.  There is no per-asset lock:
two concurrent evaluations of the same unchanged pair both write an
event.  Each event carries a content fingerprint so consumers that need
at-most-once semantics can deduplicate.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any

from posturemcp.audit import AuditEvent
from posturemcp.audit import AuditEventType
from posturemcp.audit import AuditLogger
from posturemcp.config import DriftConfig
from posturemcp.drift.diff import canonical_json
from posturemcp.drift.diff import diff_snapshots
from posturemcp.models.inventory import SnapshotKind
from posturemcp.models.schemas import DriftResult
from posturemcp.observability import increment_counter
from posturemcp.store.base import InventoryStore

logger = logging.getLogger(__name__)

SUMMARY_PREFIX = "Drift detected: "


def build_summary(changed_keys: list[str], config: DriftConfig | None = None) -> str:
    """Name the first ``summary_max_keys`` keys, marking any truncation."""
    cfg = config or DriftConfig()
    shown = ", ".join(changed_keys[: cfg.summary_max_keys])
    marker = cfg.truncation_marker if len(changed_keys) > cfg.summary_max_keys else ""
    return f"{SUMMARY_PREFIX}{shown}{marker}"


def drift_fingerprint(asset_id: str, diff: dict[str, dict[str, Any]]) -> str:
    """SHA-256 over the asset id and the canonical diff."""
    digest = hashlib.sha256()
    digest.update(asset_id.encode())
    digest.update(b"\x00")
    digest.update(canonical_json(diff).encode())
    return digest.hexdigest()


async def evaluate_drift(
    store: InventoryStore,
    asset_id: str,
    *,
    config: DriftConfig | None = None,
    audit_logger: AuditLogger | None = None,
) -> DriftResult | None:
    """Compare the asset's latest baseline and current snapshots.

    Returns ``None`` when either snapshot is missing or nothing changed;
    neither case writes anything.  Store errors propagate unchanged.
    """
    baseline = await store.find_latest_snapshot(asset_id, SnapshotKind.baseline)
    current = await store.find_latest_snapshot(asset_id, SnapshotKind.current)
    if baseline is None or current is None:
        logger.debug(
            "Drift skipped for asset %s: baseline=%s current=%s",
            asset_id,
            baseline is not None,
            current is not None,
        )
        return None

    diff = diff_snapshots(baseline.data, current.data)
    if not diff:
        logger.debug("No drift for asset %s", asset_id)
        return None

    summary = build_summary(list(diff), config)
    fingerprint = drift_fingerprint(asset_id, diff)
    event = await store.create_drift_event(
        asset_id, summary, diff, fingerprint=fingerprint
    )
    increment_counter("drift.events_created")
    logger.info(
        "Drift detected for asset %s: %d changed key(s), event=%s",
        asset_id,
        len(diff),
        event.id,
    )

    if audit_logger is not None:
        asset = await store.get_asset(asset_id)
        await audit_logger.log(
            AuditEvent(
                event_type=AuditEventType.DRIFT_DETECTED,
                institution_id=asset.institution_id if asset else None,
                payload={
                    "asset_id": asset_id,
                    "drift_event_id": event.id,
                    "changed_keys": list(diff),
                    "fingerprint": fingerprint,
                },
            )
        )

    return DriftResult(summary=summary, diff=diff)
