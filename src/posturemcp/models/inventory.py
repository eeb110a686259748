"""Inventory entity models: institutions, assets, snapshots, drift, checks."""

from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


class SnapshotKind(str, Enum):
    """Role of a configuration snapshot in drift evaluation."""

    baseline = "baseline"
    current = "current"


class ScoreScope(str, Enum):
    """Which dashboard produced a score history row."""

    modernization = "modernization"
    cybersecurity = "cybersecurity"
    overall = "overall"


class Institution(BaseModel):
    """Tenant scope for assets, checks and snapshots."""

    id: str = Field(default_factory=lambda: _new_id("inst"))
    name: str = "Pilot Institution"
    created_at: float = Field(default_factory=time.time)


class Asset(BaseModel):
    """One inventoried asset. Read by the scorers, never mutated by them."""

    id: str = Field(default_factory=lambda: _new_id("ast"))
    institution_id: str
    hostname: str | None = None
    ip: str | None = None
    asset_type: str = Field(
        default="unknown",
        description="Free-form classification, e.g. server, switch, workstation.",
    )
    os: str | None = None
    owner: str | None = None
    tags: str | None = Field(
        default=None,
        description="Comma-separated tokens such as 'prod, logs:on'.",
    )
    created_at: float = Field(default_factory=time.time)


class ConfigSnapshot(BaseModel):
    """One captured configuration state of one asset."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: _new_id("snap"))
    asset_id: str
    kind: SnapshotKind
    data: Any = Field(
        default=None,
        description="Arbitrary JSON payload, normally a mapping of setting -> value.",
    )
    created_at: float = Field(default_factory=time.time)
    seq: int = Field(
        default=0,
        description="Store-assigned insertion counter; breaks created_at ties.",
    )


class DriftEvent(BaseModel):
    """Append-only record of a detected baseline/current difference."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=lambda: _new_id("drift"))
    asset_id: str
    summary: str
    diff: dict[str, dict[str, Any]] = Field(
        description="Changed key -> {baseline, current}; an absent side is omitted.",
    )
    fingerprint: str | None = Field(
        default=None,
        description="SHA-256 of asset id and canonical diff, for downstream dedup.",
    )
    created_at: float = Field(default_factory=time.time)
    seq: int = 0


class ZeroTrustCheck(BaseModel):
    """One boolean control-readiness item for an institution."""

    id: str = Field(default_factory=lambda: _new_id("ztc"))
    institution_id: str
    key: str
    title: str
    passed: bool = False
    evidence: str | None = None
    created_at: float = Field(default_factory=time.time)
    seq: int = 0


class ScoreSnapshot(BaseModel):
    """Score history row persisted by the dashboards for trendlines."""

    model_config = {"frozen": True}

    institution_id: str
    scope: ScoreScope
    asset_count: int | None = None
    visibility_score: int | None = None
    lifecycle_score: int | None = None
    standardization_score: int | None = None
    logging_readiness_score: int | None = None
    zero_trust_score: int | None = None
    drift_events: int | None = None
    created_at: float = Field(default_factory=time.time)
