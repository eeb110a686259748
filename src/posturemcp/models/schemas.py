"""Pydantic models for core results and the MCP tool interface.

Core operations return ``DriftResult`` / ``ModernizationScores``; the
tool models wrap those for the server.  FastMCP v2 serializes Pydantic
models automatically, and ``model_dump(mode="json")`` on any of them is
a ready-to-send JSON body.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from pydantic import Field

from posturemcp.models.inventory import Asset
from posturemcp.models.inventory import ConfigSnapshot
from posturemcp.models.inventory import Institution
from posturemcp.models.inventory import ZeroTrustCheck

# ---------------------------------------------------------------------------
# Core results
# ---------------------------------------------------------------------------


class DriftResult(BaseModel):
    """Outcome of one drift evaluation that found changes."""

    model_config = {"frozen": True}

    summary: str = Field(
        description="'Drift detected: ' followed by up to five changed keys.",
    )
    diff: dict[str, dict[str, Any]] = Field(
        description="Every changed key -> {baseline, current}.",
    )


class ModernizationScores(BaseModel):
    """Four 0-100 inventory health percentages for one institution."""

    model_config = {"frozen": True}

    asset_count: int = 0
    visibility_score: int = 0
    lifecycle_score: int = 0
    standardization_score: int = 0
    logging_readiness_score: int = 0


# ---------------------------------------------------------------------------
# Tool outputs
# ---------------------------------------------------------------------------


class ToolResult(BaseModel):
    """Common status envelope for tool responses."""

    status: str = Field(
        default="ok",
        description="'ok' on success, 'error' when the request was rejected.",
    )
    error_code: str | None = Field(
        default=None,
        description="Machine-readable error code when status is 'error'.",
    )
    message: str | None = Field(
        default=None,
        description="Human-readable detail when status is 'error'.",
    )


class InstitutionResult(ToolResult):
    institution: Institution | None = None
    checks_seeded: int = 0


class InstitutionListResult(ToolResult):
    institutions: list[Institution] = Field(default_factory=list)


class AssetResult(ToolResult):
    asset: Asset | None = None


class AssetListResult(ToolResult):
    assets: list[Asset] = Field(default_factory=list)


class ImportResult(ToolResult):
    imported: int = 0


class SnapshotResult(ToolResult):
    snapshot: ConfigSnapshot | None = None


class EvaluateDriftResult(ToolResult):
    drift: DriftResult | None = Field(
        default=None,
        description="None when a snapshot is missing or nothing changed.",
    )


class DriftEventView(BaseModel):
    """Drift event joined with the hostname/ip of its asset."""

    id: str
    created_at: float
    summary: str
    hostname: str | None = None
    ip: str | None = None
    diff: dict[str, dict[str, Any]] = Field(default_factory=dict)


class DriftListResult(ToolResult):
    events: list[DriftEventView] = Field(default_factory=list)


class ModernizationDashboard(ToolResult):
    totals: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    legacy_os: dict[str, int] = Field(
        default_factory=dict,
        description="Asset count per matched legacy OS signature.",
    )
    modernization: ModernizationScores | None = None


class CybersecurityDashboard(ToolResult):
    totals: dict[str, int] = Field(default_factory=dict)
    zero_trust_score: int = 0


class ZeroTrustReport(ToolResult):
    score: int = 0
    checks: list[ZeroTrustCheck] = Field(default_factory=list)


class CheckResult(ToolResult):
    check: ZeroTrustCheck | None = None


class OverallDashboard(ToolResult):
    totals: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    modernization: ModernizationScores | None = None
    zero_trust_score: int = 0
