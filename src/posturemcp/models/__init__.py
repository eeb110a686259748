"""Models domain — inventory entities and interface schemas."""

from __future__ import annotations

from posturemcp.models.inventory import Asset
from posturemcp.models.inventory import ConfigSnapshot
from posturemcp.models.inventory import DriftEvent
from posturemcp.models.inventory import Institution
from posturemcp.models.inventory import ScoreScope
from posturemcp.models.inventory import ScoreSnapshot
from posturemcp.models.inventory import SnapshotKind
from posturemcp.models.inventory import ZeroTrustCheck
from posturemcp.models.schemas import DriftResult
from posturemcp.models.schemas import ModernizationScores

__all__ = [
    # Entities
    "Asset",
    "ConfigSnapshot",
    "DriftEvent",
    "Institution",
    "ScoreScope",
    "ScoreSnapshot",
    "SnapshotKind",
    "ZeroTrustCheck",
    # Core results
    "DriftResult",
    "ModernizationScores",
]
