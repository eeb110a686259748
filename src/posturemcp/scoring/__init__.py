"""Scoring domain — modernization and zero-trust readiness."""

from posturemcp.scoring.legacy_os import is_legacy_os
from posturemcp.scoring.legacy_os import LEGACY_OS_DENYLIST_VERSION
from posturemcp.scoring.legacy_os import LEGACY_OS_SIGNATURES
from posturemcp.scoring.modernization import assets_by_type
from posturemcp.scoring.modernization import compute_modernization_scores
from posturemcp.scoring.modernization import legacy_os_breakdown
from posturemcp.scoring.modernization import score_assets
from posturemcp.scoring.rounding import percent
from posturemcp.scoring.zerotrust import compute_zero_trust_score
from posturemcp.scoring.zerotrust import DEFAULT_ZERO_TRUST_CHECKS
from posturemcp.scoring.zerotrust import score_checks
from posturemcp.scoring.zerotrust import seed_default_checks

__all__ = [
    "DEFAULT_ZERO_TRUST_CHECKS",
    "LEGACY_OS_DENYLIST_VERSION",
    "LEGACY_OS_SIGNATURES",
    "assets_by_type",
    "compute_modernization_scores",
    "compute_zero_trust_score",
    "is_legacy_os",
    "legacy_os_breakdown",
    "percent",
    "score_assets",
    "score_checks",
    "seed_default_checks",
]
