"""Modernization scores over an institution's asset inventory.

All four metrics are percentages of the institution's assets:

- visibility: hostname, ip and asset type are all filled in,
- lifecycle: 100 minus the share running a legacy OS (floored at 0),
- standardization: the tag string is non-blank,
- logging readiness: tags carry a ``logs:on`` or ``siem:on`` token.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable

from posturemcp.models.inventory import Asset
from posturemcp.models.schemas import ModernizationScores
from posturemcp.scoring.legacy_os import is_legacy_os
from posturemcp.scoring.legacy_os import matching_signatures
from posturemcp.scoring.rounding import percent
from posturemcp.store.base import InventoryStore

logger = logging.getLogger(__name__)

_LOGGING_TOKEN_RE = re.compile(r"(^|,)\s*(logs:on|siem:on)\s*(,|$)", re.IGNORECASE)


def is_visible(asset: Asset) -> bool:
    return bool(asset.hostname and asset.ip and asset.asset_type)


def is_standardized(asset: Asset) -> bool:
    return bool((asset.tags or "").strip())


def is_logging_ready(asset: Asset) -> bool:
    return _LOGGING_TOKEN_RE.search(asset.tags or "") is not None


def score_assets(assets: Iterable[Asset]) -> ModernizationScores:
    """Compute the four scores in one pass over *assets*."""
    total = visible = outdated = tagged = logging_ready = 0
    for asset in assets:
        total += 1
        visible += is_visible(asset)
        outdated += is_legacy_os(asset.os)
        tagged += is_standardized(asset)
        logging_ready += is_logging_ready(asset)

    if total == 0:
        return ModernizationScores()

    return ModernizationScores(
        asset_count=total,
        visibility_score=percent(visible, total),
        lifecycle_score=max(0, 100 - percent(outdated, total)),
        standardization_score=percent(tagged, total),
        logging_readiness_score=percent(logging_ready, total),
    )


def assets_by_type(assets: Iterable[Asset]) -> dict[str, int]:
    """Asset count per ``asset_type``."""
    return dict(Counter(asset.asset_type for asset in assets))


def legacy_os_breakdown(assets: Iterable[Asset]) -> dict[str, int]:
    """Asset count per matched legacy signature name.

    An asset matching several signatures is counted under each of them.
    """
    counts: Counter[str] = Counter()
    for asset in assets:
        counts.update(matching_signatures(asset.os))
    return dict(counts)


async def compute_modernization_scores(
    store: InventoryStore, institution_id: str
) -> ModernizationScores:
    """Score every asset of *institution_id*; all zeros when it has none."""
    assets = await store.list_assets(institution_id)
    scores = score_assets(assets)
    logger.debug(
        "Modernization scores for %s over %d asset(s): %s",
        institution_id,
        scores.asset_count,
        scores.model_dump(exclude={"asset_count"}),
    )
    return scores
