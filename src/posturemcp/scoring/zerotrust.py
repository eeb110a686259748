"""Zero-trust readiness: default check catalog, seeding and scoring."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from posturemcp.models.inventory import ZeroTrustCheck
from posturemcp.observability import increment_counter
from posturemcp.scoring.rounding import percent
from posturemcp.store.base import InventoryStore

logger = logging.getLogger(__name__)

DEFAULT_ZERO_TRUST_CHECKS: tuple[tuple[str, str], ...] = (
    ("mfa", "MFA enforced for privileged access"),
    ("sso", "SSO integrated for core apps"),
    ("least_privilege", "Least privilege enforced for admin roles"),
    ("segmentation", "Network segmentation present (tiers/zones)"),
    ("logging", "Centralized logging forwarding enabled"),
    ("patching", "Patching process defined for critical systems"),
    ("backup", "Backups tested and ransomware resilient"),
    ("edr", "Endpoint protection/EDR coverage in place"),
)


async def seed_default_checks(store: InventoryStore, institution_id: str) -> int:
    """Create the default catalog for an institution that has no checks yet.

    Returns the number of checks created, 0 when the institution already
    had any.  The count-then-insert is not atomic; stores skip rows whose
    ``(institution_id, key)`` already exists, which absorbs a racing seed.
    """
    if await store.count_checks(institution_id) > 0:
        return 0
    created = await store.create_checks(institution_id, DEFAULT_ZERO_TRUST_CHECKS)
    increment_counter("zerotrust.checks_seeded", created)
    logger.info("Seeded %d zero-trust check(s) for %s", created, institution_id)
    return created


def score_checks(checks: Iterable[ZeroTrustCheck]) -> int:
    total = passed = 0
    for check in checks:
        total += 1
        passed += check.passed
    return percent(passed, total)


async def compute_zero_trust_score(store: InventoryStore, institution_id: str) -> int:
    """Percentage of passed checks, 0 when the institution has none."""
    return score_checks(await store.list_checks(institution_id))
