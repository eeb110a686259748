"""Unit tests for zero-trust seeding and scoring."""

from __future__ import annotations

import asyncio

from posturemcp.models import ZeroTrustCheck
from posturemcp.observability import counters_snapshot
from posturemcp.scoring import compute_zero_trust_score
from posturemcp.scoring import DEFAULT_ZERO_TRUST_CHECKS
from posturemcp.scoring import score_checks
from posturemcp.scoring import seed_default_checks


def _check(passed: bool) -> ZeroTrustCheck:
    return ZeroTrustCheck(institution_id="inst_test", key="k", title="t", passed=passed)


class TestDefaultCatalog:
    def test_keys_and_titles_verbatim(self):
        assert dict(DEFAULT_ZERO_TRUST_CHECKS) == {
            "mfa": "MFA enforced for privileged access",
            "sso": "SSO integrated for core apps",
            "least_privilege": "Least privilege enforced for admin roles",
            "segmentation": "Network segmentation present (tiers/zones)",
            "logging": "Centralized logging forwarding enabled",
            "patching": "Patching process defined for critical systems",
            "backup": "Backups tested and ransomware resilient",
            "edr": "Endpoint protection/EDR coverage in place",
        }


# ---------------------------------------------------------------------------
# Seeding
# ---------------------------------------------------------------------------


class TestSeedDefaultChecks:
    async def test_seeds_eight_failing_checks(self, store, institution):
        created = await seed_default_checks(store, institution.id)

        assert created == 8
        checks = await store.list_checks(institution.id)
        assert [c.key for c in checks] == [k for k, _ in DEFAULT_ZERO_TRUST_CHECKS]
        assert all(not c.passed for c in checks)
        assert all(c.evidence is None for c in checks)

    async def test_second_seed_is_noop(self, store, institution):
        await seed_default_checks(store, institution.id)
        assert await seed_default_checks(store, institution.id) == 0
        assert await store.count_checks(institution.id) == 8

    async def test_existing_check_blocks_seeding(self, store, institution):
        await store.create_checks(institution.id, [("custom", "Custom control")])
        assert await seed_default_checks(store, institution.id) == 0
        assert await store.count_checks(institution.id) == 1

    async def test_concurrent_seeds_never_duplicate(self, store, institution):
        results = await asyncio.gather(
            seed_default_checks(store, institution.id),
            seed_default_checks(store, institution.id),
        )
        assert sum(results) == 8
        assert await store.count_checks(institution.id) == 8

    async def test_institutions_are_isolated(self, store, institution):
        other = await store.create_institution("Other College")
        await seed_default_checks(store, institution.id)
        assert await seed_default_checks(store, other.id) == 8

    async def test_counts_seeded_checks(self, store, institution):
        await seed_default_checks(store, institution.id)
        assert counters_snapshot()["zerotrust.checks_seeded"] == 8


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


class TestScoreChecks:
    def test_no_checks(self):
        assert score_checks([]) == 0

    def test_three_of_four(self):
        checks = [_check(True), _check(True), _check(True), _check(False)]
        assert score_checks(checks) == 75

    def test_rounds_half_up(self):
        checks = [_check(True)] + [_check(False)] * 7
        assert score_checks(checks) == 13


class TestComputeZeroTrustScore:
    async def test_no_checks(self, store, institution):
        assert await compute_zero_trust_score(store, institution.id) == 0

    async def test_fresh_seed_scores_zero(self, store, institution):
        await seed_default_checks(store, institution.id)
        assert await compute_zero_trust_score(store, institution.id) == 0

    async def test_after_updates(self, store, institution):
        await seed_default_checks(store, institution.id)
        for key in ("mfa", "sso", "edr", "backup", "logging", "patching"):
            await store.update_check(institution.id, key, passed=True)
        assert await compute_zero_trust_score(store, institution.id) == 75
