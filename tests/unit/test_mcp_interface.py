"""MCP interface contract tests.

All tests use ``fastmcp.Client`` to exercise the full MCP protocol
(serialization, validation) against a fresh in-memory store.
"""

from __future__ import annotations

import json

import pytest

from posturemcp.audit import AuditEventType
from posturemcp.audit import AuditLogger


def _parse(result) -> dict:
    """Extract the JSON payload from a CallToolResult."""
    return json.loads(result.content[0].text)


async def _call(client, tool: str, args: dict | None = None) -> dict:
    return _parse(await client.call_tool(tool, args or {}))


async def _institution(client) -> str:
    data = await _call(client, "create_institution", {"name": "Test University"})
    return data["institution"]["id"]


async def _asset(client, institution_id: str, **fields) -> str:
    args = {
        "institution_id": institution_id,
        "hostname": "core-sw-01",
        "ip": "10.0.0.1",
        "asset_type": "switch",
    }
    args.update(fields)
    data = await _call(client, "register_asset", args)
    return data["asset"]["id"]


# -----------------------------------------------------------------------
# Institutions and assets
# -----------------------------------------------------------------------


class TestInstitutions:
    async def test_create_seeds_checks(self, mcp_client):
        data = await _call(mcp_client, "create_institution", {"name": "State U"})
        assert data["status"] == "ok"
        assert data["institution"]["name"] == "State U"
        assert data["checks_seeded"] == 8

    async def test_default_name(self, mcp_client):
        data = await _call(mcp_client, "create_institution")
        assert data["institution"]["name"] == "Pilot Institution"

    async def test_blank_name_rejected(self, mcp_client):
        data = await _call(mcp_client, "create_institution", {"name": "  "})
        assert data["status"] == "error"
        assert data["error_code"] == "validation_error"

    async def test_list(self, mcp_client):
        inst_id = await _institution(mcp_client)
        data = await _call(mcp_client, "list_institutions")
        assert [i["id"] for i in data["institutions"]] == [inst_id]

    async def test_creation_is_audited(self, mcp_client, audit_config):
        inst_id = await _institution(mcp_client)
        events = await AuditLogger(audit_config).read_events(institution_id=inst_id)
        assert [e.event_type for e in events] == [
            AuditEventType.INSTITUTION_CREATED,
            AuditEventType.CHECKS_SEEDED,
        ]


class TestAssets:
    async def test_register_and_list(self, mcp_client):
        inst_id = await _institution(mcp_client)
        asset_id = await _asset(mcp_client, inst_id, tags="prod")
        data = await _call(mcp_client, "list_assets", {"institution_id": inst_id})
        assert [a["id"] for a in data["assets"]] == [asset_id]
        assert data["assets"][0]["tags"] == "prod"

    async def test_unknown_institution(self, mcp_client):
        data = await _call(
            mcp_client, "register_asset", {"institution_id": "inst_missing"}
        )
        assert data["status"] == "error"
        assert data["error_code"] == "unknown_institution"

    async def test_blank_institution_id(self, mcp_client):
        data = await _call(mcp_client, "list_assets", {"institution_id": ""})
        assert data["error_code"] == "missing_institution_id"

    async def test_missing_required_argument(self, mcp_client):
        with pytest.raises(Exception):
            await mcp_client.call_tool("register_asset", {})

    async def test_csv_import(self, mcp_client):
        inst_id = await _institution(mcp_client)
        csv_text = "hostname,ip,assetType\nweb-01,10.0.0.5,Server\nprn-1,,\n"
        data = await _call(
            mcp_client,
            "import_assets_csv",
            {"institution_id": inst_id, "csv_text": csv_text},
        )
        assert data["imported"] == 2

        listed = await _call(mcp_client, "list_assets", {"institution_id": inst_id})
        assert sorted(a["asset_type"] for a in listed["assets"]) == [
            "server",
            "unknown",
        ]

    async def test_csv_import_rejects_bad_text(self, mcp_client):
        inst_id = await _institution(mcp_client)
        data = await _call(
            mcp_client,
            "import_assets_csv",
            {"institution_id": inst_id, "csv_text": ""},
        )
        assert data["status"] == "error"
        assert data["error_code"] == "csv_parse_failed"


# -----------------------------------------------------------------------
# Snapshots and drift
# -----------------------------------------------------------------------


class TestDrift:
    async def test_invalid_kind(self, mcp_client):
        data = await _call(
            mcp_client,
            "record_snapshot",
            {"asset_id": "ast_x", "kind": "golden", "data": {}},
        )
        assert data["error_code"] == "invalid_kind"

    async def test_snapshot_for_unknown_asset(self, mcp_client):
        data = await _call(
            mcp_client,
            "record_snapshot",
            {"asset_id": "ast_missing", "kind": "baseline", "data": {}},
        )
        assert data["error_code"] == "unknown_asset"

    async def test_no_snapshots_means_no_drift(self, mcp_client):
        inst_id = await _institution(mcp_client)
        asset_id = await _asset(mcp_client, inst_id)
        data = await _call(mcp_client, "evaluate_drift", {"asset_id": asset_id})
        assert data["status"] == "ok"
        assert data["drift"] is None

    async def test_end_to_end(self, mcp_client):
        inst_id = await _institution(mcp_client)
        asset_id = await _asset(mcp_client, inst_id)
        await _call(
            mcp_client,
            "record_snapshot",
            {"asset_id": asset_id, "kind": "baseline", "data": {"acl": "v1", "snmp": "on"}},
        )
        await _call(
            mcp_client,
            "record_snapshot",
            {
                "asset_id": asset_id,
                "kind": "current",
                "data": {"acl": "v2", "snmp": "on", "ntp": "ntp1"},
            },
        )

        data = await _call(mcp_client, "evaluate_drift", {"asset_id": asset_id})

        assert data["drift"]["summary"] == "Drift detected: acl, ntp"
        assert data["drift"]["diff"] == {
            "acl": {"baseline": "v1", "current": "v2"},
            "ntp": {"current": "ntp1"},
        }

        listed = await _call(
            mcp_client, "list_drift_events", {"institution_id": inst_id}
        )
        [event] = listed["events"]
        assert event["hostname"] == "core-sw-01"
        assert event["ip"] == "10.0.0.1"
        assert event["summary"] == "Drift detected: acl, ntp"

    async def test_list_limit(self, mcp_client):
        inst_id = await _institution(mcp_client)
        asset_id = await _asset(mcp_client, inst_id)
        for kind, data in (("baseline", {"a": 1}), ("current", {"a": 2})):
            await _call(
                mcp_client,
                "record_snapshot",
                {"asset_id": asset_id, "kind": kind, "data": data},
            )
        for _ in range(3):
            await _call(mcp_client, "evaluate_drift", {"asset_id": asset_id})

        listed = await _call(
            mcp_client, "list_drift_events", {"institution_id": inst_id, "limit": 2}
        )
        assert len(listed["events"]) == 2

    @pytest.mark.parametrize("limit", [0, -2])
    async def test_non_positive_limit_rejected(self, mcp_client, limit):
        inst_id = await _institution(mcp_client)
        data = await _call(
            mcp_client,
            "list_drift_events",
            {"institution_id": inst_id, "limit": limit},
        )
        assert data["status"] == "error"
        assert data["error_code"] == "validation_error"
        assert data["events"] == []


# -----------------------------------------------------------------------
# Zero trust and dashboards
# -----------------------------------------------------------------------


class TestZeroTrust:
    async def test_report_after_creation(self, mcp_client):
        inst_id = await _institution(mcp_client)
        data = await _call(mcp_client, "zero_trust_report", {"institution_id": inst_id})
        assert data["score"] == 0
        assert len(data["checks"]) == 8
        assert data["checks"][0]["key"] == "mfa"

    async def test_update_check(self, mcp_client):
        inst_id = await _institution(mcp_client)
        data = await _call(
            mcp_client,
            "update_zero_trust_check",
            {
                "institution_id": inst_id,
                "key": "mfa",
                "passed": True,
                "evidence": "Conditional access policy",
            },
        )
        assert data["check"]["passed"] is True
        assert data["check"]["evidence"] == "Conditional access policy"

        report = await _call(
            mcp_client, "zero_trust_report", {"institution_id": inst_id}
        )
        assert report["score"] == 13

    async def test_update_unknown_check(self, mcp_client):
        inst_id = await _institution(mcp_client)
        data = await _call(
            mcp_client,
            "update_zero_trust_check",
            {"institution_id": inst_id, "key": "quantum", "passed": True},
        )
        assert data["error_code"] == "unknown_check"


class TestDashboards:
    async def test_modernization(self, mcp_client):
        inst_id = await _institution(mcp_client)
        await _asset(mcp_client, inst_id, os="Ubuntu 22.04", tags="logs:on")
        await _asset(
            mcp_client, inst_id, hostname=None, ip=None, asset_type="unknown"
        )

        data = await _call(
            mcp_client, "modernization_dashboard", {"institution_id": inst_id}
        )

        assert data["totals"] == {"assets": 2}
        assert data["by_type"] == {"switch": 1, "unknown": 1}
        assert data["legacy_os"] == {}
        assert data["modernization"] == {
            "asset_count": 2,
            "visibility_score": 50,
            "lifecycle_score": 100,
            "standardization_score": 50,
            "logging_readiness_score": 50,
        }

    async def test_modernization_lists_legacy_signatures(self, mcp_client):
        inst_id = await _institution(mcp_client)
        await _asset(mcp_client, inst_id, os="Windows Server 2008 R2")
        await _asset(mcp_client, inst_id, os="Ubuntu 16.04")
        await _asset(mcp_client, inst_id, os="Ubuntu 22.04")

        data = await _call(
            mcp_client, "modernization_dashboard", {"institution_id": inst_id}
        )

        assert data["legacy_os"] == {"server-2008": 1, "ubuntu-16": 1}
        assert data["modernization"]["lifecycle_score"] == 33

    async def test_cybersecurity(self, mcp_client):
        inst_id = await _institution(mcp_client)
        data = await _call(
            mcp_client, "cybersecurity_dashboard", {"institution_id": inst_id}
        )
        assert data["totals"] == {"drift_events": 0}
        assert data["zero_trust_score"] == 0

    async def test_overall_records_score_history(self, mcp_client):
        from posturemcp.server import _get_store

        inst_id = await _institution(mcp_client)
        await _asset(mcp_client, inst_id)

        data = await _call(mcp_client, "overall_dashboard", {"institution_id": inst_id})

        assert data["totals"] == {"assets": 1, "drift_events": 0}
        assert data["modernization"]["visibility_score"] == 100
        [row] = await _get_store().list_score_snapshots(inst_id)
        assert row.scope == "overall"
        assert row.visibility_score == 100
        assert row.zero_trust_score == 0

    async def test_empty_institution_scores_zero(self, mcp_client):
        inst_id = await _institution(mcp_client)
        data = await _call(
            mcp_client, "modernization_dashboard", {"institution_id": inst_id}
        )
        assert data["modernization"]["visibility_score"] == 0
        assert data["modernization"]["lifecycle_score"] == 0


class TestServerMetrics:
    async def test_tool_latency_recorded(self, mcp_client):
        inst_id = await _institution(mcp_client)
        await _call(mcp_client, "zero_trust_report", {"institution_id": inst_id})

        data = await _call(mcp_client, "server_metrics")

        assert data["latency"]["mcp.create_institution"]["count"] == 1
        assert data["latency"]["mcp.zero_trust_report"]["error_count"] == 0
        assert data["counters"]["zerotrust.checks_seeded"] == 8
