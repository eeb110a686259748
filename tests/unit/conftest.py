"""Unit test fixtures — in-memory store, builders and the FastMCP client."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastmcp import Client

from posturemcp.config import AuditConfig
from posturemcp.models import Asset
from posturemcp.observability import reset_metrics
from posturemcp.store import InMemoryInventoryStore


@pytest.fixture()
def store() -> InMemoryInventoryStore:
    return InMemoryInventoryStore()


@pytest.fixture()
async def institution(store):
    return await store.create_institution("Test University")


@pytest.fixture()
async def asset(store, institution) -> Asset:
    return await store.create_asset(
        Asset(
            institution_id=institution.id,
            hostname="core-sw-01",
            ip="10.0.0.1",
            asset_type="switch",
        )
    )


@pytest.fixture()
def audit_config(tmp_path: Path) -> AuditConfig:
    return AuditConfig(file_path=str(tmp_path / "audit.jsonl"))


@pytest.fixture(autouse=True)
def clean_metrics():
    """Reset in-process metrics between tests."""
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture()
async def mcp_client(audit_config):
    """Yield a FastMCP Client wired to a fresh in-memory store."""
    from posturemcp.server import configure
    from posturemcp.server import mcp
    from posturemcp.server import shutdown

    await configure(store=InMemoryInventoryStore(), audit_config=audit_config)

    async with Client(mcp) as client:
        yield client

    await shutdown()
