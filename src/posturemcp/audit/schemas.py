"""Audit event types and data models."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field


class AuditEventType(str, Enum):
    """Categories of auditable inventory actions."""

    INSTITUTION_CREATED = "INSTITUTION_CREATED"
    ASSET_REGISTERED = "ASSET_REGISTERED"
    ASSETS_IMPORTED = "ASSETS_IMPORTED"
    SNAPSHOT_RECORDED = "SNAPSHOT_RECORDED"
    DRIFT_DETECTED = "DRIFT_DETECTED"
    CHECKS_SEEDED = "CHECKS_SEEDED"
    CHECK_UPDATED = "CHECK_UPDATED"
    SCORES_RECORDED = "SCORES_RECORDED"


class AuditEvent(BaseModel):
    """A single immutable audit log entry."""

    model_config = {"frozen": True}

    timestamp: float = Field(
        default_factory=time.time,
        description="Unix epoch when the event occurred.",
    )
    event_type: AuditEventType = Field(
        description="Category of the audited action.",
    )
    institution_id: str | None = Field(
        default=None,
        description="Tenant the action belongs to, when known.",
    )
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific data (asset id, changed keys, counts).",
    )
