"""Audit subsystem — async JSONL event logging."""

from posturemcp.audit.schemas import AuditEvent
from posturemcp.audit.schemas import AuditEventType
from posturemcp.audit.store import AuditLogger
from posturemcp.audit.store import AuditQuery

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
    "AuditQuery",
]
