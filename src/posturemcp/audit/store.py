"""Async JSONL audit trail for inventory and posture actions.

One JSON object per line.  Reads are filtered by tenant, event type,
time and the asset an event concerns (``payload["asset_id"]``), which
is what drift history for a single device is built from.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from pydantic import ValidationError

from posturemcp.audit.schemas import AuditEvent
from posturemcp.audit.schemas import AuditEventType
from posturemcp.config import AuditConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditQuery:
    """Filter for ``AuditLogger.read_events``; unset fields match anything."""

    event_type: AuditEventType | None = None
    institution_id: str | None = None
    asset_id: str | None = None
    since: float | None = None

    def matches(self, event: AuditEvent) -> bool:
        if self.event_type is not None and event.event_type != self.event_type:
            return False
        if (
            self.institution_id is not None
            and event.institution_id != self.institution_id
        ):
            return False
        if (
            self.asset_id is not None
            and event.payload.get("asset_id") != self.asset_id
        ):
            return False
        return self.since is None or event.timestamp >= self.since


class AuditLogger:
    """Append-only audit trail with async file I/O.

    Appends run in ``asyncio.to_thread``; one ``asyncio.Lock`` orders
    appends and reads so a reader never sees half a line.
    """

    def __init__(self, config: AuditConfig) -> None:
        self.config = config
        self._path = Path(config.file_path)
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        """Append *event*; a no-op when auditing is disabled."""
        if not self.config.enabled:
            return
        line = event.model_dump_json() + "\n"
        async with self._lock:
            await asyncio.to_thread(partial(self._append, self._path, line))

    @staticmethod
    def _append(path: Path, line: str) -> None:
        with path.open("a", encoding="utf-8") as fh:
            fh.write(line)

    def _parse(self, raw: str) -> Iterator[AuditEvent]:
        for line_no, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                yield AuditEvent.model_validate_json(line)
            except ValidationError:
                logger.warning(
                    "Skipping malformed audit line %d in %s", line_no, self._path
                )

    async def read_events(
        self,
        query: AuditQuery | None = None,
        **filters,
    ) -> list[AuditEvent]:
        """Return logged events matching *query*, oldest first.

        Keyword filters (``event_type``, ``institution_id``, ``asset_id``,
        ``since``) build a query when none is passed.
        """
        query = query or AuditQuery(**filters)
        if not self._path.exists():
            return []
        async with self._lock:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        return [event for event in self._parse(raw) if query.matches(event)]

    async def drift_history(
        self, asset_id: str, *, since: float | None = None
    ) -> list[AuditEvent]:
        """``DRIFT_DETECTED`` events recorded for one asset."""
        return await self.read_events(
            AuditQuery(
                event_type=AuditEventType.DRIFT_DETECTED,
                asset_id=asset_id,
                since=since,
            )
        )
