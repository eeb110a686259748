"""Shallow JSON diff between a baseline and a current configuration.

Only top-level keys are compared.  Values under a key are compared by
canonical JSON text, so nested key order does not matter and ``1`` equals
``1.0``.  A side that lacks the key is left out of the change entry
entirely, which keeps "absent" distinguishable from an explicit ``null``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

ROOT_KEY = "$"
"""Key reporting a change of a whole non-object document."""

_MISSING = object()


def _normalize(value: Any) -> Any:
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Mapping):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def canonical_json(value: Any) -> str:
    """Serialize *value* deterministically: sorted keys, compact, no NaN tricks."""
    return json.dumps(
        _normalize(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def _change(baseline: Any, current: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {}
    if baseline is not _MISSING:
        entry["baseline"] = baseline
    if current is not _MISSING:
        entry["current"] = current
    return entry


def diff_snapshots(baseline: Any, current: Any) -> dict[str, dict[str, Any]]:
    """Return ``{key: {"baseline": b, "current": c}}`` for every changed key.

    ``None`` on either side counts as an empty mapping.  Keys keep their
    first-seen order (baseline first).  If either document is not a
    mapping, the two are compared whole and any difference is reported
    once under :data:`ROOT_KEY`.
    """
    if baseline is None:
        baseline = {}
    if current is None:
        current = {}

    if not isinstance(baseline, Mapping) or not isinstance(current, Mapping):
        if canonical_json(baseline) == canonical_json(current):
            return {}
        return {ROOT_KEY: _change(baseline, current)}

    changes: dict[str, dict[str, Any]] = {}
    for key in dict.fromkeys([*baseline.keys(), *current.keys()]):
        before = baseline.get(key, _MISSING)
        after = current.get(key, _MISSING)
        if (
            before is _MISSING
            or after is _MISSING
            or canonical_json(before) != canonical_json(after)
        ):
            changes[str(key)] = _change(before, after)
    return changes
