"""Known-legacy operating system signatures.

Each entry is ``(name, pattern)``; patterns are matched case-insensitively
anywhere in an asset's ``os`` string.  Bump ``LEGACY_OS_DENYLIST_VERSION``
whenever an entry is added or changed so historical lifecycle scores can
be attributed to the list that produced them.
"""

from __future__ import annotations

import re

LEGACY_OS_DENYLIST_VERSION = "1"

LEGACY_OS_SIGNATURES: tuple[tuple[str, str], ...] = (
    ("server-2008", r"2008"),
    ("server-2012", r"2012"),
    ("windows-7", r"\b7\b"),
    ("windows-xp", r"xp"),
    ("centos-6", r"centos\s*6"),
    ("ubuntu-16", r"ubuntu\s*16"),
)

_LEGACY_OS_RE = re.compile(
    "|".join(f"(?:{pattern})" for _, pattern in LEGACY_OS_SIGNATURES),
    re.IGNORECASE,
)


def is_legacy_os(os_name: str | None) -> bool:
    """True when *os_name* matches any legacy signature."""
    if not os_name:
        return False
    return _LEGACY_OS_RE.search(os_name) is not None


def matching_signatures(os_name: str | None) -> list[str]:
    """Names of every signature *os_name* matches, in denylist order."""
    if not os_name:
        return []
    return [
        name
        for name, pattern in LEGACY_OS_SIGNATURES
        if re.search(pattern, os_name, re.IGNORECASE)
    ]
