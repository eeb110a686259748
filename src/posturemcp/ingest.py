"""CSV asset import.

Expected header columns: ``hostname, ip, assetType, os, owner, tags``.
Unknown columns are ignored, blank lines skipped.  Every value is
trimmed; empty values become ``None`` and a missing ``assetType``
defaults to ``unknown`` (stored lower-cased).
"""

from __future__ import annotations

import csv
import io

from posturemcp.errors import CSVImportError
from posturemcp.models.inventory import Asset

CSV_COLUMNS = ("hostname", "ip", "assetType", "os", "owner", "tags")


def _clean(value: str | None) -> str | None:
    value = (value or "").strip()
    return value or None


def parse_assets_csv(institution_id: str, csv_text: str) -> list[Asset]:
    """Parse *csv_text* into unsaved ``Asset`` rows for *institution_id*."""
    reader = csv.DictReader(io.StringIO(csv_text.lstrip("\ufeff")))
    try:
        fieldnames = reader.fieldnames
    except csv.Error as exc:
        raise CSVImportError(f"CSV parse failed: {exc}") from exc
    if not fieldnames:
        raise CSVImportError("CSV has no header row")
    header = {(name or "").strip() for name in fieldnames}
    if not header & set(CSV_COLUMNS):
        raise CSVImportError(
            f"CSV header has none of the expected columns: {', '.join(CSV_COLUMNS)}"
        )

    assets: list[Asset] = []
    try:
        for row in reader:
            # csv.DictReader files surplus cells under the None key
            if row.get(None):
                raise CSVImportError(
                    f"Row {reader.line_num} has more fields than the header"
                )
            values = {(k or "").strip(): v for k, v in row.items()}
            assets.append(
                Asset(
                    institution_id=institution_id,
                    hostname=_clean(values.get("hostname")),
                    ip=_clean(values.get("ip")),
                    asset_type=(_clean(values.get("assetType")) or "unknown").lower(),
                    os=_clean(values.get("os")),
                    owner=_clean(values.get("owner")),
                    tags=_clean(values.get("tags")),
                )
            )
    except csv.Error as exc:
        raise CSVImportError(f"CSV parse failed: {exc}") from exc
    return assets
