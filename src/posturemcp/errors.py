"""Domain exceptions raised by the inventory layer and CSV import."""

from __future__ import annotations


class PostureError(Exception):
    """Base class for caller-facing posture errors."""

    error_code = "posture_error"


class UnknownInstitutionError(PostureError):
    """Raised when an institution id does not resolve."""

    error_code = "unknown_institution"


class UnknownAssetError(PostureError):
    """Raised when an asset id does not resolve."""

    error_code = "unknown_asset"


class UnknownCheckError(PostureError):
    """Raised when no zero-trust check matches ``(institution_id, key)``."""

    error_code = "unknown_check"


class CSVImportError(PostureError):
    """Raised when an asset CSV cannot be parsed."""

    error_code = "csv_parse_failed"
