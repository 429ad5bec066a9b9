"""
Utility module: exceptions, validators and CSV export.
"""

from storefront_shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    DuplicateEntityError,
    ConflictError,
    StoreOperationError,
)
from storefront_shared.utils.validators import (
    slugify,
    validate_slug,
    validate_media_url,
    escape_like_pattern,
)
from storefront_shared.utils.csv_export import to_csv, export_filename

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "DuplicateEntityError",
    "ConflictError",
    "StoreOperationError",
    "slugify",
    "validate_slug",
    "validate_media_url",
    "escape_like_pattern",
    "to_csv",
    "export_filename",
]
