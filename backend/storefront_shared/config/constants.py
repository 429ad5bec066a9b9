"""
Centralized constants for the backend application.

Usage:
    from storefront_shared.config.constants import Roles, TrashAction

    if action == TrashAction.RESTORED:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """Admin panel role constants."""

    ADMIN: Final[str] = "ADMIN"
    MANAGER: Final[str] = "MANAGER"


# Roles allowed to browse the trash and the activity log
MANAGEMENT_ROLES: Final[frozenset[str]] = frozenset({Roles.ADMIN, Roles.MANAGER})


# =============================================================================
# Trash Lifecycle
# =============================================================================


class TrashAction:
    """Actions recorded in the trash log."""

    TRASHED: Final[str] = "trashed"
    RESTORED: Final[str] = "restored"
    PERMANENTLY_DELETED: Final[str] = "permanently_deleted"

    ALL: Final[list[str]] = [TRASHED, RESTORED, PERMANENTLY_DELETED]


# Actor and display name used for rows purged by the retention sweeper
SYSTEM_ACTOR_EMAIL: Final[str] = "system"
AUTO_CLEANED_NAME: Final[str] = "Auto-cleaned"
UNKNOWN_NAME: Final[str] = "Unknown"

# Sentinel count reported by the sweeper for an entity type that failed
SWEEP_FAILED: Final[int] = -1


# =============================================================================
# Catalog
# =============================================================================


class ProductType:
    """Product type constants."""

    SIMPLE: Final[str] = "simple"
    VARIABLE: Final[str] = "variable"
    GROUPED: Final[str] = "grouped"
    BUNDLE: Final[str] = "bundle"

    ALL: Final[list[str]] = [SIMPLE, VARIABLE, GROUPED, BUNDLE]
    # Grouped products have no own price, it is aggregated from children
    PRICELESS: Final[list[str]] = [GROUPED]


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits for input data."""

    MAX_NAME_LENGTH: Final[int] = 200
    MAX_SLUG_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 5000
    MAX_PAGE_SIZE: Final[int] = 200
    DEFAULT_PAGE_SIZE: Final[int] = 50
    DEFAULT_LOW_STOCK_THRESHOLD: Final[int] = 10
    MAX_BULK_ITEMS: Final[int] = 500
