"""
Configuration module: Settings, logging, constants.
"""

from storefront_shared.config.settings import settings, get_settings, DATABASE_URL
from storefront_shared.config.logging import get_logger, setup_logging
from storefront_shared.config.constants import (
    Roles,
    MANAGEMENT_ROLES,
    TrashAction,
    ProductType,
    Limits,
)

__all__ = [
    # settings
    "settings",
    "get_settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "Roles",
    "MANAGEMENT_ROLES",
    "TrashAction",
    "ProductType",
    "Limits",
]
