"""
Security module: JWT verification and role checks.
"""

from storefront_shared.security.auth import (
    sign_jwt,
    verify_jwt,
    current_user,
    require_roles,
    require_admin,
    require_management,
    get_user_id,
    get_user_email,
)

__all__ = [
    "sign_jwt",
    "verify_jwt",
    "current_user",
    "require_roles",
    "require_admin",
    "require_management",
    "get_user_id",
    "get_user_email",
]
