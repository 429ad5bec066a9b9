"""
Shared validators for input sanitization.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from storefront_shared.config.constants import Limits

# Blocked internal hosts that should never appear in media URLs (SSRF prevention)
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",  # Link-local, cloud metadata
    "[::1]",
    "metadata.google",
]

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def slugify(value: Optional[str]) -> str:
    """
    Derive a URL slug from a display name.

    Lowercases, collapses every run of non-alphanumeric characters into a
    single hyphen and trims leading/trailing hyphens:

        "Nike  Air (Max)!" -> "nike-air-max"

    Returns an empty string when nothing alphanumeric remains.
    """
    if not value:
        return ""
    slug = _NON_ALNUM_RUN.sub("-", value.lower()).strip("-")
    return slug[: Limits.MAX_SLUG_LENGTH].rstrip("-")


def validate_slug(slug: Optional[str]) -> str:
    """
    Validate an explicitly provided slug.

    Raises:
        ValueError: If the slug is empty or not already in canonical form.
    """
    if not slug or not slug.strip():
        raise ValueError("Slug is required")
    slug = slug.strip()
    if slugify(slug) != slug:
        raise ValueError("Slug may only contain lowercase letters, digits and single hyphens")
    return slug


def validate_media_url(url: Optional[str]) -> Optional[str]:
    """
    Validate and sanitize an image/logo/website URL.

    Returns:
        The validated URL or None if empty

    Raises:
        ValueError: If the URL is invalid or points to an internal host
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    parsed = urlparse(url)

    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"URL scheme not allowed: {scheme}")
    if scheme not in ("http", "https"):
        raise ValueError("Only HTTP/HTTPS URLs are allowed")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL has no valid host")

    for blocked in BLOCKED_HOSTS:
        if host.startswith(blocked) or host == blocked:
            raise ValueError("Internal URLs are not allowed")

    if len(url) > 2048:
        raise ValueError("URL too long (max 2048 characters)")

    return url


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards; escape them so a search term
    cannot turn into a full table scan pattern.
    """
    if not value:
        return value

    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value
