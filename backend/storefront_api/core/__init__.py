"""
Application core: lifespan and CORS configuration.
"""

from storefront_api.core.lifespan import lifespan
from storefront_api.core.cors import configure_cors

__all__ = ["lifespan", "configure_cors"]
