"""
Domain services for the admin catalog.

Usage:
    from storefront_api.services.domain import BrandService, ProductService
"""

from .brand_service import BrandService
from .category_service import CategoryService
from .product_service import ProductService
from .homepage_service import HomepageSectionService

__all__ = [
    "BrandService",
    "CategoryService",
    "ProductService",
    "HomepageSectionService",
]
