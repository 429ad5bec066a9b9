"""
Admin API router - combines all admin sub-routers.

- trash: Global trash (list, restore, purge, activity log)
- brands: Brand CRUD
- categories: Category CRUD and import
- products: Product CRUD, variants, group items, bulk actions, import
- homepage: Homepage sections

All routes are prefixed with /api/admin
"""

from fastapi import APIRouter

from .trash import router as trash_router
from .brands import router as brands_router
from .categories import router as categories_router
from .products import router as products_router
from .homepage import router as homepage_router


router = APIRouter()

router.include_router(brands_router)
router.include_router(categories_router)
router.include_router(products_router)
router.include_router(homepage_router)
router.include_router(trash_router)


__all__ = ["router"]
