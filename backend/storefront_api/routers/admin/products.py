"""
Product management endpoints, including variants, attribute definitions,
grouped-product items, bulk actions and CSV import/export.
"""

from storefront_api.routers.admin._base import (
    APIRouter, Depends, Query, Response, Session, status,
    get_db, require_management, get_actor, page_limit, csv_response, Actor,
)
from storefront_api.routers.admin_schemas import (
    AttributeDefinitionCreate,
    AttributeDefinitionOutput,
    AttributeDefinitionUpdate,
    BulkActionResult,
    BulkIdsRequest,
    GroupItemCreate,
    GroupItemOutput,
    ImportResult,
    ProductCreate,
    ProductImportRow,
    ProductOutput,
    ProductUpdate,
    VariantCreate,
    VariantOutput,
    VariantUpdate,
)
from storefront_api.services.domain import ProductService


router = APIRouter(tags=["admin-products"])


@router.get("/products", response_model=list[ProductOutput])
def list_products(
    search: str | None = Query(None, max_length=100),
    category_id: str | None = None,
    brand_id: str | None = None,
    product_type: str | None = None,
    is_active: bool | None = None,
    low_stock_only: bool = False,
    limit: int = Depends(page_limit),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[ProductOutput]:
    return ProductService(db).list_products(
        search=search,
        category_id=category_id,
        brand_id=brand_id,
        product_type=product_type,
        is_active=is_active,
        low_stock_only=low_stock_only,
        limit=limit,
        offset=offset,
    )


@router.get("/products/export", response_class=Response)
def export_products(
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> Response:
    """Live products as a CSV download in the import column layout."""
    return csv_response(ProductService(db).export_csv(), "products")


@router.get("/products/{product_id}", response_model=ProductOutput)
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> ProductOutput:
    return ProductService(db).get_by_id(product_id)


@router.post("/products", response_model=ProductOutput, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> ProductOutput:
    return ProductService(db).create(body.model_dump(), actor)


@router.patch("/products/{product_id}", response_model=ProductOutput)
def update_product(
    product_id: str,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> ProductOutput:
    return ProductService(db).update(product_id, body.model_dump(exclude_unset=True), actor)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> None:
    """Move a product to the trash."""
    ProductService(db).delete(product_id, actor)


@router.post("/products/{product_id}/duplicate", response_model=ProductOutput, status_code=status.HTTP_201_CREATED)
def duplicate_product(
    product_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> ProductOutput:
    """Copy a product (and its variants) as an unpublished draft."""
    return ProductService(db).duplicate(product_id, actor)


# =============================================================================
# Bulk Actions
# =============================================================================


@router.post("/products/bulk/publish", response_model=BulkActionResult)
def bulk_publish(
    body: BulkIdsRequest,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> BulkActionResult:
    affected = ProductService(db).bulk_set_published(body.ids, published=True)
    return BulkActionResult(requested=len(body.ids), affected=affected)


@router.post("/products/bulk/unpublish", response_model=BulkActionResult)
def bulk_unpublish(
    body: BulkIdsRequest,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> BulkActionResult:
    affected = ProductService(db).bulk_set_published(body.ids, published=False)
    return BulkActionResult(requested=len(body.ids), affected=affected)


@router.post("/products/bulk/trash", response_model=BulkActionResult)
def bulk_trash(
    body: BulkIdsRequest,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> BulkActionResult:
    affected = ProductService(db).bulk_trash(body.ids, actor)
    return BulkActionResult(requested=len(body.ids), affected=affected)


@router.post("/products/import", response_model=ImportResult)
def import_products(
    body: list[ProductImportRow],
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
    actor: Actor = Depends(get_actor),
) -> ImportResult:
    """Create products from parsed import rows; invalid rows are reported."""
    return ProductService(db).import_rows(body, actor)


# =============================================================================
# Variants
# =============================================================================


@router.get("/products/{product_id}/variants", response_model=list[VariantOutput])
def list_variants(
    product_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[VariantOutput]:
    return ProductService(db).list_variants(product_id)


@router.post(
    "/products/{product_id}/variants",
    response_model=VariantOutput,
    status_code=status.HTTP_201_CREATED,
)
def add_variant(
    product_id: str,
    body: VariantCreate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> VariantOutput:
    return ProductService(db).add_variant(product_id, body.model_dump())


@router.patch("/products/{product_id}/variants/{variant_id}", response_model=VariantOutput)
def update_variant(
    product_id: str,
    variant_id: str,
    body: VariantUpdate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> VariantOutput:
    return ProductService(db).update_variant(product_id, variant_id, body.model_dump(exclude_unset=True))


@router.delete("/products/{product_id}/variants/{variant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_variant(
    product_id: str,
    variant_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> None:
    ProductService(db).delete_variant(product_id, variant_id)


# =============================================================================
# Attribute Definitions
# =============================================================================


@router.get("/products/{product_id}/attributes", response_model=list[AttributeDefinitionOutput])
def list_attributes(
    product_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[AttributeDefinitionOutput]:
    return ProductService(db).list_attributes(product_id)


@router.post(
    "/products/{product_id}/attributes",
    response_model=AttributeDefinitionOutput,
    status_code=status.HTTP_201_CREATED,
)
def add_attribute(
    product_id: str,
    body: AttributeDefinitionCreate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> AttributeDefinitionOutput:
    """Define an attribute (e.g. "Size") and its values for variant options."""
    return ProductService(db).add_attribute(product_id, body.model_dump())


@router.patch("/products/{product_id}/attributes/{attribute_id}", response_model=AttributeDefinitionOutput)
def update_attribute(
    product_id: str,
    attribute_id: str,
    body: AttributeDefinitionUpdate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> AttributeDefinitionOutput:
    return ProductService(db).update_attribute(product_id, attribute_id, body.model_dump(exclude_unset=True))


@router.delete("/products/{product_id}/attributes/{attribute_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_attribute(
    product_id: str,
    attribute_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> None:
    ProductService(db).remove_attribute(product_id, attribute_id)


# =============================================================================
# Group Items
# =============================================================================


@router.get("/products/{product_id}/group-items", response_model=list[GroupItemOutput])
def list_group_items(
    product_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> list[GroupItemOutput]:
    return ProductService(db).list_group_items(product_id)


@router.post(
    "/products/{product_id}/group-items",
    response_model=GroupItemOutput,
    status_code=status.HTTP_201_CREATED,
)
def add_group_item(
    product_id: str,
    body: GroupItemCreate,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> GroupItemOutput:
    return ProductService(db).add_group_item(product_id, body.model_dump())


@router.delete("/products/{product_id}/group-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_group_item(
    product_id: str,
    item_id: str,
    db: Session = Depends(get_db),
    _user: dict = Depends(require_management),
) -> None:
    ProductService(db).remove_group_item(product_id, item_id)
