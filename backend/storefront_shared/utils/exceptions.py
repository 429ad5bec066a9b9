"""
Application exceptions.

Every exception is an HTTPException, so routers let them propagate and
FastAPI renders ``{"detail": ...}`` with the right status. Each one logs
itself when raised, with any keyword context given.

Usage:
    from storefront_shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("Brand", brand_id)
    raise ValidationError("Price must be greater than zero", field="price_cents")
"""

from typing import Any

from fastapi import HTTPException, status

from storefront_shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """Base exception; logs ``detail`` at ``log_level`` on construction."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    log_level = "warning"

    def __init__(
        self,
        detail: str,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        code = status_code or self.status_code_default
        getattr(logger, self.log_level)(detail, status_code=code, **log_context)
        super().__init__(status_code=code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return str(self.detail)


class NotFoundError(AppException):
    """
    Row does not exist, or is not live where a live row is required (404).

    Usage:
        raise NotFoundError("Product", product_id)
    """

    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        detail = f"{entity} with ID {entity_id} not found" if entity_id is not None else f"{entity} not found"
        super().__init__(detail, entity=entity, entity_id=entity_id, **log_context)


class ValidationError(AppException):
    """
    Input rejected before anything was written (400).

    Usage:
        raise ValidationError("Stock cannot be negative", field="quantity", value=-1)
    """

    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str, **log_context: Any):
        self.field = log_context.get("field")
        super().__init__(detail, **log_context)


class DuplicateEntityError(ValidationError):
    """A live row already uses this identifier (e.g. a slug)."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        detail = (
            f"{entity} with identifier '{identifier}' already exists"
            if identifier
            else f"{entity} already exists"
        )
        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


class ConflictError(AppException):
    """Request conflicts with existing rows (409)."""

    status_code_default = status.HTTP_409_CONFLICT


class StoreOperationError(AppException):
    """
    A record store call failed (503).

    Retryable: the session was rolled back and the lifecycle state of the
    affected rows is unchanged.
    """

    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE
    log_level = "error"

    def __init__(self, operation: str, table: str, **log_context: Any):
        self.operation = operation
        self.table = table
        super().__init__(
            f"Failed to {operation} {table}. Please retry.",
            operation=operation,
            table=table,
            **log_context,
        )
