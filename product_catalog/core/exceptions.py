"""
Centralized Exception Classes for the Product Catalog

This module provides:
- A base exception carrying an error code, details and HTTP status
- One subclass per error kind raised by the validator, service and store layers
- The error code to HTTP status table used by the handlers

Services raise these; only the handlers (through utils.error_handler) turn
them into HTTP responses.
"""

from typing import Dict, Any, List, Optional

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    # Base exception
    "CatalogException",
    # Request / payload
    "ValidationError",
    "InvalidInputError",
    "InvalidJSONError",
    # Resources
    "NotFoundError",
    "CategoryNotFoundError",
    "ProductNotFoundError",
    # Conflicts
    "ConflictError",
    "DuplicateProductError",
    "ProductInUseError",
    # Store
    "DatabaseError",
    # Constants
    "ERROR_CODE_MAPPINGS",
]


class CatalogException(Exception):
    """Base exception for the product catalog"""

    def __init__(self, message: str, error_code: str = "INTERNAL_ERROR", details: Dict[str, Any] = None, status_code: int = 500):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(CatalogException):
    """Payload failed field validation; carries every field error found"""

    def __init__(self, errors: List[Any], message: str = "Validation failed"):
        self.errors = list(errors)
        super().__init__(message, "VALIDATION_ERROR", {"errors": [_error_dict(e) for e in self.errors]}, 400)


class InvalidInputError(CatalogException):
    """Request is missing required input"""

    def __init__(self, message: str = "Invalid input data", details: Dict[str, Any] = None):
        super().__init__(message, "INVALID_INPUT", details, 400)


class InvalidJSONError(CatalogException):
    """Request body is not valid JSON"""

    def __init__(self, message: str = "Invalid JSON in request body", details: Dict[str, Any] = None):
        super().__init__(message, "INVALID_JSON", details, 400)


class NotFoundError(CatalogException):
    """Resource not found error"""

    def __init__(self, message: str = "Resource not found", error_code: str = "NOT_FOUND", details: Dict[str, Any] = None):
        super().__init__(message, error_code, details, 404)


class CategoryNotFoundError(NotFoundError):
    """Referenced category does not exist"""

    def __init__(self, category_id: str, details: Dict[str, Any] = None):
        super().__init__(
            "Category not found",
            "CATEGORY_NOT_FOUND",
            {**(details or {}), "category_id": category_id},
        )


class ProductNotFoundError(NotFoundError):
    """Product does not exist or has been soft-deleted"""

    def __init__(self, product_id: str, message: str = "Product not found", details: Dict[str, Any] = None):
        super().__init__(
            message,
            "PRODUCT_NOT_FOUND",
            {**(details or {}), "product_id": product_id},
        )


class ConflictError(CatalogException):
    """Resource conflict"""

    def __init__(self, message: str = "Resource conflict", error_code: str = "CONFLICT", details: Dict[str, Any] = None):
        super().__init__(message, error_code, details, 409)


class DuplicateProductError(ConflictError):
    """A product with the same name already exists"""

    def __init__(self, name: str, details: Dict[str, Any] = None):
        super().__init__(
            "Product with this name already exists",
            "DUPLICATE_PRODUCT",
            {**(details or {}), "name": name},
        )


class ProductInUseError(ConflictError):
    """Product is referenced by active orders"""

    def __init__(self, product_id: str, details: Dict[str, Any] = None):
        super().__init__(
            "Cannot delete product with active orders",
            "PRODUCT_IN_USE",
            {**(details or {}), "product_id": product_id},
        )


class DatabaseError(CatalogException):
    """
    Store operation failed (after retries, where the error was retryable).

    ``store_error_code`` keeps the DynamoDB error code for the error handler;
    it is never sent to clients.
    """

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        store_error_code: Optional[str] = None,
        details: Dict[str, Any] = None,
    ):
        self.operation = operation
        self.table = table
        self.store_error_code = store_error_code
        detail_info = dict(details or {})
        if operation:
            detail_info["operation"] = operation
        if table:
            detail_info["table"] = table
        super().__init__(message, "DATABASE_ERROR", detail_info, 500)


def _error_dict(error: Any) -> Dict[str, Any]:
    if hasattr(error, "to_dict"):
        return error.to_dict()
    return dict(error)


# Error code mappings for consistent handling
ERROR_CODE_MAPPINGS = {
    "VALIDATION_ERROR": 400,
    "INVALID_INPUT": 400,
    "INVALID_JSON": 400,
    "NOT_FOUND": 404,
    "PRODUCT_NOT_FOUND": 404,
    "CATEGORY_NOT_FOUND": 404,
    "CONFLICT": 409,
    "DUPLICATE_PRODUCT": 409,
    "PRODUCT_IN_USE": 409,
    "DATABASE_ERROR": 500,
    "INTERNAL_ERROR": 500,
}
