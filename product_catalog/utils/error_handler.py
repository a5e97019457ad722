"""
Error Handler
Turns exceptions into error responses. Handlers call ``handle_exception``
and nothing else; store error codes are translated here and never reach
the client.
"""

import logging
from typing import Any, Dict, List, Optional

from product_catalog.core.exceptions import CatalogException, DatabaseError, ValidationError
from product_catalog.utils.response_formatter import create_response
from product_catalog.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

ERROR_CODES: Dict[str, Dict[str, Any]] = {
    # 400
    "VALIDATION_ERROR": {"status": 400, "code": "VALIDATION_ERROR", "message": "Validation failed"},
    "INVALID_INPUT": {"status": 400, "code": "INVALID_INPUT", "message": "Invalid input data"},
    "INVALID_JSON": {"status": 400, "code": "INVALID_JSON", "message": "Invalid JSON in request body"},
    # 404
    "NOT_FOUND": {"status": 404, "code": "NOT_FOUND", "message": "Resource not found"},
    "PRODUCT_NOT_FOUND": {"status": 404, "code": "PRODUCT_NOT_FOUND", "message": "Product not found"},
    "CATEGORY_NOT_FOUND": {"status": 404, "code": "CATEGORY_NOT_FOUND", "message": "Category not found"},
    # 409
    "CONFLICT": {"status": 409, "code": "CONFLICT", "message": "Resource conflict"},
    "DUPLICATE_PRODUCT": {
        "status": 409, "code": "DUPLICATE_PRODUCT", "message": "Product with this name already exists",
    },
    "PRODUCT_IN_USE": {"status": 409, "code": "PRODUCT_IN_USE", "message": "Cannot delete product with active orders"},
    # 500
    "INTERNAL_ERROR": {"status": 500, "code": "INTERNAL_ERROR", "message": "Internal server error"},
    "DATABASE_ERROR": {"status": 500, "code": "DATABASE_ERROR", "message": "Database operation failed"},
}

# DynamoDB error code -> (catalog code, client message)
STORE_ERROR_TRANSLATIONS = {
    "ValidationException": ("VALIDATION_ERROR", "Invalid data for database operation"),
    "ResourceNotFoundException": ("NOT_FOUND", "Resource not found"),
    "ConditionalCheckFailedException": ("CONFLICT", "Resource conflict"),
}


def _error_body(code: str, message: str, **extra: Any) -> Dict[str, Any]:
    body = {"status": "error", "code": code, "message": message}
    body.update({k: v for k, v in extra.items() if v})
    body["timestamp"] = utc_now_iso()
    return body


def handle(message: Optional[str] = None, error_code: str = "INTERNAL_ERROR") -> dict:
    """Error response for a known code; unknown codes become INTERNAL_ERROR"""
    config = ERROR_CODES.get(error_code) or ERROR_CODES["INTERNAL_ERROR"]
    return create_response(config["status"], _error_body(config["code"], message or config["message"]))


def format_validation_error(errors: List[Any]) -> dict:
    field_errors = []
    for err in errors or []:
        data = err.to_dict() if hasattr(err, "to_dict") else dict(err)
        field_errors.append({
            "field": data.get("field") or "unknown",
            "message": data.get("message") or "Invalid value",
        })

    return create_response(400, _error_body("VALIDATION_ERROR", "Validation failed", errors=field_errors))


def format_custom_error(code: str, message: Optional[str] = None, details: Optional[Any] = None) -> dict:
    config = ERROR_CODES.get(code) or ERROR_CODES["INTERNAL_ERROR"]
    return create_response(
        config["status"],
        _error_body(config["code"], message or config["message"], details=details),
    )


def handle_database_error(exc: DatabaseError) -> dict:
    translation = STORE_ERROR_TRANSLATIONS.get(exc.store_error_code)
    if translation:
        code, message = translation
        return handle(message, code)
    return handle(ERROR_CODES["DATABASE_ERROR"]["message"], "DATABASE_ERROR")


def handle_exception(exc: BaseException, context: Optional[Dict[str, Any]] = None) -> dict:
    """
    Log ``exc`` with its traceback and context, then build the error response.

    Catalog exceptions keep their code and message; anything else is reported
    as a generic INTERNAL_ERROR.
    """
    extra = {"error_type": type(exc).__name__, "context": context or {}}
    if isinstance(exc, CatalogException):
        extra["error_code"] = exc.error_code

    if isinstance(exc, CatalogException) and exc.status_code < 500:
        logger.warning(f"Request failed: {exc}", extra=extra, exc_info=exc)
    else:
        logger.error(f"Request failed: {exc}", extra=extra, exc_info=exc)

    if isinstance(exc, ValidationError):
        return format_validation_error(exc.errors)
    if isinstance(exc, DatabaseError):
        return handle_database_error(exc)
    if isinstance(exc, CatalogException):
        details = {k: v for k, v in exc.details.items() if k != "errors"} or None
        if exc.error_code in ERROR_CODES:
            return format_custom_error(exc.error_code, exc.message, details)
        return create_response(exc.status_code, _error_body(exc.error_code, exc.message, details=details))
    return handle(None, "INTERNAL_ERROR")
