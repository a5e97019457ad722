"""GET /product/{id}"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.exceptions import InvalidInputError, ProductNotFoundError
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import get_product_service, make_lambda_handler, path_params, query_params
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    product_id = path_params(event).get("id") or query_params(event).get("productId")
    try:
        if not product_id:
            raise InvalidInputError("Product ID is required")

        log_request(logger, "GET", f"/product/{product_id}")

        product = await service.get_product_by_id(product_id)
        if not product:
            raise ProductNotFoundError(product_id)

        return response_formatter.success(
            response_formatter.format_product(product),
            "Product retrieved successfully",
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "get_product_by_id", "product_id": product_id})


handler = make_lambda_handler(handle)
