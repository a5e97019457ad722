"""
PUT /product, PUT /product/{id}
Partial update; the product id comes from the body or the path.
"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.exceptions import InvalidInputError
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import get_product_service, make_lambda_handler, parse_json_body, path_params
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    update_data: Dict[str, Any] = {}
    try:
        update_data = parse_json_body(event)

        product_id = update_data.get("id") or path_params(event).get("id")
        if not product_id:
            raise InvalidInputError("Product ID is required")

        log_request(logger, "PUT", f"/product/{product_id}", update_data)

        updated = await service.update_product(product_id, update_data)

        return response_formatter.success(
            response_formatter.format_product(updated),
            "Product updated successfully",
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "update_product", "payload": update_data})


handler = make_lambda_handler(handle)
