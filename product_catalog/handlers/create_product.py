"""
POST /product
Create a product from a JSON body and return it with 201.
"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import get_product_service, make_lambda_handler, parse_json_body
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    product_data: Dict[str, Any] = {}
    try:
        product_data = parse_json_body(event)
        log_request(logger, "POST", "/product", product_data)

        product = await service.create_product(product_data)

        return response_formatter.created(
            response_formatter.format_product(product),
            "Product created successfully",
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "create_product", "payload": product_data})


handler = make_lambda_handler(handle)
