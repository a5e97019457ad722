"""GET /products/low-stock: products at or under their low stock alert"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import get_product_service, make_lambda_handler
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    try:
        log_request(logger, "GET", "/products/low-stock")

        products = await service.get_low_stock_products()

        return response_formatter.success(
            [response_formatter.format_product(p) for p in products],
            "Low stock products retrieved successfully",
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "low_stock_products"})


handler = make_lambda_handler(handle)
