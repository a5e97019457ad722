"""GET /products/featured: rated products live on B2C"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.config import settings
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import clamp_limit, get_product_service, make_lambda_handler, query_params
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    params = query_params(event)
    try:
        log_request(logger, "GET", "/products/featured", params)

        limit = clamp_limit(params.get("limit"), settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT)
        products = await service.get_featured_products(limit)

        return response_formatter.success(
            [response_formatter.format_product(p) for p in products],
            "Featured products retrieved successfully",
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "featured_products", "query": params})


handler = make_lambda_handler(handle)
