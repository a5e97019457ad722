"""
GET /products/search?q=...
Name-prefix search with optional category and price range.
"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.config import settings
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import clamp_limit, get_product_service, make_lambda_handler, query_params
from product_catalog.handlers.list_products import parse_filters
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    params = query_params(event)
    try:
        log_request(logger, "GET", "/products/search", params)

        filters = parse_filters(params)
        filters["limit"] = clamp_limit(params.get("limit"), DEFAULT_SEARCH_LIMIT, settings.MAX_PAGE_LIMIT)

        products = await service.search_products((params.get("q") or "").strip(), filters)

        return response_formatter.success(
            [response_formatter.format_product(p) for p in products],
            "Products retrieved successfully",
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "search_products", "query": params})


handler = make_lambda_handler(handle)
