"""
GET /getProductByCategory?categoryId=...&page=...&limit=...
Newest-first products of one category.
"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.config import settings
from product_catalog.core.exceptions import InvalidInputError
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import (
    clamp_limit,
    get_product_service,
    make_lambda_handler,
    parse_int,
    query_params,
)
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    params = query_params(event)
    try:
        category_id = params.get("categoryId")
        if not category_id:
            raise InvalidInputError("categoryId is required")

        log_request(logger, "GET", "/getProductByCategory", params)

        page = max(1, parse_int(params.get("page"), 1) or 1)
        limit = clamp_limit(params.get("limit"), settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT)

        result = await service.get_products_by_category(category_id, page=page, limit=limit)
        total = await service.count_products_in_category(category_id)

        return response_formatter.paginated(
            [response_formatter.format_product(p) for p in result["items"]],
            page,
            limit,
            total,
            "Products retrieved successfully",
            last_evaluated_key=result.get("last_evaluated_key"),
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "products_by_category", "query": params})


handler = make_lambda_handler(handle)
