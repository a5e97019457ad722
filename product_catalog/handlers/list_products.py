"""
GET /product
Paginated catalog listing with sorting and filters.

Query parameters: page, limit, sortBy, sortOrder, category, status,
minPrice, maxPrice, lastEvaluatedKey (JSON cursor from the previous page).
"""

import json
import logging
from typing import Any, Dict, Optional

from product_catalog.core.config import settings
from product_catalog.core.exceptions import InvalidInputError
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import (
    clamp_limit,
    get_product_service,
    make_lambda_handler,
    parse_float,
    parse_int,
    query_params,
)
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


def parse_filters(params: Dict[str, Any]) -> Dict[str, Any]:
    filters: Dict[str, Any] = {}
    if params.get("category"):
        filters["category"] = params["category"]
    if params.get("status"):
        filters["status"] = params["status"]
    for name in ("minPrice", "maxPrice"):
        value = parse_float(params.get(name))
        if value is not None:
            filters[name] = value
    return filters


def parse_cursor(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if not raw:
        return None
    try:
        cursor = json.loads(raw)
    except ValueError as e:
        raise InvalidInputError("lastEvaluatedKey must be valid JSON") from e
    if not isinstance(cursor, dict):
        raise InvalidInputError("lastEvaluatedKey must be a JSON object")
    return cursor


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    params = query_params(event)
    try:
        log_request(logger, "GET", "/product", params)

        page = max(1, parse_int(params.get("page"), 1) or 1)
        limit = clamp_limit(params.get("limit"), settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT)
        sort_by = params.get("sortBy") or "createdAt"
        sort_order = "asc" if params.get("sortOrder") == "asc" else "desc"

        result = await service.get_all_products(
            page=page,
            limit=limit,
            sort_by=sort_by,
            sort_order=sort_order,
            filters=parse_filters(params),
            last_evaluated_key=parse_cursor(params.get("lastEvaluatedKey")),
        )

        # Scans have no cheap exact count; the scanned count stands in for it
        total = result.get("scanned_count") or 0

        return response_formatter.paginated(
            [response_formatter.format_product(p) for p in result["items"]],
            page,
            limit,
            total,
            "Products retrieved successfully",
            last_evaluated_key=result.get("last_evaluated_key"),
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "list_products", "query": params})


handler = make_lambda_handler(handle)
