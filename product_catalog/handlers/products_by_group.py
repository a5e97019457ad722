"""GET /productByGroupId?groupId=..."""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.exceptions import InvalidInputError
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import get_product_service, make_lambda_handler, query_params
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    params = query_params(event)
    try:
        group_id = params.get("groupId")
        if not group_id:
            raise InvalidInputError("groupId is required")

        log_request(logger, "GET", "/productByGroupId", params)

        products = await service.get_products_by_group(group_id)

        return response_formatter.success(
            [response_formatter.format_product(p) for p in products],
            "Products retrieved successfully",
        )
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "products_by_group", "query": params})


handler = make_lambda_handler(handle)
