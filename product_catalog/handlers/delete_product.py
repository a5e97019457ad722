"""
DELETE /product?productId=..., DELETE /product/{id}
Soft delete unless ``hardDelete=true``. Responds 204 with no body.
"""

import logging
from typing import Any, Dict, Optional

from product_catalog.core.exceptions import InvalidInputError
from product_catalog.core.logging_config import log_request
from product_catalog.handlers.base import get_product_service, make_lambda_handler, path_params, query_params
from product_catalog.services.product_service import ProductService
from product_catalog.utils import error_handler, response_formatter

logger = logging.getLogger(__name__)


async def handle(event: Dict[str, Any], service: Optional[ProductService] = None) -> dict:
    service = service or get_product_service()
    params = query_params(event)
    try:
        product_id = params.get("productId") or path_params(event).get("id")
        if not product_id:
            raise InvalidInputError("Product ID is required")

        log_request(logger, "DELETE", f"/product/{product_id}")

        # TODO: reject with ProductInUseError once order lookups are available here
        soft_delete = params.get("hardDelete") != "true"
        await service.delete_product(product_id, soft_delete=soft_delete)

        return response_formatter.no_content()
    except Exception as e:
        return error_handler.handle_exception(e, {"operation": "delete_product", "query": params})


handler = make_lambda_handler(handle)
