"""
Response Formatter
Builds API Gateway style responses ({statusCode, headers, body}) with the
catalog's success / paginated / error envelopes.
"""

import json
import math
import random
import string
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from product_catalog.utils.timestamps import utc_now_iso

_BASE36 = string.digits + string.ascii_lowercase

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}


class DecimalEncoder(json.JSONEncoder):
    """Handle Decimal types in JSON serialization"""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        return super().default(obj)


def generate_request_id() -> str:
    """req_<epoch ms>_<9 base36 chars>"""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


def _meta() -> Dict[str, str]:
    return {"timestamp": utc_now_iso(), "requestId": generate_request_id()}


def create_response(status_code: int, body: Optional[dict] = None, headers: Optional[dict] = None) -> dict:
    """Create a standardized API response; ``body=None`` omits the body entirely"""
    response_headers = dict(CORS_HEADERS)
    if headers:
        response_headers.update(headers)

    response = {"statusCode": status_code, "headers": response_headers}
    if body is not None:
        response["body"] = json.dumps(body, cls=DecimalEncoder)
    return response


def success(data: Any, message: str = "Success", status_code: int = 200) -> dict:
    return create_response(status_code, {
        "status": "success",
        "data": data,
        "message": message,
        "meta": _meta(),
    })


def created(data: Any, message: str = "Resource created successfully") -> dict:
    return success(data, message, 201)


def no_content() -> dict:
    return create_response(204)


def paginated(
    data: Optional[List[Any]] = None,
    page: int = 1,
    limit: int = 20,
    total: int = 0,
    message: str = "Success",
    last_evaluated_key: Optional[Dict[str, Any]] = None,
) -> dict:
    """
    Paginated list envelope.

    ``lastEvaluatedKey`` is the cursor to send back for the next page; null
    when the underlying scan is exhausted.
    """
    pages = math.ceil(total / limit) if limit > 0 else 0

    return create_response(200, {
        "status": "success",
        "data": data or [],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": pages,
            "hasNextPage": page < pages,
            "hasPrevPage": page > 1,
            "lastEvaluatedKey": last_evaluated_key,
        },
        "message": message,
        "meta": _meta(),
    })


def format_variant(variant: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not variant:
        return None

    return {
        "id": variant.get("id"),
        "name": variant.get("name"),
        "b2cQty": variant.get("b2cQty"),
        "b2cUnit": variant.get("b2cUnit"),
        "stock": variant.get("stock") or 0,
        "purchasePrice": variant.get("purchasePrice"),
        "salePrice": variant.get("salePrice"),
        "comparePrice": variant.get("comparePrice"),
        "status": variant.get("status") or "in-stock",
        "lowStockAlert": variant.get("lowStockAlert"),
        "onB2C": variant.get("onB2C") is not False,
        "images": variant.get("images") or [],
    }


def format_product(product: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Public view of a stored product; delete bookkeeping fields are not exposed"""
    if not product:
        return None

    return {
        "id": product.get("id"),
        "name": product.get("name"),
        "description": product.get("description") or "",
        "categoryId": product.get("categoryId"),
        "categoryName": product.get("categoryName") or "",
        "subCategoryId": product.get("subCategoryId"),
        "subCategoryName": product.get("subCategoryName") or "",
        "groupId": product.get("groupId") or "",
        "basePrice": product.get("basePrice"),
        "purchasePrice": product.get("purchasePrice"),
        "comparePrice": product.get("comparePrice"),
        "stock": product.get("stock"),
        "unit": product.get("unit"),
        "stock_mode": product.get("stock_mode") or "parent",
        "status": product.get("status") or "in-stock",
        "lowStockAlert": product.get("lowStockAlert"),
        "variants": [format_variant(v) for v in product.get("variants") or []],
        "images": product.get("images") or [],
        "tags": product.get("tags") or [],
        "onB2C": product.get("onB2C") is not False,
        "isActive": product.get("isActive") is not False,
        "createdAt": product.get("createdAt"),
        "updatedAt": product.get("updatedAt"),
        "version": product.get("version") or 1,
    }
