"""
Shared plumbing for the Lambda handlers: event parsing, service wiring and
the sync entry point wrapper.
"""

import asyncio
import base64
import binascii
import json
import logging
import math
import time
from functools import lru_cache, wraps
from typing import Any, Awaitable, Callable, Dict, Optional

from product_catalog.core.exceptions import InvalidInputError, InvalidJSONError
from product_catalog.core.logging_config import log_response, set_request_id, setup_logging
from product_catalog.database.dynamodb import get_connection
from product_catalog.database.queries import ProductQueries
from product_catalog.services.product_service import ProductService

setup_logging()

logger = logging.getLogger(__name__)

HandleFunc = Callable[..., Awaitable[dict]]


@lru_cache(maxsize=1)
def get_product_service() -> ProductService:
    """Process-wide service over the shared DynamoDB connection"""
    return ProductService(ProductQueries(get_connection()))


def parse_json_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Decode the request body into a JSON object.

    Raises:
        InvalidInputError: body missing or not a JSON object
        InvalidJSONError: body is not valid JSON
    """
    body = event.get("body")
    if body is None or body == "":
        raise InvalidInputError("Request body is required")

    if isinstance(body, dict):
        return body

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise InvalidJSONError() from e

    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        raise InvalidJSONError() from e

    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data


def query_params(event: Dict[str, Any]) -> Dict[str, Any]:
    return event.get("queryStringParameters") or {}


def path_params(event: Dict[str, Any]) -> Dict[str, Any]:
    return event.get("pathParameters") or {}


def parse_int(value: Any, default: int) -> int:
    """parseInt-style: leading integer of the value, else ``default``"""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    digits = ""
    for index, char in enumerate(text):
        if char.isdigit() or (index == 0 and char in "+-"):
            digits += char
        else:
            break
    try:
        return int(digits)
    except ValueError:
        return default


def parse_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # nan/inf cannot be stored or compared in DynamoDB
    return number if math.isfinite(number) else None


def clamp_limit(value: Any, default: int, maximum: int) -> int:
    return max(1, min(parse_int(value, default) or default, maximum))


def make_lambda_handler(handle: HandleFunc) -> Callable[[Dict[str, Any], Any], dict]:
    """Wrap an async ``handle(event)`` as a synchronous Lambda entry point"""

    @wraps(handle)
    def handler(event: Dict[str, Any], context: Any = None) -> dict:
        request_id = getattr(context, "aws_request_id", None)
        set_request_id(request_id)
        start = time.perf_counter()
        response = asyncio.run(handle(event))
        log_response(
            logger,
            event.get("httpMethod", "-"),
            event.get("path", "-"),
            response["statusCode"],
            (time.perf_counter() - start) * 1000,
        )
        return response

    return handler
