"""
DynamoDB Connection and Utilities

Wraps a boto3 DynamoDB resource with:
- Retry with exponential backoff for throttling / availability errors
- float <-> Decimal conversion (boto3 rejects floats)
- A generic partial-update primitive built from a field mapping
- A normalized envelope for query and scan results

boto3 is synchronous; every call runs in a worker thread so handlers can
await it.

Usage:
    from product_catalog.database.dynamodb import get_connection

    db = get_connection()
    product = await db.get("Products", {"id": "prod_123"})
"""

import asyncio
import logging
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from product_catalog.core.config import settings
from product_catalog.core.exceptions import DatabaseError
from product_catalog.core.retry import RetryConfig, execute_with_retry, get_error_code

logger = logging.getLogger(__name__)

# DynamoDB API limits
BATCH_GET_LIMIT = 100
BATCH_WRITE_LIMIT = 25


def float_to_decimal(obj: Any) -> Any:
    """Convert float values to Decimal for DynamoDB compatibility"""
    if isinstance(obj, float):
        return Decimal(str(obj))
    elif isinstance(obj, dict):
        return {k: float_to_decimal(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [float_to_decimal(item) for item in obj]
    return obj


def decimal_to_native(obj: Any) -> Any:
    """Convert Decimal objects to int (integral values) or float"""
    if isinstance(obj, Decimal):
        if obj == obj.to_integral_value():
            return int(obj)
        return float(obj)
    elif isinstance(obj, dict):
        return {k: decimal_to_native(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [decimal_to_native(item) for item in obj]
    return obj


def build_update_expression(updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build SET update parameters from an arbitrary field mapping.

    Every field becomes one ``#fieldN = :valN`` clause, so attribute names
    never collide with DynamoDB reserved words.
    """
    if not updates:
        raise ValueError("updates must contain at least one field")

    clauses = []
    names = {}
    values = {}
    for index, (field, value) in enumerate(updates.items()):
        name_key = f"#field{index}"
        value_key = f":val{index}"
        names[name_key] = field
        values[value_key] = value
        clauses.append(f"{name_key} = {value_key}")

    return {
        "UpdateExpression": "SET " + ", ".join(clauses),
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
    }


def _chunks(items: List[Any], size: int) -> List[List[Any]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class DynamoDBConnection:
    """
    Retrying wrapper over a boto3 DynamoDB resource.

    Construct once per process (see ``get_connection``) and pass it to the
    query layer; tests inject a mocked resource.
    """

    def __init__(
        self,
        resource: Any = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        if resource is None:
            kwargs = {"region_name": region or settings.AWS_REGION}
            endpoint_url = endpoint_url or settings.DYNAMODB_ENDPOINT
            # Local DynamoDB / LocalStack only when explicitly configured
            if endpoint_url and endpoint_url.strip():
                kwargs["endpoint_url"] = endpoint_url.strip()
                logger.info(f"Using local DynamoDB endpoint: {kwargs['endpoint_url']}")
            resource = boto3.resource("dynamodb", **kwargs)

        self.resource = resource
        self.retry_config = retry_config or RetryConfig(
            max_attempts=settings.DB_MAX_RETRIES,
            base_delay=settings.DB_RETRY_DELAY_MS / 1000.0,
        )
        self._tables: Dict[str, Any] = {}

    def table(self, table_name: str) -> Any:
        """Get (and cache) a Table resource"""
        if table_name not in self._tables:
            self._tables[table_name] = self.resource.Table(table_name)
        return self._tables[table_name]

    async def execute_with_retry(
        self,
        operation: str,
        table_name: Optional[str],
        func: Callable[..., Any],
        **kwargs: Any,
    ) -> Any:
        """
        Run a blocking boto3 call in a worker thread with the retry policy.

        Store failures that survive the retries are raised as DatabaseError.
        """
        description = f"{operation} {table_name or ''}".strip()
        logger.debug(f"Database: {description}")
        try:
            return await execute_with_retry(
                lambda: asyncio.to_thread(func, **kwargs),
                self.retry_config,
                description=description,
            )
        except (ClientError, BotoCoreError) as e:
            error_code = get_error_code(e) or type(e).__name__
            logger.error(
                f"Database operation failed: {description} ({error_code})",
                extra={"operation": operation, "table": table_name, "store_error_code": error_code},
            )
            raise DatabaseError(
                f"Database operation '{operation}' failed",
                operation=operation,
                table=table_name,
                store_error_code=error_code,
            ) from e

    async def put(self, table_name: str, item: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        """Put (full overwrite) an item"""
        table = self.table(table_name)
        return await self.execute_with_retry(
            "put", table_name, table.put_item, Item=float_to_decimal(item), **kwargs
        )

    async def get(self, table_name: str, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Get a single item by key, or None"""
        table = self.table(table_name)
        response = await self.execute_with_retry(
            "get", table_name, table.get_item, Key=float_to_decimal(key)
        )
        item = response.get("Item")
        return decimal_to_native(item) if item is not None else None

    async def update(self, table_name: str, key: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update (SET per field) and return the full new item"""
        table = self.table(table_name)
        params = build_update_expression(float_to_decimal(updates))
        response = await self.execute_with_retry(
            "update", table_name, table.update_item,
            Key=float_to_decimal(key),
            ReturnValues="ALL_NEW",
            **params,
        )
        return decimal_to_native(response.get("Attributes", {}))

    async def delete(self, table_name: str, key: Dict[str, Any]) -> Dict[str, Any]:
        """Physically remove an item"""
        table = self.table(table_name)
        return await self.execute_with_retry(
            "delete", table_name, table.delete_item, Key=float_to_decimal(key)
        )

    async def query(self, table_name: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Query a table or index and return the normalized envelope"""
        table = self.table(table_name)
        response = await self.execute_with_retry(
            "query", table_name, table.query, **float_to_decimal(params)
        )
        return self._envelope(response)

    async def scan(self, table_name: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Scan a table and return the normalized envelope"""
        table = self.table(table_name)
        response = await self.execute_with_retry(
            "scan", table_name, table.scan, **float_to_decimal(params or {})
        )
        return self._envelope(response)

    async def batch_get(self, table_name: str, keys: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Fetch many items by key, in chunks of 100"""
        items: List[Dict[str, Any]] = []
        for chunk in _chunks(keys, BATCH_GET_LIMIT):
            response = await self.execute_with_retry(
                "batch_get", table_name, self.resource.batch_get_item,
                RequestItems={table_name: {"Keys": float_to_decimal(chunk)}},
            )
            items.extend(response.get("Responses", {}).get(table_name, []))
            unprocessed = response.get("UnprocessedKeys", {}).get(table_name, {}).get("Keys", [])
            if unprocessed:
                logger.warning(f"batch_get left {len(unprocessed)} unprocessed keys on {table_name}")
        return decimal_to_native(items)

    async def batch_write(self, table_name: str, items: List[Dict[str, Any]]) -> int:
        """Put many items, in chunks of 25. Returns the number of unprocessed items."""
        unprocessed_total = 0
        for chunk in _chunks(items, BATCH_WRITE_LIMIT):
            requests = [{"PutRequest": {"Item": float_to_decimal(item)}} for item in chunk]
            response = await self.execute_with_retry(
                "batch_write", table_name, self.resource.batch_write_item,
                RequestItems={table_name: requests},
            )
            unprocessed = response.get("UnprocessedItems", {}).get(table_name, [])
            if unprocessed:
                unprocessed_total += len(unprocessed)
                logger.warning(f"batch_write left {len(unprocessed)} unprocessed items on {table_name}")
        return unprocessed_total

    async def transact_write(self, transact_items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """All-or-nothing write across items (resource client accepts native types)"""
        client = self.resource.meta.client
        return await self.execute_with_retry(
            "transact_write", None, client.transact_write_items,
            TransactItems=float_to_decimal(transact_items),
        )

    @staticmethod
    def _envelope(response: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "items": decimal_to_native(response.get("Items", [])),
            "count": response.get("Count", 0),
            "scanned_count": response.get("ScannedCount", 0),
            "last_evaluated_key": decimal_to_native(response.get("LastEvaluatedKey")),
        }


@lru_cache(maxsize=1)
def get_connection() -> DynamoDBConnection:
    """Process-wide connection, created on first use and reused across invocations"""
    connection = DynamoDBConnection()
    logger.info(f"DynamoDB connection initialized: region={settings.AWS_REGION}")
    return connection
