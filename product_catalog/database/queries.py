"""
Database Queries Layer
Product-table operations built on DynamoDBConnection

Tables:
- Products (PK: id; GSIs: categoryId-index, groupId-index)
- Category_management (PK: id)
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from product_catalog.core.config import settings
from product_catalog.database.dynamodb import DynamoDBConnection
from product_catalog.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


def _to_decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def _and_all(conditions: List[Any]) -> Optional[Any]:
    """Combine boto3 conditions with AND, or None if there are none"""
    combined = None
    for condition in conditions:
        combined = condition if combined is None else combined & condition
    return combined


class ProductQueries:
    """
    Product-scoped helpers over a DynamoDBConnection.

    Holds no mutable state beyond the table names; one instance can serve
    every invocation in the process.
    """

    def __init__(
        self,
        db: DynamoDBConnection,
        products_table: Optional[str] = None,
        category_table: Optional[str] = None,
    ):
        self.db = db
        self.table_name = products_table or settings.PRODUCTS_TABLE
        self.category_table_name = category_table or settings.CATEGORY_TABLE_NAME
        self.category_index = settings.CATEGORY_INDEX_NAME
        self.group_index = settings.GROUP_INDEX_NAME

    # =========================================================================
    # Single-item operations
    # =========================================================================

    async def save_product(self, product: Dict[str, Any]) -> Dict[str, Any]:
        """Save (full overwrite) a product"""
        return await self.db.put(self.table_name, product)

    async def get_product_by_id(self, product_id: str) -> Optional[Dict[str, Any]]:
        """Get product by id, or None"""
        return await self.db.get(self.table_name, {"id": product_id})

    async def product_exists(self, product_id: str) -> bool:
        return await self.get_product_by_id(product_id) is not None

    async def update_product(self, product_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update and stamp ``updatedAt``.

        ``version`` is bumped only when the payload already carries one; plain
        updates leave the stored version untouched.
        """
        update_data = {**updates, "updatedAt": utc_now_iso()}

        if "version" in updates:
            update_data["version"] = int(updates["version"] or 0) + 1

        return await self.db.update(self.table_name, {"id": product_id}, update_data)

    async def delete_product(self, product_id: str) -> Dict[str, Any]:
        """Hard delete: physically remove the item"""
        return await self.db.delete(self.table_name, {"id": product_id})

    async def soft_delete_product(self, product_id: str) -> Dict[str, Any]:
        """Mark the product deleted; the item stays in the table"""
        return await self.update_product(product_id, {
            "isDeleted": True,
            "deletedAt": utc_now_iso(),
        })

    async def get_category_by_id(self, category_id: str) -> Optional[Dict[str, Any]]:
        """Get category by id, or None"""
        return await self.db.get(self.category_table_name, {"id": category_id})

    async def batch_get_products(self, product_ids: List[str]) -> List[Dict[str, Any]]:
        keys = [{"id": product_id} for product_id in product_ids]
        return await self.db.batch_get(self.table_name, keys)

    # =========================================================================
    # Index queries
    # =========================================================================

    async def query_products_by_category(
        self,
        category_id: str,
        page: int = 1,
        limit: int = 20,
        last_evaluated_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Query products in a category, newest first.

        Pagination is cursor based. With an explicit ``last_evaluated_key`` the
        query resumes from it; otherwise pages before ``page`` are walked with
        the cursors DynamoDB returns. Walking costs one query per skipped page,
        acceptable for catalog-sized categories.
        """
        params: Dict[str, Any] = {
            "IndexName": self.category_index,
            "KeyConditionExpression": Key("categoryId").eq(category_id),
            "Limit": limit,
            "ScanIndexForward": False,
        }

        cursor = last_evaluated_key
        if cursor is None and page > 1:
            for _ in range(page - 1):
                skipped = await self.db.query(self.table_name, self._with_cursor(params, cursor))
                cursor = skipped["last_evaluated_key"]
                if not cursor:
                    # Ran out of items before reaching the requested page
                    return {
                        "items": [],
                        "count": 0,
                        "page": page,
                        "limit": limit,
                        "last_evaluated_key": None,
                    }

        result = await self.db.query(self.table_name, self._with_cursor(params, cursor))
        return {
            "items": result["items"],
            "count": result["count"],
            "page": page,
            "limit": limit,
            "last_evaluated_key": result["last_evaluated_key"],
        }

    async def count_products_by_category(self, category_id: str) -> int:
        result = await self.db.query(self.table_name, {
            "IndexName": self.category_index,
            "KeyConditionExpression": Key("categoryId").eq(category_id),
            "Select": "COUNT",
        })
        return result["count"] or 0

    async def get_products_by_group_id(self, group_id: str) -> List[Dict[str, Any]]:
        result = await self.db.query(self.table_name, {
            "IndexName": self.group_index,
            "KeyConditionExpression": Key("groupId").eq(group_id),
        })
        return result["items"]

    # =========================================================================
    # Scans
    # =========================================================================

    async def search_products(
        self,
        query: str,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        """
        Name-prefix search with optional category and basePrice range.

        DynamoDB applies Limit before the filter, so pages are scanned until
        ``limit`` matches are collected or the table is exhausted.
        """
        conditions = []
        if query:
            conditions.append(Attr("name").begins_with(query))
        if category:
            conditions.append(Attr("categoryId").eq(category))
        if min_price is not None:
            conditions.append(Attr("basePrice").gte(_to_decimal(min_price)))
        if max_price is not None:
            conditions.append(Attr("basePrice").lte(_to_decimal(max_price)))

        params: Dict[str, Any] = {"Limit": limit}
        filter_expression = _and_all(conditions)
        if filter_expression is not None:
            params["FilterExpression"] = filter_expression

        matches: List[Dict[str, Any]] = []
        cursor = None
        while len(matches) < limit:
            result = await self.db.scan(self.table_name, self._with_cursor(params, cursor))
            matches.extend(result["items"])
            cursor = result["last_evaluated_key"]
            if not cursor:
                break

        return matches[:limit]

    async def get_all_products(
        self,
        limit: int = 20,
        filters: Optional[Dict[str, Any]] = None,
        last_evaluated_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        One scan page of the product table.

        Supported filters: category, status, minPrice, maxPrice. The caller
        resumes with the returned ``last_evaluated_key``.
        """
        filters = filters or {}
        conditions = []
        if filters.get("category"):
            conditions.append(Attr("categoryId").eq(filters["category"]))
        if filters.get("status"):
            conditions.append(Attr("status").eq(filters["status"]))
        if filters.get("minPrice") is not None:
            conditions.append(Attr("basePrice").gte(_to_decimal(filters["minPrice"])))
        if filters.get("maxPrice") is not None:
            conditions.append(Attr("basePrice").lte(_to_decimal(filters["maxPrice"])))

        params: Dict[str, Any] = {"Limit": limit}
        filter_expression = _and_all(conditions)
        if filter_expression is not None:
            params["FilterExpression"] = filter_expression

        return await self.db.scan(self.table_name, self._with_cursor(params, last_evaluated_key))

    async def get_products_with_low_stock(self) -> List[Dict[str, Any]]:
        """Products at or under their (non-zero) low stock alert, across all scan pages"""
        params = {
            "FilterExpression": "lowStockAlert > :zero AND #stock <= lowStockAlert",
            "ExpressionAttributeNames": {"#stock": "stock"},
            "ExpressionAttributeValues": {":zero": 0},
        }

        items: List[Dict[str, Any]] = []
        cursor = None
        while True:
            result = await self.db.scan(self.table_name, self._with_cursor(params, cursor))
            items.extend(result["items"])
            cursor = result["last_evaluated_key"]
            if not cursor:
                return items

    async def get_featured_products(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Products live on B2C, active, and carrying a rating"""
        result = await self.db.scan(self.table_name, {
            "FilterExpression": (
                Attr("onB2C").eq(True) & Attr("isActive").eq(True) & Attr("rating").exists()
            ),
            "Limit": limit,
        })
        return result["items"]

    @staticmethod
    def _with_cursor(params: Dict[str, Any], cursor: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if not cursor:
            return params
        return {**params, "ExclusiveStartKey": cursor}
