"""
Product Service
Core business logic for product operations

Handles:
- Stock status derivation for products and variants
- Product / variant id generation
- Variant price derivation from the parent under stock_mode=parent
- Create, update, soft/hard delete and the catalog read paths
"""

import logging
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from product_catalog.core.exceptions import (
    CategoryNotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from product_catalog.core.logging_config import log_validation
from product_catalog.database.queries import ProductQueries
from product_catalog.services import product_validator, unit_converter
from product_catalog.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


class StockStatus(str, Enum):
    OUT_OF_STOCK = "out-of-stock"
    LOW_STOCK = "low-stock"
    IN_STOCK = "in-stock"


class StockMode(str, Enum):
    PARENT = "parent"
    VARIANT = "variant"


DEFAULT_UNIT = "kg"

# Never written from an update payload: key, creation stamp, derived and
# delete-only fields
PROTECTED_UPDATE_FIELDS = ("id", "createdAt", "status", "isDeleted", "deletedAt")

FLOAT_FIELDS = ("basePrice", "purchasePrice", "comparePrice")
INT_FIELDS = ("stock", "lowStockAlert")


def _to_float(value: Any, default: float = 0.0) -> float:
    number = product_validator.parse_number(value)
    return default if number is None else number


def _to_int(value: Any, default: int = 0) -> int:
    number = product_validator.parse_number(value)
    return default if number is None else int(number)


def calculate_product_status(stock: Any, low_stock_alert: Any = 0) -> str:
    """
    Derive stock status; the only place status is computed.

    stock == 0                               -> out-of-stock
    low_stock_alert > 0 and stock <= alert   -> low-stock
    otherwise                                -> in-stock
    """
    stock = _to_int(stock)
    low_stock_alert = _to_int(low_stock_alert)

    if stock == 0:
        return StockStatus.OUT_OF_STOCK.value
    if low_stock_alert > 0 and stock <= low_stock_alert:
        return StockStatus.LOW_STOCK.value
    return StockStatus.IN_STOCK.value


def generate_product_id() -> str:
    return f"prod_{uuid.uuid4()}"


def generate_variant_id(product_id: str, variant_index: int = 0) -> str:
    return f"var_{product_id.replace('prod_', '', 1)}_{variant_index}"


def convert_variant_qty_to_parent_unit(qty: Any, variant_unit: Any, parent_unit: Any) -> float:
    return unit_converter.convert(qty, variant_unit, parent_unit)


def build_variant(
    variant: Dict[str, Any],
    product_id: str,
    index: int,
    stock_mode: str,
    parent: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Build a stored variant from its payload.

    Under stock_mode=parent (and a non-zero parent basePrice) sale and
    purchase prices are derived from the parent prices scaled by the variant
    quantity in the parent unit; submitted variant prices are ignored. Under
    stock_mode=variant the variant keeps its own prices and stock.
    """
    sale_price = _to_float(variant.get("salePrice"))
    purchase_price = _to_float(variant.get("purchasePrice"))

    if stock_mode == StockMode.PARENT.value and _to_float(parent.get("basePrice")):
        qty_in_parent_unit = convert_variant_qty_to_parent_unit(
            variant.get("b2cQty"),
            variant.get("b2cUnit") or DEFAULT_UNIT,
            parent.get("unit") or DEFAULT_UNIT,
        )
        sale_price = _to_float(parent.get("basePrice")) * qty_in_parent_unit
        purchase_price = _to_float(parent.get("purchasePrice")) * qty_in_parent_unit

    return {
        "id": generate_variant_id(product_id, index),
        "name": variant.get("name") or parent.get("name"),
        "b2cQty": _to_float(variant.get("b2cQty")),
        "b2cUnit": variant.get("b2cUnit") or DEFAULT_UNIT,
        "stock": _to_int(variant.get("stock")) if stock_mode == StockMode.VARIANT.value else 0,
        "unit": variant.get("unit") or "",
        "purchasePrice": purchase_price,
        "salePrice": sale_price,
        "comparePrice": _to_float(variant.get("comparePrice")),
        "status": calculate_product_status(variant.get("stock"), variant.get("lowStockAlert")),
        "lowStockAlert": _to_int(variant.get("lowStockAlert")),
        "onB2C": variant.get("onB2C") is not False,
        "images": variant.get("images") or [],
        "expiryDate": variant.get("expiryDate") or "",
    }


class ProductService:
    """
    Product orchestration over the query layer.

    Every read path drops soft-deleted products unless explicitly asked for
    them.
    """

    def __init__(self, queries: ProductQueries):
        self.queries = queries

    async def create_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate, resolve the category, build and persist a new product.

        Raises:
            ValidationError: payload failed validation
            CategoryNotFoundError: categoryId does not resolve
        """
        logger.info("Creating product", extra={"product_name": data.get("name")})

        errors = product_validator.validate_product_input(data)
        if errors:
            log_validation(logger, "create product", errors)
            raise ValidationError(errors)

        category = await self.queries.get_category_by_id(data["categoryId"])
        if not category:
            raise CategoryNotFoundError(data["categoryId"])

        product_id = generate_product_id()
        stock_mode = data.get("stock_mode") or StockMode.PARENT.value

        variants = [
            build_variant(variant, product_id, index, stock_mode, data)
            for index, variant in enumerate(data.get("variants") or [])
        ]

        now = utc_now_iso()
        product = {
            "id": product_id,
            "name": data["name"],
            "description": data.get("description") or "",
            "categoryId": data["categoryId"],
            "categoryName": category.get("name") or "",
            "subCategoryId": data.get("subCategoryId") or "",
            "subCategoryName": data.get("subCategoryName") or "",
            "groupId": data.get("groupId") or "",
            "basePrice": _to_float(data.get("basePrice")),
            "purchasePrice": _to_float(data.get("purchasePrice")),
            "comparePrice": _to_float(data.get("comparePrice")),
            "stock": _to_int(data.get("stock")),
            "unit": data.get("unit") or DEFAULT_UNIT,
            "stock_mode": stock_mode,
            "status": calculate_product_status(data.get("stock"), data.get("lowStockAlert")),
            "lowStockAlert": _to_int(data.get("lowStockAlert")),
            "variants": variants,
            "images": data.get("images") or [],
            "tags": data.get("tags") or [],
            "onB2C": data.get("onB2C") is not False,
            "isActive": data.get("isActive") is not False,
            "isDeleted": False,
            "createdAt": now,
            "updatedAt": now,
            "version": 1,
        }

        await self.queries.save_product(product)

        logger.info("Product created successfully", extra={"product_id": product_id})
        return product

    async def update_product(self, product_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update.

        Status is recomputed whenever stock or lowStockAlert is touched. A
        ``variants`` key replaces the whole variant list, rebuilt under the
        stored stock_mode; there is no per-variant merge.

        Raises:
            ValidationError: payload failed validation
            ProductNotFoundError: product missing or soft-deleted
        """
        logger.info("Updating product", extra={"product_id": product_id})

        errors = product_validator.validate_update_data(updates)
        if errors:
            log_validation(logger, "update product", errors)
            raise ValidationError(errors)

        existing = await self.queries.get_product_by_id(product_id)
        if not existing or existing.get("isDeleted"):
            raise ProductNotFoundError(product_id)

        update_data = {k: v for k, v in updates.items() if k not in PROTECTED_UPDATE_FIELDS}
        for field in FLOAT_FIELDS:
            if field in update_data:
                update_data[field] = _to_float(update_data[field])
        for field in INT_FIELDS:
            if field in update_data:
                update_data[field] = _to_int(update_data[field])

        if "stock" in update_data or "lowStockAlert" in update_data:
            update_data["status"] = calculate_product_status(
                update_data.get("stock", existing.get("stock")),
                update_data.get("lowStockAlert", existing.get("lowStockAlert")),
            )

        if isinstance(update_data.get("variants"), list):
            stock_mode = existing.get("stock_mode") or StockMode.PARENT.value
            parent = {**existing, **update_data}
            update_data["variants"] = [
                build_variant(variant, product_id, index, stock_mode, parent)
                for index, variant in enumerate(update_data["variants"])
            ]

        if not update_data:
            return existing

        updated = await self.queries.update_product(product_id, update_data)

        logger.info("Product updated successfully", extra={"product_id": product_id})
        return updated

    async def delete_product(self, product_id: str, soft_delete: bool = True) -> None:
        """
        Soft delete (default) or hard delete a product.

        Deleting an already soft-deleted product raises ProductNotFoundError,
        so a repeated delete is reported as not found.
        """
        logger.info("Deleting product", extra={"product_id": product_id, "soft_delete": soft_delete})

        existing = await self.queries.get_product_by_id(product_id)
        if not existing:
            raise ProductNotFoundError(product_id)
        if existing.get("isDeleted"):
            raise ProductNotFoundError(product_id, "Product already deleted")

        if soft_delete:
            await self.queries.soft_delete_product(product_id)
        else:
            await self.queries.delete_product(product_id)

        logger.info("Product deleted successfully", extra={"product_id": product_id})

    # =========================================================================
    # Read paths
    # =========================================================================

    async def get_product_by_id(self, product_id: str, include_deleted: bool = False) -> Optional[Dict[str, Any]]:
        logger.debug("Fetching product", extra={"product_id": product_id})
        product = await self.queries.get_product_by_id(product_id)
        if product and product.get("isDeleted") and not include_deleted:
            return None
        return product

    async def get_products_by_category(
        self,
        category_id: str,
        page: int = 1,
        limit: int = 20,
        last_evaluated_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        logger.debug("Fetching products by category", extra={"category_id": category_id, "page": page, "limit": limit})
        result = await self.queries.query_products_by_category(
            category_id, page=page, limit=limit, last_evaluated_key=last_evaluated_key
        )
        result["items"] = _without_deleted(result["items"])
        return result

    async def count_products_in_category(self, category_id: str) -> int:
        return await self.queries.count_products_by_category(category_id)

    async def search_products(self, query: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        filters = filters or {}
        logger.debug("Searching products", extra={"query": query, "filters": filters})
        items = await self.queries.search_products(
            query,
            category=filters.get("category"),
            min_price=filters.get("minPrice"),
            max_price=filters.get("maxPrice"),
            limit=filters.get("limit", 50),
        )
        return _without_deleted(items)

    async def get_all_products(
        self,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        filters: Optional[Dict[str, Any]] = None,
        last_evaluated_key: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        One page of the catalog.

        Scans return items in storage order, so sorting applies to the
        fetched page only.
        """
        logger.debug("Fetching all products", extra={"page": page, "limit": limit, "filters": filters})
        result = await self.queries.get_all_products(
            limit=limit, filters=filters, last_evaluated_key=last_evaluated_key
        )

        items = _without_deleted(result["items"])
        items.sort(key=lambda item: _sort_key(item.get(sort_by)), reverse=sort_order != "asc")

        return {
            "items": items,
            "count": len(items),
            "scanned_count": result["scanned_count"],
            "page": page,
            "limit": limit,
            "last_evaluated_key": result["last_evaluated_key"],
        }

    async def get_featured_products(self, limit: int = 20) -> List[Dict[str, Any]]:
        logger.debug("Fetching featured products", extra={"limit": limit})
        return _without_deleted(await self.queries.get_featured_products(limit))

    async def get_products_by_group(self, group_id: str) -> List[Dict[str, Any]]:
        logger.debug("Fetching products by group", extra={"group_id": group_id})
        return _without_deleted(await self.queries.get_products_by_group_id(group_id))

    async def get_low_stock_products(self) -> List[Dict[str, Any]]:
        return _without_deleted(await self.queries.get_products_with_low_stock())


def _without_deleted(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [item for item in items if not item.get("isDeleted")]


def _sort_key(value: Any):
    # Missing values sort last ascending; numbers before strings
    if value is None:
        return (2, 0, "")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    return (1, 0, str(value))
