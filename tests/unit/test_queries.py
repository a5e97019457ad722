"""
Unit Tests for ProductQueries

The connection is mocked; these tests check the parameters handed to it.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from product_catalog.database.queries import ProductQueries


@pytest.fixture
def mock_db():
    mock = MagicMock()
    mock.put = AsyncMock(return_value={})
    mock.get = AsyncMock(return_value=None)
    mock.update = AsyncMock(side_effect=lambda table, key, updates: {**key, **updates})
    mock.delete = AsyncMock(return_value={})
    mock.query = AsyncMock()
    mock.scan = AsyncMock()
    return mock


@pytest.fixture
def queries(mock_db):
    return ProductQueries(mock_db, products_table="Products", category_table="Categories")


def envelope(items, cursor=None):
    return {"items": items, "count": len(items), "scanned_count": len(items), "last_evaluated_key": cursor}


class TestProductWrites:
    """Tests for update / delete helpers"""

    @pytest.mark.asyncio
    async def test_update_stamps_updated_at(self, queries, mock_db):
        result = await queries.update_product("prod_1", {"stock": 3})

        table, key, updates = mock_db.update.await_args.args
        assert table == "Products"
        assert key == {"id": "prod_1"}
        assert updates["stock"] == 3
        assert updates["updatedAt"].endswith("Z")
        assert "version" not in updates
        assert result["id"] == "prod_1"

    @pytest.mark.asyncio
    async def test_update_increments_version_when_present(self, queries, mock_db):
        await queries.update_product("prod_1", {"version": 4})

        updates = mock_db.update.await_args.args[2]
        assert updates["version"] == 5

    @pytest.mark.asyncio
    async def test_soft_delete_marks_item(self, queries, mock_db):
        await queries.soft_delete_product("prod_1")

        updates = mock_db.update.await_args.args[2]
        assert updates["isDeleted"] is True
        assert updates["deletedAt"].endswith("Z")
        mock_db.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hard_delete_removes_item(self, queries, mock_db):
        await queries.delete_product("prod_1")

        mock_db.delete.assert_awaited_once_with("Products", {"id": "prod_1"})

    @pytest.mark.asyncio
    async def test_category_lookup_uses_category_table(self, queries, mock_db):
        mock_db.get = AsyncMock(return_value={"id": "cat_1", "name": "Fruits"})

        category = await queries.get_category_by_id("cat_1")

        assert category["name"] == "Fruits"
        mock_db.get.assert_awaited_once_with("Categories", {"id": "cat_1"})


class TestCategoryQuery:
    """Tests for query_products_by_category pagination"""

    @pytest.mark.asyncio
    async def test_first_page(self, queries, mock_db):
        mock_db.query.return_value = envelope([{"id": "p1"}], cursor={"id": "p1"})

        result = await queries.query_products_by_category("cat_1", page=1, limit=1)

        params = mock_db.query.await_args.args[1]
        assert params["IndexName"] == "categoryId-index"
        assert params["Limit"] == 1
        assert params["ScanIndexForward"] is False
        assert "ExclusiveStartKey" not in params
        assert result["items"] == [{"id": "p1"}]
        assert result["last_evaluated_key"] == {"id": "p1"}

    @pytest.mark.asyncio
    async def test_later_page_walks_cursors(self, queries, mock_db):
        mock_db.query.side_effect = [
            envelope([{"id": "p1"}], cursor={"id": "p1"}),
            envelope([{"id": "p2"}], cursor={"id": "p2"}),
            envelope([{"id": "p3"}]),
        ]

        result = await queries.query_products_by_category("cat_1", page=3, limit=1)

        assert mock_db.query.await_count == 3
        last_params = mock_db.query.await_args.args[1]
        assert last_params["ExclusiveStartKey"] == {"id": "p2"}
        assert result["items"] == [{"id": "p3"}]
        assert result["page"] == 3

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, queries, mock_db):
        mock_db.query.return_value = envelope([{"id": "p1"}])

        result = await queries.query_products_by_category("cat_1", page=4, limit=1)

        assert result["items"] == []
        assert mock_db.query.await_count == 1


class TestScans:
    """Tests for scan based queries"""

    @pytest.mark.asyncio
    async def test_get_all_products_with_cursor(self, queries, mock_db):
        mock_db.scan.return_value = envelope([{"id": "p1"}])

        await queries.get_all_products(limit=10, filters={"status": "in-stock"}, last_evaluated_key={"id": "p0"})

        params = mock_db.scan.await_args.args[1]
        assert params["Limit"] == 10
        assert params["ExclusiveStartKey"] == {"id": "p0"}
        assert "FilterExpression" in params
        assert "ScanIndexForward" not in params

    @pytest.mark.asyncio
    async def test_get_all_products_without_filters(self, queries, mock_db):
        mock_db.scan.return_value = envelope([])

        await queries.get_all_products()

        params = mock_db.scan.await_args.args[1]
        assert params == {"Limit": 20}

    @pytest.mark.asyncio
    async def test_search_collects_across_pages(self, queries, mock_db):
        mock_db.scan.side_effect = [
            envelope([{"id": "p1"}], cursor={"id": "p1"}),
            envelope([{"id": "p2"}, {"id": "p3"}], cursor={"id": "p3"}),
        ]

        result = await queries.search_products("Tom", limit=2)

        assert [p["id"] for p in result] == ["p1", "p2"]
        assert mock_db.scan.await_count == 2

    @pytest.mark.asyncio
    async def test_low_stock_reads_every_page(self, queries, mock_db):
        mock_db.scan.side_effect = [
            envelope([{"id": "p1"}], cursor={"id": "p1"}),
            envelope([{"id": "p2"}]),
        ]

        result = await queries.get_products_with_low_stock()

        assert [p["id"] for p in result] == ["p1", "p2"]
        params = mock_db.scan.await_args.args[1]
        assert params["FilterExpression"] == "lowStockAlert > :zero AND #stock <= lowStockAlert"


class TestLookups:
    """Tests for existence and batch lookups"""

    @pytest.mark.asyncio
    async def test_product_exists(self, queries, mock_db):
        assert await queries.product_exists("prod_1") is False

        mock_db.get = AsyncMock(return_value={"id": "prod_1"})
        assert await queries.product_exists("prod_1") is True

    @pytest.mark.asyncio
    async def test_batch_get_products(self, queries, mock_db):
        mock_db.batch_get = AsyncMock(return_value=[{"id": "p1"}, {"id": "p2"}])

        result = await queries.batch_get_products(["p1", "p2"])

        assert len(result) == 2
        mock_db.batch_get.assert_awaited_once_with("Products", [{"id": "p1"}, {"id": "p2"}])

    @pytest.mark.asyncio
    async def test_count_products_by_category(self, queries, mock_db):
        mock_db.query.return_value = {"items": [], "count": 7, "scanned_count": 7, "last_evaluated_key": None}

        assert await queries.count_products_by_category("cat_1") == 7
        assert mock_db.query.await_args.args[1]["Select"] == "COUNT"
