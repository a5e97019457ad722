"""
Product Catalog Test Configuration and Fixtures

This module provides:
- Test environment variables (set before the package is imported)
- Mocked query layer / DynamoDB resource fixtures
- Sample product and category data
- API Gateway event factory and FastAPI test client
"""

import os
import sys
import json
import pytest
from typing import Any, Dict, Generator, Optional
from unittest.mock import MagicMock, AsyncMock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["AWS_REGION"] = "ap-south-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["PRODUCTS_TABLE"] = "Products-test"
os.environ["CATEGORY_TABLE_NAME"] = "Category_management-test"
os.environ["LOG_LEVEL"] = "WARNING"

from product_catalog.core.retry import RetryConfig
from product_catalog.database.dynamodb import DynamoDBConnection
from product_catalog.services.product_service import ProductService


# =============================================================================
# Sample Data
# =============================================================================

@pytest.fixture
def sample_category() -> Dict[str, Any]:
    return {"id": "cat_vegetables", "name": "Vegetables"}


@pytest.fixture
def sample_product_input() -> Dict[str, Any]:
    """Valid create payload"""
    return {
        "name": "Organic Tomatoes",
        "categoryId": "cat_vegetables",
        "basePrice": 50,
        "purchasePrice": 40,
        "stock": 100,
        "unit": "kg",
        "lowStockAlert": 10,
    }


@pytest.fixture
def sample_product() -> Dict[str, Any]:
    """Stored product as returned by the query layer"""
    return {
        "id": "prod_1234",
        "name": "Organic Tomatoes",
        "description": "Farm fresh",
        "categoryId": "cat_vegetables",
        "categoryName": "Vegetables",
        "subCategoryId": "",
        "subCategoryName": "",
        "groupId": "",
        "basePrice": 50,
        "purchasePrice": 40,
        "comparePrice": 0,
        "stock": 100,
        "unit": "kg",
        "stock_mode": "parent",
        "status": "in-stock",
        "lowStockAlert": 10,
        "variants": [],
        "images": [],
        "tags": [],
        "onB2C": True,
        "isActive": True,
        "isDeleted": False,
        "createdAt": "2024-05-01T10:00:00.000Z",
        "updatedAt": "2024-05-01T10:00:00.000Z",
        "version": 1,
    }


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_queries(sample_category, sample_product):
    """ProductQueries stand-in with async methods"""
    mock = MagicMock()
    mock.get_category_by_id = AsyncMock(return_value=sample_category)
    mock.save_product = AsyncMock(return_value={})
    mock.get_product_by_id = AsyncMock(return_value=dict(sample_product))
    mock.update_product = AsyncMock(side_effect=lambda product_id, updates: {**sample_product, **updates})
    mock.delete_product = AsyncMock(return_value={})
    mock.soft_delete_product = AsyncMock(return_value={})
    mock.query_products_by_category = AsyncMock(return_value={
        "items": [dict(sample_product)],
        "count": 1,
        "page": 1,
        "limit": 20,
        "last_evaluated_key": None,
    })
    mock.count_products_by_category = AsyncMock(return_value=1)
    mock.search_products = AsyncMock(return_value=[dict(sample_product)])
    mock.get_all_products = AsyncMock(return_value={
        "items": [dict(sample_product)],
        "count": 1,
        "scanned_count": 1,
        "last_evaluated_key": None,
    })
    mock.get_featured_products = AsyncMock(return_value=[])
    mock.get_products_by_group_id = AsyncMock(return_value=[])
    mock.get_products_with_low_stock = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def product_service(mock_queries) -> ProductService:
    return ProductService(mock_queries)


@pytest.fixture
def mock_dynamodb():
    """Mock boto3 DynamoDB resource; every Table() call returns the same table mock"""
    mock = MagicMock()
    mock.Table.return_value = MagicMock()
    return mock


@pytest.fixture
def db(mock_dynamodb) -> DynamoDBConnection:
    """Connection over the mocked resource with zero retry delay"""
    return DynamoDBConnection(
        resource=mock_dynamodb,
        retry_config=RetryConfig(max_attempts=3, base_delay=0),
    )


# =============================================================================
# Event / Client Fixtures
# =============================================================================

@pytest.fixture
def make_event():
    """Factory for API Gateway proxy events"""

    def _make_event(
        method: str = "GET",
        path: str = "/product",
        body: Any = None,
        query: Optional[Dict[str, str]] = None,
        path_params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        if body is not None and not isinstance(body, str):
            body = json.dumps(body)
        return {
            "httpMethod": method,
            "path": path,
            "body": body,
            "queryStringParameters": query,
            "pathParameters": path_params,
            "isBase64Encoded": False,
        }

    return _make_event


@pytest.fixture
def client(product_service) -> Generator:
    """FastAPI test client with the product service overridden"""
    from fastapi.testclient import TestClient
    from product_catalog.handlers.base import get_product_service
    from product_catalog.main import app

    app.dependency_overrides[get_product_service] = lambda: product_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
