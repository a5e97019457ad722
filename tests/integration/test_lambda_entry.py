"""
Integration Tests for the synchronous Lambda entry points
"""

import json
import pytest
from types import SimpleNamespace
from unittest.mock import patch

from product_catalog.handlers import create_product, low_stock_products

pytestmark = pytest.mark.integration


class TestLambdaEntryPoints:
    """handler(event, context) wraps the async handle()"""

    def test_handler_uses_shared_service(self, make_event, product_service, sample_product_input):
        context = SimpleNamespace(aws_request_id="lambda-req-1")

        with patch("product_catalog.handlers.create_product.get_product_service", return_value=product_service):
            response = create_product.handler(make_event("POST", "/product", body=sample_product_input), context)

        assert response["statusCode"] == 201
        assert json.loads(response["body"])["data"]["name"] == "Organic Tomatoes"

    def test_handler_without_context(self, make_event, product_service):
        with patch("product_catalog.handlers.low_stock_products.get_product_service", return_value=product_service):
            response = low_stock_products.handler(make_event("GET", "/products/low-stock"))

        assert response["statusCode"] == 200
        assert json.loads(response["body"])["data"] == []

    def test_mangum_entry_wraps_app(self):
        from mangum import Mangum
        from product_catalog.lambda_handler import handler
        from product_catalog.main import app

        assert isinstance(handler, Mangum)
        assert handler.app is app
