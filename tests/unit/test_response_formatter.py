"""
Unit Tests for the Response Formatter
"""

import json
import re
from decimal import Decimal

from product_catalog.utils import response_formatter


def body_of(response):
    return json.loads(response["body"])


class TestEnvelopes:
    """Tests for success / created / no_content / paginated / error"""

    def test_success_envelope(self):
        response = response_formatter.success({"id": "prod_1"}, "Done")

        assert response["statusCode"] == 200
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"
        assert response["headers"]["Content-Type"] == "application/json"
        body = body_of(response)
        assert body["status"] == "success"
        assert body["data"] == {"id": "prod_1"}
        assert body["message"] == "Done"
        assert body["meta"]["timestamp"].endswith("Z")
        assert body["meta"]["requestId"].startswith("req_")

    def test_created(self):
        response = response_formatter.created({"id": "prod_1"})

        assert response["statusCode"] == 201
        assert body_of(response)["message"] == "Resource created successfully"

    def test_no_content_has_no_body(self):
        response = response_formatter.no_content()

        assert response["statusCode"] == 204
        assert "body" not in response
        assert "Access-Control-Allow-Origin" in response["headers"]

    def test_paginated(self):
        response = response_formatter.paginated([{"id": "p"}], page=2, limit=10, total=35,
                                                last_evaluated_key={"id": "p"})

        pagination = body_of(response)["pagination"]
        assert pagination == {
            "page": 2,
            "limit": 10,
            "total": 35,
            "pages": 4,
            "hasNextPage": True,
            "hasPrevPage": True,
            "lastEvaluatedKey": {"id": "p"},
        }

    def test_paginated_empty(self):
        pagination = body_of(response_formatter.paginated())["pagination"]

        assert pagination["pages"] == 0
        assert pagination["hasNextPage"] is False
        assert pagination["hasPrevPage"] is False
        assert pagination["lastEvaluatedKey"] is None

    def test_decimal_values_serialize(self):
        response = response_formatter.success({"price": Decimal("12.50"), "stock": Decimal("3")})

        assert body_of(response)["data"] == {"price": 12.5, "stock": 3}


class TestFormatting:
    """Tests for product / variant formatting"""

    def test_format_product_hides_delete_fields(self, sample_product):
        formatted = response_formatter.format_product({**sample_product, "deletedAt": "x"})

        assert formatted["id"] == "prod_1234"
        assert "isDeleted" not in formatted
        assert "deletedAt" not in formatted
        assert formatted["stock_mode"] == "parent"

    def test_format_product_defaults(self):
        formatted = response_formatter.format_product({"id": "prod_1", "name": "Rice"})

        assert formatted["description"] == ""
        assert formatted["status"] == "in-stock"
        assert formatted["variants"] == []
        assert formatted["onB2C"] is True
        assert formatted["version"] == 1

    def test_format_variant_defaults(self):
        formatted = response_formatter.format_variant({"id": "var_1_0", "onB2C": False})

        assert formatted["stock"] == 0
        assert formatted["onB2C"] is False
        assert formatted["images"] == []

    def test_format_none(self):
        assert response_formatter.format_product(None) is None
        assert response_formatter.format_variant(None) is None

    def test_request_id_format(self):
        assert re.fullmatch(r"req_\d{13}_[0-9a-z]{9}", response_formatter.generate_request_id())
