"""
Product Validator
Validates product create/update payloads before they reach the service.

Every rule runs independently and all violations are collected; nothing
short-circuits. Nested fields are reported as ``variants[0].b2cQty``,
``images[2]`` and so on.
"""

import math
import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from product_catalog.services import unit_converter

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 2000
STOCK_MODES = ("parent", "variant")

# Alphanumerics, whitespace and - . , & ( )
PRODUCT_NAME_REGEX = re.compile(r"[a-zA-Z0-9\s\-.,&()]+")

URL_SCHEME_REGEX = re.compile(r"[a-zA-Z][a-zA-Z0-9+.\-]*")
# Schemes that are only meaningful with a host
HOST_SCHEMES = ("http", "https", "ftp", "ws", "wss")


@dataclass
class FieldError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def parse_number(value: Any) -> Optional[float]:
    """Numeric value of ``value`` or None if it is not a finite number"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) or math.isinf(number) else number


def is_non_negative_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, float):
        return value.is_integer() and value >= 0
    return False


def is_valid_url(url: Any) -> bool:
    """
    Absolute URL: a scheme followed by ``:``, no whitespace.

    ``data:`` and ``mailto:`` style URLs pass; web schemes also need a host.
    """
    if not isinstance(url, str) or not url or any(c.isspace() for c in url):
        return False
    scheme, sep, _ = url.partition(":")
    if not sep or not URL_SCHEME_REGEX.fullmatch(scheme):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme in HOST_SCHEMES:
        return bool(parsed.netloc)
    return True


def validate_price(price: Any, field_name: str = "price") -> Optional[FieldError]:
    if price is None:
        return FieldError(field_name, "Price is required")

    number = parse_number(price)
    if number is None:
        return FieldError(field_name, "Price must be a valid number")
    if number < 0:
        return FieldError(field_name, "Price cannot be negative")
    return None


def validate_product_name(name: Any) -> Optional[FieldError]:
    if not name or not isinstance(name, str):
        return FieldError("name", "Product name must be a string")

    if len(name) < MIN_NAME_LENGTH or len(name) > MAX_NAME_LENGTH:
        return FieldError(
            "name", f"Product name must be between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters"
        )

    if not PRODUCT_NAME_REGEX.fullmatch(name):
        return FieldError("name", "Product name contains invalid characters")

    return None


def validate_variant(variant: Any, index: int = 0) -> List[FieldError]:
    prefix = f"variants[{index}]"

    if not isinstance(variant, dict):
        return [FieldError(prefix, "Variant must be an object")]

    errors: List[FieldError] = []

    if not variant.get("name") or not isinstance(variant.get("name"), str):
        errors.append(FieldError(f"{prefix}.name", "Variant name is required"))

    qty = parse_number(variant.get("b2cQty"))
    if qty is None or qty <= 0:
        errors.append(FieldError(f"{prefix}.b2cQty", "B2C quantity is required and must be positive"))

    b2c_unit = variant.get("b2cUnit")
    if not b2c_unit or not isinstance(b2c_unit, str):
        errors.append(FieldError(f"{prefix}.b2cUnit", "B2C unit is required"))
    elif not unit_converter.is_valid_unit(b2c_unit):
        errors.append(FieldError(f"{prefix}.b2cUnit", "Invalid B2C unit"))

    for price_field in ("salePrice", "purchasePrice"):
        if variant.get(price_field) is not None:
            error = validate_price(variant[price_field], f"{prefix}.{price_field}")
            if error:
                errors.append(error)

    if variant.get("stock") is not None and not is_non_negative_integer(variant["stock"]):
        errors.append(FieldError(f"{prefix}.stock", "Stock must be a non-negative integer"))

    return errors


def _validate_optional_fields(data: Dict[str, Any], errors: List[FieldError]) -> None:
    """Rules shared by create and update; each applies only when the field is present"""
    for price_field in ("purchasePrice", "comparePrice"):
        if data.get(price_field) is not None:
            error = validate_price(data[price_field], price_field)
            if error:
                errors.append(error)

    if data.get("stock_mode") is not None and data["stock_mode"] not in STOCK_MODES:
        errors.append(FieldError("stock_mode", 'Stock mode must be either "parent" or "variant"'))

    if data.get("stock") is not None and not is_non_negative_integer(data["stock"]):
        errors.append(FieldError("stock", "Stock must be a non-negative integer"))

    if data.get("unit") and not unit_converter.is_valid_unit(data["unit"]):
        supported = ", ".join(unit_converter.WEIGHT_TO_KG) + ", " + ", ".join(unit_converter.VOLUME_TO_L)
        errors.append(FieldError("unit", f"Invalid unit. Supported units: {supported}"))

    if data.get("lowStockAlert") is not None and not is_non_negative_integer(data["lowStockAlert"]):
        errors.append(FieldError("lowStockAlert", "Low stock alert must be a non-negative integer"))

    description = data.get("description")
    if description is not None:
        if not isinstance(description, str):
            errors.append(FieldError("description", "Description must be a string"))
        elif len(description) > MAX_DESCRIPTION_LENGTH:
            errors.append(
                FieldError("description", f"Description must not exceed {MAX_DESCRIPTION_LENGTH} characters")
            )

    variants = data.get("variants")
    if variants is not None:
        if not isinstance(variants, list):
            errors.append(FieldError("variants", "Variants must be an array"))
        else:
            for index, variant in enumerate(variants):
                errors.extend(validate_variant(variant, index))

    images = data.get("images")
    if isinstance(images, list):
        for index, image in enumerate(images):
            if not is_valid_url(image):
                errors.append(FieldError(f"images[{index}]", "Each image must be a valid URL"))

    tags = data.get("tags")
    if isinstance(tags, list):
        for index, tag in enumerate(tags):
            if not isinstance(tag, str) or not tag.strip():
                errors.append(FieldError(f"tags[{index}]", "Each tag must be a non-empty string"))


def validate_product_input(data: Dict[str, Any]) -> List[FieldError]:
    """
    Validate a create payload.

    Returns:
        List of FieldError, empty when the payload is valid
    """
    errors: List[FieldError] = []

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append(FieldError("name", "Product name is required and must be a non-empty string"))
    else:
        name_error = validate_product_name(name)
        if name_error:
            errors.append(name_error)

    category_id = data.get("categoryId")
    if not category_id or not isinstance(category_id, str):
        errors.append(FieldError("categoryId", "Category ID is required"))

    price_error = validate_price(data.get("basePrice"), "basePrice")
    if price_error:
        errors.append(price_error)

    _validate_optional_fields(data, errors)
    return errors


def validate_update_data(data: Dict[str, Any]) -> List[FieldError]:
    """
    Validate a partial update payload: same rules as create, but only for the
    keys present. Absent fields are fine; a present-but-invalid one is not.
    """
    errors: List[FieldError] = []

    if "name" in data:
        name_error = validate_product_name(data["name"])
        if name_error:
            errors.append(name_error)

    if "categoryId" in data:
        category_id = data["categoryId"]
        if not category_id or not isinstance(category_id, str):
            errors.append(FieldError("categoryId", "Category ID must be a non-empty string"))

    if "basePrice" in data:
        price_error = validate_price(data["basePrice"], "basePrice")
        if price_error:
            errors.append(price_error)

    _validate_optional_fields(data, errors)
    return errors
