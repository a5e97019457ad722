"""
Unit Converter
Conversion between weight and volume units sharing a category.

Weight converts through kilograms, volume through liters. Unknown or
cross-category pairs fall back to 1:1 (the quantity is returned unchanged)
instead of raising; variant pricing relies on that leniency.
"""

import logging
import math
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

# Weight conversions to kilogram (base unit)
WEIGHT_TO_KG: Dict[str, float] = {
    "kg": 1.0,
    "kilogram": 1.0,
    "kilograms": 1.0,
    "g": 0.001,
    "gram": 0.001,
    "grams": 0.001,
    "gms": 0.001,
    "mg": 0.000001,
    "milligram": 0.000001,
}

# Volume conversions to liter (base unit)
VOLUME_TO_L: Dict[str, float] = {
    "l": 1.0,
    "liter": 1.0,
    "litre": 1.0,
    "liters": 1.0,
    "ml": 0.001,
    "milliliter": 0.001,
    "millilitre": 0.001,
    "milliliters": 0.001,
    "pl": 0.00001,
    "mm3": 0.000001,
}

UNIT_DISPLAY_NAMES: Dict[str, str] = {
    "kg": "Kilogram",
    "kilogram": "Kilogram",
    "kilograms": "Kilogram",
    "g": "Gram",
    "gram": "Gram",
    "grams": "Gram",
    "gms": "Gram",
    "mg": "Milligram",
    "milligram": "Milligram",
    "l": "Liter",
    "liter": "Liter",
    "litre": "Liter",
    "liters": "Liter",
    "ml": "Milliliter",
    "milliliter": "Milliliter",
    "millilitre": "Milliliter",
    "milliliters": "Milliliter",
}

# Leading decimal number, e.g. "2.5kg" -> 2.5
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def _parse_quantity(quantity: Any) -> float:
    """Parse like a lenient parseFloat; anything unusable becomes 0"""
    if isinstance(quantity, bool) or quantity is None:
        return 0.0
    if isinstance(quantity, (int, float)):
        qty = float(quantity)
    elif isinstance(quantity, str):
        match = _LEADING_NUMBER.match(quantity)
        if not match:
            return 0.0
        qty = float(match.group(0))
    else:
        return 0.0
    return 0.0 if math.isnan(qty) else qty


def normalize_unit(unit: Any) -> str:
    """Trim and lowercase; non-strings normalize to an empty string"""
    if not isinstance(unit, str):
        return ""
    return unit.strip().lower()


def convert(quantity: Any, from_unit: Any, to_unit: Any) -> float:
    """
    Convert ``quantity`` from ``from_unit`` to ``to_unit``.

    Non-positive or unparseable quantities give 0. Equal units short-circuit
    before any registry lookup, so even unregistered units convert to
    themselves.
    """
    qty = _parse_quantity(quantity)
    if qty <= 0:
        return 0

    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)

    if source == target:
        return qty

    if source in WEIGHT_TO_KG and target in WEIGHT_TO_KG:
        return qty * WEIGHT_TO_KG[source] / WEIGHT_TO_KG[target]

    if source in VOLUME_TO_L and target in VOLUME_TO_L:
        return qty * VOLUME_TO_L[source] / VOLUME_TO_L[target]

    logger.warning(f"Unit conversion: unknown unit pair [{source} -> {target}], using 1:1 conversion")
    return qty


def is_valid_unit(unit: Any) -> bool:
    normalized = normalize_unit(unit)
    return normalized in WEIGHT_TO_KG or normalized in VOLUME_TO_L


def get_unit_category(unit: Any) -> Optional[str]:
    """Return "weight", "volume" or None"""
    normalized = normalize_unit(unit)
    if normalized in WEIGHT_TO_KG:
        return "weight"
    if normalized in VOLUME_TO_L:
        return "volume"
    return None


def are_units_compatible(unit1: Any, unit2: Any) -> bool:
    """True when both units are registered in the same category"""
    category = get_unit_category(unit1)
    return category is not None and category == get_unit_category(unit2)


def get_conversion_factor(from_unit: Any, to_unit: Any) -> Optional[float]:
    """Multiplier from ``from_unit`` to ``to_unit``, or None if incompatible"""
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)

    if source in WEIGHT_TO_KG and target in WEIGHT_TO_KG:
        return WEIGHT_TO_KG[source] / WEIGHT_TO_KG[target]

    if source in VOLUME_TO_L and target in VOLUME_TO_L:
        return VOLUME_TO_L[source] / VOLUME_TO_L[target]

    return None


def get_supported_units() -> Dict[str, Dict[str, Any]]:
    return {
        "weight": {
            "units": list(WEIGHT_TO_KG),
            "baseUnit": "kg",
            "description": "Weight units",
        },
        "volume": {
            "units": list(VOLUME_TO_L),
            "baseUnit": "l",
            "description": "Volume units",
        },
    }


def get_unit_display_name(unit: Any) -> Any:
    """Human-readable unit name; unknown units are returned as given"""
    return UNIT_DISPLAY_NAMES.get(normalize_unit(unit), unit)
