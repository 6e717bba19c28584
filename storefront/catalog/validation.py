"""
Schema checks for product data coming back from the storefront API.

Nothing enters the product cache or reaches a caller without passing through
``validate_product`` / ``validate_products``. Input may use camelCase (API
wire format) or snake_case keys.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from storefront.catalog.contracts import ProductVariation, ShopAvailability, ShopProduct, VariationOption

logger = logging.getLogger(__name__)

_AVAILABILITIES = {a.value for a in ShopAvailability}
_VARIATION_TYPES = {"color", "size", "style"}


class ProductValidationError(ValueError):
    def __init__(self, message: str, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


def is_valid_availability(value: Any) -> bool:
    return isinstance(value, str) and value in _AVAILABILITIES


def is_valid_variation_type(value: Any) -> bool:
    return isinstance(value, str) and value in _VARIATION_TYPES


def _pick(data: Dict[str, Any], camel: str, snake: str) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)


def _to_number(value: Any) -> Optional[float]:
    """Numeric coercion for price/inventory: numbers and numeric strings only."""
    if _is_number(value):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def _string_list(value: Any, field: str, message: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProductValidationError(f"{message} must be an array", field, value)
    if not all(isinstance(item, str) for item in value):
        raise ProductValidationError(f"{message} must be an array of strings", field, value)
    return list(value)


def validate_variation_option(option: Any) -> VariationOption:
    if not isinstance(option, dict):
        raise ProductValidationError("Variation option must be an object", "variationOption", option)

    value = option.get("value")
    if not isinstance(value, str) or not value:
        raise ProductValidationError("Variation option value must be a non-empty string", "variationOption.value", value)

    label = option.get("label")
    if not isinstance(label, str) or not label:
        raise ProductValidationError("Variation option label must be a non-empty string", "variationOption.label", label)

    validated: Dict[str, Any] = {"value": value, "label": label}

    price_modifier = _pick(option, "priceModifier", "price_modifier")
    if price_modifier is not None:
        if not _is_number(price_modifier):
            raise ProductValidationError(
                "Variation option priceModifier must be a number", "variationOption.priceModifier", price_modifier
            )
        validated["price_modifier"] = float(price_modifier)

    inventory = option.get("inventory")
    if inventory is not None:
        if not _is_number(inventory) or inventory < 0 or not float(inventory).is_integer():
            raise ProductValidationError(
                "Variation option inventory must be a non-negative number", "variationOption.inventory", inventory
            )
        validated["inventory"] = int(inventory)

    images = option.get("images")
    if images is not None:
        validated["images"] = _string_list(images, "variationOption.images", "Variation option images")

    return VariationOption(**validated)


def validate_product_variation(variation: Any) -> ProductVariation:
    if not isinstance(variation, dict):
        raise ProductValidationError("Product variation must be an object", "variation", variation)

    vtype = variation.get("type")
    if not is_valid_variation_type(vtype):
        raise ProductValidationError('Product variation type must be "color", "size", or "style"', "variation.type", vtype)

    name = variation.get("name")
    if not isinstance(name, str) or not name:
        raise ProductValidationError("Product variation name must be a non-empty string", "variation.name", name)

    options = variation.get("options")
    if not isinstance(options, list) or not options:
        raise ProductValidationError("Product variation options must be a non-empty array", "variation.options", options)

    validated_options = []
    for index, opt in enumerate(options):
        try:
            validated_options.append(validate_variation_option(opt))
        except ProductValidationError as e:
            raise ProductValidationError(
                f"Invalid variation option at index {index}: {e}", f"variation.options[{index}]", opt
            ) from e

    return ProductVariation(type=vtype, name=name, options=validated_options)


def validate_product(data: Any) -> ShopProduct:
    """
    Validate and sanitise one product from an API response.

    Raises:
        ProductValidationError: naming the offending field and value
    """
    if not isinstance(data, dict):
        raise ProductValidationError("Product data must be an object", "product", data)

    product_id = data.get("id")
    if isinstance(product_id, bool) or not isinstance(product_id, (str, int, float)):
        raise ProductValidationError("Product id must be a string or number", "id", product_id)

    slug = data.get("slug")
    if not isinstance(slug, str) or not slug:
        raise ProductValidationError("Product slug must be a non-empty string", "slug", slug)

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise ProductValidationError("Product name must be a non-empty string", "name", name)

    price = _to_number(data.get("price"))
    if price is None or price < 0:
        raise ProductValidationError("Product price must be a non-negative number", "price", data.get("price"))

    inventory = _to_number(data.get("inventory"))
    if inventory is None or inventory < 0 or not float(inventory).is_integer():
        raise ProductValidationError(
            "Product inventory must be a non-negative number", "inventory", data.get("inventory")
        )

    availability = data.get("availability") or ShopAvailability.IN_STOCK.value
    if not is_valid_availability(availability):
        raise ProductValidationError(
            'Product availability must be "in_stock", "low_stock", or "backorder"', "availability", availability
        )

    images = _string_list(data.get("images"), "images", "Product images")
    tags = _string_list(data.get("tags"), "tags", "Product tags")

    variations = None
    raw_variations = data.get("variations")
    if raw_variations is not None:
        if not isinstance(raw_variations, list):
            raise ProductValidationError("Product variations must be an array", "variations", raw_variations)
        variations = []
        for index, v in enumerate(raw_variations):
            try:
                variations.append(validate_product_variation(v))
            except ProductValidationError as e:
                raise ProductValidationError(f"Invalid variation at index {index}: {e}", f"variations[{index}]", v) from e

    if isinstance(product_id, float) and product_id.is_integer():
        product_id = int(product_id)

    try:
        return ShopProduct(
            id=str(product_id),
            slug=slug,
            name=name,
            category=str(data.get("category") or ""),
            price=price,
            currency=str(data.get("currency") or "GHS"),
            tags=tags,
            impact_statement=str(_pick(data, "impactStatement", "impact_statement") or ""),
            description=str(data.get("description") or ""),
            images=images,
            availability=availability,
            inventory=int(inventory),
            variations=variations,
        )
    except ValidationError as e:
        raise ProductValidationError(f"Product failed schema validation: {e}", "product", data) from e


def validate_products(data: Any) -> List[ShopProduct]:
    """
    Validate a list of products, skipping (and logging) the invalid ones.

    Raises:
        ProductValidationError: if ``data`` is not a list at all
    """
    if not isinstance(data, list):
        raise ProductValidationError("Products data must be an array", "products", data)

    validated: List[ShopProduct] = []
    failures = 0
    for index, item in enumerate(data):
        try:
            validated.append(validate_product(item))
        except ProductValidationError as e:
            failures += 1
            logger.error(
                "[Product Validation] Failed to validate product at index %d: %s (field=%s value=%r)",
                index,
                e,
                e.field,
                e.value,
            )

    if failures:
        logger.warning("[Product Validation] %d of %d products failed validation and were skipped", failures, len(data))

    return validated


def log_validation_error(error: ProductValidationError, context: str) -> None:
    logger.error(
        "[Product Validation Error] %s: %s (field=%s value=%r at %s)",
        context,
        error,
        error.field,
        error.value,
        datetime.utcnow().isoformat(),
    )
