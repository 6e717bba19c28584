"""Order helpers shared by the checkout endpoints and the webhook handlers."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class OrderValidationError(ValueError):
    """An order line refers to a missing product, variation or stock level."""


def format_order_number(order_id: int) -> str:
    return f"MF-{int(order_id):08d}"


def _coerce_product_id(raw: Any) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def validate_order_items(repository, items: Iterable[Dict[str, Any]]) -> None:
    """
    Check every order line against stored products.

    Lines with selected variations are checked against each chosen option's
    inventory (options without an inventory figure are not limited); lines
    without variations are checked against the product's inventory.

    Raises:
        OrderValidationError: on the first line that cannot be fulfilled
    """
    for item in items:
        raw_id = item.get("productId")
        quantity = int(item.get("quantity") or 0)
        product_id = _coerce_product_id(raw_id)
        product = repository.get_product_by_id(product_id) if product_id is not None else None
        if product is None:
            raise OrderValidationError(f"Product with ID {raw_id} not found.")

        selected = item.get("selectedVariations") or {}
        if selected:
            if not product.variations:
                raise OrderValidationError(f"Product {product.name} does not have variations.")

            for variation_type, selected_value in selected.items():
                variation = next((v for v in product.variations if v.get("type") == variation_type), None)
                if variation is None:
                    raise OrderValidationError(f"Product {product.name} does not have {variation_type} variation.")

                option = next((o for o in variation.get("options", []) if o.get("value") == selected_value), None)
                if option is None:
                    raise OrderValidationError(
                        f"Invalid {variation_type} option '{selected_value}' for product {product.name}."
                    )

                available = option.get("inventory")
                if available is not None and available < quantity:
                    raise OrderValidationError(
                        f"Insufficient inventory for {product.name} ({variation_type}: {selected_value}). "
                        f"Available: {available}, Requested: {quantity}"
                    )
        elif product.inventory < quantity:
            raise OrderValidationError(
                f"Insufficient inventory for {product.name}. "
                f"Available: {product.inventory}, Requested: {quantity}"
            )

    logger.debug("Order items validated")
