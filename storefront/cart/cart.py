"""
Shopping cart persisted to a durable key-value store.

Line items are keyed by ``id``, which already encodes the selected variations
(e.g. ``mawu-kente-heritage-tee-indigo-m``), so two sizes of the same tee are
separate lines. Every mutation writes the whole cart back to the store.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

from storefront.cache.stores import KeyValueStore, StorageError
from storefront.catalog.contracts import ShopAvailability
from storefront.clients.api_client import ShopApiClient
from storefront.utils.monitoring import log_api_error, log_warning, measure_api_call

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "mawu_cart_items"
PRICE_TOLERANCE = 0.01


class CartError(Exception):
    """Raised when a cart change would break an inventory limit."""


@dataclass
class CartItem:
    id: str
    name: str
    price: float
    image: str = ""
    quantity: int = 1
    impact_statement: Optional[str] = None
    selected_variations: Dict[str, str] = field(default_factory=dict)
    product_id: Optional[str] = None
    product_slug: Optional[str] = None
    max_inventory: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            price=float(data.get("price", 0)),
            image=str(data.get("image", "")),
            quantity=int(data.get("quantity", 1)),
            impact_statement=data.get("impact_statement"),
            selected_variations=dict(data.get("selected_variations") or {}),
            product_id=data.get("product_id"),
            product_slug=data.get("product_slug"),
            max_inventory=data.get("max_inventory"),
        )


@dataclass
class CartValidationResult:
    item_id: str
    valid: bool
    message: Optional[str] = None
    suggested_quantity: Optional[int] = None


class Cart:
    def __init__(self, store: KeyValueStore, storage_key: str = CART_STORAGE_KEY, currency_label: str = "GHS") -> None:
        self.store = store
        self.storage_key = storage_key
        self.currency_label = currency_label
        self.items: List[CartItem] = self._load()

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #
    def _load(self) -> List[CartItem]:
        try:
            stored = self.store.get(self.storage_key)
            if stored:
                return [CartItem.from_dict(item) for item in json.loads(stored)]
        except (StorageError, ValueError, KeyError, TypeError) as e:
            logger.error("Failed to load cart from storage: %s", e)
        return []

    def _save(self) -> None:
        try:
            self.store.set(self.storage_key, json.dumps([asdict(item) for item in self.items]))
        except StorageError as e:
            logger.error("Failed to save cart to storage: %s", e)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def get_item(self, item_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def add_item(self, item: CartItem) -> CartItem:
        """
        Add one unit of ``item``. An existing line with the same id is
        incremented instead; the incoming ``quantity`` is ignored.

        Raises:
            CartError: if the line is already at its inventory limit or the
                item is out of stock
        """
        existing = self.get_item(item.id)
        if existing is not None:
            new_quantity = existing.quantity + 1
            if existing.max_inventory and new_quantity > existing.max_inventory:
                logger.warning("Cannot add more %s. Maximum inventory: %s", existing.id, existing.max_inventory)
                raise CartError(f"Only {existing.max_inventory} items available in stock")
            existing.quantity = new_quantity
            self._save()
            return existing

        if item.max_inventory is not None and item.max_inventory <= 0:
            raise CartError("This item is currently out of stock")

        line = replace(item, quantity=1, selected_variations=dict(item.selected_variations))
        self.items.append(line)
        self._save()
        return line

    def remove_item(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]
        self._save()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(item_id)
            return

        item = self.get_item(item_id)
        if item is None:
            return
        if item.max_inventory and quantity > item.max_inventory:
            logger.warning("Cannot set quantity to %d. Maximum inventory: %s", quantity, item.max_inventory)
            raise CartError(f"Only {item.max_inventory} items available in stock")
        item.quantity = quantity
        self._save()

    def clear(self) -> None:
        self.items = []
        self._save()

    @property
    def total(self) -> float:
        return sum(item.price * item.quantity for item in self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    # ------------------------------------------------------------------ #
    # Inventory reconciliation
    # ------------------------------------------------------------------ #
    async def validate(self, api_client: ShopApiClient) -> List[CartValidationResult]:
        """
        Check every line against the live API (never the cache).

        Items are checked one after another; a failure to fetch one item marks
        only that item invalid.
        """
        results: List[CartValidationResult] = []
        for item in list(self.items):
            identifier = item.product_slug or item.product_id
            if not identifier:
                log_warning(
                    "Cart item missing product identifier",
                    "Cart.validate",
                    {"itemId": item.id, "itemName": item.name},
                )
                results.append(
                    CartValidationResult(item_id=item.id, valid=True, message="Unable to validate - no product identifier")
                )
                continue

            endpoint = f"/api/products/{identifier}"
            try:
                response = await measure_api_call(
                    f"GET {endpoint} (cart validation)", lambda: api_client.get(endpoint)
                )
                product = response["product"]
                results.append(self._check_item(item, product))
            except Exception as e:
                log_api_error(
                    e,
                    "Cart.validate",
                    {"itemId": item.id, "itemName": item.name, "productId": item.product_id},
                )
                results.append(
                    CartValidationResult(item_id=item.id, valid=False, message="Unable to validate item availability")
                )
        return results

    def _check_item(self, item: CartItem, product: Dict[str, Any]) -> CartValidationResult:
        result = CartValidationResult(item_id=item.id, valid=True)
        availability = product.get("availability")
        inventory = int(product["inventory"])
        price = float(product["price"])

        if availability == ShopAvailability.BACKORDER.value:
            result.valid = False
            result.message = "Item is currently on backorder"

        if inventory <= 0:
            result.valid = False
            result.message = "Item is out of stock"
            result.suggested_quantity = 0
        elif item.quantity > inventory:
            result.valid = False
            result.message = f"Only {inventory} available"
            result.suggested_quantity = inventory

        if abs(item.price - price) > PRICE_TOLERANCE:
            if not result.message:
                result.message = (
                    f"Price updated from {self.currency_label} {item.price:.2f} to {self.currency_label} {price:.2f}"
                )
            else:
                result.message += f" (Price also changed to {self.currency_label} {price:.2f})"

        if availability == ShopAvailability.LOW_STOCK.value and result.valid:
            result.message = f"Low stock - only {inventory} remaining"

        return result

    def apply_suggestions(self, results: List[CartValidationResult]) -> None:
        """Apply suggested quantities from ``validate``; a suggestion of 0 removes the line."""
        for result in results:
            if result.suggested_quantity is not None:
                self.update_quantity(result.item_id, result.suggested_quantity)
