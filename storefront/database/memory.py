"""
Lightweight in-memory shop repository for local development and tests.

Implements the same interface as storefront.database.sql so the API runs
without a database. Ids are assigned from per-table counters starting at 1.
"""

from __future__ import annotations

import copy
from dataclasses import fields, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from storefront.database.records import (
    DonationRecord,
    DuplicateSlugError,
    OrderRecord,
    ProductRecord,
)

_PRODUCT_FIELDS = {f.name for f in fields(ProductRecord)} - {"id", "created_at", "updated_at"}
_ORDER_FIELDS = {f.name for f in fields(OrderRecord)} - {"id", "created_at", "updated_at"}
_DONATION_FIELDS = {f.name for f in fields(DonationRecord)} - {"id", "created_at"}


def _newest_first(records: List[Any]) -> List[Any]:
    return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)


class MemoryShopRepository:
    """In-memory stand-in for the SQLAlchemy repository. NOT for production."""

    def __init__(self) -> None:
        self._products: Dict[int, ProductRecord] = {}
        self._orders: Dict[int, OrderRecord] = {}
        self._donations: Dict[int, DonationRecord] = {}
        self._next_ids = {"products": 1, "orders": 1, "donations": 1}

    def _next_id(self, table: str) -> int:
        value = self._next_ids[table]
        self._next_ids[table] = value + 1
        return value

    # ------------------------------------------------------------------ #
    # Schema / lifecycle
    # ------------------------------------------------------------------ #
    def create_tables(self) -> None:
        """No-op; kept so callers can treat both repositories the same."""
        return None

    def ping(self) -> bool:
        return True

    # ------------------------------------------------------------------ #
    # Products
    # ------------------------------------------------------------------ #
    def list_products(self) -> List[ProductRecord]:
        return [copy.deepcopy(p) for p in _newest_first(list(self._products.values()))]

    def get_product_by_id(self, product_id: int) -> Optional[ProductRecord]:
        product = self._products.get(product_id)
        return copy.deepcopy(product) if product else None

    def get_product_by_slug(self, slug: str) -> Optional[ProductRecord]:
        for product in self._products.values():
            if product.slug == slug:
                return copy.deepcopy(product)
        return None

    def create_product(self, data: Dict[str, Any]) -> ProductRecord:
        values = {k: copy.deepcopy(v) for k, v in data.items() if k in _PRODUCT_FIELDS}
        if self.get_product_by_slug(values["slug"]) is not None:
            raise DuplicateSlugError(values["slug"])
        product = ProductRecord(id=self._next_id("products"), **values)
        self._products[product.id] = product
        return copy.deepcopy(product)

    def update_product(self, product_id: int, data: Dict[str, Any]) -> Optional[ProductRecord]:
        product = self._products.get(product_id)
        if product is None:
            return None
        values = {k: copy.deepcopy(v) for k, v in data.items() if k in _PRODUCT_FIELDS}
        new_slug = values.get("slug")
        if new_slug and new_slug != product.slug and self.get_product_by_slug(new_slug) is not None:
            raise DuplicateSlugError(new_slug)
        updated = replace(product, updated_at=datetime.utcnow(), **values)
        self._products[product_id] = updated
        return copy.deepcopy(updated)

    def delete_product(self, product_id: int) -> bool:
        return self._products.pop(product_id, None) is not None

    # ------------------------------------------------------------------ #
    # Orders
    # ------------------------------------------------------------------ #
    def create_order(self, data: Dict[str, Any]) -> OrderRecord:
        values = {k: copy.deepcopy(v) for k, v in data.items() if k in _ORDER_FIELDS}
        order = OrderRecord(id=self._next_id("orders"), **values)
        self._orders[order.id] = order
        return copy.deepcopy(order)

    def list_orders(self) -> List[OrderRecord]:
        return [copy.deepcopy(o) for o in _newest_first(list(self._orders.values()))]

    def get_order_by_id(self, order_id: int) -> Optional[OrderRecord]:
        order = self._orders.get(order_id)
        return copy.deepcopy(order) if order else None

    def find_order_by_payment_intent(self, payment_intent_id: str) -> Optional[OrderRecord]:
        for order in self._orders.values():
            if order.stripe_payment_intent_id == payment_intent_id:
                return copy.deepcopy(order)
        return None

    def update_order_status(
        self, order_id: int, status: str, payment_intent_id: Optional[str] = None
    ) -> Optional[OrderRecord]:
        order = self._orders.get(order_id)
        if order is None:
            return None
        order.status = status
        order.updated_at = datetime.utcnow()
        if payment_intent_id:
            order.stripe_payment_intent_id = payment_intent_id
        return copy.deepcopy(order)

    def update_order_customer_info(
        self,
        order_id: int,
        customer_email: Optional[str],
        customer_name: Optional[str],
        shipping_address: Optional[Dict[str, Any]],
    ) -> Optional[OrderRecord]:
        order = self._orders.get(order_id)
        if order is None:
            return None
        order.customer_email = customer_email
        order.customer_name = customer_name
        order.shipping_address = copy.deepcopy(shipping_address)
        order.updated_at = datetime.utcnow()
        return copy.deepcopy(order)

    # ------------------------------------------------------------------ #
    # Donations
    # ------------------------------------------------------------------ #
    def create_donation(self, data: Dict[str, Any]) -> DonationRecord:
        values = {k: copy.deepcopy(v) for k, v in data.items() if k in _DONATION_FIELDS}
        donation = DonationRecord(id=self._next_id("donations"), **values)
        self._donations[donation.id] = donation
        return copy.deepcopy(donation)

    def list_donations(self) -> List[DonationRecord]:
        return [copy.deepcopy(d) for d in _newest_first(list(self._donations.values()))]

    def get_donation_by_id(self, donation_id: int) -> Optional[DonationRecord]:
        donation = self._donations.get(donation_id)
        return copy.deepcopy(donation) if donation else None

    def find_donation_by_payment_intent(self, payment_intent_id: str) -> Optional[DonationRecord]:
        for donation in self._donations.values():
            if donation.stripe_payment_intent_id == payment_intent_id:
                return copy.deepcopy(donation)
        return None

    def update_donation_status(
        self, donation_id: int, status: str, payment_intent_id: Optional[str] = None
    ) -> Optional[DonationRecord]:
        donation = self._donations.get(donation_id)
        if donation is None:
            return None
        donation.status = status
        if payment_intent_id:
            donation.stripe_payment_intent_id = payment_intent_id
        return copy.deepcopy(donation)
