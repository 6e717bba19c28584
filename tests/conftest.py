"""Pytest fixtures for the storefront cache, catalog, cart and API tests."""

import pytest

from storefront.cache.product_cache import ProductCache
from storefront.cache.stores import MemoryStore
from storefront.database.memory import MemoryShopRepository
from storefront.utils import monitoring


class FakeClock:
    """Settable replacement for time.time (seconds)."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _reset_monitoring():
    monitoring.reset_metrics()
    yield
    monitoring.reset_metrics()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def cache(store, clock):
    return ProductCache(store, clock=clock)


@pytest.fixture
def repo():
    """In-memory shop repository for tests."""
    return MemoryShopRepository()


def _product_payload(**overrides):
    data = {
        "id": "volta-water-bottle",
        "slug": "volta-water-bottle",
        "name": "Volta Flow Water Bottle",
        "category": "Accessories",
        "price": 145,
        "currency": "GHS",
        "tags": ["BPA Free"],
        "impactStatement": "Delivers clean water.",
        "description": "Insulated bottle.",
        "images": ["https://example.org/bottle.jpg"],
        "availability": "in_stock",
        "inventory": 120,
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_product():
    """Factory for camelCase product payloads as the API returns them."""
    return _product_payload

