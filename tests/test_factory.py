import pytest

from storefront.cache.stores import MemoryStore
from storefront.cart.cart import CartItem
from storefront.clients.factory import build_storefront
from storefront.utils.config_loader import ShopConfig


class FakeApi:
    def __init__(self, product):
        self.product = product
        self.calls = 0

    async def get(self, path, retry=None):
        self.calls += 1
        if path == "/api/products":
            return {"products": [self.product]}
        return {"product": self.product}


@pytest.mark.asyncio
async def test_storefront_shares_store_between_cache_and_cart(make_product):
    store = MemoryStore()
    api = FakeApi(make_product())
    shop = build_storefront(config=ShopConfig(), store=store, api_client=api)

    result = await shop.catalog.fetch_products()
    assert result.source == "api"
    assert shop.cache.stats()["storageEntries"] == 1

    shop.cart.add_item(CartItem(id="volta-water-bottle", name="Bottle", price=145, product_slug="volta-water-bottle"))
    assert "mawu_cart_items" in store.keys()

    [check] = await shop.cart.validate(shop.api)
    assert check.valid
