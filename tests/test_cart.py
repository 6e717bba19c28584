import json

import pytest

from storefront.cart.cart import CART_STORAGE_KEY, Cart, CartError, CartItem
from storefront.clients.api_client import ApiError


class FakeProductApi:
    def __init__(self, products):
        self.products = products
        self.calls = []

    async def get(self, path, retry=None):
        self.calls.append(path)
        slug = path.rsplit("/", 1)[-1]
        product = self.products.get(slug)
        if isinstance(product, Exception):
            raise product
        if product is None:
            raise ApiError("Product not found", 404)
        return {"product": product}


def _tee(**overrides):
    data = dict(
        id="mawu-kente-heritage-tee-indigo-m",
        name="Kente Heritage Tee",
        price=185.0,
        product_id="mawu-kente-heritage-tee",
        product_slug="mawu-kente-heritage-tee",
        selected_variations={"color": "indigo", "size": "m"},
        max_inventory=3,
    )
    data.update(overrides)
    return CartItem(**data)


def test_add_same_line_increments_quantity(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.add_item(_tee(quantity=10))

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert cart.item_count == 2
    assert cart.total == 370.0


def test_added_line_is_a_copy_of_the_callers_item(store):
    cart = Cart(store)
    item = _tee(quantity=5)
    line = cart.add_item(item)

    assert line is not item
    assert item.quantity == 5
    assert line.quantity == 1

    cart.add_item(item)
    assert item.quantity == 5
    assert cart.items[0].quantity == 2



def test_add_beyond_inventory_is_refused(store):
    cart = Cart(store)
    for _ in range(3):
        cart.add_item(_tee())
    with pytest.raises(CartError):
        cart.add_item(_tee())
    assert cart.items[0].quantity == 3


def test_out_of_stock_item_cannot_be_added(store):
    with pytest.raises(CartError):
        Cart(store).add_item(_tee(max_inventory=0))


def test_different_variations_are_separate_lines(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.add_item(_tee(id="mawu-kente-heritage-tee-indigo-l", selected_variations={"color": "indigo", "size": "l"}))
    assert [i.id for i in cart.items] == ["mawu-kente-heritage-tee-indigo-m", "mawu-kente-heritage-tee-indigo-l"]


def test_update_quantity_respects_limits_and_zero_removes(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.update_quantity("mawu-kente-heritage-tee-indigo-m", 3)
    assert cart.items[0].quantity == 3

    with pytest.raises(CartError):
        cart.update_quantity("mawu-kente-heritage-tee-indigo-m", 4)

    cart.update_quantity("mawu-kente-heritage-tee-indigo-m", 0)
    assert cart.items == []


def test_cart_survives_reload(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.add_item(_tee())

    reloaded = Cart(store)
    assert reloaded.items == cart.items
    assert json.loads(store.get(CART_STORAGE_KEY))[0]["quantity"] == 2


def test_corrupt_saved_cart_starts_empty(store):
    store.set(CART_STORAGE_KEY, "{{{")
    assert Cart(store).items == []


def test_clear_empties_store(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.clear()
    assert json.loads(store.get(CART_STORAGE_KEY)) == []


@pytest.mark.asyncio
async def test_validate_reports_inventory_shortfall(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.add_item(_tee())
    api = FakeProductApi({"mawu-kente-heritage-tee": {"availability": "in_stock", "inventory": 1, "price": 185}})

    [result] = await cart.validate(api)

    assert api.calls == ["/api/products/mawu-kente-heritage-tee"]
    assert not result.valid
    assert result.message == "Only 1 available"
    assert result.suggested_quantity == 1


@pytest.mark.asyncio
async def test_validate_out_of_stock_and_price_change(store):
    cart = Cart(store)
    cart.add_item(_tee())
    api = FakeProductApi({"mawu-kente-heritage-tee": {"availability": "in_stock", "inventory": 0, "price": 200}})

    [result] = await cart.validate(api)

    assert not result.valid
    assert result.suggested_quantity == 0
    assert result.message == "Item is out of stock (Price also changed to GHS 200.00)"


@pytest.mark.asyncio
async def test_validate_price_change_only(store):
    cart = Cart(store)
    cart.add_item(_tee())
    api = FakeProductApi({"mawu-kente-heritage-tee": {"availability": "in_stock", "inventory": 10, "price": 190}})

    [result] = await cart.validate(api)

    assert result.valid
    assert result.message == "Price updated from GHS 185.00 to GHS 190.00"


@pytest.mark.asyncio
async def test_validate_small_price_drift_is_ignored(store):
    cart = Cart(store)
    cart.add_item(_tee())
    api = FakeProductApi({"mawu-kente-heritage-tee": {"availability": "in_stock", "inventory": 10, "price": 185.005}})

    [result] = await cart.validate(api)

    assert result.valid
    assert result.message is None


@pytest.mark.asyncio
async def test_validate_backorder_and_low_stock(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.add_item(_tee(id="volta-water-bottle", product_id="volta-water-bottle", product_slug="volta-water-bottle", price=145))
    api = FakeProductApi(
        {
            "mawu-kente-heritage-tee": {"availability": "backorder", "inventory": 5, "price": 185},
            "volta-water-bottle": {"availability": "low_stock", "inventory": 2, "price": 145},
        }
    )

    backorder, low = await cart.validate(api)

    assert not backorder.valid
    assert backorder.message == "Item is currently on backorder"
    assert low.valid
    assert low.message == "Low stock - only 2 remaining"


@pytest.mark.asyncio
async def test_validate_fetch_failure_marks_only_that_item(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.add_item(_tee(id="volta-water-bottle", product_id="volta-water-bottle", product_slug="volta-water-bottle", price=145))
    api = FakeProductApi(
        {
            "mawu-kente-heritage-tee": ApiError("Network error", 0, "NETWORK_ERROR"),
            "volta-water-bottle": {"availability": "in_stock", "inventory": 50, "price": 145},
        }
    )

    failed, ok = await cart.validate(api)

    assert not failed.valid
    assert failed.message == "Unable to validate item availability"
    assert ok.valid


@pytest.mark.asyncio
async def test_item_without_identifier_is_assumed_valid(store):
    cart = Cart(store)
    cart.add_item(CartItem(id="gift", name="Gift", price=10))
    api = FakeProductApi({})

    [result] = await cart.validate(api)

    assert result.valid
    assert result.message == "Unable to validate - no product identifier"
    assert api.calls == []


@pytest.mark.asyncio
async def test_apply_suggestions_adjusts_and_removes(store):
    cart = Cart(store)
    cart.add_item(_tee())
    cart.add_item(_tee())
    cart.add_item(_tee(id="volta-water-bottle", product_id="volta-water-bottle", product_slug="volta-water-bottle", price=145))
    api = FakeProductApi(
        {
            "mawu-kente-heritage-tee": {"availability": "in_stock", "inventory": 1, "price": 185},
            "volta-water-bottle": {"availability": "in_stock", "inventory": 0, "price": 145},
        }
    )

    cart.apply_suggestions(await cart.validate(api))

    assert [(i.id, i.quantity) for i in cart.items] == [("mawu-kente-heritage-tee-indigo-m", 1)]
