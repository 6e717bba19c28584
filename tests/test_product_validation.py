import pytest

from storefront.catalog.validation import (
    ProductValidationError,
    is_valid_availability,
    validate_product,
    validate_product_variation,
    validate_products,
    validate_variation_option,
)


def test_valid_product_is_sanitised(make_product):
    product = validate_product(make_product(id=7, price="145.50", tags=None, availability=None))
    assert product.id == "7"
    assert product.price == 145.5
    assert product.tags == []
    assert product.availability == "in_stock"
    assert product.impact_statement == "Delivers clean water."


def test_snake_case_keys_are_accepted(make_product):
    data = make_product()
    data["impact_statement"] = data.pop("impactStatement")
    assert validate_product(data).impact_statement == "Delivers clean water."


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"id": None}, "id"),
        ({"id": True}, "id"),
        ({"slug": ""}, "slug"),
        ({"name": 5}, "name"),
        ({"price": -1}, "price"),
        ({"price": "abc"}, "price"),
        ({"inventory": -3}, "inventory"),
        ({"inventory": 2.5}, "inventory"),
        ({"availability": "sold_out"}, "availability"),
        ({"images": "one.jpg"}, "images"),
        ({"tags": [1, 2]}, "tags"),
        ({"variations": {"type": "size"}}, "variations"),
    ],
)
def test_invalid_fields_raise_with_field_name(make_product, overrides, field):
    with pytest.raises(ProductValidationError) as exc:
        validate_product(make_product(**overrides))
    assert exc.value.field == field


def test_non_dict_product_rejected():
    with pytest.raises(ProductValidationError):
        validate_product(["not", "a", "product"])


def test_variation_option_checks():
    opt = validate_variation_option({"value": "xl", "label": "XL", "priceModifier": 10, "inventory": 4})
    assert opt.price_modifier == 10.0
    assert opt.inventory == 4

    with pytest.raises(ProductValidationError):
        validate_variation_option({"value": "", "label": "XL"})
    with pytest.raises(ProductValidationError):
        validate_variation_option({"value": "xl", "label": "XL", "inventory": -1})
    with pytest.raises(ProductValidationError):
        validate_variation_option({"value": "xl", "label": "XL", "priceModifier": "10"})


def test_variation_option_inventory_must_be_whole():
    assert validate_variation_option({"value": "xl", "label": "XL", "inventory": 3.0}).inventory == 3
    with pytest.raises(ProductValidationError) as exc:
        validate_variation_option({"value": "xl", "label": "XL", "inventory": 2.5})
    assert exc.value.field == "variationOption.inventory"
    assert exc.value.value == 2.5



def test_variation_requires_known_type_and_options():
    with pytest.raises(ProductValidationError):
        validate_product_variation({"type": "flavour", "name": "Flavour", "options": [{"value": "a", "label": "A"}]})
    with pytest.raises(ProductValidationError):
        validate_product_variation({"type": "size", "name": "Size", "options": []})

    bad_option = {"type": "size", "name": "Size", "options": [{"value": "m", "label": "M"}, {"value": "l"}]}
    with pytest.raises(ProductValidationError) as exc:
        validate_product_variation(bad_option)
    assert exc.value.field == "variation.options[1]"


def test_nested_variation_error_is_reported_with_index(make_product):
    data = make_product(variations=[{"type": "size", "name": "Size", "options": []}])
    with pytest.raises(ProductValidationError) as exc:
        validate_product(data)
    assert exc.value.field == "variations[0]"


def test_validate_products_skips_invalid_entries(make_product):
    products = validate_products([make_product(), make_product(slug=""), make_product(slug="other", id="other")])
    assert [p.slug for p in products] == ["volta-water-bottle", "other"]


def test_validate_products_requires_a_list():
    with pytest.raises(ProductValidationError):
        validate_products({"products": []})


def test_is_valid_availability():
    assert is_valid_availability("low_stock")
    assert not is_valid_availability("out_of_stock")
    assert not is_valid_availability(None)
