from pathlib import Path

import pytest
from pydantic import ValidationError

from storefront.utils.config_loader import ShopConfig, load_shop_config


def test_bundled_config_loads():
    cfg = load_shop_config()
    assert cfg.cache.products_list_ttl_seconds == 300
    assert cfg.cache.product_detail_ttl_seconds == 600
    assert cfg.api.retry.max_retries == 3
    assert "monthly" in cfg.checkout.donation_frequencies


def test_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "shop.yml"
    path.write_text("cache:\n  products_list_ttl_seconds: 60\n", encoding="utf-8")
    cfg = load_shop_config(path)
    assert cfg.cache.products_list_ttl_seconds == 60
    assert cfg.cache.product_detail_ttl_seconds == ShopConfig().cache.product_detail_ttl_seconds


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_shop_config(Path(tmp_path / "nope.yml"))


def test_invalid_values_raise(tmp_path):
    path = tmp_path / "shop.yml"
    path.write_text("api:\n  retry:\n    max_retries: -1\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_shop_config(path)
