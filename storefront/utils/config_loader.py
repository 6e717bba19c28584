"""
Shop configuration loader (cache TTLs, API client retry policy, checkout rules).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class CacheConfig(BaseModel):
    products_list_ttl_seconds: int = Field(default=5 * 60, ge=1)
    product_detail_ttl_seconds: int = Field(default=10 * 60, ge=1)
    key_prefix: str = "mawu_product"
    all_products_key: str = "mawu_products_all"
    product_key_prefix: str = "mawu_product_"
    storage_path: str = "data/cache/storefront_cache.json"
    storage_max_bytes: Optional[int] = Field(default=5 * 1024 * 1024, ge=1)


class RetryConfig(BaseModel):
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)
    retryable_statuses: List[int] = Field(default_factory=lambda: [408, 429, 500, 502, 503, 504])


class ApiClientConfig(BaseModel):
    base_url: str = "http://localhost:3001"
    timeout_seconds: float = Field(default=20.0, gt=0)
    slow_call_threshold_seconds: float = Field(default=3.0, gt=0)
    retry: RetryConfig = Field(default_factory=RetryConfig)


class CartConfig(BaseModel):
    storage_key: str = "mawu_cart_items"
    currency_label: str = "GHS"


class CheckoutConfig(BaseModel):
    default_currency: str = "GHS"
    donation_currencies: List[str] = Field(default_factory=lambda: ["GHS", "USD", "EUR", "GBP"])
    donation_frequencies: List[str] = Field(default_factory=lambda: ["one-time", "monthly", "quarterly", "annually"])
    order_statuses: List[str] = Field(
        default_factory=lambda: ["pending", "processing", "completed", "cancelled", "shipped", "delivered"]
    )
    notify_statuses: List[str] = Field(default_factory=lambda: ["processing", "shipped", "delivered", "cancelled"])
    organisation_name: str = "Mawu Foundation"


class ShopConfig(BaseModel):
    cache: CacheConfig = Field(default_factory=CacheConfig)
    api: ApiClientConfig = Field(default_factory=ApiClientConfig)
    cart: CartConfig = Field(default_factory=CartConfig)
    checkout: CheckoutConfig = Field(default_factory=CheckoutConfig)


def load_shop_config(config_path: Optional[Path] = None) -> ShopConfig:
    """
    Load and validate the shop configuration from YAML.

    A missing default config file yields the built-in defaults; an explicit
    path that does not exist is an error.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "shop_config.yml"

    if not config_path.exists():
        if explicit:
            raise FileNotFoundError(f"Shop config file not found: {config_path}")
        logger.info("No shop config at %s, using defaults", config_path)
        return ShopConfig()

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = ShopConfig(**data)
        logger.info("Successfully loaded shop config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Shop config validation failed: %s", e)
        raise
