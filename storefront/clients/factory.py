"""Wire the client-side pieces (store, cache, dedup, API client, cart) from ShopConfig."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from storefront.cache.dedup import RequestDeduplicator
from storefront.cache.product_cache import ProductCache
from storefront.cache.stores import KeyValueStore, store_from_env
from storefront.cart.cart import Cart
from storefront.catalog.service import CatalogService
from storefront.clients.api_client import RetryOptions, ShopApiClient
from storefront.utils.config_loader import ShopConfig, load_shop_config


@dataclass
class Storefront:
    config: ShopConfig
    store: KeyValueStore
    api: ShopApiClient
    cache: ProductCache
    catalog: CatalogService
    cart: Cart


def build_storefront(
    config: Optional[ShopConfig] = None,
    store: Optional[KeyValueStore] = None,
    api_client: Optional[ShopApiClient] = None,
) -> Storefront:
    cfg = config or load_shop_config()
    store = store or store_from_env(cfg.cache.storage_path, max_bytes=cfg.cache.storage_max_bytes)

    api = api_client or ShopApiClient(
        base_url=cfg.api.base_url,
        retry=RetryOptions(
            max_retries=cfg.api.retry.max_retries,
            retry_delay=cfg.api.retry.retry_delay_seconds,
            retryable_statuses=list(cfg.api.retry.retryable_statuses),
        ),
        timeout_seconds=cfg.api.timeout_seconds,
    )

    dedup = RequestDeduplicator()
    cache = ProductCache(
        store,
        products_list_ttl=cfg.cache.products_list_ttl_seconds,
        product_detail_ttl=cfg.cache.product_detail_ttl_seconds,
        all_products_key=cfg.cache.all_products_key,
        product_key_prefix=cfg.cache.product_key_prefix,
        key_family=cfg.cache.key_prefix,
        pending_counter=lambda: dedup.pending_count,
    )
    catalog = CatalogService(api, cache, dedup=dedup, slow_call_threshold=cfg.api.slow_call_threshold_seconds)
    cart = Cart(store, storage_key=cfg.cart.storage_key, currency_label=cfg.cart.currency_label)
    return Storefront(config=cfg, store=store, api=api, cache=cache, catalog=catalog, cart=cart)
