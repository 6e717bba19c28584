"""
Cached product fetchers.

Order of preference for every read:
1. a fresh cache entry
2. the live API (deduplicated, validated, then cached)
3. the bundled fallback catalog

Fallback data is never written to the cache, so the next read after the API
recovers goes back to the live catalog.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pydantic import ValidationError

from storefront.cache.dedup import RequestDeduplicator
from storefront.cache.product_cache import ProductCache
from storefront.catalog.contracts import ShopProduct
from storefront.catalog.fallback import fallback_products, find_fallback_product
from storefront.catalog.validation import (
    ProductValidationError,
    log_validation_error,
    validate_product,
    validate_products,
)
from storefront.clients.api_client import ApiError, ShopApiClient
from storefront.utils.monitoring import (
    SLOW_CALL_THRESHOLD_SECONDS,
    log_api_error,
    log_fallback_usage,
    measure_api_call,
)

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_API = "api"
SOURCE_FALLBACK = "fallback"
SOURCE_NONE = "none"


@dataclass
class ProductsResult:
    products: List[ShopProduct] = field(default_factory=list)
    source: str = SOURCE_NONE
    error: Optional[Exception] = None


@dataclass
class ProductResult:
    product: Optional[ShopProduct] = None
    source: str = SOURCE_NONE
    error: Optional[Exception] = None


class CatalogService:
    def __init__(
        self,
        api_client: ShopApiClient,
        cache: ProductCache,
        dedup: Optional[RequestDeduplicator] = None,
        slow_call_threshold: float = SLOW_CALL_THRESHOLD_SECONDS,
    ) -> None:
        self.api = api_client
        self.cache = cache
        self.dedup = dedup or RequestDeduplicator()
        self.slow_call_threshold = slow_call_threshold

    # ------------------------------------------------------------------ #
    # Product list
    # ------------------------------------------------------------------ #
    async def fetch_products(self) -> ProductsResult:
        cached = self._cached_products()
        if cached is not None:
            return ProductsResult(products=cached, source=SOURCE_CACHE)

        try:
            return await self.dedup.run(self.cache.all_products_key, self._load_products)
        except Exception as e:
            # _load_products already degrades on API/validation errors; this is the last line.
            logger.error("Unexpected failure loading products: %s", e, exc_info=True)
            return ProductsResult(products=fallback_products(), source=SOURCE_FALLBACK, error=e)

    async def _load_products(self) -> ProductsResult:
        try:
            response = await measure_api_call(
                "GET /api/products", lambda: self.api.get("/api/products"), slow_threshold=self.slow_call_threshold
            )
        except ApiError as e:
            log_api_error(e, "CatalogService.fetch_products", {"endpoint": "/api/products"})
            log_fallback_usage("CatalogService.fetch_products", "API request failed", {"error": str(e)})
            return ProductsResult(products=fallback_products(), source=SOURCE_FALLBACK)

        raw_products = _field(response, "products", default=[])
        try:
            validated = validate_products(raw_products)
        except ProductValidationError as e:
            log_validation_error(e, "CatalogService.fetch_products")
            log_fallback_usage("CatalogService.fetch_products", "Product validation failed", {"error": str(e)})
            return ProductsResult(products=fallback_products(), source=SOURCE_FALLBACK)

        if not validated and raw_products:
            log_fallback_usage(
                "CatalogService.fetch_products", "All products failed validation", {"rawCount": len(raw_products)}
            )
            return ProductsResult(products=fallback_products(), source=SOURCE_FALLBACK)

        self.cache.cache_products_list([p.to_wire() for p in validated])
        return ProductsResult(products=validated, source=SOURCE_API)

    def _cached_products(self) -> Optional[List[ShopProduct]]:
        cached = self.cache.get_cached_products_list()
        if cached is None:
            return None
        try:
            return [ShopProduct.model_validate(p) for p in cached]
        except (ValidationError, TypeError) as e:
            logger.warning("Discarding unreadable cached product list: %s", e)
            self.cache.remove(self.cache.all_products_key)
            return None

    # ------------------------------------------------------------------ #
    # Product detail
    # ------------------------------------------------------------------ #
    async def fetch_product(self, slug: str) -> ProductResult:
        if not slug:
            return ProductResult(error=LookupError("No product slug provided"))

        cached = self._cached_product(slug)
        if cached is not None:
            return ProductResult(product=cached, source=SOURCE_CACHE)

        try:
            result = await self.dedup.run(self.cache.product_cache_key(slug), lambda: self._load_product(slug))
        except Exception as e:
            logger.error("Unexpected failure loading product %s: %s", slug, e, exc_info=True)
            fallback = find_fallback_product(slug)
            return ProductResult(product=fallback, source=SOURCE_FALLBACK if fallback else SOURCE_NONE, error=e)

        if result.product is None and result.error is None:
            return ProductResult(source=result.source, error=LookupError("Product not found"))
        return result

    async def _load_product(self, slug: str) -> ProductResult:
        endpoint = f"/api/products/{slug}"
        try:
            response = await measure_api_call(
                f"GET {endpoint}", lambda: self.api.get(endpoint), slow_threshold=self.slow_call_threshold
            )
        except ApiError as e:
            log_api_error(e, "CatalogService.fetch_product", {"endpoint": endpoint, "slug": slug})
            if e.status_code == 404:
                return ProductResult(source=SOURCE_API)
            log_fallback_usage("CatalogService.fetch_product", f"API request failed for {slug}", {"error": str(e)})
            return _fallback_result(slug)

        raw_product = _field(response, "product")
        if not raw_product:
            return ProductResult(source=SOURCE_API)

        try:
            product = validate_product(raw_product)
        except ProductValidationError as e:
            log_validation_error(e, f"CatalogService.fetch_product - {slug}")
            log_fallback_usage(
                "CatalogService.fetch_product", f"Product validation failed for {slug}", {"error": str(e)}
            )
            return _fallback_result(slug)

        self.cache.cache_product(slug, product.to_wire())
        return ProductResult(product=product, source=SOURCE_API)

    def _cached_product(self, slug: str) -> Optional[ShopProduct]:
        cached = self.cache.get_cached_product(slug)
        if cached is None:
            return None
        try:
            return ShopProduct.model_validate(cached)
        except (ValidationError, TypeError) as e:
            logger.warning("Discarding unreadable cached product %s: %s", slug, e)
            self.cache.remove(self.cache.product_cache_key(slug))
            return None

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #
    async def refetch_products(self) -> ProductsResult:
        """Drop the cached list and load it again."""
        self.cache.invalidate_product()
        return await self.fetch_products()

    async def refetch_product(self, slug: str) -> ProductResult:
        if slug:
            self.cache.invalidate_product(slug)
        return await self.fetch_product(slug)

    def invalidate(self, slug: Optional[str] = None) -> None:
        self.cache.invalidate_product(slug)


def _field(response: Any, name: str, default: Any = None) -> Any:
    if isinstance(response, dict):
        value = response.get(name)
        return default if value is None else value
    return default


def _fallback_result(slug: str) -> ProductResult:
    product = find_fallback_product(slug)
    return ProductResult(product=product, source=SOURCE_FALLBACK if product else SOURCE_NONE)
