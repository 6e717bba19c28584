"""Load the bundled fallback catalog into a repository."""

import logging
from typing import Iterable

from storefront.catalog.contracts import ShopProduct
from storefront.catalog.fallback import fallback_products

logger = logging.getLogger(__name__)


def product_to_row(product: ShopProduct) -> dict:
    return {
        "slug": product.slug,
        "name": product.name,
        "category": product.category,
        "price": product.price,
        "currency": product.currency,
        "tags": list(product.tags),
        "impact_statement": product.impact_statement or None,
        "description": product.description,
        "images": list(product.images),
        "availability": product.availability,
        "inventory": product.inventory,
        "variations": [v.to_wire() for v in product.variations or []],
    }


def seed_products(repository, products: Iterable[ShopProduct] = None) -> int:
    """Insert products whose slug is not stored yet. Returns how many were added."""
    added = 0
    for product in products if products is not None else fallback_products():
        if repository.get_product_by_slug(product.slug) is not None:
            continue
        repository.create_product(product_to_row(product))
        added += 1
    logger.info("Seeded %d products", added)
    return added
