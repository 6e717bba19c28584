"""
Catalog contracts.

Defines the product shapes shared by:
- the REST API (server side, serialised with camelCase keys)
- the client-side cache and cart (validated before they are stored)
- the bundled fallback catalog

Wire format keys are camelCase (``impactStatement``, ``priceModifier``) to
match what the storefront API has always returned; Python attributes are
snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ShopAvailability(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    BACKORDER = "backorder"


VariationType = Literal["color", "size", "style"]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class VariationOption(_WireModel):
    value: str
    label: str
    price_modifier: Optional[float] = None
    inventory: Optional[int] = None
    images: Optional[List[str]] = None


class ProductVariation(_WireModel):
    type: VariationType
    name: str
    options: List[VariationOption]


class ShopProduct(_WireModel):
    id: str
    slug: str
    name: str
    category: str = ""
    price: float
    currency: str = "GHS"
    tags: List[str] = Field(default_factory=list)
    impact_statement: str = ""
    description: str = ""
    images: List[str] = Field(default_factory=list)
    availability: ShopAvailability = ShopAvailability.IN_STOCK
    inventory: int = 0
    variations: Optional[List[ProductVariation]] = None


# ---------------------------------------------------------------------------
# Catalog payload
# ---------------------------------------------------------------------------

class CatalogHero(_WireModel):
    title: str
    description: str


class ShopPaymentMethod(_WireModel):
    id: Literal["stripe", "mobile-money", "bank-transfer", "paypal", "crypto"]
    label: str
    status: Literal["active", "coming_soon"]
    description: str


class ShopCatalog(_WireModel):
    hero: CatalogHero
    currency: str
    categories: List[str]
    featured_product_slugs: List[str]
    products: List[ShopProduct]
    payment_methods: List[ShopPaymentMethod]
    shipping_regions: List[str]
    last_updated: str
