"""
Plain records returned by both repositories (in-memory and SQLAlchemy).

``to_dict`` produces the camelCase JSON the REST API returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


class RepositoryError(Exception):
    """Storage-level failure (connection, constraint, serialisation)."""


class DuplicateSlugError(RepositoryError):
    def __init__(self, slug: str) -> None:
        super().__init__(f"A product with slug '{slug}' already exists")
        self.slug = slug


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ProductRecord:
    id: int
    slug: str
    name: str
    category: str
    price: float
    description: str
    currency: str = "GHS"
    tags: List[str] = field(default_factory=list)
    impact_statement: Optional[str] = None
    images: List[str] = field(default_factory=list)
    availability: str = "in_stock"
    inventory: int = 0
    variations: List[Dict[str, Any]] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "currency": self.currency,
            "tags": list(self.tags),
            "impactStatement": self.impact_statement,
            "description": self.description,
            "images": list(self.images),
            "availability": self.availability,
            "inventory": self.inventory,
            "variations": list(self.variations),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class OrderRecord:
    id: int
    customer_email: str
    customer_name: str
    items: List[Dict[str, Any]]
    total_amount: float
    currency: str = "GHS"
    stripe_payment_intent_id: Optional[str] = None
    status: str = "pending"
    shipping_address: Optional[Dict[str, Any]] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customerEmail": self.customer_email,
            "customerName": self.customer_name,
            "items": list(self.items),
            "totalAmount": self.total_amount,
            "currency": self.currency,
            "stripePaymentIntentId": self.stripe_payment_intent_id,
            "status": self.status,
            "shippingAddress": self.shipping_address,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class DonationRecord:
    id: int
    donor_email: str
    donor_name: str
    amount: float
    currency: str = "USD"
    frequency: str = "one-time"
    message: Optional[str] = None
    anonymous: bool = False
    stripe_payment_intent_id: Optional[str] = None
    status: str = "pending"
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "donorEmail": self.donor_email,
            "donorName": self.donor_name,
            "amount": self.amount,
            "currency": self.currency,
            "frequency": self.frequency,
            "message": self.message,
            "anonymous": self.anonymous,
            "stripePaymentIntentId": self.stripe_payment_intent_id,
            "status": self.status,
            "createdAt": _iso(self.created_at),
        }
