"""
Payment contracts.

Defines the payment intent shape used by both:
- integrations/payments/mock.py (fake intents for development/testing)
- integrations/payments/stripe_client.py (real Stripe calls through the SDK)

Amounts are always in minor units (pesewas, cents), as Stripe expects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class PaymentProviderError(Exception):
    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class PaymentIntent(BaseModel):
    id: str
    client_secret: str
    amount: int
    currency: str
    status: str = "requires_payment_method"
    description: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class PaymentClient(ABC):
    name: str = "payments"

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        description: Optional[str] = None,
    ) -> PaymentIntent:
        ...


def to_minor_units(amount: float) -> int:
    return int(round(float(amount) * 100))
