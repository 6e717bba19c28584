"""
Stripe payment client.

Used when STRIPE_SECRET_KEY is configured. Creates payment intents through
the official ``stripe`` SDK; the blocking SDK call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, Optional

import stripe

from storefront.integrations.payments.contracts import PaymentClient, PaymentIntent, PaymentProviderError

logger = logging.getLogger(__name__)


class StripePaymentClient(PaymentClient):
    name = "stripe"

    def __init__(self, secret_key: Optional[str] = None) -> None:
        self.secret_key = secret_key or os.getenv("STRIPE_SECRET_KEY", "")

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        description: Optional[str] = None,
    ) -> PaymentIntent:
        if not self.secret_key:
            raise PaymentProviderError("STRIPE_SECRET_KEY is not configured.")

        params: Dict[str, Any] = {
            "amount": amount,
            "currency": currency.lower(),
            "automatic_payment_methods": {"enabled": True},
            "metadata": {key: str(value) for key, value in metadata.items()},
        }
        if description:
            params["description"] = description

        try:
            intent = await asyncio.to_thread(stripe.PaymentIntent.create, api_key=self.secret_key, **params)
        except stripe.StripeError as e:
            message = e.user_message or str(e) or "Stripe request failed"
            logger.error("Stripe payment intent creation failed: %s", message)
            raise PaymentProviderError(message, status_code=e.http_status, payload=e.json_body or {}) from e

        return PaymentIntent(
            id=intent["id"],
            client_secret=intent["client_secret"],
            amount=int(intent.get("amount") or amount),
            currency=intent.get("currency") or currency.lower(),
            status=intent.get("status") or "requires_payment_method",
            description=intent.get("description"),
            metadata=dict(intent.get("metadata") or {}),
        )
