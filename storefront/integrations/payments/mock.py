"""
Mock Payments Client.

Purpose:
- Fake Stripe payment intents for development/testing
- Does NOT make any network calls

Swap:
Replaced by StripePaymentClient (stripe_client.py) when STRIPE_SECRET_KEY is set.
"""

import logging
import uuid
from typing import Dict, List, Optional

from storefront.integrations.payments.contracts import PaymentClient, PaymentIntent, PaymentProviderError

logger = logging.getLogger(__name__)


class MockPaymentClient(PaymentClient):
    name = "mock"

    def __init__(self, fail_with: Optional[str] = None) -> None:
        self.fail_with = fail_with
        self.created: List[PaymentIntent] = []

    async def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: Dict[str, str],
        description: Optional[str] = None,
    ) -> PaymentIntent:
        if self.fail_with:
            raise PaymentProviderError(self.fail_with)

        intent_id = f"pi_mock_{uuid.uuid4().hex[:24]}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid.uuid4().hex[:16]}",
            amount=amount,
            currency=currency.lower(),
            description=description,
            metadata=dict(metadata),
        )
        self.created.append(intent)
        logger.info("[MOCK] Created payment intent %s for %d %s", intent.id, amount, intent.currency)
        return intent
