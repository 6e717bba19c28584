"""
Mock/real switch for outside services.

INTEGRATIONS_MODE=real|live forces the real clients, mock|test forces the
mocks; otherwise a client is real when its credentials are present.
"""

import logging
import os

from storefront.integrations.email.senders import LoggingEmailSender, ResendEmailSender
from storefront.integrations.email.service import EmailService
from storefront.integrations.payments.contracts import PaymentClient
from storefront.integrations.payments.mock import MockPaymentClient
from storefront.integrations.payments.stripe_client import StripePaymentClient

logger = logging.getLogger(__name__)


def _should_use_real_integrations() -> bool:
    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    if mode in {"real", "live"}:
        return True
    if mode in {"mock", "test"}:
        return False
    return bool(os.getenv("STRIPE_SECRET_KEY") or os.getenv("RESEND_API_KEY"))


def select_payment_client() -> PaymentClient:
    if _should_use_real_integrations() and os.getenv("STRIPE_SECRET_KEY"):
        return StripePaymentClient()
    logger.info("STRIPE_SECRET_KEY not set; using mock payment client")
    return MockPaymentClient()


def select_email_service() -> EmailService:
    if _should_use_real_integrations() and os.getenv("RESEND_API_KEY"):
        return EmailService(ResendEmailSender())
    logger.info("RESEND_API_KEY not set; emails are logged only")
    return EmailService(LoggingEmailSender())
