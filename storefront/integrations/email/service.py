"""
Transactional email for orders, donations and admin alerts.

Every send is retried with exponential backoff before the error reaches the
caller; callers decide whether a failed email should fail their operation.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable

from storefront.integrations.email import templates
from storefront.integrations.email.senders import EmailDeliveryError, EmailSender
from storefront.integrations.email.templates import (
    AdminNotificationData,
    DonationReceiptData,
    OrderConfirmationData,
    OrderStatusUpdateData,
)

logger = logging.getLogger(__name__)


class EmailService:
    def __init__(
        self,
        sender: EmailSender,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.sender = sender
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def _send_with_retry(self, to: str, content: templates.EmailContent) -> None:
        for attempt in range(self.max_retries + 1):
            try:
                await self.sender.send(to, content.subject, content.text)
                return
            except Exception as e:
                logger.error("Email send attempt %d failed: %s", attempt + 1, e)
                if attempt >= self.max_retries:
                    raise EmailDeliveryError(
                        f"Failed to send email after {self.max_retries + 1} attempts: {e}"
                    ) from e
                delay = self.retry_delay * (2 ** attempt)
                logger.info("Retrying email send in %.1fs", delay)
                await self._sleep(delay)

    async def send_order_confirmation(self, data: OrderConfirmationData) -> None:
        await self._send_with_retry(data.customer_email, templates.order_confirmation(data))
        logger.info("Order confirmation sent to %s for order %s", data.customer_email, data.order_number)

    async def send_donation_receipt(self, data: DonationReceiptData) -> None:
        await self._send_with_retry(data.donor_email, templates.donation_receipt(data))
        logger.info("Donation receipt sent to %s for %s %s", data.donor_email, data.amount, data.currency)

    async def send_order_status_update(self, data: OrderStatusUpdateData) -> None:
        await self._send_with_retry(data.customer_email, templates.order_status_update(data))
        logger.info("Order status update sent to %s for order %s", data.customer_email, data.order_number)

    async def send_admin_notification(self, data: AdminNotificationData) -> None:
        await self._send_with_retry(data.admin_email, templates.admin_notification(data))
        logger.info("Admin notification sent to %s for %s", data.admin_email, data.type)

    async def test_connection(self) -> bool:
        try:
            ok = await self.sender.verify()
        except Exception as e:
            logger.error("Email service connection failed: %s", e)
            return False
        if ok:
            logger.info("Email service connection verified successfully")
        return ok

    async def send_test_email(self, recipient: str) -> None:
        sent_at = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S UTC")
        await self._send_with_retry(recipient, templates.connectivity_check(sent_at, self.sender.name))
        logger.info("Test email sent successfully to %s", recipient)
