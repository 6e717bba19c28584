"""
Stripe webhook event handling.

Storage failures propagate so the endpoint answers 500 and Stripe retries the
delivery. Email failures are logged and swallowed: a paid order is marked
completed even when its confirmation email could not be sent.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Dict, Optional

from storefront.database.records import OrderRecord
from storefront.integrations.email.service import EmailService
from storefront.integrations.email.templates import (
    AdminNotificationData,
    DonationReceiptData,
    OrderConfirmationData,
    OrderLine,
    ShippingAddress,
)
from storefront.services.order_service import format_order_number

logger = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"
PAYMENT_CANCELED = "payment_intent.canceled"
CHARGE_REFUNDED = "charge.refunded"


def format_long_date(value: Optional[datetime] = None) -> str:
    d = value or datetime.utcnow()
    return f"{d:%B} {d.day}, {d.year}"


def _parse_id(raw: Any) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _billing_details(payment_intent: Dict[str, Any]) -> Dict[str, Any]:
    charges = (payment_intent.get("charges") or {}).get("data") or []
    if charges:
        return charges[0].get("billing_details") or {}
    latest = payment_intent.get("latest_charge")
    if isinstance(latest, dict):
        return latest.get("billing_details") or {}
    return {}


class WebhookService:
    def __init__(self, repository, email_service: EmailService, admin_email: Optional[str] = None) -> None:
        self.repository = repository
        self.email = email_service
        self.admin_email = admin_email if admin_email is not None else (
            os.getenv("ADMIN_EMAIL") or os.getenv("EMAIL_USER")
        )

    async def handle_event(self, event: Dict[str, Any]) -> str:
        event_type = event.get("type", "")
        obj = ((event.get("data") or {}).get("object")) or {}
        logger.info("[Webhook] Received event: %s (ID: %s)", event_type, event.get("id"))

        if event_type == PAYMENT_SUCCEEDED:
            await self.handle_payment_succeeded(obj)
        elif event_type == PAYMENT_FAILED:
            self.handle_payment_ended(obj, reason="payment failed")
        elif event_type == PAYMENT_CANCELED:
            self.handle_payment_ended(obj, reason="canceled")
        elif event_type == CHARGE_REFUNDED:
            self.handle_charge_refunded(obj)
        else:
            logger.info("[Webhook] Unhandled event type: %s", event_type)
        return event_type

    # ------------------------------------------------------------------ #
    # payment_intent.succeeded
    # ------------------------------------------------------------------ #
    async def handle_payment_succeeded(self, payment_intent: Dict[str, Any]) -> None:
        metadata = payment_intent.get("metadata") or {}
        logger.info("[Webhook] Processing payment_intent.succeeded: %s", payment_intent.get("id"))
        if metadata.get("donationId"):
            await self._complete_donation(payment_intent, metadata)
        if metadata.get("orderId"):
            await self._complete_order(payment_intent, metadata)

    async def _complete_donation(self, payment_intent: Dict[str, Any], metadata: Dict[str, Any]) -> None:
        donation_id = _parse_id(metadata["donationId"])
        donation = self.repository.get_donation_by_id(donation_id) if donation_id is not None else None
        if donation is None:
            logger.error("[Webhook] Donation not found: %s", metadata["donationId"])
            return

        intent_id = payment_intent.get("id")
        self.repository.update_donation_status(donation.id, "completed", intent_id)

        donor_email = metadata.get("donorEmail")
        if not donor_email:
            return
        donor_name = metadata.get("donorName") or "Valued Donor"
        amount = f"{(payment_intent.get('amount') or 0) / 100:.2f}"
        currency = str(payment_intent.get("currency") or donation.currency).upper()
        today = format_long_date()
        try:
            await self.email.send_donation_receipt(
                DonationReceiptData(
                    donor_name=donor_name,
                    donor_email=donor_email,
                    amount=amount,
                    currency=currency,
                    donation_date=today,
                    transaction_id=intent_id or "",
                    anonymous=donation.anonymous,
                    message=donation.message,
                )
            )
            if self.admin_email:
                await self.email.send_admin_notification(
                    AdminNotificationData(
                        type="new_donation",
                        donor_name="Anonymous Donor" if donation.anonymous else donor_name,
                        amount=amount,
                        currency=currency,
                        date=today,
                        admin_email=self.admin_email,
                    )
                )
        except Exception as e:
            logger.error("[Webhook] Failed to send donation emails for %s: %s", donation.id, e)

    async def _complete_order(self, payment_intent: Dict[str, Any], metadata: Dict[str, Any]) -> None:
        order_id = _parse_id(metadata["orderId"])
        order = self.repository.get_order_by_id(order_id) if order_id is not None else None
        if order is None:
            logger.error("[Webhook] Order not found: %s", metadata["orderId"])
            return

        billing = _billing_details(payment_intent)
        email = billing.get("email") or metadata.get("customerEmail") or order.customer_email
        name = billing.get("name") or metadata.get("customerName") or order.customer_name
        address = order.shipping_address
        if billing.get("address"):
            raw = billing["address"]
            address = {
                "line1": raw.get("line1") or "",
                "line2": raw.get("line2"),
                "city": raw.get("city") or "",
                "state": raw.get("state"),
                "postalCode": raw.get("postal_code"),
                "country": raw.get("country") or "GH",
            }

        if email != order.customer_email or name != order.customer_name:
            logger.info("[Webhook] Updating order %s customer information", order.id)
            self.repository.update_order_customer_info(order.id, email, name, address)

        self.repository.update_order_status(order.id, "completed", payment_intent.get("id"))

        if email:
            await self._send_order_emails(order, email, name, address or {})

    async def _send_order_emails(
        self, order: OrderRecord, email: str, name: Optional[str], address: Dict[str, Any]
    ) -> None:
        order_number = format_order_number(order.id)
        customer_name = name or "Valued Customer"
        order_date = format_long_date(order.created_at)
        try:
            await self.email.send_order_confirmation(
                OrderConfirmationData(
                    customer_name=customer_name,
                    customer_email=email,
                    order_number=order_number,
                    items=[
                        OrderLine(
                            name=item.get("productName", ""),
                            quantity=int(item.get("quantity", 0)),
                            price=f"{order.currency} {float(item.get('price', 0)):.2f}",
                            selected_variations=item.get("selectedVariations") or {},
                        )
                        for item in order.items
                    ],
                    total_amount=f"{order.currency} {float(order.total_amount):.2f}",
                    shipping_address=ShippingAddress(
                        street=address.get("line1") or "",
                        city=address.get("city") or "",
                        state=address.get("state") or "",
                        zip_code=address.get("postalCode") or "",
                        country=address.get("country") or "",
                    ),
                    order_date=order_date,
                )
            )
            if self.admin_email:
                await self.email.send_admin_notification(
                    AdminNotificationData(
                        type="new_order",
                        order_number=order_number,
                        customer_name=customer_name,
                        amount=f"{float(order.total_amount):.2f}",
                        currency=order.currency,
                        date=order_date,
                        admin_email=self.admin_email,
                    )
                )
        except Exception as e:
            logger.error("[Webhook] Failed to send order emails for %s: %s", order_number, e)

    # ------------------------------------------------------------------ #
    # Failure, cancellation and refund
    # ------------------------------------------------------------------ #
    def handle_payment_ended(self, payment_intent: Dict[str, Any], reason: str) -> None:
        metadata = payment_intent.get("metadata") or {}
        intent_id = payment_intent.get("id")
        donation_id = _parse_id(metadata.get("donationId"))
        order_id = _parse_id(metadata.get("orderId"))

        if donation_id is not None:
            logger.info("[Webhook] Updating donation %s to failed (%s)", donation_id, reason)
            self.repository.update_donation_status(donation_id, "failed", intent_id)
        if order_id is not None:
            logger.info("[Webhook] Updating order %s to cancelled (%s)", order_id, reason)
            self.repository.update_order_status(order_id, "cancelled", intent_id)

    def handle_charge_refunded(self, charge: Dict[str, Any]) -> None:
        intent_id = charge.get("payment_intent")
        if isinstance(intent_id, dict):
            intent_id = intent_id.get("id")
        if not intent_id:
            logger.info("[Webhook] No payment intent associated with charge %s", charge.get("id"))
            return

        order = self.repository.find_order_by_payment_intent(intent_id)
        if order is not None:
            logger.info("[Webhook] Updating order %s to cancelled (refunded)", order.id)
            self.repository.update_order_status(order.id, "cancelled", intent_id)

        donation = self.repository.find_donation_by_payment_intent(intent_id)
        if donation is not None:
            logger.info("[Webhook] Updating donation %s to failed (refunded)", donation.id)
            self.repository.update_donation_status(donation.id, "failed", intent_id)
