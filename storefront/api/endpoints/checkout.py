"""
Checkout endpoints: payment intents for donations and orders.

Both flows store the record as pending, create the payment intent, then mark
the record processing with the intent id. The webhook moves it on from there.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.api.dependencies import get_payment_client, get_repository, get_shop_config
from storefront.integrations.payments.contracts import PaymentProviderError, to_minor_units
from storefront.services.order_service import OrderValidationError, format_order_number, validate_order_items

logger = logging.getLogger(__name__)

router = APIRouter()

PENDING_CUSTOMER_EMAIL = "pending@checkout.com"
PENDING_CUSTOMER_NAME = "Pending Customer"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DonationIntentRequest(_CamelModel):
    amount: Optional[Union[float, str]] = None
    currency: Optional[str] = None
    donor_email: Optional[str] = None
    donor_name: Optional[str] = None
    frequency: Optional[str] = None
    message: Optional[str] = None
    anonymous: bool = False


class OrderItemRequest(_CamelModel):
    product_id: Union[int, str]
    product_name: str = ""
    quantity: int = Field(..., ge=1)
    price: Union[float, str]
    selected_variations: Optional[Dict[str, str]] = None


class OrderIntentRequest(_CamelModel):
    items: Optional[List[OrderItemRequest]] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    total_amount: Optional[Union[float, str]] = None
    currency: Optional[str] = None


class CustomerInfoRequest(_CamelModel):
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None


def _positive_amount(raw: Any) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) and value > 0 else None


def _payment_failure(e: PaymentProviderError) -> HTTPException:
    logger.error("Payment intent creation failed: %s", e)
    return HTTPException(status_code=502, detail=str(e) or "Failed to create payment intent")


# ============================================================================
# Donations
# ============================================================================

@router.post("/donations/create-payment-intent", tags=["Checkout"])
async def create_donation_intent(
    request: DonationIntentRequest,
    repository=Depends(get_repository),
    payments=Depends(get_payment_client),
    config=Depends(get_shop_config),
):
    amount = _positive_amount(request.amount)
    if amount is None:
        raise HTTPException(status_code=400, detail="Invalid donation amount")

    donor_email = (request.donor_email or "").strip()
    if "@" not in donor_email:
        raise HTTPException(status_code=400, detail="Valid email address is required")

    donor_name = (request.donor_name or "").strip()
    if not donor_name:
        raise HTTPException(status_code=400, detail="Donor name is required")

    frequency = request.frequency or "one-time"
    if frequency not in config.checkout.donation_frequencies:
        raise HTTPException(status_code=400, detail="Invalid donation frequency")

    currency = (request.currency or config.checkout.default_currency).upper()
    if currency not in config.checkout.donation_currencies:
        raise HTTPException(status_code=400, detail="Invalid currency")

    donation = repository.create_donation(
        {
            "donor_email": donor_email,
            "donor_name": donor_name,
            "amount": round(amount, 2),
            "currency": currency,
            "frequency": frequency,
            "message": (request.message or "").strip() or None,
            "anonymous": bool(request.anonymous),
            "status": "pending",
        }
    )

    try:
        intent = await payments.create_payment_intent(
            amount=to_minor_units(amount),
            currency=currency,
            metadata={
                "donationId": str(donation.id),
                "donorEmail": donor_email,
                "donorName": donor_name,
            },
            description=f"Donation to {config.checkout.organisation_name} - {frequency}",
        )
    except PaymentProviderError as e:
        raise _payment_failure(e)

    repository.update_donation_status(donation.id, "processing", intent.id)
    logger.info("Donation %s awaiting payment %s", donation.id, intent.id)
    return {"clientSecret": intent.client_secret, "donationId": donation.id}


# ============================================================================
# Orders
# ============================================================================

@router.post("/orders/create-payment-intent", tags=["Checkout"])
async def create_order_intent(
    request: OrderIntentRequest,
    repository=Depends(get_repository),
    payments=Depends(get_payment_client),
    config=Depends(get_shop_config),
):
    if not request.items:
        raise HTTPException(status_code=400, detail="Order must contain at least one item")

    total = _positive_amount(request.total_amount)
    if total is None:
        raise HTTPException(status_code=400, detail="Invalid order amount")

    items = [item.model_dump(by_alias=True, exclude_none=True) for item in request.items]
    try:
        validate_order_items(repository, items)
    except OrderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    currency = (request.currency or config.checkout.default_currency).upper()
    order = repository.create_order(
        {
            "customer_email": request.customer_email or PENDING_CUSTOMER_EMAIL,
            "customer_name": request.customer_name or PENDING_CUSTOMER_NAME,
            "items": items,
            "total_amount": total,
            "currency": currency,
            "shipping_address": request.shipping_address or {},
            "status": "pending",
        }
    )

    try:
        intent = await payments.create_payment_intent(
            amount=to_minor_units(total),
            currency=currency,
            metadata={
                "orderId": str(order.id),
                "customerEmail": request.customer_email or "",
                "customerName": request.customer_name or "",
            },
            description=f"Order #{format_order_number(order.id)}",
        )
    except PaymentProviderError as e:
        raise _payment_failure(e)

    repository.update_order_status(order.id, "processing", intent.id)
    logger.info("Order %s awaiting payment %s", format_order_number(order.id), intent.id)
    return {"clientSecret": intent.client_secret, "orderId": order.id}


@router.put("/orders/{order_id}/customer-info", tags=["Checkout"])
async def update_customer_info(order_id: int, request: CustomerInfoRequest, repository=Depends(get_repository)):
    order = repository.get_order_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    updated = repository.update_order_customer_info(
        order_id,
        request.customer_email or order.customer_email,
        request.customer_name or order.customer_name,
        request.shipping_address if request.shipping_address is not None else order.shipping_address,
    )
    return {"order": updated.to_dict()}
