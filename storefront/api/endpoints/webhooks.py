import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from storefront.api.dependencies import get_webhook_service
from storefront.integrations.payments.signature import WebhookSignatureError, construct_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhooks/stripe", tags=["Webhooks"])
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias="Stripe-Signature"),
    webhook_service=Depends(get_webhook_service),
):
    webhook_secret = os.getenv("STRIPE_WEBHOOK_SECRET")
    if not webhook_secret:
        logger.error("[Webhook] Webhook secret not configured")
        return PlainTextResponse("Webhook secret not configured", status_code=400)

    if not stripe_signature:
        logger.error("[Webhook] Missing stripe-signature header")
        return PlainTextResponse("Missing stripe-signature header", status_code=400)

    payload = await request.body()
    try:
        event = construct_event(payload, stripe_signature, webhook_secret)
    except WebhookSignatureError as e:
        logger.error("[Webhook] Signature verification failed: %s", e)
        return PlainTextResponse(f"Webhook signature verification failed: {e}", status_code=400)

    event_type = event.get("type")
    try:
        await webhook_service.handle_event(event)
    except Exception as e:
        logger.error("[Webhook] Error processing event %s: %s", event_type, e, exc_info=True)
        # 500 makes Stripe retry the delivery
        return JSONResponse(
            status_code=500,
            content={"error": "Webhook processing failed", "eventType": event_type},
        )

    return {"received": True, "eventType": event_type}
