"""
Stripe webhook signature verification.

Verification goes through ``stripe.Webhook.construct_event``. The
``Stripe-Signature`` header looks like ``t=1700000000,v1=<hex>``, where each
``v1`` is HMAC-SHA256 over ``"{t}.{raw body}"`` keyed with the endpoint
secret; ``generate_signature_header`` builds one for tests and the local
webhook replay script.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any, Dict, Optional

import stripe

DEFAULT_TOLERANCE_SECONDS = 300


class WebhookSignatureError(ValueError):
    pass


def generate_signature_header(payload: bytes, secret: str, timestamp: Optional[int] = None) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


def construct_event(
    payload: bytes,
    sig_header: str,
    secret: str,
    tolerance: int = DEFAULT_TOLERANCE_SECONDS,
) -> Dict[str, Any]:
    """
    Verify ``sig_header`` against the raw ``payload`` and return the parsed event.

    Raises:
        WebhookSignatureError: bad header, no matching signature, stale
            timestamp or a body that is not a JSON event
    """
    try:
        event = stripe.Webhook.construct_event(payload, sig_header or "", secret, tolerance=tolerance)
    except stripe.SignatureVerificationError as e:
        raise WebhookSignatureError(str(e)) from e
    except ValueError as e:
        raise WebhookSignatureError(f"Invalid payload: {e}") from e
    if "type" not in event:
        raise WebhookSignatureError("Invalid payload: not an event object")
    return event
