#!/usr/bin/env python3
"""
Send a signed Stripe-style webhook event to a running storefront API.

Signs the payload with STRIPE_WEBHOOK_SECRET the way Stripe does, so the
webhook handler can be exercised locally without the Stripe CLI.

Example:
  python scripts/replay_webhook.py payment_intent.succeeded --order-id 1 --intent pi_123
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

import httpx

from storefront.integrations.payments.signature import generate_signature_header


def build_event(args) -> dict:
    if args.event_type == "charge.refunded":
        obj = {"id": f"ch_{int(time.time())}", "object": "charge", "payment_intent": args.intent}
    else:
        metadata = {}
        if args.order_id:
            metadata["orderId"] = str(args.order_id)
        if args.donation_id:
            metadata["donationId"] = str(args.donation_id)
        if args.email:
            metadata["customerEmail" if args.order_id else "donorEmail"] = args.email
        obj = {
            "id": args.intent,
            "object": "payment_intent",
            "amount": int(round(args.amount * 100)),
            "currency": args.currency.lower(),
            "metadata": metadata,
        }
    return {"id": f"evt_{int(time.time())}", "type": args.event_type, "data": {"object": obj}}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Replay a signed webhook event")
    parser.add_argument("event_type")
    parser.add_argument("--intent", default="pi_local_test")
    parser.add_argument("--order-id", type=int)
    parser.add_argument("--donation-id", type=int)
    parser.add_argument("--email")
    parser.add_argument("--amount", type=float, default=100.0)
    parser.add_argument("--currency", default="GHS")
    parser.add_argument("--url", default=os.getenv("STOREFRONT_API_URL", "http://localhost:3001"))
    args = parser.parse_args(argv)

    secret = os.getenv("STRIPE_WEBHOOK_SECRET")
    if not secret:
        print("STRIPE_WEBHOOK_SECRET is not set", file=sys.stderr)
        return 1

    payload = json.dumps(build_event(args)).encode("utf-8")
    headers = {"Content-Type": "application/json", "Stripe-Signature": generate_signature_header(payload, secret)}
    try:
        response = httpx.post(f"{args.url.rstrip('/')}/api/webhooks/stripe", content=payload, headers=headers)
    except httpx.HTTPError as e:
        print(f"❌ Request failed: {e}", file=sys.stderr)
        return 2
    print(response.status_code, response.text)
    return 0 if response.is_success else 3


if __name__ == "__main__":
    sys.exit(main())
