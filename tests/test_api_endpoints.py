import json

import pytest
from fastapi.testclient import TestClient

from storefront.api.main import create_app
from storefront.database.memory import MemoryShopRepository
from storefront.database.seed import seed_products
from storefront.integrations.email.senders import LoggingEmailSender
from storefront.integrations.email.service import EmailService
from storefront.integrations.payments.mock import MockPaymentClient
from storefront.integrations.payments.signature import generate_signature_header

ADMIN_KEY = "test-admin-key"
WEBHOOK_SECRET = "whsec_endpoint"


async def _no_sleep(_seconds):
    return None


class Harness:
    def __init__(self, repository, payments, sender, client):
        self.repository = repository
        self.payments = payments
        self.sender = sender
        self.client = client


@pytest.fixture
def api(monkeypatch):
    monkeypatch.setenv("ADMIN_API_KEYS", ADMIN_KEY)
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setenv("ADMIN_EMAIL", "admin@mawu.org")

    repository = MemoryShopRepository()
    seed_products(repository)
    payments = MockPaymentClient()
    sender = LoggingEmailSender()
    app = create_app(
        repository=repository,
        payment_client=payments,
        email_service=EmailService(sender, sleep=_no_sleep),
    )
    return Harness(repository, payments, sender, TestClient(app))


def _admin(headers=None):
    out = {"X-API-KEY": ADMIN_KEY}
    out.update(headers or {})
    return out


# ---------------------------------------------------------------------------
# Public catalogue
# ---------------------------------------------------------------------------

def test_health_reports_services(api):
    r = api.client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["services"] == {"database": "connected", "stripe": "not configured", "email": "Logging (mock)"}


def test_health_unhealthy_when_database_down(api, monkeypatch):
    def broken_ping():
        raise RuntimeError("connection refused")

    monkeypatch.setattr(api.repository, "ping", broken_ping)
    r = api.client.get("/api/health")
    assert r.status_code == 503
    assert r.json()["status"] == "unhealthy"


def test_list_products_uses_camel_case(api):
    r = api.client.get("/api/products")
    assert r.status_code == 200
    products = r.json()["products"]
    assert len(products) == 6
    assert "impactStatement" in products[0]


def test_get_product_by_slug(api):
    r = api.client.get("/api/products/volta-water-bottle")
    assert r.status_code == 200
    assert r.json()["product"]["slug"] == "volta-water-bottle"

    missing = api.client.get("/api/products/nope")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Product not found"


# ---------------------------------------------------------------------------
# Donations
# ---------------------------------------------------------------------------

def test_donation_intent_creates_processing_donation(api):
    r = api.client.post(
        "/api/donations/create-payment-intent",
        json={"amount": 50, "currency": "usd", "donorEmail": "ama@mawu.org", "donorName": "Ama", "frequency": "monthly"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["clientSecret"].startswith("pi_mock_")

    donation = api.repository.get_donation_by_id(body["donationId"])
    assert donation.status == "processing"
    assert donation.currency == "USD"

    [intent] = api.payments.created
    assert intent.amount == 5000
    assert intent.metadata["donationId"] == str(donation.id)
    assert intent.description == "Donation to Mawu Foundation - monthly"
    assert donation.stripe_payment_intent_id == intent.id


@pytest.mark.parametrize(
    "payload,detail",
    [
        ({"amount": 0, "donorEmail": "a@b.co", "donorName": "A"}, "Invalid donation amount"),
        ({"amount": "x", "donorEmail": "a@b.co", "donorName": "A"}, "Invalid donation amount"),
        ({"amount": "Infinity", "donorEmail": "a@b.co", "donorName": "A"}, "Invalid donation amount"),
        ({"amount": "NaN", "donorEmail": "a@b.co", "donorName": "A"}, "Invalid donation amount"),
        ({"amount": 5, "donorEmail": "nope", "donorName": "A"}, "Valid email address is required"),
        ({"amount": 5, "donorEmail": "a@b.co", "donorName": "  "}, "Donor name is required"),
        ({"amount": 5, "donorEmail": "a@b.co", "donorName": "A", "frequency": "weekly"}, "Invalid donation frequency"),
        ({"amount": 5, "donorEmail": "a@b.co", "donorName": "A", "currency": "JPY"}, "Invalid currency"),
    ],
)
def test_donation_intent_validation(api, payload, detail):
    r = api.client.post("/api/donations/create-payment-intent", json=payload)
    assert r.status_code == 400
    assert r.json()["detail"] == detail
    assert api.repository.list_donations() == []


def test_payment_provider_failure_returns_502(api):
    api.payments.fail_with = "Your card was declined."
    r = api.client.post(
        "/api/donations/create-payment-intent",
        json={"amount": 5, "donorEmail": "a@b.co", "donorName": "A"},
    )
    assert r.status_code == 502
    assert r.json()["detail"] == "Your card was declined."


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

def _bottle_id(api):
    return api.repository.get_product_by_slug("volta-water-bottle").id


def test_order_intent_creates_pending_customer_order(api):
    product_id = _bottle_id(api)
    r = api.client.post(
        "/api/orders/create-payment-intent",
        json={
            "items": [{"productId": product_id, "productName": "Volta Bottle", "quantity": 2, "price": 145}],
            "totalAmount": 290,
        },
    )
    assert r.status_code == 200
    order = api.repository.get_order_by_id(r.json()["orderId"])
    assert order.customer_email == "pending@checkout.com"
    assert order.customer_name == "Pending Customer"
    assert order.status == "processing"
    assert order.currency == "GHS"
    assert api.payments.created[0].description == f"Order #MF-{order.id:08d}"
    assert api.payments.created[0].amount == 29000


def test_order_intent_rejects_empty_and_invalid(api):
    r = api.client.post("/api/orders/create-payment-intent", json={"items": [], "totalAmount": 10})
    assert r.status_code == 400
    assert r.json()["detail"] == "Order must contain at least one item"

    item = {"productId": _bottle_id(api), "quantity": 1, "price": 145}
    r = api.client.post("/api/orders/create-payment-intent", json={"items": [item], "totalAmount": -1})
    assert r.json()["detail"] == "Invalid order amount"

    r = api.client.post("/api/orders/create-payment-intent", json={"items": [item], "totalAmount": "Infinity"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid order amount"
    assert api.repository.list_orders() == []


def test_order_intent_rejects_insufficient_inventory(api):
    item = {"productId": _bottle_id(api), "productName": "Bottle", "quantity": 100000, "price": 145}
    r = api.client.post("/api/orders/create-payment-intent", json={"items": [item], "totalAmount": 145})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Insufficient inventory for")
    assert api.repository.list_orders() == []


def test_update_customer_info(api):
    item = {"productId": _bottle_id(api), "quantity": 1, "price": 145}
    order_id = api.client.post(
        "/api/orders/create-payment-intent", json={"items": [item], "totalAmount": 145}
    ).json()["orderId"]

    r = api.client.put(
        f"/api/orders/{order_id}/customer-info",
        json={"customerEmail": "kofi@example.com", "customerName": "Kofi"},
    )
    assert r.status_code == 200
    assert r.json()["order"]["customerEmail"] == "kofi@example.com"
    assert r.json()["order"]["shippingAddress"] == {}

    assert api.client.put("/api/orders/9999/customer-info", json={}).status_code == 404


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

def test_admin_requires_api_key(api):
    assert api.client.get("/api/admin/orders").status_code == 401
    assert api.client.get("/api/admin/orders", headers={"X-API-KEY": "wrong"}).status_code == 401
    assert api.client.get("/api/admin/orders", headers=_admin()).status_code == 200


def test_admin_product_crud(api):
    payload = {
        "slug": "adinkra-mug",
        "name": "Adinkra Mug",
        "category": "Home",
        "price": 60,
        "description": "Ceramic mug",
        "inventory": 10,
        "variations": [{"type": "color", "name": "Color", "options": [{"value": "black", "label": "Black"}]}],
    }
    created = api.client.post("/api/admin/products", json=payload, headers=_admin())
    assert created.status_code == 200
    product = created.json()["product"]
    assert product["variations"][0]["options"] == [{"value": "black", "label": "Black"}]

    dup = api.client.post("/api/admin/products", json=payload, headers=_admin())
    assert dup.status_code == 409

    updated = api.client.put(f"/api/admin/products/{product['id']}", json={"price": 65}, headers=_admin())
    assert updated.json()["product"]["price"] == 65
    assert updated.json()["product"]["name"] == "Adinkra Mug"

    deleted = api.client.delete(f"/api/admin/products/{product['id']}", headers=_admin())
    assert deleted.json() == {"message": "Product deleted successfully"}
    assert api.client.delete(f"/api/admin/products/{product['id']}", headers=_admin()).status_code == 404
    assert api.client.put("/api/admin/products/9999", json={"price": 1}, headers=_admin()).status_code == 404


def test_admin_product_validation(api):
    base = {"slug": "x-mug", "name": "Mug", "category": "Home", "price": 1, "description": ""}
    r = api.client.post("/api/admin/products", json=dict(base, availability="sold_out"), headers=_admin())
    assert r.status_code == 400

    bad_variation = [{"type": "flavour", "name": "F", "options": [{"value": "a", "label": "A"}]}]
    r = api.client.post("/api/admin/products", json=dict(base, variations=bad_variation), headers=_admin())
    assert r.status_code == 400


def test_admin_order_status_update_sends_email(api):
    order = api.repository.create_order(
        {"customer_email": "kofi@example.com", "customer_name": "Kofi", "items": [], "total_amount": 10, "status": "completed"}
    )

    r = api.client.put(
        f"/api/admin/orders/{order.id}", json={"status": "shipped", "trackingNumber": "TRK1"}, headers=_admin()
    )

    assert r.status_code == 200
    assert r.json()["order"]["status"] == "shipped"
    [sent] = api.sender.outbox
    assert sent.to == "kofi@example.com"
    assert sent.subject == f"Order Update - MF-{order.id:08d} (Shipped)"


def test_admin_order_status_errors(api):
    order = api.repository.create_order(
        {"customer_email": "kofi@example.com", "customer_name": "Kofi", "items": [], "total_amount": 10}
    )
    assert api.client.put(f"/api/admin/orders/{order.id}", json={}, headers=_admin()).json()["detail"] == "Status is required"
    assert api.client.put(f"/api/admin/orders/{order.id}", json={"status": "lost"}, headers=_admin()).json()["detail"] == "Invalid status"
    assert api.client.put("/api/admin/orders/9999", json={"status": "shipped"}, headers=_admin()).status_code == 404
    assert api.sender.outbox == []


def test_admin_lists_donations_newest_first(api):
    first = api.repository.create_donation({"donor_email": "a@b.co", "donor_name": "A", "amount": 5})
    second = api.repository.create_donation({"donor_email": "c@d.co", "donor_name": "C", "amount": 7})
    r = api.client.get("/api/admin/donations", headers=_admin())
    assert [d["id"] for d in r.json()["donations"]] == [second.id, first.id]


def test_admin_test_email(api):
    r = api.client.post("/api/admin/test-email", json={"email": "ops@mawu.org"}, headers=_admin())
    assert r.status_code == 200
    assert r.json()["recipient"] == "ops@mawu.org"
    assert api.sender.outbox[0].subject == "Email Service Test - Mawu Foundation"

    bad = api.client.post("/api/admin/test-email", json={"email": "nope"}, headers=_admin())
    assert bad.status_code == 400


# ---------------------------------------------------------------------------
# Webhook
# ---------------------------------------------------------------------------

def _post_webhook(api, event, secret=WEBHOOK_SECRET):
    payload = json.dumps(event).encode()
    return api.client.post(
        "/api/webhooks/stripe",
        content=payload,
        headers={"Stripe-Signature": generate_signature_header(payload, secret), "Content-Type": "application/json"},
    )


def test_webhook_completes_donation(api):
    donation_id = api.client.post(
        "/api/donations/create-payment-intent",
        json={"amount": 20, "currency": "USD", "donorEmail": "ama@mawu.org", "donorName": "Ama"},
    ).json()["donationId"]
    intent = api.payments.created[0]

    r = _post_webhook(
        api,
        {
            "id": "evt_1",
            "type": "payment_intent.succeeded",
            "data": {"object": {"id": intent.id, "amount": 2000, "currency": "usd", "metadata": intent.metadata}},
        },
    )

    assert r.status_code == 200
    assert r.json() == {"received": True, "eventType": "payment_intent.succeeded"}
    assert api.repository.get_donation_by_id(donation_id).status == "completed"
    assert [m.to for m in api.sender.outbox] == ["ama@mawu.org", "admin@mawu.org"]


def test_webhook_rejects_bad_signature(api):
    r = _post_webhook(api, {"id": "evt_1", "type": "charge.refunded", "data": {"object": {}}}, secret="whsec_other")
    assert r.status_code == 400
    assert r.text.startswith("Webhook signature verification failed")


def test_webhook_requires_signature_header(api):
    r = api.client.post("/api/webhooks/stripe", content=b"{}")
    assert r.status_code == 400
    assert r.text == "Missing stripe-signature header"


def test_webhook_requires_configured_secret(api, monkeypatch):
    monkeypatch.delenv("STRIPE_WEBHOOK_SECRET")
    r = _post_webhook(api, {"id": "evt_1", "type": "charge.refunded", "data": {"object": {}}})
    assert r.status_code == 400
    assert r.text == "Webhook secret not configured"


def test_webhook_handler_failure_returns_500(api, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(api.repository, "find_order_by_payment_intent", broken)
    r = _post_webhook(api, {"id": "evt_1", "type": "charge.refunded", "data": {"object": {"payment_intent": "pi_1"}}})

    assert r.status_code == 500
    assert r.json() == {
        "error": "Webhook processing failed",
        "eventType": "charge.refunded",
    }


def test_unhandled_error_returns_generic_500(api, monkeypatch):
    def broken():
        raise RuntimeError("connection string postgres://secret")

    monkeypatch.setattr(api.repository, "list_products", broken)
    client = TestClient(api.client.app, raise_server_exceptions=False)
    r = client.get("/api/products")

    assert r.status_code == 500
    body = r.json()
    assert "internal error" in body["error"].lower()
    assert body["context"] == {"path": "/api/products", "method": "GET"}
    assert "secret" not in r.text
