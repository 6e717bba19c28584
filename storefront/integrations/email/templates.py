"""Plain-text email templates for customers, donors and admins."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

FOOTER = (
    "---\n"
    "Mawu Foundation\n"
    "Supporting development in Ghana's Volta Region and pan-African initiatives\n"
)

STATUS_MESSAGES = {
    "processing": "Your order is being prepared for shipment.",
    "shipped": "Your order has been shipped and is on its way to you!",
    "delivered": "Your order has been delivered. Thank you for your support!",
    "cancelled": "Your order has been cancelled. If you have any questions, please contact us.",
}


@dataclass
class EmailContent:
    subject: str
    text: str


@dataclass
class OrderLine:
    name: str
    quantity: int
    price: str
    selected_variations: Dict[str, str] = field(default_factory=dict)


@dataclass
class ShippingAddress:
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""


@dataclass
class OrderConfirmationData:
    customer_name: str
    customer_email: str
    order_number: str
    items: List[OrderLine]
    total_amount: str
    shipping_address: ShippingAddress
    order_date: str


@dataclass
class DonationReceiptData:
    donor_name: str
    donor_email: str
    amount: str
    currency: str
    donation_date: str
    transaction_id: str
    anonymous: bool = False
    message: Optional[str] = None


@dataclass
class OrderStatusUpdateData:
    customer_name: str
    customer_email: str
    order_number: str
    status: str
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[str] = None


@dataclass
class AdminNotificationData:
    type: str  # "new_order" | "new_donation"
    amount: str
    currency: str
    date: str
    admin_email: str
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    donor_name: Optional[str] = None


def order_confirmation(data: OrderConfirmationData) -> EmailContent:
    lines = []
    for item in data.items:
        variations = ", ".join(f"{k}: {v}" for k, v in item.selected_variations.items())
        suffix = f" ({variations})" if variations else ""
        lines.append(f"- {item.name}{suffix} x {item.quantity} - {item.price}")

    addr = data.shipping_address
    text = (
        "Mawu Foundation - Order Confirmation\n\n"
        f"Dear {data.customer_name},\n\n"
        "Thank you for your order! We're excited to send you these items that support our mission "
        "in Ghana's Volta Region and pan-African initiatives.\n\n"
        "Order Details:\n"
        f"Order Number: {data.order_number}\n"
        f"Order Date: {data.order_date}\n\n"
        "Items Ordered:\n"
        + "\n".join(lines)
        + f"\n\nTotal: {data.total_amount}\n\n"
        "Shipping Address:\n"
        f"{addr.street}\n"
        f"{addr.city}, {addr.state} {addr.zip_code}\n"
        f"{addr.country}\n\n"
        "We'll send you a shipping confirmation with tracking information once your order is on its way.\n\n"
        + FOOTER
    )
    return EmailContent(subject=f"Order Confirmation - {data.order_number}", text=text)


def donation_receipt(data: DonationReceiptData) -> EmailContent:
    currency = data.currency.upper()
    greeting = "Anonymous Donor" if data.anonymous else data.donor_name
    message = f'Message: "{data.message}"\n' if data.message else ""
    text = (
        "Mawu Foundation - Donation Receipt\n\n"
        f"Dear {greeting},\n\n"
        "Thank you for your generous donation to the Mawu Foundation! Your support directly impacts our "
        "development work in Ghana's Volta Region and our pan-African initiatives.\n\n"
        "Donation Details:\n"
        f"Amount: {data.amount} {currency}\n"
        f"Date: {data.donation_date}\n"
        f"Transaction ID: {data.transaction_id}\n"
        f"{message}\n"
        "Please retain this receipt for your records.\n\n"
        + FOOTER
    )
    return EmailContent(subject=f"Donation Receipt - {data.amount} {currency}", text=text)


def order_status_update(data: OrderStatusUpdateData) -> EmailContent:
    status_label = data.status[:1].upper() + data.status[1:]
    status_message = STATUS_MESSAGES.get(data.status, f"Your order status has been updated to: {data.status}")
    tracking = ""
    if data.tracking_number:
        tracking = f"Tracking Information:\nTracking Number: {data.tracking_number}\n"
        if data.estimated_delivery:
            tracking += f"Estimated Delivery: {data.estimated_delivery}\n"
        tracking += "\n"
    text = (
        "Mawu Foundation - Order Status Update\n\n"
        f"Dear {data.customer_name},\n\n"
        f"We have an update on your order {data.order_number}.\n\n"
        f"Status: {status_label}\n"
        f"{status_message}\n\n"
        f"{tracking}"
        "If you have any questions about your order, please don't hesitate to contact us.\n\n"
        + FOOTER
    )
    return EmailContent(subject=f"Order Update - {data.order_number} ({status_label})", text=text)


def admin_notification(data: AdminNotificationData) -> EmailContent:
    if data.type == "new_order":
        subject = f"New Order: {data.order_number} - {data.amount} {data.currency}"
        body = (
            "A new order has been placed.\n\n"
            f"Order Number: {data.order_number}\n"
            f"Customer: {data.customer_name}\n"
        )
    else:
        subject = f"New Donation: {data.amount} {data.currency} from {data.donor_name}"
        body = "A new donation has been received.\n\n" f"Donor: {data.donor_name}\n"
    text = (
        f"Mawu Foundation - Admin Notification\n\n{body}"
        f"Amount: {data.amount} {data.currency}\n"
        f"Date: {data.date}\n\n"
        + FOOTER
    )
    return EmailContent(subject=subject, text=text)


def connectivity_check(sent_at: str, service_name: str) -> EmailContent:
    text = (
        "Mawu Foundation - Email Service Test\n\n"
        "This test email confirms that the Mawu Foundation email service is properly configured and functioning.\n\n"
        "Test Details:\n"
        f"- Service: {service_name}\n"
        f"- Time: {sent_at}\n\n"
        "All email notifications for orders, donations, and admin alerts should now work correctly.\n\n"
        + FOOTER
    )
    return EmailContent(subject="Email Service Test - Mawu Foundation", text=text)
