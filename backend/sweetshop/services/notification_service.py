# Overview: WhatsApp Cloud API client and the customer-facing message texts.

from __future__ import annotations

import re
from dataclasses import dataclass

import httpx
from flask import current_app

from .document_service import format_money


class NotificationError(Exception):
    """Raised when the messaging API rejects or fails a send (retryable)."""
    pass


@dataclass(frozen=True)
class WhatsAppSettings:
    api_url: str
    phone_number_id: str | None
    token: str | None
    default_country_code: str = "91"
    timeout: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.phone_number_id)

    @property
    def messages_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.phone_number_id}/messages"

    @classmethod
    def from_config(cls, config) -> "WhatsAppSettings":
        return cls(
            api_url=config["WHATSAPP_API_URL"],
            phone_number_id=config.get("WHATSAPP_PHONE_NUMBER_ID"),
            token=config.get("WHATSAPP_API_TOKEN"),
            default_country_code=config.get("WHATSAPP_DEFAULT_COUNTRY_CODE", "91"),
            timeout=float(config.get("WHATSAPP_TIMEOUT_SECONDS", 10)),
        )


def normalize_phone(phone: str, default_country_code: str) -> str:
    """
    Digits only, in international form without '+'.
    Local 10-digit numbers (optionally with a trunk '0') get the default country code.
    """
    digits = re.sub(r"\D", "", phone or "")
    if len(digits) == 11 and digits.startswith("0"):
        digits = digits[1:]
    if len(digits) == 10:
        digits = f"{default_country_code}{digits}"
    return digits


class WhatsAppClient:
    """
    Minimal Graph API sender for text and document messages.

    transport is only for tests (httpx.MockTransport).
    """

    def __init__(self, settings: WhatsAppSettings, *, transport: httpx.BaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    def send_text(self, to: str, body: str) -> bool:
        return self._send(to, {"type": "text", "text": {"preview_url": False, "body": body}})

    def send_document(self, to: str, *, link: str, filename: str, caption: str) -> bool:
        return self._send(to, {
            "type": "document",
            "document": {"link": link, "filename": filename, "caption": caption},
        })

    def _send(self, to: str, message: dict) -> bool:
        if not self.settings.enabled:
            current_app.logger.info("WhatsApp not configured; skipping %s message", message["type"])
            return False

        recipient = normalize_phone(to, self.settings.default_country_code)
        if not recipient:
            raise NotificationError("recipient phone number is empty")

        payload = {"messaging_product": "whatsapp", "recipient_type": "individual", "to": recipient, **message}
        headers = {"Authorization": f"Bearer {self.settings.token}"}

        try:
            with httpx.Client(timeout=self.settings.timeout, transport=self._transport) as client:
                resp = client.post(self.settings.messages_url, json=payload, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotificationError(
                f"WhatsApp API returned {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NotificationError(f"WhatsApp API request failed: {exc}") from exc

        current_app.logger.info("WhatsApp %s message sent to %s", message["type"], recipient)
        return True


def get_whatsapp_client() -> WhatsAppClient:
    return WhatsAppClient(WhatsAppSettings.from_config(current_app.config))


# Message texts

def purchase_receipt_text(order: dict) -> str:
    items = ", ".join(
        f"{line['quantity']:g}{line.get('unit') or ''} {line['name']}" for line in order["items"]
    )
    return (
        f"Hi {order['customer_name']}, thank you for your purchase!\n"
        f"Order #{order['id']}: {items}\n"
        f"Total: {format_money(order['payment']['amount_cents'])}"
    )


def booking_text(order: dict) -> str:
    balance = order["total_amount_cents"] - order["paid_amount_cents"]
    return (
        "Event booking confirmed!\n"
        f"Order #{order['id']} for {order['delivery_date']} ({order['delivery_time']})\n"
        f"Advance: {format_money(order['paid_amount_cents'])}\n"
        f"Balance: {format_money(balance)}"
    )


def payment_received_text(order: dict, payment: dict) -> str:
    balance = order["total_amount_cents"] - order["paid_amount_cents"]
    return (
        f"Payment received: {format_money(payment['amount_cents'])}\n"
        f"Balance: {format_money(balance)}"
    )


def final_payment_text(order: dict) -> str:
    return f"Final payment received!\nTotal: {format_money(order['total_amount_cents'])}"


def delivered_text(order: dict) -> str:
    return "Your order has been delivered! Thank you for your business."


def regular_cancellation_text(order: dict) -> str:
    amount = order["payment"]["amount_cents"]
    message = f"Your order #{order['id']} has been cancelled."
    if amount:
        message += f" {format_money(amount)} will be refunded."
    return message


def event_cancellation_text(order: dict) -> str:
    message = f"Your event order #{order['id']} has been cancelled."
    if order["paid_amount_cents"] > 0:
        message += f" {format_money(order['paid_amount_cents'])} will be refunded."
    return message
