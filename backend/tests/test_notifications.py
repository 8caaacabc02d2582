"""
WhatsApp client and message text tests.

The Graph API is replaced with httpx.MockTransport; nothing leaves the process.
"""

import json

import httpx
import pytest

from sweetshop.services.document_service import format_money
from sweetshop.services.notification_service import (
    NotificationError,
    WhatsAppClient,
    WhatsAppSettings,
    event_cancellation_text,
    normalize_phone,
    purchase_receipt_text,
)


def _settings(**overrides):
    values = {
        "api_url": "https://graph.test/v22.0",
        "phone_number_id": "1234",
        "token": "test-token",
    }
    values.update(overrides)
    return WhatsAppSettings(**values)


class TestNormalizePhone:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("98765 43210", "919876543210"),
            ("098765-43210", "919876543210"),
            ("+91 98765 43210", "919876543210"),
            ("+1 (415) 555-0100", "14155550100"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_phone(raw, "91") == expected


class TestWhatsAppClient:

    def test_send_text_payload(self, app):
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

        client = WhatsAppClient(_settings(), transport=httpx.MockTransport(handler))
        assert client.send_text("9876543210", "Namaste") is True

        assert captured["url"] == "https://graph.test/v22.0/1234/messages"
        assert captured["auth"] == "Bearer test-token"
        assert captured["body"]["messaging_product"] == "whatsapp"
        assert captured["body"]["to"] == "919876543210"
        assert captured["body"]["text"]["body"] == "Namaste"

    def test_send_document_payload(self, app):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        client = WhatsAppClient(_settings(), transport=httpx.MockTransport(handler))
        client.send_document(
            "9876543210",
            link="http://shop.test/invoices/invoice_7.pdf",
            filename="invoice_7.pdf",
            caption="Thanks",
        )
        assert captured["body"]["type"] == "document"
        assert captured["body"]["document"]["filename"] == "invoice_7.pdf"

    def test_api_error_raises(self, app):
        client = WhatsAppClient(
            _settings(), transport=httpx.MockTransport(lambda request: httpx.Response(401, text="bad token"))
        )
        with pytest.raises(NotificationError):
            client.send_text("9876543210", "hello")

    def test_disabled_without_credentials(self, app):
        def handler(request):
            raise AssertionError("no request expected")

        client = WhatsAppClient(_settings(token=None), transport=httpx.MockTransport(handler))
        assert client.send_text("9876543210", "hello") is False


class TestMessageTexts:

    def test_format_money(self):
        assert format_money(123456789) == "Rs. 1,234,567.89"
        assert format_money(5) == "Rs. 0.05"

    def test_purchase_receipt(self):
        text = purchase_receipt_text({
            "id": 3,
            "customer_name": "Ravi",
            "items": [{"name": "Jalebi", "quantity": 1.5, "unit": "kg"}],
            "payment": {"amount_cents": 45000},
        })
        assert "Order #3" in text
        assert "1.5kg Jalebi" in text
        assert "Rs. 450.00" in text

    def test_cancellation_mentions_refund_only_when_paid(self):
        assert "refunded" in event_cancellation_text({"id": 1, "paid_amount_cents": 500})
        assert "refunded" not in event_cancellation_text({"id": 1, "paid_amount_cents": 0})
