"""
Side-effect dispatcher tests.

Verifies:
- jobs are retried with backoff and their failure never reaches the caller
- PDFs are rendered from plain snapshots
- document routes only serve the expected file names
"""

import os

from sweetshop.services import document_service
from sweetshop.services.side_effects import EXTENSION_KEY


class TestDispatcher:

    def test_retries_until_success(self, app):
        dispatcher = app.extensions[EXTENSION_KEY]
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise RuntimeError("gateway timeout")

        assert dispatcher.submit("flaky", flaky) is True
        assert len(calls) == 3

    def test_final_failure_is_swallowed(self, app, caplog):
        dispatcher = app.extensions[EXTENSION_KEY]
        calls = []

        def broken():
            calls.append(1)
            raise RuntimeError("always down")

        assert dispatcher.submit("broken", broken) is False
        assert len(calls) == dispatcher.attempts
        assert "Side effect broken failed" in caplog.text

    def test_order_survives_failing_messaging(self, app, client, auth_headers, make_item, monkeypatch):
        from sweetshop.services import side_effects

        def explode(*args, **kwargs):
            raise RuntimeError("renderer down")

        monkeypatch.setattr(side_effects.documents, "render_regular_invoice", explode)
        resp = client.post("/api/regular-orders/create", json={
            "customer_name": "Ravi",
            "phone": "9812345678",
            "items": [{"item_id": make_item().id, "quantity": 1, "price_cents": 100}],
            "payment": {"method": "cash"},
        }, headers=auth_headers)
        assert resp.status_code == 201


class TestDocuments:

    def _event_snapshot(self):
        return {
            "id": 41,
            "customer_name": "Meera",
            "phone": "9876501234",
            "purpose": "Wedding",
            "address": "4 Temple Street",
            "delivery_date": "2026-11-14",
            "delivery_time": "AM",
            "items": [{"name": "Laddoo", "unit": "pcs", "quantity": 200, "price_cents": 1500, "line_total_cents": 300000}],
            "payments": [{"amount_cents": 100000, "method": "cash", "card_reference": None, "paid_at": "2026-10-19T08:00:00Z"}],
            "discount_cents": 0,
            "total_amount_cents": 300000,
            "paid_amount_cents": 100000,
            "balance_cents": 200000,
            "payment_status": "partial",
            "order_status": "pending",
            "notes": "",
            "created_at": "2026-10-19T08:00:00Z",
        }

    def test_render_event_documents(self, tmp_path):
        order = self._event_snapshot()
        kwargs = {"documents_dir": str(tmp_path), "shop_name": "Test Sweets"}

        booking = document_service.render_booking_receipt(order, **kwargs)
        payment = document_service.render_payment_receipt(order, order["payments"][0], **kwargs)
        final = document_service.render_final_invoice(order, **kwargs)

        assert booking == os.path.join(str(tmp_path), "receipts", "booking_41.pdf")
        assert payment.endswith("payment_41.pdf")
        assert final.endswith("final_41.pdf")
        for path in (booking, payment, final):
            with open(path, "rb") as fh:
                assert fh.read(4) == b"%PDF"

    def test_rejects_unexpected_names(self, client, db_session):
        assert client.get("/invoices/../config.py").status_code == 404
        assert client.get("/invoices/secrets.pdf").status_code == 404
        assert client.get("/receipts/invoice_1.pdf").status_code == 404

    def test_missing_document(self, client, db_session):
        assert client.get("/receipts/final_987654.pdf").status_code == 404
