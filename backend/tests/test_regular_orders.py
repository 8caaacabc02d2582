"""
Regular order tests.

Verifies:
- the payment amount is the sum of price x quantity over the lines
- settlement deducts stock and delete restores it
- lines and payment cannot be edited after creation
- unknown items fail the whole order with nothing deducted
"""

import os

from sweetshop.services import inventory_service


def _order(item_id, **overrides):
    payload = {
        "customer_name": "Ravi Kumar",
        "phone": "9812345678",
        "items": [{"item_id": item_id, "quantity": 2, "price_cents": 10}],
        "payment": {"method": "cash"},
    }
    payload.update(overrides)
    return payload


class TestCreateRegularOrder:

    def test_amount_is_sum_of_lines_and_stock_moves(self, client, auth_headers, make_item):
        item = make_item(quantity=10, min_stock=5)

        resp = client.post("/api/regular-orders/create", json=_order(item.id), headers=auth_headers)
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["payment"]["amount_cents"] == 20
        assert data["items"][0]["line_total_cents"] == 20
        assert data["items"][0]["name"] == "Kaju Katli"
        assert data["invoice_url"].endswith(f"/invoices/invoice_{data['id']}.pdf")

        assert inventory_service.get_item(item.id).quantity == 8

    def test_client_amount_is_ignored(self, client, auth_headers, make_item):
        item = make_item()
        payload = _order(item.id, payment={"method": "gpay", "amount_cents": 99999})
        resp = client.post("/api/regular-orders/create", json=payload, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.get_json()["payment"]["amount_cents"] == 20

    def test_fractional_quantity_rounds_line_total(self, client, auth_headers, make_item):
        item = make_item(quantity=5)
        payload = _order(item.id, items=[{"item_id": item.id, "quantity": 0.25, "price_cents": 45000}])
        resp = client.post("/api/regular-orders/create", json=payload, headers=auth_headers)
        assert resp.status_code == 201
        assert resp.get_json()["payment"]["amount_cents"] == 11250
        assert inventory_service.get_item(item.id).quantity == 4.75

    def test_unknown_item_rejects_whole_order(self, client, auth_headers, make_item):
        item = make_item(quantity=10)
        payload = _order(item.id, items=[
            {"item_id": item.id, "quantity": 1, "price_cents": 100},
            {"item_id": 987654, "quantity": 1, "price_cents": 100},
        ])
        resp = client.post("/api/regular-orders/create", json=payload, headers=auth_headers)
        assert resp.status_code == 400
        assert "987654" in resp.get_json()["error"]
        assert inventory_service.get_item(item.id).quantity == 10

    def test_infinite_quantity_rejected(self, client, auth_headers, make_item):
        item = make_item(quantity=10)
        body = (
            '{"customer_name": "Ravi Kumar", "phone": "9812345678", "payment": {"method": "cash"}, '
            f'"items": [{{"item_id": {item.id}, "quantity": Infinity, "price_cents": 10}}]}}'
        )
        resp = client.post(
            "/api/regular-orders/create", data=body, content_type="application/json", headers=auth_headers
        )
        assert resp.status_code == 400
        assert "finite" in resp.get_json()["error"]
        assert inventory_service.get_item(item.id).quantity == 10

    def test_bad_payment_method(self, client, auth_headers, make_item):
        item = make_item()
        resp = client.post(
            "/api/regular-orders/create",
            json=_order(item.id, payment={"method": "cheque"}),
            headers=auth_headers,
        )
        assert resp.status_code == 400

    def test_empty_items(self, client, auth_headers, db_session):
        resp = client.post("/api/regular-orders/create", json=_order(1, items=[]), headers=auth_headers)
        assert resp.status_code == 400

    def test_invoice_pdf_is_written(self, app, client, auth_headers, make_item):
        item = make_item()
        resp = client.post("/api/regular-orders/create", json=_order(item.id), headers=auth_headers)
        order_id = resp.get_json()["id"]

        path = os.path.join(app.config["DOCUMENTS_DIR"], "invoices", f"invoice_{order_id}.pdf")
        assert os.path.exists(path)

        resp = client.get(f"/invoices/invoice_{order_id}.pdf")
        assert resp.status_code == 200
        assert resp.mimetype == "application/pdf"
        assert resp.data.startswith(b"%PDF")


class TestUpdateRegularOrder:

    def test_header_fields_update(self, client, auth_headers, make_item):
        item = make_item()
        order_id = client.post(
            "/api/regular-orders/create", json=_order(item.id), headers=auth_headers
        ).get_json()["id"]

        resp = client.put(
            f"/api/regular-orders/{order_id}/update",
            json={"customer_name": "Ravi K.", "phone": "9800000000"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.get_json()["customer_name"] == "Ravi K."

    def test_items_cannot_change(self, client, auth_headers, make_item):
        item = make_item()
        order_id = client.post(
            "/api/regular-orders/create", json=_order(item.id), headers=auth_headers
        ).get_json()["id"]

        resp = client.put(
            f"/api/regular-orders/{order_id}/update",
            json={"items": [{"item_id": item.id, "quantity": 5, "price_cents": 10}]},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert inventory_service.get_item(item.id).quantity == 8

    def test_payment_cannot_change(self, client, auth_headers, make_item):
        item = make_item()
        order_id = client.post(
            "/api/regular-orders/create", json=_order(item.id), headers=auth_headers
        ).get_json()["id"]

        resp = client.put(
            f"/api/regular-orders/{order_id}/update",
            json={"payment": {"method": "card", "amount_cents": 1}},
            headers=auth_headers,
        )
        assert resp.status_code == 400


class TestDeleteRegularOrder:

    def test_delete_restores_stock(self, client, auth_headers, make_item):
        item = make_item(quantity=10)
        order_id = client.post(
            "/api/regular-orders/create", json=_order(item.id), headers=auth_headers
        ).get_json()["id"]
        assert inventory_service.get_item(item.id).quantity == 8

        resp = client.delete(f"/api/regular-orders/{order_id}/delete", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.get_json()["skipped_item_ids"] == []
        assert inventory_service.get_item(item.id).quantity == 10

        resp = client.get(f"/api/regular-orders/{order_id}/list", headers=auth_headers)
        assert resp.status_code == 404

    def test_delete_skips_removed_items(self, client, auth_headers, make_item):
        item = make_item()
        order_id = client.post(
            "/api/regular-orders/create", json=_order(item.id), headers=auth_headers
        ).get_json()["id"]
        client.delete(f"/api/inventory/{item.id}/delete", headers=auth_headers)

        resp = client.delete(f"/api/regular-orders/{order_id}/delete", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.get_json()["skipped_item_ids"] == [item.id]

    def test_delete_unknown(self, client, auth_headers):
        resp = client.delete("/api/regular-orders/987654/delete", headers=auth_headers)
        assert resp.status_code == 404
