"""
Inventory tests.

Verifies:
- status is derived from quantity and min_stock, never accepted from input
- adjust_quantity moves stock by deltas and recomputes status in one UPDATE
- CRUD routes and their validation
"""

import pytest

from sweetshop.models import derive_stock_status
from sweetshop.services import inventory_service


class TestDeriveStockStatus:

    @pytest.mark.parametrize(
        "quantity,min_stock,expected",
        [
            (10, 5, "in-stock"),
            (5, 5, "low-stock"),
            (4, 5, "low-stock"),
            (0, 5, "out-of-stock"),
            (-2, 5, "out-of-stock"),
            (0.5, 0, "in-stock"),
        ],
    )
    def test_thresholds(self, quantity, min_stock, expected):
        assert derive_stock_status(quantity, min_stock) == expected


class TestAdjustQuantity:

    def test_status_follows_each_delta(self, make_item):
        item = make_item(quantity=10, min_stock=5)
        assert item.status == "in-stock"

        item = inventory_service.adjust_quantity(item.id, -6)
        assert item.quantity == 4
        assert item.status == "low-stock"

        item = inventory_service.adjust_quantity(item.id, -4)
        assert item.quantity == 0
        assert item.status == "out-of-stock"

        item = inventory_service.adjust_quantity(item.id, 12)
        assert item.quantity == 12
        assert item.status == "in-stock"

    def test_missing_item_returns_none(self, db_session):
        assert inventory_service.adjust_quantity(987654, -1) is None

    def test_apply_order_lines_reports_skipped_ids(self, make_item):
        item = make_item(quantity=3, min_stock=1)
        skipped = inventory_service.apply_order_lines(
            [{"item_id": item.id, "quantity": 1.5}, {"item_id": 987654, "quantity": 1}],
            sign=-1,
        )
        assert skipped == [987654]
        assert inventory_service.get_item(item.id).quantity == 1.5


class TestInventoryRoutes:

    def test_create_derives_status(self, client, auth_headers):
        resp = client.post("/api/inventory/create", json={
            "name": "Besan",
            "category": "ingredients",
            "quantity": 3,
            "unit": "kg",
            "min_stock": 5,
            "cost_per_unit_cents": 9000,
        }, headers=auth_headers)
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["status"] == "low-stock"
        assert data["quantity"] == 3.0

    def test_status_is_rejected_on_create(self, client, auth_headers):
        resp = client.post("/api/inventory/create", json={
            "name": "Besan",
            "category": "ingredients",
            "quantity": 3,
            "unit": "kg",
            "status": "in-stock",
        }, headers=auth_headers)
        assert resp.status_code == 400
        assert "status" in resp.get_json()["error"]

    def test_missing_required_fields(self, client, auth_headers):
        resp = client.post("/api/inventory/create", json={"name": "Besan"}, headers=auth_headers)
        assert resp.status_code == 400
        assert "Missing required fields" in resp.get_json()["error"]

    def test_negative_quantity_rejected(self, client, auth_headers, make_item):
        item = make_item()
        resp = client.put(f"/api/inventory/{item.id}/update", json={"quantity": -1}, headers=auth_headers)
        assert resp.status_code == 400

    def test_nan_quantity_rejected(self, client, auth_headers):
        body = '{"name": "Besan", "category": "ingredients", "quantity": NaN, "unit": "kg"}'
        resp = client.post(
            "/api/inventory/create", data=body, content_type="application/json", headers=auth_headers
        )
        assert resp.status_code == 400
        assert "finite" in resp.get_json()["error"]

    def test_update_recomputes_status(self, client, auth_headers, make_item):
        item = make_item(quantity=10, min_stock=5)
        resp = client.put(f"/api/inventory/{item.id}/update", json={"min_stock": 12}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "low-stock"

    def test_list_filters_by_status(self, client, auth_headers, make_item):
        make_item(name="Sugar", quantity=50, min_stock=10)
        make_item(name="Ghee", quantity=0, min_stock=2)

        resp = client.get("/api/inventory/list?status=out-of-stock", headers=auth_headers)
        assert resp.status_code == 200
        names = [i["name"] for i in resp.get_json()["items"]]
        assert names == ["Ghee"]

        resp = client.get("/api/inventory/list?status=bogus", headers=auth_headers)
        assert resp.status_code == 400

    def test_low_stock_lists_low_and_out(self, client, auth_headers, make_item):
        make_item(name="Sugar", quantity=50, min_stock=10)
        make_item(name="Ghee", quantity=0, min_stock=2)
        make_item(name="Cardamom", quantity=1, min_stock=2)

        resp = client.get("/api/inventory/low-stock", headers=auth_headers)
        names = [i["name"] for i in resp.get_json()["items"]]
        assert names == ["Ghee", "Cardamom"]

    def test_delete(self, client, auth_headers, make_item):
        item = make_item()
        resp = client.delete(f"/api/inventory/{item.id}/delete", headers=auth_headers)
        assert resp.status_code == 200

        resp = client.delete(f"/api/inventory/{item.id}/delete", headers=auth_headers)
        assert resp.status_code == 404

    def test_requires_auth(self, client, db_session):
        assert client.get("/api/inventory/list").status_code == 401
