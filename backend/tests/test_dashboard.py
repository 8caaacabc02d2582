"""Dashboard figures."""

from conftest import event_order_payload


class TestDashboard:

    def test_summary(self, client, auth_headers, make_item, make_vendor):
        item = make_item(quantity=10, min_stock=5)
        make_item(name="Saffron", quantity=1, min_stock=2)
        make_vendor(due=70000)

        client.post("/api/regular-orders/create", json={
            "customer_name": "Walk-in",
            "phone": "9811111111",
            "items": [{"item_id": item.id, "quantity": 1, "price_cents": 300}],
            "payment": {"method": "cash"},
        }, headers=auth_headers)
        delivered = client.post(
            "/api/event-orders/create", json=event_order_payload(item.id), headers=auth_headers
        ).get_json()
        client.post("/api/event-orders/create", json=event_order_payload(item.id), headers=auth_headers)
        client.patch(
            f"/api/event-orders/{delivered['id']}/status",
            json={"order_status": "delivered"},
            headers=auth_headers,
        )
        client.post("/api/expenses/create", json={
            "description": "Milk", "amount_cents": 200, "category": "ingredients", "payment_method": "cash",
        }, headers=auth_headers)

        resp = client.get("/api/dashboard/summary", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["total_sales_cents"] == 1300
        assert data["total_expenses_cents"] == 200
        assert data["net_profit_cents"] == 1100
        assert data["pending_orders"] == 1
        # Kaju Katli: 10 - 1 - 2 - 2 = 5 (low); Saffron 1 (low)
        assert data["low_stock_items"] == 2
        assert data["vendor_payment_due_cents"] == 70000

    def test_popular_products_and_pending(self, client, auth_headers, make_item):
        laddoo = make_item(name="Laddoo", quantity=100)
        peda = make_item(name="Peda", quantity=100)
        client.post("/api/event-orders/create", json=event_order_payload(laddoo.id, items=[
            {"item_id": laddoo.id, "quantity": 20, "price_cents": 100},
            {"item_id": peda.id, "quantity": 5, "price_cents": 100},
        ]), headers=auth_headers)

        products = client.get("/api/dashboard/popular-products", headers=auth_headers).get_json()["products"]
        assert [p["name"] for p in products] == ["Laddoo", "Peda"]
        assert products[0]["quantity_sold"] == 20

        orders = client.get("/api/dashboard/pending-orders", headers=auth_headers).get_json()["orders"]
        assert len(orders) == 1

    def test_expenses_by_category(self, client, auth_headers):
        for category, amount in (("rent", 500), ("rent", 250), ("utilities", 100)):
            client.post("/api/expenses/create", json={
                "description": category, "amount_cents": amount, "category": category, "payment_method": "cash",
            }, headers=auth_headers)

        rows = client.get("/api/dashboard/expenses", headers=auth_headers).get_json()["expenses"]
        assert rows == [
            {"category": "rent", "amount_cents": 750},
            {"category": "utilities", "amount_cents": 100},
        ]

    def test_sales_by_day(self, client, auth_headers, make_item):
        item = make_item()
        client.post("/api/regular-orders/create", json={
            "customer_name": "Walk-in",
            "phone": "9811111111",
            "items": [{"item_id": item.id, "quantity": 1, "price_cents": 300}],
            "payment": {"method": "cash"},
        }, headers=auth_headers)

        sales = client.get("/api/dashboard/sales", headers=auth_headers).get_json()["sales"]
        assert sum(day["amount_cents"] for day in sales) == 300
