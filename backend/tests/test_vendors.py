"""
Vendor tests.

Verifies:
- paying a vendor lowers payment_due by exactly the amount and appends one transaction
- overpayment and bad tenders are rejected without touching the balance
"""


class TestVendorCrud:

    def test_create_and_list(self, client, auth_headers):
        resp = client.post("/api/vendors/create", json={
            "name": "Annapurna Chenna",
            "type": "chenna",
            "contact": "9000012345",
            "address": "Old Bazaar",
            "supplied_items": ["chenna", " paneer "],
            "rate_cents": 28000,
            "payment_due_cents": 560000,
        }, headers=auth_headers)
        assert resp.status_code == 201
        vendor = resp.get_json()
        assert vendor["supplied_items"] == ["chenna", "paneer"]
        assert vendor["transactions"] == []

        resp = client.get("/api/vendors/list?type=chenna", headers=auth_headers)
        assert [v["id"] for v in resp.get_json()["vendors"]] == [vendor["id"]]

    def test_unknown_type_rejected(self, client, auth_headers):
        resp = client.post("/api/vendors/create", json={
            "name": "X", "type": "spaceships", "contact": "1", "address": "Y",
        }, headers=auth_headers)
        assert resp.status_code == 400

    def test_update_and_delete(self, client, auth_headers, make_vendor):
        vendor = make_vendor()
        resp = client.put(f"/api/vendors/{vendor.id}/update", json={"rate_cents": 6500}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.get_json()["rate_cents"] == 6500

        assert client.delete(f"/api/vendors/{vendor.id}/delete", headers=auth_headers).status_code == 200
        assert client.delete(f"/api/vendors/{vendor.id}/delete", headers=auth_headers).status_code == 404


class TestVendorPayments:

    def test_payment_lowers_due_and_appends_transaction(self, client, auth_headers, make_vendor):
        vendor = make_vendor(due=100000)

        resp = client.post(f"/api/vendors/{vendor.id}/pay", json={
            "amount_cents": 40000,
            "payment_method": "phonepe",
            "date": "2026-10-01",
            "quantity": 120,
        }, headers=auth_headers)
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["payment_due_cents"] == 60000
        assert data["last_payment_date"] is not None
        assert len(data["transactions"]) == 1
        txn = data["transactions"][0]
        assert txn["amount_cents"] == 40000
        assert txn["date"] == "2026-10-01"
        assert txn["quantity"] == 120

    def test_full_settlement(self, client, auth_headers, make_vendor):
        vendor = make_vendor(due=5000)
        resp = client.post(
            f"/api/vendors/{vendor.id}/pay",
            json={"amount_cents": 5000, "payment_method": "cash"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        assert resp.get_json()["payment_due_cents"] == 0

    def test_backdated_payment_stamps_its_own_date(self, client, auth_headers, make_vendor):
        vendor = make_vendor(due=5000)
        resp = client.post(
            f"/api/vendors/{vendor.id}/pay",
            json={"amount_cents": 1000, "payment_method": "bank", "date": "2024-01-15"},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["last_payment_date"] == "2024-01-15T00:00:00Z"
        assert data["transactions"][0]["date"] == "2024-01-15"

    def test_non_finite_quantity_rejected(self, client, auth_headers, make_vendor):
        vendor = make_vendor(due=5000)
        resp = client.post(
            f"/api/vendors/{vendor.id}/pay",
            data='{"amount_cents": 1000, "payment_method": "cash", "quantity": Infinity}',
            content_type="application/json",
            headers=auth_headers,
        )
        assert resp.status_code == 400

    def test_overpayment_rejected(self, client, auth_headers, make_vendor):
        vendor = make_vendor(due=5000)
        resp = client.post(
            f"/api/vendors/{vendor.id}/pay",
            json={"amount_cents": 5001, "payment_method": "cash"},
            headers=auth_headers,
        )
        assert resp.status_code == 400

        listed = client.get("/api/vendors/list", headers=auth_headers).get_json()["vendors"][0]
        assert listed["payment_due_cents"] == 5000
        assert listed["transactions"] == []

    def test_bad_method_rejected(self, client, auth_headers, make_vendor):
        vendor = make_vendor()
        resp = client.post(
            f"/api/vendors/{vendor.id}/pay",
            json={"amount_cents": 100, "payment_method": "phonepay"},
            headers=auth_headers,
        )
        assert resp.status_code == 400

    def test_unknown_vendor(self, client, auth_headers):
        resp = client.post(
            "/api/vendors/987654/pay",
            json={"amount_cents": 100, "payment_method": "cash"},
            headers=auth_headers,
        )
        assert resp.status_code == 404
