from conftest import order_payload


def _place_order(client, menu_items):
    return client.post("/api/orders", json=order_payload(menu_items)).json()


class TestRecordPayment:
    def test_amount_defaults_to_order_total(self, client, menu_items):
        order = _place_order(client, menu_items)

        response = client.post("/api/payments", json={"orderId": order["id"], "method": "card"})
        assert response.status_code == 201

        payment = response.json()
        assert payment["amount"] == "2500.00"
        assert payment["status"] == "pending"

        order = client.get(f"/api/orders/{order['id']}").json()
        assert order["paymentStatus"] == "pending"
        assert order["paymentMethod"] == "card"

    def test_completed_payment_marks_order_paid(self, client, menu_items):
        order = _place_order(client, menu_items)

        client.post("/api/payments", json={
            "orderId": order["id"], "method": "transfer", "status": "completed", "transactionRef": "TRX-1"})

        order = client.get(f"/api/orders/{order['id']}").json()
        assert order["paymentStatus"] == "paid"
        assert order["paymentMethod"] == "transfer"

    def test_one_payment_per_order(self, client, menu_items):
        order = _place_order(client, menu_items)
        client.post("/api/payments", json={"orderId": order["id"], "method": "cash"})

        response = client.post("/api/payments", json={"orderId": order["id"], "method": "cash"})
        assert response.status_code == 409

    def test_unknown_order(self, client):
        response = client.post("/api/payments", json={"orderId": 12, "method": "cash"})
        assert response.status_code == 404
        assert response.json()["error"] == "OrderNotFound"


class TestPaymentStatus:
    def test_confirm_then_fail(self, client, menu_items):
        order = _place_order(client, menu_items)
        payment = client.post("/api/payments", json={"orderId": order["id"], "method": "card"}).json()

        response = client.patch(f"/api/payments/{payment['id']}/status", json={"status": "completed"})
        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert client.get(f"/api/orders/{order['id']}").json()["paymentStatus"] == "paid"

        client.patch(f"/api/payments/{payment['id']}/status", json={"status": "failed"})
        assert client.get(f"/api/orders/{order['id']}").json()["paymentStatus"] == "failed"

    def test_invalid_status(self, client, menu_items):
        order = _place_order(client, menu_items)
        payment = client.post("/api/payments", json={"orderId": order["id"], "method": "card"}).json()

        response = client.patch(f"/api/payments/{payment['id']}/status", json={"status": "refunded"})
        assert response.status_code == 400

    def test_unknown_payment(self, client):
        response = client.patch("/api/payments/5/status", json={"status": "completed"})
        assert response.status_code == 404
        assert response.json()["error"] == "PaymentNotFound"


class TestPaymentQueries:
    def test_pending_and_by_order(self, client, menu_items):
        first = _place_order(client, menu_items)
        second = _place_order(client, menu_items)
        client.post("/api/payments", json={"orderId": first["id"], "method": "card"})
        client.post("/api/payments", json={"orderId": second["id"], "method": "cash", "status": "completed"})

        pending = client.get("/api/payments/pending").json()
        assert [payment["orderId"] for payment in pending] == [first["id"]]

        assert client.get(f"/api/payments/order/{second['id']}").json()["method"] == "cash"
        assert client.get("/api/payments/order/999").status_code == 404
