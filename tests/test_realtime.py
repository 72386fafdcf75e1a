from datetime import datetime

from conftest import order_payload


def _updated_at(event):
    return datetime.fromisoformat(event["updatedAt"])


class TestRealtimeChannel:
    def test_listener_sees_events_in_order(self, client, menu_items):
        with client.websocket_connect("/ws") as websocket:
            assert websocket.receive_json() == {"type": "connected"}

            order = client.post("/api/orders", json=order_payload(menu_items)).json()
            client.patch(f"/api/orders/{order['id']}/status", json={"status": "preparing"})
            client.patch(f"/api/orders/{order['id']}/status", json={"status": "ready"})

            events = [websocket.receive_json() for _ in range(3)]

        assert [(event["type"], event["status"]) for event in events] == [
            ("new_order", "pending"),
            ("order_update", "preparing"),
            ("order_update", "ready"),
        ]
        assert events[0]["orderNumber"] == order["orderNumber"]
        assert {event["orderId"] for event in events} == {order["id"]}

    def test_every_listener_gets_each_event_once(self, client, menu_items):
        with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
            first.receive_json()
            second.receive_json()

            order = client.post("/api/orders", json=order_payload(menu_items)).json()

            # A ping round trip proves nothing else was queued before it
            for websocket in (first, second):
                event = websocket.receive_json()
                assert event["type"] == "new_order"
                assert event["orderId"] == order["id"]
                websocket.send_text("ping")
                assert websocket.receive_json() == {"type": "pong"}

    def test_late_listener_only_sees_later_events(self, client, menu_items):
        order = client.post("/api/orders", json=order_payload(menu_items)).json()

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()

            # The earlier new_order is gone, a full fetch still shows the order
            active = client.get("/api/orders/active").json()
            assert [o["id"] for o in active] == [order["id"]]

            client.patch(f"/api/orders/{order['id']}/status", json={"status": "completed"})
            event = websocket.receive_json()

        assert event["type"] == "order_update"
        assert event["status"] == "completed"

    def test_failed_update_is_not_broadcast(self, client, menu_items):
        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()

            response = client.patch("/api/orders/does-not-exist/status", json={"status": "completed"})
            assert response.status_code == 404

            websocket.send_text("ping")
            assert websocket.receive_json() == {"type": "pong"}

    def test_menu_changes_are_broadcast(self, client, menu_items):
        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            client.patch(f"/api/menu/{menu_items['A']}/availability", json={"available": False})
            event = websocket.receive_json()

        assert event == {"type": "menu_item_update", "menuItemId": menu_items["A"], "available": False}

    def test_health_reports_connected_clients(self, client):
        assert client.get("/health").json()["realtime"]["connected_clients"] == 0

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            assert client.get("/health").json()["realtime"]["connected_clients"] == 1

    def test_binary_frames_are_ignored(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()

            websocket.send_bytes(b"ping")
            websocket.send_text("ping")
            assert websocket.receive_json() == {"type": "pong"}
            assert client.get("/health").json()["realtime"]["connected_clients"] == 1

    def test_connected_is_the_first_frame(self, client, menu_items):
        client.post("/api/orders", json=order_payload(menu_items))

        with client.websocket_connect("/ws") as websocket:
            assert websocket.receive_json() == {"type": "connected"}
            order = client.post("/api/orders", json=order_payload(menu_items)).json()
            event = websocket.receive_json()

        assert event["type"] == "new_order"
        assert event["orderId"] == order["id"]

    def test_delete_is_broadcast(self, client, menu_items):
        order = client.post("/api/orders", json=order_payload(menu_items)).json()

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            client.delete(f"/api/orders/{order['id']}")
            event = websocket.receive_json()

        assert event["type"] == "order_update"
        assert event["deleted"] is True
        assert event["orderId"] == order["id"]
        assert event["orderNumber"] == order["orderNumber"]

    def test_payment_outcome_is_broadcast(self, client, menu_items):
        order = client.post("/api/orders", json=order_payload(menu_items)).json()

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()

            payment = client.post("/api/payments", json={
                "orderId": order["id"], "method": "card", "status": "completed"}).json()
            paid = websocket.receive_json()

            client.patch(f"/api/payments/{payment['id']}/status", json={"status": "failed"})
            failed = websocket.receive_json()

        for event in (paid, failed):
            assert event["type"] == "order_update"
            assert event["orderId"] == order["id"]
        assert _updated_at(failed) > _updated_at(paid)

    def test_payment_that_changes_nothing_is_not_broadcast(self, client, menu_items):
        order = client.post("/api/orders", json=order_payload(menu_items, paymentMethod="cash")).json()

        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()

            # Still pending by cash, exactly as the order already says
            response = client.post("/api/payments", json={"orderId": order["id"], "method": "cash"})
            assert response.status_code == 201

            websocket.send_text("ping")
            assert websocket.receive_json() == {"type": "pong"}
