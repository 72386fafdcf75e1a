import asyncio
import json

import pytest

from conftest import order_payload
from restaurant_api.client import synchronizer as sync_module
from restaurant_api.client.synchronizer import OrderListSynchronizer, http_fetcher, ws_url_for


class ScriptedFetch:
    """Async fetcher returning a new list per call; an Exception in the script is raised"""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        result = self.results[min(self.calls, len(self.results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


async def _stream(*messages):
    for message in messages:
        yield message


class TestEventHandling:
    def test_order_events_trigger_full_refetch(self):
        fetch = ScriptedFetch([{"id": 1}], [{"id": 1}, {"id": 2}], [{"id": 2}])
        synchronizer = OrderListSynchronizer(fetch)

        async def scenario():
            await synchronizer.refresh()
            assert await synchronizer.handle_message(json.dumps({"type": "new_order", "orderId": 2}))
            assert synchronizer.orders == [{"id": 1}, {"id": 2}]
            assert await synchronizer.handle_message({"type": "order_status_change", "orderId": 1})

        asyncio.run(scenario())
        assert synchronizer.orders == [{"id": 2}]
        assert fetch.calls == 3

    @pytest.mark.parametrize("message", [
        "not json",
        b"\xff\xfe",
        "[1, 2]",
        json.dumps({"type": 5}),
        json.dumps({"type": "pong"}),
        json.dumps({"type": "menu_item_update", "menuItemId": 1}),
        {"orderId": 1},
    ])
    def test_irrelevant_or_malformed_messages_are_ignored(self, message):
        fetch = ScriptedFetch([])
        synchronizer = OrderListSynchronizer(fetch)

        assert asyncio.run(synchronizer.handle_message(message)) is False
        assert fetch.calls == 0

    def test_listen_counts_refetches(self):
        fetch = ScriptedFetch([{"id": 1}])
        synchronizer = OrderListSynchronizer(fetch)
        stream = _stream(
            '{"type": "connected"}',
            '{"type": "new_order", "orderId": 1}',
            "garbage",
            b'{"type": "order_update", "orderId": 1, "status": "ready"}',
        )

        assert asyncio.run(synchronizer.listen(stream)) == 2
        assert synchronizer.refresh_count == 2

    def test_failed_refetch_keeps_previous_list(self):
        fetch = ScriptedFetch([{"id": 1}], ConnectionError("server down"))
        synchronizer = OrderListSynchronizer(fetch)

        async def scenario():
            await synchronizer.refresh()
            return await synchronizer.handle_message('{"type": "order_update"}')

        assert asyncio.run(scenario()) is False
        assert synchronizer.orders == [{"id": 1}]

    def test_on_refresh_callback(self):
        seen = []
        synchronizer = OrderListSynchronizer(ScriptedFetch([{"id": 7}]), on_refresh=seen.append)
        asyncio.run(synchronizer.refresh())
        assert seen == [[{"id": 7}]]


class TestPolling:
    def test_poll_keeps_refreshing_through_failures(self):
        fetch = ScriptedFetch([{"id": 1}], RuntimeError("timeout"), [{"id": 1}, {"id": 3}])
        synchronizer = OrderListSynchronizer(fetch, poll_interval=0.01)

        async def scenario():
            poller = asyncio.create_task(synchronizer.poll_forever())
            await asyncio.sleep(0.2)
            poller.cancel()
            with pytest.raises(asyncio.CancelledError):
                await poller

        asyncio.run(scenario())
        assert fetch.calls >= 3
        assert synchronizer.orders == [{"id": 1}, {"id": 3}]

    def test_poll_interval_must_be_positive(self):
        with pytest.raises(ValueError):
            OrderListSynchronizer(ScriptedFetch([]), poll_interval=0)


class TestHttpHelpers:
    def test_http_fetcher(self, monkeypatch):
        requested = {}

        class FakeResponse:
            def raise_for_status(self):
                pass

            def json(self):
                return [{"id": 4, "status": "pending"}]

        def fake_get(url, timeout):
            requested["url"] = url
            requested["timeout"] = timeout
            return FakeResponse()

        monkeypatch.setattr(sync_module.requests, "get", fake_get)

        orders = asyncio.run(http_fetcher("http://kitchen.local:5050/")())
        assert orders == [{"id": 4, "status": "pending"}]
        assert requested == {"url": "http://kitchen.local:5050/api/orders/active", "timeout": 10.0}

    def test_ws_url_for(self):
        assert ws_url_for("http://localhost:5050") == "ws://localhost:5050/ws"
        assert ws_url_for("https://orders.example.com/") == "wss://orders.example.com/ws"


def test_synchronizer_follows_the_server(client, menu_items):
    async def fetch_active():
        return client.get("/api/orders/active").json()

    synchronizer = OrderListSynchronizer(fetch_active)
    asyncio.run(synchronizer.refresh())
    assert synchronizer.orders == []

    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()
        order = client.post("/api/orders", json=order_payload(menu_items)).json()
        event = websocket.receive_text()

        assert asyncio.run(synchronizer.handle_message(event)) is True
        assert [o["orderNumber"] for o in synchronizer.orders] == [order["orderNumber"]]

        client.patch(f"/api/orders/{order['id']}/status", json={"status": "completed"})
        asyncio.run(synchronizer.handle_message(websocket.receive_text()))

    assert synchronizer.orders == []
