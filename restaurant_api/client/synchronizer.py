"""
Keeps a local copy of the active orders list in step with the server.

The server's realtime events only say *that* something changed, so the cache
is never patched in place: any relevant event triggers a full refetch. A
periodic poll runs alongside the event stream, which bounds how stale the
list can get while the realtime channel is down.

Usage:
    from restaurant_api.client.synchronizer import OrderListSynchronizer, http_fetcher

    sync = OrderListSynchronizer(http_fetcher("http://localhost:5050"))
    await sync.run("ws://localhost:5050/ws")
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, AsyncIterable, Awaitable, Callable, Dict, List, Optional

import requests
import websockets
from websockets.exceptions import WebSocketException
from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[List[Dict[str, Any]]]]

# order_status_change is still sent by older servers
REFRESH_EVENTS = frozenset({"new_order", "order_update", "order_status_change"})


def http_fetcher(base_url: str, path: str = "/api/orders/active", timeout: float = 10.0) -> Fetcher:
    """Build a fetcher that GETs a JSON order list from the REST API"""
    url = base_url.rstrip("/") + path

    def _get() -> List[Dict[str, Any]]:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json()

    async def fetch() -> List[Dict[str, Any]]:
        return await run_in_threadpool(_get)

    return fetch


def ws_url_for(base_url: str, path: str = "/ws") -> str:
    """http(s)://host -> ws(s)://host/ws"""
    base_url = base_url.rstrip("/")
    if base_url.startswith("https://"):
        base_url = "wss://" + base_url[len("https://"):]
    elif base_url.startswith("http://"):
        base_url = "ws://" + base_url[len("http://"):]
    return base_url + path


def event_type_of(message) -> Optional[str]:
    """The ``type`` of a raw event, or None when the message is not a JSON object"""
    if isinstance(message, (bytes, bytearray)):
        try:
            message = message.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(message, str):
        try:
            message = json.loads(message)
        except ValueError:
            return None
    if not isinstance(message, dict):
        return None
    event_type = message.get("type")
    return event_type if isinstance(event_type, str) else None


class OrderListSynchronizer:
    """
    Cached order list refreshed on realtime events and on a fixed poll.

    ``fetch`` is an async callable returning the full list; it is the only way
    the cache is ever written.
    """

    def __init__(
        self,
        fetch: Fetcher,
        poll_interval: float = 5.0,
        reconnect_delay: float = 3.0,
        on_refresh: Optional[Callable[[List[Dict[str, Any]]], Any]] = None
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.fetch = fetch
        self.poll_interval = poll_interval
        self.reconnect_delay = reconnect_delay
        self.on_refresh = on_refresh

        self.orders: List[Dict[str, Any]] = []
        self.last_refreshed: Optional[datetime] = None
        self.refresh_count = 0
        self._refresh_lock = asyncio.Lock()

    async def refresh(self) -> List[Dict[str, Any]]:
        """Full fetch; replaces the cache. Fetch errors propagate."""
        async with self._refresh_lock:
            orders = await self.fetch()
            self.orders = list(orders)
            self.last_refreshed = datetime.now(timezone.utc)
            self.refresh_count += 1
        logger.debug(f"Order list refreshed: {len(self.orders)} order(s)")

        if self.on_refresh is not None:
            self.on_refresh(self.orders)
        return self.orders

    async def _refresh_logged(self, reason: str) -> bool:
        try:
            await self.refresh()
            return True
        except Exception as e:
            logger.warning(f"Order list refresh ({reason}) failed: {e}")
            return False

    async def handle_message(self, message) -> bool:
        """
        React to one raw event.

        Returns True when the message caused a successful refetch. Malformed
        and unrelated messages (pong, menu_item_update ...) are ignored.
        """
        event_type = event_type_of(message)
        if event_type not in REFRESH_EVENTS:
            if event_type is None:
                logger.debug(f"Ignoring malformed realtime message: {message!r}")
            return False
        return await self._refresh_logged(event_type)

    async def listen(self, messages: AsyncIterable) -> int:
        """Consume an event stream until it ends; returns the number of refetches"""
        refreshed = 0
        async for message in messages:
            if await self.handle_message(message):
                refreshed += 1
        return refreshed

    async def poll_forever(self) -> None:
        """Refresh every ``poll_interval`` seconds, whatever the event stream does"""
        while True:
            await asyncio.sleep(self.poll_interval)
            await self._refresh_logged("poll")

    async def run(self, ws_url: str) -> None:
        """
        Initial fetch, then follow ``ws_url`` forever with the poll running
        alongside. A dropped connection is retried after ``reconnect_delay``.
        """
        await self._refresh_logged("startup")
        poller = asyncio.create_task(self.poll_forever())
        try:
            while True:
                try:
                    async with websockets.connect(ws_url) as connection:
                        logger.info(f"Connected to {ws_url}")
                        # Events published while disconnected are gone
                        await self._refresh_logged("reconnect")
                        await self.listen(connection)
                    logger.warning(f"Realtime connection to {ws_url} closed")
                except (OSError, WebSocketException) as e:
                    logger.warning(f"Realtime connection to {ws_url} failed: {e}")
                await asyncio.sleep(self.reconnect_delay)
        finally:
            poller.cancel()


if __name__ == "__main__":
    import os

    from restaurant_api.config import settings

    logging.basicConfig(level=settings.LOG_LEVEL)
    base = os.getenv("RESTAURANT_API_URL", f"http://localhost:{settings.PORT}")

    def _print_orders(orders):
        logger.info(f"{len(orders)} active order(s): " + ", ".join(o.get("orderNumber", "?") for o in orders))

    synchronizer = OrderListSynchronizer(
        http_fetcher(base),
        poll_interval=settings.ACTIVE_ORDERS_POLL_SECONDS,
        on_refresh=_print_orders
    )
    asyncio.run(synchronizer.run(ws_url_for(base)))
