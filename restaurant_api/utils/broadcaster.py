# Path: restaurant_api/utils/broadcaster.py
"""
Fan-out of change events to every connected real-time client.

Delivery is best effort and at most once: there is no replay log, a client
that connects after an event was published never sees it and has to rely on
a full fetch instead.
"""
import asyncio
import enum
import logging
from typing import Any, Dict, List, Optional

from .exceptions import TransportError

logger = logging.getLogger(__name__)


class EventType(str, enum.Enum):
    new_order = "new_order"
    order_update = "order_update"
    menu_item_update = "menu_item_update"


class ChangeBroadcaster:
    """
    Owns the set of live connections for the lifetime of the server process.

    A connection is anything with an awaitable ``send_json(dict)``, in practice
    a ``starlette.websockets.WebSocket``.
    """

    def __init__(self, send_timeout: float = 5.0):
        self.active_connections: List[Any] = []
        self.send_timeout = send_timeout
        # Serialises publishes so one caller's events go out in the order issued
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self.active_connections)

    async def subscribe(self, connection, greeting: Optional[Dict[str, Any]] = None) -> None:
        """
        Register ``connection``; ``greeting`` is sent first, before any event can
        reach it. A failed greeting leaves the connection unregistered.
        """
        async with self._lock:
            if connection not in self.active_connections:
                if greeting is not None:
                    await connection.send_json(greeting)
                self.active_connections.append(connection)
        logger.info(f"Realtime client subscribed ({self.connection_count} connected)")

    async def unsubscribe(self, connection) -> None:
        async with self._lock:
            self._discard(connection)
        logger.info(f"Realtime client unsubscribed ({self.connection_count} connected)")

    async def publish(self, event_type, payload: Dict[str, Any]) -> int:
        """
        Send ``{"type": event_type, **payload}`` to every current connection.

        Connections are written to concurrently, so a stalled client costs at
        most one ``send_timeout`` however many there are. A failed write only
        drops that connection; the remaining clients still get the event and
        the caller never sees the error.

        Returns:
            Number of clients the event reached
        """
        event_type = EventType(event_type)
        message = {"type": event_type.value, **payload}

        async with self._lock:
            connections = list(self.active_connections)
            results = await asyncio.gather(
                *(self._send(connection, message) for connection in connections),
                return_exceptions=True
            )

            delivered = 0
            dropped = []
            for connection, result in zip(connections, results):
                if isinstance(result, TransportError):
                    logger.warning(
                        f"Dropping realtime client after failed {event_type.value} delivery: {result}")
                    dropped.append(connection)
                elif isinstance(result, BaseException):
                    raise result
                else:
                    delivered += 1

            for connection in dropped:
                self._discard(connection)

        logger.info(
            f"Broadcast {event_type.value} to {delivered} client(s), dropped {len(dropped)}")
        return delivered

    async def _send(self, connection, message: Dict[str, Any]) -> None:
        try:
            await asyncio.wait_for(connection.send_json(message), timeout=self.send_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"send timed out after {self.send_timeout}s") from e
        except Exception as e:
            # Closed sockets raise a mix of RuntimeError, WebSocketDisconnect, OSError ...
            raise TransportError(f"{e.__class__.__name__}: {e}") from e

    def _discard(self, connection) -> None:
        if connection in self.active_connections:
            self.active_connections.remove(connection)
