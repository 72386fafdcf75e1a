"""
Shared route dependencies.
"""
from datetime import datetime, timezone
from typing import Optional

from starlette.requests import HTTPConnection

from ..db import get_db
from ..utils.broadcaster import ChangeBroadcaster

__all__ = ["get_db", "get_broadcaster", "to_naive_utc"]


def get_broadcaster(connection: HTTPConnection) -> ChangeBroadcaster:
    """The process-wide broadcaster created in the app lifespan"""
    return connection.app.state.broadcaster


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Query datetimes may carry an offset ("...Z"); stored ones are naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
