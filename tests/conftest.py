"""
Pytest configuration and shared fixtures.

Every test runs against a fresh in-memory SQLite database; the environment is
set before the application modules are imported so the engine is built for it.
"""
import asyncio
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["SEED_MENU"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from restaurant_api.db import Base, SessionLocal, engine
from restaurant_api.main import app
from restaurant_api.models import MenuItem


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # Entering the client runs the lifespan, which creates the broadcaster
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def menu_items(db):
    """Two orderable dishes (A, B) and one that is sold out; returns their ids"""
    items = {
        "A": MenuItem(name="Jollof Rice", category="Main Course", price=Decimal("2500.00")),
        "B": MenuItem(name="Chapman", category="Drinks", price=Decimal("1000.00")),
        "sold_out": MenuItem(name="Pepper Soup", category="Main Course",
                             price=Decimal("1800.00"), available=False),
    }
    db.add_all(items.values())
    db.commit()
    return {key: item.id for key, item in items.items()}


def order_payload(menu_items, **overrides):
    """Body of the two-line order used across tests: 2 x 1000.00 + 1 x 500.00"""
    payload = {
        "customerName": "Ada",
        "customerPhone": "08030000000",
        "orderType": "online",
        "items": [
            {"menuItemId": menu_items["A"], "quantity": 2, "price": "1000.00"},
            {"menuItemId": menu_items["B"], "quantity": 1, "price": "500.00"},
        ],
    }
    payload.update(overrides)
    return payload


class FakeConnection:
    """Stands in for a WebSocket: records what it is sent, or fails"""

    def __init__(self, fail=False, delay=0.0):
        self.fail = fail
        self.delay = delay
        self.sent = []

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("Cannot call send once a close message has been sent")
        if self.delay:
            await asyncio.sleep(self.delay)
        self.sent.append(message)
