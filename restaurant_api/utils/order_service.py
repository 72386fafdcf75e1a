# Path: restaurant_api/utils/order_service.py
"""
Order lifecycle: creating orders and moving them between statuses.

Every successful write is followed by exactly one broadcast, published after
the commit and before the call returns, so a caller sees events in the same
order as its writes.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from restaurant_api.CRUD import menu_crud, order_crud
from restaurant_api.config import settings
from restaurant_api.models.order import Order, OrderItem, OrderStatus
from restaurant_api.schemas.order import OrderCreate
from restaurant_api.utils.broadcaster import ChangeBroadcaster, EventType
from restaurant_api.utils.exceptions import MenuItemNotFound, OrderNotFound, ValidationError

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Integer primary keys are 32-bit signed on every supported database
MAX_ORDER_ID = 2 ** 31 - 1


def parse_status(value) -> OrderStatus:
    """Map a requested status onto the enum, rejecting anything else"""
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid order status '{value}'. Allowed: {allowed}") from None


def parse_order_id(value) -> int:
    """Order ids arrive as path segments; anything that is not an id cannot exist"""
    try:
        order_id = int(value)
    except (TypeError, ValueError):
        raise OrderNotFound(f"Order {value} not found") from None
    if not 1 <= order_id <= MAX_ORDER_ID:
        raise OrderNotFound(f"Order {value} not found")
    return order_id


def order_event_payload(order: Order) -> Dict[str, Any]:
    """The identity part of an order, as carried by broadcast events"""
    return {
        "orderId": order.id,
        "orderNumber": order.order_number,
        "status": order.status.value,
        "updatedAt": order.updated_at.isoformat(),
    }


class OrderService:
    """Service to handle order creation and status transitions"""

    @staticmethod
    def build_order(db: Session, order_in: OrderCreate) -> Tuple[Order, List[OrderItem]]:
        """
        Validate the request and build (unsaved) order rows.

        Line prices are snapshots: an explicit price wins, otherwise the
        current menu price is copied. The total is always recomputed here.

        Raises:
            ValidationError: no items, non-positive quantity, negative price,
                unavailable dish
            MenuItemNotFound: an item references a missing menu item
        """
        if not order_in.items:
            raise ValidationError("An order needs at least one item")

        menu_items = menu_crud.get_by_ids(
            db, [line.menu_item_id for line in order_in.items])

        items: List[OrderItem] = []
        total = Decimal("0")
        for line in order_in.items:
            if line.quantity is None or line.quantity <= 0:
                raise ValidationError(
                    f"Quantity for menu item {line.menu_item_id} must be a positive integer")

            menu_item = menu_items.get(line.menu_item_id)
            if menu_item is None:
                raise MenuItemNotFound(
                    f"Menu item {line.menu_item_id} not found")
            if not menu_item.available:
                raise ValidationError(
                    f"'{menu_item.name}' is currently unavailable, remove it and try again")

            price = Decimal(line.price if line.price is not None else menu_item.price)
            if price < 0:
                raise ValidationError(
                    f"Price for menu item {line.menu_item_id} cannot be negative")
            price = price.quantize(CENTS)

            item = OrderItem(
                menu_item_id=menu_item.id,
                quantity=line.quantity,
                price=price,
                special_instructions=line.special_instructions
            )
            items.append(item)
            total += item.line_total

        order = Order(
            customer_name=order_in.customer_name,
            customer_phone=order_in.customer_phone,
            table_number=order_in.table_number,
            order_type=order_in.order_type,
            status=OrderStatus.pending,
            total_amount=total.quantize(CENTS),
            payment_status=order_in.payment_status,
            payment_method=order_in.payment_method,
            notes=order_in.notes
        )
        return order, items

    @staticmethod
    def _insert_order(db: Session, order_in: OrderCreate, number_prefix: str) -> Order:
        order, items = OrderService.build_order(db, order_in)
        order = order_crud.create_with_items(db, order, items, number_prefix)
        # Reload with items and their dishes before leaving the worker thread
        return order_crud.get_by_id(db, order.id)

    @staticmethod
    def _apply_status(db: Session, order_id, status: OrderStatus) -> Order:
        order = order_crud.get_by_id(db, parse_order_id(order_id))
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found")
        if order.is_terminal() and order.status != status:
            logger.warning(
                f"Order {order.order_number} leaves final status {order.status.value} for {status.value}")

        order = order_crud.set_status(db, order, status)
        return order_crud.get_by_id(db, order.id)

    @staticmethod
    async def create_order(
        db: Session,
        broadcaster: ChangeBroadcaster,
        order_in: OrderCreate,
        number_prefix: Optional[str] = None
    ) -> Order:
        """Persist an order with its items atomically, then announce it as new_order"""
        order = await run_in_threadpool(
            OrderService._insert_order, db, order_in,
            number_prefix or settings.ORDER_NUMBER_PREFIX)

        logger.info(
            f"Created order {order.order_number} with {len(order.items)} item(s), total {order.total_amount}")
        await broadcaster.publish(EventType.new_order, order_event_payload(order))
        return order

    @staticmethod
    async def update_status(
        db: Session,
        broadcaster: ChangeBroadcaster,
        order_id,
        target
    ) -> Order:
        """
        Move an order to ``target``.

        Any enumerated status is accepted from any current status (managers
        may skip steps or reopen an order), and concurrent writers are not
        detected: the last write wins.

        Raises:
            ValidationError: ``target`` is not an order status
            OrderNotFound: no such order; nothing is broadcast
        """
        status = parse_status(target)
        order = await run_in_threadpool(OrderService._apply_status, db, order_id, status)

        logger.info(f"Order {order.order_number} is now {status.value}")
        await broadcaster.publish(EventType.order_update, order_event_payload(order))
        return order

    @staticmethod
    async def delete_order(db: Session, broadcaster: ChangeBroadcaster, order_id) -> None:
        order_id = parse_order_id(order_id)
        order = await run_in_threadpool(order_crud.get_by_id, db, order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found")
        payload = {**order_event_payload(order), "deleted": True}

        await run_in_threadpool(order_crud.delete, db, order_id)
        logger.info(f"Deleted order {payload['orderNumber']}")
        await broadcaster.publish(EventType.order_update, payload)
