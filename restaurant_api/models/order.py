"""
Order model: one customer order and the line items it owns.
Path: restaurant_api/models/order.py
"""
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
import enum

from ..db import Base, utcnow


class OrderStatus(str, enum.Enum):
    pending = "pending"
    preparing = "preparing"
    ready = "ready"
    completed = "completed"
    cancelled = "cancelled"


# Orders the kitchen still has to deal with
ACTIVE_STATUSES = (OrderStatus.pending, OrderStatus.preparing, OrderStatus.ready)
TERMINAL_STATUSES = (OrderStatus.completed, OrderStatus.cancelled)


class OrderType(str, enum.Enum):
    online = "online"
    walk_in = "walk-in"
    dine_in = "dine-in"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"


def enum_values(enum_cls):
    """Store enum values ("walk-in") rather than member names ("walk_in")"""
    return [member.value for member in enum_cls]


class Order(Base):
    __tablename__ = "orders"
    # Never reuse ids of deleted orders on SQLite, order numbers derive from them
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    # Assigned in the same transaction as the insert, see CRUD.order_crud
    order_number = Column(String(32), unique=True, index=True, nullable=True)
    table_number = Column(Integer, nullable=True)

    customer_name = Column(String(120), nullable=False)
    customer_phone = Column(String(32), nullable=True)
    order_type = Column(Enum(OrderType, name="order_type", values_callable=enum_values),
                        default=OrderType.online, nullable=False)
    status = Column(Enum(OrderStatus, name="order_status", values_callable=enum_values),
                    default=OrderStatus.pending, nullable=False, index=True)

    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_status = Column(Enum(PaymentStatus, name="order_payment_status", values_callable=enum_values),
                            default=PaymentStatus.pending, nullable=False)
    payment_method = Column(String(40), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    items = relationship(
        "OrderItem", back_populates="order", lazy="selectin",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="OrderItem.id")
    payment = relationship(
        "Payment", back_populates="order", uselist=False, lazy="select",
        cascade="all, delete-orphan", passive_deletes=True)

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey(
        "orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey(
        "menu_items.id"), nullable=False)

    quantity = Column(Integer, nullable=False)
    # Price snapshot taken when the order was placed
    price = Column(Numeric(10, 2), nullable=False)
    special_instructions = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")
    menu_item = relationship(
        "MenuItem", back_populates="order_items", lazy="joined")

    @property
    def line_total(self):
        return self.price * self.quantity
