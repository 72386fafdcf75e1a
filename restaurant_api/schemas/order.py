from pydantic import AliasChoices, Field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..models.order import OrderStatus, OrderType, PaymentStatus
from .common import CamelModel, Money
from .menu_item import MenuItemOut


class OrderItemCreate(CamelModel):
    menu_item_id: int
    quantity: int
    # Omitted price means "snapshot the current menu price"
    price: Optional[Decimal] = None
    special_instructions: Optional[str] = None


class OrderCreate(CamelModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    table_number: Optional[int] = None
    order_type: OrderType = OrderType.online
    payment_status: PaymentStatus = PaymentStatus.pending
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemCreate] = Field(
        ..., validation_alias=AliasChoices("items", "orderItems", "order_items"))


class OrderStatusUpdate(CamelModel):
    # Kept as a plain string so unknown statuses reach the lifecycle check
    status: str


class OrderItemOut(CamelModel):
    id: int
    order_id: int
    menu_item_id: int
    quantity: int
    price: Money
    special_instructions: Optional[str] = None
    menu_item: Optional[MenuItemOut] = None


class OrderOut(CamelModel):
    # Core order fields
    id: int
    order_number: str
    table_number: Optional[int] = None

    # Customer
    customer_name: str
    customer_phone: Optional[str] = None
    order_type: OrderType

    # Status and money
    status: OrderStatus
    total_amount: Money
    payment_status: PaymentStatus
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    items: List[OrderItemOut] = Field(
        default_factory=list, serialization_alias="orderItems")


class OrderStats(CamelModel):
    """Numbers shown on top of the order management screen"""
    today_orders: int
    today_revenue: Money
    pending_orders: int
    completed_orders: int
