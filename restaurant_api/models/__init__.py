# Import models in dependency order to avoid relationship resolution issues

# Base models first (no foreign key dependencies)
from .menu_item import MenuItem, MENU_CATEGORIES

# Models that depend on MenuItem
from .order import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    PaymentStatus,
)

# Models that depend on Order
from .payment import Payment, TransactionStatus

# Export all models
__all__ = [
    "MenuItem",
    "MENU_CATEGORIES",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "PaymentStatus",
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "Payment",
    "TransactionStatus",
]
