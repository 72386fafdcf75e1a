from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from ..models.payment import TransactionStatus
from .common import CamelModel, Money


class PaymentCreate(CamelModel):
    """Schema for recording the payment of an order"""
    order_id: int
    # Defaults to the order total
    amount: Optional[Decimal] = Field(None, ge=0)
    method: str = Field(..., min_length=1, description="cash, card, transfer ...")
    status: TransactionStatus = TransactionStatus.pending
    transaction_ref: Optional[str] = None


class PaymentStatusUpdate(CamelModel):
    status: str


class PaymentOut(CamelModel):
    id: int
    order_id: int
    amount: Money
    method: str
    status: TransactionStatus
    transaction_ref: Optional[str] = None
    created_at: datetime
