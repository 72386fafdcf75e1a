"""
Payment model: one payment record per order.
"""
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
import enum

from ..db import Base, utcnow
from .order import enum_values


class TransactionStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey(
        "orders.id", ondelete="CASCADE"), unique=True, nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(40), nullable=False)
    status = Column(Enum(TransactionStatus, name="payment_status", values_callable=enum_values),
                    default=TransactionStatus.pending, nullable=False, index=True)
    transaction_ref = Column(String(64), unique=True, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    order = relationship("Order", back_populates="payment")
