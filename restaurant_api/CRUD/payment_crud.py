from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from restaurant_api.models.payment import Payment, TransactionStatus


def get_by_id(db: Session, payment_id: int) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.id == payment_id).first()


def get_by_order_id(db: Session, order_id: int) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.order_id == order_id).first()


def get_pending(
    db: Session,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    skip: int = 0,
    limit: int = 20
) -> List[Payment]:
    """Payments waiting for confirmation, oldest first"""
    query = db.query(Payment).filter(Payment.status == TransactionStatus.pending)
    if date_from:
        query = query.filter(Payment.created_at >= date_from)
    if date_to:
        query = query.filter(Payment.created_at <= date_to)
    return query.order_by(Payment.created_at).offset(skip).limit(limit).all()


def create(db: Session, payment: Payment) -> Payment:
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment


def set_status(db: Session, db_obj: Payment, status: TransactionStatus) -> Payment:
    db_obj.status = status
    db.commit()
    db.refresh(db_obj)
    return db_obj
