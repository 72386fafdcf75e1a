from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from restaurant_api.db import utcnow
from restaurant_api.models.order import (
    ACTIVE_STATUSES,
    Order,
    OrderItem,
    OrderStatus,
)


def get_by_id(db: Session, order_id: int) -> Optional[Order]:
    """Get an order (with its items) by ID"""
    return db.query(Order).filter(Order.id == order_id).first()


def _filter_created_between(query, date_from: Optional[datetime], date_to: Optional[datetime]):
    if date_from:
        query = query.filter(Order.created_at >= date_from)
    if date_to:
        query = query.filter(Order.created_at <= date_to)
    return query


def get_all(
    db: Session,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    status: Optional[OrderStatus] = None,
    skip: int = 0,
    limit: int = 200
) -> List[Order]:
    """Orders newest first, optionally limited to a creation window and a status"""
    query = _filter_created_between(db.query(Order), date_from, date_to)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip).limit(limit).all()


def get_by_statuses(db: Session, statuses: Sequence[OrderStatus]) -> List[Order]:
    return db.query(Order).filter(
        Order.status.in_(statuses)
    ).order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_active(db: Session) -> List[Order]:
    """Orders still in the kitchen: pending, preparing or ready"""
    return get_by_statuses(db, ACTIVE_STATUSES)


def search_by_number(db: Session, order_number: str, on_date: Optional[datetime] = None) -> List[Order]:
    query = db.query(Order).filter(
        Order.order_number.ilike(f"%{order_number.strip()}%"))
    if on_date:
        start = on_date.replace(hour=0, minute=0, second=0, microsecond=0)
        query = _filter_created_between(
            query, start, start + timedelta(days=1) - timedelta(microseconds=1))
    return query.order_by(Order.created_at.desc()).all()


def get_stats(db: Session, date_from: datetime, date_to: datetime) -> dict:
    base = _filter_created_between(db.query(Order), date_from, date_to)

    total_orders = base.count()
    revenue = _filter_created_between(
        db.query(func.coalesce(func.sum(Order.total_amount), 0)), date_from, date_to
    ).filter(Order.status != OrderStatus.cancelled).scalar()
    pending = base.filter(Order.status == OrderStatus.pending).count()
    completed = base.filter(Order.status == OrderStatus.completed).count()

    return {
        "today_orders": total_orders,
        "today_revenue": Decimal(str(revenue or 0)).quantize(Decimal("0.01")),
        "pending_orders": pending,
        "completed_orders": completed,
    }


def create_with_items(db: Session, order: Order, items: List[OrderItem], number_prefix: str) -> Order:
    """
    Insert an order and all of its items in one transaction.

    The order number is derived from the primary key, which only exists after
    the flush, so it is assigned inside the same transaction. Either every row
    lands or none does.
    """
    try:
        order.items = items
        db.add(order)
        db.flush()
        order.order_number = f"{number_prefix}-{order.id:06d}"
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    return order


def _next_updated_at(db_obj: Order) -> datetime:
    # Strictly after the previous value even when the clock has not moved
    now = utcnow()
    if db_obj.updated_at is not None and now <= db_obj.updated_at:
        return db_obj.updated_at + timedelta(microseconds=1)
    return now


def touch(db: Session, db_obj: Order, **fields) -> Order:
    """Update order fields together with updated_at"""
    for field, value in fields.items():
        setattr(db_obj, field, value)
    db_obj.updated_at = _next_updated_at(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def set_status(db: Session, db_obj: Order, status: OrderStatus) -> Order:
    """Write a new status. Last write wins, the previous status is not checked."""
    return touch(db, db_obj, status=status)


def delete(db: Session, order_id: int) -> bool:
    """Delete an order; its items and payment go with it"""
    db_obj = get_by_id(db, order_id)
    if not db_obj:
        return False

    db.delete(db_obj)
    db.commit()
    return True
