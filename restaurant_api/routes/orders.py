"""
Order routes: placing orders, the kitchen/management views and status changes.
Path: restaurant_api/routes/orders.py
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..CRUD import order_crud
from ..db import utcnow
from ..models.order import OrderStatus
from ..schemas.common import ErrorResponse
from ..schemas.order import OrderCreate, OrderOut, OrderStats, OrderStatusUpdate
from ..utils.broadcaster import ChangeBroadcaster
from ..utils.exceptions import OrderNotFound
from ..utils.order_service import OrderService, parse_order_id, parse_status
from .deps import get_broadcaster, get_db, to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"], responses={
    400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})


def _today_window():
    start = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


# ============ placing orders ============

@router.post("", response_model=OrderOut, status_code=201)
async def create_order(
    order_in: OrderCreate,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    """
    Place an order with its items.

    The order is stored as pending with a server computed total and every
    connected client receives a new_order event.
    """
    return await OrderService.create_order(db, broadcaster, order_in)


# ============ listings (fixed paths before /{order_id}) ============

@router.get("", response_model=List[OrderOut])
def list_orders(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    status: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """All orders newest first, optionally within a creation window"""
    return order_crud.get_all(
        db,
        date_from=to_naive_utc(date_from),
        date_to=to_naive_utc(date_to),
        status=parse_status(status) if status else None,
        skip=skip,
        limit=limit
    )


@router.get("/active", response_model=List[OrderOut])
def get_active_orders(db: Session = Depends(get_db)):
    """Pending, preparing and ready orders for the kitchen display"""
    return order_crud.get_active(db)


@router.get("/completed", response_model=List[OrderOut])
def get_completed_orders(db: Session = Depends(get_db)):
    return order_crud.get_by_statuses(db, [OrderStatus.completed])


@router.get("/stats", response_model=OrderStats)
def get_order_stats(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    db: Session = Depends(get_db)
):
    """Counts and revenue for a window, today (UTC) by default"""
    start, end = _today_window()
    return order_crud.get_stats(
        db,
        to_naive_utc(date_from) or start,
        to_naive_utc(date_to) or end
    )


@router.get("/search", response_model=List[OrderOut])
def search_orders(
    order_number: str = Query(..., alias="orderNumber", min_length=1),
    on_date: Optional[datetime] = Query(None, alias="date"),
    db: Session = Depends(get_db)
):
    """Find orders by (part of) their order number, optionally on one day"""
    return order_crud.search_by_number(db, order_number, to_naive_utc(on_date))


# ============ single order ============

@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    order = order_crud.get_by_id(db, parse_order_id(order_id))
    if not order:
        raise OrderNotFound(f"Order {order_id} not found")
    return order


@router.patch("/{order_id}/status", response_model=OrderOut)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    """Move an order to any status; every client gets an order_update"""
    return await OrderService.update_status(db, broadcaster, order_id, body.status)


@router.delete("/{order_id}", response_model=dict)
async def delete_order(
    order_id: str,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    await OrderService.delete_order(db, broadcaster, order_id)
    return {"message": "Order deleted", "id": parse_order_id(order_id)}
