"""
Payment routes.
Path: restaurant_api/routes/payments.py
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..CRUD import payment_crud
from ..schemas.common import ErrorResponse
from ..schemas.payment import PaymentCreate, PaymentOut, PaymentStatusUpdate
from ..utils.broadcaster import ChangeBroadcaster
from ..utils.exceptions import PaymentNotFound
from ..utils.order_service import parse_order_id
from ..utils.payment_service import PaymentService
from .deps import get_broadcaster, get_db, to_naive_utc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["Payments"], responses={
    400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})


@router.post("", response_model=PaymentOut, status_code=201)
async def record_payment(
    payment_in: PaymentCreate,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    return await PaymentService.record_payment(db, broadcaster, payment_in)


@router.get("/pending", response_model=List[PaymentOut])
def get_pending_payments(
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Payments still waiting for confirmation, oldest first"""
    return payment_crud.get_pending(
        db, to_naive_utc(date_from), to_naive_utc(date_to), skip=skip, limit=limit)


@router.get("/order/{order_id}", response_model=PaymentOut)
def get_order_payment(order_id: str, db: Session = Depends(get_db)):
    payment = payment_crud.get_by_order_id(db, parse_order_id(order_id))
    if not payment:
        raise PaymentNotFound(f"No payment recorded for order {order_id}")
    return payment


@router.patch("/{payment_id}/status", response_model=PaymentOut)
async def update_payment_status(
    payment_id: int,
    body: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    broadcaster: ChangeBroadcaster = Depends(get_broadcaster)
):
    """Confirm or fail a payment; the order's payment status follows"""
    return await PaymentService.update_status(db, broadcaster, payment_id, body.status)
