# Path: restaurant_api/utils/payment_service.py
import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from restaurant_api.CRUD import order_crud, payment_crud
from restaurant_api.models.order import Order, PaymentStatus
from restaurant_api.models.payment import Payment, TransactionStatus
from restaurant_api.schemas.payment import PaymentCreate
from restaurant_api.utils.broadcaster import ChangeBroadcaster, EventType
from restaurant_api.utils.exceptions import Conflict, OrderNotFound, PaymentNotFound, ValidationError
from restaurant_api.utils.order_service import order_event_payload

logger = logging.getLogger(__name__)

# How a payment outcome shows on its order
ORDER_PAYMENT_STATUS = {
    TransactionStatus.pending: PaymentStatus.pending,
    TransactionStatus.completed: PaymentStatus.paid,
    TransactionStatus.failed: PaymentStatus.failed,
}


def parse_transaction_status(value) -> TransactionStatus:
    try:
        return TransactionStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in TransactionStatus)
        raise ValidationError(f"Invalid payment status '{value}'. Allowed: {allowed}") from None


class PaymentService:
    """Records payments and mirrors their outcome onto the order"""

    @staticmethod
    def _sync_order(db: Session, order: Order, payment: Payment) -> Optional[Order]:
        """Copy the payment outcome to the order; None when nothing changed"""
        payment_status = ORDER_PAYMENT_STATUS[payment.status]
        if order.payment_status == payment_status and order.payment_method == payment.method:
            return None
        return order_crud.touch(db, order, payment_status=payment_status, payment_method=payment.method)

    @staticmethod
    def _record(db: Session, payment_in: PaymentCreate):
        order = order_crud.get_by_id(db, payment_in.order_id)
        if order is None:
            raise OrderNotFound(f"Order {payment_in.order_id} not found")
        if payment_crud.get_by_order_id(db, order.id):
            raise Conflict(f"Order {order.order_number} already has a payment")

        payment = payment_crud.create(db, Payment(
            order_id=order.id,
            amount=payment_in.amount if payment_in.amount is not None else order.total_amount,
            method=payment_in.method,
            status=payment_in.status,
            transaction_ref=payment_in.transaction_ref
        ))
        order = PaymentService._sync_order(db, order, payment)
        db.refresh(payment)
        return payment, order

    @staticmethod
    def _change_status(db: Session, payment_id: int, status: TransactionStatus):
        payment = payment_crud.get_by_id(db, payment_id)
        if payment is None:
            raise PaymentNotFound(f"Payment {payment_id} not found")

        payment = payment_crud.set_status(db, payment, status)
        order = PaymentService._sync_order(db, payment.order, payment)
        db.refresh(payment)
        return payment, order

    @staticmethod
    async def record_payment(db: Session, broadcaster: ChangeBroadcaster, payment_in: PaymentCreate) -> Payment:
        """
        Record the (single) payment of an order.

        A completed payment marks the order paid, a failed one marks it
        failed; when the order changes an order_update is broadcast.
        """
        payment, order = await run_in_threadpool(PaymentService._record, db, payment_in)
        logger.info(
            f"Recorded {payment.status.value} {payment.method} payment of {payment.amount} for order {payment.order_id}")
        if order is not None:
            await broadcaster.publish(EventType.order_update, order_event_payload(order))
        return payment

    @staticmethod
    async def update_status(db: Session, broadcaster: ChangeBroadcaster, payment_id: int, target) -> Payment:
        status = parse_transaction_status(target)
        payment, order = await run_in_threadpool(PaymentService._change_status, db, payment_id, status)
        logger.info(f"Payment {payment.id} is now {status.value}")
        if order is not None:
            await broadcaster.publish(EventType.order_update, order_event_payload(order))
        return payment
