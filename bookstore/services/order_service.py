import logging
import secrets
import time
from datetime import datetime, timedelta
from typing import List, Optional, Union

from sqlalchemy import update
from sqlmodel import Session, select

from bookstore.config import settings
from bookstore.constants.order_status import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    can_customer_cancel,
    can_transition,
)
from bookstore.errors import InvalidTransition, NotFound, ValidationFailed
from bookstore.models.order import Order
from bookstore.schemas.checkout_schemas import TrackingInfo, TransitionResult
from bookstore.services.inventory_service import commit_stock, restore_stock
from bookstore.services.order_event_service import log_order_event
from bookstore.utils.pagination import paginate

logger = logging.getLogger(__name__)


def generate_order_number() -> str:
    """
    ORD + epoch milliseconds + 8 random hex chars.

    The random suffix keeps numbers distinct for orders created in the same
    millisecond; the unique column catches anything else.
    """
    return f"ORD{int(time.time() * 1000)}{secrets.token_hex(4).upper()}"


def get_order(session: Session, order_number: str, user_id: Optional[int] = None) -> Order:
    """Get order by number, optionally checking user ownership"""
    statement = select(Order).where(Order.order_number == order_number)
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)

    order = session.exec(statement).first()
    if not order:
        raise NotFound("Order not found")
    return order


def get_user_orders(
    session: Session,
    user_id: int,
    status: Optional[OrderStatus] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    """A customer's orders, newest first, one page at a time."""
    return list_orders(session, user_id=user_id, status=status, page=page, limit=limit)


def list_orders(
    session: Session,
    *,
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    user_id: Optional[int] = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    statement = select(Order)
    if status:
        statement = statement.where(Order.status == OrderStatus(status))
    if payment_status:
        statement = statement.where(Order.payment_status == PaymentStatus(payment_status))
    if user_id is not None:
        statement = statement.where(Order.user_id == user_id)
    if start_date:
        statement = statement.where(Order.created_at >= start_date)
    if end_date:
        statement = statement.where(Order.created_at <= end_date)

    return paginate(
        session=session,
        query=statement.order_by(Order.created_at.desc(), Order.id.desc()),
        page=page,
        limit=limit,
    )


def _check_tracking(tracking: Optional[TrackingInfo]):
    if not tracking or not (tracking.tracking_number or tracking.tracking_url):
        raise ValidationFailed("Tracking number or tracking link is required to ship an order")


def _apply_tracking(order: Order, tracking: TrackingInfo, now: datetime):
    order.tracking_carrier = tracking.carrier or "Standard"
    order.tracking_number = tracking.tracking_number
    order.tracking_url = tracking.tracking_url or settings.tracking_url_template.format(
        tracking_number=tracking.tracking_number
    )
    order.shipped_at = now
    order.estimated_delivery = now + timedelta(days=settings.estimated_delivery_days)


def _apply_side_effects(order: Order, new_status: OrderStatus, now: datetime):
    payment_status = PaymentStatus(order.payment_status)

    if new_status == OrderStatus.DELIVERED:
        order.delivered_at = now
        if (
            PaymentMethod(order.payment_method).is_pay_on_delivery
            and payment_status == PaymentStatus.PENDING
        ):
            order.payment_status = PaymentStatus.COMPLETED

    elif new_status == OrderStatus.CANCELLED:
        order.cancelled_at = now
        if payment_status == PaymentStatus.COMPLETED:
            # the refund itself happens outside this system
            order.payment_status = PaymentStatus.REFUND_PENDING
        elif payment_status == PaymentStatus.PENDING:
            order.payment_status = PaymentStatus.FAILED

    elif new_status == OrderStatus.REFUNDED:
        order.refunded_at = now
        order.payment_status = PaymentStatus.REFUNDED


def transition_order(
    session: Session,
    order: Order,
    new_status: Union[OrderStatus, str],
    *,
    tracking: Optional[TrackingInfo] = None,
    notes: Optional[str] = None,
    actor: str = "system",
) -> TransitionResult:
    """
    Move an order along the status lattice and run the transition's side effects.

    The status change is claimed with a compare-and-set UPDATE and committed
    before any stock work; stock problems come back as warnings on the
    result, the new status stands regardless.
    """
    try:
        new_status = OrderStatus(new_status)
    except ValueError:
        raise ValidationFailed(f"Invalid status: {new_status}", [s.value for s in OrderStatus]) from None

    current = OrderStatus(order.status)
    if not can_transition(current, new_status):
        raise InvalidTransition(current.value, new_status.value)

    now = datetime.utcnow()
    if new_status == OrderStatus.SHIPPED:
        _check_tracking(tracking)

    session.flush()
    claimed = session.execute(
        update(Order)
        .where(Order.id == order.id, Order.status == current)
        .values(status=new_status, updated_at=now)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not claimed:
        # someone else moved the order first; drop our half-applied changes
        session.rollback()
        session.refresh(order)
        raise InvalidTransition(OrderStatus(order.status).value, new_status.value)

    if new_status == OrderStatus.SHIPPED:
        _apply_tracking(order, tracking, now)
    _apply_side_effects(order, new_status, now)
    order.status = new_status
    order.updated_at = now
    order.append_note(notes)

    log_order_event(
        session,
        order_id=order.id,
        event_type=new_status.value.lower(),
        label=f"Order {new_status.value.lower()}",
        created_by=actor,
        meta={"from": current.value, "to": new_status.value, "notes": notes},
    )
    session.add(order)
    session.commit()
    session.refresh(order)

    logger.info(f"Order {order.order_number}: {current.value} -> {new_status.value} by {actor}")

    warnings: List[str] = []
    if new_status == OrderStatus.CONFIRMED:
        warnings = commit_stock(session, order)
    elif new_status == OrderStatus.CANCELLED:
        warnings = restore_stock(session, order)

    if warnings:
        log_order_event(
            session,
            order_id=order.id,
            event_type="stock_reconciliation",
            label="Stock needs manual reconciliation",
            meta={"warnings": warnings},
        )
        session.commit()
        session.refresh(order)

    return TransitionResult(order=order, warnings=warnings)


def cancel_order(
    session: Session,
    user_id: int,
    order_number: str,
    reason: Optional[str] = None,
) -> TransitionResult:
    order = get_order(session, order_number, user_id=user_id)
    if not can_customer_cancel(order.status):
        raise InvalidTransition(OrderStatus(order.status).value, OrderStatus.CANCELLED.value)

    note = f"Cancelled: {reason}" if reason else "Cancelled by user"
    return transition_order(session, order, OrderStatus.CANCELLED, notes=note, actor=f"user:{user_id}")
