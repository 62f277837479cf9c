import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlmodel import select, Session

from bookstore.config import settings
from bookstore.constants.order_status import OrderStatus, PaymentMethod
from bookstore.database import engine
from bookstore.errors import InvalidTransition
from bookstore.logging_config import setup_logging
from bookstore.models.order import Order
from bookstore.services.order_service import transition_order

logger = logging.getLogger(__name__)


def expire_unpaid_orders(session: Session, now: Optional[datetime] = None) -> List[str]:
    """
    Cancel online-payment orders that never got a verified payment.

    Returns the order numbers that were cancelled.
    """
    now = now or datetime.utcnow()
    cutoff = now - timedelta(days=settings.payment_expiry_days)

    orders = session.exec(
        select(Order)
        .where(Order.status == OrderStatus.PENDING)
        .where(Order.payment_method != PaymentMethod.CASH_ON_DELIVERY)
        .where(Order.created_at < cutoff)
    ).all()

    expired = []
    for order in orders:
        try:
            transition_order(session, order, OrderStatus.CANCELLED, notes="Payment window expired")
        except InvalidTransition:
            # paid or cancelled while we were iterating
            continue
        expired.append(order.order_number)

    logger.info(f"Expired {len(expired)} unpaid orders")
    return expired


def run_expiry_job():
    with Session(engine) as session:
        return expire_unpaid_orders(session)


if __name__ == "__main__":
    setup_logging()
    run_expiry_job()
