"""
Stock reservation protocol.

Stock is taken off the shelf once, when an order is confirmed, and put back
once, when an order whose stock was taken is cancelled. Both run after the
order's status change has been committed: a stock-side failure is logged and
returned as a warning, it never undoes the status change.
"""

import logging
from datetime import datetime
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from bookstore.models.order import Order
from bookstore.services.catalog_service import StockAdjustment, bulk_update_stock

logger = logging.getLogger(__name__)


def _apply(session: Session, order: Order, action: str, adjustments: List[StockAdjustment]) -> List[str]:
    order_number = order.order_number
    try:
        result = bulk_update_stock(session, adjustments)
        applied = set(result.applied)
        committing = action == "commit"

        # per-line flag so a later restore only returns what was really taken
        for item in order.items:
            if item.book_id in applied:
                item.stock_committed = committing
                session.add(item)

        if committing:
            order.stock_committed_at = datetime.utcnow()
        else:
            order.stock_restored_at = datetime.utcnow()
        session.add(order)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"Stock {action} aborted for order {order_number}")
        return [f"Stock {action} aborted for order {order_number}: {exc.__class__.__name__}"]

    warnings = [
        f"Stock {action} failed for book {failure.book_id} on order {order_number}: {failure.reason}"
        for failure in result.failed
    ]
    if warnings:
        logger.error(f"Order {order_number} needs stock reconciliation: {len(warnings)} line(s) not applied")
    else:
        logger.info(f"Stock {action} done for order {order_number} ({len(result.applied)} books)")
    return warnings


def commit_stock(session: Session, order: Order) -> List[str]:
    """Take the order's quantities off the shelf. Runs at most once per order."""
    if order.stock_committed_at is not None:
        logger.info(f"Stock already committed for order {order.order_number}, skipping")
        return []

    adjustments = [StockAdjustment(book_id=item.book_id, delta=-item.quantity) for item in order.items]
    return _apply(session, order, "commit", adjustments)


def restore_stock(session: Session, order: Order) -> List[str]:
    """Put back what a confirmed order took. No-op unless stock is outstanding."""
    if not order.stock_outstanding:
        logger.info(f"No committed stock to restore for order {order.order_number}")
        return []

    adjustments = [
        StockAdjustment(book_id=item.book_id, delta=item.quantity)
        for item in order.items
        if item.stock_committed
    ]
    return _apply(session, order, "restore", adjustments)
