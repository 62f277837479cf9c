# bookstore/services/order_event_service.py

from typing import List, Optional

from sqlmodel import Session, select

from bookstore.models.order_event import OrderEvent


def log_order_event(
    session: Session,
    order_id: int,
    event_type: str,
    label: str,
    created_by: str = "system",
    meta: Optional[dict] = None,
) -> OrderEvent:
    """
    Stage a timeline entry; it is written with the caller's commit.
    """
    event = OrderEvent(
        order_id=order_id,
        event_type=event_type,
        label=label,
        meta=meta,
        created_by=created_by,
    )
    session.add(event)
    return event


def get_order_timeline(session: Session, order_id: int, event_type: Optional[str] = None) -> List[OrderEvent]:
    statement = select(OrderEvent).where(OrderEvent.order_id == order_id)
    if event_type:
        statement = statement.where(OrderEvent.event_type == event_type)
    return session.exec(statement.order_by(OrderEvent.id)).all()
