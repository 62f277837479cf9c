from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON

if TYPE_CHECKING:
    from bookstore.models.order import Order


class OrderEvent(SQLModel, table=True):
    """One entry on an order's timeline. Rows are only ever appended."""

    __tablename__ = "order_event"

    # autoincrement keeps insertion order even within one timestamp tick
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)

    event_type: str = Field(index=True)   # placed / confirmed / cancelled / stock_reconciliation ...
    label: str
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_by: str = Field(default="system")   # "system", "user:<id>", "admin:<id>"
    created_at: datetime = Field(default_factory=datetime.utcnow)

    order: Optional["Order"] = Relationship(back_populates="events")
