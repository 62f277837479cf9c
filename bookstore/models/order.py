from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, JSON
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

from bookstore.constants.order_status import OrderStatus, PaymentMethod, PaymentStatus
from bookstore.models.order_item import OrderItem

if TYPE_CHECKING:
    from bookstore.models.order_event import OrderEvent


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: str = Field(index=True, unique=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    # pricing snapshot, copied from the cart at checkout and never recomputed
    total_amount: float = Field(ge=0)
    discount: float = Field(default=0, ge=0)
    delivery_charge: float = Field(default=0, ge=0)
    final_amount: float = Field(ge=0)
    total_items: int
    total_weight: int
    coupon_code: Optional[str] = None

    status: OrderStatus = Field(default=OrderStatus.PENDING, index=True)
    payment_method: PaymentMethod
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING)

    # gateway correlation
    gateway_order_id: Optional[str] = Field(default=None, index=True)
    gateway_payment_id: Optional[str] = Field(default=None, index=True)
    gateway_signature: Optional[str] = None

    shipping_address: dict = Field(sa_column=Column(JSON, nullable=False))
    billing_address: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # tracking
    tracking_carrier: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None

    # stock bookkeeping
    stock_committed_at: Optional[datetime] = None
    stock_restored_at: Optional[datetime] = None

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "OrderItem.id"},
    )
    events: List["OrderEvent"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"order_by": "OrderEvent.id"},
    )

    @property
    def stock_outstanding(self) -> bool:
        """Stock was taken from the shelf for this order and not yet put back."""
        return self.stock_committed_at is not None and self.stock_restored_at is None

    def append_note(self, note: Optional[str]):
        if not note:
            return
        self.notes = f"{self.notes}\n{note}" if self.notes else note
