from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint
from typing import List, Optional
from datetime import datetime

from bookstore.schemas.cart_schemas import Coupon, CouponKind


class Cart(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True)

    # coupon (opaque, validated upstream)
    coupon_code: Optional[str] = None
    coupon_discount: Optional[float] = None
    coupon_kind: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["CartItem"] = Relationship(
        back_populates="cart",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "CartItem.id",
        },
    )

    @property
    def coupon(self) -> Optional[Coupon]:
        if not self.coupon_code:
            return None
        return Coupon(
            code=self.coupon_code,
            discount=self.coupon_discount or 0,
            kind=CouponKind(self.coupon_kind or CouponKind.PERCENTAGE),
        )

    def set_coupon(self, coupon: Optional[Coupon]):
        self.coupon_code = coupon.code if coupon else None
        self.coupon_discount = coupon.discount if coupon else None
        self.coupon_kind = coupon.kind.value if coupon else None

    def find_item(self, book_id: int) -> Optional["CartItem"]:
        return next((item for item in self.items if item.book_id == book_id), None)

    def touch(self):
        self.updated_at = datetime.utcnow()


class CartItem(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("cart_id", "book_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    cart_id: int = Field(foreign_key="cart.id", index=True)
    book_id: int = Field(foreign_key="book.id")

    quantity: int = Field(default=1, ge=1)
    price: float = Field(ge=0)    # unit price snapshot
    weight: int = Field(ge=1)     # unit weight snapshot, grams

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    cart: Optional[Cart] = Relationship(back_populates="items")
