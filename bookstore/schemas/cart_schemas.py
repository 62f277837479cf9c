from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class CouponKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(BaseModel):
    code: str = Field(min_length=1)
    discount: float = Field(ge=0)
    kind: CouponKind = CouponKind.PERCENTAGE

    @model_validator(mode="after")
    def check_percentage_bounds(self):
        if self.kind == CouponKind.PERCENTAGE and self.discount > 100:
            raise ValueError("Discount cannot exceed 100%")
        return self


class FreeDeliveryInfo(BaseModel):
    is_free_delivery: bool
    threshold: float
    amount_needed: float = 0
    message: str


class CartPricing(BaseModel):
    total_price: float
    total_items: int
    total_weight: int
    discounted_price: float
    savings: float
    delivery_charge: float
    final_total: float
    free_delivery: FreeDeliveryInfo


class CartLineView(BaseModel):
    item_id: Optional[int]
    book_id: int
    title: Optional[str] = None
    author: Optional[str] = None
    price: float          # snapshot price per unit
    current_price: Optional[float] = None
    price_changed: bool = False
    weight: int
    quantity: int
    line_total: float
    stock: Optional[int] = None
    available: bool = False


class CartDetails(BaseModel):
    user_id: int
    items: List[CartLineView]
    coupon: Optional[Coupon] = None
    pricing: CartPricing
