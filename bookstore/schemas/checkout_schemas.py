# bookstore/schemas/checkout_schemas.py
from dataclasses import dataclass, field
from pydantic import BaseModel
from typing import List, Optional

from bookstore.constants.order_status import PaymentMethod
from bookstore.models.order import Order
from bookstore.schemas.address_schemas import Address


class CheckoutRequest(BaseModel):
    shipping_address: Address
    billing_address: Optional[Address] = None   # same as shipping when omitted
    payment_method: PaymentMethod = PaymentMethod.RAZORPAY
    notes: Optional[str] = None


class PaymentVerifyRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class TrackingInfo(BaseModel):
    carrier: Optional[str] = "Standard"
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None


@dataclass
class TransitionResult:
    """Outcome of a status change; stock-side problems ride along as warnings."""

    order: Order
    warnings: List[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass
class CheckoutResult:
    order: Order
    amount: float
    amount_minor_units: int
    currency: str
    payment_intent_id: Optional[str] = None
    gateway_key_id: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
