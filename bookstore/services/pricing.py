"""
Cart pricing.

Everything here is a pure function of the cart lines and the coupon. Nothing
is cached on the cart; callers recompute at every read (cart view, checkout
snapshot).
"""

import math
from typing import Iterable, Optional, Protocol

from bookstore.config import settings
from bookstore.schemas.cart_schemas import CartPricing, Coupon, CouponKind, FreeDeliveryInfo

# weights in grams
BASE_WEIGHT_LIMIT = 2000
BASE_WEIGHT_CHARGE = 120
EXTRA_WEIGHT_STEP = 500
EXTRA_WEIGHT_CHARGE = 40


class PricedLine(Protocol):
    price: float
    quantity: int
    weight: int


def total_price(lines: Iterable[PricedLine]) -> float:
    # rounded to paise so threshold checks see the amount the customer sees
    return round(sum(line.price * line.quantity for line in lines), 2)


def total_items(lines: Iterable[PricedLine]) -> int:
    return sum(line.quantity for line in lines)


def total_weight(lines: Iterable[PricedLine]) -> int:
    return sum(line.weight * line.quantity for line in lines)


def weight_charge(weight: int) -> float:
    if weight <= 0:
        return 0
    if weight < 450:
        return 50
    if weight <= 1000:
        return 80
    if weight <= BASE_WEIGHT_LIMIT:
        return BASE_WEIGHT_CHARGE
    extra_steps = math.ceil((weight - BASE_WEIGHT_LIMIT) / EXTRA_WEIGHT_STEP)
    return BASE_WEIGHT_CHARGE + extra_steps * EXTRA_WEIGHT_CHARGE


def delivery_charge(price: float, weight: int, threshold: Optional[float] = None) -> float:
    """Free above the threshold, otherwise the weight tier."""
    threshold = settings.free_delivery_threshold if threshold is None else threshold
    if price >= threshold:
        return 0
    return weight_charge(weight)


def apply_discount(price: float, coupon: Optional[Coupon]) -> float:
    if not coupon or not coupon.discount:
        return price

    if coupon.kind == CouponKind.PERCENTAGE:
        discounted = price - (price * coupon.discount) / 100
    else:
        discounted = price - coupon.discount

    return round(max(0.0, discounted), 2)


def free_delivery_info(price: float, threshold: Optional[float] = None) -> FreeDeliveryInfo:
    threshold = settings.free_delivery_threshold if threshold is None else threshold

    if price >= threshold:
        return FreeDeliveryInfo(
            is_free_delivery=True,
            threshold=threshold,
            message="Congratulations! You've got FREE delivery",
        )

    amount_needed = round(threshold - price, 2)
    return FreeDeliveryInfo(
        is_free_delivery=False,
        threshold=threshold,
        amount_needed=amount_needed,
        message=f"Add ₹{amount_needed:g} more for FREE delivery",
    )


def price_cart(
    lines: Iterable[PricedLine],
    coupon: Optional[Coupon] = None,
    threshold: Optional[float] = None,
) -> CartPricing:
    lines = list(lines)

    subtotal = total_price(lines)
    weight = total_weight(lines)
    discounted = apply_discount(subtotal, coupon)
    charge = delivery_charge(subtotal, weight, threshold)

    return CartPricing(
        total_price=subtotal,
        total_items=total_items(lines),
        total_weight=weight,
        discounted_price=discounted,
        savings=round(subtotal - discounted, 2),
        delivery_charge=charge,
        final_total=round(discounted + charge, 2),
        free_delivery=free_delivery_info(subtotal, threshold),
    )
