from dataclasses import dataclass

import pytest
from pydantic import ValidationError

from bookstore.schemas.cart_schemas import Coupon, CouponKind
from bookstore.services.pricing import (
    apply_discount,
    delivery_charge,
    free_delivery_info,
    price_cart,
    total_items,
    total_weight,
    weight_charge,
)


@dataclass
class Line:
    price: float
    quantity: int
    weight: int


class TestTotals:
    def test_items_and_weight_are_sums_over_lines(self):
        lines = [Line(200, 3, 300), Line(150, 2, 450)]
        assert total_items(lines) == 5
        assert total_weight(lines) == 3 * 300 + 2 * 450

    def test_empty_cart(self):
        pricing = price_cart([])
        assert pricing.total_price == 0
        assert pricing.total_items == 0
        assert pricing.total_weight == 0
        assert pricing.delivery_charge == 0
        assert pricing.final_total == 0


class TestWeightCharge:
    @pytest.mark.parametrize(
        "weight, charge",
        [
            (0, 0),
            (1, 50),
            (449, 50),
            (450, 80),
            (1000, 80),
            (1001, 120),
            (2000, 120),
            (2001, 160),
            (2500, 160),
            (2501, 200),
            (3000, 200),
        ],
    )
    def test_tiers(self, weight, charge):
        assert weight_charge(weight) == charge

    def test_free_at_threshold(self):
        assert delivery_charge(1500, 5000) == 0
        assert delivery_charge(2000, 300) == 0

    def test_below_threshold_uses_weight(self):
        assert delivery_charge(1499, 900) == 80

    def test_zero_weight_below_threshold_is_free(self):
        assert delivery_charge(100, 0) == 0

    def test_custom_threshold(self):
        assert delivery_charge(600, 900, threshold=500) == 0


class TestDiscount:
    def test_percentage(self):
        assert apply_discount(1000, Coupon(code="TEN", discount=10)) == 900

    def test_fixed_floors_at_zero(self):
        assert apply_discount(50, Coupon(code="BIG", discount=100, kind=CouponKind.FIXED)) == 0

    def test_no_coupon(self):
        assert apply_discount(420, None) == 420

    def test_rounds_to_paise(self):
        assert apply_discount(99.99, Coupon(code="X", discount=33)) == 66.99

    def test_percentage_over_hundred_rejected(self):
        with pytest.raises(ValidationError):
            Coupon(code="TOO_MUCH", discount=150)

    def test_fixed_over_hundred_allowed(self):
        assert Coupon(code="FLAT", discount=250, kind="fixed").discount == 250


class TestPriceCart:
    def test_worked_example(self):
        pricing = price_cart([Line(200, 3, 300)])

        assert pricing.total_price == 600
        assert pricing.total_weight == 900
        assert pricing.delivery_charge == 80
        assert pricing.final_total == 680
        assert pricing.savings == 0

    def test_percentage_coupon(self):
        pricing = price_cart([Line(1000, 1, 300)], Coupon(code="TEN", discount=10))

        assert pricing.discounted_price == 900
        assert pricing.savings == 100
        assert pricing.delivery_charge == 50
        assert pricing.final_total == 950

    def test_delivery_uses_undiscounted_total(self):
        pricing = price_cart([Line(800, 2, 500)], Coupon(code="TEN", discount=10))

        assert pricing.discounted_price == 1440
        assert pricing.delivery_charge == 0
        assert pricing.final_total == 1440

    def test_paise_sum_reaching_threshold_ships_free(self):
        pricing = price_cart([Line(103.57, 10, 300), Line(464.30, 1, 300)])

        assert pricing.total_price == 1500
        assert pricing.delivery_charge == 0
        assert pricing.free_delivery.is_free_delivery is True
        assert pricing.final_total == 1500

    def test_fixed_coupon_larger_than_total(self):
        pricing = price_cart([Line(50, 1, 300)], Coupon(code="BIG", discount=100, kind=CouponKind.FIXED))

        assert pricing.discounted_price == 0
        assert pricing.savings == 50
        assert pricing.final_total == pricing.delivery_charge == 50


class TestFreeDeliveryInfo:
    def test_amount_needed(self):
        info = free_delivery_info(1200)

        assert info.is_free_delivery is False
        assert info.threshold == 1500
        assert info.amount_needed == 300
        assert info.message == "Add ₹300 more for FREE delivery"

    def test_qualified(self):
        info = free_delivery_info(1500)

        assert info.is_free_delivery is True
        assert info.amount_needed == 0
        assert "FREE delivery" in info.message
