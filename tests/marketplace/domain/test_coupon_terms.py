"""Tests for coupon discount arithmetic and usage limits."""

import pytest
from marketplace.errors import AlreadyUsedByUser, UsageLimitReached
from marketplace.promotion.coupon import Coupon
from marketplace.promotion.validation import compute_discount, normalize_code
from protean.exceptions import ValidationError


class TestNormalizeCode:
    def test_trims_and_uppercases(self):
        assert normalize_code("  welcome50 ") == "WELCOME50"

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_blank_code_is_rejected(self, code):
        with pytest.raises(ValidationError) as exc:
            normalize_code(code)
        assert exc.value.messages["code"] == ["Coupon code is required"]


class TestComputeDiscount:
    def test_percentage_rounds_half_up_to_whole_rupees(self):
        assert compute_discount("percentage", 10, 1005.0) == 101.0
        assert compute_discount("percentage", 10, 1004.0) == 100.0

    def test_percentage_is_capped_by_max_discount(self):
        assert compute_discount("percentage", 50, 2000.0, max_discount=300.0) == 300.0

    def test_fixed_amount(self):
        assert compute_discount("fixed", 150, 1000.0) == 150.0

    def test_discount_never_exceeds_cart_total(self):
        assert compute_discount("fixed", 500, 200.0) == 200.0
        assert compute_discount("percentage", 100, 199.0) == 199.0


class TestCouponUsage:
    def _coupon(self, **terms):
        return Coupon.create("welcome", "fixed", 100.0, **terms)

    def test_code_is_stored_uppercase(self):
        assert self._coupon().code == "WELCOME"

    def test_percentage_above_hundred_is_rejected(self):
        with pytest.raises(ValidationError):
            Coupon.create("BIG", "percentage", 120.0)

    def test_record_usage_counts_and_remembers_user(self):
        coupon = self._coupon(usage_limit_per_user=2)
        coupon.record_usage("cust-1")
        coupon.record_usage("cust-1")
        assert coupon.used_count == 2
        assert coupon.uses_by("cust-1") == 2

    def test_per_user_limit(self):
        coupon = self._coupon()
        coupon.record_usage("cust-1")
        with pytest.raises(AlreadyUsedByUser):
            coupon.record_usage("cust-1")
        coupon.record_usage("cust-2")
        assert coupon.used_count == 2

    def test_global_limit(self):
        coupon = self._coupon(usage_limit=1)
        coupon.record_usage("cust-1")
        with pytest.raises(UsageLimitReached) as exc:
            coupon.check_usage("cust-2")
        assert exc.value.message == "Coupon has reached its usage limit"
