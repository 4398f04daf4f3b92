"""
Tests for fixed-point scaling.

Covers the two truncating conversions and the rounding policy: yield is
never created from nothing, and the truncated remainder is bounded by the
share count.
"""

import pytest

from yield_kernel.domain.fixed_point import SCALE, max_dust, scale_down, scale_up
from yield_kernel.exceptions import ErrorKind, FixedPointDivisionByZeroError


class TestScaleUp:
    def test_scale_constant(self):
        assert SCALE == 1_000_000

    def test_exact_division(self):
        # 3,750,000 revenue over 1000 shares
        assert scale_up(3_750_000, 1000) == 3_750_000_000

    def test_truncates(self):
        # 10 * 1e6 / 3 = 3_333_333.33...
        assert scale_up(10, 3) == 3_333_333

    def test_zero_shares_raises(self):
        with pytest.raises(FixedPointDivisionByZeroError) as exc_info:
            scale_up(100, 0)

        assert exc_info.value.revenue == 100
        assert exc_info.value.code == "FIXED_POINT_DIVISION_BY_ZERO"
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    def test_handles_values_beyond_64_bits(self):
        revenue = 2**70
        assert scale_up(revenue, 1) == revenue * SCALE


class TestScaleDown:
    def test_exact(self):
        assert scale_down(3_750_000_000, 200) == 750_000

    def test_truncates(self):
        # 3_333_333 * 1 / 1e6 = 3.33
        assert scale_down(3_333_333, 1) == 3

    def test_zero_shares_owes_nothing(self):
        assert scale_down(3_750_000_000, 0) == 0

    def test_zero_delta_owes_nothing(self):
        assert scale_down(0, 500) == 0


class TestRoundingPolicy:
    def test_three_way_split_leaves_dust(self):
        delta = scale_up(10, 3)
        paid = 3 * scale_down(delta, 1)

        assert paid == 9
        assert paid <= 10

    def test_remainder_bounded_by_max_dust(self):
        revenue, shares = 1_000_003, 7
        delta = scale_up(revenue, shares)

        remainder = revenue * SCALE - delta * shares
        assert 0 <= remainder <= max_dust(shares)

    def test_max_dust_for_zero_shares(self):
        assert max_dust(0) == 0
