"""Tests for slippage and withdrawal-size calculations"""

from decimal import Decimal
from fractions import Fraction

import pytest

from amm_liquidity.core.exceptions import InvalidToleranceError
from amm_liquidity.operations.quotes import (
    DEFAULT_TOLERANCE,
    QuoteCalculator,
    as_tolerance,
    expected_withdrawal,
    minimum_amount,
    rescale_minimum,
    safe_withdrawal_amount,
    tolerance_from_bps,
    validate_tolerance,
)


class TestToleranceParsing:

    @pytest.mark.parametrize("value", [0.2, "0.2", "20%", Decimal("0.2"), Fraction(1, 5)])
    def test_one_fifth_is_exact(self, value):
        assert as_tolerance(value) == Fraction(1, 5)

    def test_float_uses_shortest_repr(self):
        assert as_tolerance(0.1) == Fraction(1, 10)

    def test_bps(self):
        assert tolerance_from_bps(50) == DEFAULT_TOLERANCE == Fraction(1, 200)

    @pytest.mark.parametrize("value", ["abc", "", None, [0.1], True])
    def test_unreadable(self, value):
        with pytest.raises(InvalidToleranceError):
            as_tolerance(value)

    @pytest.mark.parametrize("value", [-0.01, 1, "1.5", "100%"])
    def test_request_range_excludes_one(self, value):
        with pytest.raises(InvalidToleranceError):
            validate_tolerance(value)

    def test_full_range_allows_one(self):
        assert validate_tolerance(1, allow_full=True) == 1

    def test_invalid_tolerance_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_tolerance("-1")


class TestMinimumAmount:

    def test_twenty_percent_of_hundred_usdc(self):
        assert minimum_amount(100_000_000, 0.2) == 80_000_000

    def test_zero_tolerance_is_identity(self):
        assert minimum_amount(123_456_789, 0) == 123_456_789

    def test_full_tolerance_is_zero(self):
        assert minimum_amount(10 ** 18, 1) == 0

    def test_rounds_down(self):
        assert minimum_amount(999, "0.5") == 499

    def test_large_amounts_stay_exact(self):
        desired = 2 ** 200 + 7
        assert minimum_amount(desired, Fraction(1, 3)) == desired * 2 // 3

    @pytest.mark.parametrize("desired", [0, 1, 7, 10 ** 6, 10 ** 30])
    @pytest.mark.parametrize("tolerance", ["0", "0.005", "0.3", "0.999"])
    def test_never_exceeds_desired(self, desired, tolerance):
        assert 0 <= minimum_amount(desired, tolerance) <= desired

    def test_monotonic_in_tolerance(self):
        results = [minimum_amount(10 ** 9, t) for t in ("0", "0.01", "0.1", "0.5", "0.9", "1")]
        assert results == sorted(results, reverse=True)

    @pytest.mark.parametrize("desired", [-1, 1.5, "100", True])
    def test_rejects_non_integer_amounts(self, desired):
        with pytest.raises(ValueError):
            minimum_amount(desired, 0.1)

    def test_rejects_out_of_range_tolerance(self):
        with pytest.raises(InvalidToleranceError):
            minimum_amount(100, "1.01")


class TestSafeWithdrawal:

    def test_short_balance_takes_half(self):
        assert safe_withdrawal_amount(10 ** 18, 4 * 10 ** 17) == 2 * 10 ** 17

    def test_exact_balance_is_untouched(self):
        assert safe_withdrawal_amount(10 ** 18, 10 ** 18) == 10 ** 18

    def test_surplus_balance_is_untouched(self):
        assert safe_withdrawal_amount(5, 10 ** 18) == 5

    def test_zero_balance(self):
        assert safe_withdrawal_amount(10, 0) == 0

    @pytest.mark.parametrize("requested,available", [(10, 3), (10, 9), (1, 1), (100, 1000), (7, 0)])
    def test_never_exceeds_either_input(self, requested, available):
        amount = safe_withdrawal_amount(requested, available)
        assert amount <= requested
        assert amount <= available

    def test_idempotent_once_clamped(self):
        first = safe_withdrawal_amount(10 ** 18, 4 * 10 ** 17)
        assert safe_withdrawal_amount(first, 4 * 10 ** 17) == first

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            safe_withdrawal_amount(-1, 10)


class TestRescaleAndExpected:

    def test_rescale_pro_rata(self):
        assert rescale_minimum(1000, 10 ** 18, 2 * 10 ** 17) == 200

    def test_rescale_rounds_down(self):
        assert rescale_minimum(7, 3, 1) == 2

    def test_rescale_zero_original(self):
        with pytest.raises(ValueError):
            rescale_minimum(1, 0, 0)

    def test_expected_withdrawal(self):
        assert expected_withdrawal(100, 1_000, 5_000, 1_000) == (100, 500)

    def test_expected_withdrawal_empty_pool(self):
        assert expected_withdrawal(0, 0, 0, 0) == (0, 0)


class TestQuoteCalculator:

    def test_default_tolerance(self):
        calculator = QuoteCalculator()
        assert calculator.tolerance == DEFAULT_TOLERANCE
        assert calculator.minimum_amount(10_000) == 9_950

    def test_override_per_call(self):
        calculator = QuoteCalculator("0.01")
        assert calculator.minimum_amount(1_000) == 990
        assert calculator.minimum_amount(1_000, tolerance="0.2") == 800

    def test_minimums_keep_order(self):
        assert QuoteCalculator("0.1").minimums(1_000, 50, 0) == (900, 45, 0)

    def test_default_cannot_be_full(self):
        with pytest.raises(InvalidToleranceError):
            QuoteCalculator(1)

    def test_static_helpers(self):
        calculator = QuoteCalculator()
        assert calculator.safe_withdrawal_amount(10, 4) == 2
        assert calculator.rescale_minimum(10, 10, 2) == 2
