"""
Slippage and withdrawal-size calculations.

Pure integer/rational arithmetic on base-unit amounts; nothing here touches
the network. Tolerances are fractions.Fraction so that "0.2" means exactly
one fifth - binary floats never enter amount math.
"""

from decimal import Decimal, InvalidOperation
from fractions import Fraction

from ..core.exceptions import InvalidToleranceError

BPS_DENOMINATOR = 10_000

# 0.5%, matching the toolkit's historical slippage_bps=50 default
DEFAULT_TOLERANCE = Fraction(50, BPS_DENOMINATOR)


def _check_amount(name, value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer amount in base units, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def as_tolerance(value):
    """
    Convert a tolerance to an exact Fraction.

    Accepts Fraction, int, Decimal, decimal strings ("0.2", "20%") and floats.
    Floats go through their shortest repr, so 0.2 becomes exactly 1/5.

    Raises:
        InvalidToleranceError: If the value cannot be read as a number
    """
    if isinstance(value, bool):
        raise InvalidToleranceError(f"Tolerance must be numeric, got {value!r}")
    try:
        if isinstance(value, Fraction):
            return value
        if isinstance(value, (int, Decimal)):
            return Fraction(value)
        if isinstance(value, float):
            return Fraction(repr(value))
        if isinstance(value, str):
            text = value.strip()
            if text.endswith("%"):
                return Fraction(text[:-1].strip()) / 100
            return Fraction(text)
    except (ValueError, ZeroDivisionError, InvalidOperation, OverflowError) as e:
        raise InvalidToleranceError(f"Invalid tolerance {value!r}: {e}") from e
    raise InvalidToleranceError(f"Unsupported tolerance type: {type(value).__name__}")


def tolerance_from_bps(bps):
    """Tolerance from basis points (50 -> 0.5%)"""
    _check_amount("bps", bps)
    return validate_tolerance(Fraction(bps, BPS_DENOMINATOR))


def validate_tolerance(value, allow_full=False):
    """
    Normalise and range-check a tolerance.

    Args:
        value: Anything as_tolerance() accepts
        allow_full: Accept exactly 1 (zero minimum). Requests never do.

    Returns:
        Fraction in [0, 1), or [0, 1] with allow_full

    Raises:
        InvalidToleranceError: If out of range
    """
    tolerance = as_tolerance(value)
    upper_ok = tolerance <= 1 if allow_full else tolerance < 1
    if tolerance < 0 or not upper_ok:
        bounds = "[0, 1]" if allow_full else "[0, 1)"
        raise InvalidToleranceError(f"Tolerance {tolerance} outside {bounds}")
    return tolerance


def minimum_amount(desired, tolerance):
    """
    Minimum acceptable amount for a desired amount and slippage tolerance.

    Computes floor(desired * (1 - tolerance)) exactly. A tolerance of 1
    yields 0, i.e. no slippage protection at all.

    Args:
        desired: Desired amount in base units
        tolerance: Fractional tolerance in [0, 1]

    Returns:
        Minimum amount in base units (<= desired)
    """
    _check_amount("desired", desired)
    tolerance = validate_tolerance(tolerance, allow_full=True)
    return desired * (tolerance.denominator - tolerance.numerator) // tolerance.denominator


def safe_withdrawal_amount(requested, available):
    """
    Clamp a liquidity withdrawal against the live balance.

    Returns requested when the balance covers it, otherwise half the
    available balance, so a stale request never drains the whole position.

    Args:
        requested: Liquidity the caller asked to burn
        available: Liquidity-token balance at read time

    Returns:
        Amount to burn (<= available)
    """
    _check_amount("requested", requested)
    _check_amount("available", available)
    if available >= requested:
        return requested
    return available // 2


def rescale_minimum(minimum, original, clamped):
    """Scale a minimum computed for `original` liquidity down to `clamped` liquidity"""
    _check_amount("minimum", minimum)
    _check_amount("clamped", clamped)
    _check_amount("original", original)
    if original == 0:
        raise ValueError("original amount must be positive")
    return minimum * clamped // original


def expected_withdrawal(liquidity, reserve_a, reserve_b, total_supply):
    """
    Pro-rata share of reserves owned by `liquidity` LP tokens.

    Returns:
        (amount_a, amount_b) rounded down, (0, 0) for an empty pool
    """
    for name, value in (("liquidity", liquidity), ("reserve_a", reserve_a),
                        ("reserve_b", reserve_b), ("total_supply", total_supply)):
        _check_amount(name, value)
    if total_supply == 0:
        return 0, 0
    return liquidity * reserve_a // total_supply, liquidity * reserve_b // total_supply


class QuoteCalculator:
    """Slippage bounds with a default tolerance"""

    def __init__(self, tolerance=DEFAULT_TOLERANCE):
        self.tolerance = validate_tolerance(tolerance)

    def __repr__(self):
        return f"QuoteCalculator(tolerance={self.tolerance})"

    def minimum_amount(self, desired, tolerance=None):
        return minimum_amount(desired, self.tolerance if tolerance is None else tolerance)

    def minimums(self, *amounts, tolerance=None):
        """Minimum for each desired amount, in order"""
        return tuple(self.minimum_amount(amount, tolerance) for amount in amounts)

    safe_withdrawal_amount = staticmethod(safe_withdrawal_amount)
    rescale_minimum = staticmethod(rescale_minimum)
    expected_withdrawal = staticmethod(expected_withdrawal)
