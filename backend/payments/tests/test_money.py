"""
Unit tests for payments.money module.

Order totals are recalculated after every item change, so these helpers
must never drift by a paisa no matter how often they run.
"""

import pytest
from decimal import Decimal

from payments.money import (
    calculate_percentage,
    currency_exponent,
    from_minor,
    is_finite_amount,
    quantize,
    quantize_decimal,
    safe_minor,
    sum_minor,
    to_decimal,
    to_minor,
)


class TestCurrencyExponent:
    """Test currency exponent lookup."""

    def test_pkr_exponent(self):
        assert currency_exponent("PKR") == 2

    def test_jpy_exponent(self):
        assert currency_exponent("JPY") == 0

    def test_kwd_exponent(self):
        assert currency_exponent("KWD") == 3

    def test_case_insensitive(self):
        assert currency_exponent("pkr") == 2

    def test_unknown_currency_defaults_to_2(self):
        assert currency_exponent("XXX") == 2

    def test_quantize_decimal(self):
        assert quantize_decimal("PKR") == Decimal("0.01")
        assert quantize_decimal("JPY") == Decimal("1")


class TestQuantize:
    """Test Decimal quantization with banker's rounding."""

    def test_quantize_normal(self):
        assert quantize("PKR", "10.127") == Decimal("10.13")

    def test_bankers_rounding_down(self):
        # 10.125 → 10.12 (round to even)
        assert quantize("PKR", "10.125") == Decimal("10.12")

    def test_bankers_rounding_up(self):
        # 10.135 → 10.14 (round to even)
        assert quantize("PKR", "10.135") == Decimal("10.14")

    def test_float_goes_through_str(self):
        assert quantize("PKR", 0.1) == Decimal("0.10")


class TestToDecimal:
    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_decimal_passthrough(self):
        value = Decimal("12.50")
        assert to_decimal(value) is value

    def test_garbage_is_nan(self):
        assert to_decimal("twelve").is_nan()

    def test_is_finite_amount(self):
        assert is_finite_amount("540.00")
        assert not is_finite_amount("NaN")
        assert not is_finite_amount(Decimal("Infinity"))
        assert not is_finite_amount("abc")


class TestMinorUnits:
    def test_to_minor(self):
        assert to_minor("PKR", "530") == 53000
        assert to_minor("PKR", Decimal("10.125")) == 1012

    def test_from_minor(self):
        assert from_minor("PKR", 54000) == Decimal("540.00")
        assert from_minor("JPY", 540) == Decimal("540")

    def test_safe_minor_treats_invalid_as_zero(self):
        assert safe_minor("PKR", None) == 0
        assert safe_minor("PKR", Decimal("NaN")) == 0
        assert safe_minor("PKR", "Infinity") == 0
        assert safe_minor("PKR", "oops") == 0
        assert safe_minor("PKR", "12.34") == 1234

    def test_sum_minor_skips_corrupt_lines(self):
        assert sum_minor("PKR", ["300.00", "NaN", None, "240.00"]) == 54000

    def test_repeated_conversion_is_stable(self):
        amount = Decimal("333.33")
        for _ in range(100):
            amount = from_minor("PKR", to_minor("PKR", amount))
        assert amount == Decimal("333.33")


class TestPercentage:
    def test_ten_percent(self):
        assert calculate_percentage("PKR", "600.00", "10") == 6000

    def test_fractional_percentage_rounds_half_even(self):
        # 12.5% of 100.10 = 12.5125 → 12.51
        assert calculate_percentage("PKR", "100.10", "12.5") == 1251

    def test_zero_percent(self):
        assert calculate_percentage("PKR", "600.00", "0") == 0

