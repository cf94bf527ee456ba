"""
Monetary precision helpers for order pricing and settlement.

All order arithmetic (line totals, discounts, delivery charges, outstanding
balances) is done in integer minor units and converted back to Decimal only
when a value is stored or shown. Repeated recalculation of the same order
therefore never accumulates rounding drift.

Key Principles:
1. NEVER use float for money
2. Always quantize Decimals BEFORE converting to minor units
3. Use ROUND_HALF_EVEN (banker's rounding) to prevent systematic bias
4. Treat NaN/Infinity as invalid input, never as an amount
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN, getcontext
from typing import Iterable, Optional, Union

getcontext().prec = 28

Amount = Union[Decimal, str, int, float]

# Minor unit exponents (how many decimal places) for the currencies we ship with.
CURRENCY_EXPONENT = {
    "PKR": 2,  # Pakistani Rupee (paisa)
    "INR": 2,  # Indian Rupee (paise)
    "AED": 2,  # UAE Dirham (fils)
    "SAR": 2,  # Saudi Riyal (halala)
    "USD": 2,  # United States Dollar (cents)
    "GBP": 2,  # British Pound (pence)
    "EUR": 2,  # Euro (cents)
    "JPY": 0,  # Japanese Yen (no subunit)
    "KWD": 3,  # Kuwaiti Dinar (fils)
    "OMR": 3,  # Omani Rial (baisa)
}


def currency_exponent(currency: str) -> int:
    """
    Number of decimal places for a currency; unknown codes use 2.

    Examples:
        >>> currency_exponent("PKR")
        2
        >>> currency_exponent("JPY")
        0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    """Smallest unit of the currency, e.g. Decimal('0.01')."""
    return Decimal(10) ** -currency_exponent(currency)


def to_decimal(amount: Optional[Amount]) -> Decimal:
    """
    Coerce a stored or submitted amount to Decimal. ``None`` becomes zero;
    floats go through ``str`` so 0.1 stays 0.1.
    """
    if amount is None:
        return Decimal("0")
    if isinstance(amount, Decimal):
        return amount
    try:
        return Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return Decimal("NaN")


def is_finite_amount(amount: Optional[Amount]) -> bool:
    return to_decimal(amount).is_finite()


def quantize(currency: str, amount: Amount) -> Decimal:
    """
    Round to currency decimals using banker's rounding (ROUND_HALF_EVEN).

    Examples:
        >>> quantize("PKR", "10.125")
        Decimal('10.12')
        >>> quantize("PKR", "10.135")
        Decimal('10.14')
    """
    return to_decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_EVEN)


def to_minor(currency: str, amount: Amount) -> int:
    """
    Convert to minor units after quantization.

    Examples:
        >>> to_minor("PKR", "530")
        53000
        >>> to_minor("PKR", "10.125")
        1012
    """
    quantized = quantize(currency, amount)
    exponent = currency_exponent(currency)
    return int((quantized * (10 ** exponent)).to_integral_value())


def safe_minor(currency: str, amount: Optional[Amount]) -> int:
    """
    Like ``to_minor`` but NaN, Infinity, None and unparsable values count as 0.
    Used when summing legacy rows that may hold corrupt totals.
    """
    value = to_decimal(amount)
    if not value.is_finite():
        return 0
    return to_minor(currency, value)


def from_minor(currency: str, minor: int) -> Decimal:
    """
    Convert minor units back to a quantized Decimal.

    Examples:
        >>> from_minor("PKR", 54000)
        Decimal('540.00')
    """
    exponent = currency_exponent(currency)
    return (Decimal(minor) / (10 ** exponent)).quantize(quantize_decimal(currency))


def sum_minor(currency: str, amounts: Iterable[Optional[Amount]]) -> int:
    return sum(safe_minor(currency, amount) for amount in amounts)


def calculate_percentage(currency: str, amount: Amount, percentage: Amount) -> int:
    """
    Percentage of an amount, returned in minor units.

    Examples:
        >>> calculate_percentage("PKR", "600.00", "10")
        6000
    """
    result = to_decimal(amount) * (to_decimal(percentage) / Decimal("100"))
    return to_minor(currency, result)
