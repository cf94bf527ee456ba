"""
Order financial calculator.

``calculate_totals`` is a pure function over an order's line totals and its
discount and delivery settings. It never touches the database; the
calculation service feeds it the live item rows and persists the result.

    subtotal        = sum of line totals (non-finite lines count as 0)
    discount_amount = subtotal * value / 100 (percentage) or value (fixed), >= 0
    delivery_charge = max(0, charge) for delivery orders, else 0
    total           = max(0, subtotal - discount_amount) + delivery_charge

All arithmetic happens in integer minor units.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from django.conf import settings

from core_backend.exceptions import PriceCalculationError
from payments.money import (
    calculate_percentage,
    from_minor,
    is_finite_amount,
    safe_minor,
    sum_minor,
    to_minor,
)

PERCENTAGE = "percentage"
FIXED = "fixed"
DELIVERY = "delivery"


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    delivery_charge: Decimal
    total: Decimal

    def as_dict(self) -> Dict[str, Decimal]:
        return {
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "delivery_charge": self.delivery_charge,
            "total": self.total,
        }


def _line_total(item: Any):
    return getattr(item, "total_price", item)


def calculate_totals(
    items: Iterable[Any],
    discount_type: Optional[str],
    discount_value: Any,
    order_type: str,
    delivery_charge: Any,
    currency: Optional[str] = None,
) -> OrderTotals:
    """
    Computes order aggregates. ``items`` may be OrderItem rows or bare line
    totals.

    Raises:
        PriceCalculationError: when an applied discount value is not a finite number.
    """
    currency = currency or settings.CURRENCY

    subtotal_minor = sum_minor(currency, (_line_total(item) for item in items))

    discount_minor = 0
    if discount_type in (PERCENTAGE, FIXED):
        if not is_finite_amount(discount_value):
            raise PriceCalculationError()
        if discount_type == PERCENTAGE:
            discount_minor = calculate_percentage(currency, from_minor(currency, subtotal_minor), discount_value)
        else:
            discount_minor = to_minor(currency, discount_value)
    discount_minor = max(0, discount_minor)

    delivery_minor = 0
    if order_type == DELIVERY:
        delivery_minor = max(0, safe_minor(currency, delivery_charge))

    total_minor = max(0, max(0, subtotal_minor - discount_minor) + delivery_minor)

    return OrderTotals(
        subtotal=from_minor(currency, subtotal_minor),
        discount_amount=from_minor(currency, discount_minor),
        delivery_charge=from_minor(currency, delivery_minor),
        total=from_minor(currency, total_minor),
    )


class OrderCalculator:
    """
    Calculator bound to an order instance.

    Usage:
        totals = OrderCalculator(order).calculate_totals()
        OrderCalculator(order).apply(totals)
    """

    def __init__(self, order, items: Optional[Iterable[Any]] = None):
        self.order = order
        self._items = items

    @property
    def items(self):
        if self._items is None:
            self._items = list(self.order.items.all())
        return self._items

    def calculate_totals(self) -> OrderTotals:
        return calculate_totals(
            self.items,
            self.order.discount_type,
            self.order.discount_value,
            self.order.order_type,
            self.order.delivery_charge,
        )

    def is_consistent(self) -> bool:
        """True when the stored aggregates match a fresh calculation."""
        totals = self.calculate_totals()
        return all(
            safe_minor(settings.CURRENCY, getattr(self.order, field)) == to_minor(settings.CURRENCY, value)
            for field, value in totals.as_dict().items()
        )

    def apply(self, totals: OrderTotals) -> None:
        for field, value in totals.as_dict().items():
            setattr(self.order, field, value)
