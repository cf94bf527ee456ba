"""
Order discount tests: permissions, value checks, replacement and removal.
"""
import pytest
from decimal import Decimal

from audit.models import AuditLog
from core_backend.exceptions import (
    DiscountPermissionError,
    OrderValidationError,
    PriceCalculationError,
)
from orders.services import OrderDiscountService, OrderItemService


@pytest.fixture
def order_600(open_order, cashier, tikka):
    OrderItemService.add_menu_item(open_order, cashier, tikka.id, quantity=2)
    open_order.refresh_from_db()
    return open_order


@pytest.mark.django_db
class TestApplyDiscount:
    def test_percentage(self, order_600, manager):
        order = OrderDiscountService.apply_discount(order_600, manager, "percentage", "10", reference="Loyalty")

        assert order.discount_type == "percentage"
        assert order.discount_value == Decimal("10")
        assert order.discount_amount == Decimal("60.00")
        assert order.discount_reference == "Loyalty"
        assert order.total == Decimal("540.00")

    def test_fixed(self, order_600, manager):
        order = OrderDiscountService.apply_discount(order_600, manager, "fixed", Decimal("100"))

        assert order.discount_amount == Decimal("100.00")
        assert order.total == Decimal("500.00")

    def test_fixed_above_subtotal_totals_zero(self, order_600, manager):
        order = OrderDiscountService.apply_discount(order_600, manager, "fixed", "1000")

        assert order.total == Decimal("0.00")

    def test_second_discount_replaces_first(self, order_600, manager):
        OrderDiscountService.apply_discount(order_600, manager, "percentage", "50")
        order = OrderDiscountService.apply_discount(order_600, manager, "fixed", "60")

        assert order.discount_type == "fixed"
        assert order.total == Decimal("540.00")

    def test_discount_follows_item_changes(self, order_600, manager, cashier, soda):
        OrderDiscountService.apply_discount(order_600, manager, "percentage", "10")

        OrderItemService.add_menu_item(order_600, cashier, soda.id, quantity=4)

        order_600.refresh_from_db()
        assert order_600.subtotal == Decimal("1000.00")
        assert order_600.discount_amount == Decimal("100.00")
        assert order_600.total == Decimal("900.00")

    def test_audited(self, order_600, manager):
        OrderDiscountService.apply_discount(order_600, manager, "fixed", "12.50")

        log = AuditLog.objects.get(description="Applied fixed discount of 12.5")
        assert log.actor == manager
        assert log.before["discount_type"] is None
        assert log.after["discount_type"] == "fixed"


@pytest.mark.django_db
class TestDiscountValidation:
    def test_cashier_not_allowed(self, order_600, cashier):
        with pytest.raises(DiscountPermissionError):
            OrderDiscountService.apply_discount(order_600, cashier, "percentage", "10")

        order_600.refresh_from_db()
        assert order_600.discount_type is None

    def test_invalid_type(self, order_600, manager):
        with pytest.raises(OrderValidationError, match="Invalid discount type 'bogo'"):
            OrderDiscountService.apply_discount(order_600, manager, "bogo", "10")

    @pytest.mark.parametrize("value", [None, ""])
    def test_value_required(self, order_600, manager, value):
        with pytest.raises(OrderValidationError, match="Discount value is required"):
            OrderDiscountService.apply_discount(order_600, manager, "fixed", value)

    def test_negative(self, order_600, manager):
        with pytest.raises(OrderValidationError, match="cannot be negative"):
            OrderDiscountService.apply_discount(order_600, manager, "fixed", "-5")

    def test_percentage_above_100(self, order_600, manager):
        with pytest.raises(OrderValidationError, match="between 0 and 100"):
            OrderDiscountService.apply_discount(order_600, manager, "percentage", "100.01")

    def test_full_percentage_allowed(self, order_600, manager):
        order = OrderDiscountService.apply_discount(order_600, manager, "percentage", "100")

        assert order.total == Decimal("0.00")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "ten"])
    def test_non_finite(self, order_600, manager, value):
        with pytest.raises(PriceCalculationError):
            OrderDiscountService.apply_discount(order_600, manager, "fixed", value)


@pytest.mark.django_db
class TestRemoveDiscount:
    def test_remove_restores_total(self, order_600, manager):
        OrderDiscountService.apply_discount(order_600, manager, "percentage", "10")

        order = OrderDiscountService.remove_discount(order_600, manager)

        assert order.discount_type is None
        assert order.discount_value == Decimal("0.00")
        assert order.discount_amount == Decimal("0.00")
        assert order.total == Decimal("600.00")
        assert AuditLog.objects.filter(description="Removed discount").exists()
