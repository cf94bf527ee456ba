"""
Repair of lost order totals and the order number sequence.
"""
import pytest
from decimal import Decimal
from io import StringIO

from django.core.management import call_command

from audit.models import AuditLog
from orders.models import Order, OrderSequence
from orders.services import OrderCalculationService, OrderItemService


@pytest.fixture
def broken_order(open_order, cashier, tikka):
    """Order with 2x Chicken Tikka whose stored aggregates were wiped."""
    OrderItemService.add_menu_item(open_order, cashier, tikka.id, quantity=2)
    Order.objects.filter(pk=open_order.pk).update(subtotal=Decimal("0.00"), total=Decimal("0.00"))
    open_order.refresh_from_db()
    return open_order


@pytest.mark.django_db
class TestRecalculate:
    def test_idempotent(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id, quantity=2)

        first = OrderCalculationService.recalculate_order_totals(open_order)
        second = OrderCalculationService.recalculate_order_totals(open_order)

        assert (first.subtotal, first.total) == (second.subtotal, second.total)
        assert second.total == Decimal("600.00")

    def test_updates_passed_instance(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id)
        stale = Order.objects.get(pk=open_order.pk)
        Order.objects.filter(pk=stale.pk).update(total=Decimal("1.00"))

        OrderCalculationService.recalculate_order_totals(stale)

        assert stale.total == Decimal("300.00")


@pytest.mark.django_db
class TestRepair:
    def test_needs_repair(self, broken_order):
        assert OrderCalculationService.needs_repair(broken_order)

    def test_empty_order_needs_no_repair(self, open_order):
        assert not OrderCalculationService.needs_repair(open_order)

    def test_repair_restores_totals(self, broken_order, manager):
        items_before = list(broken_order.items.values_list("pk", "total_price"))

        assert OrderCalculationService.repair_order_totals(broken_order, actor=manager) is True

        broken_order.refresh_from_db()
        assert broken_order.subtotal == Decimal("600.00")
        assert broken_order.total == Decimal("600.00")
        assert list(broken_order.items.values_list("pk", "total_price")) == items_before
        assert AuditLog.objects.filter(
            description=f"Repaired totals for order {broken_order.order_number}", actor=manager
        ).exists()

    def test_healthy_order_untouched(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id)

        assert OrderCalculationService.repair_order_totals(open_order) is False
        assert not AuditLog.objects.filter(description__startswith="Repaired").exists()


@pytest.mark.django_db
class TestRepairCommand:
    def test_dry_run_changes_nothing(self, broken_order):
        out = StringIO()

        call_command("repair_order_totals", "--dry-run", stdout=out)

        broken_order.refresh_from_db()
        assert broken_order.subtotal == Decimal("0.00")
        assert broken_order.order_number in out.getvalue()

    def test_repairs_orders(self, broken_order):
        call_command("repair_order_totals", stdout=StringIO())

        broken_order.refresh_from_db()
        assert broken_order.total == Decimal("600.00")


@pytest.mark.django_db
class TestOrderSequence:
    def test_next_value_increments(self):
        assert OrderSequence.next_value("test") == 1
        assert OrderSequence.next_value("test") == 2
        assert OrderSequence.next_value("other") == 1

    def test_number_format(self):
        assert Order.format_order_number(42) == "ORD-00042"

    def test_existing_number_is_kept(self, open_order):
        number = open_order.order_number
        open_order.notes = "edited"
        open_order.save()

        open_order.refresh_from_db()
        assert open_order.order_number == number
