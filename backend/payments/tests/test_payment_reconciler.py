"""
Payment Reconciler Tests

Tests for settling order balances:
- Exact and over-tendered cash
- Rejected under-tenders and bad methods
- Zero-balance orders
- Mark-as-paid guards
- Paid orders never drop below their payments
"""
import pytest
from decimal import Decimal

from audit.models import AuditLog
from core_backend.exceptions import OrderStateError, OrderValidationError
from orders.models import Order, OrderItem
from orders.services import (
    OrderCalculationService,
    OrderDiscountService,
    OrderItemService,
    OrderService,
)
from payments.models import Payment
from payments.services import PaymentReconciler


@pytest.fixture
def priced_order(open_order, cashier, tikka):
    """Open take-away order holding 2x Chicken Tikka (600.00)."""
    OrderItemService.add_menu_item(open_order, cashier, tikka.id, quantity=2)
    open_order.refresh_from_db()
    return open_order


@pytest.mark.django_db
class TestPaymentSummary:
    def test_unpaid_order(self, priced_order):
        summary = PaymentReconciler.get_payment_summary(priced_order)

        assert summary["total"] == Decimal("600.00")
        assert summary["paid"] == Decimal("0.00")
        assert summary["outstanding"] == Decimal("600.00")
        assert summary["is_fully_paid"] is False

    def test_empty_order_is_fully_paid(self, open_order):
        summary = PaymentReconciler.get_payment_summary(open_order)

        assert summary["outstanding"] == Decimal("0.00")
        assert summary["is_fully_paid"] is True


@pytest.mark.django_db
class TestSettle:
    def test_exact_tender(self, priced_order, cashier):
        result = PaymentReconciler.settle(priced_order, "cash", cashier, tendered="600")

        assert result.payment is not None
        assert result.amount == Decimal("600.00")
        assert result.change_due == Decimal("0.00")
        assert result.payment.received_by == cashier
        assert PaymentReconciler.get_outstanding_minor(priced_order) == 0

    def test_over_tender_records_outstanding_only(self, priced_order, cashier):
        """Tendering 1000 for 600 records a 600 payment and 400 change."""
        result = PaymentReconciler.settle(priced_order, "cash", cashier, tendered=Decimal("1000"))

        assert result.payment.amount == Decimal("600.00")
        assert result.change_due == Decimal("400.00")
        assert Payment.objects.filter(order=priced_order).count() == 1

    def test_no_tender_pays_outstanding(self, priced_order, cashier):
        result = PaymentReconciler.settle(priced_order, "card", cashier, reference="AUTH-1")

        assert result.payment.method == Payment.PaymentMethod.CARD
        assert result.payment.reference == "AUTH-1"
        assert result.amount == Decimal("600.00")

    def test_under_tender_rejected(self, priced_order, cashier):
        with pytest.raises(OrderValidationError, match="less than the outstanding balance"):
            PaymentReconciler.settle(priced_order, "cash", cashier, tendered="599.99")

        assert not Payment.objects.filter(order=priced_order).exists()

    def test_non_finite_tender_rejected(self, priced_order, cashier):
        with pytest.raises(OrderValidationError, match="Invalid payment amount"):
            PaymentReconciler.settle(priced_order, "cash", cashier, tendered="NaN")

    def test_missing_method_rejected(self, priced_order, cashier):
        with pytest.raises(OrderValidationError, match="Payment method is required"):
            PaymentReconciler.settle(priced_order, None, cashier)

    def test_unknown_method_rejected(self, priced_order, cashier):
        with pytest.raises(OrderValidationError, match="Invalid payment method 'cheque'"):
            PaymentReconciler.settle(priced_order, "cheque", cashier)

    def test_zero_balance_writes_nothing(self, open_order, cashier):
        """An empty order needs no payment, and the method is not checked."""
        result = PaymentReconciler.settle(open_order, None, cashier)

        assert result.payment is None
        assert result.amount == Decimal("0.00")
        assert not Payment.objects.exists()

    def test_second_settle_is_noop(self, priced_order, cashier):
        PaymentReconciler.settle(priced_order, "cash", cashier)
        result = PaymentReconciler.settle(priced_order, "cash", cashier)

        assert result.payment is None
        assert Payment.objects.filter(order=priced_order).count() == 1

    def test_as_dict(self, priced_order, cashier):
        result = PaymentReconciler.settle(priced_order, "cash", cashier, tendered="700")

        data = result.as_dict()
        assert data["order_id"] == str(priced_order.pk)
        assert data["payment_id"] == str(result.payment.pk)
        assert data["amount"] == "600.00"
        assert data["change_due"] == "100.00"


@pytest.mark.django_db
class TestPaymentImmutability:
    def test_payment_cannot_be_edited(self, priced_order, cashier):
        payment = PaymentReconciler.settle(priced_order, "cash", cashier).payment
        payment.amount = Decimal("1.00")

        with pytest.raises(ValueError, match="cannot be modified"):
            payment.save()


@pytest.mark.django_db
class TestMarkPaid:
    def test_mark_paid_keeps_order_open(self, priced_order, cashier):
        result = PaymentReconciler.mark_paid(priced_order, "cash", cashier, amount="600")

        priced_order.refresh_from_db()
        assert priced_order.is_paid is True
        assert priced_order.status == Order.OrderStatus.OPEN
        assert result.payment.amount == Decimal("600.00")
        assert AuditLog.objects.filter(
            table_name="orders",
            record_id=str(priced_order.pk),
            description__startswith=f"Marked order {priced_order.order_number} as paid",
        ).exists()

    def test_mark_paid_twice_rejected(self, priced_order, cashier):
        PaymentReconciler.mark_paid(priced_order, "cash", cashier)

        with pytest.raises(OrderStateError, match="already marked as paid"):
            PaymentReconciler.mark_paid(priced_order, "cash", cashier)

    def test_mark_paid_on_cancelled_order_rejected(self, priced_order, cashier):
        OrderService.cancel_order(priced_order, cashier, "Customer left")

        with pytest.raises(OrderStateError, match="Cannot mark a cancelled order as paid"):
            PaymentReconciler.mark_paid(priced_order, "cash", cashier)

    def test_rejected_payment_leaves_order_unpaid(self, priced_order, cashier):
        with pytest.raises(OrderValidationError):
            PaymentReconciler.mark_paid(priced_order, "cash", cashier, amount="100")

        priced_order.refresh_from_db()
        assert priced_order.is_paid is False
        assert not Payment.objects.filter(order=priced_order).exists()

    def test_delegation_from_order_service(self, priced_order, cashier):
        result = OrderService.mark_order_as_paid(priced_order, cashier, "online", reference="TXN-9")

        assert result.payment.method == Payment.PaymentMethod.ONLINE
        priced_order.refresh_from_db()
        assert priced_order.is_paid is True


def _paid_sum(order):
    return sum((p.amount for p in Payment.objects.filter(order=order)), Decimal("0.00"))


@pytest.fixture
def paid_order(priced_order, cashier, soda):
    """2x Chicken Tikka and a Soda (700.00), marked paid in cash."""
    OrderItemService.add_menu_item(priced_order, cashier, soda.id)
    OrderService.mark_order_as_paid(priced_order, cashier, "cash")
    priced_order.refresh_from_db()
    return priced_order


@pytest.mark.django_db
class TestPaymentBound:
    """
    Once payments are taken against an open order its total is frozen, so
    the payments never add up to more than the order is worth.
    """

    def test_remove_item_rejected(self, paid_order, cashier, soda):
        soda_line = paid_order.items.get(menu_item=soda)

        with pytest.raises(OrderStateError, match="Cannot remove items from a paid order"):
            OrderItemService.remove_item(paid_order, soda_line.pk, cashier)

        paid_order.refresh_from_db()
        assert paid_order.total == Decimal("700.00")
        assert paid_order.items.count() == 2
        assert _paid_sum(paid_order) <= paid_order.total

    def test_lower_quantity_rejected(self, paid_order, cashier, tikka):
        tikka_line = paid_order.items.get(menu_item=tikka)

        with pytest.raises(OrderStateError, match="paid order"):
            OrderItemService.update_item(paid_order, tikka_line.pk, cashier, quantity=1)

        tikka_line.refresh_from_db()
        assert tikka_line.quantity == 2

    def test_notes_still_editable(self, paid_order, cashier, tikka):
        tikka_line = paid_order.items.get(menu_item=tikka)

        item = OrderItemService.update_item(paid_order, tikka_line.pk, cashier, notes="No onions")

        assert item.notes == "No onions"
        paid_order.refresh_from_db()
        assert paid_order.total == Decimal("700.00")

    def test_discount_rejected(self, paid_order, manager):
        with pytest.raises(OrderStateError, match="Cannot discount a paid order"):
            OrderDiscountService.apply_discount(paid_order, manager, "percentage", "50")

        paid_order.refresh_from_db()
        assert paid_order.discount_type is None
        assert paid_order.total == Decimal("700.00")
        assert _paid_sum(paid_order) == Decimal("700.00")

    def test_adding_items_rejected(self, paid_order, cashier, tikka):
        with pytest.raises(OrderStateError, match="Cannot add items to a paid order"):
            OrderItemService.add_menu_item(paid_order, cashier, tikka.id)

        order, settlement = OrderService.complete_order(paid_order, cashier)

        assert order.is_paid is True
        assert settlement is None
        assert PaymentReconciler.get_payment_summary(order)["outstanding"] == Decimal("0.00")

    def test_delivery_charge_frozen(self, delivery_order, cashier, tikka):
        OrderItemService.add_menu_item(delivery_order, cashier, tikka.id)
        OrderService.mark_order_as_paid(delivery_order, cashier, "cash")

        with pytest.raises(OrderStateError, match="delivery charge"):
            OrderService.update_details(delivery_order, cashier, delivery_charge="0")

        delivery_order.refresh_from_db()
        assert delivery_order.delivery_charge == Decimal("150.00")
        assert delivery_order.total == Decimal("450.00")

    def test_contact_details_still_editable(self, delivery_order, cashier, tikka):
        OrderItemService.add_menu_item(delivery_order, cashier, tikka.id)
        OrderService.mark_order_as_paid(delivery_order, cashier, "cash")

        order = OrderService.update_details(delivery_order, cashier, notes="Ring twice")

        assert order.notes == "Ring twice"

    def test_recalculation_refuses_total_below_payments(self, paid_order, soda):
        OrderItem.objects.filter(order=paid_order, menu_item=soda).delete()

        with pytest.raises(OrderStateError, match="below the amount already paid"):
            OrderCalculationService.recalculate_order_totals(paid_order)

        paid_order.refresh_from_db()
        assert paid_order.total == Decimal("700.00")
