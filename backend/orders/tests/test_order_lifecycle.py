"""
Order Lifecycle Tests

Tests the order state machine and its side effects:
- Creation rules per order type
- Complete / cancel transitions and their terminality
- Settlement at completion
- Customer bookkeeping
- A full take-away sale from first item to paid completion
"""
import pytest
from decimal import Decimal

from audit.models import AuditLog
from core_backend.exceptions import (
    OrderStateError,
    OrderValidationError,
    ReferentialError,
)
from customers.models import Customer
from orders.models import Order
from orders.services import OrderDiscountService, OrderItemService, OrderService
from payments.models import Payment
from payments.services import PaymentReconciler
from settings.models import GlobalSettings


@pytest.mark.django_db
class TestCreateOrder:
    def test_new_order_is_open_and_empty(self, open_order):
        assert open_order.status == Order.OrderStatus.OPEN
        assert open_order.is_paid is False
        assert open_order.order_number.startswith("ORD-")
        assert open_order.subtotal == Decimal("0.00")
        assert open_order.total == Decimal("0.00")
        assert open_order.delivery_status is None
        assert open_order.items.count() == 0

    def test_order_numbers_increase(self, register_session, cashier):
        first = OrderService.create_order("dine_in", register_session, cashier)
        second = OrderService.create_order("dine_in", register_session, cashier)

        assert first.order_number != second.order_number
        assert int(second.order_number[4:]) == int(first.order_number[4:]) + 1

    def test_dine_in_with_table_and_waiter(self, register_session, cashier, dining_table, waiter):
        order = OrderService.create_order(
            "dine_in", register_session, cashier, table=dining_table.pk, waiter=waiter.pk
        )

        assert order.table == dining_table
        assert order.waiter == waiter

    def test_invalid_order_type(self, register_session, cashier):
        with pytest.raises(OrderValidationError, match="Invalid order type 'drive_thru'"):
            OrderService.create_order("drive_thru", register_session, cashier)

    def test_missing_register_session(self, cashier):
        with pytest.raises(OrderValidationError, match="Register session is required"):
            OrderService.create_order("take_away", None, cashier)

    def test_closed_register_session(self, register_session, cashier):
        register_session.close()

        with pytest.raises(OrderStateError, match="Register session is closed"):
            OrderService.create_order("take_away", register_session, cashier)

    def test_unknown_table(self, register_session, cashier):
        with pytest.raises(ReferentialError, match="Table not found"):
            OrderService.create_order("dine_in", register_session, cashier, table=9999)

    def test_delivery_requires_phone(self, register_session, cashier):
        with pytest.raises(OrderValidationError, match="Customer phone is required"):
            OrderService.create_order("delivery", register_session, cashier, customer_name="Walk-in")

    def test_delivery_order(self, delivery_order):
        assert delivery_order.delivery_status == Order.DeliveryStatus.PENDING
        assert delivery_order.delivery_charge == Decimal("150.00")
        assert delivery_order.total == Decimal("150.00")

    def test_delivery_charge_defaults_from_settings(self, register_session, cashier):
        settings_obj = GlobalSettings.load()
        settings_obj.default_delivery_charge = Decimal("99.00")
        settings_obj.save()

        order = OrderService.create_order(
            "delivery", register_session, cashier, customer_phone="03001234567"
        )

        assert order.delivery_charge == Decimal("99.00")
        assert order.total == Decimal("99.00")

    def test_delivery_charge_ignored_for_take_away(self, register_session, cashier):
        order = OrderService.create_order(
            "take_away", register_session, cashier, delivery_charge=Decimal("150")
        )

        assert order.delivery_charge == Decimal("0.00")

    def test_negative_delivery_charge_clamped(self, register_session, cashier):
        order = OrderService.create_order(
            "delivery", register_session, cashier, customer_phone="0300", delivery_charge="-50"
        )

        assert order.delivery_charge == Decimal("0.00")

    def test_customer_details_fill_blanks(self, register_session, cashier, customer):
        order = OrderService.create_order("delivery", register_session, cashier, customer=customer.pk)

        assert order.customer_name == "Ayesha Khan"
        assert order.customer_phone == "03005556666"
        assert order.delivery_address == "House 12, Street 4"

    def test_creation_is_audited(self, open_order):
        log = AuditLog.objects.get(table_name="orders", record_id=str(open_order.pk))

        assert log.action == AuditLog.Action.CREATE
        assert log.description == f"Created take_away order {open_order.order_number}"


@pytest.mark.django_db
class TestUpdateDetails:
    def test_updates_contact_fields(self, open_order, cashier):
        order = OrderService.update_details(open_order, cashier, customer_name="  Sara ", notes="No onions")

        assert order.customer_name == "Sara"
        assert order.notes == "No onions"

    def test_delivery_charge_change_recalculates(self, delivery_order, cashier):
        order = OrderService.update_details(delivery_order, cashier, delivery_charge="200")

        assert order.delivery_charge == Decimal("200.00")
        assert order.total == Decimal("200.00")

    def test_delivery_phone_cannot_be_cleared(self, delivery_order, cashier):
        with pytest.raises(OrderValidationError, match="Customer phone is required"):
            OrderService.update_details(delivery_order, cashier, customer_phone="")

    def test_no_changes_is_noop(self, open_order, cashier):
        OrderService.update_details(open_order, cashier, unknown="x")

        assert not AuditLog.objects.filter(description__startswith="Updated details").exists()


@pytest.mark.django_db
class TestDeliveryStatus:
    def test_update(self, delivery_order, cashier):
        order = OrderService.update_delivery_status(delivery_order, "out_for_delivery", cashier)

        assert order.delivery_status == Order.DeliveryStatus.OUT_FOR_DELIVERY

    def test_invalid_status(self, delivery_order, cashier):
        with pytest.raises(OrderValidationError, match="Invalid delivery status"):
            OrderService.update_delivery_status(delivery_order, "lost", cashier)

    def test_not_a_delivery_order(self, open_order, cashier):
        with pytest.raises(OrderStateError, match="Can only update delivery status for delivery orders"):
            OrderService.update_delivery_status(open_order, "ready", cashier)

    def test_any_order_of_values(self, delivery_order, cashier):
        OrderService.update_delivery_status(delivery_order, "delivered", cashier)

        order = OrderService.update_delivery_status(delivery_order, "preparing", cashier)

        assert order.delivery_status == Order.DeliveryStatus.PREPARING

    @pytest.mark.parametrize("finish", ["complete", "cancel"])
    def test_editable_after_order_closes(self, delivery_order, cashier, finish):
        if finish == "complete":
            OrderService.complete_order(delivery_order, cashier)
        else:
            OrderService.cancel_order(delivery_order, cashier, "Address not found")

        order = OrderService.update_delivery_status(delivery_order, "delivered", cashier)

        assert order.delivery_status == Order.DeliveryStatus.DELIVERED
        assert order.status != Order.OrderStatus.OPEN


@pytest.mark.django_db
class TestCompleteOrder:
    def test_complete_unpaid(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id)

        order, settlement = OrderService.complete_order(open_order, cashier)

        assert order.status == Order.OrderStatus.COMPLETED
        assert order.is_paid is False
        assert order.completed_at is not None
        assert order.completed_by == cashier
        assert settlement is None
        assert AuditLog.objects.filter(
            description=f"Completed order {order.order_number}, paid: false"
        ).exists()

    def test_complete_paid_settles_balance(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id, quantity=2)

        order, settlement = OrderService.complete_order(
            open_order, cashier, is_paid=True, payment_method="cash", payment_amount="1000"
        )

        assert order.is_paid is True
        assert settlement.amount == Decimal("600.00")
        assert settlement.change_due == Decimal("400.00")
        assert PaymentReconciler.get_outstanding_minor(order) == 0

    def test_rejected_payment_keeps_order_open(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id)

        with pytest.raises(OrderValidationError, match="less than the outstanding balance"):
            OrderService.complete_order(
                open_order, cashier, is_paid=True, payment_method="cash", payment_amount="10"
            )

        open_order.refresh_from_db()
        assert open_order.status == Order.OrderStatus.OPEN
        assert not Payment.objects.exists()

    def test_previously_marked_paid_stays_paid(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id)
        OrderService.mark_order_as_paid(open_order, cashier, "card")

        order, _ = OrderService.complete_order(open_order, cashier)

        assert order.is_paid is True

    def test_completion_updates_customer(self, register_session, cashier, customer, tikka):
        order = OrderService.create_order("take_away", register_session, cashier, customer=customer)
        OrderItemService.add_menu_item(order, cashier, tikka.id)

        OrderService.complete_order(order, cashier)

        customer.refresh_from_db()
        assert customer.total_orders == 1
        assert customer.last_order_at is not None

    def test_cannot_complete_twice(self, open_order, cashier):
        OrderService.complete_order(open_order, cashier)

        with pytest.raises(OrderStateError, match="from completed to completed"):
            OrderService.complete_order(open_order, cashier)


@pytest.mark.django_db
class TestCancelOrder:
    def test_cancel_keeps_financials(self, open_order, cashier, tikka):
        OrderItemService.add_menu_item(open_order, cashier, tikka.id, quantity=2)

        order = OrderService.cancel_order(open_order, cashier, "Customer left")

        assert order.status == Order.OrderStatus.CANCELLED
        assert order.cancellation_reason == "Customer left"
        assert order.total == Decimal("600.00")
        assert order.items.count() == 1
        assert AuditLog.objects.filter(
            description=f"Cancelled order {order.order_number}: Customer left"
        ).exists()

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_reason_required(self, open_order, cashier, reason):
        with pytest.raises(OrderValidationError, match="Cancellation reason is required"):
            OrderService.cancel_order(open_order, cashier, reason)

    def test_cannot_cancel_completed(self, open_order, cashier):
        OrderService.complete_order(open_order, cashier)

        with pytest.raises(OrderStateError):
            OrderService.cancel_order(open_order, cashier, "Too late")


@pytest.mark.django_db
class TestTerminalOrders:
    """Completed and cancelled orders reject every mutation."""

    @pytest.fixture(params=["completed", "cancelled"])
    def closed_order(self, request, open_order, cashier, tikka):
        item = OrderItemService.add_menu_item(open_order, cashier, tikka.id)
        if request.param == "completed":
            OrderService.complete_order(open_order, cashier)
        else:
            OrderService.cancel_order(open_order, cashier, "Mistake")
        open_order.refresh_from_db()
        return open_order, item

    def test_add_item(self, closed_order, cashier, tikka):
        order, _ = closed_order
        with pytest.raises(OrderStateError, match=f"Cannot add items to a {order.status} order"):
            OrderItemService.add_menu_item(order, cashier, tikka.id)

    def test_update_item(self, closed_order, cashier):
        order, item = closed_order
        with pytest.raises(OrderStateError):
            OrderItemService.update_item(order, item.pk, cashier, quantity=3)

    def test_remove_item(self, closed_order, cashier):
        order, item = closed_order
        with pytest.raises(OrderStateError):
            OrderItemService.remove_item(order, item.pk, cashier)

    def test_discount(self, closed_order, manager):
        order, _ = closed_order
        with pytest.raises(OrderStateError):
            OrderDiscountService.apply_discount(order, manager, "fixed", "10")

    def test_update_details(self, closed_order, cashier):
        order, _ = closed_order
        with pytest.raises(OrderStateError):
            OrderService.update_details(order, cashier, notes="late note")

    def test_status_never_changes(self, closed_order, cashier):
        order, _ = closed_order
        status = order.status
        with pytest.raises(OrderStateError):
            OrderService.complete_order(order, cashier)
        with pytest.raises(OrderStateError):
            OrderService.cancel_order(order, cashier, "again")

        order.refresh_from_db()
        assert order.status == status


@pytest.mark.django_db
class TestTakeAwaySale:
    def test_full_sale(self, open_order, cashier, manager, tikka):
        """
        2x Chicken Tikka (600), 10% off (540), paid in cash, completed.
        """
        OrderItemService.add_menu_item(open_order, cashier, tikka.id, quantity=2)
        open_order.refresh_from_db()
        assert open_order.subtotal == Decimal("600.00")
        assert open_order.total == Decimal("600.00")

        order = OrderDiscountService.apply_discount(open_order, manager, "percentage", "10")
        assert order.discount_amount == Decimal("60.00")
        assert order.total == Decimal("540.00")

        order, settlement = OrderService.complete_order(
            order, cashier, is_paid=True, payment_method="cash", payment_amount="540"
        )

        assert order.status == Order.OrderStatus.COMPLETED
        assert order.is_paid is True
        payment = Payment.objects.get(order=order)
        assert payment.amount == Decimal("540.00")
        assert payment.method == Payment.PaymentMethod.CASH
        assert settlement.change_due == Decimal("0.00")

        descriptions = list(
            AuditLog.objects.filter(table_name="orders", record_id=str(order.pk))
            .order_by("id")
            .values_list("description", flat=True)
        )
        assert descriptions == [
            f"Created take_away order {order.order_number}",
            "Applied percentage discount of 10",
            f"Completed order {order.order_number}, paid: true",
        ]
