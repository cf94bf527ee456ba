from decimal import Decimal
import logging

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from audit.models import AuditLog
from audit.services import AuditService, snapshot
from core_backend.exceptions import OrderStateError, OrderValidationError, ReferentialError
from orders.models import Order
from payments.money import is_finite_amount, quantize
from .calculation_service import OrderCalculationService
from .notification_service import SyncNotificationService
from .reference_service import ReferenceService

logger = logging.getLogger(__name__)


class OrderService:
    """Core service for order lifecycle management - creating, updating, completing orders."""

    # Valid status transitions for order state machine
    VALID_STATUS_TRANSITIONS = {
        Order.OrderStatus.OPEN: [
            Order.OrderStatus.COMPLETED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.COMPLETED: [],
        Order.OrderStatus.CANCELLED: [],
    }

    DETAIL_FIELDS = (
        "customer_name",
        "customer_phone",
        "delivery_address",
        "notes",
    )

    RELATED_FIELDS = {
        "customer": "customers",
        "waiter": "waiters",
        "rider": "riders",
        "table": "tables",
    }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def lock_order(order) -> Order:
        """Re-reads the order under a row lock. Must run inside a transaction."""
        order_id = order.pk if hasattr(order, "pk") else order
        try:
            return Order.objects.select_for_update().get(pk=order_id)
        except (Order.DoesNotExist, DjangoValidationError, ValueError):
            raise ReferentialError("orders", order_id)

    @staticmethod
    def ensure_open(order, action: str = "modify") -> None:
        if order.status != Order.OrderStatus.OPEN:
            raise OrderStateError(f"Cannot {action} a {order.status} order")

    @staticmethod
    def ensure_unpaid(order, action: str = "modify") -> None:
        """A paid order keeps the total its payments were taken against."""
        if order.is_paid:
            raise OrderStateError(f"Cannot {action} a paid order")

    @classmethod
    def _validate_transition(cls, current_status: str, target_status: str) -> None:
        if target_status not in cls.VALID_STATUS_TRANSITIONS.get(current_status, []):
            raise OrderStateError(
                f"Invalid status transition from {current_status} to {target_status}"
            )

    @staticmethod
    def clean_delivery_charge(order_type: str, delivery_charge) -> Decimal:
        """
        Delivery charges only apply to delivery orders and are never negative.
        Unusable values count as zero rather than failing the request.
        """
        if order_type != Order.OrderType.DELIVERY:
            return Decimal("0.00")
        if delivery_charge is None or not is_finite_amount(delivery_charge):
            return Decimal("0.00")
        return max(Decimal("0.00"), quantize(settings.CURRENCY, delivery_charge))

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def create_order(
        order_type: str,
        register_session,
        created_by,
        table=None,
        waiter=None,
        customer=None,
        customer_name: str = "",
        customer_phone: str = "",
        delivery_address: str = "",
        delivery_charge=None,
        rider=None,
        notes: str = "",
    ) -> Order:
        """
        Creates a new, empty open order with zero totals.

        Raises:
            OrderValidationError: unknown order type, or a delivery order without a phone
            OrderStateError: the register session is closed
            ReferentialError: a referenced record does not exist
        """
        from settings.config import app_settings

        if order_type not in Order.OrderType.values:
            raise OrderValidationError(f"Invalid order type '{order_type}'")

        session = ReferenceService.optional("register_sessions", register_session)
        if session is None:
            raise OrderValidationError("Register session is required")
        if session.status != session.Status.OPEN:
            raise OrderStateError("Register session is closed")

        user = ReferenceService.optional("users", created_by)
        if user is None:
            raise OrderValidationError("Created by user is required")

        customer = ReferenceService.optional("customers", customer)
        if customer is not None:
            customer_name = customer_name or customer.name
            customer_phone = customer_phone or customer.phone
            delivery_address = delivery_address or customer.address

        is_delivery = order_type == Order.OrderType.DELIVERY
        customer_phone = (customer_phone or "").strip()
        if is_delivery and not customer_phone:
            raise OrderValidationError("Customer phone is required for delivery orders")

        if is_delivery and delivery_charge is None:
            delivery_charge = app_settings.default_delivery_charge

        order = Order.objects.create(
            order_type=order_type,
            register_session=session,
            created_by=user,
            table=ReferenceService.optional("tables", table),
            waiter=ReferenceService.optional("waiters", waiter),
            rider=ReferenceService.optional("riders", rider),
            customer=customer,
            customer_name=(customer_name or "").strip(),
            customer_phone=customer_phone,
            delivery_address=delivery_address or "",
            notes=notes or "",
            delivery_status=Order.DeliveryStatus.PENDING if is_delivery else None,
            delivery_charge=OrderService.clean_delivery_charge(order_type, delivery_charge),
        )
        if order.delivery_charge:
            OrderCalculationService.recalculate_order_totals(order)

        logger.info("Created %s order %s", order.order_type, order.order_number)
        AuditService.record(
            actor=user,
            action=AuditLog.Action.CREATE,
            table_name="orders",
            record_id=order.pk,
            description=f"Created {order.order_type} order {order.order_number}",
            after=snapshot(order),
        )
        SyncNotificationService.broadcast_on_commit("orders", "create", order.pk)
        return order

    # ------------------------------------------------------------------
    # Details and delivery status
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def update_details(order, user, **changes) -> Order:
        """
        Edits contact details, staff and table links and the delivery charge
        of an open order. Unknown keys are ignored.
        """
        order = OrderService.lock_order(order)
        OrderService.ensure_open(order, "update")
        if "delivery_charge" in changes:
            OrderService.ensure_unpaid(order, "change the delivery charge of")
        before = snapshot(order)
        update_fields = []

        for field in OrderService.DETAIL_FIELDS:
            if field in changes:
                setattr(order, field, (changes[field] or "").strip())
                update_fields.append(field)

        for field, table in OrderService.RELATED_FIELDS.items():
            if field in changes:
                setattr(order, field, ReferenceService.optional(table, changes[field]))
                update_fields.append(field)

        if order.is_delivery and not order.customer_phone:
            raise OrderValidationError("Customer phone is required for delivery orders")

        recalculate = False
        if "delivery_charge" in changes:
            order.delivery_charge = OrderService.clean_delivery_charge(
                order.order_type, changes["delivery_charge"]
            )
            update_fields.append("delivery_charge")
            recalculate = True

        if not update_fields:
            return order

        order.save(update_fields=update_fields + ["updated_at"])
        if recalculate:
            OrderCalculationService.recalculate_order_totals(order)

        AuditService.record(
            actor=user,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=order.pk,
            description=f"Updated details for order {order.order_number}",
            before=before,
            after=snapshot(order),
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)
        return order

    @staticmethod
    @transaction.atomic
    def update_delivery_status(order, delivery_status: str, user) -> Order:
        """
        Sets the delivery sub-status. Any of the five values may follow any
        other, and the sub-status stays editable after the order is completed
        or cancelled.
        """
        order = OrderService.lock_order(order)
        if not order.is_delivery:
            raise OrderStateError("Can only update delivery status for delivery orders")
        if delivery_status not in Order.DeliveryStatus.values:
            raise OrderValidationError(f"Invalid delivery status '{delivery_status}'")

        previous = order.delivery_status
        order.delivery_status = delivery_status
        order.save(update_fields=["delivery_status", "updated_at"])

        AuditService.record(
            actor=user,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=order.pk,
            description=f"Updated delivery status to {delivery_status} for order {order.order_number}",
            before={"delivery_status": previous},
            after={"delivery_status": delivery_status},
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)
        return order

    # ------------------------------------------------------------------
    # Terminal transitions
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def complete_order(
        order,
        user,
        is_paid: bool = False,
        payment_method=None,
        payment_amount=None,
        reference=None,
    ):
        """
        Completes an open order. When ``is_paid`` is set the outstanding
        balance is settled in the same transaction, so a rejected payment
        leaves the order open.

        Returns a (order, SettlementResult or None) tuple.
        """
        from customers.services import CustomerService
        from payments.services import PaymentReconciler

        order = OrderService.lock_order(order)
        OrderService._validate_transition(order.status, Order.OrderStatus.COMPLETED)
        before = snapshot(order)

        settlement = None
        if is_paid:
            settlement = PaymentReconciler.settle(
                order, payment_method, user, tendered=payment_amount, reference=reference
            )

        now = timezone.now()
        order.status = Order.OrderStatus.COMPLETED
        order.is_paid = bool(is_paid) or order.is_paid
        order.completed_at = now
        order.completed_by = user if getattr(user, "pk", None) else None
        order.save(
            update_fields=["status", "is_paid", "completed_at", "completed_by", "updated_at"]
        )

        if order.customer_id:
            CustomerService.record_completed_order(order.customer_id, completed_at=now)

        logger.info("Completed order %s paid=%s", order.order_number, order.is_paid)
        AuditService.record(
            actor=user,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=order.pk,
            description=f"Completed order {order.order_number}, paid: {str(order.is_paid).lower()}",
            before=before,
            after=snapshot(order),
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)
        return order, settlement

    @staticmethod
    @transaction.atomic
    def cancel_order(order, user, reason: str) -> Order:
        """Cancels an open order. Financial fields are left exactly as they were."""
        reason = reason if reason is not None else ""
        if not reason.strip():
            raise OrderValidationError("Cancellation reason is required")

        order = OrderService.lock_order(order)
        OrderService._validate_transition(order.status, Order.OrderStatus.CANCELLED)
        before = snapshot(order)

        order.status = Order.OrderStatus.CANCELLED
        order.cancellation_reason = reason
        order.save(update_fields=["status", "cancellation_reason", "updated_at"])

        logger.info("Cancelled order %s", order.order_number)
        AuditService.record(
            actor=user,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=order.pk,
            description=f"Cancelled order {order.order_number}: {reason}",
            before=before,
            after=snapshot(order),
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)
        return order

    @staticmethod
    def mark_order_as_paid(order, user, payment_method, payment_amount=None, reference=None):
        from payments.services import PaymentReconciler

        return PaymentReconciler.mark_paid(
            order, payment_method, user, amount=payment_amount, reference=reference
        )
