import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Sum

from core_backend.exceptions import OrderStateError, OrderValidationError
from .models import Payment
from .money import from_minor, is_finite_amount, safe_minor, to_minor

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    """Outcome of settling an order's balance."""

    order: object
    payment: Optional[Payment]
    amount: Decimal
    change_due: Decimal

    def as_dict(self):
        return {
            "order_id": str(self.order.pk),
            "payment_id": str(self.payment.pk) if self.payment else None,
            "amount": str(self.amount),
            "change_due": str(self.change_due),
        }


class PaymentReconciler:
    """
    Records payments against orders.

    A payment row always carries exactly the outstanding balance, never the
    tendered amount, so the payments on an order can never add up to more
    than its total.
    """

    @staticmethod
    def get_paid_minor(order) -> int:
        paid = Payment.objects.filter(order=order).aggregate(paid=Sum("amount"))["paid"]
        return safe_minor(settings.CURRENCY, paid)

    @staticmethod
    def get_outstanding_minor(order) -> int:
        total_minor = safe_minor(settings.CURRENCY, order.total)
        return max(0, total_minor - PaymentReconciler.get_paid_minor(order))

    @staticmethod
    def get_payment_summary(order) -> dict:
        currency = settings.CURRENCY
        total_minor = safe_minor(currency, order.total)
        paid_minor = PaymentReconciler.get_paid_minor(order)
        outstanding_minor = max(0, total_minor - paid_minor)
        return {
            "total": from_minor(currency, total_minor),
            "paid": from_minor(currency, paid_minor),
            "outstanding": from_minor(currency, outstanding_minor),
            "is_fully_paid": outstanding_minor == 0,
        }

    @staticmethod
    def _clean_method(method) -> str:
        if not method:
            raise OrderValidationError("Payment method is required")
        if method not in Payment.PaymentMethod.values:
            raise OrderValidationError(f"Invalid payment method '{method}'")
        return method

    @staticmethod
    def settle(order, method, user, tendered=None, reference=None, notes="") -> SettlementResult:
        """
        Writes one payment for the outstanding balance. The caller is
        responsible for holding the order row lock and the transaction.

        Nothing is written when the balance is already zero. A tendered
        amount above the balance is returned as ``change_due``; one below it
        is rejected.
        """
        currency = settings.CURRENCY
        outstanding_minor = PaymentReconciler.get_outstanding_minor(order)
        zero = from_minor(currency, 0)

        if outstanding_minor == 0:
            logger.info("Order %s has no outstanding balance, no payment written", order.order_number)
            return SettlementResult(order=order, payment=None, amount=zero, change_due=zero)

        method = PaymentReconciler._clean_method(method)

        change_minor = 0
        if tendered is not None and tendered != "":
            if not is_finite_amount(tendered):
                raise OrderValidationError("Invalid payment amount")
            tendered_minor = to_minor(currency, tendered)
            if tendered_minor < outstanding_minor:
                raise OrderValidationError("Payment amount is less than the outstanding balance")
            change_minor = tendered_minor - outstanding_minor

        payment = Payment.objects.create(
            order=order,
            amount=from_minor(currency, outstanding_minor),
            method=method,
            reference=reference or "",
            notes=notes or "",
            received_by=user if getattr(user, "pk", None) else None,
        )
        logger.info(
            "Recorded %s payment of %s for order %s (change %s)",
            method,
            payment.amount,
            order.order_number,
            from_minor(currency, change_minor),
        )
        return SettlementResult(
            order=order,
            payment=payment,
            amount=payment.amount,
            change_due=from_minor(currency, change_minor),
        )

    @staticmethod
    @transaction.atomic
    def mark_paid(order, method, user, amount=None, reference=None) -> SettlementResult:
        """
        Flags an open order as paid, settling whatever is still owed.
        """
        from audit.models import AuditLog
        from audit.services import AuditService, snapshot
        from orders.models import Order
        from orders.services.notification_service import SyncNotificationService

        order = Order.objects.select_for_update().get(pk=order.pk)

        if order.status != Order.OrderStatus.OPEN:
            raise OrderStateError(f"Cannot mark a {order.status} order as paid")
        if order.is_paid:
            raise OrderStateError("Order is already marked as paid")

        before = snapshot(order)
        result = PaymentReconciler.settle(order, method, user, tendered=amount, reference=reference)

        order.is_paid = True
        order.save(update_fields=["is_paid", "updated_at"])
        result.order = order

        AuditService.record(
            actor=user,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=order.pk,
            description=f"Marked order {order.order_number} as paid ({method or 'no balance'})",
            before=before,
            after=snapshot(order),
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)
        return result
