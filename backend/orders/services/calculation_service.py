import logging
import time

from django.conf import settings
from django.db import transaction

from core_backend.exceptions import OrderStateError
from payments.money import safe_minor

logger = logging.getLogger(__name__)

TOTAL_FIELDS = ["subtotal", "discount_amount", "delivery_charge", "total"]


class OrderCalculationService:
    """Keeps an order's stored aggregates in step with its live item rows."""

    @staticmethod
    @transaction.atomic
    def recalculate_order_totals(order):
        """
        Re-reads the items with the order row locked and persists fresh
        aggregates. Running it twice in a row changes nothing.
        Refuses any total below what has already been paid.
        """
        from orders.calculators import OrderCalculator
        from orders.models import Order
        from payments.services import PaymentReconciler

        start_time = time.monotonic()

        original_order_reference = order
        order = Order.objects.select_for_update().get(pk=order.pk)
        items = list(order.items.all())

        calculator = OrderCalculator(order, items)
        calculator.apply(calculator.calculate_totals())
        if PaymentReconciler.get_paid_minor(order) > safe_minor(settings.CURRENCY, order.total):
            raise OrderStateError("Order total cannot fall below the amount already paid")
        order.save(update_fields=TOTAL_FIELDS + ["updated_at"])

        for field in TOTAL_FIELDS + ["updated_at"]:
            setattr(original_order_reference, field, getattr(order, field))

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "OrderCalculationService.recalculate_order_totals order_id=%s items=%d total=%s elapsed_ms=%.2f",
            order.id,
            len(items),
            order.total,
            elapsed_ms,
        )
        return order

    @staticmethod
    def needs_repair(order) -> bool:
        """Stored subtotal is zero or missing while the order has items."""
        subtotal_minor = safe_minor(settings.CURRENCY, order.subtotal)
        return subtotal_minor == 0 and order.items.exists()

    @staticmethod
    @transaction.atomic
    def repair_order_totals(order, actor=None) -> bool:
        """
        Recomputes aggregates for an order whose stored subtotal was lost.
        Items are left untouched. Returns True when a repair happened.
        """
        from audit.models import AuditLog
        from audit.services import AuditService, snapshot
        from orders.models import Order

        order = Order.objects.select_for_update().get(pk=order.pk)
        if not OrderCalculationService.needs_repair(order):
            return False

        before = snapshot(order)
        repaired = OrderCalculationService.recalculate_order_totals(order)
        logger.warning(
            "Repaired totals for order %s: subtotal=%s total=%s",
            repaired.order_number,
            repaired.subtotal,
            repaired.total,
        )
        AuditService.record(
            actor=actor,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=repaired.pk,
            description=f"Repaired totals for order {repaired.order_number}",
            before=before,
            after=snapshot(repaired),
        )
        return True
