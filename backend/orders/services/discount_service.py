from decimal import Decimal
from django.db import transaction
import logging

from audit.models import AuditLog
from audit.services import AuditService, snapshot
from core_backend.exceptions import (
    DiscountPermissionError,
    OrderValidationError,
    PriceCalculationError,
)
from orders.models import Order
from payments.money import to_decimal
from .calculation_service import OrderCalculationService
from .notification_service import SyncNotificationService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class OrderDiscountService:
    """Order-level discounts. One discount per order; applying again replaces it."""

    @staticmethod
    def check_permission(user) -> None:
        if not getattr(user, "can_apply_discounts", False):
            raise DiscountPermissionError()

    @staticmethod
    def clean_discount(discount_type: str, discount_value) -> Decimal:
        if discount_type not in Order.DiscountType.values:
            raise OrderValidationError(f"Invalid discount type '{discount_type}'")
        if discount_value is None or discount_value == "":
            raise OrderValidationError("Discount value is required")
        value = to_decimal(discount_value)
        if not value.is_finite():
            raise PriceCalculationError()
        if value < 0:
            raise OrderValidationError("Discount value cannot be negative")
        if discount_type == Order.DiscountType.PERCENTAGE and value > 100:
            raise OrderValidationError("Percentage discount must be between 0 and 100")
        return value

    @staticmethod
    @transaction.atomic
    def apply_discount(order, user, discount_type: str, discount_value, reference: str = "") -> Order:
        OrderDiscountService.check_permission(user)
        value = OrderDiscountService.clean_discount(discount_type, discount_value)

        order = OrderService.lock_order(order)
        OrderService.ensure_open(order, "discount")
        OrderService.ensure_unpaid(order, "discount")
        before = snapshot(order)

        order.discount_type = discount_type
        order.discount_value = value
        order.discount_reference = reference or ""
        order.save(update_fields=["discount_type", "discount_value", "discount_reference", "updated_at"])
        order = OrderCalculationService.recalculate_order_totals(order)

        logger.info(
            "Applied %s discount %s to order %s (amount %s)",
            discount_type,
            value,
            order.order_number,
            order.discount_amount,
        )
        AuditService.record(
            actor=user,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=order.pk,
            description=f"Applied {discount_type} discount of {value.normalize():f}",
            before=before,
            after=snapshot(order),
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)
        return order

    @staticmethod
    @transaction.atomic
    def remove_discount(order, user) -> Order:
        order = OrderService.lock_order(order)
        OrderService.ensure_open(order, "discount")
        OrderService.ensure_unpaid(order, "discount")
        before = snapshot(order)

        order.discount_type = None
        order.discount_value = Decimal("0.00")
        order.discount_reference = ""
        order.save(update_fields=["discount_type", "discount_value", "discount_reference", "updated_at"])
        order = OrderCalculationService.recalculate_order_totals(order)

        AuditService.record(
            actor=user,
            action=AuditLog.Action.UPDATE,
            table_name="orders",
            record_id=order.pk,
            description="Removed discount",
            before=before,
            after=snapshot(order),
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)
        return order
