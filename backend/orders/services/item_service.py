from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
import logging

from audit.models import AuditLog
from audit.services import AuditService, snapshot
from core_backend.exceptions import OrderValidationError, ReferentialError
from orders.models import Order, OrderItem
from products.selections import selections_to_json
from products.services import CatalogResolver, VariantPricingService
from .calculation_service import OrderCalculationService
from .notification_service import SyncNotificationService
from .order_service import OrderService

logger = logging.getLogger(__name__)


class OrderItemService:
    """Service for managing order items - adding, updating, removing."""

    @staticmethod
    def clean_quantity(quantity) -> int:
        if isinstance(quantity, bool):
            raise OrderValidationError("Quantity must be a whole number")
        try:
            value = int(str(quantity).strip())
        except (TypeError, ValueError):
            raise OrderValidationError("Quantity must be a whole number")
        if value < 1:
            raise OrderValidationError("Quantity must be at least 1")
        return value

    @staticmethod
    def _lock_item(order: Order, item_id) -> OrderItem:
        try:
            return OrderItem.objects.select_for_update().get(pk=item_id, order=order)
        except (OrderItem.DoesNotExist, DjangoValidationError, ValueError):
            raise ReferentialError("order_items", item_id)

    @staticmethod
    def _finish(order: Order, record_id, user, action, description, before=None, after=None):
        OrderCalculationService.recalculate_order_totals(order)
        AuditService.record(
            actor=user,
            action=action,
            table_name="order_items",
            record_id=record_id,
            description=description,
            before=before,
            after=after,
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)

    # ------------------------------------------------------------------
    # Add
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def add_menu_item(order, user, menu_item_id, quantity=1, selected_variants=None, notes="") -> OrderItem:
        """
        Prices a menu item from the catalog and adds it to an open order.
        Variant validation happens before anything is written.
        """
        order = OrderService.lock_order(order)
        OrderService.ensure_open(order, "add items to")
        OrderService.ensure_unpaid(order, "add items to")
        quantity = OrderItemService.clean_quantity(quantity)

        menu_item = CatalogResolver.get_menu_item(menu_item_id)
        unit_price, selections = VariantPricingService.price_menu_item(menu_item, selected_variants)

        item = OrderItem.objects.create(
            order=order,
            item_type=OrderItem.ItemType.MENU_ITEM,
            menu_item=menu_item,
            name=menu_item.name,
            quantity=quantity,
            unit_price=unit_price,
            notes=notes or "",
            selected_variants=selections_to_json(selections),
        )
        logger.debug("Added menu item %s x%d to order %s", menu_item.id, quantity, order.order_number)
        OrderItemService._finish(
            order,
            item.pk,
            user,
            AuditLog.Action.CREATE,
            f"Added {quantity}x {menu_item.name} to order",
            after=snapshot(item),
        )
        return item

    @staticmethod
    @transaction.atomic
    def add_deal(order, user, deal_id, quantity=1, selected_variants=None, deal_breakdown=None, notes="") -> OrderItem:
        order = OrderService.lock_order(order)
        OrderService.ensure_open(order, "add items to")
        OrderService.ensure_unpaid(order, "add items to")
        quantity = OrderItemService.clean_quantity(quantity)

        deal = CatalogResolver.get_deal(deal_id)
        unit_price, selections, breakdown = VariantPricingService.price_deal(
            deal, selected_variants, deal_breakdown
        )

        item = OrderItem.objects.create(
            order=order,
            item_type=OrderItem.ItemType.DEAL,
            deal=deal,
            name=deal.name,
            quantity=quantity,
            unit_price=unit_price,
            notes=notes or "",
            selected_variants=selections_to_json(selections),
            deal_breakdown=breakdown,
        )
        OrderItemService._finish(
            order,
            item.pk,
            user,
            AuditLog.Action.CREATE,
            f"Added {quantity}x {deal.name} deal to order",
            after=snapshot(item),
        )
        return item

    @staticmethod
    def add_item(order, user, item_type=OrderItem.ItemType.MENU_ITEM, menu_item_id=None, deal_id=None, **kwargs) -> OrderItem:
        if item_type == OrderItem.ItemType.MENU_ITEM:
            if not menu_item_id:
                raise OrderValidationError("menu_item_id is required")
            kwargs.pop("deal_breakdown", None)
            return OrderItemService.add_menu_item(order, user, menu_item_id, **kwargs)
        if item_type == OrderItem.ItemType.DEAL:
            if not deal_id:
                raise OrderValidationError("deal_id is required")
            return OrderItemService.add_deal(order, user, deal_id, **kwargs)
        raise OrderValidationError(f"Invalid item type '{item_type}'")

    # ------------------------------------------------------------------
    # Update / remove
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def update_item(order, item_id, user, **changes) -> OrderItem:
        """
        Accepts ``quantity``, ``notes`` and, for menu item lines only,
        ``selected_variants``. New variants are re-validated and re-priced
        against the catalog.
        """
        order = OrderService.lock_order(order)
        OrderService.ensure_open(order, "modify items in")
        if "quantity" in changes or "selected_variants" in changes:
            OrderService.ensure_unpaid(order, "reprice items in")
        item = OrderItemService._lock_item(order, item_id)
        before = snapshot(item)
        update_fields = []
        descriptions = []

        if "selected_variants" in changes:
            if item.item_type != OrderItem.ItemType.MENU_ITEM:
                raise OrderValidationError("Deal items cannot change variants")
            menu_item = CatalogResolver.get_menu_item(item.menu_item_id)
            unit_price, selections = VariantPricingService.price_menu_item(
                menu_item, changes["selected_variants"]
            )
            item.unit_price = unit_price
            item.selected_variants = selections_to_json(selections)
            update_fields += ["unit_price", "selected_variants"]
            descriptions.append("Updated item variants")

        if "quantity" in changes:
            item.quantity = OrderItemService.clean_quantity(changes["quantity"])
            update_fields.append("quantity")
            descriptions.append(f"Updated quantity to {item.quantity}")

        if "notes" in changes:
            item.notes = changes["notes"] or ""
            update_fields.append("notes")
            if not descriptions:
                descriptions.append("Updated item notes")

        if not update_fields:
            return item

        item.save(update_fields=update_fields)
        OrderItemService._finish(
            order,
            item.pk,
            user,
            AuditLog.Action.UPDATE,
            "; ".join(descriptions),
            before=before,
            after=snapshot(item),
        )
        return item

    @staticmethod
    @transaction.atomic
    def remove_item(order, item_id, user) -> None:
        order = OrderService.lock_order(order)
        OrderService.ensure_open(order, "remove items from")
        OrderService.ensure_unpaid(order, "remove items from")
        item = OrderItemService._lock_item(order, item_id)
        before = snapshot(item)
        item_pk = item.pk
        item.delete()
        OrderItemService._finish(
            order,
            item_pk,
            user,
            AuditLog.Action.DELETE,
            f"Removed {item.name} from order",
            before=before,
        )
