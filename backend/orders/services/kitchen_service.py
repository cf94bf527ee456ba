from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from django.db import transaction
from django.utils import timezone
import logging

from audit.models import AuditLog
from audit.services import AuditService
from core_backend.exceptions import NothingToPrintError, OrderStateError
from orders.models import KOTPrintRecord, Order, OrderItem
from products.selections import selections_from_json
from .notification_service import SyncNotificationService
from .order_service import OrderService

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


@dataclass
class KOTItemLine:
    id: str
    name: str
    quantity: int
    notes: str = ""
    variants: List[str] = field(default_factory=list)
    breakdown: List[Dict] = field(default_factory=list)


@dataclass
class KOTTicket:
    order_number: str
    order_type: str
    table: Optional[str]
    waiter: Optional[str]
    print_number: int
    station: Optional[str]
    is_reprint: bool
    printed_at: datetime
    items: List[KOTItemLine] = field(default_factory=list)

    def as_dict(self) -> Dict:
        data = asdict(self)
        data["printed_at"] = self.printed_at.isoformat()
        return data


@dataclass
class KOTPrintBatch:
    order_id: str
    print_number: int
    is_reprint: bool
    tickets: List[KOTTicket]
    record_ids: List[str]

    @property
    def item_count(self) -> int:
        return sum(len(ticket.items) for ticket in self.tickets)

    def as_dict(self) -> Dict:
        return {
            "order_id": self.order_id,
            "print_number": self.print_number,
            "is_reprint": self.is_reprint,
            "item_count": self.item_count,
            "tickets": [ticket.as_dict() for ticket in self.tickets],
            "record_ids": self.record_ids,
        }


class KitchenService:
    """Service for kitchen-related operations - choosing, grouping and printing KOT items."""

    @staticmethod
    def is_new_item(order, item) -> bool:
        """Never printed, or added after the order's last ticket."""
        if item.last_printed_at is None:
            return True
        return bool(order.last_kot_printed_at and item.added_at > order.last_kot_printed_at)

    @staticmethod
    def build_print_batch(order, items, reprint_all: bool = False, split_by_station: bool = False):
        """
        Chooses the items for the next ticket and partitions them by station.

        Returns an ordered mapping ``{station_or_None: [items]}``; the key is
        None when the ticket is not split.

        Raises:
            OrderStateError: the order has no items at all
            NothingToPrintError: every item was already sent and this is not a reprint
        """
        items = list(items)
        if not items:
            raise OrderStateError("No items in order")

        if reprint_all:
            selected = items
        else:
            selected = [item for item in items if KitchenService.is_new_item(order, item)]
            if not selected:
                raise NothingToPrintError()

        if not split_by_station:
            return {None: selected}
        return KitchenService.group_items_by_station(selected)

    @staticmethod
    def station_for(item) -> str:
        source = item.menu_item if item.item_type == OrderItem.ItemType.MENU_ITEM else item.deal
        category = getattr(source, "category", None)
        if category is None:
            return UNCATEGORIZED
        return category.station_name

    @staticmethod
    def group_items_by_station(order_items) -> Dict[str, List]:
        """
        Group order items by the major category that routes them to a kitchen
        station. Stations keep the order in which their first item appears.
        """
        grouped = {}
        # Expects order_items to carry select_related category data
        for item in order_items:
            grouped.setdefault(KitchenService.station_for(item), []).append(item)
        return grouped

    @staticmethod
    def _variant_lines(selected_variants) -> List[str]:
        lines = []
        for selection in selections_from_json(selected_variants):
            names = [option.option_name for option in selection.chosen_options]
            if names:
                lines.append(f"{selection.variant_name}: {', '.join(names)}")
        return lines

    @staticmethod
    def format_item(item, include_variants: bool = True, include_breakdown: bool = True) -> KOTItemLine:
        line = KOTItemLine(
            id=str(item.id),
            name=item.name,
            quantity=item.quantity,
            notes=item.notes or "",
        )
        if include_variants:
            line.variants = KitchenService._variant_lines(item.selected_variants)
        if include_breakdown and item.item_type == OrderItem.ItemType.DEAL:
            line.breakdown = [
                {
                    "name": entry.get("menu_item_name", ""),
                    "quantity": entry.get("quantity", 1),
                    "variants": (
                        KitchenService._variant_lines(entry.get("selected_variants"))
                        if include_variants
                        else []
                    ),
                }
                for entry in item.deal_breakdown or []
            ]
        return line

    @staticmethod
    @transaction.atomic
    def print_kot(order, user, split_by_station: Optional[bool] = None, reprint_all: bool = False) -> KOTPrintBatch:
        """
        Stamps the chosen items as printed, bumps the order's print counter
        and writes one KOTPrintRecord per ticket, all sharing the new print
        number. Pricing is never touched.
        """
        from settings.config import app_settings

        order = OrderService.lock_order(order)
        if order.status == Order.OrderStatus.CANCELLED:
            raise OrderStateError("Cannot print KOT for a cancelled order")

        if split_by_station is None:
            split_by_station = app_settings.kot_split_by_major_category
        include_variants = app_settings.kot_include_variants
        include_breakdown = app_settings.kot_include_deal_breakdown

        items = (
            order.items.select_for_update(of=("self",))
            .select_related("menu_item__category__parent", "deal__category__parent")
            .order_by("added_at")
        )
        groups = KitchenService.build_print_batch(order, items, reprint_all, split_by_station)

        now = timezone.now()
        print_number = order.kot_print_count + 1
        printed_ids = [item.pk for group in groups.values() for item in group]

        OrderItem.objects.filter(pk__in=printed_ids).update(last_printed_at=now)
        order.kot_print_count = print_number
        order.last_kot_printed_at = now
        order.save(update_fields=["kot_print_count", "last_kot_printed_at", "updated_at"])

        table = order.table.table_number if order.table_id else None
        waiter = order.waiter.name if order.waiter_id else None
        tickets = []
        record_ids = []
        for station, group in groups.items():
            record = KOTPrintRecord.objects.create(
                order=order,
                print_number=print_number,
                major_category=station,
                item_ids=[str(item.pk) for item in group],
                is_reprint=reprint_all,
                printed_by=user if getattr(user, "pk", None) else None,
                printed_at=now,
            )
            record_ids.append(str(record.pk))
            tickets.append(
                KOTTicket(
                    order_number=order.order_number,
                    order_type=order.order_type,
                    table=table,
                    waiter=waiter,
                    print_number=print_number,
                    station=station,
                    is_reprint=reprint_all,
                    printed_at=now,
                    items=[
                        KitchenService.format_item(item, include_variants, include_breakdown)
                        for item in group
                    ],
                )
            )

        item_count = len(printed_ids)
        description = f"Printed KOT #{print_number} with {item_count} items"
        if reprint_all:
            description += " (REPRINT ALL)"
        logger.info("%s for order %s (%d tickets)", description, order.order_number, len(tickets))
        AuditService.record(
            actor=user,
            action=AuditLog.Action.PRINT,
            table_name="orders",
            record_id=order.pk,
            description=description,
            after={
                "print_number": print_number,
                "stations": [station for station in groups],
                "item_ids": [str(pk) for pk in printed_ids],
            },
        )
        SyncNotificationService.broadcast_on_commit("orders", "update", order.pk)

        return KOTPrintBatch(
            order_id=str(order.pk),
            print_number=print_number,
            is_reprint=reprint_all,
            tickets=tickets,
            record_ids=record_ids,
        )
