from django.core.management.base import BaseCommand
from django.db.models import Q

from orders.models import Order
from orders.services import OrderCalculationService


class Command(BaseCommand):
    help = "Recompute stored totals for orders whose subtotal was lost while items remain"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the orders that would be repaired without changing them",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No changes will be made"))

        candidates = (
            Order.objects.filter(Q(subtotal=0) | Q(subtotal__isnull=True), items__isnull=False)
            .distinct()
            .order_by("created_at")
        )

        repaired = 0
        for order in candidates:
            if dry_run:
                self.stdout.write(f"Would repair {order.order_number}")
                repaired += 1
                continue
            if OrderCalculationService.repair_order_totals(order):
                self.stdout.write(f"Repaired {order.order_number}")
                repaired += 1

        if dry_run:
            self.stdout.write(self.style.WARNING(f"DRY RUN: Would repair {repaired} orders"))
        else:
            self.stdout.write(self.style.SUCCESS(f"Repaired {repaired} orders"))
