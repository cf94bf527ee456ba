import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models, transaction
from django.db.models import Q
from django.utils import timezone

from payments.money import from_minor, to_minor


class OrderSequence(models.Model):
    """
    Central counter for human-readable order numbers. The row is locked for
    the duration of the creating transaction, so two tills never draw the
    same value.
    """

    name = models.CharField(max_length=50, unique=True)
    last_value = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"{self.name}={self.last_value}"

    @classmethod
    def next_value(cls, name: str = "order") -> int:
        with transaction.atomic():
            cls.objects.get_or_create(name=name)
            sequence = cls.objects.select_for_update().get(name=name)
            sequence.last_value = models.F("last_value") + 1
            sequence.save(update_fields=["last_value"])
            sequence.refresh_from_db(fields=["last_value"])
            return sequence.last_value


class Order(models.Model):
    class OrderStatus(models.TextChoices):
        OPEN = "open", "Open"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    class OrderType(models.TextChoices):
        DINE_IN = "dine_in", "Dine In"
        TAKE_AWAY = "take_away", "Take Away"
        DELIVERY = "delivery", "Delivery"

    class DeliveryStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PREPARING = "preparing", "Preparing"
        READY = "ready", "Ready"
        OUT_FOR_DELIVERY = "out_for_delivery", "Out for Delivery"
        DELIVERED = "delivered", "Delivered"

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed Amount"

    ORDER_NUMBER_PREFIX = "ORD-"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(
        max_length=20, unique=True, blank=True, db_index=True
    )
    order_type = models.CharField(max_length=20, choices=OrderType.choices)
    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.OPEN
    )
    delivery_status = models.CharField(
        max_length=20, choices=DeliveryStatus.choices, null=True, blank=True
    )
    is_paid = models.BooleanField(default=False)

    # --- Financial fields, kept in step by OrderCalculationService ---
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_type = models.CharField(
        max_length=20, choices=DiscountType.choices, null=True, blank=True
    )
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_reference = models.CharField(max_length=255, blank=True)
    delivery_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    # --- Links ---
    register_session = models.ForeignKey(
        "terminals.RegisterSession", on_delete=models.PROTECT, related_name="orders"
    )
    table = models.ForeignKey(
        "terminals.DiningTable",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    waiter = models.ForeignKey(
        "users.Waiter", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    rider = models.ForeignKey(
        "users.Rider", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # --- Walk-in / delivery contact details ---
    customer_name = models.CharField(max_length=150, blank=True)
    customer_phone = models.CharField(max_length=20, blank=True)
    delivery_address = models.TextField(blank=True)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders_created"
    )
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders_completed",
    )
    cancellation_reason = models.TextField(blank=True)

    # --- Kitchen ticket tracking ---
    kot_print_count = models.PositiveIntegerField(default=0)
    last_kot_printed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["order_type", "status"], name="order_type_status_idx"),
            models.Index(fields=["register_session", "status"], name="order_session_status_idx"),
            models.Index(fields=["customer", "created_at"], name="order_customer_created_idx"),
        ]

    def __str__(self):
        return f"Order {self.order_number} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        if not self.order_number:
            with transaction.atomic():
                self.order_number = self.format_order_number(OrderSequence.next_value("order"))
                super().save(*args, **kwargs)
            return
        super().save(*args, **kwargs)

    @classmethod
    def format_order_number(cls, value: int) -> str:
        return f"{cls.ORDER_NUMBER_PREFIX}{value:05d}"

    @property
    def is_open(self) -> bool:
        return self.status == self.OrderStatus.OPEN

    @property
    def is_delivery(self) -> bool:
        return self.order_type == self.OrderType.DELIVERY


class OrderItem(models.Model):
    class ItemType(models.TextChoices):
        MENU_ITEM = "menu_item", "Menu Item"
        DEAL = "deal", "Deal"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    item_type = models.CharField(max_length=20, choices=ItemType.choices)
    menu_item = models.ForeignKey(
        "products.MenuItem",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_items",
    )
    deal = models.ForeignKey(
        "products.Deal",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_items",
    )
    name = models.CharField(
        max_length=200, help_text="Menu item or deal name at the time of sale."
    )
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.TextField(blank=True)
    selected_variants = models.JSONField(default=list, blank=True)
    deal_breakdown = models.JSONField(null=True, blank=True)

    added_at = models.DateTimeField(default=timezone.now)
    last_printed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["added_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(item_type="menu_item", menu_item__isnull=False, deal__isnull=True)
                    | Q(item_type="deal", deal__isnull=False, menu_item__isnull=True)
                ),
                name="orderitem_menu_item_xor_deal",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1), name="orderitem_quantity_positive"
            ),
        ]
        indexes = [
            models.Index(fields=["order", "added_at"], name="orderitem_order_added_idx"),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.name} in Order {self.order.order_number}"

    def save(self, *args, **kwargs):
        currency = settings.CURRENCY
        self.total_price = from_minor(currency, to_minor(currency, self.unit_price) * self.quantity)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and (
            "unit_price" in update_fields or "quantity" in update_fields
        ):
            kwargs["update_fields"] = set(update_fields) | {"total_price"}
        super().save(*args, **kwargs)


class KOTPrintRecord(models.Model):
    """
    Durable evidence of one kitchen ticket: which order items went to which
    station, and when. A station-split print writes one record per station,
    all sharing the same ``print_number``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, related_name="kot_prints", on_delete=models.CASCADE)
    print_number = models.PositiveIntegerField()
    major_category = models.CharField(max_length=100, null=True, blank=True)
    item_ids = models.JSONField(default=list)
    is_reprint = models.BooleanField(default=False)
    printed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="kot_prints",
    )
    printed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["print_number", "major_category"]
        indexes = [
            models.Index(fields=["order", "print_number"], name="kotprint_order_number_idx"),
        ]

    def __str__(self):
        station = f" [{self.major_category}]" if self.major_category else ""
        return f"KOT #{self.print_number}{station} for Order {self.order.order_number}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("KOT print records cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("KOT print records cannot be deleted.")
