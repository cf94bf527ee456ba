import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Payment(models.Model):
    """
    A settlement recorded against an order. Payments are append-only; the
    reconciler guarantees their sum never exceeds the order total.
    """

    class PaymentMethod(models.TextChoices):
        CASH = "cash", _("Cash")
        CARD = "card", _("Card")
        ONLINE = "online", _("Online")
        OTHER = "other", _("Other")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        "orders.Order", on_delete=models.CASCADE, related_name="payments"
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Amount settled. Never the tendered amount when change was given."),
    )
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    reference = models.CharField(
        max_length=255,
        blank=True,
        help_text=_("Card slip, transfer or wallet reference."),
    )
    notes = models.TextField(blank=True)
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_received",
    )
    paid_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["paid_at"]
        indexes = [
            models.Index(fields=["order", "paid_at"], name="payment_order_paid_idx"),
            models.Index(fields=["method", "paid_at"], name="payment_method_paid_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="payment_amount_positive"),
        ]

    def __str__(self):
        return f"{self.get_method_display()} {self.amount} for Order {self.order.order_number}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Payments cannot be modified once recorded.")
        super().save(*args, **kwargs)
