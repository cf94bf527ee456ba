"""
Customer records for phone and delivery orders.
"""
from django.db import models
import uuid


class Customer(models.Model):
    """
    A returning guest identified by phone number.
    ``total_orders`` and ``last_order_at`` are maintained by order completion.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    phone = models.CharField(
        max_length=20,
        unique=True,
        help_text="Customer's phone number, used for lookup at the till",
    )
    address = models.TextField(blank=True)

    total_orders = models.PositiveIntegerField(default=0)
    last_order_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["phone"], name="customers_phone_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.phone})"
