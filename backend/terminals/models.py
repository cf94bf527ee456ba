from django.conf import settings
from django.db import models
from django.utils import timezone
import uuid


class RegisterSession(models.Model):
    """
    A cash-register shift. Every order is taken under an open session so
    takings can be reconciled per shift.
    """

    class Status(models.TextChoices):
        OPEN = "open", "Open"
        CLOSED = "closed", "Closed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    opened_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="register_sessions",
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    opening_cash = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    opened_at = models.DateTimeField(default=timezone.now)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-opened_at"]

    def __str__(self):
        return f"Session {self.opened_at:%Y-%m-%d %H:%M} ({self.status})"

    def close(self):
        self.status = self.Status.CLOSED
        self.closed_at = timezone.now()
        self.save(update_fields=["status", "closed_at"])


class DiningTable(models.Model):
    table_number = models.CharField(max_length=20, unique=True)
    seats = models.PositiveSmallIntegerField(default=4)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["table_number"]

    def __str__(self):
        return f"Table {self.table_number}"
