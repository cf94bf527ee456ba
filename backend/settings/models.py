from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models


class GlobalSettings(models.Model):
    """
    Restaurant-wide settings consumed by the order engine.

    This model contains ONLY:
    - Kitchen ticket (KOT) routing and content rules
    - Delivery charge defaults

    A single row is kept; use ``GlobalSettings.load()`` rather than querying.
    """

    restaurant_name = models.CharField(max_length=100, default="Restaurant POS")

    # === KITCHEN ORDER TICKETS ===
    kot_split_by_major_category = models.BooleanField(
        default=False,
        help_text="Print one KOT per major category (kitchen station) instead of one per order.",
    )
    kot_include_variants = models.BooleanField(
        default=True,
        help_text="Show selected variant options under each KOT line.",
    )
    kot_include_deal_breakdown = models.BooleanField(
        default=True,
        help_text="Show the items contained in a deal under its KOT line.",
    )

    # === DELIVERY ===
    default_delivery_charge = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Charge applied to new delivery orders when none is given.",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Global Settings"
        verbose_name_plural = "Global Settings"

    def clean(self):
        if GlobalSettings.objects.exclude(pk=self.pk).exists():
            raise ValidationError("There can only be one GlobalSettings instance.")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> "GlobalSettings":
        obj = cls.objects.first()
        if obj is None:
            obj = cls.objects.create()
        return obj

    def __str__(self):
        return f"Global Settings ({self.restaurant_name})"
