from django.db import models
from django.utils.translation import gettext_lazy as _
import uuid


class SelectionMode(models.TextChoices):
    SINGLE = "single", _("Single Choice")
    MULTIPLE = "multiple", _("Multiple Choices")
    ALL = "all", _("All Options")


class Category(models.Model):
    class CategoryType(models.TextChoices):
        MAJOR = "major", _("Major")
        SUB = "sub", _("Sub")

    name = models.CharField(
        max_length=100, unique=True, help_text=_("Name of the menu category.")
    )
    type = models.CharField(
        max_length=10,
        choices=CategoryType.choices,
        default=CategoryType.MAJOR,
        help_text=_("Major categories map to kitchen stations; sub categories sit under one."),
    )
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="children",
        help_text=_("Major category this sub category belongs to."),
    )
    order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = _("Category")
        verbose_name_plural = _("Categories")
        ordering = ["order", "name"]

    def __str__(self):
        return self.name

    @property
    def station_name(self) -> str:
        """Name of the major category (kitchen station) this category routes to."""
        if self.type == self.CategoryType.SUB and self.parent_id:
            return self.parent.name
        return self.name


class Variant(models.Model):
    """A customizable attribute such as size or spice level."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class VariantOption(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    variant = models.ForeignKey(
        Variant, on_delete=models.CASCADE, related_name="options"
    )
    name = models.CharField(max_length=100)
    price_modifier = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text=_("The amount to add to (or subtract from) the base price."),
    )
    display_order = models.PositiveIntegerField(default=0)
    is_available = models.BooleanField(default=True)

    class Meta:
        ordering = ["display_order", "name"]
        unique_together = ("variant", "name")

    def __str__(self):
        return f"{self.variant.name} - {self.name}"


class VariantAssignment(models.Model):
    """
    Shared columns for attaching a variant to a menu item or a deal.
    ``available_option_ids`` narrows the variant's options for this item; an
    empty list means every option is offered.
    """

    variant = models.ForeignKey(Variant, on_delete=models.CASCADE)
    is_required = models.BooleanField(default=False)
    selection_mode = models.CharField(
        max_length=10, choices=SelectionMode.choices, default=SelectionMode.SINGLE
    )
    available_option_ids = models.JSONField(default=list, blank=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        ordering = ["display_order"]

    def offered_option_ids(self):
        return {str(option_id) for option_id in self.available_option_ids or []}


class MenuItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, help_text=_("Name of the menu item."))
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text=_("Base selling price before variant modifiers."),
    )
    category = models.ForeignKey(
        Category,
        related_name="menu_items",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    variants = models.ManyToManyField(
        Variant, through="MenuItemVariant", related_name="menu_items", blank=True
    )
    has_variants = models.BooleanField(default=False)
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Menu Item")
        verbose_name_plural = _("Menu Items")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "is_available"], name="menuitem_category_avail_idx"),
        ]

    def __str__(self):
        return self.name


class MenuItemVariant(VariantAssignment):
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.CASCADE, related_name="variant_links"
    )

    class Meta(VariantAssignment.Meta):
        unique_together = ("menu_item", "variant")


class Deal(models.Model):
    """A fixed-price bundle of menu items."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    category = models.ForeignKey(
        Category,
        related_name="deals",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    variants = models.ManyToManyField(
        Variant, through="DealVariant", related_name="deals", blank=True
    )
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class DealItem(models.Model):
    deal = models.ForeignKey(Deal, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.PROTECT, related_name="deal_items"
    )
    quantity = models.PositiveIntegerField(default=1)
    requires_variant_selection = models.BooleanField(
        default=False,
        help_text=_("The cashier must pick this item's variants when selling the deal."),
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.quantity}x {self.menu_item.name} in {self.deal.name}"


class DealVariant(VariantAssignment):
    deal = models.ForeignKey(Deal, on_delete=models.CASCADE, related_name="variant_links")

    class Meta(VariantAssignment.Meta):
        unique_together = ("deal", "variant")
