from django.contrib import admin
from .models import (
    Category,
    Deal,
    DealItem,
    DealVariant,
    MenuItem,
    MenuItemVariant,
    Variant,
    VariantOption,
)


class VariantOptionInline(admin.TabularInline):
    model = VariantOption
    extra = 1
    fields = ("name", "price_modifier", "display_order", "is_available")


@admin.register(Variant)
class VariantAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name",)
    inlines = [VariantOptionInline]


class SubCategoryInline(admin.TabularInline):
    model = Category
    fk_name = "parent"
    extra = 0
    fields = ("name", "type", "order", "is_active")
    verbose_name = "Sub category"
    verbose_name_plural = "Sub categories"


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    """
    Major categories double as kitchen stations on split KOTs, so the
    station a category routes to is shown alongside it.
    """

    list_display = ("name", "type", "parent", "station", "order", "is_active")
    list_filter = ("type", "is_active")
    list_editable = ("order", "is_active")
    search_fields = ("name",)
    inlines = [SubCategoryInline]

    @admin.display(description="Station")
    def station(self, obj):
        return obj.station_name


class MenuItemVariantInline(admin.TabularInline):
    model = MenuItemVariant
    extra = 1
    autocomplete_fields = ["variant"]


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "has_variants", "is_available")
    list_filter = ("category", "has_variants", "is_available")
    list_editable = ("price", "is_available")
    search_fields = ("name", "description")
    inlines = [MenuItemVariantInline]


class DealItemInline(admin.TabularInline):
    model = DealItem
    extra = 1
    autocomplete_fields = ["menu_item"]


class DealVariantInline(admin.TabularInline):
    model = DealVariant
    extra = 0
    autocomplete_fields = ["variant"]


@admin.register(Deal)
class DealAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "is_available")
    list_filter = ("category", "is_available")
    search_fields = ("name", "description")
    inlines = [DealItemInline, DealVariantInline]
