from django.contrib import admin
from payments.admin import PaymentInline
from .models import KOTPrintRecord, Order, OrderItem, OrderSequence


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("name", "item_type", "quantity", "unit_price", "total_price", "added_at", "last_printed_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class KOTPrintRecordInline(admin.TabularInline):
    model = KOTPrintRecord
    extra = 0
    readonly_fields = ("print_number", "major_category", "item_ids", "is_reprint", "printed_by", "printed_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Orders are changed through the order services only; the admin is a
    read-only window onto them.
    """

    list_display = (
        "order_number",
        "order_type",
        "status",
        "is_paid",
        "total",
        "customer_name",
        "created_by",
        "created_at",
    )
    list_display_links = ("order_number",)
    list_filter = ("status", "order_type", "is_paid", "delivery_status", "created_at")
    search_fields = ("order_number", "customer_name", "customer_phone")
    readonly_fields = [f.name for f in Order._meta.fields]
    inlines = [OrderItemInline, PaymentInline, KOTPrintRecordInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(OrderSequence)
class OrderSequenceAdmin(admin.ModelAdmin):
    list_display = ("name", "last_value")
    readonly_fields = ("name", "last_value")
