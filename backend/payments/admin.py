from django.contrib import admin
from .models import Payment


class PaymentInline(admin.TabularInline):
    """
    Read-only payments shown on the order admin page.
    """

    model = Payment
    extra = 0
    readonly_fields = ("id", "amount", "method", "reference", "received_by", "paid_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "amount", "method", "received_by", "paid_at")
    list_filter = ("method", "paid_at")
    search_fields = ("order__order_number", "reference")
    readonly_fields = [f.name for f in Payment._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
