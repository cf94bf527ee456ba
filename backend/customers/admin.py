from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "total_orders", "last_order_at")
    search_fields = ("name", "phone")
    readonly_fields = ("total_orders", "last_order_at", "created_at", "updated_at")
