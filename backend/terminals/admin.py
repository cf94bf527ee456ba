from django.contrib import admin
from .models import RegisterSession, DiningTable


@admin.register(RegisterSession)
class RegisterSessionAdmin(admin.ModelAdmin):
    list_display = ("id", "opened_by", "status", "opened_at", "closed_at")
    list_filter = ("status",)


@admin.register(DiningTable)
class DiningTableAdmin(admin.ModelAdmin):
    list_display = ("table_number", "seats", "is_active")
