from django.contrib import admin
from .models import GlobalSettings


@admin.register(GlobalSettings)
class GlobalSettingsAdmin(admin.ModelAdmin):
    list_display = (
        "restaurant_name",
        "kot_split_by_major_category",
        "kot_include_variants",
        "kot_include_deal_breakdown",
        "default_delivery_charge",
    )

    def has_add_permission(self, request):
        return not GlobalSettings.objects.exists()
