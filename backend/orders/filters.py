import django_filters
from core_backend.base.filters import BaseFilterSet, FlexibleDateTimeFilter
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Filters for the order list.

    ``created_after``/``created_before`` come from BaseFilterSet and accept
    either a date (whole day) or a full datetime.
    """

    customer__in = django_filters.BaseInFilter(field_name="customer", lookup_expr="in")
    register_session__in = django_filters.BaseInFilter(
        field_name="register_session", lookup_expr="in"
    )
    completed_after = FlexibleDateTimeFilter(field_name="completed_at", lookup_expr="gte")
    completed_before = FlexibleDateTimeFilter(field_name="completed_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = {
            "status": ["exact"],
            "order_type": ["exact"],
            "delivery_status": ["exact"],
            "is_paid": ["exact"],
            "customer": ["exact"],
            "register_session": ["exact"],
        }
