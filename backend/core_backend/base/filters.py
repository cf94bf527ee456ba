import django_filters
from django.db import models
from django.utils import timezone
from datetime import datetime, time
import logging

logger = logging.getLogger(__name__)


class FlexibleDateTimeFilter(django_filters.DateTimeFilter):
    """
    A DateTimeFilter that treats date-only input as a whole day.

    "2025-11-11" becomes 00:00:00 for gte/gt lookups and 23:59:59.999999 for
    lte/lt lookups. Full datetimes are used exactly as given.
    """

    def filter(self, qs, value):
        if isinstance(value, datetime) and value.time() == time(0, 0, 0):
            if self.lookup_expr in ["lte", "lt"]:
                value = datetime.combine(value.date(), time.max)
                if timezone.is_naive(value):
                    value = timezone.make_aware(value)
                logger.debug(
                    "Adjusted %s__%s to end of day: %s",
                    self.field_name,
                    self.lookup_expr,
                    value,
                )
        return super().filter(qs, value)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base filter set with the date-range filters every list endpoint shares.
    """

    created_after = FlexibleDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = FlexibleDateTimeFilter(field_name="created_at", lookup_expr="lte")

    @classmethod
    def filter_for_field(cls, field, field_name, lookup_expr="exact"):
        if isinstance(field, models.DateTimeField):
            return FlexibleDateTimeFilter(field_name=field_name, lookup_expr=lookup_expr)
        return super().filter_for_field(field, field_name, lookup_expr)

    class Meta:
        abstract = True
