from django.db.models import Prefetch
from rest_framework.viewsets import ViewSetMixin


class OptimizedQuerysetMixin(ViewSetMixin):
    """
    Applies ``select_related_fields`` and ``prefetch_related_fields`` declared on
    the action's serializer Meta to the queryset.
    """

    def _get_optimizations(self, serializer_class):
        select_related = set()
        prefetch_related = []

        meta = getattr(serializer_class, "Meta", None)
        if meta is None:
            return select_related, prefetch_related

        select_related.update(getattr(meta, "select_related_fields", []))
        for field in getattr(meta, "prefetch_related_fields", []):
            if isinstance(field, Prefetch) or field not in prefetch_related:
                prefetch_related.append(field)

        return select_related, prefetch_related

    def get_queryset(self):
        queryset = super().get_queryset()

        try:
            serializer_class = self.get_serializer_class()
        except (AttributeError, AssertionError):
            return queryset

        select_related, prefetch_related = self._get_optimizations(serializer_class)

        if select_related:
            queryset = queryset.select_related(*select_related)
        if prefetch_related:
            queryset = queryset.prefetch_related(*prefetch_related)

        return queryset
