"""
Core backend base components.

This package provides foundational classes that should be used throughout
the Django application for consistency and maintainability.
"""

from .viewsets import BaseViewSet, ReadOnlyBaseViewSet
from .serializers import BaseModelSerializer
from .mixins import OptimizedQuerysetMixin
from .filters import BaseFilterSet, FlexibleDateTimeFilter

__all__ = [
    # ViewSets
    'BaseViewSet',
    'ReadOnlyBaseViewSet',

    # Serializers
    'BaseModelSerializer',

    # Mixins
    'OptimizedQuerysetMixin',

    # Filters
    'BaseFilterSet',
    'FlexibleDateTimeFilter',
]
