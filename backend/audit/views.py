import django_filters
from rest_framework.permissions import IsAuthenticated

from core_backend.base import ReadOnlyBaseViewSet
from users.permissions import IsManagerOrHigher
from .models import AuditLog
from .serializers import AuditLogSerializer


class AuditLogFilter(django_filters.FilterSet):
    class Meta:
        model = AuditLog
        fields = ["action", "table_name", "record_id", "actor"]


class AuditLogViewSet(ReadOnlyBaseViewSet):
    queryset = AuditLog.objects.all()
    serializer_class = AuditLogSerializer
    permission_classes = [IsAuthenticated, IsManagerOrHigher]
    filterset_class = AuditLogFilter
    search_fields = ["description"]
    ordering = ["-created_at", "-id"]
