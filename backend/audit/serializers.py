from rest_framework import serializers

from core_backend.base import BaseModelSerializer
from .models import AuditLog


class AuditLogSerializer(BaseModelSerializer):
    actor_name = serializers.CharField(source="actor.username", read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "actor",
            "actor_name",
            "action",
            "table_name",
            "record_id",
            "before",
            "after",
            "description",
            "created_at",
        ]
        read_only_fields = fields
        select_related_fields = ["actor"]
