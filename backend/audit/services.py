import json
import logging
from typing import Any, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError, transaction
from django.forms.models import model_to_dict

from .models import AuditLog

logger = logging.getLogger(__name__)


def snapshot(instance, exclude=None) -> Optional[dict]:
    """JSON-safe dict of a model instance's concrete fields."""
    if instance is None:
        return None
    data = model_to_dict(instance, exclude=exclude or [])
    data["id"] = instance.pk
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


class AuditService:
    """
    Audit sink for order engine mutations.

    ``record`` never raises: a failed audit write is logged and the calling
    mutation carries on. The insert runs in its own savepoint so a database
    error here cannot poison the caller's transaction.
    """

    @staticmethod
    def record(
        actor,
        action: str,
        table_name: str,
        record_id: Any,
        description: str,
        before: Optional[dict] = None,
        after: Optional[dict] = None,
    ) -> Optional[AuditLog]:
        try:
            payload_before = json.loads(json.dumps(before, cls=DjangoJSONEncoder))
            payload_after = json.loads(json.dumps(after, cls=DjangoJSONEncoder))
            with transaction.atomic():
                return AuditLog.objects.create(
                    actor=actor if getattr(actor, "pk", None) else None,
                    action=action,
                    table_name=table_name,
                    record_id=str(record_id),
                    before=payload_before,
                    after=payload_after,
                    description=description,
                )
        except (DatabaseError, TypeError, ValueError):
            logger.error(
                "Failed to write audit log action=%s table=%s record=%s",
                action,
                table_name,
                record_id,
                exc_info=True,
            )
            return None

    @staticmethod
    def history(table_name: str, record_id: Any):
        return AuditLog.objects.filter(table_name=table_name, record_id=str(record_id))
