import logging

from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

SYNC_GROUP = "sync"


class SyncNotificationService:
    """
    Pushes ``sync`` events to every connected terminal so open screens can
    refetch the record that changed. Delivery is best effort: a missing or
    failing channel layer is logged and never interrupts the caller.
    """

    @staticmethod
    def build_event(resource: str, action: str, record_id) -> dict:
        return {
            "type": "sync",
            "resource": resource,
            "action": action,
            "id": str(record_id),
            "timestamp": timezone.now().isoformat(),
        }

    @staticmethod
    def broadcast(resource: str, action: str, record_id) -> bool:
        from asgiref.sync import async_to_sync
        from channels.layers import get_channel_layer

        channel_layer = get_channel_layer()
        if not channel_layer:
            logger.warning(
                "Channel layer not available. Cannot broadcast %s %s %s.",
                resource,
                action,
                record_id,
            )
            return False

        event = SyncNotificationService.build_event(resource, action, record_id)
        try:
            async_to_sync(channel_layer.group_send)(SYNC_GROUP, event)
        except Exception:
            logger.warning(
                "Failed to broadcast %s %s %s", resource, action, record_id, exc_info=True
            )
            return False

        logger.debug("Broadcast sync event %s", event)
        return True

    @staticmethod
    def broadcast_on_commit(resource: str, action: str, record_id) -> None:
        """Sends the event once the surrounding transaction commits."""
        transaction.on_commit(
            lambda: SyncNotificationService.broadcast(resource, action, record_id)
        )
