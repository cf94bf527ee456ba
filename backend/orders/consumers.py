import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer

from .services.notification_service import SYNC_GROUP

logger = logging.getLogger(__name__)


class SyncConsumer(AsyncWebsocketConsumer):
    """
    Relays ``sync`` events to a connected terminal. The payload only names
    the record that changed; clients refetch it over the REST API.
    """

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            logger.info("SyncConsumer: rejecting unauthenticated connection")
            await self.close()
            return

        await self.channel_layer.group_add(SYNC_GROUP, self.channel_name)
        await self.accept()
        logger.info("SyncConsumer: %s connected", user.username)

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(SYNC_GROUP, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            message = json.loads(text_data or "{}")
        except json.JSONDecodeError:
            logger.warning("SyncConsumer: ignoring malformed message")
            return

        if message.get("type") == "ping":
            await self.send(text_data=json.dumps({"type": "pong"}))

    async def sync(self, event):
        await self.send(
            text_data=json.dumps(
                {
                    "type": "sync",
                    "resource": event["resource"],
                    "action": event["action"],
                    "id": event["id"],
                    "timestamp": event["timestamp"],
                }
            )
        )
