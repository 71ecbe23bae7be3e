from channels.generic.websocket import AsyncJsonWebsocketConsumer

from common.permissions import is_platform_admin
from notifications.broadcast import PROGRESS_GROUP


class BroadcastProgressConsumer(AsyncJsonWebsocketConsumer):
    """Live ``sent/total`` feed for bulk notification jobs; admins only."""

    async def connect(self):
        if not is_platform_admin(self.scope.get("user")):
            await self.close()
            return
        await self.channel_layer.group_add(PROGRESS_GROUP, self.channel_name)
        self.joined = True
        await self.accept()

    async def disconnect(self, close_code):
        if getattr(self, "joined", False):
            await self.channel_layer.group_discard(PROGRESS_GROUP, self.channel_name)

    async def broadcast_progress(self, event):
        await self.send_json({"event": "broadcast_progress", **event.get("data", {})})
