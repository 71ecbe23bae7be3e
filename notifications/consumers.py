from channels.generic.websocket import AsyncJsonWebsocketConsumer

from common.realtime import user_group


class UserEventsConsumer(AsyncJsonWebsocketConsumer):
    """Per-user feed: new notifications, unread counts and request status changes."""

    async def connect(self):
        user = self.scope.get("user")
        if not user or not getattr(user, "is_authenticated", False):
            await self.close()
            return
        self.user_group = user_group(user.id)
        await self.channel_layer.group_add(self.user_group, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "user_group"):
            await self.channel_layer.group_discard(self.user_group, self.channel_name)

    async def notification_event(self, event):
        await self.send_json({"event": "notification", **event.get("data", {})})

    async def counts_event(self, event):
        await self.send_json({"event": "counts", **event.get("data", {})})

    async def request_status_event(self, event):
        await self.send_json({"event": "request_status", **event.get("data", {})})

    async def transaction_event(self, event):
        await self.send_json({"event": "transaction", **event.get("data", {})})
