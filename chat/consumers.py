from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.db.models import Q

from .models import Conversation
from .services import conversation_group


class ConversationConsumer(AsyncJsonWebsocketConsumer):
    async def connect(self):
        user = self.scope.get("user")
        kwargs = self.scope.get("url_route", {}).get("kwargs", {})
        conversation_id = int(kwargs.get("conversation_id", 0) or 0)
        if not user or not getattr(user, "is_authenticated", False) or conversation_id <= 0:
            await self.close()
            return
        is_participant = await sync_to_async(
            lambda: Conversation.objects.filter(pk=conversation_id)
            .filter(Q(user_one_id=user.id) | Q(user_two_id=user.id))
            .exists()
        )()
        if not is_participant:
            await self.close()
            return
        self.conversation_group = conversation_group(conversation_id)
        await self.channel_layer.group_add(self.conversation_group, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "conversation_group"):
            await self.channel_layer.group_discard(self.conversation_group, self.channel_name)

    async def chat_message_event(self, event):
        await self.send_json(event.get("data", {}))
