from django.urls import path

from .consumers import BroadcastProgressConsumer

websocket_urlpatterns = [
    path("ws/admin/broadcasts/", BroadcastProgressConsumer.as_asgi()),
]
