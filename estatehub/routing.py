from adminpanel.routing import websocket_urlpatterns as adminpanel_ws
from chat.routing import websocket_urlpatterns as chat_ws
from notifications.routing import websocket_urlpatterns as notifications_ws

# Aggregate websocket URL patterns from apps
websocket_urlpatterns = []
websocket_urlpatterns += notifications_ws
websocket_urlpatterns += chat_ws
websocket_urlpatterns += adminpanel_ws
