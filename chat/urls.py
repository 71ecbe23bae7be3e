from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "chat"

router = DefaultRouter()
router.register(r"conversations", views.ConversationViewSet, basename="conversation")

urlpatterns = [
    path("", include(router.urls)),
]
