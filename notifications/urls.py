from django.urls import include, path
from rest_framework.routers import SimpleRouter

from . import views

app_name = "notifications"

router = SimpleRouter()
router.register(r"", views.NotificationViewSet, basename="notification")

urlpatterns = [
    path("", include(router.urls)),
]
