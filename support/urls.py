from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "support"

router = DefaultRouter()
router.register(r"tickets", views.SupportTicketViewSet, basename="ticket")

urlpatterns = [
    path("", include(router.urls)),
]
