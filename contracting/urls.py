from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "contracting"

router = DefaultRouter()
router.register(r"construction", views.ConstructionRequestViewSet, basename="construction")
router.register(r"renovation", views.RenovationRequestViewSet, basename="renovation")

urlpatterns = [
    path("", include(router.urls)),
]
