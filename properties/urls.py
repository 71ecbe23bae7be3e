from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "properties"

router = DefaultRouter()
router.register(r"listings", views.PropertyViewSet, basename="property")
router.register(r"rental-requests", views.RentalRequestViewSet, basename="rental-request")
router.register(r"buy-sell-requests", views.BuySellRequestViewSet, basename="buy-sell-request")

urlpatterns = [
    path("", include(router.urls)),
]
