from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "marketplace"

router = DefaultRouter()
router.register(r"listings", views.ListingViewSet, basename="listing")
router.register(r"offers", views.OfferViewSet, basename="offer")
router.register(r"orders", views.OrderViewSet, basename="order")

urlpatterns = [
    path("", include(router.urls)),
]
