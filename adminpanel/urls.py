from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "adminpanel"

router = DefaultRouter()
router.register(r"users", views.UserAdminViewSet, basename="user")
router.register(r"providers", views.ProviderAdminViewSet, basename="provider")
router.register(r"properties", views.PropertyAdminViewSet, basename="property")
router.register(r"listings", views.ListingAdminViewSet, basename="listing")
router.register(r"reviews", views.ReviewAdminViewSet, basename="review")
router.register(r"broadcasts", views.BroadcastViewSet, basename="broadcast")

urlpatterns = [
    path("dashboard/", views.DashboardView.as_view(), name="dashboard"),
    path("requests/<str:kind>/", views.RequestAdminView.as_view(), name="requests"),
    path("", include(router.urls)),
]
