"""
URL patterns for accounts app: signup, current user, profile, providers and favorites.
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

app_name = "accounts"

router = DefaultRouter()
router.register(r"providers", views.ServiceProviderViewSet, basename="provider")
router.register(r"favorites", views.FavoriteViewSet, basename="favorite")

urlpatterns = [
    path("signup/", views.SignupView.as_view(), name="signup"),
    path("me/", views.MeView.as_view(), name="me"),
    path("me/profile/", views.ProfileView.as_view(), name="profile"),
    path("users/<int:user_id>/display-name/", views.DisplayNameView.as_view(), name="display_name"),
    path("", include(router.urls)),
]
