"""
Admin registrations for accounts app models.
"""
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import Favorite, Profile, ServiceProvider

User = get_user_model()


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    """Django's UserAdmin with the platform role and flags added."""
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("Platform", {"fields": ("role", "is_suspended", "is_provider_approved", "phone", "email_notifications")}),
    )
    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        ("Platform", {"fields": ("email", "role", "phone")}),
    )
    list_display = ("username", "email", "role", "is_suspended", "is_provider_approved", "date_joined")
    list_filter = DjangoUserAdmin.list_filter + ("role", "is_suspended")
    search_fields = ("username", "email", "phone")


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "display_name", "city", "phone", "created_at")
    search_fields = ("user__username", "user__email", "display_name", "city", "phone")
    autocomplete_fields = ("user",)


@admin.register(ServiceProvider)
class ServiceProviderAdmin(admin.ModelAdmin):
    list_display = ("business_name", "user", "service_type", "is_approved", "approved_at", "created_at")
    list_filter = ("service_type", "is_approved")
    search_fields = ("business_name", "user__username", "user__email")
    readonly_fields = ("approved",)


@admin.register(Favorite)
class FavoriteAdmin(admin.ModelAdmin):
    list_display = ("user", "target_type", "target_id", "created_at")
    list_filter = ("target_type",)
    raw_id_fields = ("user",)
