from django.contrib import admin

from .models import ConstructionRequest, RenovationRequest


@admin.register(ConstructionRequest)
class ConstructionRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "project_type", "user", "provider", "budget", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("project_type", "description")
    raw_id_fields = ("user", "provider", "property", "conversation")


@admin.register(RenovationRequest)
class RenovationRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "service_category", "user", "provider", "budget", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("service_category", "detailed_description")
    raw_id_fields = ("user", "provider", "property", "conversation")
