from django.contrib import admin

from .models import DeadLetter, RequestUpdate


@admin.register(DeadLetter)
class DeadLetterAdmin(admin.ModelAdmin):
    list_display = ("id", "kind", "error", "created_at")
    list_filter = ("kind",)
    search_fields = ("error",)
    readonly_fields = ("kind", "payload", "error", "created_at")


@admin.register(RequestUpdate)
class RequestUpdateAdmin(admin.ModelAdmin):
    list_display = ("kind", "object_id", "status", "updated_by", "created_at")
    list_filter = ("kind", "status")
    raw_id_fields = ("updated_by",)
