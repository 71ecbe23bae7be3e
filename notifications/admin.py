from django.contrib import admin

from .models import BroadcastJob, Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "type", "title", "read", "is_broadcast", "created_at")
    list_filter = ("type", "read", "is_broadcast")
    search_fields = ("title", "message", "user__username", "user__email")
    raw_id_fields = ("user",)


@admin.register(BroadcastJob)
class BroadcastJobAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "audience", "status", "sent", "total", "batches", "created_at")
    list_filter = ("status", "audience")
    readonly_fields = ("recipient_ids", "sent", "total", "batches", "error", "confirmed_at", "finished_at")
