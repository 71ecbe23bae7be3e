from django.contrib import admin

from .models import SupportReply, SupportTicket


class SupportReplyInline(admin.TabularInline):
    model = SupportReply
    extra = 0
    raw_id_fields = ("sender",)


@admin.register(SupportTicket)
class SupportTicketAdmin(admin.ModelAdmin):
    list_display = ("id", "subject", "user", "status", "priority", "assigned_admin", "created_at")
    list_filter = ("status", "priority")
    search_fields = ("subject", "message", "email", "user__username")
    raw_id_fields = ("user", "assigned_admin", "conversation")
    inlines = [SupportReplyInline]
