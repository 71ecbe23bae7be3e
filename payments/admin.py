from django.contrib import admin

from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "target_type", "target_id", "amount", "currency", "status", "created_at")
    list_filter = ("status", "target_type")
    search_fields = ("reference", "user__username")
    raw_id_fields = ("user",)
    readonly_fields = ("settled_at",)
