from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "notification_type", "title", "read", "created_at"]
    list_filter = ["notification_type", "read", "created_at"]
    search_fields = ["user__username", "user__email", "title", "message"]
    readonly_fields = ["id", "created_at"]
    ordering = ["-created_at"]
