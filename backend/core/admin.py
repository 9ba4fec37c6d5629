from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "template_code", "channel", "complaint",
                    "created_at", "delivered_at")
    list_filter = ("template_code", "channel")
    readonly_fields = ("created_at",)
