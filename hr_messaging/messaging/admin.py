from django.contrib import admin

from hr_messaging.messaging import models


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "sender",
        "recipient",
        "subject",
        "message_type",
        "priority",
        "status",
        "created_at",
    ]
    search_fields = ["subject", "content"]
    list_filter = ["message_type", "priority", "status", "created_at"]
    raw_id_fields = ["sender", "recipient", "parent"]
    readonly_fields = ["read_at", "created_at"]
