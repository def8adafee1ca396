from django.contrib import admin

from hr_messaging.org import models


@admin.register(models.Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "description", "location"]
    search_fields = ["name", "description", "location"]
    list_filter = ["is_active", "created_at", "updated_at"]


@admin.register(models.Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "description"]
    search_fields = ["name", "description"]
