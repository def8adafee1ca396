from django.contrib import admin

from hr_messaging.employees import models


@admin.register(models.Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "title", "department", "role", "line_manager"]
    search_fields = [
        "user__username",
        "user__name",
        "title",
        "employee_id",
    ]
    list_filter = [
        "department",
        "role",
        "join_date",
        "is_active",
        "created_at",
        "updated_at",
    ]
    raw_id_fields = ["user", "line_manager"]
