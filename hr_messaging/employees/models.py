from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F
from django.db.models import Q


class EmployeeQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def with_org(self):
        return self.select_related(
            "user",
            "department",
            "role",
            "line_manager__user",
            "line_manager__department",
        )

    def managers(self):
        """Employees that currently have at least one direct report."""
        return self.filter(managed_employees__isnull=False).distinct()


class Employee(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="employee"
    )
    title = models.CharField(max_length=150, blank=True)
    employee_id = models.CharField(max_length=50, unique=True, blank=True, null=True)
    join_date = models.DateField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    department = models.ForeignKey(
        "org.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
    )
    role = models.ForeignKey(
        "org.Role",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
    )
    line_manager = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="managed_employees",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = EmployeeQuerySet.as_manager()

    class Meta:
        ordering = ["user__username"]
        constraints = [
            models.CheckConstraint(
                condition=~Q(line_manager=F("id")),
                name="employee_not_own_line_manager",
            ),
        ]

    def __str__(self):  # pragma: no cover - trivial
        return f"Employee({self.user.username})"

    @property
    def name(self) -> str:
        return self.user.display_name

    def _check_line_manager(self):
        if self.pk and self.line_manager_id == self.pk:
            raise ValidationError(
                {"line_manager": "An employee cannot be their own line manager."}
            )

    def clean(self):
        super().clean()
        self._check_line_manager()

    def save(self, *args, **kwargs):
        self._check_line_manager()
        super().save(*args, **kwargs)
