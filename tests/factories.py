from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model

from hr_messaging.employees.models import Employee
from hr_messaging.org.models import Department
from hr_messaging.org.models import Role

if TYPE_CHECKING:
    from datetime import date

User = get_user_model()

TEST_PASSWORD = "TestPass123!"  # noqa: S105 - test credentials only


@dataclass
class EmployeeContext:
    user: User
    employee: Employee


def ensure_department(name: str) -> Department:
    department, _ = Department.objects.get_or_create(name=name)
    return department


def ensure_role(name: str) -> Role:
    role, _ = Role.objects.get_or_create(name=name)
    return role


def create_employee(  # noqa: PLR0913
    username: str,
    *,
    department: Department | str | None = None,
    role: Role | str | None = None,
    line_manager: Employee | None = None,
    join_date: date | None = None,
    is_active: bool = True,
    first_name: str = "",
    last_name: str = "",
) -> EmployeeContext:
    if isinstance(department, str):
        department = ensure_department(department)
    if isinstance(role, str):
        role = ensure_role(role)
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=TEST_PASSWORD,
        first_name=first_name,
        last_name=last_name,
    )
    employee = Employee.objects.create(
        user=user,
        department=department,
        role=role,
        line_manager=line_manager,
        join_date=join_date,
        is_active=is_active,
    )
    return EmployeeContext(user=user, employee=employee)


def make_employee(username: str, **kwargs) -> Employee:
    return create_employee(username, **kwargs).employee
