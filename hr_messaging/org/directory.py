"""Read-side access to the organization graph.

Messaging decisions only read employees, departments and roles through these
helpers. The naming conventions used to recognise HR departments and
administrative roles live here and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import F
from django.db.models.functions import Lower
from django.db.models.functions import Trim

from hr_messaging.employees.models import Employee
from hr_messaging.org.models import Department

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Iterable

    from django.db.models import QuerySet

    from hr_messaging.employees.models import EmployeeQuerySet
    from hr_messaging.org.models import Role

ADMIN_ROLE_NAMES = frozenset({"admin", "administrator"})
MANAGEMENT_ROLE_KEYWORDS = ("admin", "director", "executive")


def _normalize_name(name: str | None) -> str:
    # Only spaces are trimmed, matching SQL TRIM() in hr_departments().
    return (name or "").strip(" ").lower()


def _hr_department_names() -> list[str]:
    names = getattr(
        settings, "MESSAGING_HR_DEPARTMENT_NAMES", ["HR", "Human Resources"]
    )
    return [
        _normalize_name(n) for n in names if isinstance(n, str) and n.strip(" ")
    ]


def is_hr_department(department: Department | None) -> bool:
    if department is None:
        return False
    return _normalize_name(department.name) in _hr_department_names()


def hr_departments() -> QuerySet[Department]:
    """Departments matched by :func:`is_hr_department`, in database terms."""
    names = _hr_department_names()
    if not names:
        return Department.objects.none()
    return Department.objects.alias(normalized_name=Lower(Trim("name"))).filter(
        normalized_name__in=names
    )


def is_admin_role(role: Role | None) -> bool:
    if role is None:
        return False
    return (role.name or "").strip().lower() in ADMIN_ROLE_NAMES


def is_management_role(role: Role | None) -> bool:
    if role is None:
        return False
    name = (role.name or "").lower()
    return any(keyword in name for keyword in MANAGEMENT_ROLE_KEYWORDS)


def same_department(first: Employee, second: Employee) -> bool:
    # A missing department never matches, not even another missing one.
    return first.department_id is not None and (
        first.department_id == second.department_id
    )


def _coerce_id(value) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_employee(employee_id) -> Employee | None:
    pk = _coerce_id(employee_id)
    if pk is None:
        return None
    return Employee.objects.with_org().filter(pk=pk).first()


def get_employee_by_account_id(user_id) -> Employee | None:
    pk = _coerce_id(user_id)
    if pk is None:
        return None
    return Employee.objects.with_org().filter(user_id=pk).first()


def manager_of(employee: Employee) -> Employee | None:
    """Return the line manager, treating a self-reference as no manager."""
    if employee.line_manager_id is None or employee.line_manager_id == employee.pk:
        return None
    return employee.line_manager


def has_direct_reports(employee: Employee) -> bool:
    return (
        Employee.objects.filter(line_manager_id=employee.pk)
        .exclude(pk=employee.pk)
        .exists()
    )


def list_direct_reports(employee: Employee) -> EmployeeQuerySet:
    return (
        Employee.objects.with_org()
        .filter(line_manager_id=employee.pk)
        .exclude(pk=employee.pk)
    )


def list_department_members(
    department_id: int | None,
    *,
    exclude: Employee | None = None,
) -> EmployeeQuerySet:
    if department_id is None:
        return Employee.objects.none()
    qs = Employee.objects.with_org().filter(department_id=department_id)
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    return qs


def find_hr_department() -> Department | None:
    return hr_departments().order_by("pk").first()


def list_hr_members(*, exclude: Employee | None = None) -> EmployeeQuerySet:
    qs = Employee.objects.with_org().filter(department__in=hr_departments())
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    return qs


def most_senior_hr_member(*, exclude: Employee | None = None) -> Employee | None:
    """Earliest active joiner across every HR department; undated records last."""
    return (
        list_hr_members(exclude=exclude)
        .active()
        .order_by(F("join_date").asc(nulls_last=True), "pk")
        .first()
    )


def list_managers(*, exclude: Employee | None = None) -> EmployeeQuerySet:
    qs = Employee.objects.with_org().managers()
    if exclude is not None:
        qs = qs.exclude(pk=exclude.pk)
    return qs


def count_managers_among(ids: Iterable[int]) -> int:
    return Employee.objects.managers().filter(pk__in=list(ids)).count()


@dataclass(frozen=True)
class EscalationStep:
    level: int
    employee: Employee
    is_hr: bool = False


def escalation_chain(
    employee: Employee,
    *,
    max_hops: int | None = None,
    include_hr: bool = True,
) -> list[EscalationStep]:
    """Walk up the management chain, then close it with an HR contact.

    The walk stops at the top of the chain, after ``max_hops`` levels, or as
    soon as a manager repeats, so a malformed cycle cannot loop forever. The
    HR step is the first active HR member (see :func:`find_hr_staff`) not
    already on the chain and not the employee themselves.
    """

    if max_hops is None:
        max_hops = settings.MESSAGING_MAX_ESCALATION_HOPS
    chain: list[EscalationStep] = []
    seen = {employee.pk}
    current = employee
    for level in range(1, max_hops + 1):
        manager = manager_of(current)
        if manager is None or manager.pk in seen:
            break
        seen.add(manager.pk)
        chain.append(EscalationStep(level, manager))
        current = manager

    if include_hr:
        hr_contact = find_hr_staff().exclude(pk__in=seen).first()
        if hr_contact is not None:
            chain.append(EscalationStep(len(chain) + 1, hr_contact, is_hr=True))
    return chain


def find_hr_staff() -> EmployeeQuerySet:
    return list_hr_members().active().order_by("role__name", "user__name", "pk")


def list_active_employees() -> EmployeeQuerySet:
    """Active employees in name order, the base of directory lookups."""
    return Employee.objects.with_org().active().order_by("user__name", "pk")
