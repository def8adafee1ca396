"""Hierarchy-based messaging permissions.

``resolve`` walks an ordered rule list and stops at the first rule that
matches. Order matters because one pair of employees often satisfies several
rules (a manager and a subordinate sharing a department match both
``same_department`` and ``direct_report``); the first one wins and is the one
reported back.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any

from django.db import models
from django.utils.translation import gettext_lazy as _

from hr_messaging.org.directory import has_direct_reports
from hr_messaging.org.directory import is_admin_role
from hr_messaging.org.directory import is_hr_department
from hr_messaging.org.directory import is_management_role
from hr_messaging.org.directory import manager_of
from hr_messaging.org.directory import same_department

if TYPE_CHECKING:  # import for type checking only
    from collections.abc import Callable

    from hr_messaging.employees.models import Employee

DENIAL_SUGGESTION = (
    "To contact someone outside your department, please ask your manager "
    "or HR to facilitate."
)


class RuleName(models.TextChoices):
    ADMIN_ACCESS = "admin_access", _("Admin access")
    HR_ACCESS = "hr_access", _("HR access")
    CONTACT_HR = "contact_hr", _("Contact HR")
    DIRECT_MANAGER = "direct_manager", _("Direct manager")
    SAME_DEPARTMENT = "same_department", _("Same department")
    DIRECT_REPORT = "direct_report", _("Direct report")
    MANAGER_TO_MANAGER = "manager_to_manager", _("Manager to manager")
    HOD_TO_HOD = "hod_to_hod", _("Head of department to head of department")
    HOD_TO_MANAGEMENT = "hod_to_management", _("Head of department to management")


@dataclass(frozen=True)
class PermissionVerdict:
    allowed: bool
    matched_rule: RuleName | None = None
    reason: str = ""
    suggestion: str = ""

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "allowed": self.allowed,
            "matched_rule": str(self.matched_rule) if self.matched_rule else None,
        }
        if self.reason:
            data["reason"] = self.reason
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


def is_head_of_department(employee: Employee) -> bool:
    """Top of a department's local management chain.

    The employee manages someone and either reports to nobody or reports to
    someone outside their own department.
    """

    if not has_direct_reports(employee):
        return False
    manager = manager_of(employee)
    return manager is None or not same_department(employee, manager)


def sender_is_admin(sender: Employee, recipient: Employee) -> bool:
    return is_admin_role(sender.role)


def sender_in_hr(sender: Employee, recipient: Employee) -> bool:
    return is_hr_department(sender.department)


def recipient_in_hr(sender: Employee, recipient: Employee) -> bool:
    return is_hr_department(recipient.department)


def recipient_is_manager(sender: Employee, recipient: Employee) -> bool:
    manager = manager_of(sender)
    return manager is not None and manager.pk == recipient.pk


def share_department(sender: Employee, recipient: Employee) -> bool:
    return same_department(sender, recipient)


def recipient_is_report(sender: Employee, recipient: Employee) -> bool:
    return recipient.line_manager_id == sender.pk and recipient.pk != sender.pk


def both_manage_people(sender: Employee, recipient: Employee) -> bool:
    return has_direct_reports(sender) and has_direct_reports(recipient)


def both_head_departments(sender: Employee, recipient: Employee) -> bool:
    return is_head_of_department(sender) and is_head_of_department(recipient)


def head_to_management(sender: Employee, recipient: Employee) -> bool:
    return is_management_role(recipient.role) and is_head_of_department(sender)


RULES: tuple[tuple[RuleName, Callable[[Employee, Employee], bool]], ...] = (
    (RuleName.ADMIN_ACCESS, sender_is_admin),
    (RuleName.HR_ACCESS, sender_in_hr),
    (RuleName.CONTACT_HR, recipient_in_hr),
    (RuleName.DIRECT_MANAGER, recipient_is_manager),
    (RuleName.SAME_DEPARTMENT, share_department),
    (RuleName.DIRECT_REPORT, recipient_is_report),
    (RuleName.MANAGER_TO_MANAGER, both_manage_people),
    (RuleName.HOD_TO_HOD, both_head_departments),
    (RuleName.HOD_TO_MANAGEMENT, head_to_management),
)


def denial_for(sender: Employee) -> PermissionVerdict:
    department = sender.department.name if sender.department else "none"
    return PermissionVerdict(
        allowed=False,
        reason=(
            "You can only message your manager, HR, or colleagues in your "
            f"department ({department})."
        ),
        suggestion=DENIAL_SUGGESTION,
    )


def resolve(sender: Employee, recipient: Employee) -> PermissionVerdict:
    """Decide whether ``sender`` may message ``recipient``.

    Both employees must exist; callers report unknown ids before calling.
    """

    for rule, predicate in RULES:
        if predicate(sender, recipient):
            return PermissionVerdict(allowed=True, matched_rule=rule)
    return denial_for(sender)
