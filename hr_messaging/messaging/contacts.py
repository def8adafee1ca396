"""Who an employee may currently message, grouped the way the rules allow it.

Each group mirrors one allow rule of ``permissions.resolve`` so the list never
offers someone the resolver would refuse.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING

from hr_messaging.messaging.exceptions import surface_infrastructure_errors
from hr_messaging.org.directory import list_department_members
from hr_messaging.org.directory import list_direct_reports
from hr_messaging.org.directory import list_hr_members
from hr_messaging.org.directory import list_managers
from hr_messaging.org.directory import manager_of

if TYPE_CHECKING:  # import for type checking only
    from hr_messaging.employees.models import Employee


@dataclass
class Contacts:
    employee: Employee
    manager: Employee | None = None
    direct_reports: list[Employee] = field(default_factory=list)
    same_department: list[Employee] = field(default_factory=list)
    hr: list[Employee] = field(default_factory=list)
    other_managers: list[Employee] = field(default_factory=list)

    @property
    def is_manager(self) -> bool:
        return bool(self.direct_reports)

    def contact_ids(self) -> set[int]:
        ids = {e.pk for e in self.direct_reports}
        ids.update(e.pk for e in self.same_department)
        ids.update(e.pk for e in self.hr)
        ids.update(e.pk for e in self.other_managers)
        if self.manager is not None:
            ids.add(self.manager.pk)
        return ids

    @property
    def total(self) -> int:
        return len(self.contact_ids())


@surface_infrastructure_errors
def list_contacts(employee: Employee) -> Contacts:
    direct_reports = list(list_direct_reports(employee))
    contacts = Contacts(
        employee=employee,
        manager=manager_of(employee),
        direct_reports=direct_reports,
        same_department=list(
            list_department_members(employee.department_id, exclude=employee)
        ),
        hr=list(list_hr_members(exclude=employee)),
    )
    if direct_reports:
        contacts.other_managers = list(list_managers(exclude=employee))
    return contacts
