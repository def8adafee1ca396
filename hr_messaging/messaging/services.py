"""Message routing and inbox state transitions.

Each send operation validates its input, resolves the recipient(s) from the
organization directory, applies the hierarchy rules where they are not implied
by the route itself, and persists one Message row per recipient. Realtime
delivery happens after commit (see ``signals``) and never affects the send.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import DatabaseError
from django.db import transaction
from django.db.models import Prefetch
from django.db.models import Q
from django.utils import timezone

from hr_messaging.messaging.exceptions import CannotReply
from hr_messaging.messaging.exceptions import EmployeeNotFound
from hr_messaging.messaging.exceptions import Forbidden
from hr_messaging.messaging.exceptions import HRDepartmentNotFound
from hr_messaging.messaging.exceptions import MessageNotAllowed
from hr_messaging.messaging.exceptions import MessageNotFound
from hr_messaging.messaging.exceptions import MessageValidationError
from hr_messaging.messaging.exceptions import MessagingUnavailable
from hr_messaging.messaging.exceptions import NoDepartmentMembers
from hr_messaging.messaging.exceptions import NoHREmployees
from hr_messaging.messaging.exceptions import NoManagerAssigned
from hr_messaging.messaging.exceptions import surface_infrastructure_errors
from hr_messaging.messaging.models import Message
from hr_messaging.messaging.permissions import DENIAL_SUGGESTION
from hr_messaging.messaging.permissions import PermissionVerdict
from hr_messaging.messaging.permissions import resolve
from hr_messaging.org.directory import find_hr_department
from hr_messaging.org.directory import get_employee
from hr_messaging.org.directory import get_employee_by_account_id
from hr_messaging.org.directory import has_direct_reports
from hr_messaging.org.directory import is_admin_role
from hr_messaging.org.directory import list_department_members
from hr_messaging.org.directory import manager_of
from hr_messaging.org.directory import most_senior_hr_member

if TYPE_CHECKING:  # import for type checking only
    from hr_messaging.employees.models import Employee
    from hr_messaging.messaging.models import MessageQuerySet
    from hr_messaging.org.models import Department

logger = logging.getLogger(__name__)

SUBJECT_MAX_LENGTH = 255
SELF_MESSAGE_REASON = "You cannot message yourself."


@dataclass(frozen=True)
class BroadcastResult:
    department: Department
    delivered: int
    failed: int = 0


def _clean_content(content) -> str:
    text = content.strip() if isinstance(content, str) else ""
    if not text:
        msg = "Message content is required."
        raise MessageValidationError(msg)
    return text


def _clean_subject(subject) -> str:
    text = subject.strip() if isinstance(subject, str) else ""
    return text[:SUBJECT_MAX_LENGTH]


def _clean_choice(value, choices, field: str) -> str:
    if value not in choices.values:
        msg = f"Invalid {field}: {value!r}."
        raise MessageValidationError(msg)
    return value


def _message_pk(value) -> int:
    if isinstance(value, bool):
        raise MessageNotFound
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MessageNotFound from None


def employee_for_user(user) -> Employee:
    """Return the employee record linked to an authenticated account."""
    employee = get_employee_by_account_id(getattr(user, "pk", None))
    if employee is None:
        msg = "You must be linked to an employee record to use messaging."
        raise EmployeeNotFound(msg)
    return employee


def _deny(verdict: PermissionVerdict, sender: Employee, recipient: Employee):
    logger.info(
        "Message from employee %s to employee %s denied: %s",
        sender.pk,
        recipient.pk,
        verdict.reason,
    )
    raise MessageNotAllowed(reason=verdict.reason, suggestion=verdict.suggestion)


@surface_infrastructure_errors
def check_can_message(sender: Employee, target_id) -> PermissionVerdict:
    target = get_employee(target_id)
    if target is None:
        msg = "Target employee not found."
        raise EmployeeNotFound(msg)
    if target.pk == sender.pk:
        return PermissionVerdict(
            allowed=False,
            reason=SELF_MESSAGE_REASON,
            suggestion=DENIAL_SUGGESTION,
        )
    return resolve(sender, target)


@surface_infrastructure_errors
def send_direct(  # noqa: PLR0913
    sender: Employee,
    recipient_id,
    content,
    *,
    subject: str = "",
    priority: str = Message.Priority.NORMAL,
    parent_id=None,
    message_type: str = Message.Type.DIRECT,
) -> Message:
    text = _clean_content(content)
    priority = _clean_choice(priority, Message.Priority, "priority")
    message_type = _clean_choice(message_type, Message.Type, "message type")
    if recipient_id in (None, ""):
        msg = "Recipient employee ID is required."
        raise MessageValidationError(msg)

    recipient = get_employee(recipient_id)
    if recipient is None:
        msg = "Recipient employee not found."
        raise EmployeeNotFound(msg)
    if recipient.pk == sender.pk:
        raise MessageNotAllowed(
            reason=SELF_MESSAGE_REASON,
            suggestion=DENIAL_SUGGESTION,
        )

    parent = None
    if parent_id not in (None, ""):
        # Threads can only continue conversations the sender took part in.
        parent = (
            Message.objects.filter(Q(recipient=sender) | Q(sender=sender))
            .filter(pk=_message_pk(parent_id))
            .first()
        )
        if parent is None:
            msg = "Parent message not found."
            raise MessageNotFound(msg)

    verdict = resolve(sender, recipient)
    if not verdict.allowed:
        _deny(verdict, sender, recipient)

    message = Message.objects.create(
        recipient=recipient,
        sender=sender,
        subject=_clean_subject(subject),
        content=text,
        message_type=message_type,
        priority=priority,
        status=Message.Status.DELIVERED,
        parent=parent,
    )
    logger.info(
        "Direct message %s sent from employee %s to employee %s (%s)",
        message.pk,
        sender.pk,
        recipient.pk,
        verdict.matched_rule,
    )
    return message


@surface_infrastructure_errors
def send_to_manager(
    sender: Employee,
    content,
    *,
    subject: str = "",
    priority: str = Message.Priority.NORMAL,
    is_escalation: bool = False,
) -> Message:
    text = _clean_content(content)
    priority = _clean_choice(priority, Message.Priority, "priority")
    manager = manager_of(sender)
    if manager is None:
        raise NoManagerAssigned

    # Reaching one's own manager needs no rule evaluation.
    subject = _clean_subject(subject)
    if is_escalation:
        message_type = Message.Type.ESCALATION
        priority = Message.Priority.URGENT
        subject = subject or "Escalation"
    else:
        message_type = Message.Type.DIRECT

    message = Message.objects.create(
        recipient=manager,
        sender=sender,
        subject=subject,
        content=text,
        message_type=message_type,
        priority=priority,
        status=Message.Status.DELIVERED,
    )
    logger.info(
        "Message %s sent from employee %s to manager %s",
        message.pk,
        sender.pk,
        manager.pk,
    )
    return message


@surface_infrastructure_errors
def send_to_hr(
    sender: Employee,
    content,
    *,
    subject: str = "",
    priority: str = Message.Priority.NORMAL,
) -> Message:
    text = _clean_content(content)
    priority = _clean_choice(priority, Message.Priority, "priority")
    hr_department = find_hr_department()
    if hr_department is None:
        raise HRDepartmentNotFound

    recipient = most_senior_hr_member(exclude=sender)
    if recipient is None:
        raise NoHREmployees

    message = Message.objects.create(
        recipient=recipient,
        sender=sender,
        subject=_clean_subject(subject) or "HR Inquiry",
        content=text,
        message_type=Message.Type.REQUEST,
        priority=priority,
        status=Message.Status.DELIVERED,
    )
    logger.info(
        "HR request %s sent from employee %s to HR employee %s",
        message.pk,
        sender.pk,
        recipient.pk,
    )
    return message


@surface_infrastructure_errors
def send_to_department(
    sender: Employee,
    content,
    *,
    subject: str = "",
    priority: str = Message.Priority.NORMAL,
) -> BroadcastResult:
    """Fan out one announcement row per other member of the sender's department.

    Rows are written independently: a failing row is logged and counted while
    the remaining members still receive theirs.
    """

    text = _clean_content(content)
    priority = _clean_choice(priority, Message.Priority, "priority")
    if not (has_direct_reports(sender) or is_admin_role(sender.role)):
        msg = "Only managers can send team announcements."
        raise Forbidden(
            msg,
            suggestion="Ask your manager to send announcements on your behalf.",
        )
    if sender.department_id is None:
        msg = "You are not assigned to a department."
        raise NoDepartmentMembers(msg)

    members = list(
        list_department_members(sender.department_id, exclude=sender).active()
    )
    if not members:
        raise NoDepartmentMembers

    subject = _clean_subject(subject) or _clean_subject(
        f"Announcement from {sender.name}"
    )
    delivered = 0
    failed = 0
    for member in members:
        try:
            with transaction.atomic():
                Message.objects.create(
                    recipient=member,
                    sender=sender,
                    to_department_id=sender.department_id,
                    subject=subject,
                    content=text,
                    message_type=Message.Type.ANNOUNCEMENT,
                    priority=priority,
                    status=Message.Status.DELIVERED,
                )
        except DatabaseError:
            failed += 1
            logger.exception(
                "Announcement from employee %s to employee %s failed",
                sender.pk,
                member.pk,
            )
        else:
            delivered += 1

    if delivered == 0:
        raise MessagingUnavailable
    logger.info(
        "Announcement from employee %s delivered to %s of %s members of %s",
        sender.pk,
        delivered,
        len(members),
        sender.department,
    )
    return BroadcastResult(
        department=sender.department,
        delivered=delivered,
        failed=failed,
    )


@surface_infrastructure_errors
def escalate_issue(
    sender: Employee,
    content,
    *,
    subject: str = "",
    escalate_higher: bool = False,
) -> Message:
    """Escalate to the manager, or one level above when asked and possible.

    Asking for a higher escalation when the manager reports to nobody (or,
    in a malformed chain, back to the sender) stays at level 1; this is not
    an error.
    """

    text = _clean_content(content)
    manager = manager_of(sender)
    if manager is None:
        raise NoManagerAssigned

    recipient = manager
    level = 1
    if escalate_higher:
        grand_manager = manager_of(manager)
        if grand_manager is not None and grand_manager.pk != sender.pk:
            recipient = grand_manager
            level = 2

    message = Message.objects.create(
        recipient=recipient,
        sender=sender,
        subject=_clean_subject(subject)
        or _clean_subject(f"Escalation from {sender.name}"),
        content=text,
        message_type=Message.Type.ESCALATION,
        priority=Message.Priority.URGENT,
        status=Message.Status.DELIVERED,
        metadata={"escalation_level": level},
    )
    logger.info(
        "Issue %s escalated by employee %s to employee %s (level %s)",
        message.pk,
        sender.pk,
        recipient.pk,
        level,
    )
    return message


def list_inbox(employee: Employee, *, unread_only: bool = False) -> MessageQuerySet:
    qs = Message.objects.with_people().select_related("parent").for_recipient(employee)
    if unread_only:
        qs = qs.unread()
    return qs


def list_sent(employee: Employee) -> MessageQuerySet:
    return Message.objects.with_people().for_sender(employee)


def count_unread(employee: Employee) -> int:
    return Message.objects.for_recipient(employee).unread().count()


@surface_infrastructure_errors
def read_message(employee: Employee, message_id) -> Message:
    """Mark a message from the caller's inbox as read and return its thread.

    The first read stamps ``read_at``; later or concurrent reads leave it
    untouched because the update only matches unread rows.
    """

    message = (
        Message.objects.for_recipient(employee)
        .filter(pk=_message_pk(message_id))
        .first()
    )
    if message is None:
        raise MessageNotFound

    if message.read_at is None:
        Message.objects.filter(pk=message.pk, read_at__isnull=True).update(
            status=Message.Status.READ,
            read_at=timezone.now(),
        )

    replies = Message.objects.with_people().order_by("created_at", "pk")
    return (
        Message.objects.with_people()
        .select_related("parent")
        .prefetch_related(Prefetch("replies", queryset=replies))
        .get(pk=message.pk)
    )


@surface_infrastructure_errors
def reply(employee: Employee, message_id, content) -> Message:
    """Answer a message from the caller's inbox; the reply goes to its sender.

    Replying is checked like a fresh direct message: receiving a message does
    not by itself make its sender reachable.
    """

    text = _clean_content(content)
    original = (
        Message.objects.for_recipient(employee)
        .filter(pk=_message_pk(message_id))
        .first()
    )
    if original is None:
        msg = "Original message not found."
        raise MessageNotFound(msg)
    if original.sender_id is None:
        raise CannotReply

    recipient = get_employee(original.sender_id)
    if recipient is None:
        raise CannotReply
    verdict = resolve(employee, recipient)
    if not verdict.allowed:
        _deny(verdict, employee, recipient)

    message = Message.objects.create(
        recipient=recipient,
        sender=employee,
        subject=_clean_subject(f"Re: {original.subject or 'No subject'}"),
        content=text,
        message_type=Message.Type.DIRECT,
        priority=original.priority,
        status=Message.Status.DELIVERED,
        parent=original,
    )
    logger.info(
        "Reply %s to message %s sent from employee %s to employee %s",
        message.pk,
        original.pk,
        employee.pk,
        recipient.pk,
    )
    return message
