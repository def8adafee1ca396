"""Typed failures raised by the messaging services.

They derive from DRF's ``APIException`` so the API layer can render them with
their status code and structured payload without per-view handling.
"""

from __future__ import annotations

import functools
import logging
from typing import Any

from django.db import InterfaceError
from django.db import OperationalError
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException

logger = logging.getLogger(__name__)


class MessagingError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Messaging request failed.")
    default_code = "messaging_error"

    def __init__(
        self,
        detail: str | None = None,
        *,
        reason: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(detail)
        self.reason = reason
        self.suggestion = suggestion

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": str(self.detail),
            "code": self.default_code,
        }
        if self.reason:
            payload["reason"] = self.reason
        if self.suggestion:
            payload["suggestion"] = self.suggestion
        return payload


class EmployeeNotFound(MessagingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Employee not found.")
    default_code = "employee_not_found"


class MessageNotAllowed(MessagingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Message not allowed.")
    default_code = "message_not_allowed"


class NoManagerAssigned(MessagingError):
    default_detail = _("You do not have a manager assigned.")
    default_code = "no_manager_assigned"


class HRDepartmentNotFound(MessagingError):
    default_detail = _("HR department not found.")
    default_code = "hr_department_not_found"


class NoHREmployees(MessagingError):
    default_detail = _("No HR employees found.")
    default_code = "no_hr_employees"


class NoDepartmentMembers(MessagingError):
    default_detail = _("No other members in your department.")
    default_code = "no_department_members"


class Forbidden(MessagingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("You are not allowed to perform this action.")
    default_code = "forbidden"


class CannotReply(MessagingError):
    default_detail = _("Cannot reply to this message.")
    default_code = "cannot_reply"


class MessageValidationError(MessagingError):
    default_detail = _("Invalid message.")
    default_code = "validation_error"


class MessageNotFound(MessagingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Message not found.")
    default_code = "message_not_found"


class MessagingUnavailable(MessagingError):
    """Directory or message store could not be reached; safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = _("Messaging is temporarily unavailable, please retry.")
    default_code = "messaging_unavailable"


def surface_infrastructure_errors(func):
    """Re-raise connectivity failures as ``MessagingUnavailable``."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.exception("Messaging storage failure in %s", func.__name__)
            raise MessagingUnavailable from exc

    return wrapper
