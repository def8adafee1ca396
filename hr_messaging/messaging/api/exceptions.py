from rest_framework.response import Response
from rest_framework.views import exception_handler
from rest_framework.views import set_rollback

from hr_messaging.messaging.exceptions import MessagingError


def messaging_exception_handler(exc, context):
    """Render messaging failures as ``{"error", "code", "reason"?, "suggestion"?}``.

    Anything else falls through to DRF's default handler.
    """

    if isinstance(exc, MessagingError):
        set_rollback()
        return Response(exc.as_payload(), status=exc.status_code)
    return exception_handler(exc, context)
