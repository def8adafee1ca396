from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any

from hr_messaging.realtime.socketio import emit_event_to_employee

if TYPE_CHECKING:  # import for type checking only
    from hr_messaging.messaging.models import Message

logger = logging.getLogger(__name__)

MESSAGE_EVENT = "message"
PREVIEW_LENGTH = 140


def build_message_payload(message: Message) -> dict[str, Any]:
    sender = message.sender
    return {
        "id": message.id,
        "subject": message.subject,
        "preview": message.content[:PREVIEW_LENGTH],
        "type": message.message_type,
        "priority": message.priority,
        "parent_id": message.parent_id,
        "sender": {"id": sender.id, "name": sender.name} if sender else None,
        "created_at": message.created_at.isoformat() if message.created_at else None,
    }


def publish_message_delivered(message: Message) -> None:
    """Push a newly delivered message to the recipient's live sessions.

    Delivery is fire-and-forget: the message is already stored, so a push
    failure is logged and never propagated to the sender.
    """

    try:
        emit_event_to_employee(
            message.recipient_id,
            MESSAGE_EVENT,
            build_message_payload(message),
        )
    except Exception:  # noqa: BLE001 - push must degrade, not fail the send
        logger.warning(
            "Realtime push for message %s to employee %s failed",
            message.id,
            message.recipient_id,
            exc_info=True,
        )
