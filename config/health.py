from __future__ import annotations

from typing import Any

import redis
from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse

from hr_messaging.messaging.models import Message


def check_message_store() -> dict[str, Any]:
    try:
        Message.objects.only("pk").first()
    except DatabaseError as exc:
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


def check_realtime_queue() -> dict[str, Any]:
    """Ping the Socket.IO message queue; single-process setups have none."""
    url = getattr(settings, "SOCKETIO_MESSAGE_QUEUE", "")
    if not url:
        return {"ok": True, "skipped": True}
    try:
        client = redis.Redis.from_url(
            url,
            socket_timeout=0.5,
            socket_connect_timeout=0.5,
        )
        client.ping()
    except redis.RedisError as exc:
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


def health(request):
    components = {
        "messages": check_message_store(),
        "realtime": check_realtime_queue(),
    }

    if components["messages"]["ok"]:
        # Realtime pushes are best-effort; messaging still works without them.
        status = "ok" if components["realtime"]["ok"] else "degraded"
        http_status = 200
    else:
        status = "down"
        http_status = 503

    return JsonResponse(
        {"status": status, "components": components},
        status=http_status,
    )
