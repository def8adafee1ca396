"""Socket.IO server pushing messaging events to connected employees.

Frontend convention:
- URL base: ws://<host>:8000
- Socket.IO path: /ws/messaging/
- Auth: `query.token` or `auth.token` (JWT access token)

Each connection joins a per-user and a per-employee room; publishers address
employees through ``emit_event_to_employee``. When ``SOCKETIO_MESSAGE_QUEUE``
points at Redis, emits from any worker process reach every socket server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError

logger = logging.getLogger(__name__)


def _client_manager() -> socketio.AsyncManager | None:
    url = getattr(settings, "SOCKETIO_MESSAGE_QUEUE", "")
    if not url:
        return None
    return socketio.AsyncRedisManager(url)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
    client_manager=_client_manager(),
    logger=False,
    engineio_logger=False,
)


@dataclass(frozen=True)
class EmployeeRealtimeContext:
    user_id: int
    employee_id: int | None


def room_for_user(user_id: int) -> str:
    return f"user_{int(user_id)}"


def room_for_employee(employee_id: int) -> str:
    return f"employee_{int(employee_id)}"


@database_sync_to_async
def _get_context_from_access_token(token: str) -> EmployeeRealtimeContext:
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    user = jwt_auth.get_user(validated)

    employee = getattr(user, "employee", None)
    employee_id = getattr(employee, "id", None)
    return EmployeeRealtimeContext(
        user_id=int(user.id),
        employee_id=int(employee_id) if employee_id else None,
    )


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Read the JWT from the query string, falling back to ``auth.token``.

    python-socketio hands over an ASGI scope (``query_string`` bytes), a WSGI
    environ (``QUERY_STRING`` str), or an environ wrapping ``asgi.scope``.
    """

    scope: Any = environ
    if isinstance(environ, dict) and isinstance(environ.get("asgi.scope"), dict):
        scope = environ["asgi.scope"]

    raw: str | bytes = ""
    if isinstance(scope, dict):
        raw = scope.get("query_string") or scope.get("QUERY_STRING") or ""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode(errors="ignore")

    token = parse_qs(str(raw)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token
    return None


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    token = _extract_token(environ, auth)
    if not token:
        msg = "unauthorized"
        raise ConnectionRefusedError(msg)

    try:
        ctx = await _get_context_from_access_token(token)
    except TokenError as exc:
        # Frontend expects this exact string to trigger refresh.
        msg = "jwt_expired" if "expired" in str(exc).lower() else "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except AuthenticationFailed as exc:  # user not found / inactive, etc.
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except Exception as exc:
        logger.exception("Socket.IO connect error")
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc

    await sio.save_session(
        sid,
        {
            "user_id": ctx.user_id,
            "employee_id": ctx.employee_id,
        },
    )
    await sio.enter_room(sid, room_for_user(ctx.user_id))
    if ctx.employee_id is not None:
        await sio.enter_room(sid, room_for_employee(ctx.employee_id))


@sio.event
async def disconnect(sid: str):
    # Rooms/session are cleaned up automatically.
    _ = sid


def emit_event_to_room(room: str, event: str, payload: dict[str, Any]) -> None:
    """Emit an event to a room from sync Django code."""

    async_to_sync(sio.emit)(event, payload, room=room)


def emit_event_to_employee(
    employee_id: int,
    event: str,
    payload: dict[str, Any],
) -> None:
    emit_event_to_room(room_for_employee(employee_id), event, payload)
