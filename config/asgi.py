"""
ASGI config for the hr_messaging project.

Serves Django's HTTP application with the messaging Socket.IO server mounted
in front of it.
"""

import os

from django.core.asgi import get_asgi_application

# Default to local settings for the local dev image, production otherwise.
if "DJANGO_SETTINGS_MODULE" not in os.environ:
    build_env = os.environ.get("BUILD_ENV", "production").lower()
    default_settings = (
        "config.settings.local"
        if build_env == "local"
        else "config.settings.production"
    )
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", default_settings)

django_application = get_asgi_application()

from socketio import ASGIApp  # noqa: E402

from hr_messaging.realtime.socketio import sio  # noqa: E402

# Socket.IO handles both Engine.IO long-polling and WebSocket upgrades on
# `/ws/messaging/`; every other path goes to Django.
application = ASGIApp(
    sio,
    other_asgi_app=django_application,
    socketio_path="ws/messaging",
)
