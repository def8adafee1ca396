from django.conf import settings
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from hr_messaging.messaging.api.views import EmployeeDirectoryViewSet
from hr_messaging.messaging.api.views import MessagingViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register(
    "messaging/directory",
    EmployeeDirectoryViewSet,
    basename="messaging-directory",
)
router.register("messaging", MessagingViewSet, basename="messaging")


app_name = "api"
urlpatterns = router.urls
