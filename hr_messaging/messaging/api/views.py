from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from hr_messaging.messaging import services
from hr_messaging.messaging.contacts import list_contacts
from hr_messaging.messaging.models import Message
from hr_messaging.org import directory as org_directory

from .filters import DirectorySearchFilter
from .filters import EmployeeDirectoryFilter
from .filters import MessageFilter
from .serializers import BroadcastResultSerializer
from .serializers import ComposeSerializer
from .serializers import ContactsSerializer
from .serializers import EmployeeSummarySerializer
from .serializers import EscalateSerializer
from .serializers import EscalationStepSerializer
from .serializers import MessageSerializer
from .serializers import MessageThreadSerializer
from .serializers import PermissionVerdictSerializer
from .serializers import ReplySerializer
from .serializers import SendDirectSerializer
from .serializers import SendToManagerSerializer


class MessagePagination(LimitOffsetPagination):
    default_limit = 50
    max_limit = 100


class DirectoryPagination(LimitOffsetPagination):
    default_limit = 10
    max_limit = 50


class MessagingViewSet(GenericViewSet):
    """Hierarchy-aware messaging for the authenticated employee.

    Every action acts on behalf of the employee linked to ``request.user``;
    accounts without an employee record get ``employee_not_found``.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer
    pagination_class = MessagePagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = MessageFilter
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Message.objects.none()
        return services.list_inbox(self.employee)

    @property
    def employee(self):
        if not hasattr(self, "_employee"):
            self._employee = services.employee_for_user(self.request.user)
        return self._employee

    def _created(self, message: Message) -> Response:
        return Response(
            MessageSerializer(message, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        tags=["Messaging"],
        request=SendDirectSerializer,
        responses={201: MessageSerializer},
    )
    @action(detail=False, methods=["post"], url_path="send")
    def send(self, request):
        serializer = SendDirectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        message = services.send_direct(
            self.employee,
            data["recipient_id"],
            data["content"],
            subject=data["subject"],
            priority=data["priority"],
            parent_id=data["parent_id"],
            message_type=data["message_type"],
        )
        return self._created(message)

    @extend_schema(
        tags=["Messaging"],
        request=SendToManagerSerializer,
        responses={201: MessageSerializer},
    )
    @action(detail=False, methods=["post"], url_path="send-to-manager")
    def send_to_manager(self, request):
        serializer = SendToManagerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        message = services.send_to_manager(
            self.employee,
            data["content"],
            subject=data["subject"],
            priority=data["priority"],
            is_escalation=data["is_escalation"],
        )
        return self._created(message)

    @extend_schema(
        tags=["Messaging"],
        request=ComposeSerializer,
        responses={201: MessageSerializer},
    )
    @action(detail=False, methods=["post"], url_path="send-to-hr")
    def send_to_hr(self, request):
        serializer = ComposeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        message = services.send_to_hr(
            self.employee,
            data["content"],
            subject=data["subject"],
            priority=data["priority"],
        )
        return self._created(message)

    @extend_schema(
        tags=["Messaging"],
        request=ComposeSerializer,
        responses={201: BroadcastResultSerializer},
    )
    @action(detail=False, methods=["post"], url_path="send-to-department")
    def send_to_department(self, request):
        serializer = ComposeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = services.send_to_department(
            self.employee,
            data["content"],
            subject=data["subject"],
            priority=data["priority"],
        )
        return Response(
            BroadcastResultSerializer(result).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        tags=["Messaging"],
        request=EscalateSerializer,
        responses={201: MessageSerializer},
    )
    @action(detail=False, methods=["post"], url_path="escalate")
    def escalate(self, request):
        serializer = EscalateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        message = services.escalate_issue(
            self.employee,
            data["content"],
            subject=data["subject"],
            escalate_higher=data["escalate_higher"],
        )
        return self._created(message)

    @extend_schema(tags=["Messaging"], responses=MessageSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="inbox")
    def inbox(self, request):
        queryset = self.filter_queryset(services.list_inbox(self.employee))
        unread_count = services.count_unread(self.employee)
        page = self.paginate_queryset(queryset)
        if page is not None:
            response = self.get_paginated_response(
                MessageSerializer(page, many=True).data
            )
        else:
            response = Response(
                {"results": MessageSerializer(queryset, many=True).data}
            )
        response.data["unread_count"] = unread_count
        return response

    @extend_schema(tags=["Messaging"], responses=MessageSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="sent")
    def sent(self, request):
        queryset = self.filter_queryset(services.list_sent(self.employee))
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(
                MessageSerializer(page, many=True).data
            )
        return Response(MessageSerializer(queryset, many=True).data)

    @extend_schema(tags=["Messaging"], responses=MessageThreadSerializer)
    @action(detail=True, methods=["get"], url_path="read")
    def read(self, request, pk=None):
        message = services.read_message(self.employee, pk)
        return Response(MessageThreadSerializer(message).data)

    @extend_schema(
        tags=["Messaging"],
        request=ReplySerializer,
        responses={201: MessageSerializer},
    )
    @action(detail=True, methods=["post"], url_path="reply")
    def reply(self, request, pk=None):
        serializer = ReplySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = services.reply(
            self.employee, pk, serializer.validated_data["content"]
        )
        return self._created(message)

    @extend_schema(tags=["Messaging"], responses=ContactsSerializer)
    @action(detail=False, methods=["get"], url_path="contacts")
    def contacts(self, request):
        return Response(ContactsSerializer(list_contacts(self.employee)).data)

    @extend_schema(tags=["Messaging"], responses=PermissionVerdictSerializer)
    @action(
        detail=False,
        methods=["get"],
        url_path=r"can-message/(?P<target_id>\d+)",
    )
    def can_message(self, request, target_id=None):
        verdict = services.check_can_message(self.employee, target_id)
        return Response(verdict.as_dict())

    @extend_schema(
        tags=["Messaging"],
        filters=False,
        responses=EscalationStepSerializer(many=True),
    )
    @action(detail=False, methods=["get"], url_path="escalation-chain")
    def escalation_chain(self, request):
        chain = org_directory.escalation_chain(self.employee)
        return Response(EscalationStepSerializer(chain, many=True).data)


@extend_schema_view(list=extend_schema(tags=["Messaging"]))
class EmployeeDirectoryViewSet(mixins.ListModelMixin, GenericViewSet):
    """Look up active colleagues by name (``q``) or department name."""

    serializer_class = EmployeeSummarySerializer
    permission_classes = [IsAuthenticated]
    pagination_class = DirectoryPagination
    filter_backends = [DjangoFilterBackend, DirectorySearchFilter]
    filterset_class = EmployeeDirectoryFilter
    search_fields = [
        "user__name",
        "user__username",
        "user__first_name",
        "user__last_name",
    ]

    def get_queryset(self):
        return org_directory.list_active_employees()

    def list(self, request, *args, **kwargs):
        terms = (request.query_params.get(p, "").strip() for p in ("q", "department"))
        if not any(terms):
            msg = "Provide q or department."
            raise ValidationError({"detail": msg})
        return super().list(request, *args, **kwargs)
