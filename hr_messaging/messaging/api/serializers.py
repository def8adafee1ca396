from __future__ import annotations

from typing import Any

from rest_framework import serializers

from hr_messaging.employees.models import Employee
from hr_messaging.messaging.models import Message


class EmployeeSummarySerializer(serializers.ModelSerializer):
    name = serializers.CharField(read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    department = serializers.CharField(
        source="department.name", read_only=True, default=None
    )
    role = serializers.CharField(source="role.name", read_only=True, default=None)

    class Meta:
        model = Employee
        fields = ("id", "name", "email", "title", "department", "role")
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    """Read serializer for inbox, sent and thread listings."""

    sender = EmployeeSummarySerializer(read_only=True)
    recipient = EmployeeSummarySerializer(read_only=True)
    to_department = serializers.CharField(
        source="to_department.name", read_only=True, default=None
    )
    is_read = serializers.BooleanField(read_only=True)
    escalation_level = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Message
        fields = (
            "id",
            "sender",
            "recipient",
            "to_department",
            "subject",
            "content",
            "message_type",
            "priority",
            "status",
            "is_read",
            "read_at",
            "parent",
            "metadata",
            "escalation_level",
            "created_at",
        )
        read_only_fields = fields


class MessageThreadSerializer(MessageSerializer):
    replies = MessageSerializer(many=True, read_only=True)

    class Meta(MessageSerializer.Meta):
        fields = (*MessageSerializer.Meta.fields, "replies")
        read_only_fields = fields


class ComposeSerializer(serializers.Serializer):
    content = serializers.CharField(trim_whitespace=True)
    subject = serializers.CharField(
        required=False, allow_blank=True, max_length=255, default=""
    )
    priority = serializers.ChoiceField(
        choices=Message.Priority.choices,
        required=False,
        default=Message.Priority.NORMAL,
    )


class SendDirectSerializer(ComposeSerializer):
    recipient_id = serializers.IntegerField(min_value=1)
    message_type = serializers.ChoiceField(
        choices=Message.Type.choices,
        required=False,
        default=Message.Type.DIRECT,
    )
    parent_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class SendToManagerSerializer(ComposeSerializer):
    is_escalation = serializers.BooleanField(required=False, default=False)


class EscalateSerializer(serializers.Serializer):
    content = serializers.CharField(trim_whitespace=True)
    subject = serializers.CharField(
        required=False, allow_blank=True, max_length=255, default=""
    )
    escalate_higher = serializers.BooleanField(required=False, default=False)


class ReplySerializer(serializers.Serializer):
    content = serializers.CharField(trim_whitespace=True)


class PermissionVerdictSerializer(serializers.Serializer):
    allowed = serializers.BooleanField()
    matched_rule = serializers.CharField(allow_null=True)
    reason = serializers.CharField(required=False)
    suggestion = serializers.CharField(required=False)


class BroadcastResultSerializer(serializers.Serializer):
    department = serializers.CharField(source="department.name")
    delivered = serializers.IntegerField()
    failed = serializers.IntegerField()


class ContactsSerializer(serializers.Serializer):
    employee = serializers.SerializerMethodField()
    manager = EmployeeSummarySerializer(allow_null=True)
    direct_reports = EmployeeSummarySerializer(many=True)
    same_department = EmployeeSummarySerializer(many=True)
    hr = EmployeeSummarySerializer(many=True)
    other_managers = EmployeeSummarySerializer(many=True)
    total = serializers.IntegerField()

    def get_employee(self, obj) -> dict[str, Any]:
        employee = obj.employee
        return {
            "id": employee.id,
            "name": employee.name,
            "department": employee.department.name if employee.department else None,
            "role": employee.role.name if employee.role else None,
            "is_manager": obj.is_manager,
        }


class EscalationStepSerializer(serializers.Serializer):
    level = serializers.IntegerField()
    employee = EmployeeSummarySerializer()
    is_hr = serializers.BooleanField()
