from django.db import models
from django.utils.translation import gettext_lazy as _


class MessageQuerySet(models.QuerySet):
    def with_people(self):
        return self.select_related(
            "sender__user",
            "sender__department",
            "recipient__user",
            "recipient__department",
            "to_department",
        )

    def for_recipient(self, employee):
        return self.filter(recipient=employee)

    def for_sender(self, employee):
        return self.filter(sender=employee)

    def unread(self):
        return self.filter(read_at__isnull=True)


class Message(models.Model):
    """A message delivered to exactly one employee.

    Department announcements fan out into one row per recipient, so every row
    is read and replied to independently. ``sender`` is empty for
    system-originated messages, which cannot be replied to.
    """

    class Type(models.TextChoices):
        DIRECT = "direct", _("Direct")
        REQUEST = "request", _("Request")
        ANNOUNCEMENT = "announcement", _("Announcement")
        ESCALATION = "escalation", _("Escalation")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        NORMAL = "normal", _("Normal")
        HIGH = "high", _("High")
        URGENT = "urgent", _("Urgent")

    class Status(models.TextChoices):
        DELIVERED = "delivered", _("Delivered")
        READ = "read", _("Read")

    recipient = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    sender = models.ForeignKey(
        "employees.Employee",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_messages",
    )
    to_department = models.ForeignKey(
        "org.Department",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="announcements",
    )
    subject = models.CharField(max_length=255, blank=True)
    content = models.TextField()
    message_type = models.CharField(
        max_length=20, choices=Type.choices, default=Type.DIRECT
    )
    priority = models.CharField(
        max_length=10, choices=Priority.choices, default=Priority.NORMAL
    )
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.DELIVERED
    )
    read_at = models.DateTimeField(null=True, blank=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="replies",
    )
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = MessageQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-pk"]
        indexes = [
            models.Index(fields=["recipient", "read_at"], name="message_inbox_idx"),
            models.Index(fields=["sender", "created_at"], name="message_sent_idx"),
        ]

    def __str__(self):  # pragma: no cover - trivial
        return f"Message({self.pk}: {self.sender_id} -> {self.recipient_id})"

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    @property
    def escalation_level(self) -> int | None:
        if not isinstance(self.metadata, dict):
            return None
        return self.metadata.get("escalation_level")
