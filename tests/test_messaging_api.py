"""End-to-end checks of the messaging endpoints under /api/v1/messaging/."""

from django.contrib.auth import get_user_model
from rest_framework import status

from hr_messaging.messaging.models import Message
from tests.mixins import MessagingAPITestCase


class SendEndpointsTests(MessagingAPITestCase):
    def test_send_direct(self):
        response = self.post(
            "messaging-send",
            as_="e1",
            payload={
                "recipient_id": self.employee("e2").pk,
                "content": "Code review please",
                "subject": "PR 42",
                "priority": "high",
            },
        )
        self.assert_http_status(response, status.HTTP_201_CREATED)
        assert response.data["recipient"]["id"] == self.employee("e2").pk
        assert response.data["sender"]["id"] == self.employee("e1").pk
        assert response.data["priority"] == "high"
        assert response.data["status"] == "delivered"
        assert response.data["is_read"] is False

    def test_send_direct_denied(self):
        response = self.post(
            "messaging-send",
            as_="e1",
            payload={"recipient_id": self.employee("s1").pk, "content": "Hi"},
        )
        self.assert_error(response, status.HTTP_403_FORBIDDEN, "message_not_allowed")
        assert "Engineering" in response.data["reason"]
        assert response.data["suggestion"]
        assert not Message.objects.exists()

    def test_send_direct_unknown_recipient(self):
        response = self.post(
            "messaging-send",
            as_="e1",
            payload={"recipient_id": 999_999, "content": "Hi"},
        )
        self.assert_error(response, status.HTTP_404_NOT_FOUND, "employee_not_found")

    def test_send_direct_requires_content(self):
        response = self.post(
            "messaging-send",
            as_="e1",
            payload={"recipient_id": self.employee("e2").pk, "content": "   "},
        )
        self.assert_http_status(response, status.HTTP_400_BAD_REQUEST)
        assert "content" in response.data

    def test_send_to_manager(self):
        response = self.post(
            "messaging-send-to-manager",
            as_="e1",
            payload={"content": "Server on fire", "is_escalation": True},
        )
        self.assert_http_status(response, status.HTTP_201_CREATED)
        assert response.data["recipient"]["id"] == self.employee("manager").pk
        assert response.data["message_type"] == "escalation"
        assert response.data["priority"] == "urgent"

    def test_send_to_manager_without_manager(self):
        response = self.post(
            "messaging-send-to-manager",
            as_="director",
            payload={"content": "Hello"},
        )
        self.assert_error(response, status.HTTP_400_BAD_REQUEST, "no_manager_assigned")

    def test_send_to_hr(self):
        response = self.post(
            "messaging-send-to-hr",
            as_="s1",
            payload={"content": "Benefits question"},
        )
        self.assert_http_status(response, status.HTTP_201_CREATED)
        assert response.data["recipient"]["id"] == self.employee("h1").pk
        assert response.data["subject"] == "HR Inquiry"
        assert response.data["message_type"] == "request"

    def test_send_to_department(self):
        response = self.post(
            "messaging-send-to-department",
            as_="manager",
            payload={"content": "Retro on Friday"},
        )
        self.assert_http_status(response, status.HTTP_201_CREATED)
        assert response.data == {
            "department": "Engineering",
            "delivered": 2,
            "failed": 0,
        }

    def test_send_to_department_requires_reports(self):
        response = self.post(
            "messaging-send-to-department",
            as_="e1",
            payload={"content": "Cake in the kitchen"},
        )
        self.assert_error(response, status.HTTP_403_FORBIDDEN, "forbidden")
        assert response.data["suggestion"]

    def test_escalate_higher(self):
        response = self.post(
            "messaging-escalate",
            as_="e1",
            payload={"content": "Blocked for a week", "escalate_higher": True},
        )
        self.assert_http_status(response, status.HTTP_201_CREATED)
        assert response.data["recipient"]["id"] == self.employee("director").pk
        assert response.data["escalation_level"] == 2  # noqa: PLR2004


class InboxEndpointsTests(MessagingAPITestCase):
    def setUp(self):
        super().setUp()
        self.messages = [
            Message.objects.create(
                recipient=self.employee("e2"),
                sender=self.employee("e1"),
                subject=f"Note {i}",
                content=f"Body {i}",
            )
            for i in range(3)
        ]

    def test_inbox_lists_newest_first_with_unread_count(self):
        response = self.get("messaging-inbox", as_="e2")
        self.assert_http_status(response, status.HTTP_200_OK)
        assert response.data["count"] == 3  # noqa: PLR2004
        assert response.data["unread_count"] == 3  # noqa: PLR2004
        ids = [m["id"] for m in response.data["results"]]
        assert ids == [m.pk for m in reversed(self.messages)]

    def test_inbox_pagination(self):
        response = self.get("messaging-inbox", as_="e2", data={"limit": 1})
        assert len(response.data["results"]) == 1
        assert response.data["next"]

    def test_inbox_unread_only(self):
        self.get("messaging-read", as_="e2", reverse_kwargs={"pk": self.messages[0].pk})
        response = self.get("messaging-inbox", as_="e2", data={"unread_only": "true"})
        assert response.data["count"] == 2  # noqa: PLR2004
        assert response.data["unread_count"] == 2  # noqa: PLR2004

    def test_inbox_unread_only_false_lists_everything(self):
        self.get("messaging-read", as_="e2", reverse_kwargs={"pk": self.messages[0].pk})
        response = self.get("messaging-inbox", as_="e2", data={"unread_only": "false"})
        assert response.data["count"] == 3  # noqa: PLR2004
        assert response.data["unread_count"] == 2  # noqa: PLR2004

    def test_sent(self):
        response = self.get("messaging-sent", as_="e1")
        self.assert_http_status(response, status.HTTP_200_OK)
        assert response.data["count"] == 3  # noqa: PLR2004

    def test_read_is_idempotent(self):
        kwargs = {"pk": self.messages[0].pk}
        first = self.get("messaging-read", as_="e2", reverse_kwargs=kwargs)
        self.assert_http_status(first, status.HTTP_200_OK)
        assert first.data["status"] == "read"
        assert first.data["replies"] == []
        second = self.get("messaging-read", as_="e2", reverse_kwargs=kwargs)
        assert second.data["read_at"] == first.data["read_at"]

    def test_read_other_inbox_is_not_found(self):
        response = self.get(
            "messaging-read", as_="e1", reverse_kwargs={"pk": self.messages[0].pk}
        )
        self.assert_error(response, status.HTTP_404_NOT_FOUND, "message_not_found")

    def test_reply(self):
        response = self.post(
            "messaging-reply",
            as_="e2",
            reverse_kwargs={"pk": self.messages[1].pk},
            payload={"content": "Got it"},
        )
        self.assert_http_status(response, status.HTTP_201_CREATED)
        assert response.data["recipient"]["id"] == self.employee("e1").pk
        assert response.data["subject"] == "Re: Note 1"
        assert response.data["parent"] == self.messages[1].pk

    def test_reply_to_system_message(self):
        system = Message.objects.create(recipient=self.employee("e2"), content="Hi")
        response = self.post(
            "messaging-reply",
            as_="e2",
            reverse_kwargs={"pk": system.pk},
            payload={"content": "Thanks"},
        )
        self.assert_error(response, status.HTTP_400_BAD_REQUEST, "cannot_reply")


class DiscoveryEndpointsTests(MessagingAPITestCase):
    def test_contacts(self):
        response = self.get("messaging-contacts", as_="e1")
        self.assert_http_status(response, status.HTTP_200_OK)
        assert response.data["employee"]["department"] == "Engineering"
        assert response.data["employee"]["is_manager"] is False
        assert response.data["manager"]["id"] == self.employee("manager").pk
        assert [e["id"] for e in response.data["hr"]] == [self.employee("h1").pk]
        assert response.data["total"] == 3  # noqa: PLR2004

    def test_can_message(self):
        response = self.get(
            "messaging-can-message",
            as_="e1",
            reverse_kwargs={"target_id": self.employee("h1").pk},
        )
        self.assert_http_status(response, status.HTTP_200_OK)
        assert response.data == {"allowed": True, "matched_rule": "contact_hr"}

    def test_can_message_denied(self):
        response = self.get(
            "messaging-can-message",
            as_="e1",
            reverse_kwargs={"target_id": self.employee("s1").pk},
        )
        self.assert_http_status(response, status.HTTP_200_OK)
        assert response.data["allowed"] is False
        assert response.data["reason"]

    def test_escalation_chain(self):
        response = self.get("messaging-escalation-chain", as_="e1")
        self.assert_http_status(response, status.HTTP_200_OK)
        steps = [(s["level"], s["employee"]["id"], s["is_hr"]) for s in response.data]
        assert steps == [
            (1, self.employee("manager").pk, False),
            (2, self.employee("director").pk, False),
            (3, self.employee("h1").pk, True),
        ]

    def test_directory_search(self):
        response = self.get("messaging-directory-list", as_="e1", data={"q": "h1"})
        self.assert_http_status(response, status.HTTP_200_OK)
        assert [e["id"] for e in response.data["results"]] == [self.employee("h1").pk]

    def test_directory_by_department(self):
        response = self.get(
            "messaging-directory-list", as_="e1", data={"department": "sal"}
        )
        self.assert_http_status(response, status.HTTP_200_OK)
        assert [e["id"] for e in response.data["results"]] == [self.employee("s1").pk]

    def test_directory_skips_inactive(self):
        e2 = self.employee("e2")
        e2.is_active = False
        e2.save(update_fields=["is_active"])
        response = self.get(
            "messaging-directory-list", as_="e1", data={"department": "Engineering"}
        )
        ids = {e["id"] for e in response.data["results"]}
        assert ids == {self.employee("manager").pk, self.employee("e1").pk}

    def test_directory_is_paginated(self):
        response = self.get(
            "messaging-directory-list",
            as_="e1",
            data={"department": "Engineering", "limit": 1},
        )
        assert response.data["count"] == 3  # noqa: PLR2004
        assert len(response.data["results"]) == 1

    def test_directory_requires_a_query(self):
        response = self.get("messaging-directory-list", as_="e1")
        self.assert_http_status(response, status.HTTP_400_BAD_REQUEST)
        response = self.get("messaging-directory-list", as_="e1", data={"q": "  "})
        self.assert_http_status(response, status.HTTP_400_BAD_REQUEST)


class AccessTests(MessagingAPITestCase):
    def test_anonymous_is_rejected(self):
        response = self.client.get("/api/v1/messaging/inbox/")
        self.assert_http_status(response, status.HTTP_401_UNAUTHORIZED)

    def test_account_without_employee_record(self):
        user = get_user_model().objects.create_user(
            username="contractor",
            email="contractor@example.com",
            password="x",  # noqa: S106
        )
        self.client.force_authenticate(user=user)
        response = self.client.get("/api/v1/messaging/inbox/")
        self.assert_error(response, status.HTTP_404_NOT_FOUND, "employee_not_found")
