from django.db.models.signals import post_save
from django.db.transaction import on_commit
from django.dispatch import receiver

from hr_messaging.realtime.events.messages import publish_message_delivered

from .models import Message


@receiver(post_save, sender=Message)
def push_delivered_message(sender, instance, created, **kwargs):
    if created:
        on_commit(lambda: publish_message_delivered(instance))
