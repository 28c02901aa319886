"""
Queue publisher for BMM notifications.

Messages are rendered here and handed to the Celery queues named by
BMM_EMAIL_QUEUE and BMM_SMS_QUEUE; `tasks.deliver_email` and
`tasks.deliver_sms` consume them.
"""
import logging

from django.conf import settings

from apps.core.constants import EmailProvider, QueueMessageType

from .services import NotificationTemplateService

logger = logging.getLogger(__name__)

EMAIL = 'EMAIL'
SMS = 'SMS'


class NotificationDispatcher:
    """Chooses the channel for an event member and enqueues the message."""

    @staticmethod
    def channel_for(event_member):
        """
        Email when the member has one; SMS only for mobile-only members.

        Returns None when neither channel is available.
        """
        if event_member.has_email:
            return EMAIL
        if event_member.has_mobile:
            return SMS
        return None

    @staticmethod
    def publish_email(payload):
        from .tasks import deliver_email
        queue = getattr(settings, 'BMM_EMAIL_QUEUE', 'bmm.email')
        deliver_email.apply_async(args=[payload], queue=queue)
        logger.info("Queued %s email for %s", payload.get('templateCode'), payload.get('recipient'))

    @staticmethod
    def publish_sms(payload):
        from .tasks import deliver_sms
        queue = getattr(settings, 'BMM_SMS_QUEUE', 'bmm.sms')
        deliver_sms.apply_async(args=[payload], queue=queue)
        logger.info("Queued %s SMS for %s", payload.get('templateCode'), payload.get('membershipNumber'))

    @classmethod
    def email_payload(cls, event_member, template_code, subject, content, provider=None):
        payload = {
            'recipient': event_member.primary_email,
            'recipientName': event_member.name,
            'subject': subject,
            'content': content,
            'eventMemberId': str(event_member.pk),
            'templateCode': template_code,
            'notificationType': QueueMessageType.BMM_EMAIL,
        }
        if provider:
            payload['provider'] = provider
        return payload

    @classmethod
    def sms_payload(cls, event_member, template_code, content):
        return {
            'recipient': event_member.telephone_mobile,
            'recipientName': event_member.name,
            'content': content,
            'eventMemberId': str(event_member.pk),
            'membershipNumber': event_member.membership_number,
            'templateCode': template_code,
            'notificationType': QueueMessageType.BMM_SMS,
        }

    @classmethod
    def notify(cls, event_member, template_code, variables, provider=None):
        """
        Render `template_code` and queue it on the member's channel.

        Returns the channel used.

        Raises:
            ValueError: the member has neither email nor mobile.
        """
        channel = cls.channel_for(event_member)
        if channel is None:
            raise ValueError(f'Member {event_member.membership_number} has no email or mobile')

        template = NotificationTemplateService.get_or_create_default(template_code)
        subject, content = NotificationTemplateService.render(template, variables)

        if channel == EMAIL:
            cls.publish_email(cls.email_payload(
                event_member, template_code, subject, content,
                provider=provider or EmailProvider.STRATUM,
            ))
        else:
            cls.publish_sms(cls.sms_payload(event_member, template_code, content))
        return channel
