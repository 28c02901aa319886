"""Celery tasks for communication app: BMM email and SMS queue consumers."""
import logging

from celery import shared_task
from django.utils import timezone

from apps.core.constants import EmailProvider, NotificationType, TemplateCode

logger = logging.getLogger(__name__)


def _event_member(payload):
    from apps.events.models import EventMember

    event_member_id = payload.get('eventMemberId')
    if not event_member_id:
        return None
    return EventMember.all_objects.select_related('event', 'member').filter(pk=event_member_id).first()


def _log(payload, notification_type, provider, event_member, error=''):
    from .models import NotificationLog

    return NotificationLog.objects.create(
        event=event_member.event if event_member else None,
        event_member=event_member,
        member=event_member.member if event_member else None,
        notification_type=notification_type,
        recipient=payload.get('recipient') or '',
        recipient_name=payload.get('recipientName') or '',
        subject=payload.get('subject') or '',
        content=payload.get('content') or '',
        template_code=payload.get('templateCode') or '',
        email_type=payload.get('notificationType') or '',
        provider=provider,
        sent_time=timezone.now(),
        is_successful=not error,
        error_message=error,
    )


@shared_task
def deliver_email(payload):
    """
    Consume one BMM_EMAIL message.

    Sends through Mailjet when the payload asks for it, otherwise through
    Stratum. A delivered ticket email marks the event member.
    """
    from .exceptions import DeliveryError
    from .services_mailjet import MailjetService
    from .services_stratum import StratumService

    event_member = _event_member(payload)
    provider = payload.get('provider') or EmailProvider.STRATUM
    error = ''

    try:
        if provider == EmailProvider.MAILJET:
            MailjetService().send_email(
                payload['recipient'], payload.get('recipientName'),
                payload.get('subject', ''), payload.get('content', ''),
            )
        else:
            StratumService().send_email(
                payload['recipient'], payload.get('recipientName'),
                payload.get('subject', ''), payload.get('content', ''),
                member_number=event_member.membership_number if event_member else None,
            )
    except (DeliveryError, KeyError) as e:
        error = str(e)
        logger.error("Email delivery to %s failed: %s", payload.get('recipient'), error)

    _log(payload, NotificationType.EMAIL, provider, event_member, error)

    if not error and event_member and payload.get('templateCode') == TemplateCode.BMM_TICKET:
        event_member.ticket_email_sent = True
        event_member.ticket_email_sent_at = timezone.now()
        event_member.save(update_fields=['ticket_email_sent', 'ticket_email_sent_at', 'updated_at'])

    return not error


@shared_task
def deliver_sms(payload):
    """Consume one BMM_SMS message through Stratum."""
    from .exceptions import DeliveryError
    from .services_stratum import StratumService

    event_member = _event_member(payload)
    error = ''

    try:
        StratumService().send_sms(payload.get('membershipNumber'), payload.get('content', ''))
    except DeliveryError as e:
        error = str(e)
        logger.error("SMS delivery to %s failed: %s", payload.get('membershipNumber'), error)

    _log(payload, NotificationType.SMS, EmailProvider.STRATUM, event_member, error)

    if not error and event_member and payload.get('templateCode') == TemplateCode.BMM_TICKET:
        event_member.ticket_sms_sent = True
        event_member.ticket_sms_sent_at = timezone.now()
        event_member.save(update_fields=['ticket_sms_sent', 'ticket_sms_sent_at', 'updated_at'])

    return not error
