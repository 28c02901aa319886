"""
Tests for notification templates, queue publishing and queue consumers.
"""
from unittest.mock import patch

import pytest
from freezegun import freeze_time

from apps.communication.exceptions import DeliveryError
from apps.communication.models import NotificationLog, NotificationTemplate
from apps.communication.services import NotificationTemplateService
from apps.communication.services_dispatch import EMAIL, SMS, NotificationDispatcher
from apps.communication.tasks import deliver_email, deliver_sms
from apps.core.constants import EmailProvider, NotificationType, TemplateCode
from apps.events.tests.factories import EventMemberFactory
from apps.members.tests.factories import MemberFactory, SmsOnlyMemberFactory

from .factories import NotificationTemplateFactory

pytestmark = pytest.mark.django_db

DISPATCH = 'apps.communication.services_dispatch.NotificationDispatcher'


class TestNotificationTemplateService:

    def test_defaults_seeded(self):
        codes = set(NotificationTemplate.objects.values_list('template_code', flat=True))
        assert set(TemplateCode.ALL) <= codes

    def test_recreates_missing_default(self):
        NotificationTemplate.all_objects.filter(template_code=TemplateCode.BMM_TICKET).delete()
        template = NotificationTemplateService.get_or_create_default(TemplateCode.BMM_TICKET)
        assert template.subject == 'BMM Meeting Ticket - {{venue}}'

    def test_stored_template_wins(self):
        NotificationTemplate.all_objects.filter(template_code=TemplateCode.BMM_INVITATION).delete()
        NotificationTemplateFactory(template_code=TemplateCode.BMM_INVITATION, subject='Custom')
        template = NotificationTemplateService.get_or_create_default(TemplateCode.BMM_INVITATION)
        assert template.subject == 'Custom'

    def test_unknown_code(self):
        with pytest.raises(ValueError, match='Unknown notification template'):
            NotificationTemplateService.get_or_create_default('NOPE')

    def test_render(self):
        template = NotificationTemplateFactory()
        subject, content = NotificationTemplateService.render(template, {'name': 'Aroha'})

        assert subject == 'Hello Aroha'
        assert content == 'Kia ora Aroha, see <a href="https://etu.nz">the site</a>'


class TestChannel:

    def test_email_preferred(self):
        assert NotificationDispatcher.channel_for(EventMemberFactory()) == EMAIL

    def test_sms_for_mobile_only(self):
        event_member = EventMemberFactory(member=SmsOnlyMemberFactory())
        assert NotificationDispatcher.channel_for(event_member) == SMS

    def test_no_contact(self):
        event_member = EventMemberFactory(has_email=False, has_mobile=False)
        assert NotificationDispatcher.channel_for(event_member) is None

    def test_notify_without_contact_raises(self):
        event_member = EventMemberFactory(has_email=False, has_mobile=False)
        with pytest.raises(ValueError, match='no email or mobile'):
            NotificationDispatcher.notify(event_member, TemplateCode.BMM_INVITATION, {})


class TestNotify:

    def test_email_payload(self):
        event_member = EventMemberFactory()
        with patch(f'{DISPATCH}.publish_email') as publish:
            channel = NotificationDispatcher.notify(
                event_member, TemplateCode.BMM_TICKET, {'venue': 'Rotorua', 'name': 'Aroha'},
            )

        payload = publish.call_args[0][0]
        assert channel == EMAIL
        assert payload['subject'] == 'BMM Meeting Ticket - Rotorua'
        assert payload['eventMemberId'] == str(event_member.pk)
        assert payload['provider'] == EmailProvider.STRATUM

    def test_sms_payload(self):
        event_member = EventMemberFactory(member=SmsOnlyMemberFactory())
        with patch(f'{DISPATCH}.publish_sms') as publish:
            NotificationDispatcher.notify(event_member, TemplateCode.BMM_INVITATION, {})

        payload = publish.call_args[0][0]
        assert payload['membershipNumber'] == event_member.membership_number
        assert payload['recipient'] == event_member.telephone_mobile

    def test_publish_uses_configured_queue(self, settings):
        settings.BMM_EMAIL_QUEUE = 'custom.email'
        with patch('apps.communication.tasks.deliver_email.apply_async') as apply_async:
            NotificationDispatcher.publish_email({'recipient': 'a@example.com'})

        assert apply_async.call_args[1]['queue'] == 'custom.email'


class TestQueueConsumers:

    def test_deliver_email_logs_success(self):
        event_member = EventMemberFactory()
        payload = NotificationDispatcher.email_payload(
            event_member, TemplateCode.BMM_INVITATION, 'Subject', 'Body',
        )

        assert deliver_email(payload) is True

        log = NotificationLog.objects.get()
        assert log.is_successful is True
        assert log.notification_type == NotificationType.EMAIL
        assert log.event_member == event_member
        assert log.provider == EmailProvider.STRATUM

    @freeze_time('2025-03-04 09:30:00')
    def test_ticket_email_marks_member(self):
        event_member = EventMemberFactory()
        payload = NotificationDispatcher.email_payload(
            event_member, TemplateCode.BMM_TICKET, 'Ticket', 'Body',
        )
        deliver_email(payload)

        event_member.refresh_from_db()
        assert event_member.ticket_email_sent is True
        assert event_member.ticket_email_sent_at.isoformat() == '2025-03-04T09:30:00+00:00'

    def test_mailjet_provider(self):
        event_member = EventMemberFactory()
        payload = NotificationDispatcher.email_payload(
            event_member, TemplateCode.BMM_INVITATION, 'S', 'B', provider=EmailProvider.MAILJET,
        )
        with patch('apps.communication.services_mailjet.MailjetService.send_email') as send:
            deliver_email(payload)

        send.assert_called_once_with(event_member.primary_email, event_member.name, 'S', 'B')

    def test_failed_delivery_logged(self):
        event_member = EventMemberFactory()
        payload = NotificationDispatcher.email_payload(
            event_member, TemplateCode.BMM_TICKET, 'S', 'B',
        )
        with patch(
            'apps.communication.services_stratum.StratumService.send_email',
            side_effect=DeliveryError('Stratum email failed: HTTP 500', status_code=500),
        ):
            assert deliver_email(payload) is False

        log = NotificationLog.objects.get()
        event_member.refresh_from_db()
        assert log.is_successful is False
        assert 'HTTP 500' in log.error_message
        assert event_member.ticket_email_sent is False

    def test_deliver_sms(self):
        event_member = EventMemberFactory(member=SmsOnlyMemberFactory())
        payload = NotificationDispatcher.sms_payload(event_member, TemplateCode.BMM_TICKET, 'Ticket')

        assert deliver_sms(payload) is True

        event_member.refresh_from_db()
        assert event_member.ticket_sms_sent is True
        assert NotificationLog.objects.get().notification_type == NotificationType.SMS

    def test_payload_without_event_member(self):
        member = MemberFactory()
        assert deliver_email({'recipient': member.primary_email, 'subject': 'S', 'content': 'B'}) is True
        assert NotificationLog.objects.get().event_member is None
