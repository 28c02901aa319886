"""
Tests for admin bulk and quick messaging.
"""
from unittest.mock import patch

import pytest

from apps.communication.exceptions import DeliveryError
from apps.communication.models import NotificationLog
from apps.communication.services_email import EmailService
from apps.core.constants import EmailProvider, MemberCategory, NotificationType
from apps.members.models import Member
from apps.members.tests.factories import MemberFactory, SmsOnlyMemberFactory

pytestmark = pytest.mark.django_db

STRATUM_EMAIL = 'apps.communication.services_stratum.StratumService.send_email'


class TestCategories:

    def test_excludes_missing_and_placeholder_emails(self):
        real = MemberFactory()
        SmsOnlyMemberFactory()
        MemberFactory(primary_email='')
        MemberFactory(primary_email='555@temp-email.etu.nz')

        members = list(EmailService.members_in_category(MemberCategory.ALL))

        assert members == [real]

    def test_category_filter(self):
        registered = MemberFactory(has_registered=True)
        MemberFactory(has_registered=False)
        attending = MemberFactory(has_registered=True, is_attending=True)

        assert set(EmailService.members_in_category(MemberCategory.REGISTERED)) == {registered, attending}
        assert list(EmailService.members_in_category(MemberCategory.NOT_ATTENDING)) == [registered]
        assert EmailService.members_in_category(MemberCategory.UNREGISTERED).count() == 1

    def test_unknown_category(self):
        with pytest.raises(ValueError, match='Unknown member category'):
            EmailService.members_in_category('everyone')


class TestBulkEmail:

    def test_personalised_and_logged(self):
        member = MemberFactory(name='Aroha Smith', known_as='Aroha', membership_number='5001')

        with patch(STRATUM_EMAIL) as send:
            result = EmailService().send_bulk_by_category(
                MemberCategory.ALL, 'Hi {{firstName}}', 'Your number is {{membershipNumber}}',
                admin_username='organiser',
            )

        assert result.as_dict() == {'total': 1, 'success': 1, 'failed': 0, 'errors': []}
        send.assert_called_once_with(
            member.primary_email, 'Aroha Smith', 'Hi Aroha', 'Your number is 5001',
        )
        log = NotificationLog.objects.get()
        assert log.member == member
        assert log.admin_username == 'organiser'
        assert log.email_type == 'ADMIN'

    def test_registration_link_variable(self):
        member = MemberFactory()
        with patch(STRATUM_EMAIL) as send:
            EmailService().send_bulk_by_category(MemberCategory.ALL, 'S', '{{registrationLink}}')

        content = send.call_args[0][3]
        assert content == f'https://events.etu.nz/register?token={member.token}'

    def test_failure_continues(self):
        MemberFactory(membership_number='6001')
        MemberFactory(membership_number='6002')

        with patch(STRATUM_EMAIL, side_effect=[DeliveryError('HTTP 500'), True]):
            result = EmailService().send_bulk_by_category(MemberCategory.ALL, 'S', 'B')

        assert result.success == 1
        assert result.failed == 1
        assert result.errors == ['6001: HTTP 500']
        assert NotificationLog.objects.filter(is_successful=False).count() == 1

    def test_mailjet_provider(self):
        MemberFactory()
        with patch('apps.communication.services_mailjet.MailjetService.send_email') as send:
            EmailService().send_bulk_by_category(
                MemberCategory.ALL, 'S', 'B', provider=EmailProvider.MAILJET,
            )

        assert send.call_count == 1
        assert NotificationLog.objects.get().provider == EmailProvider.MAILJET


class TestQuickMessages:

    def test_quick_email(self):
        member = MemberFactory(membership_number='7001')
        sent_to = EmailService().send_quick_email('7001', 'Code', 'Your code is {{verificationCode}}')

        assert sent_to == member
        assert NotificationLog.objects.get().content == f'Your code is {member.verification_code}'

    def test_quick_email_unknown_member(self):
        with pytest.raises(Member.DoesNotExist):
            EmailService().send_quick_email('0000', 'S', 'B')

    def test_quick_email_without_address(self):
        SmsOnlyMemberFactory(membership_number='7002')
        with pytest.raises(ValueError, match='no email address'):
            EmailService().send_quick_email('7002', 'S', 'B')

    def test_quick_email_failure_logged_and_raised(self):
        MemberFactory(membership_number='7003')
        with patch(STRATUM_EMAIL, side_effect=DeliveryError('Stratum email failed: HTTP 503')):
            with pytest.raises(DeliveryError):
                EmailService().send_quick_email('7003', 'S', 'B')

        log = NotificationLog.objects.get()
        assert log.is_successful is False
        assert log.error_message == 'Stratum email failed: HTTP 503'

    def test_quick_sms(self):
        MemberFactory(membership_number='7004', name='Tama Ngata', known_as='Tama')
        with patch('apps.communication.services_stratum.StratumService.send_sms') as send:
            EmailService().send_quick_sms('7004', 'Kia ora {{firstName}}')

        send.assert_called_once_with('7004', 'Kia ora Tama')
        log = NotificationLog.objects.get()
        assert log.notification_type == NotificationType.SMS
        assert log.subject == ''

    def test_quick_sms_without_mobile(self):
        MemberFactory(membership_number='7005', telephone_mobile='', has_mobile=False)
        with pytest.raises(ValueError, match='no mobile number'):
            EmailService().send_quick_sms('7005', 'Hello')
