"""Ad-hoc and bulk member email/SMS sent by administrators."""
import logging

from django.utils import timezone

from apps.core.config import BmmConfig
from apps.core.constants import (
    EmailProvider, MemberCategory, NotificationType, PLACEHOLDER_EMAIL_DOMAIN,
)
from apps.core.results import BatchResult
from apps.core import templating

from .exceptions import DeliveryError
from .services_mailjet import MailjetService
from .services_stratum import StratumService

logger = logging.getLogger(__name__)


class EmailService:
    """Sends admin-authored messages directly, bypassing the BMM queues."""

    CATEGORY_FILTERS = {
        MemberCategory.ALL: {},
        MemberCategory.REGISTERED: {'has_registered': True},
        MemberCategory.UNREGISTERED: {'has_registered': False},
        MemberCategory.ATTENDING: {'is_attending': True},
        MemberCategory.NOT_ATTENDING: {'has_registered': True, 'is_attending': False},
        MemberCategory.SPECIAL_VOTE: {'is_special_vote': True},
        MemberCategory.VOTED: {'has_voted': True},
    }

    def __init__(self, config=None):
        self.config = config or BmmConfig.from_settings()

    def send_simple_email(self, to_email, to_name, subject, content, provider=EmailProvider.STRATUM):
        """
        Raises:
            DeliveryError: the provider refused or could not be reached.
        """
        if provider == EmailProvider.MAILJET:
            return MailjetService().send_email(to_email, to_name, subject, content)
        return StratumService().send_email(to_email, to_name, subject, content)

    @classmethod
    def members_in_category(cls, category):
        """Active members with a real email address in `category`."""
        from apps.members.models import Member

        if category not in cls.CATEGORY_FILTERS:
            raise ValueError(f'Unknown member category: {category}')
        return (
            Member.objects.filter(**cls.CATEGORY_FILTERS[category])
            .exclude(primary_email__isnull=True)
            .exclude(primary_email='')
            .exclude(primary_email__iendswith='@' + PLACEHOLDER_EMAIL_DOMAIN)
            .order_by('membership_number')
        )

    def member_variables(self, member):
        return {
            'name': member.name,
            'firstName': member.first_name,
            'membershipNumber': member.membership_number,
            'verificationCode': member.verification_code,
            'registrationLink': self.config.registration_link(member.token),
        }

    def _log(self, member, notification_type, recipient, subject, content,
             provider, admin_username, error=''):
        from .models import NotificationLog

        NotificationLog.objects.create(
            member=member,
            notification_type=notification_type,
            recipient=recipient,
            recipient_name=member.name,
            subject=subject,
            content=content,
            email_type='ADMIN',
            provider=provider,
            sent_time=timezone.now(),
            is_successful=not error,
            error_message=error,
            admin_username=admin_username or '',
        )

    def send_bulk_by_category(self, category, subject, content,
                              provider=EmailProvider.STRATUM, admin_username=''):
        """Personalise and send to every member in `category`. Returns a BatchResult."""
        members = self.members_in_category(category)
        result = BatchResult()
        logger.info(
            "Bulk email to category %s by %s (%s recipients)",
            category, admin_username, members.count(),
        )

        for member in members.iterator():
            variables = self.member_variables(member)
            personal_subject = templating.substitute(subject, variables)
            personal_content = templating.render(content, variables)
            try:
                self.send_simple_email(
                    member.primary_email, member.name,
                    personal_subject, personal_content, provider,
                )
            except DeliveryError as e:
                logger.error("Bulk email to %s failed: %s", member.primary_email, e)
                self._log(member, NotificationType.EMAIL, member.primary_email,
                          personal_subject, personal_content, provider, admin_username, str(e))
                result.fail(f'{member.membership_number}: {e}')
                continue

            self._log(member, NotificationType.EMAIL, member.primary_email,
                      personal_subject, personal_content, provider, admin_username)
            result.ok()

        return result

    def send_quick_email(self, membership_number, subject, content,
                         admin_username='', provider=EmailProvider.STRATUM):
        """
        Email one member by membership number.

        Raises:
            Member.DoesNotExist: unknown membership number.
            ValueError: the member has no usable email.
            DeliveryError: the provider refused the message (logged first).
        """
        from apps.members.models import Member

        member = Member.objects.get(membership_number=membership_number)
        if not member.has_email:
            raise ValueError(f'Member {membership_number} has no email address')

        variables = self.member_variables(member)
        subject = templating.substitute(subject, variables)
        content = templating.render(content, variables)
        try:
            self.send_simple_email(member.primary_email, member.name, subject, content, provider)
        except DeliveryError as e:
            self._log(member, NotificationType.EMAIL, member.primary_email,
                      subject, content, provider, admin_username, str(e))
            raise
        self._log(member, NotificationType.EMAIL, member.primary_email,
                  subject, content, provider, admin_username)
        return member

    def send_quick_sms(self, membership_number, content, admin_username=''):
        """
        Text one member through Stratum.

        Raises:
            Member.DoesNotExist: unknown membership number.
            ValueError: the member has no mobile on file.
            DeliveryError: Stratum refused the message (logged first).
        """
        from apps.members.models import Member

        member = Member.objects.get(membership_number=membership_number)
        if not member.has_mobile:
            raise ValueError(f'Member {membership_number} has no mobile number')

        content = templating.substitute(content, self.member_variables(member))
        try:
            StratumService().send_sms(member.membership_number, content)
        except DeliveryError as e:
            self._log(member, NotificationType.SMS, member.telephone_mobile,
                      '', content, EmailProvider.STRATUM, admin_username, str(e))
            raise
        self._log(member, NotificationType.SMS, member.telephone_mobile,
                  '', content, EmailProvider.STRATUM, admin_username)
        return member
