"""Stratum gateway client: outbound email, SMS and member record sync."""
import logging
import xml.etree.ElementTree as ET

import requests
from django.conf import settings

from apps.core.templating import escape_xml, to_ascii
from apps.core.utils import split_name

from .exceptions import DeliveryError

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
FAILURE_MARKERS = ('error', 'failed', 'invalid')


def _document(root):
    return XML_DECLARATION + ET.tostring(root, encoding='unicode')


class StratumService:
    """
    Posts XML documents to the Stratum membership system.

    Each call sends `newValues=<xml>` form-encoded to the configured URL with
    the security key in the query string. Without a security key the service
    runs in *stub mode*: it logs the payload and reports success.
    """

    TIMEOUT = 30

    def __init__(self):
        self.email_url = getattr(settings, 'STRATUM_EMAIL_API_URL', '')
        self.sms_url = getattr(settings, 'STRATUM_SMS_API_URL', '')
        self.member_url = getattr(settings, 'STRATUM_MEMBER_API_URL', '')
        self.security_key = getattr(settings, 'STRATUM_SECURITY_KEY', '')
        self.from_address = getattr(settings, 'STRATUM_FROM_ADDRESS', 'events@etu.nz')

    @property
    def is_configured(self):
        return bool(self.security_key)

    # ── payloads ─────────────────────────────────────────────────────────────

    @staticmethod
    def member_number_for_email(email):
        """Membership number behind an address, or UNKNOWN."""
        from apps.events.models import EventMember
        from apps.members.models import Member

        number = (
            EventMember.objects.filter(primary_email__iexact=email)
            .values_list('membership_number', flat=True).first()
        )
        if not number:
            number = (
                Member.objects.filter(primary_email__iexact=email)
                .values_list('membership_number', flat=True).first()
            )
        return number or 'UNKNOWN'

    def build_email_xml(self, to_email, to_name, subject, content, member_number=None):
        """<AddEmail> document; the body goes in a CDATA section."""
        subject = to_ascii(subject)
        content = to_ascii(content).replace(']]>', ']]]]><![CDATA[>')
        if member_number is None:
            member_number = self.member_number_for_email(to_email)
        return (
            f'{XML_DECLARATION}'
            '<AddEmail>'
            f'<MemberNumber>{escape_xml(member_number)}</MemberNumber>'
            f'<Subject>{escape_xml(subject)}</Subject>'
            f'<Body><Value><![CDATA[{content}]]></Value></Body>'
            '<MailType>O</MailType>'
            f'<FromAddress>{escape_xml(self.from_address)}</FromAddress>'
            f'<MemberAddress>{escape_xml(to_email)}</MemberAddress>'
            f'<MailName>{escape_xml(to_ascii(to_name))}</MailName>'
            '</AddEmail>'
        )

    @staticmethod
    def build_sms_xml(membership_number, message):
        root = ET.Element('AddTxtMessage')
        ET.SubElement(root, 'MemberNumber').text = str(membership_number)
        ET.SubElement(root, 'Message').text = to_ascii(message)
        ET.SubElement(root, 'SessionMemberNumber').text = str(membership_number)
        return _document(root)

    @staticmethod
    def build_member_xml(member):
        """<Members> document; empty values are left out."""
        first, last = split_name(member.name)
        dob = member.dob_date.strftime('%Y/%m/%d') if member.dob_date else ''
        employer = (member.employer or '').strip()

        elements = [
            ('MembershipNumber', member.membership_number),
            ('Surname', last),
            ('HomeEmail', member.primary_email),
            ('DateOfBirth', dob),
            ('Address1', member.address),
            ('MobilePhone', member.telephone_mobile),
            ('HomePhone', member.phone_home),
            ('WorkPhone', member.phone_work),
            ('Occupation', member.job_title),
            ('Department', member.department),
            ('Employer', employer),
            ('EmployerName', employer),
            ('EmploymentStatus', member.employment_status),
            ('PayrollNumber', member.payroll_number),
            ('SiteNumber', member.site_number),
            ('Location', member.location),
        ]

        root = ET.Element('Members')
        for tag, value in elements:
            value = (value or '').strip()
            if not value:
                continue
            ET.SubElement(root, tag).text = value
            if tag == 'MembershipNumber' and first:
                forenames = ET.SubElement(root, 'Forenames')
                ET.SubElement(forenames, 'Value').text = first
        return _document(root)

    # ── transport ────────────────────────────────────────────────────────────

    def _post(self, url, xml):
        return requests.post(
            url,
            params={'securityKey': self.security_key},
            data={'newValues': xml},
            headers={'Content-Type': 'application/x-www-form-urlencoded'},
            timeout=self.TIMEOUT,
        )

    def _deliver(self, url, xml, what):
        """POST and raise DeliveryError unless Stratum answers 2xx."""
        logger.info("Sending %s to Stratum: %s", what, url)
        try:
            response = self._post(url, xml)
        except requests.Timeout:
            raise DeliveryError(f'Stratum {what} request timed out')
        except requests.ConnectionError as e:
            raise DeliveryError(f'Cannot connect to Stratum: {str(e)[:200]}')

        if not 200 <= response.status_code < 300:
            raise DeliveryError(
                f'Stratum {what} failed: HTTP {response.status_code}',
                status_code=response.status_code,
            )
        return response

    # ── public API ───────────────────────────────────────────────────────────

    def send_email(self, to_email, to_name, subject, content, member_number=None):
        """
        Queue one email in Stratum.

        Raises:
            DeliveryError: transport failure or non-2xx response.
        """
        xml = self.build_email_xml(to_email, to_name, subject, content, member_number)
        if not self.is_configured:
            logger.info("[STUB] Stratum email to %s: %s", to_email, to_ascii(subject)[:80])
            return True
        self._deliver(self.email_url, xml, 'email')
        logger.info("Email sent to %s via Stratum", to_email)
        return True

    def send_sms(self, membership_number, message):
        """
        Queue one text message for a member's mobile on file in Stratum.

        Raises:
            DeliveryError: transport failure or non-2xx response.
        """
        if not membership_number:
            raise DeliveryError('Membership number is required for SMS')
        xml = self.build_sms_xml(membership_number, message)
        if not self.is_configured:
            logger.info("[STUB] Stratum SMS to %s: %s", membership_number, to_ascii(message)[:80])
            return True
        self._deliver(self.sms_url, xml, 'SMS')
        logger.info("SMS sent to member %s via Stratum", membership_number)
        return True

    def sync_member(self, member):
        """
        Push a member's profile to Stratum.

        Returns True when Stratum accepted the update. Never raises.
        """
        xml = self.build_member_xml(member)
        if not self.is_configured:
            logger.info("[STUB] Stratum member sync for %s", member.membership_number)
            return True

        url = f'{self.member_url.rstrip("/")}/{member.membership_number}'
        logger.info("Syncing member %s to Stratum", member.membership_number)
        try:
            response = self._post(url, xml)
        except requests.Timeout:
            logger.error("Stratum member sync timed out for %s", member.membership_number)
            return False
        except requests.ConnectionError as e:
            logger.error("Cannot connect to Stratum for %s: %s", member.membership_number, e)
            return False
        except Exception as e:
            logger.error("Stratum member sync failed for %s: %s", member.membership_number, e)
            return False

        body = (response.text or '').lower()
        if 200 <= response.status_code < 300 and not any(m in body for m in FAILURE_MARKERS):
            return True

        logger.error(
            "Stratum rejected member %s: HTTP %s %s",
            member.membership_number, response.status_code, response.text[:200],
        )
        return False
