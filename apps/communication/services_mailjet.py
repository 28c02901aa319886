"""Mailjet v3.1 send API client."""
import logging

import requests
from django.conf import settings

from apps.core.templating import text_to_html

from .exceptions import DeliveryError

logger = logging.getLogger(__name__)


class MailjetService:
    """
    Sends single emails through Mailjet.

    Requires MAILJET_API_KEY and MAILJET_API_SECRET. When they are missing the
    service runs in *stub mode* and only logs the message.
    """

    API_URL = 'https://api.mailjet.com/v3.1/send'
    TIMEOUT = 30

    ERRORS = {
        400: 'Mailjet rejected the request (bad request)',
        401: 'Mailjet authentication failed; check API key and secret',
        403: 'Mailjet refused the sender; check the sender address is validated',
        429: 'Mailjet rate limit exceeded',
        500: 'Mailjet internal server error',
    }

    def __init__(self):
        self.api_key = getattr(settings, 'MAILJET_API_KEY', '')
        self.api_secret = getattr(settings, 'MAILJET_API_SECRET', '')
        self.from_email = getattr(settings, 'MAILJET_FROM_EMAIL', 'Events@etu.nz')
        self.from_name = getattr(settings, 'MAILJET_FROM_NAME', 'E tū Union')

    @property
    def is_configured(self):
        return bool(self.api_key and self.api_secret)

    def build_payload(self, to_email, to_name, subject, content):
        return {
            'Messages': [{
                'From': {'Email': self.from_email, 'Name': self.from_name},
                'To': [{'Email': to_email, 'Name': to_name or to_email}],
                'Subject': subject,
                'TextPart': content,
                'HTMLPart': text_to_html(content),
            }],
        }

    def send_email(self, to_email, to_name, subject, content):
        """
        Send one message.

        Raises:
            DeliveryError: transport failure or any status other than 200/202.
        """
        if not self.is_configured:
            logger.info("[STUB] Mailjet email to %s: %s", to_email, subject[:80])
            return True

        logger.info("Sending email to %s via Mailjet", to_email)
        try:
            response = requests.post(
                self.API_URL,
                json=self.build_payload(to_email, to_name, subject, content),
                auth=(self.api_key, self.api_secret),
                timeout=self.TIMEOUT,
            )
        except requests.Timeout:
            raise DeliveryError('Mailjet request timed out')
        except requests.ConnectionError as e:
            raise DeliveryError(f'Cannot connect to Mailjet: {str(e)[:200]}')

        if response.status_code in (200, 202):
            logger.info("Email sent to %s via Mailjet", to_email)
            return True

        message = self.ERRORS.get(
            response.status_code, f'Mailjet returned HTTP {response.status_code}',
        )
        logger.error("Mailjet send to %s failed: %s %s", to_email, message, response.text[:200])
        raise DeliveryError(message, status_code=response.status_code)
