"""Notification template lookup and rendering."""
import logging

from apps.core.constants import TemplateCode, TemplateType
from apps.core import templating

logger = logging.getLogger(__name__)


DEFAULT_TEMPLATES = {
    TemplateCode.BMM_INVITATION: {
        'name': 'BMM Stage 1 Invitation',
        'description': 'First contact inviting members to submit venue preferences',
        'template_type': TemplateType.BOTH,
        'subject': 'BMM Meeting Invitation - {{eventName}} ({{regionDesc}})',
        'content': (
            'Dear {{name}},\n\n'
            'You are invited to participate in the BMM meeting for {{regionDesc}}.\n\n'
            'Please visit the following link to submit your preferences:\n'
            '{{bmmLink}}\n\n'
            'Best regards,\nETU Team'
        ),
    },
    TemplateCode.BMM_CONFIRMATION: {
        'name': 'BMM Stage 2 Confirmation',
        'description': 'Venue assignment with a request to confirm attendance',
        'template_type': TemplateType.BOTH,
        'subject': 'BMM Meeting Venue Assignment - Please Confirm',
        'content': (
            'Dear {{name}},\n\n'
            'You have been assigned to the following BMM meeting:\n\n'
            'Venue: {{venue}}\n'
            'Date & Time: {{dateTime}}\n\n'
            'Please confirm your attendance:\n'
            '{{confirmationLink}}\n\n'
            'Best regards,\nETU Team'
        ),
    },
    TemplateCode.BMM_SPECIAL_VOTE: {
        'name': 'BMM Special Vote Link',
        'description': 'Voting link for approved special vote applications',
        'template_type': TemplateType.BOTH,
        'subject': 'BMM Special Vote - Access Link',
        'content': (
            'Dear {{name}},\n\n'
            'Your special vote request has been approved. '
            'Please use the following link to cast your vote:\n'
            '{{specialVoteLink}}\n\n'
            'Best regards,\nETU Team'
        ),
    },
    TemplateCode.BMM_TICKET: {
        'name': 'BMM Meeting Ticket',
        'description': 'Entry ticket for confirmed attendees',
        'template_type': TemplateType.BOTH,
        'subject': 'BMM Meeting Ticket - {{venue}}',
        'content': (
            'Dear {{name}},\n\n'
            'Your BMM meeting ticket is ready:\n\n'
            'Venue: {{venue}}\n'
            'Date & Time: {{dateTime}}\n'
            'Ticket ID: {{ticketToken}}\n\n'
            'Download your ticket: {{ticketLink}}\n\n'
            'Best regards,\nETU Team'
        ),
    },
}


class NotificationTemplateService:
    """Finds templates by code, creating the built-in BMM set on first use."""

    @classmethod
    def get_or_create_default(cls, template_code):
        """
        Raises:
            ValueError: unknown code with no stored template.
        """
        from .models import NotificationTemplate

        template = NotificationTemplate.objects.filter(template_code=template_code).first()
        if template:
            return template
        if template_code not in DEFAULT_TEMPLATES:
            raise ValueError(f'Unknown notification template: {template_code}')

        template, created = NotificationTemplate.objects.get_or_create(
            template_code=template_code,
            defaults=DEFAULT_TEMPLATES[template_code],
        )
        if created:
            logger.info("Created default notification template %s", template_code)
        return template

    @classmethod
    def ensure_defaults(cls):
        return [cls.get_or_create_default(code) for code in TemplateCode.ALL]

    @staticmethod
    def render(template, variables):
        """Returns (subject, content) with placeholders filled in."""
        return (
            templating.substitute(template.subject, variables),
            templating.render(template.content, variables),
        )
