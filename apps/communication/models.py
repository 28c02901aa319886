"""Communication models."""
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import NotificationType, TemplateType, EmailProvider


class NotificationTemplate(BaseModel):
    """Reusable email/SMS text with {{placeholder}} tokens."""
    template_code = models.CharField(max_length=50, unique=True, verbose_name=_('Code'))
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    description = models.TextField(blank=True, default='')
    template_type = models.CharField(
        max_length=10, choices=TemplateType.CHOICES, default=TemplateType.BOTH,
        verbose_name=_('Channel'),
    )
    subject = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Subject'))
    content = models.TextField(verbose_name=_('Content'))
    version = models.PositiveIntegerField(default=1)

    class Meta:
        verbose_name = _('Notification template')
        verbose_name_plural = _('Notification templates')
        ordering = ['template_code']

    def __str__(self):
        return f'{self.name} ({self.template_code})'


class NotificationLog(BaseModel):
    """One outbound email or SMS attempt."""
    event = models.ForeignKey(
        'events.Event', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='notification_logs',
    )
    event_member = models.ForeignKey(
        'events.EventMember', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='notification_logs',
    )
    member = models.ForeignKey(
        'members.Member', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='notification_logs',
    )
    notification_type = models.CharField(
        max_length=20, choices=NotificationType.CHOICES, verbose_name=_('Type'),
    )
    recipient = models.CharField(max_length=255, verbose_name=_('Recipient'))
    recipient_name = models.CharField(max_length=255, blank=True, default='')
    subject = models.CharField(max_length=255, blank=True, default='')
    content = models.TextField(blank=True, default='')
    template_code = models.CharField(max_length=50, blank=True, default='')
    email_type = models.CharField(max_length=50, blank=True, default='')
    provider = models.CharField(
        max_length=10, choices=EmailProvider.CHOICES, blank=True, default='',
    )
    sent_time = models.DateTimeField(null=True, blank=True)
    is_successful = models.BooleanField(default=False, verbose_name=_('Delivered'))
    error_message = models.TextField(blank=True, default='')
    admin_username = models.CharField(max_length=150, blank=True, default='')

    class Meta:
        verbose_name = _('Notification log')
        verbose_name_plural = _('Notification logs')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['template_code', 'is_successful']),
        ]

    def __str__(self):
        status = 'OK' if self.is_successful else 'FAILED'
        return f'{self.notification_type} -> {self.recipient} [{status}]'
