"""Seed the built-in BMM notification templates after migrations."""
from django.db.models.signals import post_migrate
from django.dispatch import receiver


@receiver(post_migrate)
def seed_notification_templates(sender, **kwargs):
    if sender.name != 'apps.communication':
        return

    from .services import NotificationTemplateService
    NotificationTemplateService.ensure_defaults()
