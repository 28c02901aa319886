"""Seed the built-in event templates after migrations."""
from django.db.models.signals import post_migrate
from django.dispatch import receiver


@receiver(post_migrate)
def seed_default_event_templates(sender, **kwargs):
    """Runs once per migrate, when the events app itself has been migrated."""
    if sender.name != 'apps.events':
        return

    from .services import EventTemplateService
    EventTemplateService.seed_default_templates()
