"""BMM workflow app configuration."""
from django.apps import AppConfig


class BmmWorkflowConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.bmm'
    verbose_name = 'BMM'
