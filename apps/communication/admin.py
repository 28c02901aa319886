"""Communication admin."""
from django.contrib import admin

from apps.core.admin import BaseModelAdmin, AppendOnlyModelAdmin

from .models import NotificationTemplate, NotificationLog


@admin.register(NotificationTemplate)
class NotificationTemplateAdmin(BaseModelAdmin):
    list_display = ['template_code', 'name', 'template_type', 'version', 'is_active']
    list_filter = ['template_type', 'is_active']
    search_fields = ['template_code', 'name', 'subject']


# ─── Delivery log ────────────────────────────────────────────────────────────────


@admin.register(NotificationLog)
class NotificationLogAdmin(AppendOnlyModelAdmin):
    list_display = [
        'recipient', 'notification_type', 'template_code', 'provider',
        'is_successful', 'sent_time', 'admin_username',
    ]
    list_filter = ['notification_type', 'provider', 'is_successful', 'template_code']
    search_fields = ['recipient', 'recipient_name', 'subject']
    raw_id_fields = ['event', 'event_member', 'member']
