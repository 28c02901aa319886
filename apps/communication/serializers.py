"""Communication serializers."""
import bleach
from rest_framework import serializers

from apps.core.constants import EmailProvider, MemberCategory

from .models import NotificationTemplate, NotificationLog

ALLOWED_TAGS = [
    'a', 'b', 'blockquote', 'br', 'div', 'em', 'h1', 'h2', 'h3', 'h4',
    'hr', 'i', 'li', 'ol', 'p', 'span', 'strong', 'table', 'tbody',
    'td', 'th', 'thead', 'tr', 'u', 'ul',
]
ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title', 'target', 'rel'],
    'td': ['colspan', 'rowspan', 'style'],
    'th': ['colspan', 'rowspan', 'style'],
    'div': ['style'],
    'span': ['style'],
    'p': ['style'],
}


def clean_html(value):
    """Strip tags and attributes an admin-authored email may not carry."""
    return bleach.clean(
        value,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
    )


class NotificationTemplateSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_template_type_display', read_only=True)

    class Meta:
        model = NotificationTemplate
        exclude = ['is_active']
        read_only_fields = ['created_at', 'updated_at', 'version']

    def update(self, instance, validated_data):
        instance = super().update(instance, validated_data)
        instance.version += 1
        instance.save(update_fields=['version', 'updated_at'])
        return instance


class NotificationLogSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_notification_type_display', read_only=True)

    class Meta:
        model = NotificationLog
        exclude = ['is_active']
        read_only_fields = [f.name for f in NotificationLog._meta.fields]


class BulkEmailSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=MemberCategory.CHOICES)
    subject = serializers.CharField(max_length=255)
    content = serializers.CharField()
    provider = serializers.ChoiceField(
        choices=EmailProvider.CHOICES, required=False, default=EmailProvider.STRATUM,
    )

    def validate_content(self, value):
        return clean_html(value)


class QuickEmailSerializer(serializers.Serializer):
    membership_number = serializers.CharField(max_length=50)
    subject = serializers.CharField(max_length=255)
    content = serializers.CharField()
    provider = serializers.ChoiceField(
        choices=EmailProvider.CHOICES, required=False, default=EmailProvider.STRATUM,
    )

    def validate_content(self, value):
        return clean_html(value)


class QuickSmsSerializer(serializers.Serializer):
    membership_number = serializers.CharField(max_length=50)
    content = serializers.CharField(max_length=640)
