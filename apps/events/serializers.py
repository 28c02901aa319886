"""Event serializers: events, templates and registrations."""
from rest_framework import serializers

from .models import Event, EventTemplate, EventMember


# ──────────────────────────────────────────────────────────────────────────────
# Template
# ──────────────────────────────────────────────────────────────────────────────

class EventTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = EventTemplate
        exclude = ['is_active']
        read_only_fields = ['created_at', 'updated_at']


# ──────────────────────────────────────────────────────────────────────────────
# Event
# ──────────────────────────────────────────────────────────────────────────────

class EventListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for event listings."""
    event_type_display = serializers.CharField(source='get_event_type_display', read_only=True)
    member_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Event
        fields = [
            'id', 'name', 'event_code', 'event_type', 'event_type_display',
            'event_date', 'venue', 'registration_open', 'qr_scan_enabled',
            'member_count', 'sync_status',
        ]


class EventSerializer(serializers.ModelSerializer):
    """Full event serializer with all fields."""
    event_type_display = serializers.CharField(source='get_event_type_display', read_only=True)
    template_name = serializers.CharField(
        source='event_template.template_name', read_only=True, allow_null=True,
    )

    class Meta:
        model = Event
        exclude = ['is_active']
        read_only_fields = ['created_at', 'updated_at', 'sync_status']


class EventFromTemplateSerializer(serializers.Serializer):
    template = serializers.PrimaryKeyRelatedField(queryset=EventTemplate.objects.all())
    name = serializers.CharField(max_length=255)
    event_code = serializers.CharField(max_length=50)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    event_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    venue = serializers.CharField(required=False, allow_blank=True, default='')
    custom_landing_page_title = serializers.CharField(required=False, allow_blank=True, default='')
    override_template_settings = serializers.DictField(required=False, default=dict)

    def validate_event_code(self, value):
        if Event.all_objects.filter(event_code=value).exists():
            raise serializers.ValidationError('An event with this code already exists.')
        return value


class EnrollSerializer(serializers.Serializer):
    """Restrict enrollment to some regions; empty enrolls everyone."""
    regions = serializers.ListField(child=serializers.CharField(), required=False, default=list)


# ──────────────────────────────────────────────────────────────────────────────
# Registration
# ──────────────────────────────────────────────────────────────────────────────

class EventMemberSerializer(serializers.ModelSerializer):
    stage_display = serializers.CharField(source='get_bmm_stage_display', read_only=True)

    class Meta:
        model = EventMember
        fields = [
            'id', 'event', 'member', 'membership_number', 'name',
            'primary_email', 'telephone_mobile', 'has_email', 'has_mobile',
            'region_desc', 'assigned_region', 'bmm_stage', 'stage_display',
            'has_registered', 'assigned_venue_final', 'assigned_datetime_final',
            'is_attending', 'attendance_confirmed', 'special_vote_status',
            'ticket_status', 'checked_in', 'check_in_time',
            'bmm_invitation_sent', 'bmm_confirmation_request_sent',
            'special_vote_link_sent', 'ticket_email_sent', 'ticket_sms_sent',
            'last_activity_at', 'created_at',
        ]
        read_only_fields = fields
