"""Events admin: events, templates and registrations."""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.admin import BaseModelAdmin

from .models import Event, EventTemplate, EventMember


@admin.register(EventTemplate)
class EventTemplateAdmin(BaseModelAdmin):
    list_display = ['template_name', 'event_type', 'is_default_template', 'is_active']
    list_filter = ['event_type', 'is_default_template', 'is_active']
    search_fields = ['template_name']


@admin.register(Event)
class EventAdmin(BaseModelAdmin):
    list_display = [
        'name', 'event_code', 'event_type', 'event_date', 'venue',
        'registration_open', 'qr_scan_enabled', 'is_active',
    ]
    list_filter = ['event_type', 'registration_open', 'sync_status', 'event_date']
    search_fields = ['name', 'event_code', 'venue']
    date_hierarchy = 'event_date'
    raw_id_fields = ['event_template']


@admin.register(EventMember)
class EventMemberAdmin(BaseModelAdmin):
    list_display = [
        'membership_number', 'name', 'event', 'region_desc',
        'bmm_stage', 'assigned_venue_final', 'ticket_status', 'checked_in',
    ]
    list_filter = [
        'bmm_stage', 'region_desc', 'special_vote_status', 'ticket_status',
        'checked_in', 'bmm_invitation_sent', 'event',
    ]
    search_fields = ['membership_number', 'name', 'primary_email', 'member_token']
    raw_id_fields = ['event', 'member']
    readonly_fields = [
        'id', 'token', 'member_token', 'verification_code', 'ticket_token',
        'created_at', 'updated_at',
    ]

    fieldsets = (
        (_('Registration'), {
            'fields': (
                'event', 'member', 'membership_number', 'name',
                'token', 'member_token', 'verification_code', 'has_registered',
            )
        }),
        (_('Contact'), {
            'fields': ('primary_email', 'telephone_mobile', 'has_email', 'has_mobile'),
        }),
        (_('Workflow'), {
            'fields': (
                'bmm_stage', 'region_desc', 'assigned_region',
                'preferred_venues', 'preferred_dates', 'preferred_times',
                'assigned_venue_final', 'assigned_datetime_final', 'venue_assigned_by',
            )
        }),
        (_('Attendance'), {
            'fields': (
                'is_attending', 'attendance_confirmed', 'attendance_decision_at',
                'non_attendance_reason',
            )
        }),
        (_('Special vote'), {
            'fields': (
                'special_vote_requested', 'special_vote_status', 'special_vote_eligible',
                'special_vote_reason', 'special_vote_decision_by', 'special_vote_decision_date',
            ),
            'classes': ('collapse',)
        }),
        (_('Ticket and check-in'), {
            'fields': (
                'ticket_token', 'ticket_status', 'ticket_generated_at',
                'checked_in', 'check_in_time', 'check_in_venue', 'check_in_method',
            ),
            'classes': ('collapse',)
        }),
        (_('Notifications'), {
            'fields': (
                'bmm_invitation_sent', 'bmm_confirmation_request_sent',
                'special_vote_link_sent', 'ticket_email_sent', 'ticket_sms_sent',
            ),
            'classes': ('collapse',)
        }),
        (_('Metadata'), {
            'fields': ('id', 'is_active', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
