"""Event, event template and per-event member registration models."""
import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import (
    EventType, SyncStatus, BmmStage, SpecialVoteStatus, TicketStatus,
    CheckInMethod,
)
from apps.core.utils import generate_verification_code


# ──────────────────────────────────────────────────────────────────────────────
# Event template
# ──────────────────────────────────────────────────────────────────────────────

class EventTemplate(BaseModel):
    """Reusable registration flow, feature flags and page copy for an event type."""

    template_name = models.CharField(max_length=200, unique=True, verbose_name=_('Name'))
    event_type = models.CharField(
        max_length=30, choices=EventType.CHOICES, verbose_name=_('Event type'),
    )
    template_description = models.TextField(blank=True, default='')
    registration_steps = models.JSONField(default=list, blank=True)

    requires_attendance_confirmation = models.BooleanField(default=True)
    requires_special_vote_option = models.BooleanField(default=False)
    requires_absence_reason = models.BooleanField(default=False)
    allows_qr_checkin = models.BooleanField(default=False)
    requires_survey_completion = models.BooleanField(default=False)
    email_notification_enabled = models.BooleanField(default=True)
    sms_notification_enabled = models.BooleanField(default=False)

    landing_page_title = models.CharField(max_length=255, blank=True, default='')
    landing_page_description = models.TextField(blank=True, default='')
    registration_form_title = models.CharField(max_length=255, blank=True, default='')
    registration_form_instructions = models.TextField(blank=True, default='')
    attendance_question_text = models.CharField(max_length=500, blank=True, default='')
    special_vote_question_text = models.CharField(max_length=500, blank=True, default='')
    success_message = models.TextField(blank=True, default='')
    email_template_subject = models.CharField(max_length=255, blank=True, default='')
    email_template_content = models.TextField(blank=True, default='')

    is_default_template = models.BooleanField(default=False)

    class Meta:
        verbose_name = _('Event template')
        verbose_name_plural = _('Event templates')
        ordering = ['event_type', 'template_name']

    def __str__(self):
        return self.template_name


# ──────────────────────────────────────────────────────────────────────────────
# Event
# ──────────────────────────────────────────────────────────────────────────────

class Event(BaseModel):
    """A union event members can be enrolled in."""

    name = models.CharField(max_length=255, verbose_name=_('Name'))
    event_code = models.CharField(max_length=50, unique=True, verbose_name=_('Event code'))
    description = models.TextField(blank=True, default='')
    event_type = models.CharField(
        max_length=30, choices=EventType.CHOICES,
        default=EventType.GENERAL_MEETING, verbose_name=_('Type'),
    )
    event_date = models.DateTimeField(null=True, blank=True, verbose_name=_('Date'))
    venue = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Venue'))
    event_template = models.ForeignKey(
        EventTemplate, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='events', verbose_name=_('Template'),
    )

    registration_open = models.BooleanField(default=True, verbose_name=_('Registration open'))
    qr_scan_enabled = models.BooleanField(default=False, verbose_name=_('QR check-in enabled'))
    override_template_settings = models.JSONField(
        default=dict, blank=True,
        help_text=_('Feature flags that replace the template values for this event'),
    )

    custom_landing_page_title = models.CharField(max_length=255, blank=True, default='')
    custom_landing_page_description = models.TextField(blank=True, default='')
    custom_registration_instructions = models.TextField(blank=True, default='')
    custom_email_template = models.TextField(blank=True, default='')

    sync_status = models.CharField(
        max_length=10, choices=SyncStatus.CHOICES, default=SyncStatus.PENDING,
    )

    class Meta:
        verbose_name = _('Event')
        verbose_name_plural = _('Events')
        ordering = ['-event_date', 'name']

    def __str__(self):
        return f'{self.name} ({self.event_code})'


# ──────────────────────────────────────────────────────────────────────────────
# Event member
# ──────────────────────────────────────────────────────────────────────────────

class EventMember(BaseModel):
    """
    A member's registration for one event.

    Holds a snapshot of the member's contact data taken at enrollment, the
    BMM stage and everything the workflow records along the way.
    """

    event = models.ForeignKey(
        Event, on_delete=models.CASCADE, related_name='event_members',
        verbose_name=_('Event'),
    )
    member = models.ForeignKey(
        'members.Member', on_delete=models.CASCADE, related_name='event_members',
        verbose_name=_('Member'),
    )

    # Contact snapshot
    membership_number = models.CharField(max_length=50, verbose_name=_('Membership number'))
    name = models.CharField(max_length=255, verbose_name=_('Name'))
    primary_email = models.CharField(max_length=255, null=True, blank=True)
    telephone_mobile = models.CharField(max_length=50, blank=True, default='')
    has_email = models.BooleanField(default=False)
    has_mobile = models.BooleanField(default=False)

    # Credentials
    token = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    member_token = models.CharField(max_length=16, unique=True, verbose_name=_('Link token'))
    verification_code = models.CharField(max_length=6, default=generate_verification_code)

    region_desc = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Region'))
    assigned_region = models.CharField(max_length=100, blank=True, default='')
    bmm_stage = models.CharField(
        max_length=30, choices=BmmStage.choices, default=BmmStage.INVITED,
        verbose_name=_('BMM stage'),
    )
    has_registered = models.BooleanField(default=False)

    # Preferences
    preferred_venues = models.JSONField(default=list, blank=True)
    preferred_dates = models.JSONField(default=list, blank=True)
    preferred_times = models.JSONField(default=list, blank=True)
    preferred_attending = models.BooleanField(null=True, blank=True)
    preference_special_vote = models.BooleanField(null=True, blank=True)
    workplace_info = models.TextField(blank=True, default='')
    suggested_venue = models.CharField(max_length=255, blank=True, default='')
    additional_comments = models.TextField(blank=True, default='')
    attendance_willingness = models.CharField(max_length=50, blank=True, default='')
    meeting_format = models.CharField(max_length=50, blank=True, default='')
    preference_submitted_at = models.DateTimeField(null=True, blank=True)

    # Venue assignment
    assigned_venue_final = models.CharField(max_length=255, blank=True, default='')
    assigned_datetime_final = models.DateTimeField(null=True, blank=True)
    venue_assigned_at = models.DateTimeField(null=True, blank=True)
    venue_assigned_by = models.CharField(max_length=150, blank=True, default='')

    # Attendance
    is_attending = models.BooleanField(default=False)
    attendance_confirmed = models.BooleanField(null=True, blank=True)
    attendance_decision_at = models.DateTimeField(null=True, blank=True)
    non_attendance_reason = models.TextField(blank=True, default='')
    absence_reason = models.TextField(blank=True, default='')

    # Ticket
    ticket_token = models.UUIDField(null=True, blank=True, unique=True)
    ticket_status = models.CharField(
        max_length=10, choices=TicketStatus.choices, default=TicketStatus.PENDING,
    )
    ticket_generated_at = models.DateTimeField(null=True, blank=True)
    ticket_pdf_path = models.CharField(max_length=500, blank=True, default='')

    # Special vote
    special_vote_eligible = models.BooleanField(default=False)
    special_vote_requested = models.BooleanField(default=False)
    special_vote_status = models.CharField(
        max_length=20, choices=SpecialVoteStatus.choices,
        default=SpecialVoteStatus.NOT_APPLICABLE,
    )
    special_vote_reason = models.TextField(blank=True, default='')
    special_vote_eligibility_reason = models.TextField(blank=True, default='')
    special_vote_application_reason = models.TextField(blank=True, default='')
    distance_from_venue = models.CharField(max_length=100, blank=True, default='')
    employer_work_requirement = models.BooleanField(default=False)
    medical_certificate_provided = models.BooleanField(default=False)
    special_vote_application_date = models.DateTimeField(null=True, blank=True)
    special_vote_decision_date = models.DateTimeField(null=True, blank=True)
    special_vote_decision_by = models.CharField(max_length=150, blank=True, default='')
    special_vote_completed_at = models.DateTimeField(null=True, blank=True)

    # Check-in
    checked_in = models.BooleanField(default=False)
    check_in_time = models.DateTimeField(null=True, blank=True)
    check_in_venue = models.CharField(max_length=255, blank=True, default='')
    check_in_method = models.CharField(
        max_length=10, choices=CheckInMethod.CHOICES, blank=True, default='',
    )
    check_in_admin_username = models.CharField(max_length=150, blank=True, default='')

    # Send-once flags
    bmm_invitation_sent = models.BooleanField(default=False)
    bmm_invitation_sent_at = models.DateTimeField(null=True, blank=True)
    bmm_confirmation_request_sent = models.BooleanField(default=False)
    bmm_confirmation_request_sent_at = models.DateTimeField(null=True, blank=True)
    special_vote_link_sent = models.BooleanField(default=False)
    special_vote_sent_at = models.DateTimeField(null=True, blank=True)
    ticket_email_sent = models.BooleanField(default=False)
    ticket_email_sent_at = models.DateTimeField(null=True, blank=True)
    ticket_sms_sent = models.BooleanField(default=False)
    ticket_sms_sent_at = models.DateTimeField(null=True, blank=True)

    # Profile fields written by the financial form
    address = models.TextField(blank=True, default='')
    employer = models.CharField(max_length=255, blank=True, default='')
    payroll_number = models.CharField(max_length=50, blank=True, default='')
    site_code = models.CharField(max_length=50, blank=True, default='')
    employment_status = models.CharField(max_length=50, blank=True, default='')
    department = models.CharField(max_length=255, blank=True, default='')
    job_title = models.CharField(max_length=255, blank=True, default='')
    location = models.CharField(max_length=255, blank=True, default='')
    phone_home = models.CharField(max_length=50, blank=True, default='')
    phone_work = models.CharField(max_length=50, blank=True, default='')

    last_activity_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Event member')
        verbose_name_plural = _('Event members')
        unique_together = [('event', 'member')]
        ordering = ['name']
        indexes = [
            models.Index(fields=['event', 'bmm_stage']),
            models.Index(fields=['event', 'region_desc']),
        ]

    def __str__(self):
        return f'{self.name} @ {self.event.event_code}'
