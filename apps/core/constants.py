"""Centralized constants and choices for the application."""
from django.db import models
from django.utils.translation import gettext_lazy as _


class EventType:
    """Kinds of union events."""
    SPECIAL_CONFERENCE = 'SPECIAL_CONFERENCE'
    SURVEY_MEETING = 'SURVEY_MEETING'
    BMM_VOTING = 'BMM_VOTING'
    GENERAL_MEETING = 'GENERAL_MEETING'

    CHOICES = [
        (SPECIAL_CONFERENCE, _('Special conference')),
        (SURVEY_MEETING, _('Survey meeting')),
        (BMM_VOTING, _('BMM voting')),
        (GENERAL_MEETING, _('General meeting')),
    ]


class SyncStatus:
    """External synchronisation state."""
    PENDING = 'PENDING'
    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'

    CHOICES = [
        (PENDING, _('Pending')),
        (SUCCESS, _('Success')),
        (FAILED, _('Failed')),
    ]


# ─── BMM workflow ──────────────────────────────────────────────────────────────


class BmmStage(models.TextChoices):
    """Registration stage of a member for a BMM event."""
    INVITED = 'INVITED', _('Invited')
    PREFERENCE_SUBMITTED = 'PREFERENCE_SUBMITTED', _('Preference submitted')
    VENUE_ASSIGNED = 'VENUE_ASSIGNED', _('Venue assigned')
    ATTENDANCE_CONFIRMED = 'ATTENDANCE_CONFIRMED', _('Attendance confirmed')
    ATTENDANCE_DECLINED = 'ATTENDANCE_DECLINED', _('Attendance declined')
    TICKET_ISSUED = 'TICKET_ISSUED', _('Ticket issued')
    CHECKED_IN = 'CHECKED_IN', _('Checked in')
    PROFILE_UPDATED = 'PROFILE_UPDATED', _('Profile updated')


class SpecialVoteStatus(models.TextChoices):
    NOT_APPLICABLE = 'NOT_APPLICABLE', _('Not applicable')
    PENDING = 'PENDING', _('Pending')
    APPROVED = 'APPROVED', _('Approved')
    DECLINED = 'DECLINED', _('Declined')


class TicketStatus(models.TextChoices):
    PENDING = 'PENDING', _('Pending')
    GENERATED = 'GENERATED', _('Generated')
    SENT = 'SENT', _('Sent')
    FAILED = 'FAILED', _('Failed')


class CheckInMethod:
    """How a member was checked in at a venue."""
    QR_SCAN = 'QR_SCAN'
    MANUAL = 'MANUAL'
    BULK = 'BULK'

    CHOICES = [
        (QR_SCAN, _('QR scan')),
        (MANUAL, _('Manual')),
        (BULK, _('Bulk')),
    ]


# ─── Import provenance ─────────────────────────────────────────────────────────


class DataSource(models.TextChoices):
    """
    Provenance of member data, ordered by priority.

    Declaration order is the priority order: the first member wins over every
    later one. Anything not listed here ranks below all of them.
    """
    INFORMER_EMAIL_MEMBERS = 'INFORMER_EMAIL_MEMBERS', _('Informer - email members')
    INFORMER_SMS_MEMBERS = 'INFORMER_SMS_MEMBERS', _('Informer - SMS members')
    INFORMER_AUTO_CREATED = 'INFORMER_AUTO_CREATED', _('Informer - auto created')
    CSV_EMERGENCY = 'CSV_EMERGENCY', _('CSV - emergency import')
    CSV_UPDATED = 'CSV_UPDATED', _('CSV - updated')
    CSV_IMPORT = 'CSV_IMPORT', _('CSV - import')
    MANUAL = 'MANUAL', _('Manual')
    INFORMER_ATTENDEES = 'INFORMER_ATTENDEES', _('Informer - event attendees')

    @classmethod
    def rank(cls, value):
        """1-based rank; lower is higher priority. Unknown values rank 999."""
        for index, member in enumerate(cls, start=1):
            if member.value == value:
                return index
        return 999

    @classmethod
    def can_overwrite(cls, new_source, existing_source):
        """True when data from new_source may replace data from existing_source."""
        return cls.rank(new_source) <= cls.rank(existing_source)


class InformerDataset:
    """Shapes of Informer dataset payloads."""
    EMAIL_MEMBERS = 'EMAIL_MEMBERS'
    SMS_MEMBERS = 'SMS_MEMBERS'
    ATTENDEES = 'ATTENDEES'
    GENERIC = 'GENERIC'

    CHOICES = [
        (EMAIL_MEMBERS, _('Financial declaration - email on file')),
        (SMS_MEMBERS, _('Financial declaration - SMS only')),
        (ATTENDEES, _('Event attendees')),
        (GENERIC, _('Generic member list')),
    ]


class FormType:
    BMM_REGISTRATION = 'BMM_REGISTRATION'
    PROFILE_UPDATE = 'PROFILE_UPDATE'

    CHOICES = [
        (BMM_REGISTRATION, _('BMM registration')),
        (PROFILE_UPDATE, _('Profile update')),
    ]


class UpdateSource:
    WEB = 'WEB'
    API = 'API'
    ADMIN = 'ADMIN'
    IMPORT = 'IMPORT'

    CHOICES = [
        (WEB, _('Web')),
        (API, _('API')),
        (ADMIN, _('Admin')),
        (IMPORT, _('Import')),
    ]


# ─── Notifications ─────────────────────────────────────────────────────────────


class TemplateType:
    EMAIL = 'EMAIL'
    SMS = 'SMS'
    BOTH = 'BOTH'

    CHOICES = [
        (EMAIL, _('Email')),
        (SMS, _('SMS')),
        (BOTH, _('Email and SMS')),
    ]


class TemplateCode:
    """Codes of the built-in BMM notification templates."""
    BMM_INVITATION = 'BMM_INVITATION'
    BMM_CONFIRMATION = 'BMM_CONFIRMATION'
    BMM_SPECIAL_VOTE = 'BMM_SPECIAL_VOTE'
    BMM_TICKET = 'BMM_TICKET'

    ALL = [BMM_INVITATION, BMM_CONFIRMATION, BMM_SPECIAL_VOTE, BMM_TICKET]


class NotificationType:
    EMAIL = 'EMAIL'
    SMS = 'SMS'
    AUTO_EMAIL = 'AUTO_EMAIL'
    AUTO_SMS = 'AUTO_SMS'

    CHOICES = [
        (EMAIL, _('Email')),
        (SMS, _('SMS')),
        (AUTO_EMAIL, _('Automatic email')),
        (AUTO_SMS, _('Automatic SMS')),
    ]


class QueueMessageType:
    """notificationType tag carried by queue payloads."""
    BMM_EMAIL = 'BMM_EMAIL'
    BMM_SMS = 'BMM_SMS'


class EmailProvider:
    STRATUM = 'STRATUM'
    MAILJET = 'MAILJET'

    CHOICES = [
        (STRATUM, _('Stratum')),
        (MAILJET, _('Mailjet')),
    ]


class MemberCategory:
    """Recipient groups for bulk member emails."""
    ALL = 'all'
    REGISTERED = 'registered'
    UNREGISTERED = 'unregistered'
    ATTENDING = 'attending'
    NOT_ATTENDING = 'not_attending'
    SPECIAL_VOTE = 'special_vote'
    VOTED = 'voted'

    CHOICES = [
        (ALL, _('All members')),
        (REGISTERED, _('Registered')),
        (UNREGISTERED, _('Not registered')),
        (ATTENDING, _('Attending')),
        (NOT_ATTENDING, _('Not attending')),
        (SPECIAL_VOTE, _('Special vote')),
        (VOTED, _('Voted')),
    ]


PLACEHOLDER_EMAIL_DOMAIN = 'temp-email.etu.nz'
