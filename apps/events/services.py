"""Event template configuration and event enrollment."""
import logging

from django.db import transaction

from apps.core.constants import EventType, SyncStatus
from apps.core.utils import generate_unique_member_token, has_real_email

logger = logging.getLogger(__name__)

DEFAULT_REGISTRATION_STEPS = ['INITIAL', 'UPDATE_INFO', 'CONFIRM_ATTENDANCE', 'COMPLETED']

FEATURE_FLAGS = {
    'requiresAttendanceConfirmation': 'requires_attendance_confirmation',
    'requiresSpecialVoteOption': 'requires_special_vote_option',
    'requiresAbsenceReason': 'requires_absence_reason',
    'allowsQrCheckin': 'allows_qr_checkin',
    'requiresSurveyCompletion': 'requires_survey_completion',
    'emailNotificationEnabled': 'email_notification_enabled',
    'smsNotificationEnabled': 'sms_notification_enabled',
}

FEATURES = {
    'specialVote': 'requiresSpecialVoteOption',
    'qrCheckin': 'allowsQrCheckin',
    'survey': 'requiresSurveyCompletion',
    'absenceReason': 'requiresAbsenceReason',
}

DEFAULT_EVENT_TEMPLATES = [
    {
        'template_name': 'Special Conference Default',
        'event_type': EventType.SPECIAL_CONFERENCE,
        'landing_page_title': 'E tū Special Conference',
        'landing_page_description': (
            'Welcome to the registration portal for E tū Special Conference. '
            'Your participation is essential.'
        ),
        'registration_form_title': 'Confirm your attendance for Special Conference',
        'registration_form_instructions': (
            'Please confirm whether you will attend the conference and provide your reason.'
        ),
        'attendance_question_text': 'Will you attend this special conference?',
        'special_vote_question_text': '',
        'success_message': 'Thank you for your response. Further details will be sent to you.',
        'email_template_subject': 'Confirm Your Attendance - E tū Special Conference',
        'email_template_content': (
            'Kia ora {{name}}, Please confirm your attendance for the Special Conference...'
        ),
        'registration_steps': ['INITIAL', 'UPDATE_INFO', 'CONFIRM_ATTENDANCE', 'COMPLETED'],
        'requires_attendance_confirmation': True,
        'requires_special_vote_option': False,
        'requires_absence_reason': True,
        'allows_qr_checkin': False,
        'requires_survey_completion': False,
    },
    {
        'template_name': 'Survey Meeting Default',
        'event_type': EventType.SURVEY_MEETING,
        'landing_page_title': 'Manufacturing Food Industry Survey',
        'landing_page_description': (
            'Participate in our important industry survey for manufacturing food sector members.'
        ),
        'registration_form_title': 'Complete Industry Survey',
        'registration_form_instructions': (
            'Please complete the survey questions to help us better serve our members.'
        ),
        'attendance_question_text': 'Will you participate in this survey?',
        'special_vote_question_text': '',
        'success_message': 'Thank you for completing the survey. Your responses are valuable to us.',
        'email_template_subject': 'Manufacturing Food Industry Survey - Your Participation Needed',
        'email_template_content': (
            'Kia ora {{name}}, We invite you to participate in our industry survey...'
        ),
        'registration_steps': ['INITIAL', 'UPDATE_INFO', 'COMPLETE_SURVEY', 'COMPLETED'],
        'requires_attendance_confirmation': True,
        'requires_special_vote_option': False,
        'requires_absence_reason': False,
        'allows_qr_checkin': False,
        'requires_survey_completion': True,
    },
    {
        'template_name': 'BMM Voting Default',
        'event_type': EventType.BMM_VOTING,
        'landing_page_title': 'E tū BMM Voting Meeting',
        'landing_page_description': (
            'Register for the BMM voting meeting across five regions with QR check-in capabilities.'
        ),
        'registration_form_title': 'BMM Voting Registration',
        'registration_form_instructions': (
            'Confirm your attendance or apply for special voting rights if you cannot attend.'
        ),
        'attendance_question_text': 'Will you attend the BMM voting meeting in person?',
        'special_vote_question_text': (
            'If you cannot attend, you may be eligible for special voting rights '
            'based on specific criteria.'
        ),
        'success_message': 'Registration complete. You will receive your QR code for check-in.',
        'email_template_subject': 'BMM Voting Meeting Registration',
        'email_template_content': (
            'Kia ora {{name}}, Registration is now open for the BMM Voting Meeting...'
        ),
        'registration_steps': [
            'INITIAL', 'UPDATE_INFO', 'CONFIRM_ATTENDANCE',
            'SPECIAL_VOTE_OPTION', 'QR_GENERATED', 'COMPLETED',
        ],
        'requires_attendance_confirmation': True,
        'requires_special_vote_option': True,
        'requires_absence_reason': True,
        'allows_qr_checkin': True,
        'requires_survey_completion': False,
    },
]


class EventTemplateService:
    """Resolves the effective configuration and copy of an event from its template."""

    @staticmethod
    def seed_default_templates():
        """Create the built-in templates that are missing. Safe to run repeatedly."""
        from .models import EventTemplate

        created_names = []
        for entry in DEFAULT_EVENT_TEMPLATES:
            defaults = {
                **{k: v for k, v in entry.items() if k != 'template_name'},
                'template_description': f'Default template for {entry["event_type"]}',
                'email_notification_enabled': True,
                'sms_notification_enabled': True,
                'is_default_template': True,
            }
            _, created = EventTemplate.all_objects.get_or_create(
                template_name=entry['template_name'], defaults=defaults,
            )
            if created:
                created_names.append(entry['template_name'])
                logger.info("Created default event template: %s", entry['template_name'])
        return created_names

    @staticmethod
    def default_template_for(event_type):
        from .models import EventTemplate
        return EventTemplate.objects.filter(
            event_type=event_type, is_default_template=True,
        ).first()

    @staticmethod
    def effective_configuration(event):
        """Template feature flags overlaid with the event's overrides."""
        template = event.event_template
        if template is None:
            return {}
        config = {key: getattr(template, attr) for key, attr in FEATURE_FLAGS.items()}
        if isinstance(event.override_template_settings, dict):
            config.update(event.override_template_settings)
        return config

    @staticmethod
    def registration_steps(event):
        template = event.event_template
        if template is not None and template.registration_steps:
            return list(template.registration_steps)
        return list(DEFAULT_REGISTRATION_STEPS)

    @classmethod
    def supports_feature(cls, event, feature_name):
        key = FEATURES.get(feature_name)
        if key is None:
            return False
        return cls.effective_configuration(event).get(key) is True

    @staticmethod
    def page_content(event):
        template = event.event_template
        if template is None:
            return {}
        content = {
            'landingPageTitle': template.landing_page_title,
            'landingPageDescription': template.landing_page_description,
            'registrationFormTitle': template.registration_form_title,
            'registrationFormInstructions': template.registration_form_instructions,
            'attendanceQuestionText': template.attendance_question_text,
            'specialVoteQuestionText': template.special_vote_question_text,
            'successMessage': template.success_message,
        }
        if event.custom_landing_page_title:
            content['landingPageTitle'] = event.custom_landing_page_title
        if event.custom_landing_page_description:
            content['landingPageDescription'] = event.custom_landing_page_description
        if event.custom_registration_instructions:
            content['registrationFormInstructions'] = event.custom_registration_instructions
        return content

    @staticmethod
    def notification_templates(event):
        template = event.event_template
        if template is None:
            return {}
        return {
            'emailSubject': template.email_template_subject,
            'emailContent': event.custom_email_template or template.email_template_content,
        }

    @staticmethod
    def create_event_from_template(template, data):
        """
        Raises:
            ValueError: name or event code missing.
        """
        from .models import Event

        if not data.get('name') or not data.get('event_code'):
            raise ValueError('Event name and event code are required')

        event = Event.objects.create(
            event_template=template,
            event_type=template.event_type,
            name=data['name'],
            event_code=data['event_code'],
            description=data.get('description') or '',
            event_date=data.get('event_date'),
            venue=data.get('venue') or '',
            registration_open=True,
            qr_scan_enabled=template.allows_qr_checkin,
            custom_landing_page_title=data.get('custom_landing_page_title') or '',
            override_template_settings=data.get('override_template_settings') or {},
            sync_status=SyncStatus.PENDING,
        )
        logger.info("Created event %s from template %s", event.event_code, template.template_name)
        return event


class EventMemberService:
    """Enrolls members into events and keeps their registration snapshot current."""

    # EventMember field -> Member attribute
    SNAPSHOT_FIELDS = {
        'membership_number': 'membership_number',
        'name': 'name',
        'telephone_mobile': 'telephone_mobile',
        'region_desc': 'region_desc',
        'address': 'address',
        'employer': 'employer',
        'payroll_number': 'payroll_number',
        'site_code': 'site_number',
        'employment_status': 'employment_status',
        'department': 'department',
        'job_title': 'job_title',
        'location': 'location',
        'phone_home': 'phone_home',
        'phone_work': 'phone_work',
    }

    @classmethod
    def snapshot(cls, member):
        """Contact, region and employment values copied onto a registration."""
        values = {
            field: getattr(member, attribute) or ''
            for field, attribute in cls.SNAPSHOT_FIELDS.items()
        }
        values['primary_email'] = member.primary_email
        values['has_email'] = has_real_email(member.primary_email)
        values['has_mobile'] = bool(values['telephone_mobile'].strip())
        return values

    @classmethod
    def build_event_member(cls, event, member):
        from .models import EventMember

        return EventMember(
            event=event,
            member=member,
            member_token=generate_unique_member_token(),
            **cls.snapshot(member),
        )

    @classmethod
    def refresh_event_member(cls, event_member, member):
        """
        Copy the member's current snapshot onto an existing registration.

        Tokens, verification code and workflow state are never touched.
        Returns True when anything changed.
        """
        values = cls.snapshot(member)
        changed = [field for field, value in values.items() if getattr(event_member, field) != value]
        if not changed:
            return False
        for field in changed:
            setattr(event_member, field, values[field])
        event_member.save(update_fields=changed + ['updated_at'])
        return True

    @classmethod
    def enroll_member(cls, event, member):
        """
        Register one member, or refresh the registration they already have.

        Returns:
            tuple: (event_member, created)
        """
        from .models import EventMember

        event_member = EventMember.all_objects.filter(event=event, member=member).first()
        if event_member is None:
            event_member = cls.build_event_member(event, member)
            event_member.save()
            return event_member, True
        cls.refresh_event_member(event_member, member)
        return event_member, False

    @classmethod
    @transaction.atomic
    def enroll_members(cls, event, queryset=None):
        """
        Create the missing EventMembers for `queryset` (default: all active
        members) and refresh the snapshot of those already registered.

        Returns the number of new registrations.
        """
        from apps.members.models import Member
        from .models import EventMember

        if queryset is None:
            queryset = Member.objects.all()

        registrations = {
            event_member.member_id: event_member
            for event_member in EventMember.all_objects.filter(event=event)
        }
        created = refreshed = 0
        for member in queryset.iterator():
            event_member = registrations.get(member.pk)
            if event_member is None:
                cls.build_event_member(event, member).save()
                created += 1
            elif cls.refresh_event_member(event_member, member):
                refreshed += 1

        logger.info(
            "Enrolled %s new members in event %s, refreshed %s",
            created, event.event_code, refreshed,
        )
        return created
