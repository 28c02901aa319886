"""Member self-service: token lookup, verification, attendance and profile updates."""
import logging
import uuid

from django.db import transaction
from django.utils import timezone

from apps.core.constants import FormType, SyncStatus, UpdateSource
from apps.core.utils import is_valid_email, parse_date

logger = logging.getLogger(__name__)


def _as_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class MemberService:
    """Lookups and choices made by members through their registration link."""

    @staticmethod
    def find_by_token(token):
        """
        Raises:
            Member.DoesNotExist: malformed or unknown token.
        """
        from .models import Member

        parsed = _as_uuid(token)
        if parsed is None:
            raise Member.DoesNotExist(f'No member with token {token}')
        return Member.objects.get(token=parsed)

    @classmethod
    def verify(cls, token, membership_number, verification_code):
        """
        Confirm the member behind `token` knows their number and code.

        Raises:
            Member.DoesNotExist: unknown token or mismatching details.
        """
        from .models import Member

        member = cls.find_by_token(token)
        if (member.membership_number != str(membership_number).strip()
                or member.verification_code != str(verification_code).strip()):
            logger.warning("Verification failed for member %s", member.membership_number)
            raise Member.DoesNotExist('Membership number or verification code does not match')
        return member

    @classmethod
    @transaction.atomic
    def update_attendance_choice(cls, token, is_attending, is_special_vote=False, absence_reason=''):
        """
        Record whether a registered member will attend.

        Raises:
            Member.DoesNotExist: unknown token.
            ValueError: the member has not registered yet.
        """
        member = cls.find_by_token(token)
        if not member.has_registered:
            raise ValueError('Please complete registration before choosing attendance')

        member.is_attending = bool(is_attending)
        if member.is_attending:
            member.is_special_vote = False
            member.absence_reason = ''
        else:
            member.is_special_vote = bool(is_special_vote)
            member.absence_reason = (absence_reason or '').strip()
        member.save(update_fields=[
            'is_attending', 'is_special_vote', 'absence_reason', 'updated_at',
        ])
        logger.info(
            "Member %s attendance: attending=%s special_vote=%s",
            member.membership_number, member.is_attending, member.is_special_vote,
        )
        return member


class FinancialFormService:
    """
    Applies a member's self-service profile update.

    The Member and every registration of that member are updated together and
    an append-only FinancialForm row records what changed. The Stratum copy is
    updated after the local commit; its outcome is stored on the form and
    never affects the update itself.
    """

    # request key -> Member field
    MEMBER_FIELDS = {
        'name': 'name',
        'primary_email': 'primary_email',
        'telephone_mobile': 'telephone_mobile',
        'dob': 'dob',
        'address': 'address',
        'phone_home': 'phone_home',
        'phone_work': 'phone_work',
        'employer': 'employer',
        'payroll_number': 'payroll_number',
        'site_number': 'site_number',
        'employment_status': 'employment_status',
        'department': 'department',
        'job_title': 'job_title',
        'location': 'location',
    }

    # Member field -> EventMember field
    EVENT_MEMBER_FIELDS = {
        'name': 'name',
        'primary_email': 'primary_email',
        'telephone_mobile': 'telephone_mobile',
        'address': 'address',
        'phone_home': 'phone_home',
        'phone_work': 'phone_work',
        'employer': 'employer',
        'payroll_number': 'payroll_number',
        'site_number': 'site_code',
        'employment_status': 'employment_status',
        'department': 'department',
        'job_title': 'job_title',
        'location': 'location',
    }

    @staticmethod
    def resolve(token):
        """
        Find (member, event_member) for a member token or an event registration token.

        Raises:
            Member.DoesNotExist: nothing matches.
        """
        from apps.events.models import EventMember
        from .models import Member

        parsed = _as_uuid(token)
        if parsed is not None:
            member = Member.objects.filter(token=parsed).first()
            if member:
                return member, None
            event_member = EventMember.objects.select_related('member').filter(token=parsed).first()
        else:
            event_member = EventMember.objects.select_related('member').filter(
                member_token=str(token),
            ).first()

        if event_member is None:
            raise Member.DoesNotExist(f'No member with token {token}')
        return event_member.member, event_member

    @classmethod
    def snapshot(cls, member):
        return {field: getattr(member, field) or '' for field in cls.MEMBER_FIELDS.values()}

    @classmethod
    @transaction.atomic
    def submit(cls, token, data, source=UpdateSource.WEB, ip=None, updated_by='SYSTEM'):
        """
        Returns the FinancialForm row.

        Raises:
            Member.DoesNotExist: unknown token.
            ValueError: the submitted email is malformed.
        """
        from apps.bmm.stages import advance_profile_stage
        from apps.events.models import EventMember
        from .models import FinancialForm

        member, event_member = cls.resolve(token)

        email = (data.get('primary_email') or '').strip()
        if email and not is_valid_email(email):
            raise ValueError(f'Invalid email address: {email}')

        before = cls.snapshot(member)
        for key, field in cls.MEMBER_FIELDS.items():
            if key in data and data[key] is not None:
                setattr(member, field, str(data[key]).strip())
        if member.dob:
            member.dob_date = parse_date(member.dob, formats=('%Y-%m-%d', '%d/%m/%Y'))
        if not member.primary_email:
            member.primary_email = None
        member.has_registered = True
        member.refresh_contact_flags()
        member.save()

        after = cls.snapshot(member)
        changed = [field for field in after if after[field] != before[field]]

        now = timezone.now()
        registrations = EventMember.objects.filter(member=member)
        if event_member is not None:
            registrations = registrations.filter(pk=event_member.pk)
        for registration in registrations:
            for member_field, em_field in cls.EVENT_MEMBER_FIELDS.items():
                setattr(registration, em_field, getattr(member, member_field) or '')
            registration.primary_email = member.primary_email
            registration.has_email = member.has_email
            registration.has_mobile = member.has_mobile
            registration.has_registered = True
            registration.last_activity_at = now
            advance_profile_stage(registration)
            registration.save()

        form = FinancialForm.objects.create(
            member=member,
            event_member=event_member,
            event=event_member.event if event_member else None,
            before_data=before,
            after_data=after,
            updated_fields=changed,
            member_name=member.name,
            membership_number=member.membership_number,
            primary_email=member.primary_email or '',
            telephone_mobile=member.telephone_mobile,
            form_type=FormType.BMM_REGISTRATION if event_member else FormType.PROFILE_UPDATE,
            update_source=source,
            updated_by=updated_by or 'SYSTEM',
            ip_address=ip,
        )
        logger.info(
            "Profile update for %s (%s fields changed)",
            member.membership_number, len(changed),
        )

        form_id = form.pk
        transaction.on_commit(lambda: cls.sync_to_stratum(form_id))
        return form

    @staticmethod
    def sync_to_stratum(form_id):
        """Push the member behind a FinancialForm to Stratum and record the outcome."""
        from apps.communication.services_stratum import StratumService
        from .models import FinancialForm

        form = FinancialForm.all_objects.select_related('member').get(pk=form_id)
        form.stratum_sync_attempted_at = timezone.now()

        if StratumService().sync_member(form.member):
            form.stratum_sync_status = SyncStatus.SUCCESS
            form.stratum_sync_succeeded_at = timezone.now()
            form.stratum_sync_error = ''
        else:
            form.stratum_sync_status = SyncStatus.FAILED
            form.stratum_sync_error = 'Stratum did not accept the update'
            logger.error("Stratum sync failed for %s", form.membership_number)

        form.save(update_fields=[
            'stratum_sync_status', 'stratum_sync_error',
            'stratum_sync_attempted_at', 'stratum_sync_succeeded_at', 'updated_at',
        ])
        return form.stratum_sync_status
