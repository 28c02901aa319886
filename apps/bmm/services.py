"""
BMM workflow operations on a single event member.

Each public method is one atomic unit. Validation problems raise ValueError
(IllegalTransition included); unknown ids or tokens raise
EventMember.DoesNotExist. Notification failures are logged and recorded,
never raised.
"""
import logging
import uuid

from django.db import transaction
from django.utils import timezone

from apps.core.config import BmmConfig
from apps.core.constants import (
    BmmStage, CheckInMethod, SpecialVoteStatus, TemplateCode, TicketStatus,
)

from . import stages
from .stages import BmmEvent

logger = logging.getLogger(__name__)


def _as_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class BmmService:
    """Preference capture, attendance, tickets, special votes and check-in."""

    def __init__(self, config=None):
        self.config = config or BmmConfig.from_settings()

    # ── lookups ─────────────────────────────────────────────────────────────

    @staticmethod
    def get_by_token(token, for_update=False):
        """
        Find an event member by its 16-hex link token, else by uuid token.

        Raises:
            EventMember.DoesNotExist: malformed or unknown token.
        """
        from apps.events.models import EventMember

        queryset = EventMember.objects.select_related('event', 'member')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))

        event_member = queryset.filter(member_token=str(token)).first()
        if event_member is None:
            parsed = _as_uuid(token)
            if parsed is not None:
                event_member = queryset.filter(token=parsed).first()
        if event_member is None:
            raise EventMember.DoesNotExist(f'No registration with token {token}')
        return event_member

    @staticmethod
    def get(event_member_id, for_update=False):
        from apps.events.models import EventMember

        queryset = EventMember.objects.select_related('event', 'member')
        if for_update:
            queryset = queryset.select_for_update(of=('self',))
        parsed = _as_uuid(event_member_id)
        if parsed is None:
            raise EventMember.DoesNotExist(f'No registration with id {event_member_id}')
        return queryset.get(pk=parsed)

    # ── preferences ─────────────────────────────────────────────────────────

    @transaction.atomic
    def submit_preferences(self, token, venues=None, dates=None, times=None,
                           intend_to_attend=None, comments='', workplace_info='',
                           suggested_venue='', preference_special_vote=None):
        """
        Store the member's venue/date/time choices and assign the venue.

        Raises:
            EventMember.DoesNotExist: unknown token.
            ValueError: more than one venue chosen.
            IllegalTransition: the stage does not accept preferences.
        """
        venues = list(venues or [])
        if len(venues) > 1:
            raise ValueError('Only one venue can be selected')

        event_member = self.get_by_token(token, for_update=True)
        stages.apply(event_member, BmmEvent.SUBMIT_PREFERENCES)

        now = timezone.now()
        event_member.preferred_venues = venues
        event_member.preferred_dates = list(dates or [])
        event_member.preferred_times = list(times or [])
        event_member.preferred_attending = intend_to_attend
        event_member.preference_special_vote = preference_special_vote
        event_member.additional_comments = comments or ''
        event_member.workplace_info = workplace_info or ''
        event_member.suggested_venue = suggested_venue or ''
        if venues and not event_member.assigned_venue_final:
            event_member.assigned_venue_final = venues[0]
        event_member.preference_submitted_at = now
        event_member.venue_assigned_at = now
        event_member.last_activity_at = now
        event_member.save()

        logger.info(
            "Preferences submitted for %s: venue=%s",
            event_member.membership_number, event_member.assigned_venue_final,
        )
        return event_member

    def assign_venues_for_event(self, event_id):
        """
        Give every PREFERENCE_SUBMITTED member their first preferred venue.

        Returns a BatchResult; members without a preference count as failed.
        """
        from apps.core.results import BatchResult
        from apps.events.models import EventMember

        result = BatchResult()
        pending = EventMember.objects.filter(
            event_id=event_id, bmm_stage=BmmStage.PREFERENCE_SUBMITTED,
        ).order_by('region_desc', 'created_at')

        by_region = {}
        for event_member in pending:
            by_region.setdefault(event_member.region_desc, []).append(event_member)

        for region, members in by_region.items():
            for event_member in members:
                if not event_member.preferred_venues:
                    result.fail(f'{event_member.membership_number}: no preferred venue')
                    continue
                try:
                    with transaction.atomic():
                        stages.apply(event_member, BmmEvent.ASSIGN_VENUE)
                        event_member.assigned_venue_final = event_member.preferred_venues[0]
                        event_member.assigned_region = region
                        event_member.venue_assigned_by = 'SYSTEM'
                        event_member.venue_assigned_at = timezone.now()
                        event_member.save()
                    result.ok()
                except Exception as e:
                    logger.error("Venue assignment failed for %s: %s", event_member.membership_number, e)
                    result.fail(f'{event_member.membership_number}: {e}')

        logger.info(
            "Venue assignment for event %s: %s assigned, %s failed",
            event_id, result.success, result.failed,
        )
        return result

    # ── attendance ──────────────────────────────────────────────────────────

    @transaction.atomic
    def confirm_attendance(self, token):
        event_member = self.get_by_token(token, for_update=True)
        stages.apply(event_member, BmmEvent.CONFIRM_ATTENDANCE)

        now = timezone.now()
        event_member.is_attending = True
        event_member.attendance_confirmed = True
        event_member.attendance_decision_at = now
        event_member.last_activity_at = now
        event_member.save()

        event_member.member.is_attending = True
        event_member.member.save(update_fields=['is_attending', 'updated_at'])
        logger.info("Attendance confirmed for %s", event_member.membership_number)
        return event_member

    @staticmethod
    def _decline(event_member, reason=''):
        stages.apply(event_member, BmmEvent.DECLINE_ATTENDANCE)
        now = timezone.now()
        event_member.is_attending = False
        event_member.attendance_confirmed = False
        event_member.attendance_decision_at = now
        event_member.last_activity_at = now
        if reason:
            event_member.non_attendance_reason = reason

    @transaction.atomic
    def record_non_attendance(self, event_member_id, reason=''):
        event_member = self.get(event_member_id, for_update=True)
        self._decline(event_member, reason)
        event_member.save()
        logger.info("Non-attendance recorded for %s", event_member.membership_number)
        return event_member

    @transaction.atomic
    def process_non_attendance_with_special_vote(self, event_member_id, request):
        """
        Decline attendance and optionally apply for a special vote.

        `request` is a dict with `request_special_vote`, `reason`,
        `eligibility_reason`, `distance_from_venue`,
        `employer_work_requirement`, `medical_certificate_provided` and
        `additional_details`.

        Raises:
            ValueError: the member's region does not offer special votes.
        """
        event_member = self.get(event_member_id, for_update=True)
        if not self.config.allows_special_vote(event_member.region_desc):
            raise ValueError(
                f'Special vote is not available in {event_member.region_desc or "this region"}'
            )

        self._decline(event_member, request.get('reason') or '')

        if request.get('request_special_vote'):
            event_member.special_vote_requested = True
            event_member.special_vote_status = SpecialVoteStatus.PENDING
            event_member.special_vote_reason = request.get('reason') or ''
            event_member.special_vote_eligibility_reason = request.get('eligibility_reason') or ''
            event_member.distance_from_venue = str(request.get('distance_from_venue') or '')
            event_member.employer_work_requirement = bool(request.get('employer_work_requirement'))
            event_member.medical_certificate_provided = bool(request.get('medical_certificate_provided'))
            event_member.special_vote_application_reason = request.get('additional_details') or ''
            event_member.special_vote_application_date = timezone.now()

        event_member.save()
        logger.info(
            "Non-attendance for %s (special vote requested=%s)",
            event_member.membership_number, event_member.special_vote_requested,
        )
        return event_member

    @transaction.atomic
    def decide_special_vote(self, event_member_id, approved, admin_username):
        """
        Raises:
            ValueError: no pending application.
        """
        event_member = self.get(event_member_id, for_update=True)
        if event_member.special_vote_status != SpecialVoteStatus.PENDING:
            raise ValueError('No pending special vote application')

        event_member.special_vote_status = (
            SpecialVoteStatus.APPROVED if approved else SpecialVoteStatus.DECLINED
        )
        event_member.special_vote_eligible = bool(approved)
        event_member.special_vote_decision_date = timezone.now()
        event_member.special_vote_decision_by = admin_username or ''
        event_member.save()

        if approved:
            event_member.member.is_special_vote = True
            event_member.member.save(update_fields=['is_special_vote', 'updated_at'])
        logger.info(
            "Special vote for %s %s by %s",
            event_member.membership_number, event_member.special_vote_status, admin_username,
        )
        return event_member

    # ── tickets ─────────────────────────────────────────────────────────────

    def ticket_variables(self, event_member):
        return {
            'name': event_member.name,
            'membershipNumber': event_member.membership_number,
            'venue': event_member.assigned_venue_final or 'TBD',
            'dateTime': self.config.format_datetime(event_member.assigned_datetime_final),
            'ticketToken': str(event_member.ticket_token),
            'ticketLink': self.config.ticket_link(event_member.ticket_token),
        }

    @transaction.atomic
    def generate_and_send_ticket(self, event_member_id):
        """
        Issue a fresh ticket and notify the member.

        The ticket is saved before notifying; a notification failure only
        sets ticket_status to FAILED.
        """
        from apps.communication.services_dispatch import NotificationDispatcher

        event_member = self.get(event_member_id, for_update=True)
        stages.apply(event_member, BmmEvent.ISSUE_TICKET)

        event_member.ticket_token = uuid.uuid4()
        event_member.ticket_generated_at = timezone.now()
        event_member.ticket_status = TicketStatus.GENERATED
        event_member.ticket_pdf_path = self.config.ticket_pdf(
            event_member.event_id, event_member.ticket_token,
        )
        event_member.last_activity_at = timezone.now()
        event_member.save()

        try:
            with transaction.atomic():
                NotificationDispatcher.notify(
                    event_member, TemplateCode.BMM_TICKET, self.ticket_variables(event_member),
                )
            event_member.ticket_status = TicketStatus.SENT
        except Exception as e:
            logger.error("Ticket notification failed for %s: %s", event_member.membership_number, e)
            event_member.ticket_status = TicketStatus.FAILED

        event_member.save(update_fields=['ticket_status', 'updated_at'])
        return event_member

    # ── check-in ────────────────────────────────────────────────────────────

    @transaction.atomic
    def check_in(self, token, venue='', method=CheckInMethod.QR_SCAN, admin_username=''):
        """
        Check a member in by ticket token or link token.

        Raises:
            EventMember.DoesNotExist: unknown token.
            ValueError: already checked in, or not ticketed/confirmed.
        """
        from apps.events.models import EventMember

        event_member = None
        parsed = _as_uuid(token)
        if parsed is not None:
            event_member = (
                EventMember.objects.select_for_update(of=('self',))
                .select_related('event', 'member').filter(ticket_token=parsed).first()
            )
        if event_member is None:
            event_member = self.get_by_token(token, for_update=True)

        if event_member.checked_in:
            raise ValueError(f'{event_member.name} is already checked in')
        stages.apply(event_member, BmmEvent.CHECK_IN)

        now = timezone.now()
        event_member.checked_in = True
        event_member.check_in_time = now
        event_member.check_in_venue = venue or event_member.assigned_venue_final
        event_member.check_in_method = method
        event_member.check_in_admin_username = admin_username or ''
        event_member.last_activity_at = now
        event_member.save()
        logger.info(
            "Checked in %s at %s (%s)",
            event_member.membership_number, event_member.check_in_venue, method,
        )
        return event_member

    # ── corrections ─────────────────────────────────────────────────────────

    @transaction.atomic
    def set_stage(self, event_member_id, stage, admin_username):
        event_member = self.get(event_member_id, for_update=True)
        return stages.set_stage(event_member, stage, admin_username)
