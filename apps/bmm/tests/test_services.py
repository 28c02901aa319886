"""
Tests for BmmService.
"""
import uuid
from unittest.mock import patch

import pytest

from apps.bmm.services import BmmService
from apps.bmm.stages import IllegalTransition
from apps.core.constants import BmmStage, CheckInMethod, SpecialVoteStatus, TicketStatus
from apps.events.models import EventMember
from apps.events.tests.factories import EventMemberFactory
from apps.members.tests.factories import MemberFactory

pytestmark = pytest.mark.django_db


@pytest.fixture
def service():
    return BmmService()


@pytest.fixture
def central_member():
    """Registration in a region that offers special votes."""
    member = MemberFactory(region_desc='Central Region')
    return EventMemberFactory(member=member, bmm_stage=BmmStage.VENUE_ASSIGNED)


# ─── Lookups ─────────────────────────────────────────────────────────────────


class TestLookups:

    def test_by_member_token(self, service):
        event_member = EventMemberFactory()
        assert service.get_by_token(event_member.member_token) == event_member

    def test_by_uuid_token(self, service):
        event_member = EventMemberFactory()
        assert service.get_by_token(str(event_member.token)) == event_member

    def test_unknown_token(self, service):
        with pytest.raises(EventMember.DoesNotExist):
            service.get_by_token('ffffffffffffffff')

    def test_malformed_id(self, service):
        with pytest.raises(EventMember.DoesNotExist):
            service.get('not-a-uuid')


# ─── Preferences ─────────────────────────────────────────────────────────────


class TestSubmitPreferences:

    def test_single_venue_assigns_it(self, service):
        """Submitting one venue moves straight to VENUE_ASSIGNED."""
        event_member = EventMemberFactory()
        result = service.submit_preferences(
            event_member.member_token, venues=['Auckland Town Hall'],
            dates=['2025-03-04'], times=['morning'], intend_to_attend=True,
        )

        assert result.bmm_stage == BmmStage.VENUE_ASSIGNED
        assert result.assigned_venue_final == 'Auckland Town Hall'
        assert result.preferred_venues == ['Auckland Town Hall']
        assert result.preference_submitted_at is not None
        assert result.venue_assigned_at is not None

    def test_existing_assignment_kept(self, service):
        event_member = EventMemberFactory(assigned_venue_final='Hamilton')
        result = service.submit_preferences(event_member.member_token, venues=['Auckland'])
        assert result.assigned_venue_final == 'Hamilton'

    def test_two_venues_rejected(self, service):
        event_member = EventMemberFactory()
        with pytest.raises(ValueError, match='Only one venue'):
            service.submit_preferences(event_member.member_token, venues=['A', 'B'])

        event_member.refresh_from_db()
        assert event_member.bmm_stage == BmmStage.INVITED
        assert event_member.preferred_venues == []

    def test_rejected_after_check_in(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.CHECKED_IN)
        with pytest.raises(IllegalTransition):
            service.submit_preferences(event_member.member_token, venues=['A'])


class TestAssignVenues:

    def test_assigns_first_preference(self, service):
        event_member = EventMemberFactory(
            bmm_stage=BmmStage.PREFERENCE_SUBMITTED, preferred_venues=['Napier', 'Hastings'],
        )
        result = service.assign_venues_for_event(event_member.event_id)

        event_member.refresh_from_db()
        assert result.success == 1
        assert event_member.bmm_stage == BmmStage.VENUE_ASSIGNED
        assert event_member.assigned_venue_final == 'Napier'
        assert event_member.assigned_region == event_member.region_desc
        assert event_member.venue_assigned_by == 'SYSTEM'

    def test_member_without_preference_fails(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.PREFERENCE_SUBMITTED)
        result = service.assign_venues_for_event(event_member.event_id)

        assert result.failed == 1
        assert 'no preferred venue' in result.errors[0]

    def test_other_stages_ignored(self, service):
        event_member = EventMemberFactory(preferred_venues=['Napier'])
        result = service.assign_venues_for_event(event_member.event_id)
        assert result.total == 0


# ─── Attendance ──────────────────────────────────────────────────────────────


class TestAttendance:

    def test_confirm(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.VENUE_ASSIGNED)
        result = service.confirm_attendance(event_member.member_token)

        assert result.bmm_stage == BmmStage.ATTENDANCE_CONFIRMED
        assert result.attendance_confirmed is True
        result.member.refresh_from_db()
        assert result.member.is_attending is True

    def test_confirm_requires_venue(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.INVITED)
        with pytest.raises(IllegalTransition):
            service.confirm_attendance(event_member.member_token)

    def test_record_non_attendance(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.ATTENDANCE_CONFIRMED)
        result = service.record_non_attendance(event_member.pk, 'Working that day')

        assert result.bmm_stage == BmmStage.ATTENDANCE_DECLINED
        assert result.is_attending is False
        assert result.attendance_confirmed is False
        assert result.non_attendance_reason == 'Working that day'


class TestSpecialVote:

    def test_application_in_central_region(self, service, central_member):
        result = service.process_non_attendance_with_special_vote(central_member.pk, {
            'request_special_vote': True,
            'reason': 'Rostered on',
            'eligibility_reason': 'Work',
            'distance_from_venue': 120,
            'employer_work_requirement': True,
        })

        assert result.bmm_stage == BmmStage.ATTENDANCE_DECLINED
        assert result.special_vote_requested is True
        assert result.special_vote_status == SpecialVoteStatus.PENDING
        assert result.distance_from_venue == '120'
        assert result.employer_work_requirement is True
        assert result.special_vote_application_date is not None

    def test_decline_without_application(self, service, central_member):
        result = service.process_non_attendance_with_special_vote(
            central_member.pk, {'request_special_vote': False},
        )
        assert result.bmm_stage == BmmStage.ATTENDANCE_DECLINED
        assert result.special_vote_status == SpecialVoteStatus.NOT_APPLICABLE

    def test_northern_region_rejected_without_changes(self, service):
        """Northern members cannot apply and nothing is written."""
        event_member = EventMemberFactory(bmm_stage=BmmStage.VENUE_ASSIGNED)

        with pytest.raises(ValueError, match='Special vote is not available in Northern Region'):
            service.process_non_attendance_with_special_vote(
                event_member.pk, {'request_special_vote': True},
            )

        event_member.refresh_from_db()
        assert event_member.bmm_stage == BmmStage.VENUE_ASSIGNED
        assert event_member.special_vote_requested is False

    def test_approve(self, service, central_member):
        service.process_non_attendance_with_special_vote(
            central_member.pk, {'request_special_vote': True},
        )
        result = service.decide_special_vote(central_member.pk, True, 'organiser')

        assert result.special_vote_status == SpecialVoteStatus.APPROVED
        assert result.special_vote_eligible is True
        assert result.special_vote_decision_by == 'organiser'
        result.member.refresh_from_db()
        assert result.member.is_special_vote is True

    def test_decline(self, service, central_member):
        service.process_non_attendance_with_special_vote(
            central_member.pk, {'request_special_vote': True},
        )
        result = service.decide_special_vote(central_member.pk, False, 'organiser')

        assert result.special_vote_status == SpecialVoteStatus.DECLINED
        assert result.special_vote_eligible is False

    def test_decision_requires_pending_application(self, service, central_member):
        with pytest.raises(ValueError, match='No pending special vote application'):
            service.decide_special_vote(central_member.pk, True, 'organiser')


# ─── Tickets ─────────────────────────────────────────────────────────────────


class TestTickets:

    def test_ticket_sent(self, service):
        event_member = EventMemberFactory(
            bmm_stage=BmmStage.ATTENDANCE_CONFIRMED, assigned_venue_final='Wellington',
        )
        result = service.generate_and_send_ticket(event_member.pk)

        event_member.refresh_from_db()
        assert result.ticket_status == TicketStatus.SENT
        assert event_member.ticket_status == TicketStatus.SENT
        assert event_member.bmm_stage == BmmStage.TICKET_ISSUED
        assert event_member.ticket_token is not None
        assert event_member.ticket_pdf_path == (
            f'/tickets/bmm-{event_member.event_id}-{event_member.ticket_token}.pdf'
        )
        assert event_member.ticket_email_sent is True

    def test_notification_failure_keeps_ticket(self, service):
        """The ticket survives a failed notification, flagged FAILED."""
        event_member = EventMemberFactory(bmm_stage=BmmStage.ATTENDANCE_CONFIRMED)

        with patch(
            'apps.communication.services_dispatch.NotificationDispatcher.notify',
            side_effect=RuntimeError('queue down'),
        ):
            result = service.generate_and_send_ticket(event_member.pk)

        event_member.refresh_from_db()
        assert result.ticket_status == TicketStatus.FAILED
        assert event_member.ticket_status == TicketStatus.FAILED
        assert event_member.ticket_token is not None
        assert event_member.bmm_stage == BmmStage.TICKET_ISSUED

    def test_member_without_contact_fails(self, service):
        member = MemberFactory(primary_email=None, has_email=False, telephone_mobile='', has_mobile=False)
        event_member = EventMemberFactory(member=member, bmm_stage=BmmStage.ATTENDANCE_CONFIRMED)

        result = service.generate_and_send_ticket(event_member.pk)
        assert result.ticket_status == TicketStatus.FAILED

    def test_reissue_replaces_token(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.ATTENDANCE_CONFIRMED)
        first = service.generate_and_send_ticket(event_member.pk).ticket_token
        second = service.generate_and_send_ticket(event_member.pk).ticket_token
        assert first != second

    def test_ticket_requires_confirmation(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.ATTENDANCE_DECLINED)
        with pytest.raises(IllegalTransition):
            service.generate_and_send_ticket(event_member.pk)

    def test_ticket_variables(self, service):
        event_member = EventMemberFactory(ticket_token=uuid.uuid4())
        variables = service.ticket_variables(event_member)

        assert variables['venue'] == 'TBD'
        assert variables['dateTime'] == 'TBD'
        assert variables['ticketLink'].endswith(f'token={event_member.ticket_token}')


# ─── Check-in ────────────────────────────────────────────────────────────────


class TestCheckIn:

    def test_by_ticket_token(self, service):
        event_member = EventMemberFactory(
            bmm_stage=BmmStage.TICKET_ISSUED, ticket_token=uuid.uuid4(),
            assigned_venue_final='Christchurch',
        )
        result = service.check_in(str(event_member.ticket_token), admin_username='door')

        assert result.bmm_stage == BmmStage.CHECKED_IN
        assert result.checked_in is True
        assert result.check_in_venue == 'Christchurch'
        assert result.check_in_method == CheckInMethod.QR_SCAN
        assert result.check_in_admin_username == 'door'

    def test_by_member_token_with_venue(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.ATTENDANCE_CONFIRMED)
        result = service.check_in(
            event_member.member_token, venue='Dunedin', method=CheckInMethod.MANUAL,
        )
        assert result.check_in_venue == 'Dunedin'
        assert result.check_in_method == CheckInMethod.MANUAL

    def test_twice_rejected(self, service):
        event_member = EventMemberFactory(
            bmm_stage=BmmStage.TICKET_ISSUED, ticket_token=uuid.uuid4(),
        )
        service.check_in(str(event_member.ticket_token))
        with pytest.raises(ValueError, match='already checked in'):
            service.check_in(str(event_member.ticket_token))

    def test_not_confirmed(self, service):
        event_member = EventMemberFactory(bmm_stage=BmmStage.INVITED)
        with pytest.raises(IllegalTransition):
            service.check_in(event_member.member_token)

    def test_unknown_token(self, service):
        with pytest.raises(EventMember.DoesNotExist):
            service.check_in(str(uuid.uuid4()))
