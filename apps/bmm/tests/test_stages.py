"""Tests for the BMM stage machine."""
import pytest

from apps.bmm import stages
from apps.bmm.stages import BmmEvent, IllegalTransition
from apps.core.constants import BmmStage
from apps.events.tests.factories import EventMemberFactory


class TestNextStage:
    """Transition table lookups."""

    @pytest.mark.parametrize('current', [
        BmmStage.INVITED, BmmStage.PROFILE_UPDATED,
        BmmStage.PREFERENCE_SUBMITTED, BmmStage.VENUE_ASSIGNED,
    ])
    def test_submit_preferences_assigns_venue(self, current):
        assert stages.next_stage(current, BmmEvent.SUBMIT_PREFERENCES) == BmmStage.VENUE_ASSIGNED

    def test_confirm_after_decline(self):
        """A member who declined may change their mind."""
        result = stages.next_stage(BmmStage.ATTENDANCE_DECLINED, BmmEvent.CONFIRM_ATTENDANCE)
        assert result == BmmStage.ATTENDANCE_CONFIRMED

    def test_ticket_reissue(self):
        assert stages.next_stage(BmmStage.TICKET_ISSUED, BmmEvent.ISSUE_TICKET) == BmmStage.TICKET_ISSUED

    def test_check_in_from_confirmed(self):
        assert stages.next_stage(BmmStage.ATTENDANCE_CONFIRMED, BmmEvent.CHECK_IN) == BmmStage.CHECKED_IN

    @pytest.mark.parametrize('current,event', [
        (BmmStage.INVITED, BmmEvent.CONFIRM_ATTENDANCE),
        (BmmStage.INVITED, BmmEvent.CHECK_IN),
        (BmmStage.CHECKED_IN, BmmEvent.SUBMIT_PREFERENCES),
        (BmmStage.CHECKED_IN, BmmEvent.DECLINE_ATTENDANCE),
        (BmmStage.ATTENDANCE_DECLINED, BmmEvent.ISSUE_TICKET),
        (BmmStage.VENUE_ASSIGNED, BmmEvent.CHECK_IN),
    ])
    def test_illegal_transitions(self, current, event):
        with pytest.raises(IllegalTransition):
            stages.next_stage(current, event)

    def test_illegal_transition_is_value_error(self):
        with pytest.raises(ValueError, match='Cannot CHECK_IN from stage INVITED'):
            stages.next_stage(BmmStage.INVITED, BmmEvent.CHECK_IN)

    def test_unknown_stage(self):
        with pytest.raises(IllegalTransition):
            stages.next_stage('NOT_A_STAGE', BmmEvent.CHECK_IN)

    def test_can_transition(self):
        assert stages.can_transition(BmmStage.VENUE_ASSIGNED, BmmEvent.CONFIRM_ATTENDANCE)
        assert not stages.can_transition(BmmStage.CHECKED_IN, BmmEvent.CONFIRM_ATTENDANCE)


@pytest.mark.django_db
class TestStageHelpers:
    """Tests for advance_profile_stage and set_stage."""

    def test_profile_update_advances_invited(self):
        event_member = EventMemberFactory(bmm_stage=BmmStage.INVITED)
        assert stages.advance_profile_stage(event_member) is True
        assert event_member.bmm_stage == BmmStage.PROFILE_UPDATED

    def test_profile_update_keeps_later_stage(self):
        event_member = EventMemberFactory(bmm_stage=BmmStage.ATTENDANCE_CONFIRMED)
        assert stages.advance_profile_stage(event_member) is False
        assert event_member.bmm_stage == BmmStage.ATTENDANCE_CONFIRMED

    def test_set_stage_bypasses_table(self):
        """Admin corrections may move a member backwards."""
        event_member = EventMemberFactory(bmm_stage=BmmStage.CHECKED_IN)
        stages.set_stage(event_member, BmmStage.INVITED, 'admin')

        event_member.refresh_from_db()
        assert event_member.bmm_stage == BmmStage.INVITED
        assert event_member.last_activity_at is not None

    def test_set_stage_rejects_unknown_stage(self):
        event_member = EventMemberFactory()
        with pytest.raises(ValueError):
            stages.set_stage(event_member, 'NOWHERE', 'admin')
