"""
BMM stage machine.

`next_stage()` is the only way automated flows move an EventMember between
stages. Admin corrections go through `set_stage()`, which skips the table and
logs the override.
"""
import logging

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.constants import BmmStage

logger = logging.getLogger(__name__)


class BmmEvent(models.TextChoices):
    SUBMIT_PREFERENCES = 'SUBMIT_PREFERENCES', _('Submit preferences')
    ASSIGN_VENUE = 'ASSIGN_VENUE', _('Assign venue')
    CONFIRM_ATTENDANCE = 'CONFIRM_ATTENDANCE', _('Confirm attendance')
    DECLINE_ATTENDANCE = 'DECLINE_ATTENDANCE', _('Decline attendance')
    ISSUE_TICKET = 'ISSUE_TICKET', _('Issue ticket')
    CHECK_IN = 'CHECK_IN', _('Check in')
    UPDATE_PROFILE = 'UPDATE_PROFILE', _('Update profile')


class IllegalTransition(ValueError):
    """Raised for a (stage, event) pair the transition table does not allow."""

    def __init__(self, current, event):
        self.current = current
        self.event = event
        super().__init__(f'Cannot {event} from stage {current}')


def _rows(sources, event, target):
    return {(source, event): target for source in sources}


TRANSITIONS = {
    # Submitting preferences assigns the chosen venue straight away.
    **_rows(
        [BmmStage.INVITED, BmmStage.PROFILE_UPDATED,
         BmmStage.PREFERENCE_SUBMITTED, BmmStage.VENUE_ASSIGNED],
        BmmEvent.SUBMIT_PREFERENCES, BmmStage.VENUE_ASSIGNED,
    ),
    **_rows(
        [BmmStage.PREFERENCE_SUBMITTED],
        BmmEvent.ASSIGN_VENUE, BmmStage.VENUE_ASSIGNED,
    ),
    **_rows(
        [BmmStage.VENUE_ASSIGNED, BmmStage.ATTENDANCE_DECLINED],
        BmmEvent.CONFIRM_ATTENDANCE, BmmStage.ATTENDANCE_CONFIRMED,
    ),
    **_rows(
        [BmmStage.INVITED, BmmStage.PROFILE_UPDATED, BmmStage.PREFERENCE_SUBMITTED,
         BmmStage.VENUE_ASSIGNED, BmmStage.ATTENDANCE_CONFIRMED],
        BmmEvent.DECLINE_ATTENDANCE, BmmStage.ATTENDANCE_DECLINED,
    ),
    **_rows(
        [BmmStage.VENUE_ASSIGNED, BmmStage.ATTENDANCE_CONFIRMED, BmmStage.TICKET_ISSUED],
        BmmEvent.ISSUE_TICKET, BmmStage.TICKET_ISSUED,
    ),
    **_rows(
        [BmmStage.TICKET_ISSUED, BmmStage.ATTENDANCE_CONFIRMED],
        BmmEvent.CHECK_IN, BmmStage.CHECKED_IN,
    ),
    **_rows(
        [BmmStage.INVITED],
        BmmEvent.UPDATE_PROFILE, BmmStage.PROFILE_UPDATED,
    ),
}


def next_stage(current, event):
    """
    Stage reached by applying `event` in `current`.

    Raises:
        IllegalTransition: the pair is not in TRANSITIONS.
    """
    try:
        return TRANSITIONS[(BmmStage(current), BmmEvent(event))]
    except (KeyError, ValueError):
        raise IllegalTransition(current, event)


def can_transition(current, event):
    try:
        next_stage(current, event)
    except IllegalTransition:
        return False
    return True


def apply(event_member, event):
    """Move `event_member` through the table; the caller saves."""
    event_member.bmm_stage = next_stage(event_member.bmm_stage, event)
    return event_member.bmm_stage


def advance_profile_stage(event_member):
    """
    Profile edits only advance INVITED members; any other stage is kept.

    Returns True when the stage changed.
    """
    if can_transition(event_member.bmm_stage, BmmEvent.UPDATE_PROFILE):
        apply(event_member, BmmEvent.UPDATE_PROFILE)
        return True
    return False


def set_stage(event_member, stage, admin_username):
    """Corrective override outside the transition table."""
    stage = BmmStage(stage)
    previous = event_member.bmm_stage
    event_member.bmm_stage = stage
    event_member.last_activity_at = timezone.now()
    event_member.save(update_fields=['bmm_stage', 'last_activity_at', 'updated_at'])
    logger.warning(
        "Admin %s moved event member %s from %s to %s",
        admin_username, event_member.pk, previous, stage,
    )
    return event_member
