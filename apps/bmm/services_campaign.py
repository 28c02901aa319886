"""
BMM notification campaigns.

Each campaign selects the members that have not yet received a message,
queues one notification per member and flips that member's sent flag. A
member whose notification fails keeps the flag unset and is retried by the
next run.
"""
import logging

from django.db import transaction
from django.utils import timezone

from apps.core.config import BmmConfig
from apps.core.constants import BmmStage, SpecialVoteStatus, TemplateCode, TicketStatus
from apps.core.results import BatchResult

from .services import BmmService

logger = logging.getLogger(__name__)


class BmmCampaignService:
    """Region invitations, confirmation requests, special vote links and tickets."""

    def __init__(self, config=None):
        self.config = config or BmmConfig.from_settings()

    @staticmethod
    def _event(event_id):
        from apps.events.models import Event
        return Event.objects.get(pk=event_id)

    def _send(self, queryset, template_code, variables_for, flag, stamp, result):
        from apps.communication.services_dispatch import NotificationDispatcher

        for event_member in queryset:
            try:
                with transaction.atomic():
                    NotificationDispatcher.notify(
                        event_member, template_code, variables_for(event_member),
                    )
                    setattr(event_member, flag, True)
                    setattr(event_member, stamp, timezone.now())
                    event_member.save(update_fields=[flag, stamp, 'updated_at'])
                result.ok()
            except Exception as e:
                logger.error(
                    "%s failed for %s: %s", template_code, event_member.membership_number, e,
                )
                result.fail(f'{event_member.membership_number}: {e}')
        logger.info(
            "%s campaign: %s sent, %s failed", template_code, result.success, result.failed,
        )
        return result

    # ─── Campaigns ───────────────────────────────────────────────────────

    def send_invitations_by_region(self, event_id, region_desc):
        event = self._event(event_id)
        queryset = event.event_members.filter(
            region_desc=region_desc, bmm_invitation_sent=False,
        ).order_by('created_at')

        def variables(event_member):
            return {
                'name': event_member.name,
                'membershipNumber': event_member.membership_number,
                'eventName': event.name,
                'regionDesc': region_desc,
                'bmmLink': self.config.preferences_link(event_member.member_token),
            }

        return self._send(
            queryset, TemplateCode.BMM_INVITATION, variables,
            'bmm_invitation_sent', 'bmm_invitation_sent_at', BatchResult(),
        )

    def send_confirmation_requests(self, event_id):
        event = self._event(event_id)
        queryset = event.event_members.filter(
            bmm_stage=BmmStage.VENUE_ASSIGNED, bmm_confirmation_request_sent=False,
        ).order_by('created_at')

        def variables(event_member):
            return {
                'name': event_member.name,
                'membershipNumber': event_member.membership_number,
                'eventName': event.name,
                'venue': event_member.assigned_venue_final or 'TBD',
                'dateTime': self.config.format_datetime(event_member.assigned_datetime_final),
                'confirmationLink': self.config.confirmation_link(event_member.member_token),
            }

        return self._send(
            queryset, TemplateCode.BMM_CONFIRMATION, variables,
            'bmm_confirmation_request_sent', 'bmm_confirmation_request_sent_at', BatchResult(),
        )

    def send_special_vote_links(self, event_id):
        event = self._event(event_id)
        queryset = event.event_members.filter(
            special_vote_eligible=True,
            special_vote_status=SpecialVoteStatus.APPROVED,
            special_vote_link_sent=False,
        ).order_by('created_at')

        def variables(event_member):
            return {
                'name': event_member.name,
                'membershipNumber': event_member.membership_number,
                'eventName': event.name,
                'specialVoteLink': self.config.special_vote_link(event_member.member_token),
            }

        return self._send(
            queryset, TemplateCode.BMM_SPECIAL_VOTE, variables,
            'special_vote_link_sent', 'special_vote_sent_at', BatchResult(),
        )

    def send_tickets(self, event_id):
        """Issue tickets to confirmed attendees who have none yet."""
        event = self._event(event_id)
        pending = list(
            event.event_members.filter(
                bmm_stage=BmmStage.ATTENDANCE_CONFIRMED, ticket_token__isnull=True,
            ).order_by('created_at').values_list('pk', flat=True)
        )

        service = BmmService(self.config)
        result = BatchResult()
        for event_member_id in pending:
            try:
                event_member = service.generate_and_send_ticket(event_member_id)
            except Exception as e:
                logger.error("Ticket generation failed for %s: %s", event_member_id, e)
                result.fail(f'{event_member_id}: {e}')
                continue
            if event_member.ticket_status == TicketStatus.SENT:
                result.ok()
            else:
                result.fail(f'{event_member.membership_number}: ticket notification failed')

        logger.info("Ticket campaign: %s sent, %s failed", result.success, result.failed)
        return result
