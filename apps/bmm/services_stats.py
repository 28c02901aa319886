"""Read-only BMM dashboard aggregates."""
import logging

from django.db.models import Count, Q

from apps.core.config import BmmConfig
from apps.core.constants import BmmStage, SpecialVoteStatus

logger = logging.getLogger(__name__)


def _rate(part, whole):
    return round(part / whole, 4) if whole else 0.0


class BmmStatisticsService:
    """Counts per stage, region and venue for one event."""

    def __init__(self, config=None):
        self.config = config or BmmConfig.from_settings()

    @staticmethod
    def _counts(queryset):
        return queryset.aggregate(
            total=Count('id'),
            confirmed=Count('id', filter=Q(attendance_confirmed=True)),
            declined=Count('id', filter=Q(attendance_confirmed=False)),
            checked_in=Count('id', filter=Q(checked_in=True)),
        )

    def statistics(self, event_id):
        from apps.events.models import Event

        event = Event.objects.get(pk=event_id)
        members = event.event_members.all()

        stage_counts = {stage.value: 0 for stage in BmmStage}
        for row in members.values('bmm_stage').annotate(count=Count('id')):
            stage_counts[row['bmm_stage']] = row['count']

        totals = members.aggregate(
            total=Count('id'),
            attendance_confirmed=Count('id', filter=Q(attendance_confirmed=True)),
            attendance_declined=Count('id', filter=Q(attendance_confirmed=False)),
            checked_in=Count('id', filter=Q(checked_in=True)),
            special_vote_eligible=Count('id', filter=Q(special_vote_eligible=True)),
            special_vote_requested=Count('id', filter=Q(special_vote_requested=True)),
            special_vote_approved=Count(
                'id', filter=Q(special_vote_status=SpecialVoteStatus.APPROVED),
            ),
            special_vote_completed=Count('id', filter=Q(special_vote_completed_at__isnull=False)),
            invitations_sent=Count('id', filter=Q(bmm_invitation_sent=True)),
            confirmation_requests_sent=Count('id', filter=Q(bmm_confirmation_request_sent=True)),
            ticket_emails_sent=Count('id', filter=Q(ticket_email_sent=True)),
            special_vote_links_sent=Count('id', filter=Q(special_vote_link_sent=True)),
        )

        regional_stats = {}
        for region in members.order_by().values_list('region_desc', flat=True).distinct():
            counts = self._counts(members.filter(region_desc=region))
            counts['invited'] = members.filter(
                region_desc=region, bmm_invitation_sent=True,
            ).count()
            regional_stats[region or 'Unknown'] = counts

        venue_stats = {}
        capacity = self.config.venue_capacity
        venues = (
            members.exclude(assigned_venue_final='')
            .order_by().values_list('assigned_venue_final', flat=True).distinct()
        )
        for venue in venues:
            counts = self._counts(members.filter(assigned_venue_final=venue))
            assigned = counts.pop('total')
            venue_stats[venue] = {
                'assigned': assigned,
                **counts,
                'capacity': capacity,
                'utilization_rate': _rate(assigned, capacity),
            }

        return {
            'event_id': str(event.pk),
            'event_name': event.name,
            **totals,
            'stage_counts': stage_counts,
            'pending': {
                'preferences': stage_counts[BmmStage.INVITED] + stage_counts[BmmStage.PROFILE_UPDATED],
                'venue_assignment': stage_counts[BmmStage.PREFERENCE_SUBMITTED],
                'attendance_confirmation': stage_counts[BmmStage.VENUE_ASSIGNED],
                'ticket': stage_counts[BmmStage.ATTENDANCE_CONFIRMED],
                'check_in': stage_counts[BmmStage.TICKET_ISSUED],
                'special_vote_decision': members.filter(
                    special_vote_status=SpecialVoteStatus.PENDING,
                ).count(),
            },
            'regional_stats': regional_stats,
            'venue_stats': venue_stats,
        }
