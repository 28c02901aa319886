"""BMM API views: member self-service actions and admin operations."""
import logging

from django.core.exceptions import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import HasMemberToken, IsAdmin, IsSuperuser

from .serializers import (
    EventMemberBmmSerializer,
    PreferenceSerializer,
    TokenSerializer,
    NonAttendanceSerializer,
    EventIdSerializer,
    RegionInvitationSerializer,
    SpecialVoteDecisionSerializer,
    CheckInSerializer,
    SetStageSerializer,
)
from .services import BmmService
from .services_campaign import BmmCampaignService
from .services_stats import BmmStatisticsService

logger = logging.getLogger(__name__)


def _not_found(message='Registration not found'):
    return Response({'error': message}, status=status.HTTP_404_NOT_FOUND)


def _bad_request(error):
    return Response({'error': str(error)}, status=status.HTTP_400_BAD_REQUEST)


class BmmActionView(APIView):
    """
    Base view: validates input, runs `perform()` and maps service errors.

    Subclasses set `serializer_class` and implement `perform(data)`.
    """
    serializer_class = None

    def post(self, request, **kwargs):
        from apps.events.models import Event, EventMember

        serializer = self.serializer_class(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            return self.perform(serializer.validated_data, **kwargs)
        except EventMember.DoesNotExist:
            return _not_found()
        except Event.DoesNotExist:
            return _not_found('Event not found')
        except ValueError as e:
            return _bad_request(e)

    def perform(self, data, **kwargs):
        raise NotImplementedError

    @property
    def admin_username(self):
        return self.request.user.get_username()

    @staticmethod
    def member_response(event_member):
        return Response(EventMemberBmmSerializer(event_member).data)


# =============================================================================
# MEMBER ACTIONS
# =============================================================================

class PreferenceView(BmmActionView):
    permission_classes = [HasMemberToken]
    serializer_class = PreferenceSerializer

    def perform(self, data):
        return self.member_response(BmmService().submit_preferences(**data))


class ConfirmAttendanceView(BmmActionView):
    permission_classes = [HasMemberToken]
    serializer_class = TokenSerializer

    def perform(self, data):
        return self.member_response(BmmService().confirm_attendance(data['token']))


class NonAttendanceView(BmmActionView):
    """Decline attendance; optionally apply for a special vote."""
    permission_classes = [HasMemberToken]
    serializer_class = NonAttendanceSerializer

    def perform(self, data):
        service = BmmService()
        event_member = service.get_by_token(data.pop('token'))
        if data['request_special_vote']:
            event_member = service.process_non_attendance_with_special_vote(event_member.pk, data)
        else:
            event_member = service.record_non_attendance(event_member.pk, data['reason'])
        return self.member_response(event_member)


# =============================================================================
# ADMIN ACTIONS
# =============================================================================

class TicketView(APIView):
    """Issue (or reissue) a ticket and notify the member."""
    permission_classes = [IsAdmin]

    def post(self, request, pk):
        from apps.events.models import EventMember

        try:
            event_member = BmmService().generate_and_send_ticket(pk)
        except EventMember.DoesNotExist:
            return _not_found()
        except ValueError as e:
            return _bad_request(e)
        return Response(EventMemberBmmSerializer(event_member).data)


class AssignVenuesView(BmmActionView):
    permission_classes = [IsAdmin]
    serializer_class = EventIdSerializer

    def perform(self, data):
        return Response(BmmService().assign_venues_for_event(data['event_id']).as_dict())


class InvitationCampaignView(BmmActionView):
    permission_classes = [IsAdmin]
    serializer_class = RegionInvitationSerializer

    def perform(self, data):
        result = BmmCampaignService().send_invitations_by_region(
            data['event_id'], data['region_desc'],
        )
        return Response(result.as_dict())


class ConfirmationCampaignView(BmmActionView):
    permission_classes = [IsAdmin]
    serializer_class = EventIdSerializer

    def perform(self, data):
        return Response(BmmCampaignService().send_confirmation_requests(data['event_id']).as_dict())


class SpecialVoteLinkCampaignView(BmmActionView):
    permission_classes = [IsAdmin]
    serializer_class = EventIdSerializer

    def perform(self, data):
        return Response(BmmCampaignService().send_special_vote_links(data['event_id']).as_dict())


class TicketCampaignView(BmmActionView):
    permission_classes = [IsAdmin]
    serializer_class = EventIdSerializer

    def perform(self, data):
        return Response(BmmCampaignService().send_tickets(data['event_id']).as_dict())


class StatisticsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        from apps.events.models import Event

        event_id = request.query_params.get('event_id')
        if not event_id:
            return _bad_request('event_id is required')
        try:
            stats = BmmStatisticsService().statistics(event_id)
        except (Event.DoesNotExist, ValidationError):
            return _not_found('Event not found')
        return Response(stats)


class SpecialVoteDecisionView(BmmActionView):
    permission_classes = [IsAdmin]
    serializer_class = SpecialVoteDecisionSerializer

    def perform(self, data, pk):
        event_member = BmmService().decide_special_vote(pk, data['approved'], self.admin_username)
        return self.member_response(event_member)


class CheckInView(BmmActionView):
    permission_classes = [IsAdmin]
    serializer_class = CheckInSerializer

    def perform(self, data):
        event_member = BmmService().check_in(
            data['token'], venue=data['venue'], method=data['method'],
            admin_username=self.admin_username,
        )
        return self.member_response(event_member)


class SetStageView(BmmActionView):
    """Corrective stage override outside the normal workflow."""
    permission_classes = [IsSuperuser]
    serializer_class = SetStageSerializer

    def perform(self, data, pk):
        event_member = BmmService().set_stage(pk, data['stage'], self.admin_username)
        return self.member_response(event_member)
