"""Reports API Views - dashboards and CSV exports for administrators."""
import uuid

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.constants import BmmStage
from apps.core.export import export_queryset_csv
from apps.core.permissions import IsAdmin
from apps.communication.models import NotificationLog
from apps.events.models import Event, EventMember
from apps.members.models import Member

from .services import ReportService


MEMBER_COLUMNS = [
    ('Membership number', 'membership_number'),
    ('Name', 'name'),
    ('Email', 'primary_email'),
    ('Mobile', 'telephone_mobile'),
    ('Region', 'region_desc'),
    ('Employer', 'employer'),
    ('Has email', 'has_email'),
    ('Has mobile', 'has_mobile'),
    ('Registered', 'has_registered'),
    ('Attending', 'is_attending'),
    ('Special vote', 'is_special_vote'),
    ('Voted', 'has_voted'),
    ('Data source', 'data_source'),
]

EVENT_MEMBER_COLUMNS = [
    ('Membership number', 'membership_number'),
    ('Name', 'name'),
    ('Email', 'primary_email'),
    ('Mobile', 'telephone_mobile'),
    ('Region', 'region_desc'),
    ('Employer', 'employer'),
    ('Stage', 'bmm_stage'),
    ('Registered', 'has_registered'),
    ('Preferred venues', 'preferred_venues'),
    ('Assigned venue', 'assigned_venue_final'),
    ('Assigned time', 'assigned_datetime_final'),
    ('Attending', 'is_attending'),
    ('Attendance confirmed', 'attendance_confirmed'),
    ('Special vote requested', 'special_vote_requested'),
    ('Special vote status', 'special_vote_status'),
    ('Ticket status', 'ticket_status'),
    ('Checked in', 'checked_in'),
]

CHECK_IN_COLUMNS = [
    ('Membership number', 'membership_number'),
    ('Name', 'name'),
    ('Region', 'region_desc'),
    ('Assigned venue', 'assigned_venue_final'),
    ('Check-in venue', 'check_in_venue'),
    ('Check-in time', 'check_in_time'),
    ('Method', 'check_in_method'),
    ('Checked in by', 'check_in_admin_username'),
]

NOTIFICATION_LOG_COLUMNS = [
    ('Sent', 'sent_time'),
    ('Event', 'event__event_code'),
    ('Type', 'notification_type'),
    ('Recipient', 'recipient'),
    ('Recipient name', 'recipient_name'),
    ('Template', 'template_code'),
    ('Email type', 'email_type'),
    ('Provider', 'provider'),
    ('Delivered', 'is_successful'),
    ('Error', 'error_message'),
    ('Sent by', 'admin_username'),
]


def _stamp():
    return timezone.localtime().strftime('%Y%m%d')


def _truthy(value):
    return value.lower() in ('1', 'true', 'yes')


class MembersOverviewView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(ReportService.members_overview())


class EventsOverviewView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(ReportService.events_overview())


class DataQualityView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        return Response(ReportService.data_quality())


class MemberExportView(APIView):
    """Member store as CSV; `region` narrows to one region."""

    permission_classes = [IsAdmin]

    def get(self, request):
        queryset = Member.objects.all()
        region = request.query_params.get('region')
        if region:
            queryset = queryset.filter(region_desc=region)
        return export_queryset_csv(queryset, MEMBER_COLUMNS, f'members_{_stamp()}')


class EventExportMixin:
    permission_classes = [IsAdmin]

    def get_event(self, event_id):
        return Event.objects.get(pk=event_id)

    def registrations(self, event):
        return EventMember.objects.filter(event=event).order_by('name')


class EventMemberExportView(EventExportMixin, APIView):
    """Registrations for one event as CSV; `stage` narrows to one BMM stage."""

    def get(self, request, event_id):
        try:
            event = self.get_event(event_id)
        except Event.DoesNotExist:
            return Response({'error': 'Event not found'}, status=status.HTTP_404_NOT_FOUND)

        queryset = self.registrations(event)
        stage = request.query_params.get('stage')
        if stage:
            if stage not in BmmStage.values:
                return Response(
                    {'error': f'Unknown stage: {stage}'},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            queryset = queryset.filter(bmm_stage=stage)
        return export_queryset_csv(
            queryset, EVENT_MEMBER_COLUMNS, f'{event.event_code}_members_{_stamp()}',
        )


class CheckInExportView(EventExportMixin, APIView):
    """Checked-in registrations for one event, earliest first."""

    def get(self, request, event_id):
        try:
            event = self.get_event(event_id)
        except Event.DoesNotExist:
            return Response({'error': 'Event not found'}, status=status.HTTP_404_NOT_FOUND)

        queryset = self.registrations(event).filter(checked_in=True).order_by('check_in_time')
        return export_queryset_csv(
            queryset, CHECK_IN_COLUMNS, f'{event.event_code}_check_ins_{_stamp()}',
        )


class NotificationLogExportView(APIView):
    """Notification log as CSV, filterable by `event` and `is_successful`."""

    permission_classes = [IsAdmin]

    def get(self, request):
        queryset = NotificationLog.objects.select_related('event').order_by('-sent_time')
        event_id = request.query_params.get('event')
        if event_id:
            try:
                queryset = queryset.filter(event_id=uuid.UUID(event_id))
            except ValueError:
                return Response(
                    {'error': f'Invalid event id: {event_id}'},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        delivered = request.query_params.get('is_successful')
        if delivered is not None:
            queryset = queryset.filter(is_successful=_truthy(delivered))
        return export_queryset_csv(
            queryset, NOTIFICATION_LOG_COLUMNS, f'notification_logs_{_stamp()}',
        )
