"""Events API Views."""
from django.db.models import Count
from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.permissions import IsAdmin

from .models import Event, EventTemplate
from .serializers import (
    EventSerializer,
    EventListSerializer,
    EventTemplateSerializer,
    EventFromTemplateSerializer,
    EnrollSerializer,
    EventMemberSerializer,
)
from .services import EventTemplateService, EventMemberService


class EventViewSet(viewsets.ModelViewSet):
    """ViewSet for Event CRUD, enrollment and resolved configuration."""

    permission_classes = [IsAdmin]
    queryset = Event.objects.all().select_related('event_template')
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['event_type', 'registration_open', 'qr_scan_enabled', 'sync_status']
    search_fields = ['name', 'event_code', 'description', 'venue']
    ordering_fields = ['event_date', 'name', 'created_at']
    ordering = ['-event_date']

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.action == 'list':
            queryset = queryset.annotate(member_count=Count('event_members'))
        return queryset

    def get_serializer_class(self):
        if self.action == 'list':
            return EventListSerializer
        return EventSerializer

    def perform_destroy(self, instance):
        instance.deactivate()

    @action(detail=False, methods=['post'], url_path='from-template')
    def from_template(self, request):
        """Create an event pre-configured from a template."""
        serializer = EventFromTemplateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        template = data.pop('template')
        try:
            event = EventTemplateService.create_event_from_template(template, data)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def enroll(self, request, pk=None):
        """Register members for this event; existing registrations get a fresh contact snapshot."""
        from apps.members.models import Member

        event = self.get_object()
        serializer = EnrollSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        queryset = Member.objects.all()
        if serializer.validated_data['regions']:
            queryset = queryset.filter(region_desc__in=serializer.validated_data['regions'])
        created = EventMemberService.enroll_members(event, queryset)
        return Response({'enrolled': created, 'total': event.event_members.count()})

    @action(detail=True, methods=['get'])
    def configuration(self, request, pk=None):
        """Effective feature flags, steps and page copy for the event."""
        event = self.get_object()
        return Response({
            'configuration': EventTemplateService.effective_configuration(event),
            'registrationSteps': EventTemplateService.registration_steps(event),
            'pageContent': EventTemplateService.page_content(event),
            'notificationTemplates': EventTemplateService.notification_templates(event),
        })

    @action(detail=True, methods=['get'])
    def members(self, request, pk=None):
        """Registrations for this event, optionally filtered by stage or region."""
        event = self.get_object()
        queryset = event.event_members.all().order_by('name')
        stage = request.query_params.get('stage')
        region = request.query_params.get('region')
        if stage:
            queryset = queryset.filter(bmm_stage=stage)
        if region:
            queryset = queryset.filter(region_desc=region)

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(EventMemberSerializer(page, many=True).data)
        return Response(EventMemberSerializer(queryset, many=True).data)


class EventTemplateViewSet(viewsets.ModelViewSet):
    """ViewSet for event templates."""

    permission_classes = [IsAdmin]
    queryset = EventTemplate.objects.all()
    serializer_class = EventTemplateSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['event_type', 'is_default_template']
    search_fields = ['template_name', 'template_description']

    def perform_destroy(self, instance):
        instance.deactivate()

    @action(detail=False, methods=['post'], url_path='seed-defaults')
    def seed_defaults(self, request):
        created = EventTemplateService.seed_default_templates()
        return Response({'created': created})
