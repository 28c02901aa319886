"""Communication API views."""
import logging

from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.permissions import IsAdmin

from .exceptions import DeliveryError
from .models import NotificationTemplate, NotificationLog
from .serializers import (
    NotificationTemplateSerializer,
    NotificationLogSerializer,
    BulkEmailSerializer,
    QuickEmailSerializer,
    QuickSmsSerializer,
)
from .services import NotificationTemplateService
from .services_email import EmailService

logger = logging.getLogger(__name__)


class NotificationTemplateViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAdmin]
    queryset = NotificationTemplate.objects.all()
    serializer_class = NotificationTemplateSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['template_type']
    search_fields = ['template_code', 'name']

    def perform_destroy(self, instance):
        instance.deactivate()

    @action(detail=False, methods=['post'], url_path='ensure-defaults')
    def ensure_defaults(self, request):
        """Create any missing built-in BMM templates."""
        templates = NotificationTemplateService.ensure_defaults()
        return Response(NotificationTemplateSerializer(templates, many=True).data)


class NotificationLogViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAdmin]
    queryset = NotificationLog.objects.all()
    serializer_class = NotificationLogSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = [
        'notification_type', 'template_code', 'provider', 'is_successful',
        'event', 'event_member', 'member',
    ]
    search_fields = ['recipient', 'recipient_name', 'subject']
    ordering_fields = ['sent_time', 'created_at']
    ordering = ['-created_at']


class BulkEmailView(APIView):
    """Personalised email to every member in a category."""
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = BulkEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = EmailService().send_bulk_by_category(
            data['category'], data['subject'], data['content'],
            provider=data['provider'], admin_username=request.user.get_username(),
        )
        return Response(result.as_dict())


class QuickEmailView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request):
        from apps.members.models import Member

        serializer = QuickEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            member = EmailService().send_quick_email(
                data['membership_number'], data['subject'], data['content'],
                admin_username=request.user.get_username(), provider=data['provider'],
            )
        except Member.DoesNotExist:
            return Response({'error': 'Member not found'}, status=status.HTTP_404_NOT_FOUND)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except DeliveryError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({'sent': True, 'recipient': member.primary_email})


class QuickSmsView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request):
        from apps.members.models import Member

        serializer = QuickSmsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            member = EmailService().send_quick_sms(
                data['membership_number'], data['content'],
                admin_username=request.user.get_username(),
            )
        except Member.DoesNotExist:
            return Response({'error': 'Member not found'}, status=status.HTTP_404_NOT_FOUND)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except DeliveryError as e:
            return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)
        return Response({'sent': True, 'recipient': member.telephone_mobile})
