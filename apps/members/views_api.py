"""REST API endpoints for members, self-service and imports."""
import logging

from rest_framework import viewsets, status, filters
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.constants import UpdateSource
from apps.core.permissions import IsAdmin

from .models import Member, ImportHistory
from .serializers import (
    MemberSerializer,
    MemberListSerializer,
    MemberSelfServiceSerializer,
    VerificationSerializer,
    AttendanceChoiceSerializer,
    FinancialFormInputSerializer,
    FinancialFormSerializer,
    CsvImportSerializer,
    InformerImportSerializer,
    ImportHistorySerializer,
)
from .services import MemberService, FinancialFormService
from .services_import import MemberCsvImportService, InformerImportService

logger = logging.getLogger(__name__)


def client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class MemberViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only member records for administrators."""

    permission_classes = [IsAdmin]
    queryset = Member.objects.all()
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = [
        'region_desc', 'data_source', 'has_email', 'has_mobile',
        'has_registered', 'is_attending', 'is_special_vote', 'has_voted',
    ]
    search_fields = ['membership_number', 'name', 'primary_email', 'telephone_mobile']
    ordering_fields = ['name', 'membership_number', 'created_at']
    ordering = ['name']

    def get_serializer_class(self):
        if self.action == 'list':
            return MemberListSerializer
        return MemberSerializer


# =============================================================================
# SELF-SERVICE (token authorised)
# =============================================================================

class MemberByTokenView(APIView):
    """GET the member behind a registration token."""
    permission_classes = [AllowAny]

    def get(self, request, token):
        try:
            member = MemberService.find_by_token(token)
        except Member.DoesNotExist:
            return Response({'error': 'Member not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(MemberSelfServiceSerializer(member).data)


class MemberVerifyView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = VerificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            member = MemberService.verify(**serializer.validated_data)
        except Member.DoesNotExist:
            return Response(
                {'error': 'Membership number or verification code does not match'},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(MemberSelfServiceSerializer(member).data)


class FinancialFormView(APIView):
    """POST a self-service profile update."""
    permission_classes = [AllowAny]

    def post(self, request, token):
        serializer = FinancialFormInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            form = FinancialFormService.submit(
                token, serializer.validated_data,
                source=UpdateSource.WEB, ip=client_ip(request),
                updated_by=request.user.get_username() if request.user.is_authenticated else 'SYSTEM',
            )
        except Member.DoesNotExist:
            return Response({'error': 'Member not found'}, status=status.HTTP_404_NOT_FOUND)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(FinancialFormSerializer(form).data, status=status.HTTP_201_CREATED)


class AttendanceChoiceView(APIView):
    permission_classes = [AllowAny]

    def post(self, request, token):
        serializer = AttendanceChoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            member = MemberService.update_attendance_choice(token, **serializer.validated_data)
        except Member.DoesNotExist:
            return Response({'error': 'Member not found'}, status=status.HTTP_404_NOT_FOUND)
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(MemberSelfServiceSerializer(member).data)


# =============================================================================
# IMPORTS (admin)
# =============================================================================

class CsvImportView(APIView):
    permission_classes = [IsAdmin]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = CsvImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            history, result = MemberCsvImportService.import_csv(
                serializer.validated_data['file'],
                emergency_mode=serializer.validated_data['emergency_mode'],
                imported_by=request.user,
            )
        except ValueError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({
            **result.as_dict(),
            'import_id': str(history.pk),
        })


class InformerImportView(APIView):
    permission_classes = [IsAdmin]

    def post(self, request):
        serializer = InformerImportSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = InformerImportService.import_dataset(
            serializer.validated_data['token_or_url'],
            serializer.validated_data['dataset_kind'],
            imported_by=request.user,
            event=serializer.validated_data['event'],
        )
        return Response(result.as_dict())


class ImportHistoryViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAdmin]
    serializer_class = ImportHistorySerializer
    queryset = ImportHistory.objects.select_related('imported_by')
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['data_source', 'dataset_kind', 'emergency_mode']
