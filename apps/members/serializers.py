"""
Members serializers - DRF serializers for the member API.

Serializers:
- MemberSerializer: Full member record for administrators
- MemberListSerializer: Lightweight serializer for lists
- MemberSelfServiceSerializer: What a member sees through their token
- VerificationSerializer / AttendanceChoiceSerializer: self-service input
- FinancialFormInputSerializer / FinancialFormSerializer: profile updates
- CsvImportSerializer / InformerImportSerializer / ImportHistorySerializer
"""
from rest_framework import serializers

from apps.core.constants import InformerDataset
from apps.events.models import Event

from .models import Member, FinancialForm, ImportHistory


# =============================================================================
# MEMBER SERIALIZERS
# =============================================================================

class MemberListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for member lists."""

    class Meta:
        model = Member
        fields = [
            'id',
            'membership_number',
            'name',
            'primary_email',
            'telephone_mobile',
            'has_email',
            'has_mobile',
            'region_desc',
            'has_registered',
            'is_attending',
            'data_source',
        ]


class MemberSerializer(serializers.ModelSerializer):
    """Full member serializer for administrators."""

    class Meta:
        model = Member
        exclude = ['is_active']


class MemberSelfServiceSerializer(serializers.ModelSerializer):
    """Member details shown on the registration pages; no credentials."""

    first_name = serializers.CharField(read_only=True)

    class Meta:
        model = Member
        fields = [
            'membership_number',
            'name',
            'first_name',
            'primary_email',
            'telephone_mobile',
            'dob',
            'address',
            'phone_home',
            'phone_work',
            'employer',
            'payroll_number',
            'site_number',
            'employment_status',
            'department',
            'job_title',
            'location',
            'region_desc',
            'has_registered',
            'is_attending',
            'is_special_vote',
            'absence_reason',
        ]
        read_only_fields = fields


class VerificationSerializer(serializers.Serializer):
    token = serializers.CharField()
    membership_number = serializers.CharField()
    verification_code = serializers.CharField(max_length=6)


class AttendanceChoiceSerializer(serializers.Serializer):
    is_attending = serializers.BooleanField()
    is_special_vote = serializers.BooleanField(required=False, default=False)
    absence_reason = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# FINANCIAL FORM SERIALIZERS
# =============================================================================

class FinancialFormInputSerializer(serializers.Serializer):
    """Editable profile fields; omitted fields are left unchanged."""

    name = serializers.CharField(required=False, max_length=255)
    primary_email = serializers.CharField(required=False, allow_blank=True, max_length=255)
    telephone_mobile = serializers.CharField(required=False, allow_blank=True, max_length=50)
    dob = serializers.CharField(required=False, allow_blank=True, max_length=20)
    address = serializers.CharField(required=False, allow_blank=True)
    phone_home = serializers.CharField(required=False, allow_blank=True, max_length=50)
    phone_work = serializers.CharField(required=False, allow_blank=True, max_length=50)
    employer = serializers.CharField(required=False, allow_blank=True, max_length=255)
    payroll_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    site_number = serializers.CharField(required=False, allow_blank=True, max_length=50)
    employment_status = serializers.CharField(required=False, allow_blank=True, max_length=50)
    department = serializers.CharField(required=False, allow_blank=True, max_length=255)
    job_title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)


class FinancialFormSerializer(serializers.ModelSerializer):

    class Meta:
        model = FinancialForm
        fields = [
            'id',
            'member',
            'event_member',
            'event',
            'membership_number',
            'member_name',
            'updated_fields',
            'before_data',
            'after_data',
            'form_type',
            'update_source',
            'stratum_sync_status',
            'stratum_sync_error',
            'created_at',
        ]
        read_only_fields = fields


# =============================================================================
# IMPORT SERIALIZERS
# =============================================================================

class CsvImportSerializer(serializers.Serializer):
    file = serializers.FileField()
    emergency_mode = serializers.BooleanField(required=False, default=False)

    def validate_file(self, value):
        if not value.name.lower().endswith('.csv'):
            raise serializers.ValidationError('Only .csv files are supported.')
        return value


class InformerImportSerializer(serializers.Serializer):
    token_or_url = serializers.CharField(max_length=500)
    dataset_kind = serializers.ChoiceField(choices=InformerDataset.CHOICES)
    event = serializers.PrimaryKeyRelatedField(
        queryset=Event.objects.all(), required=False, allow_null=True, default=None,
    )


class ImportHistorySerializer(serializers.ModelSerializer):
    imported_by_username = serializers.CharField(
        source='imported_by.username', read_only=True, default=None,
    )

    class Meta:
        model = ImportHistory
        fields = [
            'id',
            'filename',
            'data_source',
            'dataset_kind',
            'emergency_mode',
            'total_rows',
            'success_count',
            'error_count',
            'errors_json',
            'imported_by_username',
            'created_at',
        ]
        read_only_fields = fields
