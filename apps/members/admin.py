"""Member management admin configuration."""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.admin import BaseModelAdmin, AppendOnlyModelAdmin

from .models import Member, FinancialForm, ImportHistory


class FinancialFormInline(admin.TabularInline):
    """Profile update history on the member page."""
    model = FinancialForm
    fk_name = 'member'
    extra = 0
    can_delete = False
    fields = ['created_at', 'update_source', 'updated_fields', 'stratum_sync_status']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Member)
class MemberAdmin(BaseModelAdmin):
    """Admin for union members with contact, provenance and employment details."""

    list_display = [
        'membership_number',
        'name',
        'primary_email',
        'telephone_mobile',
        'region_desc',
        'data_source',
        'has_registered',
        'is_active',
    ]

    list_filter = [
        'data_source',
        'region_desc',
        'has_email',
        'has_mobile',
        'has_registered',
        'is_attending',
        'is_active',
    ]

    search_fields = [
        'membership_number',
        'name',
        'primary_email',
        'telephone_mobile',
    ]

    readonly_fields = [
        'id',
        'token',
        'verification_code',
        'data_source',
        'import_batch_id',
        'last_sync_time',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        (_('Identification'), {
            'fields': ('membership_number', 'name', 'token', 'verification_code')
        }),
        (_('Contact'), {
            'fields': (
                'primary_email',
                'telephone_mobile',
                'phone_home',
                'phone_work',
                'has_email',
                'has_mobile',
            )
        }),
        (_('Personal'), {
            'fields': (
                'fore1', 'known_as', 'surname', 'dob', 'dob_date',
                'gender_desc', 'age_of_member', 'ethnic_region_desc', 'ethnic_origin_desc',
            ),
            'classes': ('collapse',)
        }),
        (_('Address'), {
            'fields': (
                'address', 'add_res1', 'add_res2', 'add_res3',
                'add_res4', 'add_res5', 'add_res_pc',
            ),
            'classes': ('collapse',)
        }),
        (_('Employment'), {
            'fields': (
                'employer', 'employer_name', 'employee_ref', 'payroll_number',
                'site_number', 'employment_status', 'department', 'job_title',
                'occupation', 'location',
            ),
            'classes': ('collapse',)
        }),
        (_('Union'), {
            'fields': (
                'region_desc', 'branch_desc', 'workplace_desc', 'forum_desc',
                'site_industry_desc', 'site_sub_industry_desc', 'bargaining_group_desc',
                'membership_type_desc', 'financial_indicator',
            )
        }),
        (_('Registration'), {
            'fields': (
                'has_registered', 'is_attending', 'is_special_vote',
                'has_voted', 'absence_reason',
            )
        }),
        (_('Provenance'), {
            'fields': ('data_source', 'import_batch_id', 'last_sync_time'),
        }),
        (_('Metadata'), {
            'fields': ('id', 'is_active', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    inlines = [FinancialFormInline]


@admin.register(FinancialForm)
class FinancialFormAdmin(AppendOnlyModelAdmin):
    """Audit trail of self-service profile updates."""

    list_display = [
        'membership_number',
        'member_name',
        'form_type',
        'update_source',
        'stratum_sync_status',
        'created_at',
    ]
    list_filter = ['form_type', 'update_source', 'stratum_sync_status', 'created_at']
    search_fields = ['membership_number', 'member_name', 'primary_email']
    raw_id_fields = ['member', 'event_member', 'event']


@admin.register(ImportHistory)
class ImportHistoryAdmin(AppendOnlyModelAdmin):
    list_display = [
        'filename',
        'data_source',
        'dataset_kind',
        'total_rows',
        'success_count',
        'error_count',
        'emergency_mode',
        'imported_by',
        'created_at',
    ]
    list_filter = ['data_source', 'dataset_kind', 'emergency_mode']
    search_fields = ['filename']
