"""Union member records, profile-update audit trail and import history."""
import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import (
    DataSource, SyncStatus, FormType, UpdateSource, InformerDataset,
)
from apps.core.utils import generate_verification_code


# ──────────────────────────────────────────────────────────────────────────────
# Member
# ──────────────────────────────────────────────────────────────────────────────

class Member(BaseModel):
    """
    A union member, unique by membership number.

    Created by imports and reconciled in place by later imports or self-service
    updates; never hard-deleted.
    """

    membership_number = models.CharField(
        max_length=50, unique=True, verbose_name=_('Membership number'),
    )
    name = models.CharField(max_length=255, verbose_name=_('Name'))
    primary_email = models.EmailField(
        max_length=255, null=True, blank=True, verbose_name=_('Primary email'),
        help_text=_('Not unique; several members may share an address'),
    )
    telephone_mobile = models.CharField(
        max_length=50, blank=True, default='', verbose_name=_('Mobile'),
    )
    has_email = models.BooleanField(default=False, verbose_name=_('Has email'))
    has_mobile = models.BooleanField(default=False, verbose_name=_('Has mobile'))

    # Registration credentials
    token = models.UUIDField(
        default=uuid.uuid4, unique=True, editable=False,
        verbose_name=_('Registration token'),
    )
    verification_code = models.CharField(
        max_length=6, default=generate_verification_code,
        verbose_name=_('Verification code'),
    )

    has_registered = models.BooleanField(default=False, verbose_name=_('Registered'))
    is_attending = models.BooleanField(default=False, verbose_name=_('Attending'))
    is_special_vote = models.BooleanField(default=False, verbose_name=_('Special vote'))
    has_voted = models.BooleanField(default=False, verbose_name=_('Voted'))
    absence_reason = models.TextField(blank=True, default='', verbose_name=_('Absence reason'))

    # Provenance
    data_source = models.CharField(
        max_length=30, choices=DataSource.choices, default=DataSource.MANUAL,
        verbose_name=_('Data source'),
    )
    import_batch_id = models.CharField(max_length=64, blank=True, default='')
    last_sync_time = models.DateTimeField(null=True, blank=True)

    # Personal
    fore1 = models.CharField(max_length=100, blank=True, default='', verbose_name=_('First name'))
    known_as = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Known as'))
    surname = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Surname'))
    dob = models.CharField(
        max_length=20, blank=True, default='', verbose_name=_('Date of birth (as received)'),
    )
    dob_date = models.DateField(null=True, blank=True, verbose_name=_('Date of birth'))
    age_of_member = models.CharField(max_length=10, blank=True, default='')
    gender_desc = models.CharField(max_length=50, blank=True, default='')
    ethnic_region_desc = models.CharField(max_length=100, blank=True, default='')
    ethnic_origin_desc = models.CharField(max_length=100, blank=True, default='')

    # Address
    address = models.TextField(blank=True, default='', verbose_name=_('Address'))
    add_res1 = models.CharField(max_length=255, blank=True, default='')
    add_res2 = models.CharField(max_length=255, blank=True, default='')
    add_res3 = models.CharField(max_length=255, blank=True, default='')
    add_res4 = models.CharField(max_length=255, blank=True, default='')
    add_res5 = models.CharField(max_length=255, blank=True, default='')
    add_res_pc = models.CharField(max_length=20, blank=True, default='')

    # Phones
    phone_home = models.CharField(max_length=50, blank=True, default='')
    phone_work = models.CharField(max_length=50, blank=True, default='')

    # Employment
    employer = models.CharField(max_length=255, blank=True, default='')
    employer_name = models.CharField(max_length=255, blank=True, default='')
    employee_ref = models.CharField(max_length=50, blank=True, default='')
    payroll_number = models.CharField(max_length=50, blank=True, default='')
    site_number = models.CharField(max_length=50, blank=True, default='')
    employment_status = models.CharField(max_length=50, blank=True, default='')
    department = models.CharField(max_length=255, blank=True, default='')
    job_title = models.CharField(max_length=255, blank=True, default='')
    occupation = models.CharField(max_length=255, blank=True, default='')
    location = models.CharField(max_length=255, blank=True, default='')

    # Union classification
    region_desc = models.CharField(max_length=100, blank=True, default='', verbose_name=_('Region'))
    branch_desc = models.CharField(max_length=255, blank=True, default='')
    workplace_desc = models.CharField(max_length=255, blank=True, default='')
    forum_desc = models.CharField(max_length=255, blank=True, default='')
    site_industry_desc = models.CharField(max_length=255, blank=True, default='')
    site_sub_industry_desc = models.CharField(max_length=255, blank=True, default='')
    bargaining_group_desc = models.CharField(max_length=255, blank=True, default='')
    membership_type_desc = models.CharField(max_length=100, blank=True, default='')
    epmu_mem_type_desc = models.CharField(max_length=100, blank=True, default='')
    financial_indicator = models.CharField(max_length=100, blank=True, default='')
    last_payment_date = models.CharField(max_length=20, blank=True, default='')
    site_prim_org_name = models.CharField(max_length=255, blank=True, default='')
    org_team_p_desc_epmu = models.CharField(max_length=255, blank=True, default='')
    director_name = models.CharField(max_length=255, blank=True, default='')
    sub_ind_sector = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        verbose_name = _('Member')
        verbose_name_plural = _('Members')
        ordering = ['name']
        indexes = [
            models.Index(fields=['primary_email']),
            models.Index(fields=['region_desc']),
        ]

    def __str__(self):
        return f'{self.name} ({self.membership_number})'

    @property
    def first_name(self):
        if self.known_as:
            return self.known_as
        if self.fore1:
            return self.fore1
        return (self.name or '').split(' ')[0]

    def refresh_contact_flags(self):
        """Recompute has_email/has_mobile from the stored values."""
        from apps.core.utils import has_real_email
        self.has_email = has_real_email(self.primary_email)
        self.has_mobile = bool(self.telephone_mobile and self.telephone_mobile.strip())


# ──────────────────────────────────────────────────────────────────────────────
# Financial form (profile update audit)
# ──────────────────────────────────────────────────────────────────────────────

class FinancialForm(BaseModel):
    """One row per self-service profile update; append-only."""

    member = models.ForeignKey(
        Member, on_delete=models.CASCADE,
        related_name='financial_forms', verbose_name=_('Member'),
    )
    event_member = models.ForeignKey(
        'events.EventMember', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='financial_forms', verbose_name=_('Event registration'),
    )
    event = models.ForeignKey(
        'events.Event', on_delete=models.SET_NULL, null=True, blank=True,
        related_name='financial_forms', verbose_name=_('Event'),
    )

    before_data = models.JSONField(default=dict, verbose_name=_('Before'))
    after_data = models.JSONField(default=dict, verbose_name=_('After'))
    updated_fields = models.JSONField(default=list, verbose_name=_('Changed fields'))

    member_name = models.CharField(max_length=255, blank=True, default='')
    membership_number = models.CharField(max_length=50, blank=True, default='')
    primary_email = models.CharField(max_length=255, blank=True, default='')
    telephone_mobile = models.CharField(max_length=50, blank=True, default='')

    form_type = models.CharField(
        max_length=30, choices=FormType.CHOICES, default=FormType.BMM_REGISTRATION,
    )
    update_source = models.CharField(
        max_length=10, choices=UpdateSource.CHOICES, default=UpdateSource.WEB,
    )
    updated_by = models.CharField(max_length=150, default='SYSTEM')
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    approval_status = models.CharField(max_length=20, default='APPROVED')

    stratum_sync_status = models.CharField(
        max_length=10, choices=SyncStatus.CHOICES, default=SyncStatus.PENDING,
        verbose_name=_('Stratum sync'),
    )
    stratum_sync_error = models.TextField(blank=True, default='')
    stratum_sync_attempted_at = models.DateTimeField(null=True, blank=True)
    stratum_sync_succeeded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _('Financial form')
        verbose_name_plural = _('Financial forms')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.membership_number} - {self.created_at:%Y-%m-%d %H:%M}'


# ──────────────────────────────────────────────────────────────────────────────
# Import history
# ──────────────────────────────────────────────────────────────────────────────

class ImportHistory(BaseModel):
    """Outcome of one CSV or Informer import run."""

    filename = models.CharField(max_length=500, verbose_name=_('File or dataset'))
    data_source = models.CharField(
        max_length=30, choices=DataSource.choices, blank=True, default='',
    )
    dataset_kind = models.CharField(
        max_length=20, choices=InformerDataset.CHOICES, blank=True, default='',
    )
    emergency_mode = models.BooleanField(default=False)
    total_rows = models.PositiveIntegerField(default=0)
    success_count = models.PositiveIntegerField(default=0)
    error_count = models.PositiveIntegerField(default=0)
    errors_json = models.JSONField(default=list, blank=True)
    imported_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='member_imports',
    )

    class Meta:
        verbose_name = _('Import history')
        verbose_name_plural = _('Import history')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.filename} ({self.success_count}/{self.total_rows})'
