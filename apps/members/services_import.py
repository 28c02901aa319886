"""
Member import from CSV uploads and Informer datasets.

Every path funnels into MemberReconciler, which matches on membership number
only and applies the DataSource priority policy. A CSV row loses to a
stronger source; an Informer record always merges and only keeps the
stronger provenance tag.
"""
import csv
import io
import logging
import uuid

import requests
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.constants import DataSource, InformerDataset
from apps.core.results import BatchResult
from apps.core.utils import (
    clean, first_value, is_blank, is_placeholder_email, is_valid_email,
    join_name, parse_date, placeholder_email,
)

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Reconciliation
# ──────────────────────────────────────────────────────────────────────────────

class MemberReconciler:
    """Creates or updates one Member under the data-source priority policy."""

    PROTECTED_FIELDS = {
        'id', 'membership_number', 'token', 'verification_code',
        'data_source', 'created_at', 'updated_at', 'is_active',
    }

    @classmethod
    def _writable_fields(cls):
        from .models import Member
        return {
            f.name for f in Member._meta.concrete_fields
            if f.name not in cls.PROTECTED_FIELDS
        }

    @classmethod
    def reconcile(cls, membership_number, fields, source, emergency=False,
                  explicit_email_none=False, create_defaults=None, batch_id='',
                  always_merge=False):
        """
        Merge `fields` into the member with `membership_number`.

        Only non-blank incoming values are applied. `create_defaults` fills
        gaps on newly created members only. With `explicit_email_none` a
        record without email never carries a placeholder address.

        With `always_merge` the fields are applied whatever the existing
        source; priority then only decides whether `data_source` changes.

        Returns:
            tuple: (member, created)

        Raises:
            ValueError: the existing record came from a higher-priority source
                and neither emergency mode nor always_merge is on, or required
                data is missing.
        """
        from .models import Member

        membership_number = clean(membership_number)
        if not membership_number:
            raise ValueError('Membership number is required')

        writable = cls._writable_fields()
        incoming = {
            key: value.strip() if isinstance(value, str) else value
            for key, value in fields.items()
            if key in writable and not is_blank(value)
        }

        member = Member.all_objects.filter(membership_number=membership_number).first()
        created = member is None
        takes_source = created or emergency or DataSource.can_overwrite(source, member.data_source)

        if not created:
            if not takes_source and not always_merge:
                raise ValueError(
                    f'Member {membership_number} exists with higher priority source '
                    f'({member.data_source}). Use emergency mode to override.'
                )
        else:
            member = Member(membership_number=membership_number)
            for key, value in (create_defaults or {}).items():
                if key in writable and not is_blank(value) and key not in incoming:
                    setattr(member, key, value)

        for key, value in incoming.items():
            setattr(member, key, value)

        if explicit_email_none and 'primary_email' not in incoming:
            if created or is_placeholder_email(member.primary_email):
                member.primary_email = None

        if not member.name:
            member.name = membership_number

        if takes_source:
            member.data_source = source
        member.last_sync_time = timezone.now()
        if batch_id:
            member.import_batch_id = batch_id
        member.refresh_contact_flags()
        member.save()

        logger.debug(
            "%s member %s from %s", 'Created' if created else 'Updated',
            membership_number, source,
        )
        return member, created


# ──────────────────────────────────────────────────────────────────────────────
# CSV
# ──────────────────────────────────────────────────────────────────────────────

class CsvRow:
    """Case-insensitive, whitespace-tolerant access to one DictReader row."""

    def __init__(self, row, header_map):
        self._row = row
        self._header_map = header_map

    def get(self, *names):
        for name in names:
            header = self._header_map.get(name.strip().lower())
            if header is not None:
                value = clean(self._row.get(header))
                if value is not None:
                    return value
        return None


class MemberCsvImportService:
    """Imports members from one of three CSV dialects."""

    STANDARD = 'standard'
    FINANCIAL_DECLARATION = 'financial_declaration'
    SPECIAL = 'special'

    SPECIAL_REQUIRED = [
        'Member Number', 'Link to Member Primary Email',
        'Link to Member Forename1', 'Link to Member Surname',
    ]
    FINANCIAL_MARKERS = ['Membership Number', 'First Name', 'Surname', 'Financial Description']
    STANDARD_REQUIRED = ['name', 'primaryEmail', 'membership_number']

    # csv column -> Member field
    STANDARD_OPTIONAL = {
        'address': 'address',
        'phone_home': 'phone_home',
        'phone_mobile': 'telephone_mobile',
        'phone_work': 'phone_work',
        'employer': 'employer',
        'payroll_number': 'payroll_number',
        'site_number': 'site_number',
        'employment_status': 'employment_status',
        'department': 'department',
        'job_title': 'job_title',
        'location': 'location',
    }

    FINANCIAL_OPTIONAL = {
        'Employer / Company': 'employer',
        'Worksite': 'workplace_desc',
        'Occupation': 'occupation',
        'Region': 'region_desc',
        'Office Name': 'branch_desc',
        'Forum Name': 'forum_desc',
        'Payroll Number (if known)': 'payroll_number',
        'Financial Description': 'financial_indicator',
        'Mobile': 'telephone_mobile',
    }

    ADDRESS_LINES = [
        'Address line 1', 'Address line 2 (if required)',
        'Address line 3 (if required)', 'Suburb', 'City / Town',
    ]

    @classmethod
    def detect_dialect(cls, headers):
        """
        Work out which CSV layout the headers describe.

        Raises:
            ValueError: headers are empty or match no known layout.
        """
        lowered = {h.strip().lower() for h in headers if h and h.strip()}
        if not lowered:
            raise ValueError('CSV file has no header row')

        if 'member number' in lowered:
            missing = [h for h in cls.SPECIAL_REQUIRED if h.lower() not in lowered]
            if missing:
                raise ValueError(
                    'CSV must contain required columns: ' + ', '.join(cls.SPECIAL_REQUIRED)
                )
            return cls.SPECIAL

        if any(h.lower() in lowered for h in cls.FINANCIAL_MARKERS):
            if 'membership number' not in lowered:
                raise ValueError('CSV must contain required column: Membership Number')
            return cls.FINANCIAL_DECLARATION

        missing = [h for h in cls.STANDARD_REQUIRED if h.lower() not in lowered]
        if missing:
            raise ValueError(
                'CSV must contain required columns: ' + ', '.join(cls.STANDARD_REQUIRED)
            )
        return cls.STANDARD

    @classmethod
    def import_csv(cls, uploaded_file, emergency_mode=False, imported_by=None):
        """
        Import every row of `uploaded_file`.

        Each row is reconciled in its own savepoint so one bad row never
        undoes the others. A membership number seen earlier in the same file
        fails the later row.

        Returns:
            tuple: (ImportHistory, BatchResult)

        Raises:
            ValueError: unreadable file or unknown header layout.
        """
        from .models import ImportHistory

        raw = uploaded_file.read()
        try:
            content = raw.decode('utf-8-sig') if isinstance(raw, bytes) else raw
        except UnicodeDecodeError:
            raise ValueError('CSV file must be UTF-8 encoded')

        reader = csv.DictReader(io.StringIO(content))
        headers = reader.fieldnames or []
        dialect = cls.detect_dialect(headers)
        header_map = {h.strip().lower(): h for h in headers if h}

        handler = {
            cls.STANDARD: cls._import_standard_row,
            cls.FINANCIAL_DECLARATION: cls._import_financial_row,
            cls.SPECIAL: cls._import_special_row,
        }[dialect]

        batch_id = uuid.uuid4().hex
        result = BatchResult()
        seen = set()

        logger.info(
            "Importing %s CSV %s (emergency=%s)",
            dialect, getattr(uploaded_file, 'name', ''), emergency_mode,
        )

        for row_num, raw_row in enumerate(reader, start=1):
            row = CsvRow(raw_row, header_map)
            try:
                with transaction.atomic():
                    handler(row, seen, emergency_mode, batch_id)
                result.ok()
            except Exception as e:
                logger.warning("Row %s failed: %s", row_num, e)
                result.fail(f'Row {row_num}: {e}')

        if dialect == cls.FINANCIAL_DECLARATION:
            source = DataSource.CSV_EMERGENCY if emergency_mode else DataSource.CSV_UPDATED
        else:
            source = DataSource.CSV_EMERGENCY if emergency_mode else DataSource.CSV_IMPORT

        history = ImportHistory.objects.create(
            filename=getattr(uploaded_file, 'name', '') or 'upload.csv',
            data_source=source,
            emergency_mode=emergency_mode,
            total_rows=result.total,
            success_count=result.success,
            error_count=result.failed,
            errors_json=result.errors,
            imported_by=imported_by,
        )
        logger.info(
            "CSV import finished: %s/%s rows imported, %s failed",
            result.success, result.total, result.failed,
        )
        return history, result

    @staticmethod
    def _check_duplicate(membership_number, seen):
        if membership_number in seen:
            raise ValueError(f'Duplicate membership number {membership_number} in file')
        seen.add(membership_number)

    @classmethod
    def _import_standard_row(cls, row, seen, emergency, batch_id):
        name = row.get('name')
        email = row.get('primaryEmail', 'email')
        number = row.get('membership_number')

        if not name:
            raise ValueError('Name is required')
        if not email or not is_valid_email(email):
            raise ValueError('Valid email is required')
        if not number:
            raise ValueError('Membership number is required')
        cls._check_duplicate(number, seen)

        fields = {'name': name, 'primary_email': email}
        dob = row.get('dob')
        if dob:
            fields['dob'] = dob
            fields['dob_date'] = parse_date(dob, formats=('%Y-%m-%d',))
        for column, field_name in cls.STANDARD_OPTIONAL.items():
            fields[field_name] = row.get(column)

        source = DataSource.CSV_EMERGENCY if emergency else DataSource.CSV_IMPORT
        return MemberReconciler.reconcile(
            number, fields, source, emergency=emergency, batch_id=batch_id,
        )

    @classmethod
    def _import_financial_row(cls, row, seen, emergency, batch_id):
        number = row.get('Membership Number')
        if not number:
            raise ValueError('Membership Number is required')

        first = row.get('Known As') or row.get('First Name')
        surname = row.get('Surname')
        name = join_name(first, surname)
        if not name:
            raise ValueError('Name information is required')
        cls._check_duplicate(number, seen)

        fields = {
            'name': name,
            'fore1': row.get('First Name'),
            'known_as': row.get('Known As'),
            'surname': surname,
        }

        email = row.get('Email')
        if email and is_valid_email(email):
            fields['primary_email'] = email

        dob = row.get('Date Of Birth')
        if dob:
            fields['dob'] = dob
            fields['dob_date'] = parse_date(dob)

        address = ', '.join(filter(None, (row.get(line) for line in cls.ADDRESS_LINES)))
        post_code = row.get('Address Post Code')
        if post_code:
            address = f'{address} {post_code}'.strip()
            fields['add_res_pc'] = post_code
        fields['address'] = address

        for column, field_name in cls.FINANCIAL_OPTIONAL.items():
            fields[field_name] = row.get(column)

        source = DataSource.CSV_EMERGENCY if emergency else DataSource.CSV_UPDATED
        return MemberReconciler.reconcile(
            number, fields, source, emergency=emergency, batch_id=batch_id,
            create_defaults={
                'primary_email': placeholder_email(number, row.get('Mobile')),
            },
        )

    @classmethod
    def _import_special_row(cls, row, seen, emergency, batch_id):
        number = row.get('Member Number')
        email = row.get('Link to Member Primary Email')
        forename = row.get('Link to Member Forename1')
        surname = row.get('Link to Member Surname')

        if not number:
            raise ValueError('Member Number is required')
        if not email or not is_valid_email(email):
            raise ValueError('Valid email is required')
        name = join_name(forename, surname)
        if not name:
            raise ValueError('Name is required')
        cls._check_duplicate(number, seen)

        fields = {
            'name': name,
            'fore1': forename,
            'surname': surname,
            'primary_email': email,
            'telephone_mobile': row.get('Link to Member Telephone Mobile'),
            'employer': row.get('Link to Member Employer Name'),
        }
        source = DataSource.CSV_EMERGENCY if emergency else DataSource.CSV_IMPORT
        return MemberReconciler.reconcile(
            number, fields, source, emergency=emergency, batch_id=batch_id,
        )


# ──────────────────────────────────────────────────────────────────────────────
# Informer
# ──────────────────────────────────────────────────────────────────────────────

class InformerImportService:
    """Pulls member datasets from the Informer reporting API."""

    TIMEOUT = 60
    HEADERS = {
        'Accept': 'application/json',
        'User-Agent': 'ETU-Voting-System/1.0',
    }
    ATTENDEE_PREFIX = 'link_to_member_assoc_'
    LIST_FIELDS = {'employerName', 'workplaceDesc', 'branchDesc', 'dob'}

    # Informer key -> Member field
    FIELD_MAP = {
        'fore1': 'fore1',
        'knownAs': 'known_as',
        'surname': 'surname',
        'primaryEmail': 'primary_email',
        'telephoneMobile': 'telephone_mobile',
        'dob': 'dob',
        'ageOfMember': 'age_of_member',
        'genderDesc': 'gender_desc',
        'ethnicRegionDesc': 'ethnic_region_desc',
        'ethnicOriginDesc': 'ethnic_origin_desc',
        'address': 'address',
        'addRes1': 'add_res1',
        'addRes2': 'add_res2',
        'addRes3': 'add_res3',
        'addRes4': 'add_res4',
        'addRes5': 'add_res5',
        'addResPc': 'add_res_pc',
        'phoneHome': 'phone_home',
        'telephoneHome': 'phone_home',
        'phoneWork': 'phone_work',
        'telephoneWork': 'phone_work',
        'employer': 'employer',
        'employerName': 'employer_name',
        'employeeRef': 'employee_ref',
        'payrollNumber': 'payroll_number',
        'siteCode': 'site_number',
        'employmentStatus': 'employment_status',
        'department': 'department',
        'jobTitle': 'job_title',
        'occupation': 'occupation',
        'location': 'location',
        'regionDesc': 'region_desc',
        'branchDesc': 'branch_desc',
        'workplaceDesc': 'workplace_desc',
        'forumDesc': 'forum_desc',
        'siteIndustryDesc': 'site_industry_desc',
        'siteSubIndustryDesc': 'site_sub_industry_desc',
        'bargainingGroupDesc': 'bargaining_group_desc',
        'membershipTypeDesc': 'membership_type_desc',
        'epmuMemTypeDesc': 'epmu_mem_type_desc',
        'financialIndicatorDescription': 'financial_indicator',
        'lastPaymentDate': 'last_payment_date',
        'sitePrimOrgName': 'site_prim_org_name',
        'orgTeamPDescEpmu': 'org_team_p_desc_epmu',
        'directorName': 'director_name',
        'subIndSector': 'sub_ind_sector',
    }

    # Member field -> accepted keys for loosely shaped datasets
    GENERIC_KEYS = {
        'membership_number': ['membershipNumber', 'membership_number', 'Membership Number', 'Member Number'],
        'name': ['name', 'Name', 'Full Name'],
        'primary_email': ['primaryEmail', 'email', 'Email', 'Primary Email'],
        'telephone_mobile': ['telephoneMobile', 'phone_mobile', 'Mobile', 'Phone Mobile'],
        'address': ['address', 'Address'],
        'employer': ['employer', 'Employer', 'Company'],
        'job_title': ['job_title', 'Job Title', 'Occupation'],
        'region_desc': ['regionDesc', 'region', 'Region'],
    }

    SOURCES = {
        InformerDataset.EMAIL_MEMBERS: DataSource.INFORMER_EMAIL_MEMBERS,
        InformerDataset.SMS_MEMBERS: DataSource.INFORMER_SMS_MEMBERS,
        InformerDataset.ATTENDEES: DataSource.INFORMER_ATTENDEES,
        InformerDataset.GENERIC: DataSource.INFORMER_AUTO_CREATED,
    }

    @staticmethod
    def dataset_url(token_or_url):
        if token_or_url.startswith('http'):
            return token_or_url
        base_url = getattr(settings, 'INFORMER_BASE_URL', '').rstrip('/')
        return f'{base_url}/api/datasets/{token_or_url}'

    @classmethod
    def fetch(cls, token_or_url):
        """
        Download and unwrap a dataset.

        Raises:
            ValueError: the body is not a JSON list of records.
            requests.RequestException: transport failures.
        """
        url = cls.dataset_url(token_or_url)
        logger.info("Fetching Informer dataset %s", url)
        response = requests.get(url, headers=cls.HEADERS, timeout=cls.TIMEOUT)
        response.raise_for_status()
        body = response.json()
        if isinstance(body, dict) and 'data' in body:
            body = body['data']
        if not isinstance(body, list):
            raise ValueError('Informer response is not a list of records')
        return body

    @classmethod
    def import_dataset(cls, token_or_url, dataset_kind, imported_by=None, event=None):
        """
        Fetch a dataset and reconcile every record.

        With `event`, each reconciled member is also enrolled in that event,
        or has its existing registration refreshed.

        Never raises: a fetch or parse failure comes back as a BatchResult
        with total=0, failed=1.
        """
        from apps.events.services import EventMemberService
        from .models import ImportHistory

        if dataset_kind not in cls.SOURCES:
            raise ValueError(f'Unknown Informer dataset kind: {dataset_kind}')
        source = cls.SOURCES[dataset_kind]
        result = BatchResult()

        try:
            records = cls.fetch(token_or_url)
        except requests.Timeout:
            logger.error("Informer request timed out: %s", token_or_url)
            result.failed = 1
            result.errors.append('Informer request timed out')
            records = None
        except requests.ConnectionError:
            logger.error("Cannot connect to Informer: %s", token_or_url)
            result.failed = 1
            result.errors.append('Cannot connect to Informer')
            records = None
        except (requests.RequestException, ValueError) as e:
            logger.error("Informer fetch failed: %s", e)
            result.failed = 1
            result.errors.append(f'Informer fetch failed: {e}')
            records = None

        if records is not None:
            batch_id = uuid.uuid4().hex
            for index, record in enumerate(records, start=1):
                try:
                    with transaction.atomic():
                        member, _ = cls.import_record(record, dataset_kind, batch_id=batch_id)
                        if event is not None:
                            EventMemberService.enroll_member(event, member)
                    result.ok()
                except Exception as e:
                    logger.warning("Informer record %s failed: %s", index, e)
                    result.fail(f'Record {index}: {e}')

        ImportHistory.objects.create(
            filename=token_or_url[:500],
            data_source=source,
            dataset_kind=dataset_kind,
            total_rows=result.total,
            success_count=result.success,
            error_count=result.failed,
            errors_json=result.errors,
            imported_by=imported_by,
        )
        logger.info(
            "Informer %s import finished: %s/%s records, %s failed",
            dataset_kind, result.success, result.total, result.failed,
        )
        return result

    @classmethod
    def import_record(cls, record, dataset_kind, batch_id=''):
        """Map one Informer record and reconcile it. Returns (member, created)."""
        if not isinstance(record, dict):
            raise ValueError('Record is not an object')

        source = cls.SOURCES[dataset_kind]
        if dataset_kind == InformerDataset.GENERIC:
            number, fields = cls._map_generic(record)
        elif dataset_kind == InformerDataset.ATTENDEES:
            number, fields = cls._map_mapped(record, prefix=cls.ATTENDEE_PREFIX)
        else:
            number, fields = cls._map_mapped(record)

        if not number:
            raise ValueError('Membership number is required')

        email = fields.get('primary_email')
        email_ok = is_valid_email(email)
        if not email_ok:
            fields.pop('primary_email', None)

        explicit_email_none = False
        if dataset_kind == InformerDataset.EMAIL_MEMBERS and not email_ok:
            raise ValueError('primaryEmail is required')
        if dataset_kind == InformerDataset.SMS_MEMBERS:
            if not fields.get('telephone_mobile'):
                raise ValueError('telephoneMobile is required')
            explicit_email_none = True
        if dataset_kind == InformerDataset.ATTENDEES:
            explicit_email_none = True
        if dataset_kind == InformerDataset.GENERIC and not email_ok:
            raise ValueError('Valid email is required')

        return MemberReconciler.reconcile(
            number, fields, source,
            explicit_email_none=explicit_email_none, batch_id=batch_id,
            always_merge=True,
        )

    @classmethod
    def _map_mapped(cls, record, prefix=''):
        def value(key):
            raw = record.get(prefix + key)
            if raw is None and prefix:
                raw = record.get(key)
            if key in cls.LIST_FIELDS:
                raw = first_value(raw)
            return clean(raw)

        fields = {}
        for key, field_name in cls.FIELD_MAP.items():
            found = value(key)
            if found is not None and field_name not in fields:
                fields[field_name] = found

        first = fields.get('known_as') or fields.get('fore1')
        name = join_name(first, fields.get('surname'))
        if name:
            fields['name'] = name
        if fields.get('dob'):
            fields['dob_date'] = parse_date(fields['dob'], formats=('%d/%m/%Y', '%Y-%m-%d', '%Y/%m/%d'))

        return value('membershipNumber'), fields

    @classmethod
    def _map_generic(cls, record):
        fields = {}
        for field_name, keys in cls.GENERIC_KEYS.items():
            for key in keys:
                found = clean(first_value(record.get(key)))
                if found is not None:
                    fields[field_name] = found
                    break
        return fields.pop('membership_number', None), fields
