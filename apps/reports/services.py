"""Reports services - member, event and data-quality overviews."""
import logging

from django.db.models import Count, F, Q
from django.db.models.functions import Lower

from apps.core.constants import PLACEHOLDER_EMAIL_DOMAIN

logger = logging.getLogger(__name__)

NO_EMAIL = Q(primary_email__isnull=True) | Q(primary_email='')
PLACEHOLDER_EMAIL = Q(primary_email__iendswith='@' + PLACEHOLDER_EMAIL_DOMAIN)


def _rate(part, whole):
    return round(part / whole, 4) if whole else 0.0


def _breakdown(queryset, field):
    """Row counts per value of `field`; blank values are grouped as 'Unknown'."""
    counts = {}
    for row in queryset.order_by().values(field).annotate(count=Count('id')):
        key = row[field] or 'Unknown'
        counts[key] = counts.get(key, 0) + row['count']
    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


class ReportService:
    """Aggregates for the administrator dashboards."""

    @staticmethod
    def members_overview():
        """Contact coverage, workflow flags and provenance for all active members."""
        from apps.members.models import Member

        members = Member.objects.all()
        totals = members.aggregate(
            total=Count('id'),
            with_email=Count('id', filter=Q(has_email=True)),
            with_mobile=Count('id', filter=Q(has_mobile=True)),
            sms_only=Count('id', filter=Q(has_email=False, has_mobile=True)),
            no_contact=Count('id', filter=Q(has_email=False, has_mobile=False)),
            registered=Count('id', filter=Q(has_registered=True)),
            attending=Count('id', filter=Q(is_attending=True)),
            special_vote=Count('id', filter=Q(is_special_vote=True)),
            voted=Count('id', filter=Q(has_voted=True)),
        )
        return {
            **totals,
            'by_region': _breakdown(members, 'region_desc'),
            'by_data_source': _breakdown(members, 'data_source'),
        }

    @staticmethod
    def events_overview():
        """Registration and attendance counts for every active event."""
        from apps.events.models import Event

        active = Q(event_members__is_active=True)
        events = Event.objects.annotate(
            member_count=Count('event_members', filter=active),
            registered=Count('event_members', filter=active & Q(event_members__has_registered=True)),
            attending=Count('event_members', filter=active & Q(event_members__is_attending=True)),
            checked_in=Count('event_members', filter=active & Q(event_members__checked_in=True)),
        ).order_by('event_code')

        return [
            {
                'id': str(event.pk),
                'name': event.name,
                'event_code': event.event_code,
                'event_type': event.event_type,
                'event_date': event.event_date.isoformat() if event.event_date else None,
                'member_count': event.member_count,
                'registered': event.registered,
                'attending': event.attending,
                'checked_in': event.checked_in,
                'attendance_rate': _rate(event.attending, event.member_count),
            }
            for event in events
        ]

    @staticmethod
    def data_quality():
        """
        Gaps in the member store that block notifications or reporting.

        `duplicate_emails` lists real addresses shared by more than one member,
        compared case-insensitively.
        """
        from apps.members.models import Member

        members = Member.objects.all()
        issues = members.aggregate(
            total=Count('id'),
            missing_email=Count('id', filter=NO_EMAIL),
            placeholder_email=Count('id', filter=PLACEHOLDER_EMAIL),
            missing_mobile=Count('id', filter=Q(telephone_mobile='')),
            no_contact=Count('id', filter=Q(has_email=False, has_mobile=False)),
            missing_region=Count('id', filter=Q(region_desc='')),
            missing_employer=Count('id', filter=Q(employer='')),
            name_is_number=Count('id', filter=Q(name=F('membership_number'))),
        )

        duplicates = (
            members.exclude(NO_EMAIL).exclude(PLACEHOLDER_EMAIL)
            .annotate(email=Lower('primary_email'))
            .order_by().values('email')
            .annotate(count=Count('id'))
            .filter(count__gt=1)
            .order_by('-count', 'email')
        )
        usable = issues['total'] - issues['missing_email'] - issues['placeholder_email']
        return {
            **issues,
            'email_coverage': _rate(usable, issues['total']),
            'duplicate_emails': [
                {'email': row['email'], 'count': row['count']} for row in duplicates
            ],
        }
