"""
Tests for reports API views.
"""
import csv
import io
import uuid

import pytest
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.constants import BmmStage, CheckInMethod, NotificationType
from apps.communication.tests.factories import NotificationLogFactory
from apps.events.tests.factories import EventFactory, EventMemberFactory
from apps.members.tests.factories import AdminUserFactory, MemberFactory, UserFactory

BASE = '/api/v1/reports'

pytestmark = pytest.mark.django_db


@pytest.fixture
def api_client():
    """Return an API client."""
    return APIClient()


@pytest.fixture
def admin_client(api_client):
    """Return a client authenticated as staff."""
    api_client.force_authenticate(user=AdminUserFactory())
    return api_client


def read_rows(response):
    return list(csv.reader(io.StringIO(response.content.decode('utf-8-sig'))))


# ─── Overviews ────────────────────────────────────────────────────────────────


class TestOverviews:
    def test_members_overview(self, admin_client):
        MemberFactory.create_batch(2)

        response = admin_client.get(f'{BASE}/members/overview/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total'] == 2
        assert response.data['by_region'] == {'Northern Region': 2}

    def test_events_overview(self, admin_client):
        event = EventFactory()
        EventMemberFactory(event=event, is_attending=True)

        response = admin_client.get(f'{BASE}/events/overview/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['event_code'] == event.event_code
        assert response.data[0]['attending'] == 1

    def test_data_quality(self, admin_client):
        MemberFactory(primary_email='dup@example.com')
        MemberFactory(primary_email='dup@example.com')

        response = admin_client.get(f'{BASE}/data-quality/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['duplicate_emails'] == [{'email': 'dup@example.com', 'count': 2}]

    def test_requires_staff(self, api_client):
        api_client.force_authenticate(user=UserFactory())

        response = api_client.get(f'{BASE}/members/overview/')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_anonymous_rejected(self, api_client):
        response = api_client.get(f'{BASE}/data-quality/')

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)


# ─── CSV exports ──────────────────────────────────────────────────────────────


class TestMemberExport:
    def test_export(self, admin_client):
        MemberFactory(membership_number='800001', name='Aroha Ngata', employer='Fonterra')

        response = admin_client.get(f'{BASE}/export/members/')

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'] == 'text/csv'
        assert 'attachment; filename="members_' in response['Content-Disposition']
        rows = read_rows(response)
        assert rows[0][:3] == ['Membership number', 'Name', 'Email']
        assert rows[1][0] == '800001'
        assert rows[1][5] == 'Fonterra'

    def test_region_filter(self, admin_client):
        MemberFactory(region_desc='Northern Region')
        MemberFactory(region_desc='Southern Region')

        response = admin_client.get(f'{BASE}/export/members/', {'region': 'Southern Region'})

        rows = read_rows(response)
        assert len(rows) == 2
        assert rows[1][4] == 'Southern Region'


class TestEventMemberExport:
    def test_export(self, admin_client):
        event = EventFactory(event_code='BMM-EXP')
        EventMemberFactory(
            event=event, name='Aroha Ngata', bmm_stage=BmmStage.VENUE_ASSIGNED,
            preferred_venues=['Auckland', 'Hamilton'], assigned_venue_final='Auckland',
        )
        EventMemberFactory(event=EventFactory())

        response = admin_client.get(f'{BASE}/export/events/{event.pk}/members/')

        assert response.status_code == status.HTTP_200_OK
        assert 'BMM-EXP_members_' in response['Content-Disposition']
        rows = read_rows(response)
        assert len(rows) == 2
        row = dict(zip(rows[0], rows[1]))
        assert row['Name'] == 'Aroha Ngata'
        assert row['Stage'] == 'Venue assigned'
        assert row['Preferred venues'] == 'Auckland; Hamilton'
        assert row['Assigned venue'] == 'Auckland'
        assert row['Checked in'] == 'No'

    def test_stage_filter(self, admin_client):
        event = EventFactory()
        EventMemberFactory(event=event, bmm_stage=BmmStage.INVITED)
        EventMemberFactory(event=event, bmm_stage=BmmStage.TICKET_ISSUED)

        response = admin_client.get(
            f'{BASE}/export/events/{event.pk}/members/', {'stage': BmmStage.TICKET_ISSUED},
        )

        rows = read_rows(response)
        assert len(rows) == 2
        assert dict(zip(rows[0], rows[1]))['Stage'] == 'Ticket issued'

    def test_unknown_stage(self, admin_client):
        event = EventFactory()

        response = admin_client.get(
            f'{BASE}/export/events/{event.pk}/members/', {'stage': 'NOPE'},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_event(self, admin_client):
        response = admin_client.get(f'{BASE}/export/events/{uuid.uuid4()}/members/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Event not found'


class TestCheckInExport:
    def test_only_checked_in(self, admin_client):
        event = EventFactory(event_code='BMM-CHK')
        EventMemberFactory(
            event=event, name='Aroha Ngata', checked_in=True, check_in_time=timezone.now(),
            check_in_venue='Auckland', check_in_method=CheckInMethod.QR_SCAN,
            check_in_admin_username='scanner',
        )
        EventMemberFactory(event=event, checked_in=False)

        response = admin_client.get(f'{BASE}/export/events/{event.pk}/check-ins/')

        assert response.status_code == status.HTTP_200_OK
        assert 'BMM-CHK_check_ins_' in response['Content-Disposition']
        rows = read_rows(response)
        assert len(rows) == 2
        row = dict(zip(rows[0], rows[1]))
        assert row['Name'] == 'Aroha Ngata'
        assert row['Check-in venue'] == 'Auckland'
        assert row['Method'] == 'QR scan'
        assert row['Checked in by'] == 'scanner'
        assert row['Check-in time']

    def test_unknown_event(self, admin_client):
        response = admin_client.get(f'{BASE}/export/events/{uuid.uuid4()}/check-ins/')

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestNotificationLogExport:
    def test_filters(self, admin_client):
        event = EventFactory(event_code='BMM-LOG')
        NotificationLogFactory(
            event=event, recipient='aroha@example.com', is_successful=False,
            error_message='Mailbox full', sent_time=timezone.now(),
        )
        NotificationLogFactory(event=event, is_successful=True, sent_time=timezone.now())
        NotificationLogFactory(
            notification_type=NotificationType.SMS, recipient='0211234567',
            is_successful=False, sent_time=timezone.now(),
        )

        response = admin_client.get(
            f'{BASE}/export/notification-logs/',
            {'event': str(event.pk), 'is_successful': 'false'},
        )

        assert response.status_code == status.HTTP_200_OK
        rows = read_rows(response)
        assert len(rows) == 2
        row = dict(zip(rows[0], rows[1]))
        assert row['Event'] == 'BMM-LOG'
        assert row['Recipient'] == 'aroha@example.com'
        assert row['Delivered'] == 'No'
        assert row['Error'] == 'Mailbox full'

    def test_all_logs(self, admin_client):
        NotificationLogFactory.create_batch(3)

        response = admin_client.get(f'{BASE}/export/notification-logs/')

        assert len(read_rows(response)) == 4

    def test_invalid_event_id(self, admin_client):
        response = admin_client.get(f'{BASE}/export/notification-logs/', {'event': 'abc'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
