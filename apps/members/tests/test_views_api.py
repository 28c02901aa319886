"""
Tests for members API views.
"""
from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.results import BatchResult
from apps.events.tests.factories import EventFactory
from apps.members.models import FinancialForm

from .factories import AdminUserFactory, ImportHistoryFactory, MemberFactory, UserFactory

BASE = '/api/v1/members'


@pytest.fixture
def api_client():
    """Return an API client."""
    return APIClient()


@pytest.fixture
def admin_client(api_client):
    """Return a client authenticated as staff."""
    api_client.force_authenticate(user=AdminUserFactory())
    return api_client


@pytest.mark.django_db
class TestMemberViewSet:
    """Tests for MemberViewSet."""

    def test_list_as_admin(self, admin_client):
        MemberFactory.create_batch(3)
        response = admin_client.get(f'{BASE}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3

    def test_filter_by_region(self, admin_client):
        MemberFactory.create_batch(2)
        MemberFactory(region_desc='Southern Region')
        response = admin_client.get(f'{BASE}/', {'region_desc': 'Southern Region'})
        assert response.data['count'] == 1

    def test_search(self, admin_client):
        MemberFactory(membership_number='777001')
        MemberFactory()
        response = admin_client.get(f'{BASE}/', {'search': '777001'})
        assert response.data['count'] == 1

    def test_retrieve(self, admin_client):
        member = MemberFactory()
        response = admin_client.get(f'{BASE}/{member.pk}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['membership_number'] == member.membership_number

    def test_regular_user_forbidden(self, api_client):
        api_client.force_authenticate(user=UserFactory())
        response = api_client.get(f'{BASE}/')
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestSelfService:
    """Token-based member endpoints."""

    def test_member_by_token(self, api_client):
        member = MemberFactory()
        response = api_client.get(f'{BASE}/token/{member.token}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == member.name
        assert 'verification_code' not in response.data
        assert 'token' not in response.data

    def test_unknown_token(self, api_client):
        response = api_client.get(f'{BASE}/token/not-a-token/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_verify(self, api_client):
        member = MemberFactory()
        response = api_client.post(f'{BASE}/verify/', {
            'token': str(member.token),
            'membership_number': member.membership_number,
            'verification_code': member.verification_code,
        })
        assert response.status_code == status.HTTP_200_OK

    def test_verify_mismatch(self, api_client):
        member = MemberFactory(verification_code='111111')
        response = api_client.post(f'{BASE}/verify/', {
            'token': str(member.token),
            'membership_number': member.membership_number,
            'verification_code': '222222',
        })
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_financial_form(self, api_client):
        member = MemberFactory()
        response = api_client.post(
            f'{BASE}/token/{member.token}/financial-form/',
            {'job_title': 'Caregiver'},
            REMOTE_ADDR='203.0.113.9',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['updated_fields'] == ['job_title']
        assert FinancialForm.objects.get().ip_address == '203.0.113.9'

    def test_financial_form_forwarded_ip(self, api_client):
        member = MemberFactory()
        api_client.post(
            f'{BASE}/token/{member.token}/financial-form/',
            {'job_title': 'Caregiver'},
            HTTP_X_FORWARDED_FOR='198.51.100.7, 10.0.0.1',
        )
        assert FinancialForm.objects.get().ip_address == '198.51.100.7'

    def test_financial_form_bad_email(self, api_client):
        member = MemberFactory()
        response = api_client.post(
            f'{BASE}/token/{member.token}/financial-form/', {'primary_email': 'nope'},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_attendance_choice(self, api_client):
        member = MemberFactory(has_registered=True)
        response = api_client.post(
            f'{BASE}/token/{member.token}/attendance/', {'is_attending': False, 'is_special_vote': True},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_special_vote'] is True

    def test_attendance_before_registration(self, api_client):
        member = MemberFactory(has_registered=False)
        response = api_client.post(
            f'{BASE}/token/{member.token}/attendance/', {'is_attending': True},
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestImportViews:
    """Admin import endpoints."""

    def test_csv_upload(self, admin_client):
        upload = SimpleUploadedFile(
            'members.csv',
            b'name,primaryEmail,membership_number\nA B,ab@example.com,5001\n',
            content_type='text/csv',
        )
        response = admin_client.post(f'{BASE}/imports/csv/', {'file': upload}, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] == 1
        assert response.data['import_id']

    def test_csv_wrong_extension(self, admin_client):
        upload = SimpleUploadedFile('members.xlsx', b'data')
        response = admin_client.post(f'{BASE}/imports/csv/', {'file': upload}, format='multipart')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_csv_unknown_layout(self, admin_client):
        upload = SimpleUploadedFile('members.csv', b'foo,bar\n1,2\n')
        response = admin_client.post(f'{BASE}/imports/csv/', {'file': upload}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'required columns' in response.data['error']

    def test_csv_requires_admin(self, api_client):
        upload = SimpleUploadedFile('members.csv', b'name\n')
        response = api_client.post(f'{BASE}/imports/csv/', {'file': upload}, format='multipart')
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    @patch('apps.members.views_api.InformerImportService.import_dataset')
    def test_informer_import(self, mock_import, admin_client):
        mock_import.return_value = BatchResult(total=1, success=1)
        response = admin_client.post(f'{BASE}/imports/informer/', {
            'token_or_url': 'tok', 'dataset_kind': 'SMS_MEMBERS',
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['success'] == 1

    @patch('apps.members.views_api.InformerImportService.import_dataset')
    def test_informer_import_into_event(self, mock_import, admin_client):
        event = EventFactory()
        mock_import.return_value = BatchResult(total=1, success=1)

        response = admin_client.post(f'{BASE}/imports/informer/', {
            'token_or_url': 'tok', 'dataset_kind': 'EMAIL_MEMBERS', 'event': str(event.pk),
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert mock_import.call_args[1]['event'] == event

    def test_import_history(self, admin_client):
        ImportHistoryFactory.create_batch(2)
        response = admin_client.get(f'{BASE}/imports/history/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
