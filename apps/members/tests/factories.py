"""Test factories for members app."""
import factory
from django.contrib.auth import get_user_model
from factory.django import DjangoModelFactory

from apps.core.constants import DataSource
from apps.members.models import Member, FinancialForm, ImportHistory

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Creates Django User instances for testing."""

    class Meta:
        model = User

    username = factory.Sequence(lambda n: f'user{n}')
    email = factory.LazyAttribute(lambda obj: f'{obj.username}@example.com')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    password = factory.PostGenerationMethodCall('set_password', 'testpass123')


class AdminUserFactory(UserFactory):
    """Staff account allowed through IsAdmin."""

    is_staff = True


class SuperuserFactory(AdminUserFactory):
    is_superuser = True


class MemberFactory(DjangoModelFactory):
    """Creates Member instances with a real email and mobile."""

    class Meta:
        model = Member

    membership_number = factory.Sequence(lambda n: f'{100000 + n}')
    fore1 = factory.Faker('first_name')
    surname = factory.Faker('last_name')
    name = factory.LazyAttribute(lambda obj: f'{obj.fore1} {obj.surname}')
    primary_email = factory.LazyAttribute(lambda obj: f'member{obj.membership_number}@example.com')
    telephone_mobile = factory.Sequence(lambda n: f'021{n:07d}')
    has_email = True
    has_mobile = True
    region_desc = 'Northern Region'
    data_source = DataSource.CSV_IMPORT


class SmsOnlyMemberFactory(MemberFactory):
    primary_email = None
    has_email = False


class FinancialFormFactory(DjangoModelFactory):
    class Meta:
        model = FinancialForm

    member = factory.SubFactory(MemberFactory)
    membership_number = factory.LazyAttribute(lambda obj: obj.member.membership_number)
    member_name = factory.LazyAttribute(lambda obj: obj.member.name)


class ImportHistoryFactory(DjangoModelFactory):
    """Creates ImportHistory records for testing."""

    class Meta:
        model = ImportHistory

    filename = factory.Sequence(lambda n: f'import_{n}.csv')
    data_source = DataSource.CSV_IMPORT
    total_rows = 10
    success_count = 8
    error_count = 2
