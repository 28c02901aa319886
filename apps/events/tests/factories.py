"""Test factories for events app."""
import factory
from factory.django import DjangoModelFactory

from apps.core.constants import BmmStage, EventType
from apps.core.utils import generate_member_token
from apps.events.models import Event, EventTemplate, EventMember
from apps.members.tests.factories import MemberFactory


class EventTemplateFactory(DjangoModelFactory):
    class Meta:
        model = EventTemplate
        django_get_or_create = ('template_name',)

    template_name = factory.Sequence(lambda n: f'Template {n}')
    event_type = EventType.GENERAL_MEETING
    landing_page_title = 'Welcome'
    registration_form_title = 'Register'
    email_template_subject = 'Hello {{name}}'
    email_template_content = 'Kia ora {{name}}'


class EventFactory(DjangoModelFactory):
    """Creates a BMM voting event."""

    class Meta:
        model = Event

    name = factory.Sequence(lambda n: f'BMM 2025 round {n}')
    event_code = factory.Sequence(lambda n: f'BMM{n:04d}')
    event_type = EventType.BMM_VOTING
    venue = 'Various'


class EventMemberFactory(DjangoModelFactory):
    """Registration that mirrors its member's contact snapshot."""

    class Meta:
        model = EventMember

    event = factory.SubFactory(EventFactory)
    member = factory.SubFactory(MemberFactory)
    membership_number = factory.LazyAttribute(lambda obj: obj.member.membership_number)
    name = factory.LazyAttribute(lambda obj: obj.member.name)
    primary_email = factory.LazyAttribute(lambda obj: obj.member.primary_email)
    telephone_mobile = factory.LazyAttribute(lambda obj: obj.member.telephone_mobile)
    has_email = factory.LazyAttribute(lambda obj: obj.member.has_email)
    has_mobile = factory.LazyAttribute(lambda obj: obj.member.has_mobile)
    region_desc = factory.LazyAttribute(lambda obj: obj.member.region_desc)
    member_token = factory.LazyFunction(generate_member_token)
    bmm_stage = BmmStage.INVITED
