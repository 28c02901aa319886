"""Immutable BMM configuration built from Django settings."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from django.conf import settings


@dataclass(frozen=True)
class BmmConfig:
    """Region names, venue capacity and link layout for the BMM workflow."""

    northern_region: str = 'Northern Region'
    central_region: str = 'Central Region'
    southern_region: str = 'Southern Region'
    venue_capacity: int = 100
    link_base_url: str = 'https://events.etu.nz'
    ticket_pdf_path: str = '/tickets/bmm-{event_id}-{ticket_token}.pdf'
    datetime_format: str = '%d/%m/%Y %H:%M'
    special_vote_regions: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        if not self.special_vote_regions:
            object.__setattr__(
                self, 'special_vote_regions', (self.central_region, self.southern_region),
            )

    @classmethod
    def from_settings(cls) -> BmmConfig:
        return cls(
            northern_region=getattr(settings, 'BMM_NORTHERN_REGION', 'Northern Region'),
            central_region=getattr(settings, 'BMM_CENTRAL_REGION', 'Central Region'),
            southern_region=getattr(settings, 'BMM_SOUTHERN_REGION', 'Southern Region'),
            venue_capacity=getattr(settings, 'BMM_VENUE_CAPACITY', 100),
            link_base_url=getattr(settings, 'BMM_LINK_BASE_URL', 'https://events.etu.nz').rstrip('/'),
        )

    @property
    def regions(self) -> Tuple[str, ...]:
        return (self.northern_region, self.central_region, self.southern_region)

    def allows_special_vote(self, region: str | None) -> bool:
        return region in self.special_vote_regions

    # ─── Links ───────────────────────────────────────────────────────────

    def preferences_link(self, member_token: str) -> str:
        return f'{self.link_base_url}/bmm/preferences?token={member_token}'

    def confirmation_link(self, member_token: str) -> str:
        return f'{self.link_base_url}/bmm?token={member_token}'

    def registration_link(self, token) -> str:
        return f'{self.link_base_url}/register?token={token}'

    def special_vote_link(self, member_token: str) -> str:
        return f'{self.link_base_url}/bmm/special-vote?token={member_token}'

    def ticket_link(self, ticket_token) -> str:
        return f'{self.link_base_url}/tickets/bmm?token={ticket_token}'

    def ticket_pdf(self, event_id, ticket_token) -> str:
        return self.ticket_pdf_path.format(event_id=event_id, ticket_token=ticket_token)

    def format_datetime(self, value) -> str:
        return value.strftime(self.datetime_format) if value else 'TBD'
