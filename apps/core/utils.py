"""Utility functions for credentials, contact details, names and dates."""
from __future__ import annotations

import re
import secrets
import uuid
from datetime import date, datetime
from typing import Iterable, Optional, Tuple

from .constants import PLACEHOLDER_EMAIL_DOMAIN

EMAIL_RE = re.compile(r'^[A-Za-z0-9+_.-]+@(.+)$')


def generate_verification_code() -> str:
    """Six-digit numeric code from a cryptographically secure source."""
    return f'{secrets.randbelow(1_000_000):06d}'


def generate_member_token() -> str:
    """16 hex characters used in BMM links."""
    return uuid.uuid4().hex[:16]


def generate_unique_member_token() -> str:
    """generate_member_token() retried until no EventMember holds it."""
    from apps.events.models import EventMember

    token = generate_member_token()
    while EventMember.all_objects.filter(member_token=token).exists():
        token = generate_member_token()
    return token


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def clean(value) -> Optional[str]:
    """Strip strings; blank becomes None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_RE.match(email.strip()) is not None


def is_placeholder_email(email: Optional[str]) -> bool:
    return bool(email) and email.strip().lower().endswith('@' + PLACEHOLDER_EMAIL_DOMAIN)


def placeholder_email(membership_number: str, mobile: Optional[str] = None) -> str:
    """
    Deterministic stand-in address for members without email.

    Built from the mobile number digits when there are any, otherwise from the
    membership number.
    """
    digits = re.sub(r'[^0-9]', '', mobile or '')
    if digits:
        return f'{digits}@{PLACEHOLDER_EMAIL_DOMAIN}'
    return f'member-{membership_number.strip()}@{PLACEHOLDER_EMAIL_DOMAIN}'


def has_real_email(email: Optional[str]) -> bool:
    return not is_blank(email) and not is_placeholder_email(email)


def split_name(name: Optional[str]) -> Tuple[str, str]:
    """'Aroha Te Whare' -> ('Aroha', 'Te Whare')."""
    parts = (name or '').split()
    if not parts:
        return '', ''
    return parts[0], ' '.join(parts[1:])


def join_name(*parts: Optional[str]) -> str:
    return ' '.join(p.strip() for p in parts if p and p.strip())


def first_value(value):
    """First element of list-valued JSON fields; scalars pass through."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def parse_date(value: Optional[str], formats: Iterable[str] = ('%d/%m/%Y', '%Y-%m-%d')) -> Optional[date]:
    if is_blank(value):
        return None
    for fmt in formats:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except (ValueError, TypeError):
            continue
    return None
