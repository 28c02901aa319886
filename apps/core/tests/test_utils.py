"""Tests for core utility functions."""
from datetime import date

from apps.core import utils
from apps.core.constants import PLACEHOLDER_EMAIL_DOMAIN


class TestCredentials:
    def test_verification_code_is_six_digits(self):
        for _ in range(20):
            code = utils.generate_verification_code()
            assert len(code) == 6
            assert code.isdigit()

    def test_member_token_is_16_hex(self):
        token = utils.generate_member_token()
        assert len(token) == 16
        int(token, 16)


class TestEmails:
    def test_valid_email(self):
        assert utils.is_valid_email('a.b@etu.nz')
        assert not utils.is_valid_email('not-an-email')
        assert not utils.is_valid_email(None)

    def test_placeholder_from_mobile_digits(self):
        assert utils.placeholder_email('123', '+64 21 555') == f'6421555@{PLACEHOLDER_EMAIL_DOMAIN}'

    def test_placeholder_from_membership_number(self):
        assert utils.placeholder_email('123') == f'member-123@{PLACEHOLDER_EMAIL_DOMAIN}'

    def test_has_real_email(self):
        assert utils.has_real_email('x@etu.nz')
        assert not utils.has_real_email(utils.placeholder_email('1'))
        assert not utils.has_real_email('  ')
        assert not utils.has_real_email(None)


class TestNamesAndDates:
    def test_split_name(self):
        assert utils.split_name('Aroha Te Whare') == ('Aroha', 'Te Whare')
        assert utils.split_name('') == ('', '')

    def test_join_name_skips_blanks(self):
        assert utils.join_name('Aroha', None, ' ', 'Smith') == 'Aroha Smith'

    def test_first_value(self):
        assert utils.first_value(['a', 'b']) == 'a'
        assert utils.first_value([]) is None
        assert utils.first_value('x') == 'x'

    def test_parse_date(self):
        assert utils.parse_date('04/03/1980') == date(1980, 3, 4)
        assert utils.parse_date('1980-03-04') == date(1980, 3, 4)
        assert utils.parse_date('garbage') is None
        assert utils.parse_date('') is None

    def test_clean(self):
        assert utils.clean('  x ') == 'x'
        assert utils.clean('   ') is None
        assert utils.clean(None) is None
