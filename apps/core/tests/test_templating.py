"""Tests for placeholder substitution and text helpers."""
from apps.core import templating


class TestSubstitute:
    def test_replaces_every_occurrence(self):
        text = 'Kia ora {{name}}, {{name}} is member {{membershipNumber}}'
        result = templating.substitute(text, {'name': 'Aroha', 'membershipNumber': '1234'})
        assert result == 'Kia ora Aroha, Aroha is member 1234'

    def test_missing_and_none_become_empty(self):
        result = templating.substitute('[{{missing}}][{{empty}}]', {'empty': None})
        assert result == '[][]'

    def test_non_string_values(self):
        assert templating.substitute('{{count}} seats', {'count': 12}) == '12 seats'

    def test_empty_text(self):
        assert templating.substitute(None, {'name': 'x'}) == ''


class TestMarkdownLinks:
    def test_converts_link(self):
        result = templating.markdown_links('Go to [your page](https://events.etu.nz/bmm)')
        assert result == 'Go to <a href="https://events.etu.nz/bmm">your page</a>'

    def test_render_substitutes_then_links(self):
        result = templating.render('[Click]({{link}})', {'link': 'https://x.nz'})
        assert result == '<a href="https://x.nz">Click</a>'


class TestToAscii:
    def test_macrons_transliterated(self):
        assert templating.to_ascii('E tū Māori Ōtautahi') == 'E tu Maori Otautahi'

    def test_other_non_ascii_dropped(self):
        assert templating.to_ascii('café ✓ ok') == 'caf  ok'


class TestEscapeXml:
    def test_escapes_all_special_characters(self):
        assert templating.escape_xml('<a & "b" \'c\'>') == '&lt;a &amp; &quot;b&quot; &apos;c&apos;&gt;'

    def test_none(self):
        assert templating.escape_xml(None) == ''


class TestTextToHtml:
    def test_newlines(self):
        assert templating.text_to_html('one\ntwo\r\nthree') == 'one<br>two<br>three'
