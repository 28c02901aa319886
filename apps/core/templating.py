"""
Placeholder substitution and text helpers shared by every outbound channel.

Contract:
    substitute()     replaces each {{name}} with variables[name]; unknown names
                     and None values render as an empty string.
    markdown_links() turns [text](url) into <a href="url">text</a>.
    render()         substitute() followed by markdown_links().
    to_ascii()       maps macronised vowels to plain Latin and drops any other
                     non-ASCII character (the Stratum gateway rejects them).
"""
import re

PLACEHOLDER_RE = re.compile(r'\{\{\s*([A-Za-z0-9_.]+)\s*\}\}')
MARKDOWN_LINK_RE = re.compile(r'\[(.*?)\]\((.*?)\)')

TRANSLITERATION = {
    'ā': 'a', 'ē': 'e', 'ī': 'i', 'ō': 'o', 'ū': 'u',
    'Ā': 'A', 'Ē': 'E', 'Ī': 'I', 'Ō': 'O', 'Ū': 'U',
}

XML_ESCAPES = (
    ('&', '&amp;'),
    ('<', '&lt;'),
    ('>', '&gt;'),
    ('"', '&quot;'),
    ("'", '&apos;'),
)


def substitute(text, variables=None):
    if not text:
        return ''
    variables = variables or {}

    def _replace(match):
        value = variables.get(match.group(1))
        return '' if value is None else str(value)

    return PLACEHOLDER_RE.sub(_replace, text)


def markdown_links(text):
    if not text:
        return ''
    return MARKDOWN_LINK_RE.sub(r'<a href="\2">\1</a>', text)


def render(text, variables=None):
    return markdown_links(substitute(text, variables))


def to_ascii(text):
    if not text:
        return ''
    for source, target in TRANSLITERATION.items():
        text = text.replace(source, target)
    return text.encode('ascii', 'ignore').decode('ascii')


def escape_xml(value):
    if value is None:
        return ''
    value = str(value)
    for source, target in XML_ESCAPES:
        value = value.replace(source, target)
    return value


def text_to_html(text):
    """Wrap plain text for HTML mail bodies; newlines become <br>."""
    if not text:
        return ''
    return text.replace('\r\n', '\n').replace('\n', '<br>')
