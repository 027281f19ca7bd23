"""
Allow-list HTML sanitizer for post content, built on nh3.
Unknown tags are dropped (their text is kept); script/style bodies are dropped entirely.
"""

from typing import Dict, Optional, Set

import nh3

ALLOWED_TAGS = {
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'p', 'br', 'hr',
    'strong', 'em', 'u', 's', 'code', 'pre',
    'ul', 'ol', 'li',
    'blockquote',
    'a', 'img',
    'table', 'thead', 'tbody', 'tr', 'th', 'td',
}

ALLOWED_ATTRIBUTES: Dict[str, Set[str]] = {
    'a': {'href', 'title', 'target', 'rel'},
    'img': {'src', 'alt', 'title', 'width', 'height'},
    'table': {'class'},
    'td': {'colspan', 'rowspan'},
    'th': {'colspan', 'rowspan'},
}

ALLOWED_SCHEMES = {'http', 'https', 'mailto'}
ALLOWED_SCHEMES_BY_TAG = {'img': {'http', 'https', 'data'}}
URL_ATTRIBUTES = {'href', 'src'}

DROP_CONTENT_TAGS = {'script', 'style', 'iframe', 'object', 'textarea'}

_ALL_SCHEMES = ALLOWED_SCHEMES.union(*ALLOWED_SCHEMES_BY_TAG.values())


def _url_scheme(value: str) -> Optional[str]:
    head = value.strip().split('/', 1)[0]
    if ':' not in head:
        return None
    return head.split(':', 1)[0].lower()


def _filter_attribute(tag: str, attribute: str, value: str) -> Optional[str]:
    """Drop href/src values whose scheme is not allowed for ``tag``."""
    if attribute not in URL_ATTRIBUTES:
        return value
    scheme = _url_scheme(value)
    if scheme is None:
        # Relative URL
        return value
    if scheme not in ALLOWED_SCHEMES_BY_TAG.get(tag, ALLOWED_SCHEMES):
        return None
    return value


def sanitize_content(html: str) -> str:
    """Return ``html`` reduced to the allowed tags, attributes and URL schemes."""
    if not html:
        return ""
    return nh3.clean(
        html,
        tags=ALLOWED_TAGS,
        clean_content_tags=DROP_CONTENT_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        attribute_filter=_filter_attribute,
        url_schemes=_ALL_SCHEMES,
        strip_comments=True,
        # rel is kept as authored
        link_rel=None,
    )


_ESCAPE_MAP = {
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
    '"': '&quot;',
    "'": '&#x27;',
    '/': '&#x2F;',
}


def escape_html(text: str) -> str:
    """Escape text for display, including quotes and forward slashes."""
    return ''.join(_ESCAPE_MAP.get(ch, ch) for ch in text)
