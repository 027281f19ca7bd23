"""
Identifier and slug helpers.
IDs are probabilistically unique and never checked against the store.
"""

import re
import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits

_non_word_re = re.compile(r"[^\w\s-]")
_separator_re = re.compile(r"[\s_-]+")
_slug_invalid_re = re.compile(r"[^a-z0-9-]")
_dashes_re = re.compile(r"-+")


def generate_id(prefix: str) -> str:
    """Return ``<prefix>_<epoch millis>_<9 random base36 chars>``."""
    suffix = ''.join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def slugify(text: str) -> str:
    """Create a slug from free text: 'Hello, World!' -> 'hello-world'."""
    s = text.lower().strip()
    s = _non_word_re.sub('', s)
    s = _separator_re.sub('-', s)
    return s.strip('-')


def sanitize_slug(slug: str) -> str:
    """Force a client-supplied slug into ``[a-z0-9-]`` with single dashes."""
    s = slug.lower().strip()
    s = _slug_invalid_re.sub('-', s)
    s = _dashes_re.sub('-', s)
    return s.strip('-')
