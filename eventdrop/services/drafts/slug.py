from __future__ import annotations

import re
import secrets
import string

SLUG_BASE_LIMIT = 60
SUFFIX_LENGTH = 6
_ALPHABET = string.ascii_lowercase + string.digits

_NON_WORD = re.compile(r"[^\w\s-]")
_SPACES = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def slug_base(title: str) -> str:
    base = _NON_WORD.sub("", title.lower().strip())
    base = _SPACES.sub("-", base)
    base = _DASHES.sub("-", base)
    return base[:SLUG_BASE_LIMIT].strip("-") or "event"


def generate_slug(title: str) -> str:
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{slug_base(title)}-{suffix}"
