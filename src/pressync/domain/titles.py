"""Title normalization used as the duplicate-detection key."""

from __future__ import annotations

import re
from typing import Final

_TAG = re.compile(r"<[^>]*>")
_ENTITY = re.compile(r"&[^;]+;")
_WHITESPACE = re.compile(r"\s+")

# Entities WordPress emits when rendering titles (wptexturize and friends).
ENTITY_REPLACEMENTS: Final[tuple[tuple[str, str], ...]] = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&#038;", "&"),
    ("&quot;", '"'),
    ("&#8220;", '"'),
    ("&#8221;", '"'),
    ("&#8216;", "'"),
    ("&#8217;", "'"),
    ("&#39;", "'"),
)


def normalize_title(value: str | None) -> str:
    """Reduce a title to its comparison key.

    Markup is stripped, common entities are decoded and any other entity is
    dropped, whitespace runs collapse to one space, and the result is
    lowercased and trimmed. Applying it twice yields the same string.
    """

    if not value:
        return ""
    text = _TAG.sub("", value)
    for entity, replacement in ENTITY_REPLACEMENTS:
        text = text.replace(entity, replacement)
    text = _ENTITY.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.lower().strip()
