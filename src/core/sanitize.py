"""Markup sanitization for user-submitted text."""

import re
from typing import Any

from markupsafe import escape

# Only tag-forming characters; "&" and quotes stay as typed so that a
# value survives being submitted again unchanged.
_TAG_CHARS = re.compile(r"[<>]")


def clean(value: Any) -> str:
    """Neutralise markup in a submitted value.

    ``None`` becomes an empty string so that missing form fields fail the
    normal "required" validation. ``<`` and ``>`` are HTML-escaped, which
    means validation lengths apply to the escaped text. Cleaning an already
    cleaned value returns it unchanged.
    """
    if value is None:
        return ""
    return _TAG_CHARS.sub(lambda m: str(escape(m.group())), str(value))
