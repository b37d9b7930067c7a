"""
HTML escaping for free-text fields.

Only escapes; tags are never stripped. Entities produced by an earlier
pass are decoded first, so sanitizing twice gives the same result as
sanitizing once.
"""

import html
import re
from collections.abc import Mapping
from typing import Any

_ENTITY_RE = re.compile(r"&(amp|lt|gt|quot|#x27|#39|#x2F);")
_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "#x27": "'",
    "#39": "'",
    "#x2F": "/",
}


def unescape_known(value: str) -> str:
    """Decode only the entities our own escaping produces. Single pass."""
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(1)], value)


def sanitize_string(value: str) -> str:
    """Escape & < > " ' and trim surrounding whitespace."""
    return html.escape(unescape_known(value).strip(), quote=True)


def sanitize_object(obj: Mapping[str, Any]) -> dict[str, Any]:
    """
    Sanitize every top-level string value.

    Returns a new dict; nested dicts and lists are left as they are.
    """
    return {key: sanitize_string(value) if isinstance(value, str) else value for key, value in obj.items()}
