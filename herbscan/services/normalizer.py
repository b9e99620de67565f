"""
Identifier normalization for scanned or pasted text.

A scanned QR code may carry a bare identifier, a public product URL
(https://host/p/{id}) or a JSON document describing the product. All of them
map to the same canonical lookup key.

Order: JSON object with an identifier field > absolute URL > verbatim text.
"""

import json
from typing import Any, Optional, Union
from urllib.parse import urlsplit

from herbscan.services.scanner.interfaces import RawInput


IDENTIFIER_FIELDS = ("id", "_id")
PUBLIC_PRODUCT_PREFIX = "p"


def normalize(raw: Union[RawInput, str]) -> str:
    """
    Convert raw scanned/pasted text into a canonical lookup key.

    Pure and total: never raises. Extracted values are normalized again, so
    the result is a fixed point (normalize(normalize(x)) == normalize(x)).

    Args:
        raw: RawInput or plain text

    Returns:
        Canonical key, trimmed (empty only for blank input)
    """
    text = raw.text if isinstance(raw, RawInput) else raw
    text = (text or "").strip()

    identifier = _identifier_from_json(text)
    if identifier is not None:
        return normalize(identifier)

    segment = _identifier_from_url(text)
    if segment is not None:
        return normalize(segment)

    return text


def _identifier_from_json(text: str) -> Optional[str]:
    """Return the identifier field of a JSON object, if any."""
    if not text.startswith("{"):
        return None
    try:
        document = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if not isinstance(document, dict):
        return None

    for field_name in IDENTIFIER_FIELDS:
        value = _as_identifier(document.get(field_name))
        # Strictly shorter than the document, so the recursion terminates
        if value is not None:
            return value
    return None


def _as_identifier(value: Any) -> Optional[str]:
    # bool is an int subclass and never a valid identifier
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _identifier_from_url(text: str) -> Optional[str]:
    """Return the product id of a /p/{id} URL, else its last path segment."""
    if any(ch.isspace() for ch in text):
        return None
    try:
        parts = urlsplit(text)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None

    segments = [s for s in parts.path.split("/") if s]
    if not segments:
        return None
    if len(segments) >= 2 and segments[0] == PUBLIC_PRODUCT_PREFIX:
        return segments[1]
    return segments[-1]
