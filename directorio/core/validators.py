"""Input normalization helpers for request payloads."""
from __future__ import annotations
import base64
import binascii
from datetime import date, datetime
from typing import Any, Mapping, Optional


TRUE_VALUES = {"true", "1", "on", "yes", "si", "sí"}
FALSE_VALUES = {"false", "0", "off", "no", ""}


def clip(value: Optional[str], max_length: int) -> str:
    """Return the left-most ``max_length`` characters of ``value``.

    Blank input yields an empty string, never ``None``.
    """
    if not value:
        return ""
    return value[:max_length]


def clip_or_none(value: Optional[str], max_length: int) -> Optional[str]:
    """Like :func:`clip` but keeps ``None`` as ``None`` (SQL NULL)."""
    if value is None:
        return None
    return value[:max_length]


def is_blank(value: Optional[str]) -> bool:
    """True for ``None``, empty or whitespace-only strings."""
    return value is None or not str(value).strip()


def lookup(payload: Mapping[str, Any], field: str) -> Any:
    """Case-insensitive field lookup.

    Exact key match wins; otherwise the first key equal to ``field`` ignoring
    case is used. Missing fields return ``None``.
    """
    if field in payload:
        return payload[field]
    wanted = field.lower()
    for key, value in payload.items():
        if isinstance(key, str) and key.lower() == wanted:
            return value
    return None


def as_text(payload: Mapping[str, Any], field: str) -> Optional[str]:
    """Read a field as text, ``None`` when absent or null."""
    value = lookup(payload, field)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def as_int(payload: Mapping[str, Any], field: str, default: Optional[int] = None) -> Optional[int]:
    """Read a field as an integer.

    Values that cannot be converted bind as ``default``.
    """
    value = lookup(payload, field)
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return default
    try:
        return int(text)
    except ValueError:
        return default


def as_bool(payload: Mapping[str, Any], field: str, default: bool = False) -> bool:
    """Read a field as a boolean (``true/false``, ``1/0``, ``on/off``)."""
    value = lookup(payload, field)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    # HTML forms post "true,false" for a checked checkbox + hidden field
    text = text.split(",")[0].strip()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return default


def as_date(payload: Mapping[str, Any], field: str) -> Optional[date]:
    """Read a field as a calendar date (ISO-8601, optional time part)."""
    value = lookup(payload, field)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def decode_photo(data_uri: Optional[str]) -> Optional[bytes]:
    """Decode a ``data:image/...;base64,AAAA`` string into bytes.

    Everything up to and including the first comma is discarded; a value
    without a comma is decoded as bare base64. Blank input and malformed
    payloads both yield ``None``.

    Example:
        >>> decode_photo("data:image/png;base64,QUJD")
        b'ABC'
    """
    if is_blank(data_uri):
        return None
    text = data_uri.strip()
    comma = text.find(",")
    if comma >= 0:
        text = text[comma + 1:]
    text = "".join(text.split())
    if not text:
        return None
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return None
