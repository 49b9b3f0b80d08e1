"""General utility helpers shared across modules."""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Sequence

_SLUG_STRIP = re.compile(r"[^\w\s-]")
_SLUG_SPACES = re.compile(r"[-\s_]+")


def slugify(text: Any) -> str:
    """Return a lowercase ASCII slug for ``text``."""

    value = unicodedata.normalize("NFKD", str(text))
    value = value.encode("ascii", "ignore").decode("ascii")
    value = _SLUG_STRIP.sub("", value).strip().lower()
    return _SLUG_SPACES.sub("-", value).strip("-")


def set_slug(
    content: str | Sequence[Any] = "",
    *,
    prefix: str = "",
    suffix: str = "",
) -> str:
    """Build a ``prefix#content#suffix`` slug, each term slugified.

    Terms that are slugs themselves keep their ``#`` separators.
    """

    terms = content if isinstance(content, (list, tuple)) else [content]
    body = "#".join(
        slugify(part) for term in terms for part in str(term).split("#")
    )
    start = f"{slugify(prefix)}#" if prefix else ""
    end = f"#{slugify(suffix)}" if suffix else ""
    return f"{start}{body}{end}"


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (``Z`` suffix allowed) into a datetime."""

    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def format_iso(value: datetime | None) -> str | None:
    """Format a datetime as ISO-8601 using ``Z`` for UTC."""

    if value is None:
        return None
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="ignore")
    if isinstance(value, set):
        return sorted(normalise_value(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): normalise_value(val) for key, val in value.items()}
    return value
