"""Query-string construction for the Places web-service endpoints."""

from collections.abc import Mapping
from urllib.parse import quote

# Only RFC 3986 unreserved characters survive unescaped
_SAFE_CHARACTERS = "-._~"


def escape_value(value: str) -> str:
    """Percent-escape a single query value (space becomes %20)."""
    return quote(value, safe=_SAFE_CHARACTERS, encoding="utf-8")


def encode_query(params: Mapping[str, str | None]) -> str:
    """Build a deterministic ``key=value&...`` string.

    Keys are emitted in code-point order and are expected to be URL-safe.
    ``None`` values become empty strings so that no parameter is ever dropped.
    """
    parts = []
    for key in sorted(params):
        value = params[key]
        parts.append(f"{key}={escape_value('' if value is None else str(value))}")
    return "&".join(parts)
