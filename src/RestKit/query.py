# === NAVMAP v1 ===
# {
#   "module": "RestKit.query",
#   "purpose": "URL validation and query-string augmentation from structured options.",
#   "sections": [
#     {"id": "validate-url", "name": "validate_url", "anchor": "function-validate-url", "kind": "function"},
#     {"id": "with-query-parameters", "name": "with_query_parameters", "anchor": "function-with-query-parameters", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Query-string augmentation for endpoint URLs.

``with_query_parameters`` merges structured options into the query string of
an existing URL.  Options may be a pydantic model (aliases and ``None``
exclusion respected), a dataclass, or a plain mapping:

    >>> class ListOptions(BaseModel):
    ...     page: Optional[int] = None
    ...     per_page: Optional[int] = None
    ...     search: Optional[str] = None
    >>> with_query_parameters("https://hostname.domain", ListOptions(page=1, per_page=10, search="name=testHost"))
    'https://hostname.domain?page=1&per_page=10&search=name%3DtestHost'
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Dict, List
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel

from .errors import InvalidConfigurationError, QueryEncodingError

__all__ = ["validate_url", "with_query_parameters"]


def validate_url(url: str) -> None:
    """Reject URLs without a scheme and host, or with whitespace/control characters in the host."""

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError as exc:
        raise InvalidConfigurationError(f"parse {url!r}: {exc}") from exc
    if not parts.scheme or not parts.netloc:
        raise InvalidConfigurationError(f"parse {url!r}: missing scheme or host")
    if any(ch.isspace() or ord(ch) < 0x20 for ch in parts.netloc):
        raise InvalidConfigurationError(f"parse {url!r}: invalid character in host name")
    if port is not None and not 0 < port < 65536:
        raise InvalidConfigurationError(f"parse {url!r}: invalid port")


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _option_items(options: Any) -> Dict[str, Any]:
    if isinstance(options, BaseModel):
        return options.model_dump(mode="json", by_alias=True, exclude_none=True)
    if dataclasses.is_dataclass(options) and not isinstance(options, type):
        items = {}
        for field in dataclasses.fields(options):
            value = getattr(options, field.name)
            if value is None:
                continue
            items[field.metadata.get("query", field.name)] = value
        return items
    if isinstance(options, Mapping):
        return {str(key): value for key, value in options.items() if value is not None}
    raise TypeError(f"query options must be a model, dataclass or mapping, got {type(options).__name__}")


def with_query_parameters(url: str, options: Any) -> str:
    """Merge ``options`` into the query string of ``url``.

    Keys present in both the URL and ``options`` take the option's value.
    Sequence values produce repeated keys.  The resulting query is sorted by
    key.  ``None`` options return a valid ``url`` unchanged.

    Raises:
        QueryEncodingError: If ``url`` is malformed or ``options`` is not
            struct-like; ``error.url`` is the original string.
    """

    try:
        validate_url(url)
    except InvalidConfigurationError as exc:
        raise QueryEncodingError(str(exc), url=url) from exc

    if options is None:
        return url

    try:
        new_items = _option_items(options)
    except TypeError as exc:
        raise QueryEncodingError(str(exc), url=url) from exc

    parts = urlsplit(url)
    merged: Dict[str, List[str]] = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        merged.setdefault(key, []).append(value)
    for key, value in new_items.items():
        if isinstance(value, (list, tuple)):
            merged[key] = [_format_value(item) for item in value]
        else:
            merged[key] = [_format_value(value)]

    query = urlencode(sorted(merged.items()), doseq=True)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))
