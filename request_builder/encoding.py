"""Query splitting, body encoding and JSON import.

Everything here is a pure function of its inputs: nothing touches the
RequestConfig it was called for.

Body encoding is a small registry keyed by media type. Anything not
registered falls back to URL-encoded form data, which is also the default
Content-Type for non-GET verbs.
"""

from __future__ import annotations

import json
from typing import Callable

from request_builder.errors import JSONParseError
from request_builder.stores import ValueStore, parse_query

FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"
JSON_MEDIA_TYPE = "application/json"
JSON_MEDIA_TYPES = frozenset({"application/json", "text/json", "text/x-json"})

BodyEncoder = Callable[[ValueStore], bytes]


def split_url(url: str) -> tuple[str, ValueStore | None]:
    """Split a URL at the first '?' into base URL and parsed inline query.

    Returns (url, None) when the URL has no query part. A fragment after the
    query is dropped along with it.

    Example:
        >>> split_url("http://h/p?b=2&a=1")
        ('http://h/p', ValueStore({'b': ['2'], 'a': ['1']}))
    """
    base, sep, rest = url.partition("?")
    if not sep:
        return url, None
    raw_query, _, _ = rest.partition("#")
    return base, parse_query(raw_query)


def media_type(content_type: str) -> str:
    """Strip parameters and case from a Content-Type value.

    "Application/JSON; charset=utf-8" -> "application/json"
    """
    return content_type.split(";", 1)[0].strip().lower()


def encode_form(values: ValueStore) -> bytes:
    return values.encode().encode("ascii")


def encode_json(values: ValueStore) -> bytes:
    """Encode as a flat JSON object of strings.

    A JSON object holds one value per key, so a name with several values is
    sent with its last one only.
    """
    flat = {name: items[-1] for name, items in values.items() if items}
    return json.dumps(flat, sort_keys=True, separators=(",", ":")).encode("utf-8")


_ENCODERS: dict[str, BodyEncoder] = {name: encode_json for name in JSON_MEDIA_TYPES}


def encoder_for(content_type: str) -> BodyEncoder:
    return _ENCODERS.get(media_type(content_type), encode_form)


def encode_body(content_type: str, values: ValueStore) -> bytes | None:
    """Encode values as a request body for the given Content-Type.

    Returns None when there is nothing to send.
    """
    if not values:
        return None
    return encoder_for(content_type)(values)


def parse_flat_json(data: bytes | str) -> dict[str, str]:
    """Parse a JSON object whose every value is a string.

    Raises:
        JSONParseError: If data is not valid JSON, not an object, or holds a
            non-string value.
    """
    try:
        parsed = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise JSONParseError(f"Invalid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise JSONParseError(
            f"Expected a JSON object of strings, got {type(parsed).__name__}"
        )

    for key, value in parsed.items():
        if not isinstance(value, str):
            raise JSONParseError(
                f"Value for '{key}' must be a string, got {type(value).__name__}"
            )

    return parsed
