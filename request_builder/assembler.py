"""Request assembler - builds the httpx.Request for one call."""

from __future__ import annotations

import base64

import httpx

from request_builder.errors import RequestConstructionError, URLParseError
from request_builder.stores import HeaderStore

SUPPORTED_SCHEMES = ("http", "https")
PROXY_SCHEMES = ("http", "https", "socks5", "socks5h")


def basic_auth_value(username: str, password: str) -> str:
    """Build a Basic credential: "Basic base64(user:pass)"."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def parse_url(url: str, what: str = "URL", schemes: tuple[str, ...] = SUPPORTED_SCHEMES) -> httpx.URL:
    """Parse an absolute URL whose scheme is one of schemes.

    Raises:
        URLParseError: If the URL cannot be parsed, has another scheme,
            or has no host.
    """
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise URLParseError(f"Invalid {what} '{url}': {e}") from e

    if parsed.scheme not in schemes:
        raise URLParseError(
            f"Invalid {what} '{url}': scheme must be one of {', '.join(schemes)}"
        )
    if not parsed.host:
        raise URLParseError(f"Invalid {what} '{url}': missing host")
    return parsed


def assemble_request(
    url: str,
    method: str,
    headers: HeaderStore,
    username: str = "",
    password: str = "",
    body: bytes | None = None,
    raw_query: str | None = None,
) -> httpx.Request:
    """Build a request targeting url.

    Every header in the store is copied onto the request. Basic auth is set
    only when both username and password are non-empty.

    Args:
        url: Target URL without a query part. A fragment is allowed and is
            never sent.
        method: HTTP verb.
        headers: Headers to send.
        username: Basic-auth user.
        password: Basic-auth password.
        body: Encoded body, or None for no body.
        raw_query: Already-encoded query string to put on the URL.

    Returns:
        The assembled httpx.Request.

    Raises:
        URLParseError: If url is malformed.
        RequestConstructionError: If httpx rejects the request.
    """
    parsed = parse_url(url)
    if raw_query:
        parsed = parsed.copy_with(query=raw_query.encode("ascii"))

    request_headers = headers.copy()
    if username != "" and password != "":
        request_headers.add("Authorization", basic_auth_value(username, password))

    try:
        return httpx.Request(
            method=method.upper(),
            url=parsed,
            headers=request_headers.items(),
            content=body,
        )
    except (TypeError, ValueError, httpx.InvalidURL) as e:
        # Non-ASCII header values surface here as UnicodeEncodeError
        raise RequestConstructionError(f"Cannot build {method} request for '{url}': {e}") from e
