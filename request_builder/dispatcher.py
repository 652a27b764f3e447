"""Dispatcher - sends an assembled request and classifies the response.

A fresh httpx.Client is built per call from the TransportSettings, since
proxy and TLS trust are per-request decisions. The response is streamed,
read in full, and closed before send() returns on every path.
"""

from __future__ import annotations

import logging
import time

import httpx

from request_builder.errors import BodyReadError, StatusError, TransportError
from request_builder.models import ResponseOutcome
from request_builder.transport import TransportSettings

logger = logging.getLogger(__name__)

# Milliseconds. Short on purpose: fine for local fixtures, real networks
# need an explicit timeout_ms.
DEFAULT_TIMEOUT_MS = 10


def resolve_timeout(timeout_ms: int) -> int:
    """Return timeout_ms, or DEFAULT_TIMEOUT_MS when it is not positive."""
    return timeout_ms if timeout_ms > 0 else DEFAULT_TIMEOUT_MS


def send(
    request: httpx.Request,
    transport: TransportSettings,
    timeout_ms: int = 0,
) -> ResponseOutcome:
    """Send request and return the fully read response.

    Args:
        request: Assembled request.
        transport: Proxy/TLS settings for the client.
        timeout_ms: Timeout in milliseconds; <= 0 means DEFAULT_TIMEOUT_MS.

    Returns:
        ResponseOutcome for a 2xx response.

    Raises:
        TransportError: If no response was obtained (connect, TLS, timeout).
        BodyReadError: If the response body could not be read.
        StatusError: If the status code is outside 200-299. Carries the body.
    """
    timeout = resolve_timeout(timeout_ms) / 1000.0
    transport.apply(request)

    logger.debug(
        "%s %s%s (timeout %.3fs)", request.method, request.url.host, request.url.path, timeout
    )

    client = httpx.Client(timeout=timeout, **transport.client_kwargs())
    try:
        start_time = time.perf_counter()
        deadline = start_time + timeout
        try:
            response = client.send(request, stream=True, follow_redirects=True)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timeout after {timeout:.3f}s: {e}") from e
        except httpx.ConnectError as e:
            raise TransportError(f"Connection error: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Request error: {e}") from e
        except UnicodeEncodeError as e:
            raise TransportError(
                f"Encoding error: non-ASCII characters in request. "
                f"Character: {e.object[e.start:e.end]!r} at position {e.start}."
            ) from e

        try:
            body = _read_body(response, deadline, timeout)
        finally:
            response.close()

        elapsed_ms = (time.perf_counter() - start_time) * 1000
    finally:
        client.close()

    outcome = convert_response(response, body, elapsed_ms)
    logger.debug("%s %s -> %s", request.method, request.url.host, outcome.status_line)

    if not outcome.ok:
        raise StatusError(outcome.status_code, outcome.status_line, outcome)
    return outcome


def _read_body(response: httpx.Response, deadline: float, timeout: float) -> bytes:
    """Read the whole body, failing once the overall deadline has passed.

    httpx timeouts apply per network operation, so a server that drips
    bytes slower than the deadline but faster than the read timeout is
    only caught here, between chunks.

    Raises:
        TransportError: If the deadline passed before the body was complete.
        BodyReadError: If the stream broke.
    """
    chunks: list[bytes] = []
    try:
        if time.perf_counter() > deadline:
            raise TransportError(f"Request timeout after {timeout:.3f}s: waiting for response")
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            if time.perf_counter() > deadline:
                raise TransportError(
                    f"Request timeout after {timeout:.3f}s: "
                    f"body incomplete after {sum(map(len, chunks))} bytes"
                )
    except httpx.TimeoutException as e:
        raise TransportError(f"Request timeout after {timeout:.3f}s: {e}") from e
    except (httpx.RequestError, httpx.StreamError) as e:
        raise BodyReadError(f"Failed to read response body: {e}") from e
    return b"".join(chunks)


def convert_response(response: httpx.Response, body: bytes, elapsed_ms: float) -> ResponseOutcome:
    """Convert an httpx.Response and its read body to ResponseOutcome."""
    # Headers - lowercase keys, list values
    headers: dict[str, list[str]] = {}
    for key, value in response.headers.multi_items():
        headers.setdefault(key.lower(), []).append(value)

    return ResponseOutcome(
        status_code=response.status_code,
        reason_phrase=response.reason_phrase,
        headers=headers,
        body=body,
        elapsed_ms=elapsed_ms,
        http_version=response.http_version,
    )
