"""Error types raised by request-builder.

Callers tell "never reached the server" apart from "reached the server, bad
status" by exception type: only StatusError carries a response.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from request_builder.models import ResponseOutcome


class RequestBuilderError(Exception):
    """Base class for request-builder errors."""


class URLParseError(RequestBuilderError):
    """Raised when a target or proxy URL is malformed."""


class RequestConstructionError(RequestBuilderError):
    """Raised when httpx cannot build a request from the given inputs."""


class TransportError(RequestBuilderError):
    """Raised on network, TLS or timeout failure before any response."""


class BodyReadError(RequestBuilderError):
    """Raised when a response arrived but its body could not be read."""


class JSONParseError(RequestBuilderError):
    """Raised when imported JSON is not a flat object of string values."""


class StatusError(RequestBuilderError):
    """Raised when the server answered with a status outside 200-299.

    The body has already been read and is kept on the exception, since error
    payloads are often what the caller wants to look at.
    """

    def __init__(self, status_code: int, message: str, response: ResponseOutcome) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.response = response

    @property
    def body(self) -> bytes:
        return self.response.body
