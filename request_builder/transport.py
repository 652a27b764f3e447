"""Transport settings - proxy routing and TLS trust for one request.

The settings become httpx.Client kwargs. Proxy credentials are not handed
to httpx's proxy auth; they travel as a Proxy-Authorization header on the
request itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from request_builder.assembler import PROXY_SCHEMES, basic_auth_value, parse_url
from request_builder.models import RequestConfig

logger = logging.getLogger(__name__)

PROXY_AUTHORIZATION = "Proxy-Authorization"


@dataclass
class TransportSettings:
    """Client-level settings derived from a RequestConfig."""

    proxy: httpx.URL | None = None
    verify: bool = True
    request_headers: dict[str, str] = field(default_factory=dict)

    def client_kwargs(self) -> dict[str, Any]:
        """Build kwargs for httpx.Client."""
        kwargs: dict[str, Any] = {"verify": self.verify}
        if self.proxy is not None:
            kwargs["proxy"] = self.proxy
        return kwargs

    def apply(self, request: httpx.Request) -> None:
        """Attach per-request transport headers (proxy auth) to request."""
        for name, value in self.request_headers.items():
            request.headers[name] = value


def build_transport(config: RequestConfig) -> TransportSettings:
    """Derive proxy and TLS settings from config.

    Raises:
        URLParseError: If the proxy URL is malformed.
    """
    settings = TransportSettings()

    if config.proxy.url != "":
        settings.proxy = parse_url(config.proxy.url, what="proxy URL", schemes=PROXY_SCHEMES)
        if config.proxy.username != "" and config.proxy.password != "":
            settings.request_headers[PROXY_AUTHORIZATION] = basic_auth_value(
                config.proxy.username, config.proxy.password
            )

    if config.url.lower().startswith("https://") and config.insecure:
        logger.warning("TLS certificate verification disabled for %s", _origin(config.url))
        settings.verify = False

    return settings


def _origin(url: str) -> str:
    """scheme://host[:port] of url, for log lines that must not leak paths or queries."""
    scheme, _, rest = url.partition("://")
    return f"{scheme}://{rest.split('/', 1)[0].split('?', 1)[0].rsplit('@', 1)[-1]}"
