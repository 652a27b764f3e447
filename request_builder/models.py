"""Data models for request-builder.

All models use Pydantic v2.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from request_builder.encoding import JSON_MEDIA_TYPE, parse_flat_json
from request_builder.stores import HeaderStore, ValueStore


class ProxyConfig(BaseModel):
    """Proxy server settings. An empty url means no proxy."""

    model_config = ConfigDict(extra="forbid")

    url: str = Field(default="", description="Proxy URL, e.g. http://proxy:3128")
    username: str = Field(default="", description="Proxy basic-auth user")
    password: str = Field(default="", description="Proxy basic-auth password")


class RequestConfig(BaseModel):
    """Everything needed to send one HTTP request.

    Headers and values live in stores owned by the config and are created on
    first access through header() and values(). Sending a request never
    mutates the config, so one instance can be sent several times.

    Usage:
        config = RequestConfig(url="https://example.com/items?page=2", timeout_ms=5000)
        config.header().add("User-Agent", "my-agent")
        config.values().add("q", "widgets")
        outcome = submitter.get(config)
    """

    model_config = ConfigDict(extra="forbid")

    url: str = Field(description="Target URL, may carry an inline query")
    username: str = Field(default="", description="Basic-auth user")
    password: str = Field(default="", description="Basic-auth password")
    timeout_ms: int = Field(default=0, description="Timeout in milliseconds; <= 0 means 10")
    insecure: bool = Field(
        default=False, description="Skip certificate verification for https targets"
    )
    proxy: ProxyConfig = Field(default_factory=ProxyConfig)

    _headers: HeaderStore | None = PrivateAttr(default=None)
    _values: ValueStore | None = PrivateAttr(default=None)

    def header(self) -> HeaderStore:
        if self._headers is None:
            self._headers = HeaderStore()
        return self._headers

    def values(self) -> ValueStore:
        if self._values is None:
            self._values = ValueStore()
        return self._values

    def import_json(self, data: bytes | str) -> None:
        """Load a flat JSON object of strings into values() and switch the
        Content-Type to application/json.

        Raises:
            JSONParseError: If data is not a flat object of string values.
        """
        parsed = parse_flat_json(data)
        for key, value in parsed.items():
            self.values().add(key, value)
        self.header().add("Content-Type", JSON_MEDIA_TYPE)


class RequestStoreSections(BaseModel):
    """headers/values sections of a request config file."""

    model_config = ConfigDict(extra="forbid")

    headers: dict[str, str] = Field(default_factory=dict, description="Header name -> value")
    values: dict[str, str | list[str]] = Field(
        default_factory=dict, description="Name -> value or list of values"
    )


class ResponseOutcome(BaseModel):
    """One HTTP response, fully read.

    Header keys are lowercase. Header values are arrays for repeated headers.
    """

    model_config = ConfigDict(extra="forbid")

    status_code: int = Field(description="HTTP status code")
    reason_phrase: str = Field(default="", description="Reason phrase, e.g. 'Not Found'")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Response headers (lowercase keys, array values)"
    )
    body: bytes = Field(default=b"", description="Raw response body")
    elapsed_ms: float = Field(description="Response time in milliseconds")
    http_version: str = Field(default="HTTP/1.1", description="Protocol version")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299

    @property
    def status_line(self) -> str:
        """Status code and reason, e.g. "404 Not Found"."""
        return f"{self.status_code} {self.reason_phrase}".rstrip()

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")
