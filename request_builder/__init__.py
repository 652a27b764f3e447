"""request-builder: assemble and send one HTTP request with a bounded timeout."""

from request_builder.config_loader import ConfigError, load_request_config
from request_builder.errors import (
    BodyReadError,
    JSONParseError,
    RequestBuilderError,
    RequestConstructionError,
    StatusError,
    TransportError,
    URLParseError,
)
from request_builder.models import ProxyConfig, RequestConfig, ResponseOutcome
from request_builder.stores import HeaderStore, ValueStore
from request_builder.submitter import delete, get, patch, post, put, submit

__all__ = [
    "BodyReadError",
    "ConfigError",
    "HeaderStore",
    "JSONParseError",
    "ProxyConfig",
    "RequestBuilderError",
    "RequestConfig",
    "RequestConstructionError",
    "ResponseOutcome",
    "StatusError",
    "TransportError",
    "URLParseError",
    "ValueStore",
    "delete",
    "get",
    "load_request_config",
    "patch",
    "post",
    "put",
    "submit",
]
