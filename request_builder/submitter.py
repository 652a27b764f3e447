"""Submitter - verb entry points (get, post, put, patch, delete, submit).

Each call reads the RequestConfig without modifying it:
    1. Split any inline query off the URL.
    2. Merge or re-encode that query; pick the body encoding from Content-Type.
    3. Assemble the request, derive transport settings, dispatch.

GET merges the inline query into (a copy of) the values and sends them all as
the query string. Other verbs send the values as the body and re-encode the
inline query on its own.
"""

from __future__ import annotations

import logging

from request_builder.assembler import assemble_request
from request_builder.dispatcher import send
from request_builder.encoding import FORM_MEDIA_TYPE, encode_body, split_url
from request_builder.models import RequestConfig, ResponseOutcome
from request_builder.transport import build_transport

logger = logging.getLogger(__name__)


def get(config: RequestConfig) -> ResponseOutcome:
    """Send a GET. Values from the URL and from values() both go in the query.

    Duplicates across the two sources are kept.
    """
    base_url, inline_query = split_url(config.url)

    values = config.values().copy()
    if inline_query is not None:
        values.extend(inline_query)

    raw_query = values.encode() if values else None

    request = assemble_request(
        base_url,
        "GET",
        config.header(),
        config.username,
        config.password,
        raw_query=raw_query,
    )
    transport = build_transport(config)
    return send(request, transport, config.timeout_ms)


def submit(config: RequestConfig, method: str) -> ResponseOutcome:
    """Send values() as the body of a method request.

    Content-Type defaults to application/x-www-form-urlencoded. JSON media
    types (application/json, text/json, text/x-json) send a JSON object;
    everything else is form encoded. No body is sent when values() is empty.
    An inline URL query is re-encoded and kept on the URL.
    """
    base_url, inline_query = split_url(config.url)
    raw_query = inline_query.encode() if inline_query else None

    headers = config.header().copy()
    if headers.get("Content-Type") == "":
        headers.add("Content-Type", FORM_MEDIA_TYPE)

    body = encode_body(headers.get("Content-Type"), config.values())
    logger.debug(
        "%s body: %d bytes as %s",
        method.upper(),
        len(body) if body is not None else 0,
        headers.get("Content-Type"),
    )

    request = assemble_request(
        base_url,
        method,
        headers,
        config.username,
        config.password,
        body=body,
        raw_query=raw_query,
    )
    transport = build_transport(config)
    return send(request, transport, config.timeout_ms)


def post(config: RequestConfig) -> ResponseOutcome:
    return submit(config, "POST")


def put(config: RequestConfig) -> ResponseOutcome:
    return submit(config, "PUT")


def patch(config: RequestConfig) -> ResponseOutcome:
    return submit(config, "PATCH")


def delete(config: RequestConfig) -> ResponseOutcome:
    return submit(config, "DELETE")
