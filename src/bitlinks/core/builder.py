from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote, urlsplit

from bitlinks.core.errors import InvalidOperation
from bitlinks.core.models import (
    DEFAULT_BASE_URL,
    Credentials,
    Operation,
    OperationKind,
    RequestDescriptor,
)

"""
Translate logical operations into HTTP request descriptors.

Click, metric and info endpoints take a bitlink identifier (host + path) in
the URL path, so full short URLs are normalized before they are embedded.
"""

_GET_SUFFIXES = {
    OperationKind.CLICKS: "clicks",
    OperationKind.CLICKS_SUMMARY: "clicks/summary",
    OperationKind.REFERRERS: "referrers",
    OperationKind.COUNTRIES: "countries",
    OperationKind.INFO: "",
}

_QUERY_TYPES = (str, int, float)


def normalize_bitlink_id(value: str) -> str:
    """
    Reduce a short link to its bitlink identifier.

    Args:
        value (str): Short link as a full URL or as a bare identifier

    Returns:
        str: The host + path identifier

    Example:
        >>> normalize_bitlink_id("https://bit.ly/abc")
        'bit.ly/abc'
        >>> normalize_bitlink_id("bit.ly/abc")
        'bit.ly/abc'
    """
    parts = urlsplit(value.strip())
    if parts.scheme in ("http", "https"):
        value = parts.netloc + parts.path
    return value.strip().strip("/")


def build_headers(credentials: Credentials) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {credentials.access_token}",
        "Content-Type": "application/json",
    }


def _query_params(operation: Operation) -> dict[str, str | int | float] | None:
    """Booleans go out as "true"/"false"; other non-scalar values are rejected."""
    query: dict[str, str | int | float] = {}
    for key, value in operation.options.items():
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, _QUERY_TYPES):
            query[key] = value
        else:
            raise InvalidOperation(
                f"{operation.kind.value} option {key!r} must be a string, number or bool, "
                f"got {type(value).__name__}"
            )
    return query or None


def _validate(operation: Operation) -> None:
    if not isinstance(operation.target, str) or not operation.target.strip():
        raise InvalidOperation(
            f"{operation.kind.value} requires a non-empty target, got {operation.target!r}"
        )


def _encode_body(operation: Operation, body: dict[str, Any] | None) -> bytes | None:
    if body is None:
        return None
    try:
        return json.dumps(body).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidOperation(
            f"{operation.kind.value} options are not JSON serializable: {e}"
        ) from e


def build_request(
    operation: Operation,
    credentials: Credentials,
    base_url: str = DEFAULT_BASE_URL,
) -> RequestDescriptor:
    """
    Build the HTTP request for one operation.

    Args:
        operation (Operation): The logical operation
        credentials (Credentials): Bearer token sent with every request
        base_url (str): Versioned API root

    Returns:
        RequestDescriptor: Method, URL, headers, body and query for the call

    Raises:
        InvalidOperation: If the target is empty, the bitlink id normalizes to nothing,
            or an option cannot be sent
    """
    _validate(operation)
    headers = build_headers(credentials)
    body: dict[str, Any] | None = None
    query: dict[str, str | int | float] | None = None

    if operation.kind is OperationKind.SHORTEN:
        method, path = "POST", "/shorten"
        body = {"long_url": operation.target, **operation.options}
    else:
        bitlink_id = normalize_bitlink_id(operation.target)
        if not bitlink_id:
            raise InvalidOperation(f"Not a bitlink: {operation.target!r}")
        if operation.kind is OperationKind.EXPAND:
            method, path = "POST", "/expand"
            body = {"bitlink_id": bitlink_id}
        else:
            method = "GET"
            path = f"/bitlinks/{quote(bitlink_id, safe='/')}"
            if _GET_SUFFIXES[operation.kind]:
                path += f"/{_GET_SUFFIXES[operation.kind]}"
            query = _query_params(operation)

    return RequestDescriptor(
        method=method,
        url=base_url.rstrip("/") + path,
        path=path,
        headers=headers,
        body=_encode_body(operation, body),
        query=query,
    )
