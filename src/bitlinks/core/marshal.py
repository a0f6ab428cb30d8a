from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from loguru import logger

from bitlinks.core.models import (
    Country,
    LinkClicks,
    Operation,
    RawOutcome,
    Referrer,
    ResultRecord,
)

"""
Turn raw outcomes into ResultRecords.

Server fields always win over request-side values. Request values only fill
gaps, e.g. a clicks query has no long_url in its response but the caller
still gets the short link it asked about.
"""

UNEXPECTED_ERROR_MESSAGE = "unexpected error"


def parse_body(body: bytes | str | None) -> dict[str, Any]:
    """
    Decode a response body into a JSON object.

    Invalid JSON, empty bodies and non-object JSON are replaced with
    {"message": "unexpected error"} so a bad body never breaks a batch.

    Args:
        body (Optional[bytes | str]): Raw response body

    Returns:
        dict[str, Any]: Decoded payload or the synthetic error payload
    """
    try:
        payload = json.loads(body) if body else None
    except (TypeError, ValueError) as e:
        logger.debug(f"Could not decode response body: {type(e).__name__}: {e}")
        payload = None
    if not isinstance(payload, dict):
        return {"message": UNEXPECTED_ERROR_MESSAGE}
    return payload


def _present(value: Any) -> Any:
    return None if value is None or value == "" else value


def _first_present(*values: Any) -> Any:
    for value in values:
        if _present(value) is not None:
            return value
    return None


def _as_int(value: Any) -> int | None:
    try:
        return int(value) if _present(value) is not None else None
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class ResponseFields:
    """Fields read from the server payload."""

    link: str | None = None
    long_url: str | None = None
    total_clicks: int | None = None
    link_clicks: tuple[LinkClicks, ...] | None = None
    title: str | None = None
    message: str | None = None
    code: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ResponseFields":
        link_clicks = None
        if isinstance(payload.get("link_clicks"), list):
            link_clicks = tuple(
                LinkClicks(date=str(item.get("date", "")), clicks=_as_int(item.get("clicks")) or 0)
                for item in payload["link_clicks"]
                if isinstance(item, dict)
            )
        code = payload.get("code")
        return cls(
            link=_present(payload.get("link")),
            long_url=_present(payload.get("long_url")),
            total_clicks=_as_int(payload.get("total_clicks")),
            link_clicks=link_clicks,
            title=_present(payload.get("title")),
            message=_present(payload.get("message")),
            code=_present(str(code) if code is not None else None),
        )


@dataclass(frozen=True)
class RequestFields:
    """Fallback fields known from the originating operation."""

    short_url: str | None = None
    long_url: str | None = None

    @classmethod
    def from_operation(cls, operation: Operation) -> "RequestFields":
        return cls(
            short_url=_present(operation.short_link),
            long_url=_present(operation.long_url),
        )


def merge_fields(response: ResponseFields, request: RequestFields) -> ResultRecord:
    """
    Merge server fields with request fallbacks, response first.

    Args:
        response (ResponseFields): Authoritative server values
        request (RequestFields): Values derived from the operation

    Returns:
        ResultRecord: Record with empty values dropped
    """
    return ResultRecord(
        short_url=_first_present(response.link, request.short_url),
        long_url=_first_present(response.long_url, request.long_url),
        user_clicks=response.total_clicks,
        link_clicks=response.link_clicks,
        title=response.title,
        error=response.message,
        code=response.code,
    )


def marshal(outcome: RawOutcome) -> ResultRecord:
    """
    Build the ResultRecord for one outcome.

    Failed outcomes become error records carrying the scoped error's
    message and code, with request-side fields kept for correlation.

    Args:
        outcome (RawOutcome): Transport result and its originating operation

    Returns:
        ResultRecord: The marshalled record
    """
    request = RequestFields.from_operation(outcome.operation)
    if outcome.error is not None:
        response = ResponseFields(
            message=_present(outcome.error.message) or UNEXPECTED_ERROR_MESSAGE,
            code=_present(outcome.error.code),
        )
    else:
        response = ResponseFields.from_payload(parse_body(outcome.body))
    return merge_fields(response, request)


def _metrics(outcome: RawOutcome, facet: str) -> list[tuple[str, int]]:
    """
    Read (value, clicks) pairs from a metrics response.

    v4 returns the breakdown under "metrics"; older payloads used the facet
    name as the key. Entries without a value are skipped. Order follows the
    server.
    """
    payload = parse_body(outcome.body)
    items = payload.get("metrics") or payload.get(facet) or []
    pairs = []
    for item in items:
        if not isinstance(item, dict) or _present(item.get("value")) is None:
            continue
        pairs.append((str(item["value"]), _as_int(item.get("clicks")) or 0))
    return pairs


def marshal_referrers(outcome: RawOutcome) -> list[Referrer]:
    return [
        Referrer(referrer=value, clicks=clicks)
        for value, clicks in _metrics(outcome, "referrers")
    ]


def marshal_countries(outcome: RawOutcome) -> list[Country]:
    return [
        Country(country=value, clicks=clicks)
        for value, clicks in _metrics(outcome, "countries")
    ]
