from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Union

from bitlinks.core.engine import BatchExecutor
from bitlinks.core.errors import InvalidOperation
from bitlinks.core.marshal import marshal, marshal_countries, marshal_referrers
from bitlinks.core.models import (
    Batch,
    Call,
    ClientConfig,
    Country,
    Credentials,
    Operation,
    OperationKind,
    RawOutcome,
    Referrer,
    ResultRecord,
    Single,
)
from bitlinks.transport.base import BaseTransport
from bitlinks.utils import setup_logger

Target = Union[str, Sequence[str]]


def _plan(kind: OperationKind, target: Target, options: dict[str, Any]) -> Call:
    """Resolve the call's arity once: a string is Single, a list is Batch."""
    if isinstance(target, str):
        return Single(Operation(kind, target, options))
    if isinstance(target, (list, tuple)):
        if not all(isinstance(item, str) for item in target):
            raise InvalidOperation(f"{kind.value} expects strings, got {target!r}")
        return Batch(tuple(Operation(kind, item, options) for item in target))
    raise InvalidOperation(
        f"{kind.value} expects a string or a list of strings, got {type(target).__name__}"
    )


class BitlyClient:
    """
    Async client for the Bitly v4 API.

    A single target returns one ResultRecord and raises BitlyTimeout or
    ApiError on failure. A list of targets (even a one-element list) runs
    concurrently and returns a list in input order, with failures reported
    as error records in place.

    Attributes:
        config (ClientConfig): Base URL, timeout and concurrency limit
        executor (BatchExecutor): Sends requests and collects outcomes

    Example:
        >>> async with BitlyClient(access_token="...") as client:
        ...     record = await client.shorten("https://google.com")
        ...     records = await client.clicks_summary(["bit.ly/abc", "bit.ly/def"])
    """

    def __init__(
        self,
        access_token: str,
        config: ClientConfig | None = None,
        transport: BaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("An access token is required")
        self.config = config or ClientConfig()
        if self.config.logging_level is not None:
            setup_logger(self.config.logging_level)
        self.executor = BatchExecutor(
            config=self.config,
            credentials=Credentials(access_token),
            transport=transport,
        )

    async def __aenter__(self) -> "BitlyClient":
        await self.executor.open()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.executor.close()

    async def _dispatch(self, call: Call) -> ResultRecord | list[ResultRecord]:
        if isinstance(call, Single):
            outcome = await self.executor.execute_one(call.operation)
            if outcome.error is not None:
                raise outcome.error
            return marshal(outcome)
        outcomes = await self.executor.execute(call.operations)
        return [marshal(outcome) for outcome in outcomes]

    async def shorten(
        self, long_url: Target, **options: Any
    ) -> ResultRecord | list[ResultRecord]:
        """
        Shorten one long URL or a list of them.

        Options (e.g. domain, group_guid) are sent in the request body.
        """
        return await self._dispatch(_plan(OperationKind.SHORTEN, long_url, options))

    async def expand(
        self, short_link: Target
    ) -> ResultRecord | list[ResultRecord]:
        """Look up the long URL behind one short link or a list of them."""
        return await self._dispatch(_plan(OperationKind.EXPAND, short_link, {}))

    async def clicks(
        self, short_link: Target, **options: Any
    ) -> ResultRecord | list[ResultRecord]:
        """
        Click counts per time unit. Options (unit, units, unit_reference)
        are sent as query parameters; the series is in link_clicks.
        """
        return await self._dispatch(_plan(OperationKind.CLICKS, short_link, options))

    async def clicks_summary(
        self, short_link: Target, **options: Any
    ) -> ResultRecord | list[ResultRecord]:
        """Total clicks for the period, reported as user_clicks."""
        return await self._dispatch(
            _plan(OperationKind.CLICKS_SUMMARY, short_link, options)
        )

    async def info(
        self, short_link: Target
    ) -> ResultRecord | list[ResultRecord]:
        """Link details (long URL, title) for one short link or a list of them."""
        return await self._dispatch(_plan(OperationKind.INFO, short_link, {}))

    async def _single_link(
        self, kind: OperationKind, short_link: str, options: dict[str, Any]
    ) -> RawOutcome:
        call = _plan(kind, short_link, options)
        if not isinstance(call, Single):
            raise InvalidOperation(f"{kind.value} only takes a single short link")
        outcome = await self.executor.execute_one(call.operation)
        if outcome.error is not None:
            raise outcome.error
        return outcome

    async def referrers(self, short_link: str, **options: Any) -> list[Referrer]:
        """
        Clicks grouped by referrer for a single short link.

        Raises:
            InvalidOperation: If given anything but a single string
            BitlyTimeout: If the request timed out
            ApiError: For a non-success status or a transport failure
        """
        outcome = await self._single_link(OperationKind.REFERRERS, short_link, options)
        return marshal_referrers(outcome)

    async def countries(self, short_link: str, **options: Any) -> list[Country]:
        """Clicks grouped by country for a single short link."""
        outcome = await self._single_link(OperationKind.COUNTRIES, short_link, options)
        return marshal_countries(outcome)
