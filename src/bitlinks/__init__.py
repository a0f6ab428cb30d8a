"""
bitlinks: an async client for the Bitly v4 API.

A Python library for shortening links and reading link statistics with:
- Single calls and concurrent batches (bounded in-flight requests)
- Batch results in input order, with per-link errors kept in place
- Tolerant response parsing (malformed bodies become error records)
- Explicit, immutable client configuration

Example:
    >>> from bitlinks import BitlyClient
    >>>
    >>> async with BitlyClient(access_token="...") as client:
    ...     record = await client.shorten("https://google.com")
    ...     print(record.short_url)
    ...
    ...     summaries = await client.clicks_summary(["bit.ly/abc", "bit.ly/def"])
    ...     for summary in summaries:
    ...         print(summary.short_url, summary.user_clicks)
"""

from bitlinks.client import BitlyClient
from bitlinks.core.engine import BatchExecutor
from bitlinks.core.errors import ApiError, BitlyError, BitlyTimeout, InvalidOperation
from bitlinks.core.models import (
    ClientConfig,
    Country,
    LinkClicks,
    Operation,
    OperationKind,
    Referrer,
    ResultRecord,
)
from bitlinks.transport import BaseTransport, HttpTransport

__version__ = "0.1.0"

__all__ = [
    # Client
    "BitlyClient",
    "BatchExecutor",
    # Configuration
    "ClientConfig",
    # Operations and results
    "Operation",
    "OperationKind",
    "ResultRecord",
    "LinkClicks",
    "Referrer",
    "Country",
    # Errors
    "BitlyError",
    "InvalidOperation",
    "BitlyTimeout",
    "ApiError",
    # Transport interface
    "BaseTransport",
    "HttpTransport",
    # Version
    "__version__",
]
