from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

from bitlinks.core.errors import BitlyError

DEFAULT_BASE_URL = "https://api-ssl.bitly.com/v4"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_CONCURRENCY = 15


@dataclass(frozen=True)
class ClientConfig:
    """
    Configuration for the HTTP client and the batch executor.

    Attributes:
        base_url (str): Versioned API root, without trailing slash
        timeout (float): Total timeout in seconds for a single request
        max_concurrency (int): Maximum number of simultaneously in-flight requests
        show_progress (bool): Show a tqdm progress bar for batch calls
        logging_level (Optional[int]): Loguru logging level (20=INFO, 10=DEBUG).
            When None, existing loguru sinks are left untouched.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    show_progress: bool = False
    logging_level: int | None = None

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_concurrency < 1:
            raise ValueError(
                f"max_concurrency must be at least 1, got {self.max_concurrency}"
            )
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build a configuration from BITLY_API_URL, BITLY_TIMEOUT and
        BITLY_MAX_CONCURRENCY. Keyword arguments take precedence.
        """
        values: dict[str, Any] = {}
        if os.getenv("BITLY_API_URL"):
            values["base_url"] = os.environ["BITLY_API_URL"]
        if os.getenv("BITLY_TIMEOUT"):
            values["timeout"] = float(os.environ["BITLY_TIMEOUT"])
        if os.getenv("BITLY_MAX_CONCURRENCY"):
            values["max_concurrency"] = int(os.environ["BITLY_MAX_CONCURRENCY"])
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class Credentials:
    access_token: str

    def __repr__(self) -> str:
        return "Credentials(access_token='***')"


class OperationKind(str, Enum):
    SHORTEN = "shorten"
    EXPAND = "expand"
    CLICKS = "clicks"
    CLICKS_SUMMARY = "clicks_summary"
    REFERRERS = "referrers"
    COUNTRIES = "countries"
    INFO = "info"


@dataclass(frozen=True)
class Operation:
    """
    One logical API call: what to do and to which link.

    Attributes:
        kind (OperationKind): Endpoint family to call
        target (str): Long URL for SHORTEN, short link (identifier or URL) otherwise
        options (Mapping[str, Any]): Extra body (POST) or query (GET) parameters
    """

    kind: OperationKind
    target: str
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @property
    def long_url(self) -> str | None:
        return self.target if self.kind is OperationKind.SHORTEN else None

    @property
    def short_link(self) -> str | None:
        """The short link exactly as the caller supplied it."""
        return None if self.kind is OperationKind.SHORTEN else self.target


@dataclass(frozen=True)
class Single:
    operation: Operation


@dataclass(frozen=True)
class Batch:
    operations: tuple[Operation, ...]


Call = Union[Single, Batch]


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    url: str
    path: str
    headers: Mapping[str, str]
    body: bytes | None = None
    query: Mapping[str, Any] | None = None


@dataclass
class RawOutcome:
    """
    Transport-level result of one request, before JSON parsing.

    Attributes:
        operation (Operation): The operation this outcome answers
        status (Optional[int]): HTTP status, None when no response arrived
        body (Optional[bytes]): Raw response body
        error (Optional[BitlyError]): Scoped timeout or API error
    """

    operation: Operation
    status: int | None = None
    body: bytes | None = None
    error: BitlyError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class LinkClicks:
    date: str
    clicks: int


@dataclass(frozen=True)
class ResultRecord:
    """
    Outcome of one shortened-link operation.

    Unset fields are None and are left out of to_dict(), so an absent
    error can be told apart from an empty one. An empty link_clicks tuple
    is kept: the server answered with a series that has no points, which
    is different from an endpoint that returns no series at all.
    """

    short_url: str | None = None
    long_url: str | None = None
    user_clicks: int | None = None
    link_clicks: tuple[LinkClicks, ...] | None = None
    title: str | None = None
    error: str | None = None
    code: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class Referrer:
    referrer: str
    clicks: int


@dataclass(frozen=True)
class Country:
    country: str
    clicks: int
