from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

from aiohttp import ClientSession

from bitlinks.core.models import RequestDescriptor


class BaseTransport(ABC):
    """
    Abstract base class for sending a built request over HTTP.

    The batch executor owns the session and the concurrency limit; a
    transport only performs one request and returns what came back.
    Subclasses must not interpret the status or the body.

    Example Implementation:
        >>> class StubTransport(BaseTransport):
        ...     async def send(self, session, request):
        ...         return 200, b'{"link": "http://bit.ly/abc"}'
    """

    name: str

    @abstractmethod
    async def send(
        self, session: ClientSession, request: RequestDescriptor
    ) -> Tuple[int, bytes]:
        """
        Perform one HTTP request.

        Args:
            session (ClientSession): Aiohttp client session (carries the timeout)
            request (RequestDescriptor): Method, URL, headers, body and query

        Returns:
            Tuple of (status, body):
            - status (int): HTTP status code
            - body (bytes): Raw response body

        Raises:
            aiohttp.ClientError: For network/connection errors
            asyncio.TimeoutError: For request timeouts
        """
        ...
