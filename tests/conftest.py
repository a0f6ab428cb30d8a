import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from bitlinks.core.models import RequestDescriptor
from bitlinks.transport.base import BaseTransport

Handler = Callable[[RequestDescriptor], Awaitable[tuple[int, Any]]]


class StubTransport(BaseTransport):
    """In-process transport that records requests and counts concurrency."""

    name = "stub"

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: list[RequestDescriptor] = []
        self.completed: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, session: Any, request: RequestDescriptor) -> tuple[int, bytes]:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            status, body = await self.handler(request)
        finally:
            self.in_flight -= 1
        self.completed.append(request.path)
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        return status, body


def json_body(request: RequestDescriptor) -> dict[str, Any]:
    return json.loads(request.body) if request.body else {}


@pytest.fixture
def bitly_stub() -> Callable[[dict[str, Any]], StubTransport]:
    """Transport answering by request path, mirroring the Bitly v4 endpoints."""

    def factory(routes: dict[str, Any], delay: float = 0.0) -> StubTransport:
        async def handler(request: RequestDescriptor) -> tuple[int, Any]:
            await asyncio.sleep(delay)
            response = routes.get(request.path)
            if response is None:
                return 404, {"message": "NOT_FOUND", "resource": "bitlinks"}
            if isinstance(response, BaseException):
                raise response
            return response

        return StubTransport(handler)

    return factory
