from __future__ import annotations

from typing import Tuple

from aiohttp import ClientSession
from loguru import logger

from bitlinks.core.models import RequestDescriptor
from bitlinks.transport.base import BaseTransport


class HttpTransport(BaseTransport):
    name = "http"

    async def send(
        self, session: ClientSession, request: RequestDescriptor
    ) -> Tuple[int, bytes]:
        logger.debug(f"{request.method} {request.url}")
        async with session.request(
            request.method,
            request.url,
            headers=dict(request.headers),
            params=dict(request.query) if request.query else None,
            data=request.body,
        ) as response:
            body = await response.read()
            return response.status, body
