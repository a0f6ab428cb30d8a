from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from aiohttp import ClientSession, ClientTimeout
from loguru import logger
from tqdm import tqdm

from bitlinks.core.builder import build_request
from bitlinks.core.errors import ApiError, BitlyTimeout
from bitlinks.core.marshal import parse_body
from bitlinks.core.models import (
    ClientConfig,
    Credentials,
    Operation,
    RawOutcome,
    RequestDescriptor,
)
from bitlinks.transport.base import BaseTransport
from bitlinks.transport.http import HttpTransport
from bitlinks.utils import is_success_status, task_id_generator

"""
Async executor for single and batched API requests.

This module:
- Builds every request up front, so invalid input fails before any I/O
- Sends a single operation directly
- Fans a batch out under a semaphore (at most max_concurrency in flight)
- Pairs each raw outcome with its operation, in input order

Errors are scoped to the operation that produced them. A timeout or an API
error on one request never cancels or alters its siblings.
"""


@dataclass
class StatusTracker:
    """
    Tracks metrics and status during one batch.

    Attributes:
        num_tasks_started (int): Total number of requests issued
        num_tasks_in_progress (int): Current number of in-flight requests
        num_tasks_succeeded (int): Requests answered with a success status
        num_timeouts (int): Requests that exceeded the timeout
        num_api_errors (int): Non-success statuses and transport failures
        max_in_progress (int): Peak number of simultaneously in-flight requests
    """

    num_tasks_started: int = 0
    num_tasks_in_progress: int = 0
    num_tasks_succeeded: int = 0
    num_timeouts: int = 0
    num_api_errors: int = 0
    max_in_progress: int = 0

    @property
    def num_tasks_failed(self) -> int:
        return self.num_timeouts + self.num_api_errors

    def request_started(self) -> None:
        self.num_tasks_started += 1
        self.num_tasks_in_progress += 1
        self.max_in_progress = max(self.max_in_progress, self.num_tasks_in_progress)

    def request_finished(self, outcome: RawOutcome) -> None:
        self.num_tasks_in_progress -= 1
        if isinstance(outcome.error, BitlyTimeout):
            self.num_timeouts += 1
        elif outcome.error is not None:
            self.num_api_errors += 1
        else:
            self.num_tasks_succeeded += 1


def _api_error(status: int, body: bytes) -> ApiError:
    payload = parse_body(body)
    code = payload.get("code")
    return ApiError(
        str(payload.get("message") or payload.get("description") or f"HTTP {status}"),
        code=str(code) if code else str(status),
        status=status,
    )


def _log_summary(status: StatusTracker, duration: float) -> None:
    """
    Log batch summary and statistics.

    Args:
        status: Status tracker with metrics
        duration: Batch duration in seconds
    """
    logger.info(
        f"Batch complete: {status.num_tasks_succeeded:,} / "
        f"{status.num_tasks_started:,} requests succeeded "
        f"in {duration:.1f}s (peak concurrency {status.max_in_progress})"
    )
    if status.num_timeouts > 0:
        logger.warning(
            f"{status.num_timeouts:,} / {status.num_tasks_started:,} requests timed out"
        )
    if status.num_api_errors > 0:
        logger.warning(
            f"{status.num_api_errors:,} / {status.num_tasks_started:,} requests failed"
        )


class BatchExecutor:
    """
    Sends operations to the API and collects raw outcomes.

    Attributes:
        config (ClientConfig): Base URL, timeout and concurrency limit
        credentials (Credentials): Bearer token for every request
        transport (BaseTransport): Performs the actual HTTP call

    Example:
        >>> executor = BatchExecutor(ClientConfig(), Credentials("token"))
        >>> outcomes = await executor.execute(
        ...     [Operation(OperationKind.CLICKS_SUMMARY, "bit.ly/abc")]
        ... )
    """

    def __init__(
        self,
        config: ClientConfig,
        credentials: Credentials,
        transport: BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.credentials = credentials
        self.transport = transport or HttpTransport()
        self._session: ClientSession | None = None
        self._task_ids = task_id_generator()
        self.last_status: StatusTracker | None = None

    def _new_session(self) -> ClientSession:
        return ClientSession(timeout=ClientTimeout(total=self.config.timeout))

    async def open(self) -> None:
        """Open a session shared by every following call until close()."""
        if self._session is None or self._session.closed:
            self._session = self._new_session()

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[ClientSession]:
        if self._session is not None and not self._session.closed:
            yield self._session
            return
        async with self._new_session() as session:
            yield session

    def _build(self, operation: Operation) -> RequestDescriptor:
        return build_request(operation, self.credentials, self.config.base_url)

    async def _send(
        self,
        session: ClientSession,
        operation: Operation,
        request: RequestDescriptor,
    ) -> RawOutcome:
        """
        Send one request and wrap the result, never raising.

        Args:
            session (ClientSession): Aiohttp client session
            operation (Operation): Operation the outcome answers
            request (RequestDescriptor): The built request

        Returns:
            RawOutcome: Status and body, or the scoped error
        """
        task_id = next(self._task_ids)
        try:
            status, body = await self.transport.send(session, request)
        except (asyncio.TimeoutError, TimeoutError):
            logger.warning(
                f"Task {task_id}: {self.transport.name} {request.method} {request.path} timed out"
            )
            return RawOutcome(operation=operation, error=BitlyTimeout())
        except Exception as e:
            logger.warning(
                f"Task {task_id}: {self.transport.name} error for {request.method} {request.path}: "
                f"{type(e).__name__}: {e}"
            )
            return RawOutcome(operation=operation, error=ApiError(f"{type(e).__name__}: {e}"))

        if not is_success_status(status):
            error = _api_error(status, body)
            logger.debug(f"Task {task_id}: API error {status}: {error}")
            return RawOutcome(operation=operation, status=status, body=body, error=error)

        logger.debug(
            f"Task {task_id}: {self.transport.name} completed with status {status}"
        )
        return RawOutcome(operation=operation, status=status, body=body)

    async def execute_one(self, operation: Operation) -> RawOutcome:
        """
        Send a single operation directly, without the worker pool.

        Raises:
            InvalidOperation: If the operation cannot be turned into a request
        """
        request = self._build(operation)
        async with self._session_scope() as session:
            return await self._send(session, operation, request)

    async def execute(self, operations: Sequence[Operation]) -> list[RawOutcome]:
        """
        Send a batch of operations concurrently.

        At most config.max_concurrency requests are in flight; the rest wait
        for a free slot. The call returns once every request has completed
        or timed out.

        Args:
            operations (Sequence[Operation]): Operations to send

        Returns:
            list[RawOutcome]: outcome[i] answers operations[i]

        Raises:
            InvalidOperation: If any operation is invalid; nothing is sent
        """
        requests = [self._build(operation) for operation in operations]
        if not requests:
            return []

        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        status = StatusTracker()
        start_time = time.time()
        pbar: Any = tqdm(
            total=len(requests),
            desc="Completed requests",
            unit="req",
            disable=not self.config.show_progress,
        )

        async def run(operation: Operation, request: RequestDescriptor) -> RawOutcome:
            async with semaphore:
                status.request_started()
                outcome = await self._send(session, operation, request)
                status.request_finished(outcome)
            pbar.update(1)
            return outcome

        try:
            async with self._session_scope() as session:
                outcomes = await asyncio.gather(
                    *(run(op, req) for op, req in zip(operations, requests))
                )
        finally:
            pbar.close()

        _log_summary(status, time.time() - start_time)
        self.last_status = status
        return list(outcomes)
