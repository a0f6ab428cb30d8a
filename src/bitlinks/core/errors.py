from __future__ import annotations

"""
Error taxonomy for the Bitly client.

- InvalidOperation: rejected before any network call
- BitlyTimeout: the service did not answer within the configured timeout
- ApiError: non-success HTTP status or transport failure
"""

TIMEOUT_MESSAGE = "Bitly didn't respond in time"
TIMEOUT_CODE = "504"


class BitlyError(Exception):
    """
    Base class for every error raised by bitlinks.

    Attributes:
        message (str): Human-readable error message
        code (Optional[str]): Server or synthetic error code
        status (Optional[int]): HTTP status code, when a response was received
    """

    def __init__(
        self, message: str, code: str | None = None, status: int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status

    def __str__(self) -> str:
        if self.code:
            return f"{self.message} (code={self.code})"
        return self.message


class InvalidOperation(BitlyError, ValueError):
    """Raised for empty or malformed input. The request is never sent."""


class BitlyTimeout(BitlyError, TimeoutError):
    """Raised when a single request exceeds the configured timeout."""

    def __init__(
        self,
        message: str = TIMEOUT_MESSAGE,
        code: str | None = TIMEOUT_CODE,
        status: int | None = None,
    ) -> None:
        super().__init__(message, code=code, status=status)


class ApiError(BitlyError):
    """Raised for a non-success HTTP status or a failed transport call."""
