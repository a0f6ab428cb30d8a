"""HTTP transport implementations."""

from bitlinks.transport.base import BaseTransport
from bitlinks.transport.http import HttpTransport

__all__ = [
    "BaseTransport",
    "HttpTransport",
]
