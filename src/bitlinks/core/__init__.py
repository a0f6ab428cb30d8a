"""Request building, batch execution and response marshalling."""

from bitlinks.core.builder import build_request, normalize_bitlink_id
from bitlinks.core.engine import BatchExecutor, StatusTracker
from bitlinks.core.marshal import (
    marshal,
    marshal_countries,
    marshal_referrers,
    merge_fields,
    parse_body,
)
from bitlinks.core.models import (
    Batch,
    ClientConfig,
    Credentials,
    Operation,
    OperationKind,
    RawOutcome,
    RequestDescriptor,
    ResultRecord,
    Single,
)

__all__ = [
    # Request building
    "build_request",
    "normalize_bitlink_id",
    # Execution
    "BatchExecutor",
    "StatusTracker",
    # Marshalling
    "parse_body",
    "merge_fields",
    "marshal",
    "marshal_referrers",
    "marshal_countries",
    # Models
    "ClientConfig",
    "Credentials",
    "Operation",
    "OperationKind",
    "Single",
    "Batch",
    "RequestDescriptor",
    "RawOutcome",
    "ResultRecord",
]
