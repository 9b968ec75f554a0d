"""Wire messages and the transports that carry them."""

from siteops_ingestion.transport.base import IngestionTransport
from siteops_ingestion.transport.http import HttpTransport
from siteops_ingestion.transport.local import LocalTransport
from siteops_ingestion.transport.messages import (
    ImportRequest,
    RawRow,
    RevalidateRequest,
    RevalidateResponse,
    SubmittedRow,
    result_from_payload,
    result_to_payload,
)

__all__ = [
    "HttpTransport",
    "ImportRequest",
    "IngestionTransport",
    "LocalTransport",
    "RawRow",
    "RevalidateRequest",
    "RevalidateResponse",
    "SubmittedRow",
    "result_from_payload",
    "result_to_payload",
]
