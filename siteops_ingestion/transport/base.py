"""Client-side view of the two server round trips."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from siteops_ingestion.domain.types import ImportResult
from siteops_ingestion.transport.messages import (
    ImportRequest,
    RevalidateRequest,
    RevalidateResponse,
)


@runtime_checkable
class IngestionTransport(Protocol):
    """
    Implementations raise ``TransportError`` for every failure that leaves
    the client without an answer (network, server error, refused request).
    """

    def revalidate(self, request: RevalidateRequest) -> RevalidateResponse:
        ...

    def submit(self, request: ImportRequest) -> ImportResult:
        ...
