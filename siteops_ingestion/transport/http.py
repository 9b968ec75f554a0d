"""
HTTP transport: JSON over httpx to the mass-upload endpoints.

    POST {base_url}/mass-upload/validate   RevalidateRequest  -> RevalidateResponse
    POST {base_url}/mass-upload/import     ImportRequest      -> ImportResult

Every failure (connection, timeout, non-2xx, undecodable body, or a
validate answer with ``success: false``) raises TransportError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from siteops_ingestion.domain.types import ImportResult
from siteops_ingestion.transport.messages import (
    ImportRequest,
    RevalidateRequest,
    RevalidateResponse,
    result_from_payload,
)
from siteops_kernel.exceptions import TransportError
from siteops_kernel.logging_config import get_logger

if TYPE_CHECKING:
    from siteops_ingestion.settings import IngestionSettings

logger = get_logger("ingestion.http_transport")

VALIDATE_PATH = "/mass-upload/validate"
IMPORT_PATH = "/mass-upload/import"


def _error_reason(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"


class HttpTransport:
    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: IngestionSettings, *, client: httpx.Client | None = None
    ) -> HttpTransport:
        return cls(settings.api_base_url, client=client, timeout=settings.http_timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _post(self, operation: str, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = self._client.post(url, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("request_failed", extra={"operation": operation, "reason": str(exc)})
            raise TransportError(operation, str(exc)) from exc

        if response.is_error:
            reason = _error_reason(response)
            logger.warning(
                "request_rejected",
                extra={"operation": operation, "status_code": response.status_code, "reason": reason},
            )
            raise TransportError(operation, reason)

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportError(operation, "response is not valid JSON") from exc
        if not isinstance(data, dict):
            raise TransportError(operation, "response is not a JSON object")
        return data

    def revalidate(self, request: RevalidateRequest) -> RevalidateResponse:
        data = self._post("validate", VALIDATE_PATH, request.to_payload())
        try:
            response = RevalidateResponse.from_payload(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise TransportError("validate", f"malformed response: {exc}") from exc
        if not response.success:
            raise TransportError("validate", response.error or "server reported failure")
        return response

    def submit(self, request: ImportRequest) -> ImportResult:
        data = self._post("import", IMPORT_PATH, request.to_payload())
        try:
            return result_from_payload(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise TransportError("import", f"malformed response: {exc}") from exc
