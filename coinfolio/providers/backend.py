"""Async client for the portfolio backend REST API."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .. import utils
from ..config import DEFAULT_API_BASE_URL
from ..ingestion import normalize
from ..types import (
    Brokerage,
    CreateWalletRequest,
    FileStatus,
    Operation,
    ProcessFileResult,
    UpdateWalletRequest,
    UploadedFile,
    Wallet,
    parse_file_status,
)

LOGGER = logging.getLogger(__name__)

STATUS_MESSAGES: dict[int, str] = {
    0: "Connection error. Check your network and try again.",
    403: "You do not have permission to perform this action.",
    404: "Resource not found. It may already have been deleted.",
    409: "The wallet cannot be deleted because it has associated operations.",
    500: "Internal server error. Try again later.",
}
GENERIC_MESSAGE = "Request to the backend failed. Try again."


def error_message(status_code: Optional[int]) -> str:
    if status_code is None:
        return GENERIC_MESSAGE
    return STATUS_MESSAGES.get(status_code, GENERIC_MESSAGE)


class BackendError(RuntimeError):
    """Raised when the backend cannot fulfil a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


class BackendClient:
    """Thin wrapper around ``httpx.AsyncClient`` for the backend routes.

    Use as an async context manager::

        async with BackendClient(base_url) as client:
            wallets = await client.list_wallets()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "BackendClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"accept": "application/json"},
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _perform_request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("BackendClient must be used as an async context manager")
        LOGGER.debug("%s %s", method, utils.redact_credentials(f"{self.base_url}{path}"))
        response = await self._client.request(method, path, **kwargs)
        response.raise_for_status()
        return response

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._perform_request(method, path, **kwargs)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            LOGGER.warning("Backend answered %s for %s %s", status, method, path)
            raise BackendError(error_message(status), status_code=status) from exc
        except httpx.TransportError as exc:
            LOGGER.warning("Backend unreachable for %s %s: %s", method, path, exc)
            raise BackendError(error_message(0), status_code=0) from exc

    async def _json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._request(method, path, **kwargs)
        if not response.content:
            return None
        return response.json()

    # wallets ------------------------------------------------------------
    async def list_wallets(self) -> list[Wallet]:
        payload = await self._json("GET", "/carteiras") or []
        return [normalize.wallet_from_payload(item) for item in payload]

    async def create_wallet(self, request: CreateWalletRequest) -> Wallet:
        body = {"nome": request.name, "usuarioId": request.user_id, "corretoraId": request.brokerage_id}
        payload = await self._json("POST", "/carteiras", json=body)
        return normalize.wallet_from_payload(payload)

    async def update_wallet(self, wallet_id: int, request: UpdateWalletRequest) -> Wallet:
        body: dict[str, Any] = {}
        if request.name is not None:
            body["nome"] = request.name
        if request.active is not None:
            body["ativa"] = request.active
        payload = await self._json("PUT", f"/carteiras/{wallet_id}", json=body)
        return normalize.wallet_from_payload(payload)

    async def delete_wallet(self, wallet_id: int) -> None:
        await self._request("DELETE", f"/carteiras/{wallet_id}")

    async def list_brokerages(self) -> list[Brokerage]:
        payload = await self._json("GET", "/corretoras") or []
        return [normalize.brokerage_from_payload(item) for item in payload]

    # operations ---------------------------------------------------------
    async def fetch_operations_raw(self, wallet_id: int) -> list[dict[str, Any]]:
        payload = await self._json("GET", f"/carteiras/{wallet_id}/operacoes")
        if not isinstance(payload, list):
            raise BackendError(f"Unexpected operations payload for wallet {wallet_id}")
        return payload

    async def list_operations(self, wallet_id: int) -> list[Operation]:
        raw_items = await self.fetch_operations_raw(wallet_id)
        return normalize.normalize_operations(raw_items, wallet_id=wallet_id)

    # files --------------------------------------------------------------
    async def list_files(self, wallet_id: int) -> list[UploadedFile]:
        payload = await self._json("GET", f"/carteiras/{wallet_id}/arquivos") or []
        return [normalize.file_from_payload(item, wallet_id=wallet_id) for item in payload]

    async def upload_file(self, wallet_id: int, path: Path, *, note: Optional[str] = None) -> UploadedFile:
        data = {"observacoes": note} if note else None
        files = {"file": (path.name, path.read_bytes(), "text/csv")}
        payload = await self._json("POST", f"/carteiras/{wallet_id}/arquivos", files=files, data=data)
        uploaded = normalize.file_from_payload(payload, wallet_id=wallet_id)
        LOGGER.info("Uploaded %s to wallet %s as file %s", path.name, wallet_id, uploaded.id)
        return uploaded

    async def process_file(self, wallet_id: int, file_id: int) -> ProcessFileResult:
        payload = await self._json("POST", f"/carteiras/{wallet_id}/arquivos/{file_id}/processar")
        if not isinstance(payload, dict):
            return ProcessFileResult(success=True)
        return normalize.process_result_from_payload(payload)

    async def file_status(self, wallet_id: int, file_id: int) -> FileStatus:
        payload = await self._json("GET", f"/carteiras/{wallet_id}/arquivos/{file_id}/status")
        if not isinstance(payload, dict) or "status" not in payload:
            raise BackendError(f"Unexpected status payload for file {file_id}")
        try:
            return parse_file_status(payload["status"])
        except ValueError as exc:
            raise BackendError(f"Unknown status {payload['status']!r} for file {file_id}") from exc

    async def delete_file(self, wallet_id: int, file_id: int) -> None:
        await self._request("DELETE", f"/carteiras/{wallet_id}/arquivos/{file_id}")

    async def download_file(self, wallet_id: int, file_id: int) -> bytes:
        response = await self._request("GET", f"/carteiras/{wallet_id}/arquivos/{file_id}/download")
        return response.content
