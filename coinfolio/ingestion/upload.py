"""Statement upload: local validation, upload, processing and polling."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .. import utils
from ..providers.backend import BackendClient, BackendError
from ..types import FileStatus, ProcessFileResult, UploadedFile

LOGGER = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
FINAL_STATUSES = frozenset({FileStatus.processed, FileStatus.error})


class UploadValidationError(ValueError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class ProcessingTimeout(BackendError):
    pass


def validate_csv_upload(path: Path) -> list[str]:
    """Return the problems that prevent ``path`` from being uploaded."""

    errors: list[str] = []
    if not path.name.lower().endswith(".csv"):
        errors.append("File must have a .csv extension")
    size = path.stat().st_size if path.exists() else 0
    if size > MAX_UPLOAD_BYTES:
        errors.append("File too large. Maximum size: 10MB")
    if size == 0:
        errors.append("File is empty")
    return errors


async def upload_statement(
    client: BackendClient, wallet_id: int, path: Path, *, note: Optional[str] = None
) -> UploadedFile:
    errors = validate_csv_upload(path)
    if errors:
        raise UploadValidationError(errors)
    return await client.upload_file(wallet_id, path, note=note)


async def process_statement(client: BackendClient, uploaded: UploadedFile) -> ProcessFileResult:
    if uploaded.id is None:
        raise ValueError("Uploaded file has no id")
    if uploaded.status is not FileStatus.pending:
        raise ValueError(f"File {uploaded.id} is not pending (status {uploaded.status.value})")
    result = await client.process_file(uploaded.wallet_id, uploaded.id)
    for warning in result.warnings:
        LOGGER.warning("File %s: %s", uploaded.id, warning)
    return result


async def wait_for_processing(
    client: BackendClient,
    wallet_id: int,
    file_id: int,
    *,
    interval: float = 2.0,
    timeout: float = 120.0,
) -> FileStatus:
    """Poll the file status until it reaches PROCESSED or ERROR."""

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        status = await client.file_status(wallet_id, file_id)
        LOGGER.debug("File %s status %s", file_id, status.value)
        if status in FINAL_STATUSES:
            return status
        if loop.time() + interval > deadline:
            raise ProcessingTimeout(
                f"File {file_id} still {status.value} after {timeout:g}s", status_code=None
            )
        await asyncio.sleep(interval)


def _uploads_path() -> Path:
    return utils.ensure_cache_dir("uploads") / "uploads.jsonl"


def record_upload(uploaded: UploadedFile) -> None:
    utils.write_jsonl(_uploads_path(), [uploaded.model_dump(mode="json")])


def load_local_uploads(wallet_id: Optional[int] = None) -> list[UploadedFile]:
    """Return the uploads recorded locally, the latest record per file id winning."""

    latest: dict[object, UploadedFile] = {}
    for idx, item in enumerate(utils.read_jsonl(_uploads_path())):
        uploaded = UploadedFile(**item)
        key = uploaded.id if uploaded.id is not None else f"local-{idx}"
        latest.pop(key, None)
        latest[key] = uploaded
    items = list(reversed(list(latest.values())))
    if wallet_id is None:
        return items
    return [item for item in items if item.wallet_id == wallet_id]
