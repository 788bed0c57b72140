"""Reconciliation of locally tracked uploads with the backend listing."""
from __future__ import annotations

from typing import Iterable, List

from ..types import FileStatus, UploadedFile

IN_FLIGHT = frozenset({FileStatus.pending, FileStatus.processing})


def merge_file_listing(
    local: Iterable[UploadedFile], remote: Iterable[UploadedFile], wallet_id: int
) -> List[UploadedFile]:
    """Keep in-flight local uploads of ``wallet_id`` ahead of the backend listing.

    Local entries the backend already reports (same id) are replaced by the
    backend's copy.
    """

    remote_items = list(remote)
    remote_ids = {item.id for item in remote_items if item.id is not None}
    kept = [
        item
        for item in local
        if item.wallet_id == wallet_id
        and item.status in IN_FLIGHT
        and (item.id is None or item.id not in remote_ids)
    ]
    return kept + remote_items


def in_flight(files: Iterable[UploadedFile], wallet_id: int) -> List[UploadedFile]:
    return [item for item in files if item.wallet_id == wallet_id and item.status in IN_FLIGHT]
