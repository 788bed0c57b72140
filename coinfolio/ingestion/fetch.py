"""Fetch operation listings and persist them as local snapshots."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .. import utils
from ..providers.backend import BackendClient
from ..types import Operation
from . import normalize

LOGGER = logging.getLogger(__name__)

# Overridable in tests; defaults to ``<CACHE_ROOT>/operations``.
RAW_CACHE_DIR: Optional[Path] = None


def _wallet_cache_path(wallet_id: int) -> Path:
    root = RAW_CACHE_DIR or utils.ensure_cache_dir("operations")
    return root / f"{wallet_id}.jsonl"


async def fetch_wallet(client: BackendClient, wallet_id: int) -> list[dict[str, Any]]:
    """Download the operations of ``wallet_id`` and replace its snapshot."""

    raw_items = await client.fetch_operations_raw(wallet_id)
    utils.write_jsonl(_wallet_cache_path(wallet_id), raw_items, mode="w")
    LOGGER.info("Stored %d operation(s) for wallet %s", len(raw_items), wallet_id)
    return raw_items


async def fetch_many(client: BackendClient, wallet_ids: Iterable[int]) -> dict[int, list[dict[str, Any]]]:
    results: dict[int, list[dict[str, Any]]] = {}

    async def _fetch(wallet_id: int) -> None:
        results[wallet_id] = await fetch_wallet(client, wallet_id)

    await asyncio.gather(*[_fetch(wallet_id) for wallet_id in wallet_ids])
    return results


def load_cached(wallet_id: int) -> list[dict[str, Any]]:
    """Return the cached raw items of a wallet, dropping repeated ids."""

    seen: set[Any] = set()
    items: list[dict[str, Any]] = []
    for item in utils.read_jsonl(_wallet_cache_path(wallet_id)):
        key = item.get("id", item.get("idOperacao")) if isinstance(item, dict) else None
        if key is not None:
            if key in seen:
                continue
            seen.add(key)
        items.append(item)
    return items


def load_operations(wallet_ids: Iterable[int]) -> List[Operation]:
    operations: List[Operation] = []
    for wallet_id in wallet_ids:
        raw_items = load_cached(wallet_id)
        if not raw_items:
            LOGGER.warning("No cached operations for wallet %s; run `coinfolio fetch` first", wallet_id)
        operations.extend(normalize.normalize_operations(raw_items, wallet_id=wallet_id))
    return operations
