"""Normalization of raw backend payloads to model objects."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from .. import utils
from ..types import Brokerage, Operation, ProcessFileResult, UploadedFile, Wallet

LOGGER = logging.getLogger(__name__)

OPERATION_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "idOperacao"),
    "wallet_id": ("wallet_id", "carteiraId", "idCarteira"),
    "asset_name": ("asset_name", "criptomoeda", "nomeAtivo"),
    "symbol": ("symbol", "simbolo"),
    "kind": ("kind", "tipoOperacao", "tipo"),
    "quantity": ("quantity", "quantidade"),
    "unit_price": ("unit_price", "precoUnitario"),
    "total_value": ("total_value", "valorTotal"),
    "fee": ("fee", "taxa"),
    "status": ("status",),
    "note": ("note", "observacoes"),
    "brokerage_id": ("brokerage_id", "corretoraId"),
    "tx_hash": ("tx_hash", "hashTransacao"),
}

DATE_FIELDS = ("date", "dataOperacao", "dataOperacaoEntrada", "dataOperacaoSaida")


def _first(payload: dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _flag(payload: dict[str, Any], keys: Iterable[str], default: bool = True) -> bool:
    value = _first(payload, keys)
    return default if value is None else bool(value)


def _nested_id(payload: dict[str, Any], key: str, id_key: str) -> Optional[int]:
    nested = payload.get(key)
    if isinstance(nested, dict) and nested.get(id_key) is not None:
        return int(nested[id_key])
    return None


def operation_from_payload(payload: dict[str, Any], *, wallet_id: Optional[int] = None) -> Operation:
    values = {field: _first(payload, keys) for field, keys in OPERATION_FIELDS.items()}
    if values["wallet_id"] is None:
        values["wallet_id"] = _nested_id(payload, "carteira", "idCarteira") or wallet_id
    if values["brokerage_id"] is None:
        values["brokerage_id"] = _nested_id(payload, "corretora", "idCorretora")
    values["date"] = utils.parse_timestamp(_first(payload, DATE_FIELDS))
    values["created_at"] = utils.parse_timestamp(_first(payload, ("created_at", "dataCriacao")))
    values["updated_at"] = utils.parse_timestamp(_first(payload, ("updated_at", "dataAtualizacao")))
    return Operation(**{key: value for key, value in values.items() if value is not None})


def _unwrap(items: Iterable[Any]) -> Iterable[dict[str, Any]]:
    for item in items:
        if not isinstance(item, dict):
            continue
        nested = item.get("operacoes") or item.get("operations")
        if isinstance(nested, list):
            yield from (entry for entry in nested if isinstance(entry, dict))
        elif isinstance(item.get("operacao"), dict):
            yield item["operacao"]
        else:
            yield item


def normalize_operations(raw_items: Iterable[Any], *, wallet_id: Optional[int] = None) -> List[Operation]:
    """Map an operations listing to ``Operation`` objects.

    The listing may hold flat operations or wrapper objects carrying an
    ``operacoes`` list. Items that do not validate are skipped with a warning.
    """

    operations: List[Operation] = []
    for payload in _unwrap(raw_items):
        try:
            operations.append(operation_from_payload(payload, wallet_id=wallet_id))
        except (ValidationError, ValueError, TypeError) as exc:
            LOGGER.warning("Skipping operation payload %s: %s", payload.get("id"), exc)
    return operations


def brokerage_from_payload(payload: dict[str, Any]) -> Brokerage:
    return Brokerage(
        id=int(_first(payload, ("id", "idCorretora"))),
        name=_first(payload, ("name", "nome")) or "",
        code=_first(payload, ("code", "codigo")),
        active=_flag(payload, ("active", "ativa")),
    )


def wallet_from_payload(payload: dict[str, Any]) -> Wallet:
    brokerage = None
    raw_brokerage = payload.get("corretora") or payload.get("brokerage")
    if isinstance(raw_brokerage, dict):
        brokerage = brokerage_from_payload(raw_brokerage)
    if "excluido" in payload:
        active = not bool(payload["excluido"])
    else:
        active = _flag(payload, ("active", "ativa"))
    brokerage_id = _first(payload, ("brokerage_id", "corretoraId"))
    if brokerage_id is None and brokerage is not None:
        brokerage_id = brokerage.id
    return Wallet(
        id=_first(payload, ("id", "idCarteira")),
        name=_first(payload, ("name", "nome")) or "",
        brokerage_id=brokerage_id,
        brokerage=brokerage,
        user_id=_first(payload, ("user_id", "usuarioId")),
        created_at=utils.parse_timestamp(_first(payload, ("created_at", "dataCriacao"))),
        active=active,
    )


def file_from_payload(payload: dict[str, Any], *, wallet_id: Optional[int] = None) -> UploadedFile:
    owner = _nested_id(payload, "carteira", "idCarteira")
    return UploadedFile(
        id=_first(payload, ("id", "idArquivo")),
        name=_first(payload, ("name", "nome")) or "",
        wallet_id=owner or _first(payload, ("wallet_id", "carteiraId")) or wallet_id,
        uploaded_at=utils.parse_timestamp(_first(payload, ("uploaded_at", "dataCriacao", "dataUpload"))),
        size=_first(payload, ("size", "tamanhoBytes", "tamanho")) or 0,
        status=payload.get("status"),
        operation_count=_first(payload, ("operation_count", "totalOperacoes")) or 0,
        note=_first(payload, ("note", "observacoes")),
    )


def process_result_from_payload(payload: dict[str, Any]) -> ProcessFileResult:
    return ProcessFileResult(
        success=bool(_first(payload, ("success", "sucesso"))),
        operation_count=_first(payload, ("operation_count", "totalOperacoes")) or 0,
        errors=list(_first(payload, ("errors", "erros")) or []),
        warnings=list(_first(payload, ("warnings", "avisos")) or []),
    )
