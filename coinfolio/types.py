"""Core pydantic data models used across the project."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class OperationKind(str, Enum):
    """Known operation kinds. Only ``buy`` and ``sell`` move a position."""

    buy = "BUY"
    sell = "SELL"
    transfer_in = "TRANSFER_IN"
    transfer_out = "TRANSFER_OUT"
    staking = "STAKING"
    reward = "REWARD"
    airdrop = "AIRDROP"


class OperationStatus(str, Enum):
    pending = "PENDING"
    confirmed = "CONFIRMED"
    cancelled = "CANCELLED"
    error = "ERROR"


class FileStatus(str, Enum):
    pending = "PENDING"
    processing = "PROCESSING"
    processed = "PROCESSED"
    error = "ERROR"


# Spellings used by the backend for the same values.
KIND_ALIASES: dict[str, str] = {
    "COMPRA": "BUY",
    "VENDA": "SELL",
    "TRANSFERENCIA_ENTRADA": "TRANSFER_IN",
    "TRANSFERENCIA_SAIDA": "TRANSFER_OUT",
}

STATUS_ALIASES: dict[str, str] = {
    "PENDENTE": "PENDING",
    "CONFIRMADA": "CONFIRMED",
    "CANCELADA": "CANCELLED",
    "ERRO": "ERROR",
}

FILE_STATUS_ALIASES: dict[str, str] = {
    "PENDENTE": "PENDING",
    "PROCESSANDO": "PROCESSING",
    "PROCESSADO": "PROCESSED",
    "ERRO": "ERROR",
}


def _canonical(value: Any, aliases: dict[str, str]) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        key = value.strip().upper()
        return aliases.get(key, key)
    return value


class Operation(BaseModel):
    """A single financial event recorded by the backend."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    wallet_id: int
    asset_name: str = ""
    symbol: str
    kind: str
    quantity: float = Field(ge=0)
    unit_price: float = Field(ge=0)
    fee: float = Field(default=0.0, ge=0)
    total_value: float
    date: datetime
    status: OperationStatus = OperationStatus.confirmed
    note: Optional[str] = None
    brokerage_id: Optional[int] = None
    tx_hash: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def _fill_total_value(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if values.get("fee") is None:
            values = {**values, "fee": 0.0}
        if values.get("total_value") is not None:
            return values
        quantity = values.get("quantity")
        unit_price = values.get("unit_price")
        if quantity is None or unit_price is None:
            return values
        total = float(quantity) * float(unit_price) + float(values["fee"])
        return {**values, "total_value": total}

    @field_validator("kind", mode="before")
    @classmethod
    def _canonical_kind(cls, value: Any) -> Any:
        return _canonical(value, KIND_ALIASES)

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> Any:
        if value is None:
            return OperationStatus.confirmed
        return _canonical(value, STATUS_ALIASES)

    @property
    def is_buy(self) -> bool:
        return self.kind == OperationKind.buy.value

    @property
    def is_sell(self) -> bool:
        return self.kind == OperationKind.sell.value


class Brokerage(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    active: bool = True


class Wallet(BaseModel):
    """A named grouping of operations tied to one brokerage."""

    id: Optional[int] = None
    name: str
    brokerage_id: Optional[int] = None
    brokerage: Optional[Brokerage] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None
    active: bool = True


class CreateWalletRequest(BaseModel):
    name: str
    user_id: int
    brokerage_id: int


class UpdateWalletRequest(BaseModel):
    name: Optional[str] = None
    active: Optional[bool] = None


class UploadedFile(BaseModel):
    """Metadata of a statement uploaded to a wallet."""

    id: Optional[int] = None
    name: str
    wallet_id: int
    uploaded_at: Optional[datetime] = None
    size: int = 0
    status: FileStatus = FileStatus.pending
    operation_count: int = 0
    note: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _canonical_status(cls, value: Any) -> Any:
        if value is None:
            return FileStatus.pending
        return _canonical(value, FILE_STATUS_ALIASES)


class ProcessFileResult(BaseModel):
    success: bool
    operation_count: int = 0
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class MonthlyConsolidation(BaseModel):
    """Aggregated operation counts and values for one calendar month."""

    label: str
    year: int
    month: int = Field(ge=1, le=12)
    operation_count: int = 0
    buy_count: int = 0
    sell_count: int = 0
    buy_total: float = 0.0
    sell_total: float = 0.0
    net_balance: float = 0.0
    symbols: list[str] = Field(default_factory=list)
    operations: list[Operation] = Field(default_factory=list)


class PeriodSummary(BaseModel):
    start_date: datetime
    end_date: datetime
    grand_total: float
    grand_net: float
    months: list[MonthlyConsolidation] = Field(default_factory=list)


class PositionSummary(BaseModel):
    """Net holding in one asset symbol."""

    asset_name: str
    symbol: str
    quantity: float
    invested: float
    average_cost: float
    current_price: Optional[float] = None
    current_value: Optional[float] = None
    profit_loss: Optional[float] = None
    profit_pct: Optional[float] = None


class OperationSummary(BaseModel):
    operation_count: int = 0
    buy_count: int = 0
    sell_count: int = 0
    invested_total: float = 0.0
    sold_total: float = 0.0
    result: float = 0.0
    distinct_assets: int = 0


class AssetPerformance(BaseModel):
    symbol: str
    profit_pct: float


class PortfolioSummary(BaseModel):
    invested_total: float = 0.0
    current_total: float = 0.0
    profit_total: float = 0.0
    profit_pct: float = 0.0
    asset_count: int = 0
    best: Optional[AssetPerformance] = None
    worst: Optional[AssetPerformance] = None


class DistributionEntry(BaseModel):
    symbol: str
    asset_name: str
    share_pct: float
    invested: float
    current_value: float


def parse_file_status(value: Any) -> FileStatus:
    return FileStatus(_canonical(value, FILE_STATUS_ALIASES))
