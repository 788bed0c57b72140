"""Operation kind mapping for position accounting."""
from __future__ import annotations

from enum import Enum

from ..types import Operation, OperationKind


class PositionEffect(str, Enum):
    increase = "increase"
    decrease = "decrease"
    record_only = "record_only"


OPERATION_POSITION_EFFECT: dict[str, PositionEffect] = {
    OperationKind.buy.value: PositionEffect.increase,
    OperationKind.sell.value: PositionEffect.decrease,
    OperationKind.transfer_in.value: PositionEffect.record_only,
    OperationKind.transfer_out.value: PositionEffect.record_only,
    OperationKind.staking.value: PositionEffect.record_only,
    OperationKind.reward.value: PositionEffect.record_only,
    OperationKind.airdrop.value: PositionEffect.record_only,
}


def classify_operation(operation: Operation) -> PositionEffect:
    return OPERATION_POSITION_EFFECT.get(operation.kind, PositionEffect.record_only)
