"""
Fuel Record Data Models
=======================

The fuel record is the ledger of one truck's going + return round trip.
Each lifecycle state is its own frozen dataclass so that fields only exist
where they are meaningful (a locked record has no real balance, only a
returning or completed record has a return DO, ...). Transitions build a new
record instead of mutating the old one.

States:
    LOCKED_PENDING_CONFIG -> ACTIVE_GOING -> ACTIVE_RETURNING -> COMPLETE
    QUEUED (truck busy with an earlier journey) -> ACTIVE_GOING | LOCKED_PENDING_CONFIG
    any non-cancelled state -> CANCELLED (frozen)

Author: Fuel Ledger Team
"""

from dataclasses import dataclass, fields
import datetime as dt
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .allocation import Checkpoint, empty_checkpoints


# ══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════════════════════


class FuelRecordStatus(str, Enum):
    """Lifecycle state of a fuel record"""

    LOCKED_PENDING_CONFIG = "LOCKED_PENDING_CONFIG"
    QUEUED = "QUEUED"
    ACTIVE_GOING = "ACTIVE_GOING"
    ACTIVE_RETURNING = "ACTIVE_RETURNING"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"


class PendingConfigReason(str, Enum):
    """Which configuration a locked record is waiting for"""

    MISSING_TOTAL_LITERS = "missing_total_liters"
    MISSING_EXTRA_FUEL = "missing_extra_fuel"
    BOTH = "both"


def pending_reason_for(
    total_liters: Optional[float], extra: Optional[float]
) -> Optional[PendingConfigReason]:
    """Lock reason for a pair of configuration operands, None when both present"""
    if total_liters is None and extra is None:
        return PendingConfigReason.BOTH
    if total_liters is None:
        return PendingConfigReason.MISSING_TOTAL_LITERS
    if extra is None:
        return PendingConfigReason.MISSING_EXTRA_FUEL
    return None


def checkpoint_consumption(checkpoints: Mapping[Checkpoint, float]) -> float:
    """Liters already fulfilled; legacy negative entries count as consumption"""
    return sum(abs(liters or 0.0) for liters in checkpoints.values())


def configured_balance(
    total_liters: float, extra: float, checkpoints: Mapping[Checkpoint, float]
) -> float:
    """balance = (total + extra) - fulfilled checkpoints"""
    return total_liters + extra - checkpoint_consumption(checkpoints)


# ══════════════════════════════════════════════════════════════════════════════
# RECORD VARIANTS
# ══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class _FuelRecordBase:
    # Identity
    truck_no: str
    date: dt.date
    month: str
    going_do: str

    # Route state (from/to follow the current leg, originals never change)
    start: str
    from_location: str
    to_location: str
    original_going_from: str
    original_going_to: str

    # Filled by external LPO fulfillment only
    checkpoints: Mapping[Checkpoint, float]

    @property
    def is_locked(self) -> bool:
        return False

    @property
    def going_destination(self) -> str:
        return self.original_going_to or self.to_location

    @property
    def going_origin(self) -> str:
        return self.original_going_from or self.from_location

    def checkpoint(self, checkpoint: Checkpoint) -> float:
        return self.checkpoints.get(checkpoint, 0.0) or 0.0


@dataclass(frozen=True)
class LockedFuelRecord(_FuelRecordBase):
    """Going record missing route liters and/or truck extra fuel"""

    total_lts: Optional[float]
    extra: Optional[float]
    pending_config_reason: PendingConfigReason

    status = FuelRecordStatus.LOCKED_PENDING_CONFIG
    return_do = None

    @property
    def balance(self) -> float:
        return 0.0

    @property
    def is_locked(self) -> bool:
        return True


@dataclass(frozen=True)
class QueuedFuelRecord(_FuelRecordBase):
    """Going order for a truck that is still on an earlier journey"""

    total_lts: Optional[float]
    extra: Optional[float]
    queue_order: int
    waiting_for: str

    status = FuelRecordStatus.QUEUED
    return_do = None

    @property
    def pending_config_reason(self) -> Optional[PendingConfigReason]:
        return pending_reason_for(self.total_lts, self.extra)

    @property
    def is_locked(self) -> bool:
        return self.pending_config_reason is not None

    @property
    def balance(self) -> float:
        if self.is_locked:
            return 0.0
        return configured_balance(self.total_lts, self.extra, self.checkpoints)


@dataclass(frozen=True)
class ActiveGoingRecord(_FuelRecordBase):
    """Fully configured record, truck on its going leg"""

    total_lts: float
    extra: float
    balance: float

    status = FuelRecordStatus.ACTIVE_GOING
    return_do = None


@dataclass(frozen=True)
class ReturningRecord(_FuelRecordBase):
    """Return order applied, truck on its return leg"""

    total_lts: float
    extra: float
    balance: float
    return_do: str

    status = FuelRecordStatus.ACTIVE_RETURNING


@dataclass(frozen=True)
class CompletedRecord(_FuelRecordBase):
    """Balance settled and terminal return checkpoint filled"""

    total_lts: float
    extra: float
    balance: float
    return_do: Optional[str] = None

    status = FuelRecordStatus.COMPLETE


@dataclass(frozen=True)
class CancelledRecord(_FuelRecordBase):
    """Journey cancelled by an external signal; no further transitions"""

    total_lts: Optional[float]
    extra: Optional[float]
    balance: float
    return_do: Optional[str]
    cancelled_from: FuelRecordStatus
    cancellation_reason: str = ""

    status = FuelRecordStatus.CANCELLED


FuelRecord = Union[
    QueuedFuelRecord,
    LockedFuelRecord,
    ActiveGoingRecord,
    ReturningRecord,
    CompletedRecord,
    CancelledRecord,
]

COMMON_FIELDS = tuple(f.name for f in fields(_FuelRecordBase))


def common_fields(record: FuelRecord) -> Dict[str, Any]:
    """Identity, route and checkpoint fields shared by every variant"""
    return {name: getattr(record, name) for name in COMMON_FIELDS}


def record_to_dict(record: FuelRecord) -> Dict[str, Any]:
    """
    Flatten a record into the legacy ledger row used by the persistence and
    export layers (camelCase keys, one column per checkpoint).
    """
    pending = getattr(record, "pending_config_reason", None)
    row: Dict[str, Any] = {
        "date": record.date.isoformat(),
        "month": record.month,
        "truckNo": record.truck_no,
        "goingDo": record.going_do,
        "returnDo": record.return_do,
        "start": record.start,
        "from": record.from_location,
        "to": record.to_location,
        "originalGoingFrom": record.original_going_from,
        "originalGoingTo": record.original_going_to,
        "totalLts": record.total_lts,
        "extra": record.extra,
        "balance": record.balance,
        "isLocked": record.is_locked,
        "pendingConfigReason": pending.value if pending else None,
        "status": record.status.value,
        "queueOrder": getattr(record, "queue_order", None),
    }
    if isinstance(record, CancelledRecord):
        row["isCancelled"] = True
        row["cancellationReason"] = record.cancellation_reason

    for checkpoint in Checkpoint:
        row[checkpoint.value] = record.checkpoint(checkpoint)
    return row


__all__ = [
    "FuelRecordStatus",
    "PendingConfigReason",
    "pending_reason_for",
    "checkpoint_consumption",
    "configured_balance",
    "QueuedFuelRecord",
    "LockedFuelRecord",
    "ActiveGoingRecord",
    "ReturningRecord",
    "CompletedRecord",
    "CancelledRecord",
    "FuelRecord",
    "common_fields",
    "record_to_dict",
    "empty_checkpoints",
]
