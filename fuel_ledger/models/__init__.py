"""Typed values exchanged with the fuel ledger engine."""

from .allocation import (
    COMPANY_YARD_CHECKPOINTS,
    GOING_CHECKPOINTS,
    RETURN_CHECKPOINTS,
    AllocationPlan,
    Checkpoint,
    FuelLoadingPoint,
    Leg,
    LPOAdvisory,
    MatchType,
    RouteMatch,
    RouteSuggestion,
    TruckBatchMatch,
    empty_checkpoints,
)
from .delivery_order import DeliveryOrder, Direction, DOType
from .fuel_record import (
    ActiveGoingRecord,
    CancelledRecord,
    CompletedRecord,
    FuelRecord,
    FuelRecordStatus,
    LockedFuelRecord,
    PendingConfigReason,
    QueuedFuelRecord,
    ReturningRecord,
    record_to_dict,
)

__all__ = [
    "COMPANY_YARD_CHECKPOINTS",
    "GOING_CHECKPOINTS",
    "RETURN_CHECKPOINTS",
    "AllocationPlan",
    "Checkpoint",
    "FuelLoadingPoint",
    "Leg",
    "LPOAdvisory",
    "MatchType",
    "RouteMatch",
    "RouteSuggestion",
    "TruckBatchMatch",
    "empty_checkpoints",
    "DeliveryOrder",
    "Direction",
    "DOType",
    "ActiveGoingRecord",
    "CancelledRecord",
    "CompletedRecord",
    "FuelRecord",
    "FuelRecordStatus",
    "LockedFuelRecord",
    "PendingConfigReason",
    "QueuedFuelRecord",
    "ReturningRecord",
    "record_to_dict",
]
