"""
Fuel ledger services.

Each service is built from one FuelSystemConfig snapshot.
"""

from .allocation_calculator import FuelAllocationCalculator
from .fuel_record_lifecycle import (
    FuelRecordLifecycle,
    QueueAdvance,
    ReturnFuelAdjustment,
    determine_journey_start,
    extract_month,
)
from .journey_service import (
    AttachmentStatus,
    JourneyOpening,
    JourneyService,
    ReturnAttachment,
)
from .lpo_advisory import LPOAdvisor, determine_lpos
from .matching import KeyMatch, match_key, normalize_key, similarity
from .route_resolver import RouteConfigResolver
from .truck_batch_resolver import TruckBatchResolver, truck_suffix

__all__ = [
    "FuelAllocationCalculator",
    "FuelRecordLifecycle",
    "QueueAdvance",
    "ReturnFuelAdjustment",
    "determine_journey_start",
    "extract_month",
    "AttachmentStatus",
    "JourneyOpening",
    "JourneyService",
    "ReturnAttachment",
    "LPOAdvisor",
    "determine_lpos",
    "KeyMatch",
    "match_key",
    "normalize_key",
    "similarity",
    "RouteConfigResolver",
    "TruckBatchResolver",
    "truck_suffix",
]
