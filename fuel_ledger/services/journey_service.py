"""
Journey Service

One-way flow from delivery orders to fuel records:

    DeliveryOrder -> resolvers -> lifecycle -> calculator -> LPO advisory

- open_journey:   IMPORT order  -> new record + going plan + LPO proposals
                                   (queued behind the truck's current journey)
- attach_return:  EXPORT order  -> open record found and moved to its return
                                   leg + return plan + LPO proposals

The service holds no state besides the configuration snapshot; the caller
persists the returned records.

Author: Fuel Ledger Team
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

import structlog

from ..config import FuelSystemConfig
from ..models.allocation import (
    AllocationPlan,
    FuelLoadingPoint,
    LPOAdvisory,
    RouteMatch,
    TruckBatchMatch,
)
from ..models.delivery_order import DeliveryOrder
from ..models.fuel_record import ActiveGoingRecord, FuelRecord
from ..structured_logging import log_execution
from .allocation_calculator import FuelAllocationCalculator
from .fuel_record_lifecycle import FuelRecordLifecycle, ReturnFuelAdjustment
from .lpo_advisory import LPOAdvisor
from .route_resolver import RouteConfigResolver
from .truck_batch_resolver import TruckBatchResolver

logger = structlog.get_logger()


class AttachmentStatus(str, Enum):
    """Outcome of attaching a return order"""

    LINKED = "LINKED"
    NO_MATCHING_RECORD = "NO_MATCHING_RECORD"


@dataclass(frozen=True)
class JourneyOpening:
    """Everything produced when a going order opens a journey"""

    record: FuelRecord
    plan: Optional[AllocationPlan]
    advisories: List[LPOAdvisory]
    route_match: RouteMatch
    batch_match: TruckBatchMatch


@dataclass(frozen=True)
class ReturnAttachment:
    """Everything produced when a return order is attached"""

    status: AttachmentStatus
    record: Optional[FuelRecord] = None
    plan: Optional[AllocationPlan] = None
    advisories: List[LPOAdvisory] = field(default_factory=list)
    adjustment: Optional[ReturnFuelAdjustment] = None

    @property
    def linked(self) -> bool:
        return self.status is AttachmentStatus.LINKED


class JourneyService:
    """Orchestrates the engine for one configuration snapshot"""

    def __init__(
        self,
        config: FuelSystemConfig,
        route_resolver: Optional[RouteConfigResolver] = None,
        batch_resolver: Optional[TruckBatchResolver] = None,
        calculator: Optional[FuelAllocationCalculator] = None,
        lifecycle: Optional[FuelRecordLifecycle] = None,
        lpo_advisor: Optional[LPOAdvisor] = None,
    ):
        self.config = config
        self.route_resolver = route_resolver or RouteConfigResolver(config)
        self.batch_resolver = batch_resolver or TruckBatchResolver(config)
        self.calculator = calculator or FuelAllocationCalculator(config, self.route_resolver)
        self.lifecycle = lifecycle or FuelRecordLifecycle(config, self.route_resolver)
        self.lpo_advisor = lpo_advisor or LPOAdvisor(config)

    @log_execution()
    def open_journey(
        self,
        order: DeliveryOrder,
        loading_point: FuelLoadingPoint = FuelLoadingPoint.DAR_YARD,
        records: Iterable[FuelRecord] = (),
    ) -> JourneyOpening:
        """
        Open a fuel record for an IMPORT order.

        An unconfigured route or truck locks the record; a truck still on an
        earlier journey (found in `records`) queues it. Locked and queued
        records get no plan and no advisories until they become active.
        """
        route_match = self.route_resolver.resolve_total_liters(order.destination)
        batch_match = self.batch_resolver.resolve_extra_fuel(
            order.truck_no, destination_override=order.destination
        )
        total_liters = route_match.liters if route_match.matched else None
        extra = batch_match.extra_fuel if batch_match.matched else None

        record = self.lifecycle.create_from_going_order(
            order, order.loading_point, total_liters, extra, existing_records=records
        )
        if not isinstance(record, ActiveGoingRecord):
            return JourneyOpening(
                record=record,
                plan=None,
                advisories=[],
                route_match=route_match,
                batch_match=batch_match,
            )

        plan = self.calculator.calculate_going(record, extra, total_liters, loading_point)
        advisories = self.lpo_advisor.determine_lpos(record, plan, is_return_leg=False)
        return JourneyOpening(
            record=record,
            plan=plan,
            advisories=advisories,
            route_match=route_match,
            batch_match=batch_match,
        )

    @log_execution()
    def attach_return(
        self, order: DeliveryOrder, records: Iterable[FuelRecord]
    ) -> ReturnAttachment:
        """
        Attach an EXPORT order to the truck's open going record.

        No open record is a normal outcome (NO_MATCHING_RECORD) for the
        caller to turn into a notification. Lifecycle errors (locked,
        cancelled, already returned) propagate.
        """
        record = self.lifecycle.find_open_going_record(order.truck_no, records)
        if record is None:
            logger.warning(
                "No open going record for return order",
                truck_no=order.truck_no,
                do_number=order.do_number,
                destination=order.destination,
            )
            return ReturnAttachment(status=AttachmentStatus.NO_MATCHING_RECORD)

        returning, adjustment = self.lifecycle.apply_return_with_adjustment(record, order)
        plan = self.calculator.calculate_return(returning)
        advisories = self.lpo_advisor.determine_lpos(returning, plan, is_return_leg=True)

        return ReturnAttachment(
            status=AttachmentStatus.LINKED,
            record=returning,
            plan=plan,
            advisories=advisories,
            adjustment=adjustment,
        )


__all__ = [
    "AttachmentStatus",
    "JourneyOpening",
    "ReturnAttachment",
    "JourneyService",
]
